import json
from http import HTTPStatus

import requests


def fake_response(status_code=200, body=None, text=None):
    """A real ``requests.Response`` carrying a canned body."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = HTTPStatus(status_code).phrase
    response.encoding = 'utf-8'
    if text is not None:
        response._content = text.encode('utf-8')
    else:
        response._content = json.dumps(body if body is not None else {}).encode('utf-8')
    return response
