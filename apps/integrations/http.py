import logging
import threading
import time

import requests
from django.conf import settings
from requests.adapters import HTTPAdapter

logger = logging.getLogger(__name__)
_thread_local = threading.local()

SLOW_REQUEST_MS = 800


def _build_session():
    s = requests.Session()
    pool = settings.HTTP_POOL_MAXSIZE
    # one request per call: upstream failures surface to the caller as-is
    adapter = HTTPAdapter(pool_connections=pool, pool_maxsize=pool, max_retries=0)
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    s.headers.update({"User-Agent": "campaign-dashboard/1.0"})
    return s


def _session():
    s = getattr(_thread_local, "session", None)
    if s is None:
        s = _build_session()
        _thread_local.session = s
    return s


def default_timeout():
    return (settings.HTTP_CONNECT_TIMEOUT, settings.HTTP_READ_TIMEOUT)


def request(method, url, **kwargs):
    timeout = kwargs.pop("timeout", None) or default_timeout()
    label = kwargs.pop("measure", None)  # short name for the slow-call log, e.g. "hyros/leads"
    t0 = time.time()
    resp = _session().request(method, url, timeout=timeout, **kwargs)
    dt = (time.time() - t0) * 1000.0
    if dt > SLOW_REQUEST_MS:
        logger.info(f"http {method} {label or url} took {dt:.0f}ms status={resp.status_code}")
    return resp
