from django.db import IntegrityError
from django.test import SimpleTestCase
from rest_framework.permissions import AllowAny
from rest_framework.test import APIRequestFactory
from rest_framework.views import APIView

from core.exceptions import UpstreamApiError, UpstreamAuthError, ValidationError


def _view(exc):
    class Failing(APIView):
        authentication_classes = []
        permission_classes = [AllowAny]

        def get(self, request):
            raise exc

    return Failing.as_view()


class ExceptionHandlerTest(SimpleTestCase):
    def setUp(self):
        self.request = APIRequestFactory().get('/')

    def test_validation_error(self):
        response = _view(ValidationError("Campaign ID is required"))(self.request)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data, {'success': False, 'error': 'Campaign ID is required'})

    def test_upstream_error_carries_status(self):
        response = _view(UpstreamApiError("Rate limited", upstream_status=429))(self.request)
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.data, {'success': False, 'error': 'Rate limited', 'status': 429})

    def test_upstream_auth_error(self):
        response = _view(UpstreamAuthError("Token expired"))(self.request)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'Token expired')

    def test_integrity_error_is_a_conflict(self):
        response = _view(IntegrityError("UNIQUE constraint failed"))(self.request)
        self.assertEqual(response.status_code, 409)
        self.assertFalse(response.data['success'])

    def test_unexpected_error_is_logged(self):
        with self.assertLogs('core.exceptions', level='ERROR'):
            response = _view(RuntimeError("kaboom"))(self.request)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, {'success': False, 'error': 'kaboom'})
