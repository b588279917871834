from unittest.mock import patch

import requests
from django.test import SimpleTestCase, override_settings

from apps.integrations.platforms import Platform, get_client
from apps.integrations.platforms.google_ads import GoogleAdsClient, clean_customer_id
from apps.integrations.platforms.hyros import HyrosClient
from apps.integrations.platforms.leadprosper import LeadProsperClient
from core.exceptions import UpstreamApiError, UpstreamAuthError, ValidationError
from .utils import fake_response

HTTP_REQUEST = 'apps.integrations.http.request'
LP_KEY = {'apiKey': 'lp-test-key-1234567890'}


class RegistryTest(SimpleTestCase):
    def test_known_platforms(self):
        self.assertIsInstance(get_client('google'), GoogleAdsClient)
        self.assertIsInstance(get_client(Platform.HYROS), HyrosClient)
        self.assertIsInstance(get_client('leadprosper'), LeadProsperClient)

    def test_linkedin_has_no_client(self):
        with self.assertRaises(ValidationError) as ctx:
            get_client('linkedin')
        self.assertIn('Unsupported platform', str(ctx.exception))

    def test_unknown_platform(self):
        with self.assertRaises(ValidationError):
            get_client('myspace')


class VerifyTest(SimpleTestCase):
    @patch(HTTP_REQUEST)
    def test_hyros_403_is_returned_not_raised(self, mock_request):
        """Test a rejected key comes back as an invalid result with the upstream text"""
        mock_request.return_value = fake_response(403, {'message': ['API key is invalid', 'Access denied']})
        result = HyrosClient().verify({'apiKey': 'bad-key'})
        self.assertFalse(result.is_valid)
        self.assertEqual(result.error, 'API key is invalid, Access denied')
        self.assertEqual(result.to_dict(), {'isValid': False, 'error': 'API key is invalid, Access denied'})

    @patch(HTTP_REQUEST)
    def test_hyros_generic_fallback(self, mock_request):
        mock_request.return_value = fake_response(403, text='<html>denied</html>')
        result = HyrosClient().verify({'apiKey': 'bad-key'})
        self.assertEqual(result.error, 'Invalid API key')

    @patch(HTTP_REQUEST)
    def test_hyros_valid(self, mock_request):
        mock_request.return_value = fake_response(200, {'result': [], 'nextPageId': None})
        result = HyrosClient().verify({'apiKey': 'good-key'})
        self.assertTrue(result.is_valid)
        method, url = mock_request.call_args[0]
        self.assertEqual(method, 'GET')
        self.assertTrue(url.endswith('/leads'))
        self.assertEqual(mock_request.call_args[1]['params'], {'pageSize': 1})
        self.assertEqual(mock_request.call_args[1]['headers']['API-Key'], 'good-key')

    @patch(HTTP_REQUEST)
    def test_transport_failure_is_returned(self, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError('connection refused')
        result = HyrosClient().verify({'apiKey': 'good-key'})
        self.assertFalse(result.is_valid)
        self.assertIn('connection refused', result.error)

    @patch(HTTP_REQUEST)
    def test_any_non_200_is_invalid(self, mock_request):
        mock_request.return_value = fake_response(201, {})
        self.assertFalse(HyrosClient().verify({'apiKey': 'good-key'}).is_valid)

    @patch(HTTP_REQUEST)
    def test_leadprosper_counts_campaigns(self, mock_request):
        mock_request.return_value = fake_response(200, [{'id': 1, 'name': 'A'}, {'id': 2, 'name': 'B'}])
        result = LeadProsperClient().verify(LP_KEY)
        self.assertEqual(result.to_dict(), {'isValid': True, 'campaignCount': 2})
        self.assertEqual(mock_request.call_args[1]['headers']['Authorization'], f"Bearer {LP_KEY['apiKey']}")

    @patch(HTTP_REQUEST)
    def test_leadprosper_short_key_never_hits_upstream(self, mock_request):
        result = LeadProsperClient().verify({'apiKey': 'short'})
        self.assertEqual(result.error, 'Invalid API key format')
        mock_request.assert_not_called()

    @patch(HTTP_REQUEST)
    def test_leadprosper_status_text_fallback(self, mock_request):
        mock_request.return_value = fake_response(403, {})
        result = LeadProsperClient().verify(LP_KEY)
        self.assertEqual(result.error, 'LeadProsper API error: 403 Forbidden')

    @patch(HTTP_REQUEST)
    def test_google_error_message(self, mock_request):
        mock_request.return_value = fake_response(
            401, {'error': {'code': 401, 'message': 'Request had invalid authentication credentials.'}}
        )
        result = GoogleAdsClient().verify({'accessToken': 'expired'})
        self.assertFalse(result.is_valid)
        self.assertEqual(result.error, 'Request had invalid authentication credentials.')
        self.assertEqual(mock_request.call_args[1]['headers']['developer-token'], 'test-developer-token')


class FetchStatsTest(SimpleTestCase):
    @patch(HTTP_REQUEST)
    def test_hyros_cursor_is_passed_through(self, mock_request):
        mock_request.return_value = fake_response(200, {'result': [{'id': 'l1'}, {'id': 'l2'}], 'nextPageId': 'p-2'})
        page = HyrosClient().fetch_stats({'apiKey': 'k'}, '2025-01-01', '2025-01-31', page_size=2, page_id='p-1')
        self.assertEqual(page.total, 2)
        self.assertEqual(page.next_page_id, 'p-2')
        self.assertEqual(mock_request.call_args[1]['params'], {
            'fromDate': '2025-01-01', 'toDate': '2025-01-31', 'pageSize': 2, 'pageId': 'p-1',
        })

    @patch(HTTP_REQUEST)
    def test_hyros_last_page_has_no_cursor(self, mock_request):
        mock_request.return_value = fake_response(200, {'result': []})
        page = HyrosClient().fetch_stats({'apiKey': 'k'}, '2025-01-01', '2025-01-31')
        self.assertIsNone(page.next_page_id)
        self.assertEqual(page.records, [])

    @patch(HTTP_REQUEST)
    def test_upstream_auth_failure_raises(self, mock_request):
        mock_request.return_value = fake_response(401, {'message': ['Unauthorized']})
        with self.assertRaises(UpstreamAuthError) as ctx:
            HyrosClient().fetch_stats({'apiKey': 'k'}, '2025-01-01', '2025-01-31')
        self.assertEqual(ctx.exception.upstream_status, 401)

    @patch(HTTP_REQUEST)
    def test_upstream_server_error_raises(self, mock_request):
        mock_request.return_value = fake_response(500, {'message': 'boom'})
        with self.assertRaises(UpstreamApiError) as ctx:
            LeadProsperClient().fetch_stats(LP_KEY, '2025-01-01', '2025-01-01')
        self.assertNotIsInstance(ctx.exception, UpstreamAuthError)
        self.assertEqual(str(ctx.exception), 'boom')

    def test_missing_credential(self):
        with self.assertRaises(UpstreamAuthError):
            HyrosClient().fetch_stats({}, '2025-01-01', '2025-01-31')

    @override_settings(LEADPROSPER_TIMEZONE='America/Denver')
    @patch(HTTP_REQUEST)
    def test_leadprosper_search_after(self, mock_request):
        mock_request.return_value = fake_response(200, {'leads': [{'id': 'a', 'cost': 12}], 'search_after': 'xyz'})
        page = LeadProsperClient().fetch_stats(LP_KEY, '2025-01-01', '2025-01-01', campaign_id='77', page_id='abc')
        self.assertEqual(page.records, [{'id': 'a', 'cost': 12}])
        self.assertEqual(page.next_page_id, 'xyz')
        self.assertEqual(mock_request.call_args[1]['params'], {
            'start_date': '2025-01-01', 'end_date': '2025-01-01', 'timezone': 'America/Denver',
            'campaign': '77', 'search_after': 'abc',
        })

    @patch(HTTP_REQUEST)
    def test_google_rows_and_page_token(self, mock_request):
        mock_request.return_value = fake_response(200, {
            'results': [{
                'campaign': {'id': '555', 'name': 'Brand'},
                'segments': {'date': '2025-01-02'},
                'metrics': {'impressions': '100', 'clicks': '7', 'costMicros': '12500000', 'conversions': 2.0},
            }],
            'nextPageToken': 'tok-2',
        })
        page = GoogleAdsClient().fetch_stats(
            {'accessToken': 't'}, '2025-01-01', '2025-01-31', campaign_id='555', page_id='tok-1',
            account_id='123-456-7890',
        )
        self.assertEqual(page.next_page_id, 'tok-2')
        self.assertEqual(page.records[0]['ad_spend'], 12.5)
        self.assertEqual(page.records[0]['clicks'], 7)
        method, url = mock_request.call_args[0]
        self.assertEqual(method, 'POST')
        self.assertTrue(url.endswith('/customers/1234567890/googleAds:search'))
        body = mock_request.call_args[1]['json']
        self.assertEqual(body['pageToken'], 'tok-1')
        self.assertIn("BETWEEN '2025-01-01' AND '2025-01-31'", body['query'])
        self.assertIn('campaign.id = 555', body['query'])

    def test_google_rejects_injected_values(self):
        client = GoogleAdsClient()
        with self.assertRaises(ValidationError):
            client.fetch_stats({'accessToken': 't'}, "2025-01-01' OR '1'='1", '2025-01-31', account_id='1')
        with self.assertRaises(ValidationError):
            client.fetch_stats({'accessToken': 't'}, '2025-01-01', '2025-01-31', campaign_id='1 OR 1=1',
                               account_id='1')
        with self.assertRaises(ValidationError):
            clean_customer_id('abc-def')


class ListCampaignsTest(SimpleTestCase):
    @patch(HTTP_REQUEST)
    def test_leadprosper_wrapped_payload(self, mock_request):
        mock_request.return_value = fake_response(200, {'data': [{'id': 9, 'name': 'Roundup'}, {'id': 10}]})
        campaigns = LeadProsperClient().list_campaigns(LP_KEY)
        self.assertEqual([(c.id, c.name, c.status) for c in campaigns],
                         [('9', 'Roundup', 'active'), ('10', 'Campaign 10', 'active')])

    @patch(HTTP_REQUEST)
    def test_google_statuses_are_lowercased(self, mock_request):
        mock_request.return_value = fake_response(200, {'results': [
            {'campaign': {'id': '1', 'name': 'On', 'status': 'ENABLED'}},
            {'campaign': {'id': '2', 'name': 'Off', 'status': 'PAUSED'}},
        ]})
        campaigns = GoogleAdsClient().list_campaigns({'accessToken': 't'}, account_id='1234567890')
        self.assertEqual([c.status for c in campaigns], ['enabled', 'paused'])
        self.assertEqual(campaigns[0].to_dict()['platform'], 'google')

    @patch(HTTP_REQUEST)
    def test_google_login_customer_id_does_not_leak_between_calls(self, mock_request):
        mock_request.return_value = fake_response(200, {'results': []})
        client = GoogleAdsClient()

        client.list_campaigns({'accessToken': 't', 'loginCustomerId': '999-000-1111'}, account_id='1234567890')
        self.assertEqual(mock_request.call_args[1]['headers']['login-customer-id'], '9990001111')

        client.list_campaigns({'accessToken': 't'}, account_id='1234567890')
        self.assertNotIn('login-customer-id', mock_request.call_args[1]['headers'])
        self.assertNotIn('login-customer-id', client.headers('t'))

    def test_hyros_cannot_list(self):
        self.assertFalse(HyrosClient.supports_campaign_listing)
        with self.assertRaises(ValidationError):
            HyrosClient().list_campaigns({'apiKey': 'k'})
