from unittest.mock import patch
from urllib.parse import urlparse

from django.test import TestCase, override_settings

from apps.analytics.models import DailyMetric
from apps.authentication.context import AccountContext
from apps.campaigns.models import Campaign
from apps.integrations.models import AccountConnection
from apps.integrations.tests.utils import fake_response
from apps.mappings.models import CampaignMapping
from apps.mappings.services import MappingService
from tasks.sync import (
    hyros_daily_rows,
    refresh_all_campaign_snapshots,
    sync_google_ads_daily_stats,
    sync_hyros_daily_stats,
    sync_leadprosper_daily_stats,
    upsert_daily_metrics,
)

HTTP_REQUEST = 'apps.integrations.http.request'


def leadprosper_api(campaigns, leads_by_campaign, failing=()):
    """Side effect serving /campaigns and paged /leads like LeadProsper does."""
    def respond(method, url, params=None, **kwargs):
        path = urlparse(url).path
        if path.endswith('/campaigns'):
            return fake_response(200, campaigns)
        campaign_id = params['campaign']
        if campaign_id in failing:
            return fake_response(500, {'message': 'campaign exploded'})
        pages = leads_by_campaign.get(campaign_id, [[]])
        index = int(params.get('search_after') or 0)
        body = {'leads': pages[index]}
        if index + 1 < len(pages):
            body['search_after'] = str(index + 1)
        return fake_response(200, body)
    return respond


def paged_api(pages, cursor_param, cursor_key, records_key):
    """Side effect serving a list of pages behind an opaque cursor."""
    def respond(method, url, params=None, json=None, **kwargs):
        sent = (params or {}).get(cursor_param) or (json or {}).get(cursor_param)
        index = int(sent) if sent else 0
        body = {records_key: pages[index]}
        if index + 1 < len(pages):
            body[cursor_key] = str(index + 1)
        return fake_response(200, body)
    return respond


class LeadProsperSyncTest(TestCase):
    def setUp(self):
        AccountConnection.objects.create(
            tenant_id=1, platform='leadprosper', account_id='lp', credentials={'apiKey': 'lp-test-key-123456'}
        )
        self.campaign = Campaign.objects.create(tenant_id=1, name='Roundup')
        CampaignMapping.objects.create(campaign=self.campaign, platform='leadprosper', account_id='lp',
                                       external_campaign_id='10')

    @patch(HTTP_REQUEST)
    def test_pages_are_folded_into_one_row(self, mock_request):
        mock_request.side_effect = leadprosper_api(
            [{'id': 10, 'name': 'Roundup LP'}, {'id': 11, 'name': 'Camp Lejeune'}],
            {
                '10': [[{'cost': 25, 'revenue': 60}, {'cost': 25, 'revenue': 0}], [{'cost': 30.5, 'revenue': 80}]],
                '11': [[{'cost': 10, 'revenue': 15}]],
            },
        )
        summary = sync_leadprosper_daily_stats(date='2025-01-05')

        self.assertEqual(summary['campaigns_processed'], 2)
        self.assertEqual(summary['rows_written'], 2)
        self.assertEqual(summary['unmapped_campaigns'], [{'id': '11', 'name': 'Camp Lejeune'}])
        row = DailyMetric.objects.get(external_campaign_id='10')
        self.assertEqual(row.leads, 3)
        self.assertEqual(float(row.cost), 80.5)
        self.assertEqual(float(row.ad_spend), 80.5)
        self.assertEqual(float(row.revenue), 140.0)
        self.assertEqual(row.date.isoformat(), '2025-01-05')
        self.assertEqual(row.platform, 'leadprosper')

    @patch(HTTP_REQUEST)
    def test_rerun_overwrites_the_day(self, mock_request):
        mock_request.side_effect = leadprosper_api([{'id': 10, 'name': 'Roundup LP'}], {'10': [[{'cost': 1}]]})
        sync_leadprosper_daily_stats(date='2025-01-05')
        mock_request.side_effect = leadprosper_api([{'id': 10, 'name': 'Roundup LP'}],
                                                   {'10': [[{'cost': 1}, {'cost': 2}]]})
        sync_leadprosper_daily_stats(date='2025-01-05')
        self.assertEqual(DailyMetric.objects.get().leads, 2)

    @patch(HTTP_REQUEST)
    def test_dry_run_writes_nothing(self, mock_request):
        mock_request.side_effect = leadprosper_api([{'id': 10, 'name': 'Roundup LP'}], {'10': [[{'cost': 5}]]})
        summary = sync_leadprosper_daily_stats(date='2025-01-05', dry_run=True)
        self.assertFalse(DailyMetric.objects.exists())
        self.assertEqual(summary['rows_written'], 0)
        self.assertEqual(summary['rows'][0]['leads'], 1)

    @patch(HTTP_REQUEST)
    def test_failing_campaign_is_skipped(self, mock_request):
        mock_request.side_effect = leadprosper_api(
            [{'id': 10, 'name': 'Roundup LP'}, {'id': 11, 'name': 'Broken'}],
            {'10': [[{'cost': 5}]]},
            failing={'11'},
        )
        with self.assertLogs('tasks.sync', level='WARNING'):
            summary = sync_leadprosper_daily_stats(date='2025-01-05')
        self.assertEqual(summary['campaigns_processed'], 1)
        self.assertEqual(summary['failed_campaigns'][0]['campaign'], '11')
        self.assertEqual(DailyMetric.objects.count(), 1)

    @override_settings(LEADPROSPER_TIMEZONE='America/New_York')
    @patch('tasks.sync.yesterday_in_timezone', return_value='2025-03-01')
    @patch(HTTP_REQUEST)
    def test_defaults_to_yesterday(self, mock_request, mock_yesterday):
        mock_request.side_effect = leadprosper_api([], {})
        summary = sync_leadprosper_daily_stats()
        self.assertEqual(summary['date'], '2025-03-01')
        mock_yesterday.assert_called_once_with('America/New_York')

    def test_disconnected_accounts_are_ignored(self):
        AccountConnection.objects.update(is_connected=False)
        summary = sync_leadprosper_daily_stats(date='2025-01-05')
        self.assertEqual(summary['accounts'], 0)


HYROS_PAGES = [
    [
        {'id': 'a', 'campaignId': 'h-1', 'campaign': 'Facebook Leads', 'sale': True, 'revenue': 300},
        {'id': 'b', 'campaignId': 'h-1', 'revenue': 50},
    ],
    [
        {'id': 'c', 'source': 'h-2'},
        {'id': 'd', 'email': 'x@example.com'},
    ],
]


class HyrosSyncTest(TestCase):
    def setUp(self):
        AccountConnection.objects.create(tenant_id=1, platform='hyros', account_id='h', credentials={'apiKey': 'k'})
        campaign = Campaign.objects.create(tenant_id=1, name='Roundup')
        CampaignMapping.objects.create(campaign=campaign, platform='hyros', account_id='h',
                                       external_campaign_id='h-1')

    @patch(HTTP_REQUEST)
    def test_day_is_paged_and_attributed_per_campaign(self, mock_request):
        mock_request.side_effect = paged_api(HYROS_PAGES, 'pageId', 'nextPageId', 'result')
        summary = sync_hyros_daily_stats(date='2025-01-05')

        self.assertEqual(mock_request.call_count, 2)
        self.assertEqual(mock_request.call_args[1]['params']['pageId'], '1')
        self.assertEqual(summary['rows_written'], 2)
        self.assertEqual(summary['unmapped_campaigns'], [{'id': 'h-2', 'name': None}])
        first = DailyMetric.objects.get(platform='hyros', external_campaign_id='h-1')
        self.assertEqual(first.leads, 2)
        # only converted leads carry revenue
        self.assertEqual(float(first.revenue), 300.0)
        self.assertEqual(first.external_campaign_name, 'Facebook Leads')
        self.assertEqual(DailyMetric.objects.get(external_campaign_id='h-2').leads, 1)

    @patch(HTTP_REQUEST)
    def test_synced_rows_feed_campaign_listing_fallback(self, mock_request):
        mock_request.side_effect = paged_api(HYROS_PAGES, 'pageId', 'nextPageId', 'result')
        sync_hyros_daily_stats(date='2025-01-05')

        campaigns = MappingService(AccountContext.for_tenant(1)).list_available_campaigns('h', platform='hyros')
        self.assertEqual(sorted(c.id for c in campaigns), ['h-1', 'h-2'])

    @patch(HTTP_REQUEST)
    def test_rejected_key_fails_the_account_only(self, mock_request):
        mock_request.return_value = fake_response(401, {'message': ['Invalid API key']})
        with self.assertLogs('tasks.sync', level='WARNING'):
            summary = sync_hyros_daily_stats(date='2025-01-05')
        self.assertEqual(summary['failed_campaigns'][0]['error'], 'Invalid API key')
        self.assertFalse(DailyMetric.objects.exists())

    def test_rows_fold_without_a_campaign_filter(self):
        rows = hyros_daily_rows(HYROS_PAGES[0] + HYROS_PAGES[1], '2025-01-05')
        self.assertEqual([(r['external_campaign_id'], r['leads']) for r in rows], [('h-1', 2), ('h-2', 1)])


class GoogleAdsSyncTest(TestCase):
    def setUp(self):
        AccountConnection.objects.create(tenant_id=1, platform='google', account_id='123-456-7890',
                                         credentials={'accessToken': 't'})

    @patch(HTTP_REQUEST)
    def test_spend_is_summed_per_campaign(self, mock_request):
        pages = [
            [{'campaign': {'id': '555', 'name': 'Brand'}, 'segments': {'date': '2025-01-05'},
              'metrics': {'costMicros': '12500000'}}],
            [{'campaign': {'id': '555', 'name': 'Brand'}, 'segments': {'date': '2025-01-05'},
              'metrics': {'costMicros': '2500000'}},
             {'campaign': {'id': '777', 'name': 'Generic'}, 'segments': {'date': '2025-01-05'},
              'metrics': {'costMicros': '1000000'}}],
        ]
        mock_request.side_effect = paged_api(pages, 'pageToken', 'nextPageToken', 'results')
        summary = sync_google_ads_daily_stats(date='2025-01-05')

        self.assertEqual(summary['campaigns_processed'], 2)
        self.assertIn("BETWEEN '2025-01-05' AND '2025-01-05'", mock_request.call_args[1]['json']['query'])
        brand = DailyMetric.objects.get(platform='google', external_campaign_id='555')
        self.assertEqual(float(brand.ad_spend), 15.0)
        self.assertEqual(brand.leads, 0)
        self.assertEqual(brand.external_campaign_name, 'Brand')

    def test_account_without_customer_id_is_skipped(self):
        AccountConnection.objects.update(account_id='')
        with self.assertLogs('tasks.sync', level='WARNING'):
            summary = sync_google_ads_daily_stats(date='2025-01-05')
        self.assertEqual(summary['accounts'], 1)
        self.assertEqual(len(summary['failed_campaigns']), 1)

    @patch(HTTP_REQUEST)
    def test_dry_run_writes_nothing(self, mock_request):
        mock_request.side_effect = paged_api(
            [[{'campaign': {'id': '555'}, 'metrics': {'costMicros': '1000000'}}]],
            'pageToken', 'nextPageToken', 'results',
        )
        summary = sync_google_ads_daily_stats(date='2025-01-05', dry_run=True)
        self.assertFalse(DailyMetric.objects.exists())
        self.assertEqual(summary['rows'][0]['ad_spend'], 1.0)


class SnapshotTaskTest(TestCase):
    def test_refresh_all(self):
        campaign = Campaign.objects.create(tenant_id=4, name='Roundup')
        CampaignMapping.objects.create(campaign=campaign, platform='hyros', account_id='h', external_campaign_id='h-1')
        upsert_daily_metrics(4, 'hyros', [
            {'external_campaign_id': 'h-1', 'date': '2025-01-01', 'leads': 2, 'revenue': 100.0, 'ad_spend': 40.0},
            {'external_campaign_id': 'h-1', 'date': '2025-01-02', 'leads': 3, 'revenue': 0.0, 'ad_spend': 10.0},
        ])
        result = refresh_all_campaign_snapshots()
        self.assertEqual(result, {'tenants': 1, 'campaigns_refreshed': 1})
        campaign.refresh_from_db()
        self.assertEqual(campaign.leads, 5)
        self.assertEqual(float(campaign.ad_spend), 50.0)
