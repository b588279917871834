import logging
import re

from django.conf import settings

from core.dates import parse_stored_date
from core.exceptions import ValidationError
from .base import ExternalCampaign, Platform, PlatformClient, StatsPage, VerificationResult

logger = logging.getLogger(__name__)

CAMPAIGNS_QUERY = (
    "SELECT campaign.id, campaign.name, campaign.status "
    "FROM campaign "
    "WHERE campaign.status != 'REMOVED' "
    "ORDER BY campaign.name"
)

STATS_QUERY = (
    "SELECT campaign.id, campaign.name, segments.date, "
    "metrics.impressions, metrics.clicks, metrics.cost_micros, metrics.conversions "
    "FROM campaign "
    "WHERE segments.date BETWEEN '{start}' AND '{end}'{campaign_filter} "
    "ORDER BY segments.date"
)

_DIGITS = re.compile(r'^\d+$')


def clean_customer_id(value):
    """Google shows customer ids as 123-456-7890; the API wants the bare digits."""
    cleaned = str(value or '').replace('-', '').strip()
    if not _DIGITS.match(cleaned):
        raise ValidationError(f"Invalid Google Ads customer id: {value!r}")
    return cleaned


def _field(obj, snake, camel):
    return obj.get(camel, obj.get(snake))


def _metric_row(result):
    campaign = result.get('campaign') or {}
    metrics = result.get('metrics') or {}
    segments = result.get('segments') or {}
    cost_micros = float(_field(metrics, 'cost_micros', 'costMicros') or 0)
    return {
        'campaign_id': str(campaign.get('id')),
        'campaign_name': campaign.get('name'),
        'date': segments.get('date'),
        'impressions': int(metrics.get('impressions') or 0),
        'clicks': int(metrics.get('clicks') or 0),
        'conversions': float(metrics.get('conversions') or 0),
        'ad_spend': cost_micros / 1_000_000,
    }


class GoogleAdsClient(PlatformClient):
    platform = Platform.GOOGLE
    credential_field = 'accessToken'
    active_statuses = ('enabled',)

    def default_base_url(self):
        return f"{settings.GOOGLE_ADS_API_URL.rstrip('/')}/{settings.GOOGLE_ADS_API_VERSION}"

    def headers(self, credential):
        return {
            'Authorization': f"Bearer {credential}",
            'developer-token': settings.GOOGLE_ADS_DEVELOPER_TOKEN,
            'Content-Type': 'application/json',
        }

    def error_message(self, response):
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get('error'), dict):
            message = body['error'].get('message')
            if message:
                return message
        return super().error_message(response)

    def verify(self, credentials):
        access_token = (credentials or {}).get(self.credential_field)
        if not access_token:
            return VerificationResult(is_valid=False, error="Access token is required")
        return self.verify_with('GET', '/customers:listAccessibleCustomers', access_token)

    def _search(self, credentials, account_id, query, page_id=None):
        access_token = self.credential(credentials)
        # manager accounts reach client accounts through login-customer-id
        extra_headers = None
        if credentials.get('loginCustomerId'):
            extra_headers = {'login-customer-id': clean_customer_id(credentials['loginCustomerId'])}
        body = {'query': query}
        if page_id:
            body['pageToken'] = page_id
        path = f"/customers/{clean_customer_id(account_id)}/googleAds:search"
        return self.json_or_raise(self.send('POST', path, access_token, extra_headers=extra_headers, json=body))

    def list_campaigns(self, credentials, account_id=None):
        if not account_id:
            raise ValidationError("Google Ads customer id is required")
        payload = self._search(credentials, account_id, CAMPAIGNS_QUERY)
        campaigns = []
        for result in payload.get('results') or []:
            campaign = result.get('campaign') or {}
            campaigns.append(ExternalCampaign(
                id=str(campaign.get('id')),
                name=campaign.get('name') or f"Campaign {campaign.get('id')}",
                status=str(campaign.get('status') or 'UNKNOWN').lower(),
                platform=self.platform.value,
            ))
        return campaigns

    def fetch_stats(self, credentials, start_date, end_date, campaign_id=None,
                    page_size=100, page_id=None, account_id=None):
        if not account_id:
            raise ValidationError("Google Ads customer id is required")
        # both dates are interpolated into GAQL, so they must be well-formed
        parse_stored_date(start_date)
        parse_stored_date(end_date)
        campaign_filter = ''
        if campaign_id:
            if not _DIGITS.match(str(campaign_id)):
                raise ValidationError(f"Invalid Google Ads campaign id: {campaign_id!r}")
            campaign_filter = f" AND campaign.id = {campaign_id}"

        query = STATS_QUERY.format(start=start_date, end=end_date, campaign_filter=campaign_filter)
        payload = self._search(credentials, account_id, query, page_id=page_id)
        records = [_metric_row(r) for r in payload.get('results') or []]
        return StatsPage(records=records, next_page_id=payload.get('nextPageToken') or None)
