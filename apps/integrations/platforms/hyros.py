import logging

from django.conf import settings

from core.exceptions import ValidationError
from .base import Platform, PlatformClient, StatsPage, VerificationResult

logger = logging.getLogger(__name__)


class HyrosClient(PlatformClient):
    """
    HYROS exposes leads but no campaign listing; callers that need the
    campaign list fall back to what has already been synced locally.
    """

    platform = Platform.HYROS
    supports_campaign_listing = False

    def default_base_url(self):
        return settings.HYROS_API_URL

    def headers(self, credential):
        return {'API-Key': credential, 'Content-Type': 'application/json'}

    def error_message(self, response):
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get('message'):
            message = body['message']
            return ', '.join(message) if isinstance(message, list) else str(message)
        return "Invalid API key" if response.status_code in (401, 403) else "API error"

    def verify(self, credentials):
        api_key = (credentials or {}).get(self.credential_field)
        if not api_key:
            return VerificationResult(is_valid=False, error="API key is required")
        return self.verify_with('GET', '/leads', api_key, params={'pageSize': 1})

    def list_campaigns(self, credentials, account_id=None):
        raise ValidationError("HYROS does not expose a campaign listing")

    def fetch_stats(self, credentials, start_date, end_date, campaign_id=None,
                    page_size=100, page_id=None, account_id=None):
        api_key = self.credential(credentials)
        params = {'fromDate': start_date, 'toDate': end_date, 'pageSize': page_size}
        if page_id:
            params['pageId'] = page_id
        if campaign_id:
            # the leads endpoint has no campaign filter
            logger.debug(f"HYROS fetch_stats ignores campaign filter {campaign_id}")

        payload = self.json_or_raise(self.send('GET', '/leads', api_key, params=params))
        payload = payload if isinstance(payload, dict) else {}
        return StatsPage(
            records=payload.get('result') or [],
            next_page_id=payload.get('nextPageId') or None,
        )
