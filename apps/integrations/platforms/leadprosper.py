import logging
from typing import Any, Dict, List, Optional

from django.conf import settings

from .base import ExternalCampaign, Platform, PlatformClient, StatsPage, VerificationResult

logger = logging.getLogger(__name__)

MIN_API_KEY_LENGTH = 10


def _unwrap(payload, *keys) -> List[Dict[str, Any]]:
    """LeadProsper answers with a bare array or wraps it under one of ``keys``."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in keys:
            value = payload.get(key)
            if isinstance(value, list):
                return value
    return []


class LeadProsperClient(PlatformClient):
    platform = Platform.LEADPROSPER

    def default_base_url(self):
        return settings.LEADPROSPER_API_URL

    def headers(self, credential):
        return {
            'Authorization': f"Bearer {credential}",
            'Content-Type': 'application/json',
        }

    def verify(self, credentials):
        api_key = (credentials or {}).get(self.credential_field) or ''
        if len(api_key) < MIN_API_KEY_LENGTH:
            return VerificationResult(is_valid=False, error="Invalid API key format")

        return self.verify_with(
            'GET', '/campaigns', api_key,
            count_campaigns=lambda payload: len(_unwrap(payload, 'data', 'campaigns')),
        )

    def list_campaigns(self, credentials, account_id=None):
        api_key = self.credential(credentials)
        payload = self.json_or_raise(self.send('GET', '/campaigns', api_key))
        return [
            ExternalCampaign(
                id=str(c.get('id')),
                name=c.get('name') or f"Campaign {c.get('id')}",
                status=str(c.get('status') or 'active').lower(),
                platform=self.platform.value,
            )
            for c in _unwrap(payload, 'data', 'campaigns')
            if c.get('id') is not None
        ]

    def fetch_stats(self, credentials, start_date, end_date, campaign_id=None,
                    page_size=100, page_id=None, account_id=None):
        api_key = self.credential(credentials)
        params = {
            'start_date': start_date,
            'end_date': end_date,
            'timezone': settings.LEADPROSPER_TIMEZONE,
        }
        if campaign_id:
            params['campaign'] = campaign_id
        if page_id:
            params['search_after'] = page_id

        payload = self.json_or_raise(self.send('GET', '/leads', api_key, params=params))
        records = _unwrap(payload, 'data', 'leads')
        next_page_id = payload.get('search_after') if isinstance(payload, dict) else None
        logger.debug(f"LeadProsper leads page: {len(records)} records, next={next_page_id}")
        return StatsPage(records=records, next_page_id=next_page_id or None)
