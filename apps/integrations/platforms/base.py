import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from apps.integrations import http
from apps.integrations.choices import Platform
from core.exceptions import UpstreamApiError, UpstreamAuthError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExternalCampaign:
    id: str
    name: str
    status: str
    platform: str

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'status': self.status, 'platform': self.platform}


@dataclass
class VerificationResult:
    is_valid: bool
    error: Optional[str] = None
    campaign_count: Optional[int] = None

    def to_dict(self):
        data = {'isValid': self.is_valid}
        if self.error is not None:
            data['error'] = self.error
        if self.campaign_count is not None:
            data['campaignCount'] = self.campaign_count
        return data


@dataclass
class StatsPage:
    records: List[Dict[str, Any]] = field(default_factory=list)
    next_page_id: Optional[str] = None

    @property
    def total(self):
        return len(self.records)


class PlatformClient(ABC):
    """
    Request/response mapper for one upstream platform.

    Clients hold no state between calls: credentials come in with every
    call and each method issues at most one HTTP request.
    """

    platform: Platform = None
    credential_field = 'apiKey'
    supports_campaign_listing = True
    active_statuses = ('active',)

    def __init__(self, base_url: Optional[str] = None, timeout=None):
        self.base_url = (base_url or self.default_base_url()).rstrip('/')
        self.timeout = timeout

    @property
    def label(self):
        return self.platform.label if self.platform else self.__class__.__name__

    def default_base_url(self) -> str:
        raise NotImplementedError

    # -------- capability interface --------
    @abstractmethod
    def verify(self, credentials: Dict[str, Any]) -> VerificationResult:
        """Minimal authenticated call. Never raises; failures come back in the result."""

    @abstractmethod
    def list_campaigns(self, credentials: Dict[str, Any], account_id: Optional[str] = None) -> List[ExternalCampaign]:
        ...

    @abstractmethod
    def fetch_stats(
        self,
        credentials: Dict[str, Any],
        start_date: str,
        end_date: str,
        campaign_id: Optional[str] = None,
        page_size: int = 100,
        page_id: Optional[str] = None,
        account_id: Optional[str] = None,
    ) -> StatsPage:
        """One page of records plus the upstream continuation cursor, if any."""

    # -------- internals --------
    def headers(self, credential: str) -> Dict[str, str]:
        return {'Content-Type': 'application/json'}

    def credential(self, credentials: Optional[Dict[str, Any]]) -> str:
        value = (credentials or {}).get(self.credential_field)
        if not value:
            raise UpstreamAuthError(f"{self.label} credential not found. Please connect your account first.")
        return value

    def send(self, method: str, path: str, credential: str, extra_headers=None, **kwargs) -> requests.Response:
        url = f"{self.base_url}/{path.lstrip('/')}"
        headers = self.headers(credential)
        if extra_headers:
            headers.update(extra_headers)
        try:
            return http.request(
                method, url,
                headers=headers,
                timeout=self.timeout,
                measure=f"{self.platform}/{path.split('?')[0]}",
                **kwargs,
            )
        except requests.exceptions.RequestException as e:
            raise UpstreamApiError(f"Network error talking to {self.label}: {e}") from e

    def json_or_raise(self, response: requests.Response) -> Any:
        if not 200 <= response.status_code < 300:
            message = self.error_message(response)
            logger.warning(f"{self.label} API error ({response.status_code}): {message}")
            if response.status_code in (401, 403):
                raise UpstreamAuthError(message, upstream_status=response.status_code)
            raise UpstreamApiError(message, upstream_status=response.status_code)
        try:
            return response.json() if response.text else {}
        except ValueError as e:
            raise UpstreamApiError(f"{self.label} returned a non-JSON body") from e

    def error_message(self, response: requests.Response) -> str:
        """The upstream's own error text when it sends one, a generic line otherwise."""
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get('message') or body.get('error')
            if isinstance(message, list):
                message = ', '.join(str(m) for m in message)
            if isinstance(message, dict):
                message = message.get('message')
            if message:
                return str(message)
        text = (response.text or '').strip()
        if text and body is None:
            return text[:400]
        return f"{self.label} API error: {response.status_code} {response.reason or ''}".strip()

    def verify_with(self, method: str, path: str, credential: str, count_campaigns=None, **kwargs) -> VerificationResult:
        try:
            response = self.send(method, path, credential, **kwargs)
        except UpstreamApiError as e:
            return VerificationResult(is_valid=False, error=str(e))
        if response.status_code != 200:
            return VerificationResult(is_valid=False, error=self.error_message(response))
        result = VerificationResult(is_valid=True)
        if count_campaigns is not None:
            try:
                result.campaign_count = count_campaigns(response.json())
            except ValueError:
                logger.warning(f"{self.label} verify: unreadable body, campaign count skipped")
        return result
