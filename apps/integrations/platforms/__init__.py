"""
Platform registry. ``get_client`` is the only place that decides which
upstream client serves a platform.
"""

from core.exceptions import ValidationError

from .base import ExternalCampaign, Platform, PlatformClient, StatsPage, VerificationResult
from .google_ads import GoogleAdsClient
from .hyros import HyrosClient
from .leadprosper import LeadProsperClient

CLIENTS = {
    Platform.GOOGLE: GoogleAdsClient,
    Platform.LEADPROSPER: LeadProsperClient,
    Platform.HYROS: HyrosClient,
}


def get_client(platform) -> PlatformClient:
    try:
        platform = Platform(platform)
    except ValueError:
        raise ValidationError(f"Unknown platform: {platform}")
    client_class = CLIENTS.get(platform)
    if client_class is None:
        raise ValidationError(f"Unsupported platform: {platform.label}")
    return client_class()


__all__ = [
    'CLIENTS', 'ExternalCampaign', 'Platform', 'PlatformClient', 'StatsPage',
    'VerificationResult', 'get_client',
]
