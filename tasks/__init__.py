from core.celery import app as celery_app

__all__ = ('celery_app',)

# Register tasks explicitly; the beat schedule lives in CELERY_BEAT_SCHEDULE
from .sync import (  # noqa: E402,F401
    refresh_all_campaign_snapshots,
    refresh_tenant_campaign_snapshots,
    sync_google_ads_daily_stats,
    sync_hyros_daily_stats,
    sync_leadprosper_daily_stats,
)
