import logging
import time
from functools import wraps

from .models import DailyMetric

logger = logging.getLogger(__name__)

SLOW_QUERY_SECONDS = 1.0


def monitor_query_performance(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        execution_time = time.perf_counter() - start_time
        if execution_time > SLOW_QUERY_SECONDS:
            logger.warning(f"Slow query: {func.__name__} took {execution_time:.2f}s")
        return result
    return wrapper


class DailyMetricRepository:
    """Read side of the daily metric store; rows come back as plain dicts."""

    FIELDS = (
        'external_campaign_id', 'external_campaign_name', 'platform',
        'date', 'leads', 'cost', 'revenue', 'ad_spend',
    )

    @staticmethod
    @monitor_query_performance
    def rows_for_range(tenant_id, start_date, end_date, platform=None, campaign_ids=None):
        queryset = DailyMetric.objects.filter(tenant_id=tenant_id)
        if start_date:
            queryset = queryset.filter(date__gte=start_date)
        if end_date:
            queryset = queryset.filter(date__lte=end_date)
        if platform:
            queryset = queryset.filter(platform=platform)
        if campaign_ids is not None:
            queryset = queryset.filter(external_campaign_id__in=campaign_ids)
        return [
            {
                **row,
                'date': row['date'].isoformat(),
                'cost': float(row['cost']),
                'revenue': float(row['revenue']),
                'ad_spend': float(row['ad_spend']),
            }
            for row in queryset.order_by('date', 'pk').values(*DailyMetricRepository.FIELDS)
        ]

    @staticmethod
    @monitor_query_performance
    def rows_for_campaign(tenant_id, platform, external_campaign_id):
        return DailyMetricRepository.rows_for_range(
            tenant_id, None, None, platform=platform, campaign_ids=[external_campaign_id],
        )
