"""
Per-campaign totals over daily metric rows.

``aggregate_campaign_stats`` is a single pass over the rows keyed by
external campaign id. Totals do not depend on row order; the output keeps
the order in which each campaign first appears. ``last_date`` compares the
stored ``YYYY-MM-DD`` strings directly, which orders them chronologically.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from django.db import transaction
from django.utils import timezone

from apps.mappings.models import CampaignMapping
from .repository import DailyMetricRepository

logger = logging.getLogger(__name__)

UNKNOWN_PLATFORM = 'unknown'


@dataclass
class AggregatedCampaignStats:
    external_campaign_id: str
    name: Optional[str]
    platform: str
    last_date: str
    total_leads: int = 0
    total_spend: float = 0.0
    total_cost: float = 0.0
    total_revenue: float = 0.0
    campaign_id: Optional[int] = None

    def to_dict(self):
        return {
            'id': self.external_campaign_id,
            'name': self.name,
            'platform': self.platform,
            'totalLeads': self.total_leads,
            'totalSpend': self.total_spend,
            'totalCost': self.total_cost,
            'totalRevenue': self.total_revenue,
            'lastDate': self.last_date,
            'campaignId': self.campaign_id,
        }


def _date_string(value):
    return value if isinstance(value, str) else value.isoformat()


def aggregate_campaign_stats(rows: Iterable[Dict], by_platform=False) -> List[AggregatedCampaignStats]:
    """
    Fold rows into per-campaign totals. With ``by_platform`` the same
    external id on two platforms stays two campaigns.
    """
    totals: Dict[tuple, AggregatedCampaignStats] = {}

    for row in rows:
        external_id = str(row['external_campaign_id'])
        platform = row.get('platform') or UNKNOWN_PLATFORM
        key = (platform, external_id) if by_platform else (external_id,)
        row_date = _date_string(row['date'])
        stats = totals.get(key)
        if stats is None:
            stats = totals[key] = AggregatedCampaignStats(
                external_campaign_id=external_id,
                name=row.get('external_campaign_name') or None,
                platform=platform,
                last_date=row_date,
            )
        elif stats.name is None and row.get('external_campaign_name'):
            stats.name = row['external_campaign_name']

        stats.total_leads += int(row.get('leads') or 0)
        stats.total_spend += float(row.get('ad_spend') or 0)
        stats.total_cost += float(row.get('cost') or 0)
        stats.total_revenue += float(row.get('revenue') or 0)
        if row_date > stats.last_date:
            stats.last_date = row_date

    for stats in totals.values():
        if stats.name is None:
            stats.name = f"Campaign {stats.external_campaign_id}"
            logger.warning(
                f"No campaign name for {stats.platform}:{stats.external_campaign_id}; "
                f"metric rows may be orphaned"
            )
    return list(totals.values())


def resolve_campaigns(aggregates, ctx):
    """Attach the internal campaign id each aggregate is mapped to, if any."""
    if not aggregates:
        return aggregates
    owners = {
        (platform, external_id): campaign_id
        for platform, external_id, campaign_id in (
            CampaignMapping.objects.active().for_tenant(ctx.tenant_id)
            .filter(external_campaign_id__in=[a.external_campaign_id for a in aggregates])
            .values_list('platform', 'external_campaign_id', 'campaign_id')
        )
    }
    for stats in aggregates:
        stats.campaign_id = owners.get((stats.platform, stats.external_campaign_id))
    return aggregates


def campaign_stats_for_range(ctx, start_date, end_date, platform=None):
    rows = DailyMetricRepository.rows_for_range(ctx.tenant_id, start_date, end_date, platform=platform)
    return resolve_campaigns(aggregate_campaign_stats(rows, by_platform=True), ctx)


def refresh_campaign_snapshots(tenant_id):
    """
    Recompute each mapped campaign's stats snapshot from all of its daily
    rows. A campaign mapped on several platforms gets the sum of them.
    Returns the number of campaigns updated.
    """
    mappings = (
        CampaignMapping.objects.active().for_tenant(tenant_id).select_related('campaign')
    )
    by_campaign = defaultdict(list)
    for mapping in mappings:
        by_campaign[mapping.campaign_id].append(mapping)

    now = timezone.now()
    for campaign_mappings in by_campaign.values():
        leads, revenue, ad_spend = 0, 0.0, 0.0
        for mapping in campaign_mappings:
            rows = DailyMetricRepository.rows_for_campaign(tenant_id, mapping.platform, mapping.external_campaign_id)
            for stats in aggregate_campaign_stats(rows):
                leads += stats.total_leads
                revenue += stats.total_revenue
                ad_spend += stats.total_spend
        with transaction.atomic():
            campaign_mappings[0].campaign.apply_stats_snapshot(leads, revenue, ad_spend)
            CampaignMapping.objects.filter(pk__in=[m.pk for m in campaign_mappings]).update(last_synced=now)

    logger.info(f"Refreshed stats snapshot for {len(by_campaign)} campaigns (tenant {tenant_id})")
    return len(by_campaign)
