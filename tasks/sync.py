"""
Scheduled stats sync jobs.

Each job pulls one day of upstream stats per connected account, folds them
into one DailyMetric row per external campaign and reports which upstream
campaigns are not mapped to an internal one yet.

LeadProsper is read campaign by campaign. HYROS has no campaign filter, so
its leads are read for the whole day and attributed to campaigns here.
Google Ads returns spend already segmented by campaign and date.
"""

import logging
from collections import defaultdict

from celery import shared_task
from django.conf import settings
from django.db import transaction
from tenacity import retry, stop_after_attempt, wait_exponential

from apps.analytics.aggregation import refresh_campaign_snapshots
from apps.analytics.models import DailyMetric
from apps.integrations.models import AccountConnection
from apps.integrations.platforms import Platform
from apps.integrations.platforms.google_ads import GoogleAdsClient
from apps.integrations.platforms.hyros import HyrosClient
from apps.integrations.platforms.leadprosper import LeadProsperClient
from apps.mappings.models import CampaignMapping
from core.dates import parse_stored_date, yesterday_in_timezone
from core.exceptions import UpstreamApiError, ValidationError

logger = logging.getLogger(__name__)

MAX_PAGES = 50

# keys HYROS has used to carry the campaign a lead belongs to
HYROS_CAMPAIGN_KEYS = ('campaignId', 'campaign_id', 'campaign', 'source')


def upsert_daily_metrics(tenant_id, platform, rows):
    """Insert or overwrite one DailyMetric per (campaign, date). Returns rows written."""
    with transaction.atomic():
        for row in rows:
            DailyMetric.objects.update_or_create(
                tenant_id=tenant_id,
                platform=platform,
                external_campaign_id=row['external_campaign_id'],
                date=row['date'],
                defaults={
                    'external_campaign_name': row.get('external_campaign_name'),
                    'leads': row.get('leads', 0),
                    'cost': round(row.get('cost', 0.0), 2),
                    'revenue': round(row.get('revenue', 0.0), 2),
                    'ad_spend': round(row.get('ad_spend', 0.0), 2),
                },
            )
    return len(rows)


def _all_records(client, credentials, day, campaign_id=None, account_id=None):
    """Every record for one day, following the upstream cursor."""
    records, cursor, seen = [], None, set()
    for _ in range(MAX_PAGES):
        page = client.fetch_stats(
            credentials, day, day, campaign_id=campaign_id, page_id=cursor, account_id=account_id,
        )
        records.extend(page.records)
        cursor = page.next_page_id
        if not cursor or cursor in seen:
            break
        seen.add(cursor)
    else:
        logger.warning(f"{client.label} {campaign_id or account_id}: stopped after {MAX_PAGES} pages")
    return records


def _daily_row(campaign, leads, day):
    cost = sum(float(lead.get('cost') or 0) for lead in leads)
    return {
        'external_campaign_id': campaign.id,
        'external_campaign_name': campaign.name,
        'date': day,
        'leads': len(leads),
        'cost': cost,
        'revenue': sum(float(lead.get('revenue') or 0) for lead in leads),
        # what LeadProsper charges per lead is the spend for that channel
        'ad_spend': cost,
    }


def _hyros_campaign(lead):
    for key in HYROS_CAMPAIGN_KEYS:
        value = lead.get(key)
        if isinstance(value, (str, int)) and not isinstance(value, bool) and str(value):
            return str(value)
    return None


def hyros_daily_rows(leads, day):
    """Fold a day of HYROS leads into one row per campaign, in first-seen order."""
    rows = {}
    unattributed = 0
    for lead in leads:
        campaign_id = _hyros_campaign(lead)
        if campaign_id is None:
            unattributed += 1
            continue
        row = rows.get(campaign_id)
        if row is None:
            row = rows[campaign_id] = {
                'external_campaign_id': campaign_id,
                'external_campaign_name': None,
                'date': day,
                'leads': 0,
                'cost': 0.0,
                'revenue': 0.0,
                'ad_spend': 0.0,
            }
        name = lead.get('campaignName')
        if not name and isinstance(lead.get('campaign'), str) and lead['campaign'] != campaign_id:
            name = lead['campaign']
        if name and not row['external_campaign_name']:
            row['external_campaign_name'] = name
        row['leads'] += 1
        if lead.get('sale') or lead.get('converted') or lead.get('isConversion'):
            try:
                row['revenue'] += max(float(lead.get('revenue') or 0), 0.0)
            except (TypeError, ValueError):
                logger.warning(f"HYROS lead {lead.get('id')}: unreadable revenue {lead.get('revenue')!r}")
    if unattributed:
        logger.info(f"HYROS {day}: {unattributed} leads carry no campaign and were not counted")
    return list(rows.values())


def google_daily_rows(records, day):
    """Sum Google Ads spend per campaign for one day."""
    rows = {}
    for record in records:
        campaign_id = record['campaign_id']
        row = rows.setdefault(campaign_id, {
            'external_campaign_id': campaign_id,
            'external_campaign_name': record.get('campaign_name'),
            'date': day,
            'leads': 0,
            'cost': 0.0,
            'revenue': 0.0,
            'ad_spend': 0.0,
        })
        row['ad_spend'] += record['ad_spend']
        row['cost'] += record['ad_spend']
    return list(rows.values())


def _mapped_ids(tenant_id, platform):
    return set(
        CampaignMapping.objects.active().for_tenant(tenant_id)
        .filter(platform=platform).values_list('external_campaign_id', flat=True)
    )


def _connections(platform, tenant_id=None):
    connections = AccountConnection.objects.connected().filter(platform=platform)
    if tenant_id is not None:
        connections = connections.filter(tenant_id=tenant_id)
    return connections


def _new_summary(day, dry_run):
    return {
        'date': day,
        'dry_run': dry_run,
        'accounts': 0,
        'campaigns_processed': 0,
        'rows_written': 0,
        'unmapped_campaigns': [],
        'failed_campaigns': [],
    }


def _collect(summary, rows_by_tenant, connection, rows, platform):
    mapped = _mapped_ids(connection.tenant_id, platform)
    summary['campaigns_processed'] += len(rows)
    rows_by_tenant[connection.tenant_id].extend(rows)
    for row in rows:
        if row['external_campaign_id'] not in mapped:
            summary['unmapped_campaigns'].append(
                {'id': row['external_campaign_id'], 'name': row['external_campaign_name']}
            )


def _finish(summary, rows_by_tenant, platform):
    if summary['dry_run']:
        summary['rows'] = [row for rows in rows_by_tenant.values() for row in rows]
    else:
        for tenant, rows in rows_by_tenant.items():
            summary['rows_written'] += upsert_daily_metrics(tenant, platform, rows)

    logger.info(
        f"{platform.label} sync {summary['date']}: {summary['campaigns_processed']} campaigns, "
        f"{summary['rows_written']} rows written, {len(summary['unmapped_campaigns'])} unmapped, "
        f"{len(summary['failed_campaigns'])} failed{' (dry run)' if summary['dry_run'] else ''}"
    )
    return summary


@shared_task
@retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=4, max=10), reraise=True)
def sync_leadprosper_daily_stats(date=None, dry_run=False, tenant_id=None):
    """Daily LeadProsper pull. ``date`` defaults to yesterday in the LeadProsper timezone."""
    day = date or yesterday_in_timezone(settings.LEADPROSPER_TIMEZONE)
    parse_stored_date(day)

    client = LeadProsperClient()
    rows_by_tenant = defaultdict(list)
    summary = _new_summary(day, dry_run)

    for connection in _connections(Platform.LEADPROSPER, tenant_id):
        summary['accounts'] += 1
        try:
            campaigns = client.list_campaigns(connection.credentials)
        except UpstreamApiError as e:
            logger.error(f"LeadProsper account {connection.pk} (tenant {connection.tenant_id}): {e}")
            summary['failed_campaigns'].append({'account': connection.pk, 'campaign': None, 'error': str(e)})
            continue

        rows = []
        for campaign in campaigns:
            try:
                leads = _all_records(client, connection.credentials, day, campaign_id=campaign.id)
            except (UpstreamApiError, ValidationError) as e:
                logger.warning(f"Skipping LeadProsper campaign {campaign.id}: {e}")
                summary['failed_campaigns'].append(
                    {'account': connection.pk, 'campaign': campaign.id, 'error': str(e)}
                )
                continue
            rows.append(_daily_row(campaign, leads, day))
        _collect(summary, rows_by_tenant, connection, rows, Platform.LEADPROSPER)

    return _finish(summary, rows_by_tenant, Platform.LEADPROSPER)


@shared_task
@retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=4, max=10), reraise=True)
def sync_hyros_daily_stats(date=None, dry_run=False, tenant_id=None):
    """Daily HYROS pull. ``date`` defaults to yesterday in STATS_SYNC_TIMEZONE."""
    day = date or yesterday_in_timezone(settings.STATS_SYNC_TIMEZONE)
    parse_stored_date(day)

    client = HyrosClient()
    rows_by_tenant = defaultdict(list)
    summary = _new_summary(day, dry_run)

    for connection in _connections(Platform.HYROS, tenant_id):
        summary['accounts'] += 1
        try:
            leads = _all_records(client, connection.credentials, day, account_id=connection.account_id)
        except (UpstreamApiError, ValidationError) as e:
            logger.warning(f"Skipping HYROS account {connection.pk} (tenant {connection.tenant_id}): {e}")
            summary['failed_campaigns'].append({'account': connection.pk, 'campaign': None, 'error': str(e)})
            continue
        _collect(summary, rows_by_tenant, connection, hyros_daily_rows(leads, day), Platform.HYROS)

    return _finish(summary, rows_by_tenant, Platform.HYROS)


@shared_task
@retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=4, max=10), reraise=True)
def sync_google_ads_daily_stats(date=None, dry_run=False, tenant_id=None):
    """Daily Google Ads spend pull. ``date`` defaults to yesterday in STATS_SYNC_TIMEZONE."""
    day = date or yesterday_in_timezone(settings.STATS_SYNC_TIMEZONE)
    parse_stored_date(day)

    client = GoogleAdsClient()
    rows_by_tenant = defaultdict(list)
    summary = _new_summary(day, dry_run)

    for connection in _connections(Platform.GOOGLE, tenant_id):
        summary['accounts'] += 1
        try:
            records = _all_records(client, connection.credentials, day, account_id=connection.account_id)
        except (UpstreamApiError, ValidationError) as e:
            logger.warning(f"Skipping Google Ads account {connection.account_id} (tenant {connection.tenant_id}): {e}")
            summary['failed_campaigns'].append({'account': connection.pk, 'campaign': None, 'error': str(e)})
            continue
        _collect(summary, rows_by_tenant, connection, google_daily_rows(records, day), Platform.GOOGLE)

    return _finish(summary, rows_by_tenant, Platform.GOOGLE)


@shared_task
@retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=4, max=10), reraise=True)
def refresh_tenant_campaign_snapshots(tenant_id):
    return {'tenant_id': tenant_id, 'campaigns_refreshed': refresh_campaign_snapshots(tenant_id)}


@shared_task
def refresh_all_campaign_snapshots():
    tenant_ids = (
        CampaignMapping.objects.active()
        .order_by().values_list('campaign__tenant_id', flat=True).distinct()
    )
    refreshed = 0
    for tenant_id in tenant_ids:
        refreshed += refresh_campaign_snapshots(tenant_id)
    logger.info(f"Refreshed campaign snapshots for {len(tenant_ids)} tenants ({refreshed} campaigns)")
    return {'tenants': len(tenant_ids), 'campaigns_refreshed': refreshed}
