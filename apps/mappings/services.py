"""
Reconciliation between internal campaigns and external platform campaigns.

``MappingService`` is bound to one ``AccountContext``; every query it runs
is scoped to that tenant. Writes go through ``transaction.atomic`` so a
rejected call leaves the store as it found it.
"""

import logging

from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound

from apps.analytics.models import DailyMetric
from apps.campaigns.models import Campaign
from apps.integrations.models import AccountConnection
from apps.integrations.platforms import ExternalCampaign, Platform, get_client
from apps.integrations.services import get_connection
from core.exceptions import ConflictError, UpstreamApiError, ValidationError
from .models import CampaignMapping

logger = logging.getLogger(__name__)


class MappingService:
    def __init__(self, ctx):
        self.ctx = ctx

    # -------- helpers --------
    def _campaign(self, internal_id, lock=False):
        queryset = Campaign.objects.filter(tenant_id=self.ctx.tenant_id)
        if lock:
            queryset = queryset.select_for_update()
        try:
            campaign = queryset.filter(pk=internal_id).first()
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid campaign ID: {internal_id}")
        if campaign is None:
            raise NotFound(f"Campaign {internal_id} not found")
        return campaign

    def _resolve_platform(self, account_id, platform=None):
        if platform:
            try:
                return Platform(platform)
            except ValueError:
                raise ValidationError(f"Unknown platform: {platform}")
        connection = (
            AccountConnection.objects.for_tenant(self.ctx.tenant_id)
            .filter(account_id=account_id).order_by('-updated_at').first()
        )
        return Platform(connection.platform) if connection else Platform.GOOGLE

    def _relink_to_latest(self, campaign):
        """Point the campaign's link at its newest remaining active mapping, or clear it."""
        latest = CampaignMapping.objects.active().filter(campaign=campaign).order_by('-linked_at', '-pk').first()
        if latest is None:
            campaign.unlink_external()
        else:
            campaign.link_external(latest.account_id, latest.external_campaign_id)

    def _synced_campaigns(self, platform):
        """Campaigns seen in synced daily rows, for platforms without a listing endpoint."""
        rows = (
            DailyMetric.objects.filter(tenant_id=self.ctx.tenant_id, platform=platform)
            .order_by('external_campaign_id', '-date')
            .values_list('external_campaign_id', 'external_campaign_name')
        )
        seen = {}
        for campaign_id, name in rows:
            if campaign_id not in seen:
                seen[campaign_id] = name
        return [
            ExternalCampaign(id=cid, name=name or f"Campaign {cid}", status='active', platform=platform)
            for cid, name in seen.items()
        ]

    # -------- operations --------
    def list_available_campaigns(self, account_id, platform=None):
        connection = get_connection(self.ctx, account_id, platform)
        client = get_client(connection.platform)
        if not client.supports_campaign_listing:
            return self._synced_campaigns(connection.platform)
        campaigns = client.list_campaigns(connection.credentials, account_id=connection.account_id)
        logger.info(f"Listed {len(campaigns)} {client.label} campaigns for account {account_id}")
        return campaigns

    def create_mapping(self, internal_id, account_id, external_id, external_name='', platform=None):
        if not internal_id or not account_id or not external_id:
            raise ValidationError("Campaign ID, account ID and external campaign ID are required")
        platform = self._resolve_platform(account_id, platform)

        try:
            with transaction.atomic():
                campaign = self._campaign(internal_id, lock=True)
                # the partial unique constraint is not enforced on every backend
                existing = CampaignMapping.objects.active().filter(campaign=campaign, platform=platform).first()
                if existing is not None:
                    raise ConflictError(
                        f"Campaign {internal_id} is already mapped to {platform.label} "
                        f"campaign {existing.external_campaign_id}"
                    )
                mapping = CampaignMapping.objects.create(
                    campaign=campaign,
                    platform=platform,
                    account_id=account_id,
                    external_campaign_id=external_id,
                    external_campaign_name=external_name or '',
                )
                campaign.link_external(account_id, external_id)
        except IntegrityError as e:
            raise ConflictError(f"Campaign {internal_id} is already mapped on {platform.label}") from e

        logger.info(
            f"Mapped campaign {internal_id} to {platform}:{external_id} (account {account_id}) "
            f"for tenant {self.ctx.tenant_id}"
        )
        return mapping

    def delete_mapping(self, internal_id, account_id, external_id):
        """Soft-delete the active link. Returns the number of mappings deactivated."""
        if not internal_id or not external_id:
            raise ValidationError("Campaign ID and external campaign ID are required")

        with transaction.atomic():
            campaign = self._campaign(internal_id, lock=True)
            queryset = CampaignMapping.objects.active().filter(campaign=campaign, external_campaign_id=external_id)
            if account_id:
                queryset = queryset.filter(account_id=account_id)
            deactivated = queryset.update(is_active=False, unlinked_at=timezone.now(), updated_at=timezone.now())
            if campaign.external_campaign_id == external_id and (
                    not account_id or campaign.account_id == account_id):
                self._relink_to_latest(campaign)

        if deactivated:
            logger.info(f"Unmapped campaign {internal_id} from {external_id} for tenant {self.ctx.tenant_id}")
        else:
            logger.debug(f"No active mapping {internal_id} -> {external_id}; nothing to delete")
        return deactivated

    def get_mappings_for_campaign(self, internal_id):
        campaign = self._campaign(internal_id)
        return list(CampaignMapping.objects.filter(campaign=campaign).order_by('-linked_at', '-pk'))

    def count_unmapped(self, platform=Platform.GOOGLE):
        platform = Platform(platform)
        client = get_client(platform)
        connections = AccountConnection.objects.for_tenant(self.ctx.tenant_id).connected().filter(platform=platform)

        active_ids = set()
        for connection in connections:
            try:
                campaigns = self.list_available_campaigns(connection.account_id, platform)
            except (UpstreamApiError, ValidationError) as e:
                logger.warning(f"Skipping account {connection.account_id} in unmapped count: {e}")
                continue
            active_ids.update(c.id for c in campaigns if c.status in client.active_statuses)

        mapped = (
            CampaignMapping.objects.active().for_tenant(self.ctx.tenant_id)
            .filter(platform=platform, external_campaign_id__in=active_ids)
            .values('external_campaign_id').distinct().count()
        )
        return {
            'unmappedCount': max(len(active_ids) - mapped, 0),
            'totalCampaigns': len(active_ids),
        }
