from django.db import models
from django.db.models import Q
from django.utils import timezone

from apps.integrations.choices import Platform


class CampaignMappingQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def for_tenant(self, tenant_id):
        return self.filter(campaign__tenant_id=tenant_id)


class CampaignMapping(models.Model):
    """
    Link between an internal campaign and one external campaign.

    Rows are never deleted: unlinking flips ``is_active`` and stamps
    ``unlinked_at`` so the history stays readable.
    """

    class Meta:
        app_label = 'mappings'
        constraints = [
            models.UniqueConstraint(
                fields=['campaign', 'platform'],
                condition=Q(is_active=True),
                name='unique_active_mapping_per_campaign_platform'
            )
        ]
        indexes = [
            models.Index(fields=['platform', 'external_campaign_id', 'is_active'], name='mapping_platform_external_idx'),
            models.Index(fields=['campaign', 'is_active'], name='mapping_campaign_active_idx'),
        ]
        ordering = ['-created_at']

    campaign = models.ForeignKey('campaigns.Campaign', on_delete=models.CASCADE, related_name='mappings')
    platform = models.CharField(max_length=20, choices=Platform.choices)
    account_id = models.CharField(max_length=100)
    external_campaign_id = models.CharField(max_length=100)
    external_campaign_name = models.CharField(max_length=255, blank=True, default='')

    is_active = models.BooleanField(default=True)
    linked_at = models.DateTimeField(default=timezone.now)
    unlinked_at = models.DateTimeField(blank=True, null=True)
    last_synced = models.DateTimeField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CampaignMappingQuerySet.as_manager()

    def __str__(self):
        return f"{self.campaign_id} -> {self.platform}:{self.external_campaign_id}"

    def to_dict(self):
        return {
            'id': self.pk,
            'campaignId': self.campaign_id,
            'platform': self.platform,
            'accountId': self.account_id,
            'externalCampaignId': self.external_campaign_id,
            'externalCampaignName': self.external_campaign_name,
            'isActive': self.is_active,
            'linkedAt': self.linked_at.isoformat() if self.linked_at else None,
            'unlinkedAt': self.unlinked_at.isoformat() if self.unlinked_at else None,
            'lastSynced': self.last_synced.isoformat() if self.last_synced else None,
        }
