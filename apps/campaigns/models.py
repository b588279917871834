from decimal import Decimal

from django.db import models
from django.utils import timezone

from apps.integrations.choices import Platform


class Campaign(models.Model):
    class Meta:
        app_label = 'campaigns'
        constraints = [
            models.UniqueConstraint(
                fields=['tenant_id', 'name'],
                name='unique_campaign_name_per_tenant'
            )
        ]
        indexes = [
            models.Index(fields=['tenant_id', 'platform'], name='campaign_tenant_platform_idx'),
            models.Index(fields=['tenant_id', 'is_active'], name='campaign_tenant_active_idx'),
        ]
        ordering = ['name']

    tenant_id = models.IntegerField(db_index=True)
    name = models.CharField(max_length=200)
    platform = models.CharField(max_length=20, choices=Platform.choices, blank=True, default='')
    is_active = models.BooleanField(default=True)

    # Link to the external campaign currently mapped onto this one
    account_id = models.CharField(max_length=100, blank=True, null=True)
    external_campaign_id = models.CharField(max_length=100, blank=True, null=True)

    # Targets
    case_payout_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    # Stats snapshot
    leads = models.IntegerField(default=0)
    cases = models.IntegerField(default=0)
    revenue = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    ad_spend = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    stats_synced_at = models.DateTimeField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def apply_stats_snapshot(self, leads, revenue, ad_spend):
        self.leads = int(leads)
        self.revenue = Decimal(str(round(revenue, 2)))
        self.ad_spend = Decimal(str(round(ad_spend, 2)))
        self.stats_synced_at = timezone.now()
        self.save(update_fields=['leads', 'revenue', 'ad_spend', 'stats_synced_at', 'updated_at'])

    def link_external(self, account_id, external_campaign_id):
        self.account_id = account_id
        self.external_campaign_id = external_campaign_id
        self.save(update_fields=['account_id', 'external_campaign_id', 'updated_at'])

    def unlink_external(self):
        self.account_id = None
        self.external_campaign_id = None
        self.save(update_fields=['account_id', 'external_campaign_id', 'updated_at'])
