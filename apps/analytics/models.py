from django.db import models

from apps.integrations.choices import Platform


class DailyMetric(models.Model):
    """One platform campaign's totals for one calendar day."""

    class Meta:
        app_label = 'analytics'
        constraints = [
            models.UniqueConstraint(
                fields=['tenant_id', 'platform', 'external_campaign_id', 'date'],
                name='unique_daily_metric_per_campaign_day'
            )
        ]
        indexes = [
            models.Index(fields=['tenant_id', 'date'], name='dailymetric_tenant_date_idx'),
            models.Index(fields=['tenant_id', 'platform', 'external_campaign_id'], name='dailymetric_tenant_ext_idx'),
        ]
        ordering = ['date', 'pk']

    tenant_id = models.IntegerField(db_index=True)
    platform = models.CharField(max_length=20, choices=Platform.choices)
    external_campaign_id = models.CharField(max_length=100)
    external_campaign_name = models.CharField(max_length=255, blank=True, null=True)
    date = models.DateField()

    leads = models.IntegerField(default=0)
    cost = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    revenue = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    ad_spend = models.DecimalField(max_digits=14, decimal_places=2, default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.platform}:{self.external_campaign_id} {self.date}"
