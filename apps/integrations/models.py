from django.conf import settings
from django.db import models

from .choices import Platform


class AccountConnectionQuerySet(models.QuerySet):
    def for_tenant(self, tenant_id):
        return self.filter(tenant_id=tenant_id)

    def connected(self):
        return self.filter(is_connected=True)


class AccountConnection(models.Model):
    """An external platform account a tenant has connected, with its credential."""

    class Meta:
        app_label = 'integrations'
        constraints = [
            models.UniqueConstraint(
                fields=['tenant_id', 'platform', 'account_id'],
                name='unique_connection_per_tenant_platform_account'
            )
        ]
        indexes = [
            models.Index(fields=['tenant_id', 'platform', 'is_connected'], name='connection_tenant_platform_idx'),
        ]
        ordering = ['-created_at']

    tenant_id = models.IntegerField(db_index=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='account_connections'
    )
    platform = models.CharField(max_length=20, choices=Platform.choices)
    account_id = models.CharField(max_length=100, blank=True, default='')
    account_name = models.CharField(max_length=255, blank=True, default='')
    # {"apiKey": ...} or {"accessToken": ..., "loginCustomerId": ...}
    credentials = models.JSONField(default=dict, blank=True)
    is_connected = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AccountConnectionQuerySet.as_manager()

    def __str__(self):
        return f"{self.get_platform_display()} {self.account_name or self.account_id}"
