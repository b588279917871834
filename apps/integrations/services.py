import logging

from django.db import transaction
from rest_framework.exceptions import NotFound

from core.exceptions import UpstreamAuthError, ValidationError
from .models import AccountConnection
from .platforms import Platform, get_client

logger = logging.getLogger(__name__)


def get_connection(ctx, account_id, platform=None):
    """The tenant's connected account, looked up by its external account id."""
    queryset = AccountConnection.objects.for_tenant(ctx.tenant_id).connected().filter(account_id=account_id)
    if platform:
        queryset = queryset.filter(platform=platform)
    connection = queryset.first()
    if connection is None:
        raise NotFound(f"No connected account {account_id}")
    return connection


def get_platform_connection(ctx, platform):
    """Most recent connected account for ``platform``; the credential source for stats calls."""
    platform = Platform(platform)
    connection = (
        AccountConnection.objects.for_tenant(ctx.tenant_id).connected()
        .filter(platform=platform).order_by('-updated_at').first()
    )
    if connection is None or not connection.credentials:
        raise UpstreamAuthError(
            f"{platform.label} credential not found. Please connect your {platform.label} account first."
        )
    return connection


def verify_credentials(platform, api_key):
    client = get_client(platform)
    result = client.verify({client.credential_field: api_key})
    logger.info(f"{client.label} credential verification: valid={result.is_valid}")
    return result


def connect_account(ctx, platform, credentials, account_id='', account_name=''):
    """Verify the credential upstream, then store (or refresh) the connection."""
    client = get_client(platform)
    result = client.verify(credentials)
    if not result.is_valid:
        raise ValidationError(result.error or f"{client.label} rejected the credential")

    with transaction.atomic():
        connection, created = AccountConnection.objects.update_or_create(
            tenant_id=ctx.tenant_id,
            platform=client.platform,
            account_id=account_id or '',
            defaults={
                'user': ctx.user,
                'account_name': account_name or '',
                'credentials': credentials,
                'is_connected': True,
            },
        )
    logger.info(
        f"{'Connected' if created else 'Reconnected'} {client.label} account "
        f"{connection.account_id or connection.pk} for tenant {ctx.tenant_id}"
    )
    return connection, result


def disconnect_account(ctx, connection_id):
    connection = AccountConnection.objects.for_tenant(ctx.tenant_id).filter(pk=connection_id).first()
    if connection is None:
        raise NotFound(f"No connection {connection_id}")
    connection.is_connected = False
    connection.credentials = {}
    connection.save(update_fields=['is_connected', 'credentials', 'updated_at'])
    logger.info(f"Disconnected {connection.platform} account {connection.account_id} for tenant {ctx.tenant_id}")
    return connection


def fetch_stats_page(ctx, platform, start_date, end_date, campaign_id=None, page_size=100, page_id=None):
    client = get_client(platform)
    connection = get_platform_connection(ctx, client.platform)
    return client.fetch_stats(
        connection.credentials,
        start_date,
        end_date,
        campaign_id=campaign_id,
        page_size=page_size,
        page_id=page_id,
        account_id=connection.account_id or None,
    )
