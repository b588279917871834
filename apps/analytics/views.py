import logging

from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from apps.authentication.context import AccountContext
from tasks.sync import refresh_tenant_campaign_snapshots
from .aggregation import campaign_stats_for_range
from .serializers import CampaignStatsQuerySerializer

logger = logging.getLogger(__name__)


@api_view(['GET'])
def campaign_stats(request):
    """Per-campaign totals for a date range, resolved to internal campaigns."""
    ctx = AccountContext.from_request(request)
    serializer = CampaignStatsQuerySerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    params = serializer.validated_data

    stats = campaign_stats_for_range(ctx, params['startDate'], params['endDate'], params.get('platform'))
    return Response({
        'success': True,
        'startDate': params['startDate'],
        'endDate': params['endDate'],
        'campaigns': [s.to_dict() for s in stats],
        'total_campaigns': len(stats),
    })


@api_view(['POST'])
def refresh_snapshots(request):
    """Queue a recompute of the tenant's campaign snapshots."""
    ctx = AccountContext.from_request(request)
    task = refresh_tenant_campaign_snapshots.delay(ctx.tenant_id)
    logger.info(f"Snapshot refresh queued for tenant {ctx.tenant_id}: {task.id}")
    return Response({'success': True, 'task_id': task.id}, status=status.HTTP_202_ACCEPTED)
