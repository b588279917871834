import logging

from django.conf import settings
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.authentication.context import AccountContext
from apps.integrations.platforms import Platform
from .serializers import MappingRequestSerializer
from .services import MappingService

logger = logging.getLogger(__name__)


class CampaignMappingView(APIView):
    """
    Single RPC endpoint for the campaign-mapping dialog.

    The body names an ``action``; each action answers ``{"success": true, ...}``.
    Errors are rendered by the project exception handler.
    """

    def post(self, request):
        ctx = AccountContext.from_request(request)
        serializer = MappingRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        service = MappingService(ctx)
        handler = getattr(self, '_' + data['action'].replace('-', '_'))
        logger.debug(f"Mapping action {data['action']} for tenant {ctx.tenant_id}")
        return Response({'success': True, **handler(service, data)})

    def _list_available_campaigns(self, service, data):
        campaigns = service.list_available_campaigns(data['googleAccountId'], data.get('platform'))
        return {'campaigns': [c.to_dict() for c in campaigns]}

    def _create_mapping(self, service, data):
        mapping = service.create_mapping(
            data['tortsharkCampaignId'],
            data['googleAccountId'],
            data['googleCampaignId'],
            data.get('googleCampaignName', ''),
            platform=data.get('platform'),
        )
        return {'mapping': mapping.to_dict()}

    def _delete_mapping(self, service, data):
        service.delete_mapping(
            data['tortsharkCampaignId'],
            data.get('googleAccountId'),
            data['googleCampaignId'],
        )
        return {}

    def _list_mappings(self, service, data):
        mappings = service.get_mappings_for_campaign(data['tortsharkCampaignId'])
        return {'mappings': [m.to_dict() for m in mappings]}

    def _get_unmapped_count(self, service, data):
        counts = service.count_unmapped(data.get('platform') or Platform.GOOGLE)
        return {**counts, 'pollIntervalSeconds': settings.UNMAPPED_POLL_INTERVAL_SECONDS}
