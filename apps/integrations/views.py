import logging

from rest_framework import mixins, status, viewsets
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.authentication.context import AccountContext
from core.exceptions import ValidationError
from . import services
from .models import AccountConnection
from .serializers import AccountConnectionSerializer, StatsRequestSerializer, VerifyRequestSerializer

logger = logging.getLogger(__name__)


class VerifyCredentialsView(APIView):
    """
    Check an API key against the platform before it is saved.

    Public: the key itself is what is being checked. A rejected key is a
    normal answer (200, ``isValid: false``), not an error.
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request, platform):
        serializer = VerifyRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        api_key = serializer.validated_data.get('apiKey')
        if not api_key:
            raise ValidationError("API key is required")
        result = services.verify_credentials(platform, api_key)
        return Response(result.to_dict())


class PlatformStatsView(APIView):
    """One page of upstream stats, fetched with the caller's stored credential."""

    def post(self, request, platform):
        ctx = AccountContext.from_request(request)
        serializer = StatsRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        page = services.fetch_stats_page(
            ctx,
            platform,
            data['startDate'],
            data['endDate'],
            campaign_id=data.get('campaignId') or None,
            page_size=data['pageSize'],
            page_id=data.get('pageId') or None,
        )
        logger.info(f"{platform} stats for tenant {ctx.tenant_id}: {page.total} records")
        return Response({
            'success': True,
            'leads': page.records,
            'nextPageId': page.next_page_id,
            'total': page.total,
        })


class AccountConnectionViewSet(mixins.ListModelMixin,
                               mixins.CreateModelMixin,
                               mixins.RetrieveModelMixin,
                               mixins.DestroyModelMixin,
                               viewsets.GenericViewSet):
    serializer_class = AccountConnectionSerializer
    queryset = AccountConnection.objects.all()

    def get_queryset(self):
        return AccountConnection.objects.for_tenant(self.request.user.tenant_id).connected()

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        connection, result = services.connect_account(
            AccountContext.from_request(request),
            data['platform'],
            data['credentials'],
            account_id=data.get('account_id', ''),
            account_name=data.get('account_name', ''),
        )
        body = self.get_serializer(connection).data
        body['verification'] = result.to_dict()
        return Response(body, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        services.disconnect_account(AccountContext.from_request(request), kwargs['pk'])
        return Response(status=status.HTTP_204_NO_CONTENT)
