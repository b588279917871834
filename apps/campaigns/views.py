import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.authentication.context import AccountContext
from .drafts import FormDraft
from .metrics import calculate_metrics, campaign_defaults, project_profit
from .models import Campaign
from .serializers import CampaignSerializer, ProjectionRequestSerializer, DraftSerializer

logger = logging.getLogger(__name__)


class CampaignViewSet(viewsets.ModelViewSet):
    serializer_class = CampaignSerializer
    queryset = Campaign.objects.all()

    def get_queryset(self):
        return Campaign.objects.filter(tenant_id=self.request.user.tenant_id)

    def perform_create(self, serializer):
        campaign = serializer.save(tenant_id=self.request.user.tenant_id)
        logger.info(f"Campaign {campaign.pk} created for tenant {campaign.tenant_id}")

    @action(detail=True, methods=['get'])
    def metrics(self, request, pk=None):
        """Cost per lead, CPA, profit and ROI from the stats snapshot."""
        campaign = self.get_object()
        metrics = calculate_metrics(campaign.leads, campaign.cases, campaign.revenue, campaign.ad_spend)
        return Response({
            'campaign_id': campaign.pk,
            'metrics': metrics.to_dict(),
            'stats_synced_at': campaign.stats_synced_at,
        })

    @action(detail=True, methods=['post'])
    def projection(self, request, pk=None):
        """Cases, leads and spend needed to reach a target profit."""
        campaign = self.get_object()
        serializer = ProjectionRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        defaults = campaign_defaults(campaign)
        projection = project_profit(
            target_profit=data['targetProfit'],
            case_value=data.get('caseValue', defaults['case_value']),
            conversion_rate=data.get('conversionRate', defaults['conversion_rate']),
            cost_per_lead=data.get('costPerLead', defaults['cost_per_lead']),
            start_date=data.get('startDate'),
            end_date=data.get('endDate'),
        )
        return Response({'success': True, 'campaign_id': campaign.pk, 'projection': projection.to_dict()})


class FormDraftView(APIView):
    """Server copy of an in-progress dashboard form."""

    def _draft(self, request, key):
        ctx = AccountContext.from_request(request)
        return FormDraft(f"{ctx.tenant_id}:{ctx.user_id}:{key}")

    def get(self, request, key):
        draft = self._draft(request, key)
        if not draft.has_saved_data():
            return Response({'success': True, 'data': None})
        data = draft.load()
        return Response({'success': True, 'data': data, 'lastSaved': draft.last_saved})

    def put(self, request, key):
        serializer = DraftSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with self._draft(request, key) as draft:
            draft.update(**serializer.validated_data['data'])
        return Response({'success': True, 'data': draft.data, 'lastSaved': draft.last_saved})

    def delete(self, request, key):
        self._draft(request, key).discard()
        return Response(status=status.HTTP_204_NO_CONTENT)
