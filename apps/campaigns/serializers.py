from rest_framework import serializers

from core.dates import parse_stored_date
from core.exceptions import ValidationError
from .models import Campaign


class CampaignSerializer(serializers.ModelSerializer):
    tenant_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Campaign
        fields = '__all__'
        read_only_fields = (
            'account_id', 'external_campaign_id', 'stats_synced_at', 'created_at', 'updated_at',
        )

    def validate_name(self, value):
        request = self.context.get('request')
        if request and hasattr(request.user, 'tenant_id'):
            tenant_id = request.user.tenant_id

            existing = Campaign.objects.filter(tenant_id=tenant_id, name=value)
            # For updates, exclude current instance from the check
            if self.instance is not None and getattr(self.instance, 'pk', None):
                existing = existing.exclude(pk=self.instance.pk)

            if existing.first():
                raise serializers.ValidationError(
                    f"A campaign with name '{value}' already exists for this tenant."
                )

        return value


class ProjectionRequestSerializer(serializers.Serializer):
    targetProfit = serializers.FloatField(default=1000)
    caseValue = serializers.FloatField(required=False, min_value=0)
    conversionRate = serializers.FloatField(required=False)
    costPerLead = serializers.FloatField(required=False, min_value=0)
    startDate = serializers.CharField(required=False)
    endDate = serializers.CharField(required=False)

    def validate(self, data):
        for field in ('startDate', 'endDate'):
            if data.get(field):
                try:
                    parse_stored_date(data[field])
                except ValidationError as e:
                    raise serializers.ValidationError({field: str(e)})
        return data


class DraftSerializer(serializers.Serializer):
    data = serializers.DictField()
