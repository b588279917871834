from rest_framework import serializers

from apps.integrations.platforms import Platform
from core.dates import parse_stored_date
from core.exceptions import ValidationError


class CampaignStatsQuerySerializer(serializers.Serializer):
    startDate = serializers.CharField()
    endDate = serializers.CharField()
    platform = serializers.ChoiceField(choices=Platform.choices, required=False)

    def validate(self, data):
        for field in ('startDate', 'endDate'):
            try:
                parse_stored_date(data[field])
            except ValidationError as e:
                raise serializers.ValidationError({field: str(e)})
        if data['endDate'] < data['startDate']:
            raise serializers.ValidationError({'endDate': "endDate must not be before startDate"})
        return data
