from rest_framework import serializers

from core.dates import parse_stored_date
from core.exceptions import ValidationError
from .models import AccountConnection
from .platforms import Platform


class VerifyRequestSerializer(serializers.Serializer):
    apiKey = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True)


class StatsRequestSerializer(serializers.Serializer):
    startDate = serializers.CharField()
    endDate = serializers.CharField()
    campaignId = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    pageSize = serializers.IntegerField(required=False, default=100, min_value=1, max_value=1000)
    pageId = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate(self, data):
        for field in ('startDate', 'endDate'):
            try:
                parse_stored_date(data[field])
            except ValidationError as e:
                raise serializers.ValidationError({field: str(e)})
        if data['endDate'] < data['startDate']:
            raise serializers.ValidationError({'endDate': "endDate must not be before startDate"})
        return data


class AccountConnectionSerializer(serializers.ModelSerializer):
    credentials = serializers.JSONField(write_only=True)
    platform = serializers.ChoiceField(choices=Platform.choices)

    class Meta:
        model = AccountConnection
        fields = (
            'id', 'platform', 'account_id', 'account_name', 'credentials',
            'is_connected', 'created_at', 'updated_at',
        )
        read_only_fields = ('id', 'is_connected', 'created_at', 'updated_at')

    def validate_credentials(self, value):
        if not isinstance(value, dict) or not value:
            raise serializers.ValidationError("credentials must be a non-empty object")
        return value
