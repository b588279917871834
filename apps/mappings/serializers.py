from rest_framework import serializers

from apps.integrations.platforms import Platform

ACTIONS = (
    'list-available-campaigns',
    'create-mapping',
    'delete-mapping',
    'list-mappings',
    'get-unmapped-count',
)

# fields each action cannot run without
REQUIRED_FIELDS = {
    'list-available-campaigns': ('googleAccountId',),
    'create-mapping': ('tortsharkCampaignId', 'googleAccountId', 'googleCampaignId'),
    'delete-mapping': ('tortsharkCampaignId', 'googleCampaignId'),
    'list-mappings': ('tortsharkCampaignId',),
    'get-unmapped-count': (),
}


class MappingRequestSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=ACTIONS, error_messages={'invalid_choice': 'Invalid action'})
    tortsharkCampaignId = serializers.CharField(required=False, allow_blank=True)
    googleAccountId = serializers.CharField(required=False, allow_blank=True)
    googleCampaignId = serializers.CharField(required=False, allow_blank=True)
    googleCampaignName = serializers.CharField(required=False, allow_blank=True, default='')
    platform = serializers.ChoiceField(choices=Platform.choices, required=False)

    def validate(self, data):
        missing = [f for f in REQUIRED_FIELDS[data['action']] if not data.get(f)]
        if missing:
            raise serializers.ValidationError(f"Missing required fields: {', '.join(missing)}")
        return data
