from rest_framework import serializers

STAFF_STATUSES = ('active', 'inactive', 'suspended')
PIN_REGEX = r'^\d{4,6}$'
PIN_ERROR = 'PIN must be 4 to 6 digits.'


class StaffSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    password = serializers.CharField(min_length=6, required=False, write_only=True)
    position = serializers.CharField(max_length=100, required=False, allow_blank=True)
    roles = serializers.ListField(child=serializers.CharField(max_length=50), default=list)
    branch_ids = serializers.ListField(child=serializers.CharField(), default=list)
    pin = serializers.RegexField(PIN_REGEX, required=False, error_messages={'invalid': PIN_ERROR})
    status = serializers.ChoiceField(choices=STAFF_STATUSES, default='active')

    def validate(self, attrs):
        if self.instance is None and not attrs.get('password'):
            raise serializers.ValidationError({'password': 'A password is required for new staff.'})
        return attrs


class StaffStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=STAFF_STATUSES)
    branch_id = serializers.CharField(required=False, allow_blank=True)


class StaffPinSerializer(serializers.Serializer):
    pin = serializers.RegexField(PIN_REGEX, error_messages={'invalid': PIN_ERROR})
    branch_id = serializers.CharField(required=False, allow_blank=True)
