from rest_framework import serializers


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    tenant = serializers.CharField(required=False, allow_blank=True)


class PinLoginSerializer(serializers.Serializer):
    pin = serializers.RegexField(r'^\d{4,6}$', write_only=True,
                                 error_messages={'invalid': 'PIN must be 4 to 6 digits.'})
    branch_id = serializers.CharField(required=False, allow_blank=True)
    tenant = serializers.CharField(required=False, allow_blank=True)


class SelectionSerializer(serializers.Serializer):
    """Either a list of ids with a checked flag, a select-all flag, or clear"""
    ids = serializers.ListField(child=serializers.CharField(), required=False)
    checked = serializers.BooleanField(required=False, default=True)
    all = serializers.BooleanField(required=False)
    clear = serializers.BooleanField(required=False)

    def validate(self, attrs):
        if 'ids' not in attrs and 'all' not in attrs and not attrs.get('clear'):
            raise serializers.ValidationError("Provide 'ids', 'all' or 'clear'.")
        return attrs


class ModalSerializer(serializers.Serializer):
    CREATE = 'create'
    EDIT = 'edit'
    CLOSE = 'close'

    action = serializers.ChoiceField(choices=[CREATE, EDIT, CLOSE])
    id = serializers.CharField(required=False)

    def validate(self, attrs):
        if attrs['action'] == self.EDIT and not attrs.get('id'):
            raise serializers.ValidationError({'id': 'This field is required to edit.'})
        return attrs
