from rest_framework import serializers

from dashboard.core.registry import ACTIVE_STATUSES


class VendorSerializer(serializers.Serializer):
    """Serializer for vendors: company, contact person and contact details are required"""
    company_name = serializers.CharField(max_length=200)
    name = serializers.CharField(max_length=200)
    email = serializers.EmailField()
    contact = serializers.CharField(max_length=30)
    address = serializers.CharField(required=False, allow_blank=True)
    branch_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    status = serializers.ChoiceField(choices=ACTIVE_STATUSES, default='Active')

    def validate_company_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Company name cannot be blank.')
        return value.strip()

    def validate_contact(self, value):
        if not value.strip():
            raise serializers.ValidationError('Contact number cannot be blank.')
        return value.strip()
