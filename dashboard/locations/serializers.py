from rest_framework import serializers

BRANCH_STATUSES = ('active', 'inactive')
TIME_PATTERN = r'^([01]\d|2[0-3]):[0-5]\d$'


class BranchSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    code = serializers.CharField(max_length=50, required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=BRANCH_STATUSES, default='active')
    address_line = serializers.CharField(required=False, allow_blank=True)
    city = serializers.CharField(required=False, allow_blank=True)
    country = serializers.CharField(required=False, allow_blank=True)
    timezone = serializers.CharField(required=False, allow_blank=True)
    currency = serializers.CharField(max_length=3, required=False, allow_blank=True)
    tax_mode = serializers.ChoiceField(choices=['inclusive', 'exclusive'], required=False)
    tax_rate = serializers.FloatField(min_value=0, max_value=100, required=False)
    is_default = serializers.BooleanField(required=False)
    contact_email = serializers.EmailField(required=False, allow_blank=True)


class RestaurantProfileDraftSerializer(serializers.Serializer):
    """Unsaved restaurant profile form; every field optional"""
    name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    type = serializers.CharField(max_length=100, required=False, allow_blank=True)
    contact = serializers.CharField(max_length=50, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    website = serializers.URLField(required=False, allow_blank=True)
    opening_time = serializers.RegexField(TIME_PATTERN, required=False, allow_blank=True)
    closing_time = serializers.RegexField(TIME_PATTERN, required=False, allow_blank=True)
