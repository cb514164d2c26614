from rest_framework import serializers

from dashboard.core.registry import ACTIVE_STATUSES

PAYMENT_TYPES = ('Cash', 'Card', 'Online')


class PaymentMethodSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    payment_type = serializers.ChoiceField(choices=PAYMENT_TYPES)
    tax_type = serializers.CharField(max_length=50, required=False, allow_blank=True)
    tax_percentage = serializers.FloatField(min_value=0, max_value=100, default=0)
    status = serializers.ChoiceField(choices=ACTIVE_STATUSES, default='Active')
