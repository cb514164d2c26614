from rest_framework import serializers

from dashboard.core.registry import ACTIVE_STATUSES

ITEM_TYPES = ('stock', 'service')
STOCK_LEVELS = ('critical', 'warning', 'normal')
ADJUSTMENT_TYPES = ('receive', 'waste', 'transfer', 'adjustment')


class InventoryItemSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    sku = serializers.CharField(max_length=100, required=False, allow_blank=True)
    type = serializers.ChoiceField(choices=ITEM_TYPES, default='stock')
    category_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    unit = serializers.CharField(max_length=50)
    purchase_unit = serializers.CharField(max_length=50, required=False, allow_blank=True)
    conversion = serializers.FloatField(min_value=0, required=False)
    track_stock = serializers.BooleanField(required=False)
    reorder_point = serializers.FloatField(min_value=0, default=0)
    quantity = serializers.FloatField(required=False)
    barcode = serializers.CharField(max_length=100, required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=ACTIVE_STATUSES, default='Active')

    def validate(self, attrs):
        # Service items carry no stock
        if attrs.get('type') == 'service' and attrs.get('track_stock'):
            raise serializers.ValidationError({'track_stock': 'Service items cannot track stock.'})
        return attrs


class AdjustmentLineSerializer(serializers.Serializer):
    item_id = serializers.CharField()
    qty = serializers.FloatField()
    unit = serializers.CharField(max_length=50)
    note = serializers.CharField(required=False, allow_blank=True)


class StockAdjustmentSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=ADJUSTMENT_TYPES)
    branch_id = serializers.CharField()
    lines = AdjustmentLineSerializer(many=True, allow_empty=False)
