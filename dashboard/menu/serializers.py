from rest_framework import serializers


class BranchMenuConfigSerializer(serializers.Serializer):
    """Branch-specific overrides for one catalog menu item"""
    menu_item_id = serializers.CharField(required=False)
    is_available = serializers.BooleanField(default=True)
    is_visible_in_pos = serializers.BooleanField(default=True)
    is_visible_in_online = serializers.BooleanField(default=True)
    selling_price = serializers.FloatField(min_value=0, required=False, allow_null=True)
    price_includes_tax = serializers.BooleanField(required=False)
    display_order = serializers.IntegerField(min_value=0, required=False)
    is_featured = serializers.BooleanField(required=False)
    is_recommended = serializers.BooleanField(required=False)
    labels = serializers.ListField(child=serializers.CharField(max_length=50), required=False)

    def validate(self, attrs):
        # Assigning needs the catalog item; updates address the config by id
        if self.instance is None and not self.partial and not attrs.get('menu_item_id'):
            raise serializers.ValidationError({'menu_item_id': 'This field is required to assign an item.'})
        return attrs
