from rest_framework import serializers

from dashboard.core.registry import ACTIVE_STATUSES

VARIATION_TYPES = ('size', 'flavor', 'crust', 'custom')
SOURCE_TYPES = ('inventory', 'recipe')


class IngredientSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    sku = serializers.CharField(max_length=100, required=False, allow_blank=True)
    unit = serializers.CharField(max_length=50)
    status = serializers.ChoiceField(choices=ACTIVE_STATUSES, default='Active')
    description = serializers.CharField(required=False, allow_blank=True)
    min_threshold = serializers.FloatField(min_value=0, default=0)
    cost_per_unit = serializers.FloatField(min_value=0, required=False)
    priority = serializers.IntegerField(min_value=0, default=0)


class CategorySerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=ACTIVE_STATUSES, default='Active')
    priority = serializers.IntegerField(min_value=0, default=0)
    parent_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class VariationIngredientSerializer(serializers.Serializer):
    source_type = serializers.ChoiceField(choices=SOURCE_TYPES, default='inventory')
    source_id = serializers.CharField()
    name = serializers.CharField(required=False, allow_blank=True)
    quantity = serializers.FloatField(min_value=0)
    unit = serializers.CharField(max_length=50)
    cost_per_unit = serializers.FloatField(min_value=0, required=False)


class RecipeVariationSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True)
    type = serializers.ChoiceField(choices=VARIATION_TYPES)
    recipe_ids = serializers.ListField(child=serializers.CharField(), required=False)
    size_multiplier = serializers.FloatField(min_value=0, required=False)
    base_cost_adjustment = serializers.FloatField(required=False)
    crust_type = serializers.CharField(required=False, allow_blank=True)
    ingredients = VariationIngredientSerializer(many=True, required=False)
    status = serializers.ChoiceField(choices=ACTIVE_STATUSES, default='Active')

    def validate(self, attrs):
        if attrs.get('type') == 'crust' and not attrs.get('crust_type') and not self.partial:
            raise serializers.ValidationError({'crust_type': 'Crust variations need a crust type.'})
        return attrs
