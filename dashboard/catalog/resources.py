"""Catalog resources: ingredients, menu categories and recipe variations"""
from dashboard.core.registry import ACTIVE_STATUSES, Resource, register

from .serializers import (
    CategorySerializer, IngredientSerializer, RecipeVariationSerializer, VARIATION_TYPES,
)

# Variation ingredient line: record field -> backend field
LINE_FIELDS = {
    'source_type': 'sourceType',
    'source_id': 'sourceId',
    'name': 'nameSnapshot',
    'quantity': 'quantity',
    'unit': 'unit',
    'cost_per_unit': 'costPerUnit',
}


class IngredientResource(Resource):
    name = 'ingredients'
    label = 'Ingredients'
    path = '/t/catalog/ingredients'
    search_fields = ('name', 'sku', 'unit')
    filter_choices = {'status': ACTIVE_STATUSES, 'unit': None}
    serializer_class = IngredientSerializer
    optimistic = True
    payload_map = {
        'unit': 'uom',
        'min_threshold': 'minThreshold',
        'cost_per_unit': 'costPerUom',
    }
    export_columns = (
        'display_id', 'name', 'sku', 'unit', 'status', 'min_threshold', 'cost_per_unit', 'priority',
    )


class CategoryResource(Resource):
    name = 'categories'
    label = 'Categories'
    path = '/t/menu/categories'
    search_fields = ('name', 'description')
    filter_choices = {'status': ACTIVE_STATUSES}
    serializer_class = CategorySerializer
    payload_map = {
        'priority': 'sortIndex',
        'parent_id': 'parentId',
    }
    export_columns = ('display_id', 'name', 'description', 'status', 'priority')


class RecipeVariationResource(Resource):
    name = 'recipe-variations'
    label = 'Recipe variations'
    path = '/t/recipe-variations'
    search_fields = ('name', 'description', 'type')
    filter_choices = {'type': VARIATION_TYPES, 'status': ACTIVE_STATUSES}
    serializer_class = RecipeVariationSerializer
    payload_map = {
        'recipe_ids': 'recipeId',
        'size_multiplier': 'sizeMultiplier',
        'base_cost_adjustment': 'baseCostAdjustment',
        'crust_type': 'crustType',
        'total_cost': 'totalCost',
    }
    export_columns = ('display_id', 'name', 'type', 'size_multiplier', 'base_cost_adjustment', 'status')

    def to_record(self, raw, index):
        record = super().to_record(raw, index)
        recipe_ids = record.get('recipe_ids')
        if isinstance(recipe_ids, str):
            record['recipe_ids'] = [recipe_ids]
        record['ingredients'] = [
            {field: line.get(backend) for field, backend in LINE_FIELDS.items() if backend in line}
            for line in raw.get('ingredients') or [] if isinstance(line, dict)
        ]
        return record

    def to_payload(self, data, scope=None):
        payload = super().to_payload(data, scope)
        if 'ingredients' in data:
            payload['ingredients'] = [
                {LINE_FIELDS[field]: value for field, value in line.items()}
                for line in data['ingredients']
            ]
        return payload

    def summarize(self, records):
        summary = super().summarize(records)
        by_type = {}
        for record in records:
            by_type[record.get('type')] = by_type.get(record.get('type'), 0) + 1
        summary['by_type'] = by_type
        return summary


register(IngredientResource())
register(CategoryResource())
register(RecipeVariationResource())
