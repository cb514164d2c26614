"""Inventory items with a derived stock level"""
from dashboard.core.registry import ACTIVE_STATUSES, Resource, register

from .serializers import ITEM_TYPES, STOCK_LEVELS, InventoryItemSerializer

CRITICAL = 'critical'
WARNING = 'warning'
NORMAL = 'normal'


def _number(value):
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def stock_level(quantity, reorder_point):
    """critical at or below zero, warning at or below the reorder point, normal otherwise"""
    quantity = _number(quantity)
    if quantity <= 0:
        return CRITICAL
    if quantity <= _number(reorder_point):
        return WARNING
    return NORMAL


class InventoryItemResource(Resource):
    name = 'inventory-items'
    label = 'Inventory items'
    path = '/t/inventory/items'
    search_fields = ('name', 'sku', 'barcode')
    filter_choices = {
        'type': ITEM_TYPES,
        'status': ACTIVE_STATUSES,
        'stock_level': STOCK_LEVELS,
        'category_id': None,
    }
    serializer_class = InventoryItemSerializer
    optimistic = True
    payload_map = {
        'category_id': 'categoryId',
        'unit': 'baseUnit',
        'purchase_unit': 'purchaseUnit',
        'track_stock': 'trackStock',
        'reorder_point': 'reorderPoint',
    }
    export_columns = (
        'display_id', 'name', 'sku', 'type', 'unit', 'quantity', 'reorder_point', 'stock_level', 'status',
    )

    def to_record(self, raw, index):
        record = super().to_record(raw, index)
        # categoryId may come back populated as {_id, name}
        category = record.get('category_id')
        if isinstance(category, dict):
            record['category_id'] = self.record_id(category)
            record['category_name'] = category.get('name')
        record['stock_level'] = stock_level(record.get('quantity'), record.get('reorder_point'))
        return record

    def summarize(self, records):
        summary = super().summarize(records)
        levels = {level: 0 for level in STOCK_LEVELS}
        for record in records:
            levels[record.get('stock_level', NORMAL)] += 1
        summary['by_stock_level'] = levels
        return summary


register(InventoryItemResource())
