"""
Effective branch menu: catalog menu items merged with the branch's overrides.

Records are keyed by menu item id. Items without a branch config are
"unassigned"; assigning creates a config, unassigning deletes it, so the
list is always reloaded after a change.
"""
from dashboard.core.registry import Resource, register
from dashboard.locations.resolver import resolve_branch_id

from .serializers import BranchMenuConfigSerializer

ASSIGNED = 'assigned'
UNASSIGNED = 'unassigned'

# record field -> branch config field
CONFIG_FIELDS = {
    'is_available': 'isAvailable',
    'is_visible_in_pos': 'isVisibleInPOS',
    'is_visible_in_online': 'isVisibleInOnline',
    'selling_price': 'sellingPrice',
    'price_includes_tax': 'priceIncludesTax',
    'display_order': 'displayOrder',
    'is_featured': 'isFeatured',
    'is_recommended': 'isRecommended',
    'labels': 'labels',
}


def _first(*values, default=None):
    for value in values:
        if value is not None:
            return value
    return default


class BranchMenuResource(Resource):
    name = 'branch-menu'
    label = 'Branch menu'
    path = '/t/branch-menu'
    list_path = '/t/branch-menu/effective'
    search_fields = ('name', 'description', 'category')
    filter_choices = {'assignment': (ASSIGNED, UNASSIGNED), 'category': None}
    serializer_class = BranchMenuConfigSerializer
    scoped = True
    payload_map = dict(CONFIG_FIELDS, menu_item_id='menuItemId')
    export_columns = (
        'display_id', 'name', 'category', 'base_price', 'effective_price', 'assignment', 'is_available',
        'is_featured',
    )

    def resolve_scope(self, client, scope):
        return resolve_branch_id(client, scope)

    def list_params(self, scope=None):
        params = super().list_params(scope)
        params['branchId'] = scope
        return params

    def to_record(self, raw, index):
        if not isinstance(raw, dict):
            return super().to_record(raw, index)
        menu_item = raw.get('menuItem')
        if not isinstance(menu_item, dict):
            # A bare config, e.g. the body returned when assigning
            record = super().to_record(raw, index)
            record['config_id'] = record['id']
            record['id'] = str(raw.get('menuItemId') or record['id'])
            return record

        pricing = menu_item.get('pricing') or {}
        category = menu_item.get('category') or {}
        effective = raw.get('effective') or {}
        config = raw.get('branchConfig') if isinstance(raw.get('branchConfig'), dict) else {}
        base_price = pricing.get('basePrice') or 0

        record = {
            'id': self.record_id(menu_item) or (str(raw['menuItemId']) if raw.get('menuItemId') else None),
            'display_id': index + 1,
            'name': menu_item.get('name') or 'Unnamed Item',
            'description': menu_item.get('description') or '',
            'category': category.get('name') or '',
            'category_id': self.record_id(category) or '',
            'base_price': base_price,
            'currency': pricing.get('currency') or 'USD',
            'status': 'active' if menu_item.get('isActive') else 'inactive',
            'tags': menu_item.get('tags') or [],
            'config_id': self.record_id(config) if config else None,
            'assignment': ASSIGNED if config else UNASSIGNED,
            'effective_price': _first(effective.get('price'), base_price, default=0),
        }
        record['is_available'] = _first(config.get('isAvailable'), effective.get('isAvailable'), default=True)
        record['is_visible_in_pos'] = _first(config.get('isVisibleInPOS'), effective.get('isVisibleInPOS'),
                                             default=True)
        record['is_visible_in_online'] = _first(config.get('isVisibleInOnline'),
                                                effective.get('isVisibleInOnline'), default=True)
        record['selling_price'] = _first(config.get('sellingPrice'), effective.get('price'), base_price)
        record['price_includes_tax'] = _first(config.get('priceIncludesTax'), effective.get('priceIncludesTax'),
                                              pricing.get('priceIncludesTax'), default=False)
        record['display_order'] = _first(config.get('displayOrder'), effective.get('displayOrder'), default=0)
        record['is_featured'] = bool(config.get('isFeatured'))
        record['is_recommended'] = bool(config.get('isRecommended'))
        record['labels'] = config.get('labels') or []
        return record

    def remote_id(self, record):
        return record.get('config_id')

    def to_payload(self, data, scope=None):
        payload = super().to_payload(data, scope)
        if 'menuItemId' in payload:
            payload['branchId'] = scope
        return payload

    def summarize(self, records):
        assigned = [r for r in records if r.get('assignment') == ASSIGNED]
        return {
            'total': len(records),
            'assigned': len(assigned),
            'available': sum(1 for r in assigned if r.get('is_available')),
            'featured': sum(1 for r in assigned if r.get('is_featured')),
        }


register(BranchMenuResource())
