"""Inventory calls outside the item CRUD: statistics and stock adjustments"""
import logging

from dashboard.core.envelope import Result, extract_message
from dashboard.core.exceptions import RequestError

logger = logging.getLogger(__name__)

STATS_PATH = '/t/inventory/stats'
ADJUST_PATH = '/t/inventory/stock/adjust'

# backend stats key -> dashboard key
STATS_FIELDS = {
    'total': 'total_items',
    'tracked': 'stock_items',
    'service': 'service_items',
    'low': 'low_stock',
    'outOfStock': 'out_of_stock',
    'active': 'active_items',
    'inactive': 'inactive_items',
}


def fetch_stats(client, category_id=None):
    try:
        body = client.get(STATS_PATH, params={'categoryId': category_id})
    except RequestError as e:
        logger.warning(f"Inventory stats failed: {e}")
        return Result.fail(e.message)

    raw = body if isinstance(body, dict) else {}
    for key in ('result', 'stats', 'data'):
        if isinstance(raw.get(key), dict):
            raw = raw[key]
            break
    stats = {name: raw.get(key, 0) or 0 for key, name in STATS_FIELDS.items()}
    return Result.ok(stats)


def adjust_stock(client, data):
    payload = {
        'type': data['type'],
        'branchId': data['branch_id'],
        'lines': [
            {
                'itemId': line['item_id'],
                'qty': line['qty'],
                'unit': line['unit'],
                **({'note': line['note']} if line.get('note') else {}),
            }
            for line in data['lines']
        ],
    }
    try:
        body = client.post(ADJUST_PATH, payload)
    except RequestError as e:
        logger.warning(f"Stock adjustment failed: {e}")
        return Result.fail(e.message)
    logger.info(f"Stock adjusted ({data['type']}) for {len(payload['lines'])} lines at branch {data['branch_id']}")
    return Result.ok(body.get('result') if isinstance(body, dict) else body,
                     extract_message(body, 'Stock adjusted successfully.'))
