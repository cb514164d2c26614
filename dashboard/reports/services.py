"""
Usage statistics from order history.

Each order carries its payment method and lines of
{menuItemId, quantity, ingredients: [{ingredientId, quantity}]}; usage of a
record is the number of units sold that involved it.
"""
import logging

from django.conf import settings

from dashboard.core.envelope import Result, unwrap
from dashboard.core.exceptions import RequestError

logger = logging.getLogger(__name__)

ORDERS_PATH = '/t/orders'


def fetch_orders(client, branch_id=None, date_from=None, date_to=None):
    params = {'limit': settings.TENANT_API_LIST_LIMIT, 'branchId': branch_id}
    if date_from:
        params['from'] = date_from.isoformat()
    if date_to:
        params['to'] = date_to.isoformat()
    try:
        body = client.get(ORDERS_PATH, params=params)
    except RequestError as e:
        logger.warning(f"Loading orders for usage statistics failed: {e}")
        return Result.fail(e.message or 'Failed to load order history')
    return Result.ok([o for o in unwrap(body, many=True) if isinstance(o, dict)])


def _line_quantity(line):
    quantity = line.get('quantity')
    return quantity if isinstance(quantity, (int, float)) and quantity > 0 else 1


def _key(value):
    if isinstance(value, dict):
        value = value.get('_id') or value.get('id')
    return str(value) if value is not None else None


def count_payment_methods(orders):
    counts = {}
    for order in orders:
        key = _key(order.get('paymentMethodId'))
        if key:
            counts[key] = counts.get(key, 0) + 1
    return counts


def count_menu_items(orders):
    counts = {}
    for order in orders:
        for line in order.get('items') or []:
            key = _key(line.get('menuItemId'))
            if key:
                counts[key] = counts.get(key, 0) + _line_quantity(line)
    return counts


def count_ingredients(orders):
    counts = {}
    for order in orders:
        for line in order.get('items') or []:
            for used in line.get('ingredients') or []:
                key = _key(used.get('ingredientId'))
                if key:
                    counts[key] = counts.get(key, 0) + _line_quantity(line)
    return counts


COUNTERS = {
    'ingredients': count_ingredients,
    'payment-methods': count_payment_methods,
    'branch-menu': count_menu_items,
}


def usage_report(records, counts):
    """Attach usage_count to every record and pick the most and least used.

    Ties resolve to the first record in list order.
    """
    rows = [dict(record, usage_count=counts.get(record.get('id'), 0)) for record in records]
    return {
        'items': rows,
        'most_used': max(rows, key=lambda r: r['usage_count']) if rows else None,
        'least_used': min(rows, key=lambda r: r['usage_count']) if rows else None,
        'total_usage': sum(r['usage_count'] for r in rows),
    }
