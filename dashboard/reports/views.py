import logging

from rest_framework import status
from rest_framework.decorators import api_view

from dashboard.core.envelope import Result, envelope_response
from dashboard.core.exceptions import InvalidAction, UnknownResource
from dashboard.core.registry import get_resource
from dashboard.core.utils import get_client, get_manager, save_manager
from dashboard.locations.resolver import resolve_branch_id

from .serializers import UsageQuerySerializer
from .services import COUNTERS, fetch_orders, usage_report

logger = logging.getLogger(__name__)


@api_view(['GET'])
def usage_statistics(request, resource):
    """Usage counts of ingredients, payment methods or branch menu items from order history"""
    if resource not in COUNTERS:
        raise UnknownResource(f"No usage statistics for {resource}")
    serializer = UsageQuerySerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    query = serializer.validated_data

    res = get_resource(resource)
    branch = query.get('branch') or None
    if res.scoped and not branch:
        raise InvalidAction(f"{res.label or res.name} usage needs a branch")

    client = get_client(request)
    branch_id = None
    if branch:
        branch_id = resolve_branch_id(client, branch)
        if not branch_id:
            raise UnknownResource(f"Branch not found with identifier: {branch}")

    manager = get_manager(request, res, branch if res.scoped else None, client=client)
    if not manager.loaded:
        load_result = manager.load()
        if not load_result.success:
            return envelope_response(load_result, status.HTTP_502_BAD_GATEWAY)
        save_manager(request, manager, branch if res.scoped else None)

    orders = fetch_orders(client, branch_id=branch_id, date_from=query.get('date_from'),
                          date_to=query.get('date_to'))
    if not orders.success:
        return envelope_response(orders, status.HTTP_502_BAD_GATEWAY)

    report = usage_report(manager.filtered_items, COUNTERS[resource](orders.data))
    report.update({'resource': res.name, 'orders_counted': len(orders.data)})
    logger.info(f"Usage statistics for {res.name}: {len(orders.data)} orders, {report['total_usage']} uses")
    return envelope_response(Result.ok(report))
