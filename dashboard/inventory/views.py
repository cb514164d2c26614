from rest_framework import status
from rest_framework.decorators import api_view

from dashboard.core.envelope import Result, envelope_response
from dashboard.core.registry import get_resource
from dashboard.core.utils import get_client, get_manager, save_manager

from .serializers import StockAdjustmentSerializer
from .services import adjust_stock, fetch_stats


@api_view(['GET'])
def inventory_stats(request):
    """Inventory totals from the tenant API"""
    result = fetch_stats(get_client(request), category_id=request.query_params.get('category_id'))
    return envelope_response(result, status.HTTP_200_OK if result.success else status.HTTP_502_BAD_GATEWAY)


@api_view(['POST'])
def stock_adjust(request):
    """Receive, waste, transfer or adjust stock, then reload the item list"""
    serializer = StockAdjustmentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    client = get_client(request)
    result = adjust_stock(client, serializer.validated_data)
    if not result.success:
        return envelope_response(result, status.HTTP_502_BAD_GATEWAY)

    manager = get_manager(request, get_resource('inventory-items'), client=client)
    manager.load()
    save_manager(request, manager)
    body = Result.ok({'adjustment': result.data, 'state': manager.snapshot()}, result.message)
    return envelope_response(body)
