from django.urls import path
from .views import inventory_stats, stock_adjust

urlpatterns = [
    path('inventory/stats/', inventory_stats, name='inventory-stats'),
    path('inventory/adjust/', stock_adjust, name='inventory-adjust'),
]
