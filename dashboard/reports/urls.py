from django.urls import path
from .views import usage_statistics

urlpatterns = [
    path('reports/usage/<str:resource>/', usage_statistics, name='usage-statistics'),
]
