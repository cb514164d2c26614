from django.urls import path
from .views import staff_pin, staff_status

urlpatterns = [
    path('staff/<str:pk>/status/', staff_status, name='staff-status'),
    path('staff/<str:pk>/pin/', staff_pin, name='staff-pin'),
]
