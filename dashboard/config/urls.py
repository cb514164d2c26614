"""
URL configuration for the tenant dashboard.

Every app mounts under /api/v1/. The generic resource endpoints live in
dashboard.core.urls; domain apps add the operations that do not fit the
list/create/update/delete shape.
"""
from django.urls import path, include

urlpatterns = [
    path('api/v1/', include('dashboard.core.urls')),
    path('api/v1/', include('dashboard.locations.urls')),
    path('api/v1/', include('dashboard.inventory.urls')),
    path('api/v1/', include('dashboard.menu.urls')),
    path('api/v1/', include('dashboard.staff.urls')),
    path('api/v1/', include('dashboard.backups.urls')),
    path('api/v1/', include('dashboard.reports.urls')),
]
