from django.urls import path
from .views import (
    login, pin_login, logout, me,
    resource_index, resource_list_create, resource_load, resource_selection,
    resource_bulk_delete, resource_modal, resource_export, resource_detail,
)


def resource_patterns(prefix, name_prefix, kwargs=None):
    """Management endpoints for one resource URL prefix (action routes before the detail route)"""
    kwargs = kwargs or {}
    return [
        path(f'{prefix}/', resource_list_create, kwargs, name=f'{name_prefix}-list-create'),
        path(f'{prefix}/load/', resource_load, kwargs, name=f'{name_prefix}-load'),
        path(f'{prefix}/selection/', resource_selection, kwargs, name=f'{name_prefix}-selection'),
        path(f'{prefix}/bulk-delete/', resource_bulk_delete, kwargs, name=f'{name_prefix}-bulk-delete'),
        path(f'{prefix}/modal/', resource_modal, kwargs, name=f'{name_prefix}-modal'),
        path(f'{prefix}/export/', resource_export, kwargs, name=f'{name_prefix}-export'),
        path(f'{prefix}/<str:pk>/', resource_detail, kwargs, name=f'{name_prefix}-detail'),
    ]


urlpatterns = [
    # Auth endpoints
    path('auth/login/', login, name='login'),
    path('auth/pin-login/', pin_login, name='pin-login'),
    path('auth/logout/', logout, name='logout'),
    path('auth/me/', me, name='me'),

    # Generic resource endpoints
    path('resources/', resource_index, name='resource-index'),
] + resource_patterns('resources/<str:resource>', 'resource')
