"""Vendors (suppliers) of the tenant"""
from dashboard.core.registry import ACTIVE_STATUSES, Resource, register

from .serializers import VendorSerializer


class VendorResource(Resource):
    name = 'vendors'
    label = 'Vendors'
    path = '/t/vendors'
    search_fields = ('company_name', 'name', 'email', 'contact', 'display_id')
    filter_choices = {'status': ACTIVE_STATUSES, 'branch_id': None}
    serializer_class = VendorSerializer
    optimistic = True
    payload_map = {
        'company_name': 'companyName',
        'contact': 'phone',
        'branch_id': 'branchId',
    }
    export_columns = ('display_id', 'company_name', 'name', 'email', 'contact', 'address', 'status')


register(VendorResource())
