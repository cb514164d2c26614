"""Branches of the tenant"""
from dashboard.core.cache_utils import invalidate_branch_cache
from dashboard.core.registry import Resource, register

from .serializers import BRANCH_STATUSES, BranchSerializer

ADDRESS_FIELDS = {'address_line': 'line', 'city': 'city', 'country': 'country'}
TAX_FIELDS = {'tax_mode': 'mode', 'tax_rate': 'rate'}


class BranchResource(Resource):
    name = 'branches'
    label = 'Branches'
    path = '/t/branches'
    search_fields = ('name', 'code', 'city')
    filter_choices = {'status': BRANCH_STATUSES, 'city': None}
    serializer_class = BranchSerializer
    payload_map = {
        'status': 'status',
        'is_default': 'isDefault',
        'contact_email': 'contactEmail',
    }
    export_columns = ('display_id', 'name', 'code', 'city', 'country', 'status', 'is_default')

    def to_record(self, raw, index):
        record = super().to_record(raw, index)
        address = raw.get('address') if isinstance(raw, dict) else None
        if isinstance(address, dict):
            for field, key in ADDRESS_FIELDS.items():
                record[field] = address.get(key)
        tax = raw.get('tax') if isinstance(raw, dict) else None
        if isinstance(tax, dict):
            for field, key in TAX_FIELDS.items():
                record[field] = tax.get(key)
        return record

    def to_payload(self, data, scope=None):
        nested = {'address': ADDRESS_FIELDS, 'tax': TAX_FIELDS}
        flat = {k: v for k, v in data.items() if k not in ADDRESS_FIELDS and k not in TAX_FIELDS}
        payload = super().to_payload(flat, scope)
        for backend_key, fields in nested.items():
            values = {key: data[field] for field, key in fields.items() if field in data}
            if values:
                payload[backend_key] = values
        return payload

    def after_write(self, client, scope=None):
        # Codes and names may have changed
        invalidate_branch_cache(client.session.tenant_header)


register(BranchResource())
