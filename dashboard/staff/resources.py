"""Tenant staff members"""
from dashboard.core.registry import Resource, register

from .serializers import STAFF_STATUSES, StaffSerializer


class StaffResource(Resource):
    name = 'staff'
    label = 'Staff'
    path = '/t/staff'
    search_fields = ('name', 'email', 'phone')
    filter_choices = {'status': STAFF_STATUSES, 'branch_id': None}
    serializer_class = StaffSerializer
    optimistic = True
    payload_map = {
        'status': 'status',
        'name': 'fullName',
        'branch_ids': 'branchIds',
    }
    export_columns = ('display_id', 'name', 'email', 'phone', 'position', 'roles', 'status', 'branch_id')

    def to_record(self, raw, index):
        record = super().to_record(raw, index)
        if not isinstance(raw, dict):
            return record
        # Credentials never reach the session
        record.pop('password', None)
        record.pop('pin', None)
        branch_ids = [str(b) for b in raw.get('branchIds') or []]
        record['branch_ids'] = branch_ids
        record['branch_id'] = str(raw.get('branchId') or (branch_ids[0] if branch_ids else ''))
        record.setdefault('roles', [])
        return record


register(StaffResource())
