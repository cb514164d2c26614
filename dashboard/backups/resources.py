"""Backup history"""
from dashboard.core.registry import Resource, register

from .serializers import BACKUP_KINDS, BACKUP_STATUSES

SIZE_UNITS = ('B', 'KB', 'MB', 'GB', 'TB')


def format_size(size):
    """2576980378 -> '2.4 GB'; text sizes pass through"""
    if not isinstance(size, (int, float)):
        return size or ''
    value = float(size)
    for unit in SIZE_UNITS:
        if value < 1024 or unit == SIZE_UNITS[-1]:
            return f"{int(value)} {unit}" if unit == 'B' else f"{value:.1f} {unit}"
        value /= 1024


class BackupResource(Resource):
    name = 'backups'
    label = 'Backups'
    path = '/t/backups'
    search_fields = ('name', 'created_at', 'includes')
    filter_choices = {'status': BACKUP_STATUSES, 'type': BACKUP_KINDS}
    writable = False
    payload_map = {
        'status': 'status',
        'created_at': 'createdAt',
        'run_type': 'backupType',
    }
    export_columns = ('display_id', 'name', 'created_at', 'type', 'status', 'size_display', 'includes')

    def to_record(self, raw, index):
        record = super().to_record(raw, index)
        if not isinstance(raw, dict):
            return record
        record['size_display'] = format_size(raw.get('size'))
        record['includes'] = list(raw.get('includes') or [])
        return record

    def to_payload(self, data, scope=None):
        payload = {'backupType': data.get('type', 'full'), 'type': 'manual'}
        if data.get('includes'):
            payload['includes'] = list(data['includes'])
        return payload

    def summarize(self, records):
        summary = super().summarize(records)
        completed = [r for r in records if r.get('status') == 'completed']
        summary['last_completed'] = max((r.get('created_at') or '' for r in completed), default=None)
        return summary


register(BackupResource())
