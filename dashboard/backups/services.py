"""Backup settings and restore calls"""
import logging

from dashboard.core.envelope import Result, extract_message, unwrap
from dashboard.core.exceptions import RequestError

logger = logging.getLogger(__name__)

SETTINGS_PATH = '/t/backups/settings'

# dashboard field -> backend field
SETTINGS_FIELDS = {
    'auto_backup_enabled': 'autoBackupEnabled',
    'backup_frequency': 'backupFrequency',
    'backup_time': 'backupTime',
    'retention_period': 'retentionPeriod',
    'backup_location': 'backupLocation',
    'include_menu_data': 'includeMenuData',
    'include_order_history': 'includeOrderHistory',
    'include_customer_data': 'includeCustomerData',
    'include_employee_data': 'includeEmployeeData',
    'include_settings': 'includeSettings',
    'include_financial_data': 'includeFinancialData',
    'cloud_storage_enabled': 'cloudStorageEnabled',
    'max_storage_size': 'maxStorageSize',
    'auto_cleanup': 'autoCleanup',
}


def _from_backend(raw):
    raw = raw if isinstance(raw, dict) else {}
    return {field: raw[key] for field, key in SETTINGS_FIELDS.items() if key in raw}


def fetch_settings(client):
    try:
        body = client.get(SETTINGS_PATH)
    except RequestError as e:
        logger.warning(f"Loading backup settings failed: {e}")
        return Result.fail(e.message or 'Failed to load backup settings')
    return Result.ok(_from_backend(unwrap(body)), extract_message(body))


def update_settings(client, data):
    payload = {SETTINGS_FIELDS[field]: value for field, value in data.items() if field in SETTINGS_FIELDS}
    try:
        body = client.put(SETTINGS_PATH, payload)
    except RequestError as e:
        logger.warning(f"Saving backup settings failed: {e}")
        return Result.fail(e.message or 'Failed to save settings. Please try again.')
    saved = _from_backend(unwrap(body)) or dict(data)
    logger.info(f"Backup settings updated: {', '.join(sorted(data))}")
    return Result.ok(saved, extract_message(body, 'Settings saved successfully!'))


def restore_backup(client, backup_id):
    try:
        body = client.post(f"/t/backups/{backup_id}/restore", {})
    except RequestError as e:
        logger.error(f"Restoring backup {backup_id} failed: {e}")
        return Result.fail(e.message or 'Failed to restore backup')
    logger.info(f"Backup {backup_id} restored")
    return Result.ok({'id': backup_id}, extract_message(body, 'Backup restored successfully!'))
