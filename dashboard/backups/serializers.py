from rest_framework import serializers

from dashboard.locations.serializers import TIME_PATTERN

BACKUP_STATUSES = ('completed', 'failed', 'in_progress')
BACKUP_KINDS = ('auto', 'manual')
RUN_TYPES = ('full', 'partial')
FREQUENCIES = ('daily', 'weekly', 'monthly')
LOCATIONS = ('local', 'cloud', 'both')

# settings flag -> data set label stored on the backup
INCLUDE_FLAGS = (
    ('include_menu_data', 'Menu'),
    ('include_order_history', 'Orders'),
    ('include_customer_data', 'Customers'),
    ('include_employee_data', 'Employees'),
    ('include_settings', 'Settings'),
    ('include_financial_data', 'Financial'),
)
DATA_SETS = tuple(label for _, label in INCLUDE_FLAGS)


class BackupRunSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=RUN_TYPES, default='full')
    includes = serializers.ListField(child=serializers.ChoiceField(choices=DATA_SETS), required=False)


class BackupSettingsSerializer(serializers.Serializer):
    """Automatic backup settings; updates are partial"""
    auto_backup_enabled = serializers.BooleanField(required=False)
    backup_frequency = serializers.ChoiceField(choices=FREQUENCIES, required=False)
    backup_time = serializers.RegexField(TIME_PATTERN, required=False)
    retention_period = serializers.IntegerField(min_value=1, max_value=365, required=False)
    backup_location = serializers.ChoiceField(choices=LOCATIONS, required=False)
    include_menu_data = serializers.BooleanField(required=False)
    include_order_history = serializers.BooleanField(required=False)
    include_customer_data = serializers.BooleanField(required=False)
    include_employee_data = serializers.BooleanField(required=False)
    include_settings = serializers.BooleanField(required=False)
    include_financial_data = serializers.BooleanField(required=False)
    cloud_storage_enabled = serializers.BooleanField(required=False)
    max_storage_size = serializers.IntegerField(min_value=1, required=False)
    auto_cleanup = serializers.BooleanField(required=False)
