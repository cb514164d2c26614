from django.apps import AppConfig


class StaffConfig(AppConfig):
    name = 'dashboard.staff'
    label = 'staff'

    def ready(self):
        """Register the staff resource when app is ready"""
        import dashboard.staff.resources  # noqa: F401
