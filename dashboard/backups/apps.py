from django.apps import AppConfig


class BackupsConfig(AppConfig):
    name = 'dashboard.backups'
    label = 'backups'

    def ready(self):
        """Register the backup history resource when app is ready"""
        import dashboard.backups.resources  # noqa: F401
