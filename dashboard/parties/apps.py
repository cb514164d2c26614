from django.apps import AppConfig


class PartiesConfig(AppConfig):
    name = 'dashboard.parties'
    label = 'parties'

    def ready(self):
        """Register the vendor resource when app is ready"""
        import dashboard.parties.resources  # noqa: F401
