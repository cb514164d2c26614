from django.apps import AppConfig


class LocationsConfig(AppConfig):
    name = 'dashboard.locations'
    label = 'locations'

    def ready(self):
        """Register branch resources when app is ready"""
        import dashboard.locations.resources  # noqa: F401
