from django.apps import AppConfig


class CatalogConfig(AppConfig):
    name = 'dashboard.catalog'
    label = 'catalog'

    def ready(self):
        """Register catalog resources when app is ready"""
        import dashboard.catalog.resources  # noqa: F401
