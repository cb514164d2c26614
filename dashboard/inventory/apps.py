from django.apps import AppConfig


class InventoryConfig(AppConfig):
    name = 'dashboard.inventory'
    label = 'inventory'

    def ready(self):
        """Register inventory resources when app is ready"""
        import dashboard.inventory.resources  # noqa: F401
