from django.apps import AppConfig


class MenuConfig(AppConfig):
    name = 'dashboard.menu'
    label = 'menu'

    def ready(self):
        """Register the branch menu resource when app is ready"""
        import dashboard.menu.resources  # noqa: F401
