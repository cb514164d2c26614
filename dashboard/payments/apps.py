from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    name = 'dashboard.payments'
    label = 'payments'

    def ready(self):
        """Register the payment method resource when app is ready"""
        import dashboard.payments.resources  # noqa: F401
