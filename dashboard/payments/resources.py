"""Payment methods accepted at the tenant's branches"""
from dashboard.core.registry import ACTIVE, ACTIVE_STATUSES, Resource, register

from .serializers import PAYMENT_TYPES, PaymentMethodSerializer


class PaymentMethodResource(Resource):
    name = 'payment-methods'
    label = 'Payment methods'
    path = '/t/payment-methods'
    search_fields = ('name', 'payment_type', 'tax_type', 'display_id')
    filter_choices = {'payment_type': PAYMENT_TYPES, 'tax_type': None, 'status': ACTIVE_STATUSES}
    serializer_class = PaymentMethodSerializer
    payload_map = {
        'payment_type': 'paymentType',
        'tax_type': 'taxType',
        'tax_percentage': 'taxPercentage',
        'created_date': 'createdAt',
        'last_used': 'lastUsedAt',
    }
    export_columns = (
        'display_id', 'name', 'payment_type', 'tax_type', 'tax_percentage', 'status', 'created_date', 'last_used',
    )

    def summarize(self, records):
        by_type = {}
        for record in records:
            payment_type = record.get('payment_type')
            if payment_type:
                by_type[payment_type] = by_type.get(payment_type, 0) + 1
        return {
            'total': len(records),
            'active': sum(1 for r in records if r.get('status') == ACTIVE),
            'by_type': by_type,
        }


register(PaymentMethodResource())
