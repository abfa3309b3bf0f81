"""Payment adapters for the demo checkout endpoint.

The two provider clients below stand in for vendor SDKs with their own
method names and result shapes. The adapters expose both through
`PaymentProcessor.pay(amount, currency)` with one result shape.
"""
import uuid
from typing import Any, Dict, Optional


class StripeClient:
    def process_stripe_payment(self, amount, currency) -> Dict[str, Any]:
        return {'success': True, 'provider': 'Stripe', 'amount': amount, 'currency': currency,
                'id': 'ch_' + uuid.uuid4().hex[:24]}


class PayPalClient:
    def make_paypal_payment(self, price, currency_code) -> Dict[str, Any]:
        return {'status': 'completed', 'service': 'PayPal', 'price': price, 'currencyCode': currency_code,
                'paymentId': 'PAYID-' + uuid.uuid4().hex[:20].upper()}


class PaymentProcessor:
    name = ''

    def pay(self, amount, currency) -> Dict[str, Any]:
        raise NotImplementedError


class StripeAdapter(PaymentProcessor):
    name = 'stripe'

    def __init__(self, client: Optional[StripeClient] = None):
        self.client = client or StripeClient()

    def pay(self, amount, currency) -> Dict[str, Any]:
        result = self.client.process_stripe_payment(amount, currency)
        return {
            'success': bool(result.get('success')),
            'provider': result.get('provider'),
            'amount': result.get('amount'),
            'currency': result.get('currency'),
            'transactionId': result.get('id'),
        }


class PayPalAdapter(PaymentProcessor):
    name = 'paypal'

    def __init__(self, client: Optional[PayPalClient] = None):
        self.client = client or PayPalClient()

    def pay(self, amount, currency) -> Dict[str, Any]:
        result = self.client.make_paypal_payment(amount, currency)
        return {
            'success': result.get('status') == 'completed',
            'provider': result.get('service'),
            'amount': result.get('price'),
            'currency': result.get('currencyCode'),
            'transactionId': result.get('paymentId'),
        }


def get_payment_processor(provider: Optional[str]) -> PaymentProcessor:
    """Stripe when asked for explicitly, PayPal otherwise."""
    if (provider or '').lower() == 'stripe':
        return StripeAdapter()
    return PayPalAdapter()
