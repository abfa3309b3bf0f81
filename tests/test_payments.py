from cms_backend.payments import PayPalAdapter, StripeAdapter, get_payment_processor

KEYS = {'success', 'provider', 'amount', 'currency', 'transactionId'}


def test_stripe_adapter():
    result = StripeAdapter().pay(100, 'USD')
    assert result['success'] is True
    assert result['provider'] == 'Stripe'
    assert result['amount'] == 100
    assert result['transactionId']


def test_paypal_adapter():
    result = PayPalAdapter().pay(200, 'EUR')
    assert result['success'] is True
    assert result['provider'] == 'PayPal'
    assert result['amount'] == 200
    assert result['currency'] == 'EUR'


def test_adapters_share_result_shape():
    assert set(StripeAdapter().pay(50, 'USD')) == KEYS
    assert set(PayPalAdapter().pay(50, 'USD')) == KEYS


def test_processor_selection():
    assert isinstance(get_payment_processor('stripe'), StripeAdapter)
    assert isinstance(get_payment_processor('paypal'), PayPalAdapter)
    assert isinstance(get_payment_processor(None), PayPalAdapter)
