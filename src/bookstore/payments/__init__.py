"""Payment gateway factory.

``build_gateway(domain)`` picks the adapter named by the domain's
``PAYMENT_GATEWAY`` setting:
- ``fake`` for development and testing
- ``razorpay`` for production
"""

from bookstore.payments.fake_adapter import FakeGateway
from bookstore.payments.port import PaymentGateway
from bookstore.payments.razorpay_adapter import RazorpayGateway


def build_gateway(domain) -> PaymentGateway:
    name = str(getattr(domain, "PAYMENT_GATEWAY", "fake")).lower()
    if name == "razorpay":
        return RazorpayGateway(
            key_id=domain.RAZORPAY_KEY_ID,
            key_secret=domain.RAZORPAY_KEY_SECRET,
            webhook_secret=domain.RAZORPAY_WEBHOOK_SECRET,
        )
    if name == "fake":
        return FakeGateway(webhook_secret=domain.RAZORPAY_WEBHOOK_SECRET)
    raise ValueError(f"Unknown payment gateway: {name}")
