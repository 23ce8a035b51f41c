"""Configurable fake payment gateway for development and testing.

No external calls are made. Charges succeed unless configured otherwise, and
webhook signatures are checked with the same HMAC scheme as the real
gateway, so tests can sign payloads with :func:`sign`.
"""

from uuid import uuid4

from bookstore.payments.port import ChargeResult, PaymentGateway, PaymentGatewayError
from bookstore.payments.signing import signature_matches


class FakeGateway(PaymentGateway):
    def __init__(self, webhook_secret: str = "test-webhook-secret") -> None:
        self.webhook_secret = webhook_secret
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Gateway unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_charge(self, amount_minor: int, currency: str, receipt: str) -> ChargeResult:
        self.calls.append(
            {
                "method": "create_charge",
                "amount_minor": amount_minor,
                "currency": currency,
                "receipt": receipt,
            }
        )
        if not self.should_succeed:
            raise PaymentGatewayError(self.failure_reason)
        return ChargeResult(
            gateway_order_id=f"order_fake_{uuid4().hex[:14]}",
            amount_minor=amount_minor,
            currency=currency,
        )

    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:
        self.calls.append({"method": "verify_webhook_signature", "signature": signature})
        return signature_matches(payload, signature, self.webhook_secret)
