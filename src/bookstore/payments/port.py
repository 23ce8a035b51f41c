"""Payment gateway port (abstract interface).

Checkout only needs two things from a gateway: open a charge for an order
and tell whether a webhook really came from the gateway. Adapters implement
this contract so the HTTP layer never depends on a specific provider.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class PaymentGatewayError(Exception):
    """The gateway could not be reached or refused the request."""


@dataclass(frozen=True)
class ChargeResult:
    """A charge opened at the gateway, awaiting customer payment."""

    gateway_order_id: str
    amount_minor: int
    currency: str
    status: str = "created"


class PaymentGateway(ABC):
    @abstractmethod
    def create_charge(self, amount_minor: int, currency: str, receipt: str) -> ChargeResult:
        """Open a charge for ``amount_minor`` (cents, paise...). Raise PaymentGatewayError on failure."""
        ...

    @abstractmethod
    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:
        """Check ``signature`` against the raw webhook body."""
        ...


def to_minor_units(amount: float) -> int:
    return int(round(amount * 100))
