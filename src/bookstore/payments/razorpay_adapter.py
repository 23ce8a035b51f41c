"""Razorpay gateway adapter over its REST API."""

import requests
import structlog

from bookstore.payments.port import ChargeResult, PaymentGateway, PaymentGatewayError
from bookstore.payments.signing import signature_matches

logger = structlog.get_logger(__name__)

API_BASE_URL = "https://api.razorpay.com/v1"


class RazorpayGateway(PaymentGateway):
    def __init__(
        self,
        key_id: str,
        key_secret: str,
        webhook_secret: str,
        base_url: str = API_BASE_URL,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.key_id = key_id
        self.key_secret = key_secret
        self.webhook_secret = webhook_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def create_charge(self, amount_minor: int, currency: str, receipt: str) -> ChargeResult:
        try:
            response = self.session.post(
                f"{self.base_url}/orders",
                json={"amount": amount_minor, "currency": currency, "receipt": receipt},
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            logger.error("razorpay_unreachable", receipt=receipt, error=str(exc))
            raise PaymentGatewayError(f"Payment gateway is unavailable: {exc}") from exc

        if response.status_code >= 400:
            logger.error(
                "razorpay_charge_rejected",
                receipt=receipt,
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise PaymentGatewayError(f"Payment gateway rejected the charge ({response.status_code})")

        body = response.json()
        return ChargeResult(
            gateway_order_id=body["id"],
            amount_minor=body.get("amount", amount_minor),
            currency=body.get("currency", currency),
            status=body.get("status", "created"),
        )

    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:
        return signature_matches(payload, signature, self.webhook_secret)
