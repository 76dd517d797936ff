from typing import Any, Dict, Optional
import hashlib
import hmac

import httpx

from src.config import settings
from src.exceptions import ConfigError, GatewayError, NetworkError, ValidationError
from src.logger_config import logger

_STATUS_MESSAGES = {
    401: "Authentication failed - check payment gateway credentials",
    429: "Rate limit exceeded - please try again later",
}

class PaymentBridge:
    """Razorpay order creation and payment signature checks.

    Holds no state between calls; trust in a payment rests entirely on the
    gateway's HMAC signature.
    """

    def __init__(
        self,
        key_id: Optional[str] = None,
        key_secret: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.key_id = key_id if key_id is not None else settings.RAZORPAY_KEY_ID
        self.key_secret = key_secret if key_secret is not None else settings.RAZORPAY_KEY_SECRET
        self.api_url = (api_url or settings.RAZORPAY_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.PAYMENT_TIMEOUT_SECONDS
        self.transport = transport

    def create_order(
        self,
        amount_minor_units: int,
        currency: str = "INR",
        receipt: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create a gateway order for the given amount (paise for INR)"""

        if not isinstance(amount_minor_units, int) or amount_minor_units <= 0:
            raise ValidationError("Invalid amount")

        if not self.key_id or not self.key_secret:
            logger.error("Payment gateway credentials are not configured")
            raise ConfigError("Payment gateway not configured")

        payload = {"amount": amount_minor_units, "currency": currency}
        if receipt:
            payload["receipt"] = receipt

        try:
            with httpx.Client(
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = client.post(f"{self.api_url}/orders", json=payload)
        except httpx.TransportError as e:
            logger.error(f"Payment gateway unreachable: {e!r}")
            raise NetworkError("Network error - unable to connect to payment gateway") from e

        body = self._json_body(response)

        if not response.is_success:
            message = self._error_message(response.status_code, body)
            logger.error(f"Payment gateway rejected order ({response.status_code}): {message}")
            raise GatewayError(message, response.status_code)

        if body is None:
            raise GatewayError("Invalid response from payment gateway", response.status_code)

        logger.info(f"Created payment order {body.get('id')} for {amount_minor_units} {currency}")
        return body

    def verify_payment(self, order_id: str, payment_id: str, signature: str) -> bool:
        """Check the gateway's signature over ``order_id|payment_id``"""

        if not order_id or not payment_id or not signature:
            return False

        if not self.key_secret:
            raise ConfigError("Payment gateway not configured")

        expected = self.sign(order_id, payment_id)
        return hmac.compare_digest(expected.encode(), signature.encode())

    def sign(self, order_id: str, payment_id: str) -> str:
        message = f"{order_id}|{payment_id}".encode()
        return hmac.new(self.key_secret.encode(), message, hashlib.sha256).hexdigest()

    @staticmethod
    def _json_body(response: httpx.Response) -> Optional[Dict[str, Any]]:
        try:
            body = response.json()
        except ValueError:
            return None
        return body if isinstance(body, dict) else None

    @staticmethod
    def _error_message(status_code: int, body: Optional[Dict[str, Any]]) -> str:
        if status_code in _STATUS_MESSAGES:
            return _STATUS_MESSAGES[status_code]

        description = None
        if body and isinstance(body.get("error"), dict):
            description = body["error"].get("description")

        if description:
            return description
        if status_code == 400:
            return "Invalid request parameters"
        return "Order creation failed"

def get_payment_bridge() -> PaymentBridge:
    return PaymentBridge()
