"""
Paystack integration: hosted-checkout initialization and webhook signature
verification.
"""

import hashlib
import hmac
from typing import Any, Dict, Optional, Union

import requests

from booking_core.errors import GatewayError, InvalidSignature
from booking_core.logger import get_logger

logger = get_logger("paystack")


def verify_signature(raw_body: Union[bytes, str], signature: Optional[str], secret: str) -> None:
    """
    Check a webhook's `x-paystack-signature` header: the hex HMAC-SHA512 of
    the raw request body keyed with the webhook secret.

    Raises InvalidSignature on a missing or mismatching signature.
    """
    if not signature:
        raise InvalidSignature("Missing signature header")
    if not secret:
        logger.error("paystack.missing_webhook_secret")
        raise InvalidSignature("No webhook secret configured")

    if isinstance(raw_body, str):
        raw_body = raw_body.encode("utf-8")

    expected = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha512).hexdigest()
    # compare_digest only takes ASCII str, so compare raw bytes
    received = signature.strip().lower().encode("utf-8", "replace")
    if not hmac.compare_digest(expected.encode("ascii"), received):
        raise InvalidSignature("Signature mismatch")


class PaystackClient:
    """Thin wrapper over the Paystack REST API."""

    def __init__(
        self,
        secret_key: str,
        base_url: str = "https://api.paystack.co",
        callback_url: Optional[str] = None,
        timeout: int = 15,
        session: Optional[requests.Session] = None,
    ):
        self.secret_key = secret_key
        self.base_url = base_url.rstrip("/")
        self.callback_url = callback_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def initialize_transaction(self, email: str, amount: int, metadata: Dict[str, Any]) -> Dict[str, Any]:
        """
        Start a hosted checkout for `amount` (minor units, e.g. cents).

        Returns Paystack's `data` object, which carries `authorization_url`,
        `access_code` and `reference`. Raises GatewayError on any failure.
        """
        payload: Dict[str, Any] = {"email": email, "amount": amount, "metadata": metadata}
        if self.callback_url:
            payload["callback_url"] = self.callback_url

        url = f"{self.base_url}/transaction/initialize"
        try:
            res = self.session.post(
                url,
                json=payload,
                headers={
                    "Authorization": f"Bearer {self.secret_key}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("paystack.request_error", extra={"url": url, "error": str(e)})
            raise GatewayError(f"Paystack request failed: {e}") from e

        try:
            body = res.json()
        except ValueError:
            body = {"raw_response": res.text[:500]}

        if res.status_code != 200 or not body.get("status"):
            logger.error(
                "paystack.initialize_rejected",
                extra={"status_code": res.status_code, "response": body},
            )
            raise GatewayError(
                f"Paystack returned {res.status_code}: {body.get('message', 'no message')}"
            )

        data = body.get("data") or {}
        if not data.get("authorization_url"):
            logger.error("paystack.missing_authorization_url", extra={"response": body})
            raise GatewayError("Paystack response has no authorization_url")

        logger.info(
            "paystack.initialized",
            extra={"reference": data.get("reference"), "amount": amount},
        )
        return data
