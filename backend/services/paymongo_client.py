"""
PayMongo API client.

Only the call the webhook pipeline needs: turning a chargeable source into a
payment (POST /payments). Authenticates with HTTP Basic using the secret key
as username and an empty password.
"""
import logging
from typing import Optional

import httpx

from exceptions import PaymentProviderConfigError, PaymentProviderError

logger = logging.getLogger(__name__)


class PayMongoClient:
    """Thin async wrapper over the PayMongo REST API."""

    def __init__(self, secret_key: str, api_base: str, timeout: float = 20.0):
        self.secret_key = secret_key
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout

    def _auth(self) -> tuple[str, str]:
        if not self.secret_key:
            raise PaymentProviderConfigError(
                "PayMongo secret key must be set in .env (PAYMONGO_SECRET_KEY)"
            )
        return (self.secret_key, "")

    async def create_payment(
        self,
        *,
        source_id: str,
        amount: int,
        currency: str,
        description: Optional[str] = None,
    ) -> dict:
        """
        Charge a chargeable source.

        Args:
            source_id: PayMongo source ID (src_...)
            amount: Amount in centavos
            currency: ISO currency code (PayMongo accepts PHP)
            description: Optional statement description

        Returns:
            dict: the created payment resource ({"id": "pay_...", "attributes": {...}})
        """
        attributes = {
            "amount": amount,
            "currency": currency,
            "source": {"id": source_id, "type": "source"},
        }
        if description:
            attributes["description"] = description

        auth = self._auth()
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.api_base}/payments",
                    json={"data": {"attributes": attributes}},
                    auth=auth,
                )
        except httpx.HTTPError as e:
            logger.error(f"PayMongo request failed: {e}")
            raise PaymentProviderError("PayMongo request failed") from e

        if response.status_code >= 400:
            raise PaymentProviderError(
                f"PayMongo rejected payment creation: {_error_detail(response)}",
                status_code=response.status_code,
            )

        payment = response.json().get("data") or {}
        logger.info(f"  💳 PayMongo payment created: {payment.get('id')} from source {source_id}")
        return payment


def _error_detail(response: httpx.Response) -> str:
    """First error detail from a PayMongo error body, or the status line."""
    try:
        errors = response.json().get("errors") or []
    except ValueError:
        errors = []
    if errors and isinstance(errors[0], dict):
        return errors[0].get("detail") or errors[0].get("code") or str(response.status_code)
    return f"HTTP {response.status_code}"
