# backend/utils/payment_client.py
import logging
import secrets
from typing import Optional

logger = logging.getLogger(__name__)

class FakePaymentClient:
    """Stand-in for a card payment provider; no network calls are made."""

    def __init__(self, currency: str = "usd"):
        self.currency = currency

    def create_payment_intent(self, amount: int, currency: Optional[str] = None) -> dict:
        # Same shape a real provider returns: an intent id plus a client secret for the frontend
        intent_id = f"pi_{secrets.token_hex(12)}"
        payment_intent = {
            "id": intent_id,
            "amount": amount,
            "currency": currency or self.currency,
            "client_secret": f"{intent_id}_secret_{secrets.token_hex(12)}",
        }
        logger.info("Created fake payment intent %s for %s %s", intent_id, amount, payment_intent["currency"])
        return payment_intent

payment_client = FakePaymentClient()
