"""Payment intent service.

Checkout asks the payment provider for an intent covering the order total and
hands its client secret back to the browser, which completes the charge.
FakePaymentIntentService stands in for the provider during development.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from uuid import uuid4

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PaymentIntent:
    id: str
    client_secret: str
    amount: int
    currency: str


class PaymentIntentService(ABC):
    """Abstract payment provider interface."""

    @abstractmethod
    async def create_intent(self, amount: int, currency: str) -> PaymentIntent:
        """Create an intent for ``amount`` (smallest currency unit)."""
        ...

    @abstractmethod
    async def cancel_intent(self, intent_id: str) -> None:
        """Void an intent that will never be paid."""
        ...


class FakePaymentIntentService(PaymentIntentService):
    """Fake provider; never makes a network call and keeps nothing between calls."""

    async def create_intent(self, amount: int, currency: str) -> PaymentIntent:
        intent_id = f"pi_fake_{uuid4().hex[:16]}"
        return PaymentIntent(
            id=intent_id,
            client_secret=f"{intent_id}_secret_{uuid4().hex[:12]}",
            amount=amount,
            currency=currency,
        )

    async def cancel_intent(self, intent_id: str) -> None:
        logger.debug("fake_payment_intent_cancelled", payment_intent_id=intent_id)
