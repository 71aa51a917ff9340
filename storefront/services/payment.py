"""Demo payment gateway: validates card fields, waits, completes one order.

No money moves; the only remote effect is ``complete_order``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from storefront.config import settings
from storefront.constants import CONFIRMATION_PATH
from storefront.errors import GatewayError, PaymentValidationError
from storefront.utils.validators import card_number_error, cardholder_error, cvv_error, expiry_error

logger = logging.getLogger(__name__)


class PaymentState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class PaymentForm:
    card_number: str
    expiry: str
    cvv: str
    name: str


def validate_payment_form(form: PaymentForm) -> Dict[str, str]:
    checks = {
        "card_number": card_number_error(form.card_number),
        "expiry": expiry_error(form.expiry),
        "cvv": cvv_error(form.cvv),
        "name": cardholder_error(form.name),
    }
    return {k: msg for k, msg in checks.items() if msg}


class PaymentSimulator:
    def __init__(
        self,
        gateway,
        cart=None,
        delay: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.gateway = gateway
        self.cart = cart
        self.delay = settings.payment_delay if delay is None else delay
        self._sleep = sleep
        self.state = PaymentState.IDLE
        self.error: Optional[str] = None
        self.field_errors: Dict[str, str] = {}

    async def pay(self, order_id: Any, form: PaymentForm) -> str:
        """Returns the confirmation path for the paid order."""
        if self.state == PaymentState.PROCESSING:
            raise RuntimeError("payment is already being processed")

        self.state = PaymentState.VALIDATING
        self.error = None
        self.field_errors = validate_payment_form(form)
        if self.field_errors:
            raise PaymentValidationError(self.field_errors)

        self.state = PaymentState.PROCESSING
        logger.info("Processing demo payment for order %s", order_id)
        try:
            await self._sleep(self.delay)
            await self.gateway.complete_order(order_id)
        except GatewayError as e:
            # корзину не трогаем: оплату можно повторить
            self.state = PaymentState.FAILED
            self.error = str(e)
            raise
        except BaseException:
            self.state = PaymentState.FAILED
            raise

        self.state = PaymentState.COMPLETED
        if self.cart is not None:
            self.cart.clear(force=True)
        logger.info("Order %s paid", order_id)
        return CONFIRMATION_PATH.format(order_id=order_id)
