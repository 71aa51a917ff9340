"""Checkout lifecycle: cart -> sequential orders -> demo payment -> confirmed.

Failures never lose the cart before the orders exist. A retry after a
partial failure only submits the quantities that still have no order, and
only ordered quantities are taken out of the cart. Paying never touches the
cart: lines added while an order awaits payment belong to the next checkout.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional

from storefront.checkout.states import BUSY_STATES, PAYABLE_STATES, CheckoutSession, CheckoutState
from storefront.errors import CheckoutStateError, GatewayError, PaymentValidationError
from storefront.services.cart_store import CartStore
from storefront.services.orders import submit_orders
from storefront.services.payment import PaymentForm, PaymentSimulator, PaymentState

logger = logging.getLogger(__name__)


class CheckoutFlow:
    def __init__(
        self,
        cart: CartStore,
        gateway,
        user_id: Any = None,
        payment: Optional[PaymentSimulator] = None,
    ):
        self.cart = cart
        self.gateway = gateway
        self.user_id = user_id
        if payment is not None and payment.cart is not None:
            raise ValueError("checkout payment must not clear the cart on its own")
        self.payment = payment or PaymentSimulator(gateway)
        self.session = CheckoutSession()

    @property
    def state(self) -> CheckoutState:
        return self.session.state

    def _set_state(self, state: CheckoutState) -> None:
        logger.info("Checkout %s -> %s", self.session.state.value, state.value)
        self.session.state = state

    async def checkout(self, user_id: Any = None) -> CheckoutSession:
        state = self.session.state
        if state in BUSY_STATES or state == CheckoutState.AWAITING_PAYMENT:
            raise CheckoutStateError("checkout", state.value)
        if len(self.cart) == 0:
            return self.session

        if state != CheckoutState.FAILED_PARTIAL:
            self.session = CheckoutSession()
        session = self.session
        session.error = None
        self._set_state(CheckoutState.SUBMITTING)

        # после частичного сбоя досылаем только то, на что заказа ещё нет
        covered = session.submitted_quantities
        pending = []
        for line in self.cart.lines:
            missing = line.quantity - covered.get(line.product_id, 0)
            if missing > 0:
                pending.append(replace(line, quantity=missing))
            elif missing < 0:
                logger.warning(
                    "Product %s was lowered to %s after %s were ordered; the order stays as is",
                    line.product_id,
                    line.quantity,
                    covered[line.product_id],
                )

        uid = self.user_id if user_id is None else user_id
        try:
            result = await submit_orders(pending, uid, self.gateway)
        except BaseException:
            self._set_state(CheckoutState.FAILED_PARTIAL)
            raise

        for line in pending[: result.submitted_count]:
            covered[line.product_id] = covered.get(line.product_id, 0) + line.quantity
        session.submitted_order_ids.extend(result.order_ids)
        if result.last_order_id is not None:
            session.last_order_id = result.last_order_id

        if not result.ok:
            session.error = str(result.error)
            self._set_state(CheckoutState.FAILED_PARTIAL)
            return session

        # заказы созданы, только теперь убираем заказанное из корзины
        self.cart.release_ordered(covered)
        self._set_state(CheckoutState.AWAITING_PAYMENT)
        return session

    async def pay(self, form: PaymentForm) -> CheckoutSession:
        session = self.session
        previous = session.state
        if previous not in PAYABLE_STATES:
            raise CheckoutStateError("pay", previous.value)

        self._set_state(CheckoutState.PAYING)
        try:
            path = await self.payment.pay(session.last_order_id, form)
        except PaymentValidationError:
            session.state = previous
            raise
        except GatewayError as e:
            session.error = str(e)
            self._set_state(CheckoutState.FAILED_PAYMENT)
            return session
        except BaseException:
            session.state = previous
            raise

        session.error = None
        session.confirmation_path = path
        self._set_state(CheckoutState.CONFIRMED)
        return session

    def abandon(self) -> CheckoutSession:
        if self.session.state in BUSY_STATES:
            raise CheckoutStateError("abandon", self.session.state.value)
        self.session = CheckoutSession()
        self.payment.state = PaymentState.IDLE
        return self.session
