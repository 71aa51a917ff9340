"""Error types for the storefront core.

Validation errors are recovered by the caller; gateway errors are surfaced to
the checkout flow, which keeps partial progress.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class StorefrontError(Exception):
    """Base class for storefront errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message


class OutOfStock(StorefrontError):
    def __init__(self, product_id: Any):
        super().__init__(f"product {product_id} is out of stock")
        self.product_id = product_id


class InsufficientStock(StorefrontError):
    def __init__(self, product_id: Any, available: int, requested: int):
        super().__init__(
            f"not enough stock for product {product_id}: have {available}, need {requested}"
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


class InvalidPromoCode(StorefrontError):
    def __init__(self, code: str):
        super().__init__(f"invalid promo code: {code!r}")
        self.code = code


class PaymentValidationError(StorefrontError):
    """One message per rejected payment form field."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(errors.values()) or "invalid payment details")
        self.errors = dict(errors)


class CheckoutStateError(StorefrontError):
    def __init__(self, action: str, state: Any):
        super().__init__(f"cannot {action} while checkout is {state}")
        self.action = action
        self.state = state


class GatewayError(StorefrontError):
    """Error reported by (or while talking to) the remote REST service."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, cause)
        self.status_code = status_code
        self.detail = detail


class OrderCreationError(GatewayError):
    def __init__(self, product_id: Any, status_code: Optional[int] = None, detail: Optional[str] = None):
        msg = f"order for product {product_id} was rejected"
        if status_code is not None:
            msg = f"{msg} (HTTP {status_code})"
        super().__init__(msg, status_code=status_code, detail=detail)
        self.product_id = product_id


class PaymentFinalizationError(GatewayError):
    def __init__(self, order_id: Any, status_code: Optional[int] = None, detail: Optional[str] = None):
        msg = f"payment for order {order_id} could not be completed"
        if status_code is not None:
            msg = f"{msg} (HTTP {status_code})"
        super().__init__(msg, status_code=status_code, detail=detail)
        self.order_id = order_id


class NetworkError(GatewayError):
    """Transport-level failure: the request never got a response."""

    def __init__(self, cause: Exception):
        super().__init__("network error", cause=cause)
