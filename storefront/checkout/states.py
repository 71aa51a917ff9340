from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class CheckoutState(str, Enum):
    BROWSING = "browsing"
    SUBMITTING = "submitting"
    AWAITING_PAYMENT = "awaiting_payment"
    PAYING = "paying"
    CONFIRMED = "confirmed"
    FAILED_PARTIAL = "failed_partial"
    FAILED_PAYMENT = "failed_payment"


BUSY_STATES = {CheckoutState.SUBMITTING, CheckoutState.PAYING}
PAYABLE_STATES = {CheckoutState.AWAITING_PAYMENT, CheckoutState.FAILED_PAYMENT}


@dataclass
class CheckoutSession:
    state: CheckoutState = CheckoutState.BROWSING
    submitted_order_ids: List[Any] = field(default_factory=list)
    # product id -> quantity already covered by created orders
    submitted_quantities: Dict[Any, int] = field(default_factory=dict)
    last_order_id: Any = None
    error: Optional[str] = None
    confirmation_path: Optional[str] = None

    @property
    def submitted_count(self) -> int:
        return len(self.submitted_order_ids)

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "submitted_order_ids": list(self.submitted_order_ids),
            "submitted_count": self.submitted_count,
            "last_order_id": self.last_order_id,
            "error": self.error,
            "confirmation_path": self.confirmation_path,
        }
