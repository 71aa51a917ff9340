from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from storefront.config import settings
from storefront.constants import PROMO_CODES
from storefront.errors import InvalidPromoCode
from storefront.models import Totals

logger = logging.getLogger(__name__)


def evaluate_promo(code: str) -> float:
    discount = PROMO_CODES.get((code or "").strip().upper())
    if discount is None:
        raise InvalidPromoCode(code)
    return discount


def calc_totals(subtotal: float, discount: float = 0.0) -> Totals:
    subtotal = round(subtotal, settings.decimals)
    shipping = settings.shipping_fee if subtotal > 0 else 0.0
    total = max(0.0, round(subtotal + shipping - discount, settings.decimals))
    return Totals(subtotal=subtotal, shipping=shipping, discount=discount, total=total)


@dataclass
class PromotionState:
    code: Optional[str] = None
    discount: float = 0.0

    def apply(self, code: str) -> float:
        """Replace the current promotion; an invalid code resets the discount and re-raises."""
        try:
            discount = evaluate_promo(code)
        except InvalidPromoCode:
            self.reset()
            logger.info("Promo code rejected: %r", code)
            raise
        self.code = code.strip().upper()
        self.discount = discount
        return discount

    def reset(self) -> None:
        self.code = None
        self.discount = 0.0
