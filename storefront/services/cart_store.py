"""Stock-aware cart persisted in the local slot store.

Only this module reads or writes the ``cart`` and ``wishlist`` slots. Every
mutation rewrites the whole snapshot before returning, so there is no
deferred write to lose.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional

from storefront.constants import CART_KEY, WISHLIST_KEY
from storefront.db.sqlite import init_db, slot_delete, slot_get, slot_put
from storefront.errors import InsufficientStock, OutOfStock
from storefront.models import CartLine, Product, Totals
from storefront.services.pricing import calc_totals
from storefront.utils.validators import require_positive_number

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]

_DELTAS = {"inc": 1, "dec": -1, 1: 1, -1: -1}


class CartStore:
    def __init__(self, db_path: Optional[str] = None, confirm: Optional[Confirm] = None, key: str = CART_KEY):
        self.db_path = db_path
        self.key = key
        self._confirm = confirm
        init_db(db_path)
        self._lines: List[CartLine] = self._load()

    def _load(self) -> List[CartLine]:
        raw = slot_get(self.key, self.db_path) or []
        lines: List[CartLine] = []
        seen = set()
        for item in raw:
            line = CartLine.from_dict(item) if isinstance(item, dict) else None
            if line is None or line.product_id in seen:
                logger.warning("Dropping unusable cart entry: %r", item)
                continue
            seen.add(line.product_id)
            lines.append(line)
        return lines

    def _save(self) -> None:
        if self._lines:
            slot_put(self.key, [line.to_dict() for line in self._lines], self.db_path)
        else:
            # пустая корзина = нет записи
            slot_delete(self.key, self.db_path)

    def _confirmed(self, action: str) -> bool:
        if self._confirm is None:
            return True
        return bool(self._confirm(action))

    # ---------------- read ----------------

    @property
    def lines(self) -> List[CartLine]:
        return [CartLine(**vars(line)) for line in self._lines]

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)

    def get(self, product_id: Any) -> Optional[CartLine]:
        for line in self._lines:
            if line.product_id == product_id:
                return CartLine(**vars(line))
        return None

    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def compute_totals(self, discount: float = 0.0) -> Totals:
        subtotal = sum(line.line_total for line in self._lines)
        return calc_totals(subtotal, discount)

    # ---------------- mutate ----------------

    def add_item(self, product: Product, qty: int = 1) -> CartLine:
        require_positive_number(qty, "qty")
        if product.stock <= 0:
            raise OutOfStock(product.id)

        line = self._find(product.id)
        if line is None:
            line = CartLine.from_product(product, min(qty, product.stock))
            self._lines.append(line)
        else:
            wanted = line.quantity + qty
            if wanted > product.stock:
                raise InsufficientStock(product.id, product.stock, wanted)
            line.quantity = wanted
            line.stock = product.stock

        self._save()
        logger.info("Cart add: product=%s qty=%s", product.id, line.quantity)
        return CartLine(**vars(line))

    def update_quantity(self, product_id: Any, delta: Any) -> Optional[CartLine]:
        if delta not in _DELTAS:
            raise ValueError(f"delta must be +1/-1 or 'inc'/'dec', got {delta!r}")
        line = self._find(product_id)
        if line is None:
            return None
        # молча ограничиваем [1, stock], без ошибки
        line.quantity = min(max(line.quantity + _DELTAS[delta], 1), line.stock)
        self._save()
        return CartLine(**vars(line))

    def remove_item(self, product_id: Any) -> bool:
        if self._find(product_id) is None:
            return False
        if not self._confirmed("remove"):
            return False
        self._lines = [line for line in self._lines if line.product_id != product_id]
        self._save()
        logger.info("Cart remove: product=%s", product_id)
        return True

    def clear(self, force: bool = False) -> bool:
        if not force and self._lines and not self._confirmed("clear"):
            return False
        self._lines = []
        self._save()
        logger.info("Cart cleared")
        return True

    def release_ordered(self, ordered: Dict[Any, int]) -> int:
        """Take quantities that already have orders out of the cart.

        Whatever is left over was never ordered and stays. Returns the number of
        lines removed. Internal step of checkout, so ``confirm`` is not asked.
        """
        kept: List[CartLine] = []
        for line in self._lines:
            left = line.quantity - ordered.get(line.product_id, 0)
            if left > 0:
                line.quantity = left
                kept.append(line)
        removed = len(self._lines) - len(kept)
        self._lines = kept
        self._save()
        logger.info("Cart released %s ordered line(s), %s left", removed, len(kept))
        return removed

    def _find(self, product_id: Any) -> Optional[CartLine]:
        for line in self._lines:
            if line.product_id == product_id:
                return line
        return None


class WishlistStore:
    """Saved products, same slot shape as the cart."""

    def __init__(self, db_path: Optional[str] = None, key: str = WISHLIST_KEY):
        self.db_path = db_path
        self.key = key
        init_db(db_path)

    def items(self) -> List[Product]:
        raw = slot_get(self.key, self.db_path) or []
        return [Product.from_api(item) for item in raw if isinstance(item, dict) and "id" in item]

    def contains(self, product_id: Any) -> bool:
        return any(p.id == product_id for p in self.items())

    def toggle(self, product: Product) -> bool:
        """Add the product if missing, otherwise remove it. Returns True when it is now saved."""
        items = self.items()
        kept = [p for p in items if p.id != product.id]
        added = len(kept) == len(items)
        if added:
            kept.append(product)
        if kept:
            slot_put(self.key, [p.to_dict() for p in kept], self.db_path)
        else:
            slot_delete(self.key, self.db_path)
        return added
