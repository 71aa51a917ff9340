from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from storefront.constants import DEFAULT_STOCK


@dataclass(frozen=True)
class Product:
    """Catalog entry as last seen from the REST service."""

    id: Any
    name: str
    price: float
    stock: int
    image_url: str = ""
    description: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Product":
        stock = data.get("stock")
        return cls(
            id=data["id"],
            name=str(data.get("name") or ""),
            price=float(data.get("price") or 0),
            stock=int(stock) if stock is not None else DEFAULT_STOCK,
            image_url=str(data.get("imageUrl") or ""),
            description=str(data.get("description") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "stock": self.stock,
            "imageUrl": self.image_url,
            "description": self.description,
        }


@dataclass
class CartLine:
    product_id: Any
    name: str
    unit_price: float
    stock: int  # snapshot at add-time
    quantity: int
    image_url: str = ""
    description: str = ""

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity

    @classmethod
    def from_product(cls, product: Product, quantity: int) -> "CartLine":
        return cls(
            product_id=product.id,
            name=product.name,
            unit_price=float(product.price),
            stock=int(product.stock),
            quantity=quantity,
            image_url=product.image_url,
            description=product.description,
        )

    def to_dict(self) -> Dict[str, Any]:
        # тот же вид, что и у товара из API + quantity
        return {
            "id": self.product_id,
            "name": self.name,
            "price": self.unit_price,
            "stock": self.stock,
            "quantity": self.quantity,
            "imageUrl": self.image_url,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["CartLine"]:
        """Rehydrate a persisted line; returns None for lines that cannot be kept."""
        if "id" not in data:
            return None
        try:
            stock = data.get("stock")
            stock = int(stock) if stock is not None else DEFAULT_STOCK
            qty = int(data.get("quantity") or 1)
            price = float(data.get("price") or 0)
        except (TypeError, ValueError):
            return None
        if stock <= 0:
            return None
        return cls(
            product_id=data["id"],
            name=str(data.get("name") or ""),
            unit_price=price,
            stock=stock,
            quantity=min(max(qty, 1), stock),
            image_url=str(data.get("imageUrl") or ""),
            description=str(data.get("description") or ""),
        )


@dataclass(frozen=True)
class Totals:
    subtotal: float
    shipping: float
    discount: float
    total: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "subtotal": self.subtotal,
            "shipping": self.shipping,
            "discount": self.discount,
            "total": self.total,
        }
