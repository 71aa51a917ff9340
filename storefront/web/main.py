from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from fastapi import FastAPI, Form, Request
from fastapi.responses import JSONResponse, RedirectResponse

from storefront.checkout.flow import CheckoutFlow
from storefront.checkout.states import CheckoutState
from storefront.errors import (
    CheckoutStateError,
    GatewayError,
    PaymentValidationError,
    StorefrontError,
)
from storefront.services.cart_store import CartStore, WishlistStore
from storefront.services.catalog import CatalogSnapshot
from storefront.services.gateway import CatalogGateway, OrderGateway
from storefront.services.payment import PaymentForm, PaymentSimulator
from storefront.services.pricing import PromotionState
from storefront.utils.formatters import money

logger = logging.getLogger(__name__)


def _pid(raw: str) -> Any:
    # id из API обычно число, из URL приходит строкой
    return int(raw) if raw.isdigit() else raw


def create_app(
    db_path: Optional[str] = None,
    order_gateway: Optional[OrderGateway] = None,
    catalog: Optional[CatalogSnapshot] = None,
    payment_delay: Optional[float] = None,
    poll_catalog: bool = True,
) -> FastAPI:
    app = FastAPI(title="Storefront")

    cart = CartStore(db_path)
    wishlist = WishlistStore(db_path)
    orders = order_gateway or OrderGateway()
    catalog = catalog or CatalogSnapshot(CatalogGateway())
    promo = PromotionState()
    flow = CheckoutFlow(cart, orders, payment=PaymentSimulator(orders, delay=payment_delay))
    tasks: list[asyncio.Task] = []

    @app.on_event("startup")
    async def _startup() -> None:
        if poll_catalog:
            tasks.append(asyncio.create_task(catalog.refresh()))
            logger.info("Catalog polling started")

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        for t in tasks:
            t.cancel()

    @app.exception_handler(StorefrontError)
    async def _storefront_error(request: Request, exc: StorefrontError) -> JSONResponse:
        body: dict[str, Any] = {"ok": False, "error": str(exc), "kind": type(exc).__name__}
        if isinstance(exc, PaymentValidationError):
            body["fields"] = exc.errors
        if isinstance(exc, GatewayError):
            status = 502
        elif isinstance(exc, CheckoutStateError):
            status = 409
        else:
            status = 400
        return JSONResponse(body, status_code=status)

    @app.exception_handler(ValueError)
    async def _value_error(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse({"ok": False, "error": str(exc), "kind": "ValueError"}, status_code=400)

    async def _product(product_id: str):
        product = catalog.find(_pid(product_id))
        if product is None:
            await catalog.fetch()
            product = catalog.find(_pid(product_id))
        return product

    def _cart_view() -> dict[str, Any]:
        totals = cart.compute_totals(promo.discount)
        return {
            "ok": True,
            "items": [line.to_dict() for line in cart.lines],
            "count": cart.item_count(),
            "totals": totals.to_dict(),
            "total_text": money(totals.total),
            "discount_text": money(-totals.discount) if totals.discount else None,
            "promo": promo.code,
        }

    # ---------------- catalog ----------------

    @app.get("/products")
    async def products():
        if catalog.updated_at is None:
            await catalog.fetch()
        return {
            "products": [p.to_dict() for p in catalog.products],
            "updated_at": catalog.updated_at.isoformat() if catalog.updated_at else None,
        }

    # ---------------- cart ----------------

    @app.get("/cart")
    async def cart_show():
        return _cart_view()

    @app.post("/cart/items")
    async def cart_add(product_id: str = Form(...), quantity: int = Form(1)):
        product = await _product(product_id)
        if product is None:
            return JSONResponse({"ok": False, "error": f"product {product_id} not found"}, status_code=404)
        cart.add_item(product, quantity)
        return _cart_view()

    @app.post("/cart/items/{product_id}/inc")
    async def cart_inc(product_id: str):
        cart.update_quantity(_pid(product_id), "inc")
        return _cart_view()

    @app.post("/cart/items/{product_id}/dec")
    async def cart_dec(product_id: str):
        cart.update_quantity(_pid(product_id), "dec")
        return _cart_view()

    @app.delete("/cart/items/{product_id}")
    async def cart_remove(product_id: str):
        cart.remove_item(_pid(product_id))
        return _cart_view()

    @app.delete("/cart")
    async def cart_clear():
        cart.clear()
        promo.reset()
        return _cart_view()

    @app.post("/cart/promo")
    async def cart_promo(code: str = Form(...)):
        promo.apply(code)
        return _cart_view()

    # ---------------- wishlist ----------------

    @app.get("/wishlist")
    async def wishlist_show():
        return {"items": [p.to_dict() for p in wishlist.items()]}

    @app.post("/wishlist/{product_id}")
    async def wishlist_toggle(product_id: str):
        product = await _product(product_id)
        if product is None:
            return JSONResponse({"ok": False, "error": f"product {product_id} not found"}, status_code=404)
        saved = wishlist.toggle(product)
        return {"ok": True, "saved": saved}

    # ---------------- checkout ----------------

    @app.get("/checkout")
    async def checkout_show():
        return flow.session.to_dict()

    @app.post("/checkout")
    async def checkout_start(user_id: str = Form(...)):
        session = await flow.checkout(_pid(user_id))
        if session.state == CheckoutState.FAILED_PARTIAL:
            return JSONResponse(session.to_dict(), status_code=502)
        if session.state == CheckoutState.AWAITING_PAYMENT:
            promo.reset()
        return session.to_dict()

    @app.post("/checkout/pay")
    async def checkout_pay(
        card_number: str = Form(""),
        expiry: str = Form(""),
        cvv: str = Form(""),
        name: str = Form(""),
    ):
        session = await flow.pay(PaymentForm(card_number=card_number, expiry=expiry, cvv=cvv, name=name))
        if session.confirmation_path is None:
            return JSONResponse(session.to_dict(), status_code=502)
        return RedirectResponse(url=session.confirmation_path, status_code=303)

    @app.post("/checkout/abandon")
    async def checkout_abandon():
        return flow.abandon().to_dict()

    @app.get("/order-confirmation/{order_id}")
    async def order_confirmation(order_id: str):
        order = await orders.get_order(order_id)
        return {"ok": True, "order_id": order_id, "order": order}

    return app
