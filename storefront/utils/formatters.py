from storefront.config import settings
from storefront.constants import CURRENCY_SYMBOLS


def money(v: float, currency: str | None = None) -> str:
    """``74 -> "₹74.00"``; a negative amount keeps the sign in front of the symbol."""
    code = (currency or settings.currency).upper()
    amount = f"{abs(v):.{settings.decimals}f}"
    sign = "-" if v < 0 else ""
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol:
        return f"{sign}{symbol}{amount}"
    return f"{sign}{amount} {code}"
