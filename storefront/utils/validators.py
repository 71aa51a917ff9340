import re


def require_positive_number(v: float, name: str = "value") -> None:
    if v <= 0:
        raise ValueError(f"{name} must be > 0")


def card_number_error(card_number: str) -> str | None:
    digits = re.sub(r"\s+", "", card_number or "")
    if not re.fullmatch(r"\d{16}", digits):
        return "Enter a valid 16-digit card number"
    return None


def expiry_error(expiry: str) -> str | None:
    # MM/YY, "/" третьим символом
    m = re.fullmatch(r"(\d{2})/(\d{2})", (expiry or "").strip())
    if not m or not 1 <= int(m.group(1)) <= 12:
        return "Enter expiry in MM/YY format"
    return None


def cvv_error(cvv: str) -> str | None:
    if not re.fullmatch(r"\d{3}", (cvv or "").strip()):
        return "Enter valid 3-digit CVV"
    return None


def cardholder_error(name: str) -> str | None:
    if not (name or "").strip():
        return "Cardholder name is required"
    return None
