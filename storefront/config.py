from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]  # .../package root
load_dotenv(dotenv_path=ROOT_DIR / ".env")


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_int(*keys: str, default: int | None = None) -> int | None:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return int(v)


def _get_float(*keys: str, default: float | None = None) -> float | None:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return float(v.replace(",", "."))


def _get_path(*keys: str, default: str) -> str:
    v = _get_env(*keys, default=default)
    return str(v)


@dataclass(frozen=True)
class Settings:
    api_base_url: str
    db_path: str
    currency: str
    decimals: int
    shipping_fee: float
    payment_delay: float
    http_timeout: float
    catalog_refresh: float
    log_level: str
    web_host: str
    web_port: int


settings = Settings(
    api_base_url=_get_env("STOREFRONT_API_URL", "API_BASE_URL", default="http://localhost:8080/api")
    or "http://localhost:8080/api",
    db_path=_get_path("DB_PATH", "STOREFRONT_DB_PATH", default=str(ROOT_DIR / "data" / "storefront.db")),
    currency=_get_env("CURRENCY", default="INR") or "INR",
    decimals=_get_int("DECIMALS", default=2),
    shipping_fee=_get_float("SHIPPING_FEE", default=49.0),
    payment_delay=_get_float("PAYMENT_DELAY", default=1.8),
    http_timeout=_get_float("HTTP_TIMEOUT", default=10.0),
    catalog_refresh=_get_float("CATALOG_REFRESH", default=1.0),
    log_level=(_get_env("LOG_LEVEL", default="INFO") or "INFO").upper(),
    web_host=_get_env("WEB_HOST", default="127.0.0.1") or "127.0.0.1",
    web_port=_get_int("WEB_PORT", default=8000),
)

if settings.decimals < 0:
    raise RuntimeError("DECIMALS must be >= 0. Fix DECIMALS in .env")
if settings.shipping_fee < 0:
    raise RuntimeError("SHIPPING_FEE must be >= 0. Fix SHIPPING_FEE in .env")
