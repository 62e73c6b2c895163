# address_dedup/config.py
import os
from typing import Iterable, List

from .errors import ConfigError

DB_PATH = os.getenv("DB_PATH", "/data/address_dedup.sqlite3")

# How line items without a product id are keyed: collide|unique|reject
MISSING_PRODUCT_POLICY = os.getenv("MISSING_PRODUCT_POLICY", "collide").lower()

# Which of several same-key cart items is kept: first|last
DUPLICATE_POLICY = os.getenv("DUPLICATE_POLICY", "first").lower()

# Source items read from the cart: all|visible
SOURCE_ITEMS = os.getenv("SOURCE_ITEMS", "all").lower()

MISSING_PRODUCT_POLICIES = ("collide", "unique", "reject")
DUPLICATE_POLICIES = ("first", "last")
SOURCE_ITEM_MODES = ("all", "visible")


def validate_choice(name: str, value: str, allowed: Iterable[str]) -> str:
    allowed = tuple(allowed)
    value = (value or "").strip().lower()
    if value not in allowed:
        raise ConfigError(
            f"{name} must be one of {', '.join(allowed)} (got {value!r})"
        )
    return value


def get_cart_ids(raw: str | None = None) -> List[str]:
    """
    Parse a comma separated CART_IDS value; blanks are dropped.
    """
    if raw is None:
        raw = os.getenv("CART_IDS", "")
    return [part.strip() for part in raw.split(",") if part.strip()]
