# address_dedup/identity.py
import hashlib
import json
from collections.abc import Mapping
from typing import Any, Optional

from .models import LineItem


def options_hash(options: Any) -> str:
    """
    Deterministic digest of an options mapping.
    Empty or non-mapping options hash to "" so such items key on product alone.
    """
    if not options or not isinstance(options, Mapping):
        return ""

    normalized = {str(k): options[k] for k in sorted(options, key=str)}
    payload = json.dumps(
        normalized, sort_keys=True, separators=(",", ":"), default=str
    )
    return hashlib.md5(payload.encode("utf-8")).hexdigest()


def identity_key(item: LineItem, missing_product_policy: str = "collide") -> Optional[str]:
    """
    product_id + "_" + options hash. Quantity plays no part.

    Items without a product id:
      collide -> "_<hash>", all such items share keys per option set
      unique  -> namespaced by the line item id, never collide
      reject  -> None, caller must not add the item
    """
    digest = options_hash(item.options)
    product_id = item.product_id

    if product_id is None or product_id == "":
        if missing_product_policy == "reject":
            return None
        if missing_product_policy == "unique":
            return f"#{item.id}_{digest}"
        product_id = ""

    return f"{product_id}_{digest}"
