# address_dedup/dedup.py
import copy
from typing import Dict, Iterable, List, Optional, Set, Tuple

from . import config
from .collection import AddressItemCollection
from .diagnostics import DiagnosticSink, LoggingSink
from .identity import identity_key
from .logger import get_logger
from .models import AddressItem, DuplicateSkip, LineItem

logger = get_logger(__name__)

# Never copied from a line item onto its address item.
EXCLUDED_FIELDS = frozenset({"item_id", "address_id", "created_at", "updated_at"})


class ItemDeduplicator:
    """
    Copies cart line items onto an address without creating duplicates.

    Two items are duplicates when they share an identity key (product id plus
    a hash of the normalized options), whatever their quantities. The address
    collection is saved once per call, after all additions, even when nothing
    was added.
    """

    def __init__(
        self,
        sink: Optional[DiagnosticSink] = None,
        missing_product_policy: Optional[str] = None,
        duplicate_policy: Optional[str] = None,
    ):
        self.sink = sink or LoggingSink()
        self.missing_product_policy = config.validate_choice(
            "MISSING_PRODUCT_POLICY",
            missing_product_policy or config.MISSING_PRODUCT_POLICY,
            config.MISSING_PRODUCT_POLICIES,
        )
        self.duplicate_policy = config.validate_choice(
            "DUPLICATE_POLICY",
            duplicate_policy or config.DUPLICATE_POLICY,
            config.DUPLICATE_POLICIES,
        )

    def key_for(self, item: LineItem) -> Optional[str]:
        return identity_key(item, self.missing_product_policy)

    def reconcile(
        self, source_items: Iterable[LineItem], destination: AddressItemCollection
    ) -> Tuple[List[AddressItem], List[DuplicateSkip]]:
        """
        Add every source item not yet represented on `destination`, then save.
        Returns (added address items, skip records).
        """
        skipped: List[DuplicateSkip] = []
        added: List[AddressItem] = []

        candidates = self._candidates(source_items, skipped)
        initial_keys = frozenset(self._existing_keys(destination))
        existing_keys = set(initial_keys)

        for key, item in candidates:
            if key in existing_keys:
                reason = "existing" if key in initial_keys else "duplicate"
                self._skip(item, reason, skipped)
                continue

            destination.add_item(item, item.quantity)
            existing_keys.add(key)

            address_item = destination.get_item_by_source_id(item.id)
            if address_item is None:
                logger.warning(
                    "Added item %s (product_id=%s) but could not look it up by source id.",
                    item.id, item.product_id,
                )
                continue

            copy_fields(item, address_item)
            added.append(address_item)

        destination.save()

        logger.debug(
            "Reconciled %d candidate(s): %d added, %d skipped.",
            len(candidates), len(added), len(skipped),
        )
        return added, skipped

    def _candidates(
        self, source_items: Iterable[LineItem], skipped: List[DuplicateSkip]
    ) -> List[Tuple[str, LineItem]]:
        if self.duplicate_policy == "first":
            out: List[Tuple[str, LineItem]] = []
            for item in source_items:
                key = self.key_for(item)
                if key is None:
                    self._skip(item, "missing_product", skipped)
                    continue
                out.append((key, item))
            return out

        # "last": one representative per key, later items overwrite earlier
        # ones but keep the first item's position.
        index: Dict[str, LineItem] = {}
        for item in source_items:
            key = self.key_for(item)
            if key is None:
                self._skip(item, "missing_product", skipped)
                continue
            if key in index:
                self._skip(index[key], "superseded", skipped)
            index[key] = item
        return list(index.items())

    def _existing_keys(self, destination: AddressItemCollection) -> Set[str]:
        keys: Set[str] = set()
        for address_item in destination.get_all_items():
            if address_item.source_item_id is None:
                continue
            source_item = destination.get_source_item(address_item.source_item_id)
            if source_item is None:
                # Orphans stay on the address; they just don't block anything.
                logger.debug(
                    "Address item %s references missing line item %s; ignoring.",
                    address_item.id, address_item.source_item_id,
                )
                continue
            key = self.key_for(source_item)
            if key is not None:
                keys.add(key)
        return keys

    def _skip(self, item: LineItem, reason: str, skipped: List[DuplicateSkip]) -> None:
        record = DuplicateSkip.for_item(item, reason)
        skipped.append(record)
        try:
            self.sink.record(
                "duplicate_skipped",
                product_id=record.product_id,
                sku=record.sku,
                qty=record.quantity,
                reason=record.reason,
            )
        except Exception as e:
            logger.warning("Diagnostic sink failed: %s", e)


def copy_fields(item: LineItem, address_item: AddressItem) -> None:
    """
    Copy every non-empty line item field onto the address item, leaving out
    identifiers, the parent address link and timestamps. Values are deep
    copied so the address item never shares state with the cart item.
    """
    for k, v in item.get_data().items():
        if not v or k in EXCLUDED_FIELDS:
            continue
        address_item.set_data(k, copy.deepcopy(v))
