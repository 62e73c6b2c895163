import sys
from typing import List, Optional

from address_dedup import config, storage
from address_dedup.errors import DedupError
from address_dedup.logger import get_logger
from address_dedup.observer import OrderPlacedObserver

logger = get_logger(__name__)


def process_cart(observer: OrderPlacedObserver, repo: storage.SqliteCartRepository, cart_id: str) -> None:
    added, skipped = observer.execute({"cart_id": cart_id})

    if not (added or skipped):
        logger.info("No changes for cart %s.", cart_id)
        return

    logger.info(
        "Cart %s: %d item(s) added to shipping address, %d duplicate(s) skipped.",
        cart_id, len(added), len(skipped),
    )

    dupes = {sid: n for sid, n in repo.address_item_counts(cart_id).items() if n > 1}
    if dupes:
        # Rows written before deduplication existed; they are left in place.
        logger.warning("Cart %s still has duplicated address rows: %s", cart_id, dupes)


def run_once(cart_ids: List[str]) -> int:
    storage.ensure_db()
    repo = storage.SqliteCartRepository()
    observer = OrderPlacedObserver(repo)

    if not cart_ids:
        logger.error("No cart ids given (pass them as arguments or set CART_IDS).")
        return 1

    failures = 0
    for cart_id in cart_ids:
        try:
            process_cart(observer, repo, cart_id)
        except DedupError as e:
            failures += 1
            logger.error("Skipping cart %s: %s", cart_id, e)
        except Exception as e:
            failures += 1
            logger.exception("Error reconciling cart %s: %s", cart_id, e)

    return 1 if failures else 0


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    cart_ids = [a for a in args if a.strip()] or config.get_cart_ids()
    return run_once(cart_ids)


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except Exception as e:
        logger.exception("Fatal reconcile error: %s", e)
        raise SystemExit(2)
