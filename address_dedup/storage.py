# address_dedup/storage.py
import datetime
import json
import os
import sqlite3
from typing import Any, Dict, List, Optional

import pytz

from . import config
from .collection import AddressItemCollection
from .errors import CartNotFound
from .logger import get_logger
from .models import AddressItem, Cart, LineItem

logger = get_logger(__name__)


def _connect(db_path: Optional[str] = None):
    path = db_path or config.DB_PATH
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    return sqlite3.connect(path)


def now_utc_iso() -> str:
    return datetime.datetime.now(tz=pytz.UTC).isoformat()


def ensure_db(db_path: Optional[str] = None):
    with _connect(db_path) as con:
        cur = con.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS carts (
                cart_id TEXT PRIMARY KEY,
                created_at TEXT
            )
        """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS line_items (
                cart_id TEXT,
                item_id INTEGER,
                product_id TEXT,
                sku TEXT,
                qty REAL,
                options TEXT,       -- json
                parent_item_id INTEGER,
                data TEXT,          -- json
                created_at TEXT,
                PRIMARY KEY (cart_id, item_id)
            )
        """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS address_items (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                cart_id TEXT,
                address_type TEXT,  -- shipping
                source_item_id INTEGER,
                qty REAL,
                data TEXT,          -- json
                created_at TEXT,
                updated_at TEXT
            )
        """
        )
        con.commit()


def create_cart(cart_id: str, db_path: Optional[str] = None) -> None:
    with _connect(db_path) as con:
        con.execute(
            "INSERT OR IGNORE INTO carts (cart_id, created_at) VALUES (?, ?)",
            (str(cart_id), now_utc_iso()),
        )
        con.commit()


def add_line_item(cart_id: str, item: LineItem, db_path: Optional[str] = None) -> None:
    with _connect(db_path) as con:
        con.execute(
            """
            INSERT INTO line_items (
                cart_id, item_id, product_id, sku, qty, options,
                parent_item_id, data, created_at
            )
            VALUES (?,?,?,?,?,?,?,?,?)
        """,
            (
                str(cart_id),
                item.id,
                None if item.product_id is None else str(item.product_id),
                item.sku,
                item.quantity,
                json.dumps(item.options, default=str),
                item.parent_item_id,
                json.dumps(item.data, default=str),
                now_utc_iso(),
            ),
        )
        con.commit()


def _loads(raw: Optional[str], fallback: Any) -> Any:
    if not raw:
        return fallback
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Ignoring undecodable json column: %r", raw)
        return fallback


class SqliteAddressItems(AddressItemCollection):
    """
    Shipping address items of one cart. New items are buffered until save(),
    which writes them and any field changes in a single transaction.
    """

    def __init__(self, cart: Cart, db_path: Optional[str] = None):
        self.cart = cart
        self.db_path = db_path
        self._items: List[AddressItem] = []
        self._pending: List[AddressItem] = []
        self._load()

    def _load(self) -> None:
        with _connect(self.db_path) as con:
            cur = con.cursor()
            cur.execute(
                """
                SELECT id, source_item_id, qty, data
                FROM address_items
                WHERE cart_id=? AND address_type='shipping'
                ORDER BY id
            """,
                (str(self.cart.id),),
            )
            rows = cur.fetchall()

        for row_id, source_item_id, qty, data in rows:
            self._items.append(
                AddressItem(
                    id=row_id,
                    source_item_id=source_item_id,
                    quantity=qty,
                    data=_loads(data, {}),
                )
            )

    def get_all_items(self) -> List[AddressItem]:
        return list(self._items)

    def get_source_item(self, source_item_id: Any) -> Optional[LineItem]:
        return self.cart.get_item_by_id(source_item_id)

    def add_item(self, item: LineItem, quantity: float) -> AddressItem:
        address_item = AddressItem(id=None, source_item_id=item.id, quantity=quantity)
        self._items.append(address_item)
        self._pending.append(address_item)
        return address_item

    def get_item_by_source_id(self, source_item_id: Any) -> Optional[AddressItem]:
        for it in self._items:
            if it.source_item_id == source_item_id:
                return it
        return None

    def save(self) -> None:
        ts = now_utc_iso()
        with _connect(self.db_path) as con:
            cur = con.cursor()
            for it in self._items:
                payload = json.dumps(it.data, default=str)
                if it.id is None:
                    cur.execute(
                        """
                        INSERT INTO address_items (
                            cart_id, address_type, source_item_id, qty, data,
                            created_at, updated_at
                        )
                        VALUES (?,?,?,?,?,?,?)
                    """,
                        (str(self.cart.id), "shipping", it.source_item_id,
                         it.quantity, payload, ts, ts),
                    )
                    it.id = cur.lastrowid
                else:
                    cur.execute(
                        "UPDATE address_items SET qty=?, data=?, updated_at=? WHERE id=?",
                        (it.quantity, payload, ts, it.id),
                    )
            con.commit()

        logger.debug(
            "Saved %d address item(s) for cart %s (%d new).",
            len(self._items), self.cart.id, len(self._pending),
        )
        self._pending = []


class SqliteCartRepository:
    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path

    def get(self, cart_id: Any) -> Cart:
        with _connect(self.db_path) as con:
            cur = con.cursor()
            cur.execute("SELECT 1 FROM carts WHERE cart_id=?", (str(cart_id),))
            if cur.fetchone() is None:
                raise CartNotFound(cart_id)
            cur.execute(
                """
                SELECT item_id, product_id, sku, qty, options, parent_item_id, data
                FROM line_items
                WHERE cart_id=?
                ORDER BY item_id
            """,
                (str(cart_id),),
            )
            rows = cur.fetchall()

        items: List[LineItem] = []
        for item_id, product_id, sku, qty, options, parent_item_id, data in rows:
            items.append(
                LineItem(
                    id=item_id,
                    product_id=product_id,
                    sku=sku or "",
                    quantity=qty,
                    options=_loads(options, {}),
                    parent_item_id=parent_item_id,
                    data=_loads(data, {}),
                )
            )

        cart = Cart(id=cart_id, items=items)
        cart.shipping_address = SqliteAddressItems(cart, self.db_path)
        return cart

    def address_item_counts(self, cart_id: Any) -> Dict[Any, int]:
        """source_item_id -> number of shipping address rows, for reporting."""
        with _connect(self.db_path) as con:
            cur = con.cursor()
            cur.execute(
                """
                SELECT source_item_id, COUNT(*) FROM address_items
                WHERE cart_id=? AND address_type='shipping'
                GROUP BY source_item_id
            """,
                (str(cart_id),),
            )
            return {row[0]: row[1] for row in cur.fetchall()}
