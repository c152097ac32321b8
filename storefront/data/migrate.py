# storefront/data/migrate.py
"""
One-time import of carts saved in the legacy document shape.

Old carts stored ``productsInCart`` either as bare product id strings or as
``{productId, productQty}`` objects. The canonical shape is
``{productId, quantity}``; strings become quantity 1, nulls are dropped.

Usage: python -m storefront.data.migrate carts_export.json
"""
import json
import sys
import uuid
from typing import Any, Dict, Iterable, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.database import SessionLocal, init_db
from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def normalize_items(raw_items: Iterable[Any] | None) -> List[Dict[str, Any]]:
    normalized: Dict[str, int] = {}
    for raw in raw_items or []:
        if raw is None:
            continue
        if isinstance(raw, str):
            product_id, quantity = raw, 1
        elif isinstance(raw, dict):
            product_id = raw.get("productId") or raw.get("product_id")
            quantity = raw.get("quantity", raw.get("productQty", 1))
        else:
            logger.warning(f"Skipping unrecognised cart entry {raw!r}")
            continue

        if not product_id:
            continue
        try:
            quantity = int(quantity)
        except (TypeError, ValueError):
            quantity = 1
        if quantity <= 0:
            continue

        # last one wins, same as a merge
        normalized.pop(str(product_id), None)
        normalized[str(product_id)] = quantity

    return [{"productId": pid, "quantity": qty} for pid, qty in normalized.items()]


def migrate_legacy_carts(db: Session, documents: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    stats = {"imported": 0, "skipped": 0}
    seen_users = set(db.execute(select(CartModel.user_id)).scalars())

    for doc in documents:
        user_id = doc.get("userId")
        if not user_id or user_id in seen_users:
            stats["skipped"] += 1
            continue

        items = normalize_items(doc.get("productsInCart"))
        cart = CartModel(user_id=user_id, cart_id=doc.get("cartId") or uuid.uuid4().hex, version=1)
        cart.items = [
            CartItemModel(product_id=i["productId"], quantity=i["quantity"], position=pos)
            for pos, i in enumerate(items)
        ]
        db.add(cart)
        seen_users.add(user_id)
        stats["imported"] += 1

    db.commit()
    logger.info(f"Legacy cart migration: {stats}")
    return stats


def main(argv: List[str]) -> int:
    if len(argv) != 2:
        print(__doc__)
        return 2

    configure_logging()
    init_db()
    with open(argv[1], encoding="utf-8") as fh:
        documents = json.load(fh)

    db = SessionLocal()
    try:
        migrate_legacy_carts(db, documents)
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
