# backend/tcoffice/services/stock_service.py
"""
Stock Service

Field-level CRUD over stock items. The item id is supplied by the user and
never changes; quantities are stored as entered.
"""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import StockItem
from ..validation import ConflictError, NotFoundError
from tcoffice.time_utils import utcnow


logger = logging.getLogger(__name__)

STOCK_MUTABLE_FIELDS = {
    "name", "colour", "total_quantity", "balance_quantity", "rack_no", "size", "bulk_retail",
}


def apply_stock_patch(item: StockItem, patch: dict) -> None:
    for k, v in patch.items():
        if k not in STOCK_MUTABLE_FIELDS:
            continue
        setattr(item, k, v)


def _matches(item: StockItem, term: str) -> bool:
    return (
        term in str(item.id)
        or term in (item.name or "").lower()
        or term in (item.rack_no or "").lower()
        or term in (item.size or "").lower()
        or term in (item.bulk_retail or "").lower()
    )


def list_stock_items(search: str | None = None) -> dict:
    """
    All stock items ordered by id.

    search filters on id, name, rack number, size and stock type.
    """
    items = db.session.query(StockItem).order_by(StockItem.id.asc()).all()
    term = (search or "").strip().lower()
    if term:
        items = [i for i in items if _matches(i, term)]
    return {
        "items": [i.to_dict() for i in items],
        "count": len(items),
    }


def get_stock_item(item_id: int) -> dict:
    item = db.session.get(StockItem, item_id)
    if not item:
        raise NotFoundError("Stock item not found")
    return item.to_dict()


def create_stock_item(*, patch: dict) -> dict:
    """
    Create a stock item from a validated patch dict.

    Raises:
        ConflictError: If the id is already taken
    """
    item_id = patch["id"]
    if db.session.get(StockItem, item_id):
        raise ConflictError(f"Stock item {item_id} already exists")

    item = StockItem(id=item_id, balance_quantity=0, bulk_retail="bulk")
    apply_stock_patch(item, patch)

    db.session.add(item)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(f"Stock item {item_id} already exists")

    logger.info("Created stock item %s", item_id)
    return item.to_dict()


def update_stock_item(*, item_id: int, patch: dict) -> dict:
    item = db.session.get(StockItem, item_id)
    if not item:
        raise NotFoundError("Stock item not found")

    apply_stock_patch(item, patch)
    item.updated_at = utcnow()
    db.session.commit()
    return item.to_dict()


def delete_stock_item(*, item_id: int) -> None:
    item = db.session.get(StockItem, item_id)
    if not item:
        raise NotFoundError("Stock item not found")

    db.session.delete(item)
    db.session.commit()
    logger.info("Deleted stock item %s", item_id)
