# Overview: Flask API routes for stock operations; parses input and returns JSON responses.

# backend/tcoffice/routes/stock.py
"""
Stock management routes.

All routes require a valid session. The item id is chosen by the user at
creation and is immutable afterwards.
"""
from flask import Blueprint, current_app, request

from ..decorators import require_auth
from ..models import StockItem
from ..services import stock_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_stock_item,
    ValidationError,
    ConflictError,
    NotFoundError,
)

# Legacy client keys for rack number and size
STOCK_ALIASES = {"Rack_no": "rack_no", "Size": "size"}

STOCK_CREATE_POLICY = ModelValidationPolicy(
    writable_fields={
        "id", "name", "colour", "total_quantity", "balance_quantity", "rack_no", "size", "bulk_retail",
    },
    required_on_create={"id", "name", "colour", "total_quantity"},
    aliases=STOCK_ALIASES,
)

STOCK_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields=set(stock_service.STOCK_MUTABLE_FIELDS),
    aliases=STOCK_ALIASES,
)

stock_bp = Blueprint("stock", __name__, url_prefix="/stock")


@stock_bp.get("")
@require_auth
def list_stock_route():
    """
    List stock items.

    Query params:
    - q: str (optional) - filter on id, name, rack number, size or stock type
    """
    return stock_service.list_stock_items(search=request.args.get("q"))


@stock_bp.get("/<int:item_id>")
@require_auth
def get_stock_route(item_id: int):
    try:
        return stock_service.get_stock_item(item_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@stock_bp.post("")
@require_auth
def create_stock_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=StockItem, payload=payload, policy=STOCK_CREATE_POLICY, partial=False)
        enforce_rules_stock_item(patch, creating=True)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        created = stock_service.create_stock_item(patch=patch)
    except ConflictError as e:
        return {"error": str(e)}, 409
    except Exception:
        current_app.logger.exception("Failed to create stock item")
        return {"error": "Internal server error"}, 500

    return created, 201


@stock_bp.put("/<int:item_id>")
@require_auth
def update_stock_route(item_id: int):
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return {"error": "Invalid JSON payload"}, 400

    # Clients echo the whole item back; the id may be sent but never changed
    payload = dict(payload)
    body_id = payload.pop("id", None)
    for read_only in ("created_at", "updated_at"):
        payload.pop(read_only, None)
    if body_id is not None and str(body_id).strip() != str(item_id):
        return {"error": "id cannot be changed"}, 400

    try:
        patch = validate_payload(model=StockItem, payload=payload, policy=STOCK_UPDATE_POLICY, partial=True)
        enforce_rules_stock_item(patch, creating=False)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        updated = stock_service.update_stock_item(item_id=item_id, patch=patch)
    except NotFoundError as e:
        return {"error": str(e)}, 404

    return updated, 200


@stock_bp.delete("/<int:item_id>")
@require_auth
def delete_stock_route(item_id: int):
    try:
        stock_service.delete_stock_item(item_id=item_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404

    return {"ok": True}, 200
