from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta


# Upper bound for stock quantities; keeps values inside a 32-bit INT column
MAX_QUANTITY = 2_147_483_647

BULK_RETAIL_VALUES = ("bulk", "retail")


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate stock id)."""


class NotFoundError(LookupError):
    """404-level missing resource."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - aliases: legacy input keys mapped onto column keys
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore
    aliases: dict[str, str] | None = None


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        # Already an int (but not bool which is a subclass of int)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        # String input - must be plain digits (with optional leading minus)
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValidationError(f"{col.key} must be an integer")
            if 'e' in stripped.lower():
                raise ValidationError(f"{col.key} must be a plain integer (scientific notation not allowed)")
            if '.' in stripped:
                raise ValidationError(f"{col.key} must be an integer (no decimals)")
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer")
        if isinstance(value, float):
            raise ValidationError(f"{col.key} must be an integer, not a decimal")
        raise ValidationError(f"{col.key} must be an integer")

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        return bool(value)

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    return value


def _apply_aliases(payload: dict, aliases: dict[str, str] | None) -> dict:
    if not aliases:
        return dict(payload)
    normalized: dict = {}
    for k, v in payload.items():
        key = aliases.get(k, k)
        # canonical key wins over its legacy alias
        if key in normalized and k != key:
            continue
        normalized[key] = v
    return normalized


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    payload = _apply_aliases(payload, policy.aliases)

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def enforce_rules_stock_item(patch: dict, *, creating: bool) -> None:
    """
    Presence/positivity rules for stock items that column metadata can't express.
    total_quantity and balance_quantity are independent; neither is derived.
    """
    if creating:
        if patch.get("id") is None or patch["id"] <= 0:
            raise ValidationError("id must be a positive integer")

    if "total_quantity" in patch:
        qty = patch["total_quantity"]
        if qty is None or qty <= 0:
            raise ValidationError("total_quantity must be > 0")
        if qty > MAX_QUANTITY:
            raise ValidationError(f"total_quantity cannot exceed {MAX_QUANTITY}")

    if "balance_quantity" in patch and patch["balance_quantity"] is not None:
        balance = patch["balance_quantity"]
        if balance < 0:
            raise ValidationError("balance_quantity must be >= 0")
        if balance > MAX_QUANTITY:
            raise ValidationError(f"balance_quantity cannot exceed {MAX_QUANTITY}")

    if "bulk_retail" in patch and patch["bulk_retail"] is not None:
        value = patch["bulk_retail"].lower()
        if value not in BULK_RETAIL_VALUES:
            raise ValidationError("bulk_retail must be one of: bulk, retail")
        patch["bulk_retail"] = value
