# Overview: Service-layer operations for employees; out-of-band creation and lookup.

from __future__ import annotations

import logging
from typing import Iterable

from ..extensions import db
from ..models import Employee
from ..validation import ConflictError, ValidationError


logger = logging.getLogger(__name__)


def _coerce_employee_id(value) -> int:
    if isinstance(value, bool):
        raise ValidationError("employee_id must be an integer")
    try:
        employee_id = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("employee_id must be an integer")
    if employee_id <= 0:
        raise ValidationError("employee_id must be positive")
    return employee_id


def list_employees(search: str | None = None) -> list[Employee]:
    """
    All employees ordered by id.

    search matches the id as a substring or the name case-insensitively,
    the same filter the attendance page applies.
    """
    employees = db.session.query(Employee).order_by(Employee.employee_id.asc()).all()
    term = (search or "").strip().lower()
    if not term:
        return employees
    return [
        e for e in employees
        if term in str(e.employee_id) or term in (e.name or "").lower()
    ]


def get_employee(employee_id: int) -> Employee | None:
    return db.session.get(Employee, employee_id)


def create_employee(employee_id, name: str, *, commit: bool = True) -> Employee:
    employee_id = _coerce_employee_id(employee_id)
    name = (name or "").strip()
    if not name:
        raise ValidationError("name cannot be blank")
    if len(name) > 120:
        raise ValidationError("name exceeds max length 120")

    if get_employee(employee_id):
        raise ConflictError(f"Employee {employee_id} already exists")

    employee = Employee(employee_id=employee_id, name=name)
    db.session.add(employee)
    if commit:
        db.session.commit()
        logger.info("Created employee %s (%s)", employee_id, name)
    return employee


def import_employees(rows: Iterable[dict]) -> tuple[int, list[str]]:
    """
    Bulk-create employees from dict rows with employee_id and name keys.

    Existing ids are skipped. Returns (created_count, messages for skipped rows).
    """
    created = 0
    skipped: list[str] = []
    for line_no, row in enumerate(rows, start=1):
        try:
            create_employee(row.get("employee_id"), row.get("name"), commit=False)
            db.session.flush()
            created += 1
        except (ValidationError, ConflictError) as e:
            skipped.append(f"row {line_no}: {e}")
    db.session.commit()
    logger.info("Imported %d employees (%d skipped)", created, len(skipped))
    return created, skipped
