# Overview: Service-layer operations for attendance; encapsulates business logic and database work.

"""
Attendance Service

One AttendanceRecord per employee per calendar day, upserted by bulk
submissions and summarised per month on demand.

RULES:
- A submission is all-or-nothing: every entry is validated before any write,
  and the writes share one transaction.
- Overwriting a day that already has records requires edit=True when
  require_edit is on (the edit mode of the attendance page).
- Month summaries are never stored; they are recounted from the records.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import extract, func
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import AttendanceRecord, Employee, ATTENDANCE_STATUSES
from ..models.attendance import STATUS_ABSENT, STATUS_HALF_DAY, STATUS_HOLIDAY, STATUS_PRESENT
from ..validation import ConflictError, ValidationError
from .employee_service import list_employees
from tcoffice.time_utils import month_bounds, parse_iso_date, to_iso_date, today, utcnow


logger = logging.getLogger(__name__)

# Month summary keys, as rendered by the attendance page
SUMMARY_KEYS = {
    STATUS_PRESENT: "present",
    STATUS_ABSENT: "absent",
    STATUS_HALF_DAY: "halfDay",
    STATUS_HOLIDAY: "holidays",
}


class AttendanceSubmissionError(ValidationError):
    """A submission with one or more invalid entries; nothing was written."""

    def __init__(self, failures: list[dict]):
        self.failures = failures
        super().__init__(f"{len(failures)} attendance entr{'y' if len(failures) == 1 else 'ies'} failed validation")


@dataclass
class AttendanceEntry:
    employee_id: int
    status: str
    date: date


@dataclass
class SubmissionResult:
    dates: list[date]
    created: int = 0
    updated: int = 0
    unchanged: int = 0

    @property
    def saved(self) -> int:
        return self.created + self.updated + self.unchanged

    def to_dict(self) -> dict:
        iso_dates = [to_iso_date(d) for d in self.dates]
        return {
            "date": iso_dates[0] if len(iso_dates) == 1 else None,
            "dates": iso_dates,
            "saved": self.saved,
            "created": self.created,
            "updated": self.updated,
            "unchanged": self.unchanged,
        }


def empty_summary() -> dict:
    summary = {key: 0 for key in SUMMARY_KEYS.values()}
    summary["total"] = 0
    return summary


def validate_month(month, year=None) -> tuple[int, int | None]:
    try:
        month = int(month)
    except (TypeError, ValueError):
        raise ValidationError("month must be an integer between 1 and 12")
    if not 1 <= month <= 12:
        raise ValidationError("month must be an integer between 1 and 12")

    if year is not None:
        try:
            year = int(year)
        except (TypeError, ValueError):
            raise ValidationError("year must be an integer")
        if not 1 <= year <= 9999:
            raise ValidationError("year must be between 1 and 9999")
    return month, year


def parse_attendance_date(value, *, field_name: str = "date") -> date:
    try:
        parsed = parse_iso_date(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an ISO date (YYYY-MM-DD)")
    if parsed is None:
        raise ValidationError(f"{field_name} is required")
    return parsed


def is_day_recorded(day: date) -> bool:
    return db.session.query(
        db.session.query(AttendanceRecord.id).filter(AttendanceRecord.date == day).exists()
    ).scalar()


def list_employees_with_today_status(search: str | None = None) -> dict:
    """All employees plus whether any attendance exists for today."""
    day = today()
    employees = list_employees(search)
    return {
        "date": to_iso_date(day),
        "employees": [e.to_dict() for e in employees],
        "attendanceRecorded": bool(is_day_recorded(day)),
    }


def _summaries(month: int, year: int | None) -> dict[int, dict]:
    query = db.session.query(
        AttendanceRecord.employee_id,
        AttendanceRecord.status,
        func.count(AttendanceRecord.id),
    )
    if year is not None:
        first, last = month_bounds(year, month)
        query = query.filter(AttendanceRecord.date >= first, AttendanceRecord.date <= last)
    else:
        query = query.filter(extract("month", AttendanceRecord.date) == month)

    rows = query.group_by(AttendanceRecord.employee_id, AttendanceRecord.status).all()

    summaries: dict[int, dict] = {
        employee_id: empty_summary()
        for (employee_id,) in db.session.query(Employee.employee_id).all()
    }
    for employee_id, status, count in rows:
        summary = summaries.setdefault(employee_id, empty_summary())
        summary[SUMMARY_KEYS[status]] += count
        summary["total"] += count
    return summaries


def get_monthly_summary(month, year=None) -> dict[int, dict]:
    """
    Per-employee status counts for a month.

    With year, only that year's month is counted. Without it, the same month
    of every year is merged.
    """
    month, year = validate_month(month, year)
    return _summaries(month, year)


def get_attendance_for_date(day: date) -> dict:
    """
    Records for a day plus every employee's summary for that day's month.

    An unrecorded day yields an empty attendance list, not an error.
    """
    records = (
        db.session.query(AttendanceRecord)
        .filter(AttendanceRecord.date == day)
        .order_by(AttendanceRecord.employee_id.asc())
        .all()
    )
    return {
        "date": to_iso_date(day),
        "attendance": [r.to_dict() for r in records],
        "monthSummary": _summaries(day.month, day.year),
    }


def get_day_sheet(day: date) -> dict:
    """Every employee with their status for the day, Absent when unrecorded."""
    employees = list_employees()
    recorded = {
        r.employee_id: r.status
        for r in db.session.query(AttendanceRecord).filter(AttendanceRecord.date == day).all()
    }
    return {
        "date": to_iso_date(day),
        "employees": [e.to_dict() for e in employees],
        "attendanceData": {
            e.employee_id: recorded.get(e.employee_id, STATUS_ABSENT) for e in employees
        },
        "recorded": bool(recorded),
    }


def _coerce_employee_id(value) -> int:
    """Accept ints and integer strings; floats are rejected, never truncated."""
    if value is None:
        raise ValidationError("employee_id is required")
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float):
        raise ValidationError("employee_id must be an integer, not a decimal")
    if isinstance(value, str):
        stripped = value.strip()
        digits = stripped[1:] if stripped.startswith("-") else stripped
        if digits.isascii() and digits.isdigit():
            return int(stripped)
    raise ValidationError("employee_id must be an integer")


def _parse_entries(raw_entries, default_date: date | None) -> list[AttendanceEntry]:
    if not isinstance(raw_entries, list) or not raw_entries:
        raise ValidationError("attendance must be a non-empty list")

    failures: list[dict] = []
    entries: list[AttendanceEntry] = []
    seen: set[tuple[int, date]] = set()

    parsed_ids: list[int | ValidationError] = []
    for raw in raw_entries:
        try:
            parsed_ids.append(_coerce_employee_id(raw.get("employee_id") if isinstance(raw, dict) else None))
        except ValidationError as e:
            parsed_ids.append(e)

    candidate_ids = {i for i in parsed_ids if isinstance(i, int)}
    known_ids = {
        employee_id
        for (employee_id,) in db.session.query(Employee.employee_id)
        .filter(Employee.employee_id.in_(candidate_ids))
        .all()
    } if candidate_ids else set()

    for index, raw in enumerate(raw_entries):
        if not isinstance(raw, dict):
            failures.append({"index": index, "employee_id": None, "error": "entry must be an object"})
            continue

        employee_id = parsed_ids[index]
        if isinstance(employee_id, ValidationError):
            failures.append({"index": index, "employee_id": raw.get("employee_id"), "error": str(employee_id)})
            continue

        if employee_id not in known_ids:
            failures.append({"index": index, "employee_id": employee_id, "error": "Employee not found"})
            continue

        status = raw.get("status")
        if status not in ATTENDANCE_STATUSES:
            failures.append({
                "index": index,
                "employee_id": employee_id,
                "error": f"status must be one of: {', '.join(ATTENDANCE_STATUSES)}",
            })
            continue

        day = default_date
        if raw.get("date"):
            try:
                day = parse_attendance_date(raw.get("date"))
            except ValidationError as e:
                failures.append({"index": index, "employee_id": employee_id, "error": str(e)})
                continue
        if day is None:
            failures.append({"index": index, "employee_id": employee_id, "error": "date is required"})
            continue

        if (employee_id, day) in seen:
            failures.append({
                "index": index,
                "employee_id": employee_id,
                "error": f"Duplicate entry for {to_iso_date(day)}",
            })
            continue
        seen.add((employee_id, day))

        entries.append(AttendanceEntry(employee_id=employee_id, status=status, date=day))

    if failures:
        raise AttendanceSubmissionError(failures)
    return entries


def _apply_entries(entries: list[AttendanceEntry], result: SubmissionResult) -> None:
    existing = {
        (r.employee_id, r.date): r
        for r in db.session.query(AttendanceRecord)
        .filter(AttendanceRecord.date.in_(result.dates))
        .all()
    }
    now = utcnow()
    for entry in entries:
        record = existing.get((entry.employee_id, entry.date))
        if record is None:
            db.session.add(AttendanceRecord(
                employee_id=entry.employee_id,
                date=entry.date,
                status=entry.status,
            ))
            result.created += 1
        elif record.status != entry.status:
            record.status = entry.status
            record.updated_at = now
            result.updated += 1
        else:
            result.unchanged += 1
    db.session.flush()


def submit_attendance(
    raw_entries,
    *,
    default_date: date | None = None,
    edit: bool = False,
    require_edit: bool = True,
) -> SubmissionResult:
    """
    Upsert one status per (employee, date) for every entry.

    Entries are dicts with employee_id, status and an optional date that
    overrides default_date.

    Raises:
        ValidationError: malformed request body
        AttendanceSubmissionError: one or more invalid entries (nothing written)
        ConflictError: a day already has records and edit is False
    """
    entries = _parse_entries(raw_entries, default_date)
    dates = sorted({e.date for e in entries})

    if require_edit and not edit:
        recorded = [d for d in dates if is_day_recorded(d)]
        if recorded:
            raise ConflictError(
                f"Attendance for {', '.join(to_iso_date(d) for d in recorded)} has already been recorded; "
                "enter edit mode to change it"
            )

    # A concurrent insert of the same (employee, date) makes the first pass
    # fail on the unique constraint; the second pass updates that row instead.
    for attempt in range(2):
        result = SubmissionResult(dates=dates)
        try:
            _apply_entries(entries, result)
            db.session.commit()
            break
        except IntegrityError:
            db.session.rollback()
            if attempt == 1:
                raise
            logger.warning("Attendance upsert collided with a concurrent write; retrying")

    logger.info(
        "Attendance saved for %s: %d created, %d updated, %d unchanged",
        ", ".join(to_iso_date(d) for d in dates), result.created, result.updated, result.unchanged,
    )
    return result


def set_holiday(day: date, *, holiday: bool = True, edit: bool = False, require_edit: bool = True) -> SubmissionResult:
    """Mark every employee Holiday for the day, or revert everyone to Absent."""
    employees = list_employees()
    if not employees:
        raise ValidationError("No employees to update")

    status = STATUS_HOLIDAY if holiday else STATUS_ABSENT
    entries = [{"employee_id": e.employee_id, "status": status} for e in employees]
    return submit_attendance(entries, default_date=day, edit=edit, require_edit=require_edit)
