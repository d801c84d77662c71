# Overview: Flask API routes for attendance; parses input and returns JSON responses.

"""
Attendance Routes

Two surfaces over the same service:
- /attendance: today's sheet, per-date records with month summaries,
  bulk submission (date defaults to today)
- /newattendance: per-date sheet with Absent defaults, month summaries,
  submissions whose entries carry their own date, holiday bulk toggle

Every route requires a valid session.
"""

from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth
from ..services import attendance_service
from ..services.attendance_service import AttendanceSubmissionError
from ..validation import ConflictError, ValidationError
from tcoffice.time_utils import today


attendance_bp = Blueprint("attendance", __name__, url_prefix="/attendance")
newattendance_bp = Blueprint("newattendance", __name__, url_prefix="/newattendance")


def _error(message: str, status: int, **extra):
    """Error body; "message" mirrors "error" for clients that read either key."""
    body = {"error": message, "message": message}
    body.update(extra)
    return jsonify(body), status


def _json_object() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    return data


def _flag(data: dict, key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ValidationError(f"{key} must be true or false")
    return value


def _submit(data: dict, *, default_date):
    """Shared submission handling for both surfaces."""
    try:
        result = attendance_service.submit_attendance(
            data.get("attendance"),
            default_date=default_date,
            edit=_flag(data, "edit", False),
            require_edit=current_app.config.get("ATTENDANCE_REQUIRE_EDIT_MODE", True),
        )
    except AttendanceSubmissionError as e:
        return _error(str(e), 400, failures=e.failures)
    except ValidationError as e:
        return _error(str(e), 400)
    except ConflictError as e:
        return _error(str(e), 409)
    except Exception:
        current_app.logger.exception("Failed to submit attendance")
        return _error("Internal server error", 500)

    payload = result.to_dict()
    payload["message"] = "Attendance submitted successfully"
    return jsonify(payload), 200


def _top_level_date(data: dict):
    if data.get("date"):
        return attendance_service.parse_attendance_date(data.get("date"))
    return None


@attendance_bp.get("")
@require_auth
def list_employees_route():
    return jsonify(attendance_service.list_employees_with_today_status(request.args.get("q")))


@attendance_bp.get("/<day>")
@require_auth
def get_attendance_for_date_route(day: str):
    try:
        parsed = attendance_service.parse_attendance_date(day)
    except ValidationError as e:
        return _error(str(e), 400)
    return jsonify(attendance_service.get_attendance_for_date(parsed))


@attendance_bp.post("")
@require_auth
def submit_attendance_route():
    try:
        data = _json_object()
        default_date = _top_level_date(data) or today()
    except ValidationError as e:
        return _error(str(e), 400)
    return _submit(data, default_date=default_date)


@newattendance_bp.get("")
@require_auth
def get_day_sheet_route():
    try:
        day = attendance_service.parse_attendance_date(request.args.get("date") or today().isoformat())
    except ValidationError as e:
        return _error(str(e), 400)
    return jsonify(attendance_service.get_day_sheet(day))


@newattendance_bp.get("/<month>")
@require_auth
def get_monthly_summary_route(month: str):
    try:
        summary = attendance_service.get_monthly_summary(month, request.args.get("year"))
    except ValidationError as e:
        return _error(str(e), 400)
    return jsonify(summary)


@newattendance_bp.post("")
@require_auth
def submit_newattendance_route():
    try:
        data = _json_object()
        default_date = _top_level_date(data) or today()
    except ValidationError as e:
        return _error(str(e), 400)
    return _submit(data, default_date=default_date)


@newattendance_bp.post("/holiday")
@require_auth
def set_holiday_route():
    try:
        data = _json_object()
        day = attendance_service.parse_attendance_date(data.get("date"))
        result = attendance_service.set_holiday(
            day,
            holiday=_flag(data, "holiday", True),
            edit=_flag(data, "edit", False),
            require_edit=current_app.config.get("ATTENDANCE_REQUIRE_EDIT_MODE", True),
        )
    except ValidationError as e:
        return _error(str(e), 400)
    except ConflictError as e:
        return _error(str(e), 409)
    except Exception:
        current_app.logger.exception("Failed to set holiday")
        return _error("Internal server error", 500)

    return jsonify(result.to_dict()), 200
