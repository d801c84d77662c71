# Overview: Page state for the attendance sheet and the stock table, driven through OfficeClient.

"""
Client-side page state.

AttendanceSheet keeps what the attendance page keeps between requests: the
selected date, the search filter, the edit-mode flag, the holiday toggle and
the draft statuses. Nothing is written to the server until submit().

StockTable keeps the loaded stock list and a search filter, and applies the
add-form checks before calling the API.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from .api import OfficeClient


ATTENDANCE_STATUSES = ("Present", "Absent", "Half Day", "Holiday")
DEFAULT_STATUS = "Absent"


class EditModeError(RuntimeError):
    """Raised when a recorded day is changed without entering edit mode."""


def _int_keys(mapping: Optional[Dict]) -> Dict[int, object]:
    # JSON object keys arrive as strings
    return {int(k): v for k, v in (mapping or {}).items()}


class AttendanceSheet:
    def __init__(self, client: OfficeClient, selected_date: Optional[date] = None):
        self.client = client
        self.selected_date: date = selected_date or date.today()
        self.search_query: str = ""
        self.is_editing: bool = False
        self.is_holiday: bool = False
        self.employees: List[Dict] = []
        self.statuses: Dict[int, str] = {}
        self.month_summary: Dict[int, Dict] = {}
        self.attendance_recorded: bool = False

    # -- loading ------------------------------------------------------------

    def load(self) -> None:
        """Fetch employees, statuses and the month summary for selected_date."""
        sheet = self.client.get_day_sheet(self.selected_date)
        self.employees = sheet.get("employees", [])
        self.statuses = _int_keys(sheet.get("attendanceData"))
        self.attendance_recorded = bool(sheet.get("recorded"))

        detail = self.client.get_attendance(self.selected_date)
        self.month_summary = _int_keys(detail.get("monthSummary"))

        self.is_editing = False
        self.is_holiday = bool(self.employees) and self.attendance_recorded and all(
            self.statuses.get(e["employee_id"]) == "Holiday" for e in self.employees
        )

    def select_date(self, day: date) -> None:
        self.selected_date = day
        self.load()

    # -- filtering ----------------------------------------------------------

    def set_search(self, query: str) -> None:
        self.search_query = (query or "").strip().lower()

    @property
    def filtered_employees(self) -> List[Dict]:
        term = self.search_query
        if not term:
            return list(self.employees)
        return [
            e for e in self.employees
            if term in str(e["employee_id"]) or term in e["name"].lower()
        ]

    # -- editing ------------------------------------------------------------

    @property
    def can_edit(self) -> bool:
        """An unrecorded day is editable; a recorded one needs edit mode."""
        return self.is_editing or not self.attendance_recorded

    def enter_edit_mode(self) -> None:
        self.is_editing = True
        for employee in self.employees:
            self.statuses.setdefault(employee["employee_id"], DEFAULT_STATUS)

    def cancel_edit(self) -> None:
        """Drop drafts and reload the saved state."""
        self.load()

    def set_status(self, employee_id: int, status: str) -> None:
        if not self.can_edit:
            raise EditModeError(f"Attendance for {self.selected_date.isoformat()} is recorded; enter edit mode first")
        if status not in ATTENDANCE_STATUSES:
            raise ValueError(f"status must be one of: {', '.join(ATTENDANCE_STATUSES)}")
        if employee_id not in {e["employee_id"] for e in self.employees}:
            raise ValueError(f"Unknown employee {employee_id}")
        self.statuses[employee_id] = status

    def toggle_holiday(self) -> None:
        """Stage Holiday for everyone, or revert everyone to Absent."""
        if not self.can_edit:
            raise EditModeError(f"Attendance for {self.selected_date.isoformat()} is recorded; enter edit mode first")
        self.is_holiday = not self.is_holiday
        status = "Holiday" if self.is_holiday else DEFAULT_STATUS
        self.statuses = {e["employee_id"]: status for e in self.employees}

    def is_complete(self) -> bool:
        return all(self.statuses.get(e["employee_id"]) for e in self.employees)

    def submit(self) -> Dict:
        """
        Send every employee's draft status for selected_date.

        A day that was already recorded is sent with edit=True.
        """
        if not self.can_edit:
            raise EditModeError(f"Attendance for {self.selected_date.isoformat()} is recorded; enter edit mode first")
        if not self.employees:
            raise ValueError("No employees loaded")
        if not self.is_complete():
            raise ValueError("Every employee needs a status before submitting")

        entries = [
            {"employee_id": e["employee_id"], "status": self.statuses[e["employee_id"]]}
            for e in self.employees
        ]
        result = self.client.submit_attendance(
            entries, day=self.selected_date, edit=self.attendance_recorded,
        )
        self.load()
        return result


class StockTable:
    def __init__(self, client: OfficeClient):
        self.client = client
        self.items: List[Dict] = []
        self.search_term: str = ""

    def load(self) -> None:
        self.items = self.client.list_stock()

    def set_search(self, term: str) -> None:
        self.search_term = (term or "").strip().lower()

    @property
    def filtered_items(self) -> List[Dict]:
        term = self.search_term
        if not term:
            return list(self.items)
        return [
            item for item in self.items
            if term in str(item["id"])
            or term in (item.get("name") or "").lower()
            or term in (item.get("rack_no") or "").lower()
            or term in (item.get("size") or "").lower()
            or term in (item.get("bulk_retail") or "").lower()
        ]

    @staticmethod
    def check_new_item(item: Dict) -> None:
        try:
            quantity = int(item.get("total_quantity") or 0)
        except (TypeError, ValueError):
            quantity = 0
        if not item.get("id") or not item.get("name") or not item.get("colour") or quantity <= 0:
            raise ValueError("Please fill in all fields correctly.")

    def add(self, item: Dict) -> Dict:
        self.check_new_item(item)
        created = self.client.create_stock(item)
        self.items.append(created)
        return created

    def edit(self, item_id: int, changes: Dict) -> Dict:
        updated = self.client.update_stock(item_id, changes)
        self.items = [updated if i["id"] == item_id else i for i in self.items]
        return updated

    def delete(self, item_id: int) -> None:
        self.client.delete_stock(item_id)
        self.items = [i for i in self.items if i["id"] != item_id]
