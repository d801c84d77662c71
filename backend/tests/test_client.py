# Overview: Pytest coverage for the httpx client and page-state helpers, run against the app in-process.

"""
Client Tests

OfficeClient talks to the Flask app through httpx.WSGITransport, so these
exercise the full request path: login cookie, JSON bodies, error mapping.
"""

from datetime import date

import httpx
import pytest

from tcoffice.client import ApiError, AttendanceSheet, EditModeError, OfficeClient, StockTable


@pytest.fixture
def office(app):
    client = OfficeClient("http://testserver", transport=httpx.WSGITransport(app=app))
    yield client
    client.close()


@pytest.fixture
def logged_in(office, user):
    office.login("owner@tc.local", "Password123!")
    return office


class TestOfficeClient:
    def test_register_and_login(self, office):
        created = office.register("clerk@tc.local", "Password123!", name="Clerk")
        assert created["email"] == "clerk@tc.local"

        office.login("clerk@tc.local", "Password123!")

        assert office.token
        assert office.me()["name"] == "Clerk"

    def test_bad_login_raises(self, office, user):
        with pytest.raises(ApiError) as exc_info:
            office.login("owner@tc.local", "nope")
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Invalid email or password"

    def test_requires_login(self, office):
        with pytest.raises(ApiError) as exc_info:
            office.list_stock()
        assert exc_info.value.status_code == 401

    def test_logout_clears_session(self, logged_in):
        logged_in.logout()

        assert logged_in.token is None
        with pytest.raises(ApiError):
            logged_in.me()

    def test_failures_exposed_on_payload(self, logged_in, employees):
        with pytest.raises(ApiError) as exc_info:
            logged_in.submit_attendance([{"employee_id": 9, "status": "Present"}], day=date(2024, 6, 1))
        assert exc_info.value.payload["failures"][0]["employee_id"] == 9

    def test_dated_submission_and_summary(self, logged_in, employees):
        logged_in.submit_dated_attendance([
            {"employee_id": 1, "status": "Present", "date": date(2024, 6, 3)},
            {"employee_id": 1, "status": "Half Day", "date": date(2024, 6, 4)},
        ])
        logged_in.set_holiday(date(2024, 6, 5))

        summary = logged_in.get_monthly_summary(6, year=2024)

        assert summary["1"] == {"present": 1, "absent": 0, "halfDay": 1, "holidays": 1, "total": 3}
        assert len(logged_in.list_employees()["employees"]) == 3

    def test_get_stock(self, logged_in):
        logged_in.create_stock({"id": 3, "name": "Tie", "colour": "Navy", "total_quantity": 2})
        assert logged_in.get_stock(3)["colour"] == "Navy"

    def test_health(self, office):
        assert office.health()["status"] == "healthy"


class TestAttendanceSheet:
    def test_first_submission_then_edit(self, logged_in, employees):
        sheet = AttendanceSheet(logged_in, date(2024, 6, 1))
        sheet.load()

        assert sheet.attendance_recorded is False
        assert sheet.statuses == {1: "Absent", 2: "Absent", 3: "Absent"}
        assert sheet.can_edit

        sheet.set_status(1, "Present")
        sheet.set_status(3, "Half Day")
        result = sheet.submit()

        assert result["saved"] == 3
        assert sheet.attendance_recorded is True
        assert sheet.month_summary[1]["present"] == 1
        assert sheet.month_summary[3]["halfDay"] == 1

        with pytest.raises(EditModeError):
            sheet.set_status(2, "Present")

        sheet.enter_edit_mode()
        sheet.set_status(2, "Present")
        sheet.submit()

        assert sheet.statuses[2] == "Present"
        assert sheet.month_summary[2] == {"present": 1, "absent": 0, "halfDay": 0, "holidays": 0, "total": 1}
        assert sheet.is_editing is False

    def test_cancel_edit_discards_drafts(self, logged_in, employees):
        sheet = AttendanceSheet(logged_in, date(2024, 6, 1))
        sheet.load()
        sheet.submit()

        sheet.enter_edit_mode()
        sheet.set_status(1, "Holiday")
        sheet.cancel_edit()

        assert sheet.statuses[1] == "Absent"
        assert not sheet.can_edit

    def test_holiday_toggle(self, logged_in, employees):
        sheet = AttendanceSheet(logged_in, date(2024, 6, 2))
        sheet.load()

        sheet.toggle_holiday()
        assert set(sheet.statuses.values()) == {"Holiday"}
        sheet.submit()

        assert sheet.is_holiday is True
        assert all(summary["holidays"] == 1 for summary in sheet.month_summary.values())

    def test_set_status_validation(self, logged_in, employees):
        sheet = AttendanceSheet(logged_in, date(2024, 6, 1))
        sheet.load()

        with pytest.raises(ValueError):
            sheet.set_status(1, "Late")
        with pytest.raises(ValueError):
            sheet.set_status(77, "Present")

    def test_search(self, logged_in, employees):
        sheet = AttendanceSheet(logged_in, date(2024, 6, 1))
        sheet.load()

        sheet.set_search("CH")
        assert [e["name"] for e in sheet.filtered_employees] == ["Chen"]

        sheet.set_search("")
        assert len(sheet.filtered_employees) == 3


class TestStockTable:
    def test_add_edit_delete(self, logged_in):
        table = StockTable(logged_in)
        table.load()
        assert table.items == []

        table.add({"id": 5, "name": "Belt", "colour": "Black", "total_quantity": 12, "rack_no": "R2"})
        table.add({"id": 6, "name": "Cap", "colour": "White", "total_quantity": 4})

        table.edit(5, {"balance_quantity": 7})
        assert table.items[0]["balance_quantity"] == 7

        table.set_search("r2")
        assert [i["id"] for i in table.filtered_items] == [5]

        table.delete(5)
        table.load()
        assert [i["id"] for i in table.items] == [6]

    @pytest.mark.parametrize("item", [
        {"id": 1, "name": "", "colour": "Red", "total_quantity": 1},
        {"id": 1, "name": "Hat", "colour": "", "total_quantity": 1},
        {"id": 1, "name": "Hat", "colour": "Red", "total_quantity": 0},
        {"name": "Hat", "colour": "Red", "total_quantity": 1},
    ])
    def test_add_form_checks(self, logged_in, item):
        table = StockTable(logged_in)
        with pytest.raises(ValueError, match="Please fill in all fields correctly."):
            table.add(item)

    def test_duplicate_id_surfaces_conflict(self, logged_in):
        table = StockTable(logged_in)
        table.add({"id": 5, "name": "Belt", "colour": "Black", "total_quantity": 1})

        with pytest.raises(ApiError) as exc_info:
            table.add({"id": 5, "name": "Belt", "colour": "Black", "total_quantity": 1})
        assert exc_info.value.status_code == 409
