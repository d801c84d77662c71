from __future__ import annotations

from ..extensions import db
from tcoffice.time_utils import to_iso_date, to_utc_z


STATUS_PRESENT = "Present"
STATUS_ABSENT = "Absent"
STATUS_HALF_DAY = "Half Day"
STATUS_HOLIDAY = "Holiday"

ATTENDANCE_STATUSES = (STATUS_PRESENT, STATUS_ABSENT, STATUS_HALF_DAY, STATUS_HOLIDAY)


class Employee(db.Model):
    """
    Attendance subject. Rows are created out-of-band (CLI); the HTTP API
    only reads them.
    """
    __tablename__ = "employees"

    employee_id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    name = db.Column(db.String(120), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Employee employee_id={self.employee_id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "name": self.name,
        }


class AttendanceRecord(db.Model):
    """
    One employee's status for one calendar day.

    INVARIANT: at most one row per (employee_id, date). Submissions upsert;
    rows are never deleted through the API and overwritten values are not kept.
    """
    __tablename__ = "attendance_records"
    __table_args__ = (
        db.UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
        db.CheckConstraint(
            "status IN ('Present', 'Absent', 'Half Day', 'Holiday')",
            name="ck_attendance_status",
        ),
        db.Index("ix_attendance_date", "date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.employee_id"), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)

    # Present, Absent, Half Day, Holiday
    status = db.Column(db.String(16), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=True)

    employee = db.relationship("Employee", backref=db.backref("attendance_records", lazy=True))

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "date": to_iso_date(self.date),
            "status": self.status,
            "updated_at": to_utc_z(self.updated_at) if self.updated_at else None,
        }
