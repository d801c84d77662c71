from .auth import User, SessionToken
from .attendance import Employee, AttendanceRecord, ATTENDANCE_STATUSES
from .stock import StockItem

__all__ = [
    'User', 'SessionToken',
    'Employee', 'AttendanceRecord', 'ATTENDANCE_STATUSES',
    'StockItem',
]
