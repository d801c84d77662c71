"""
Python client for the office API: an HTTP wrapper plus page-state objects
for the attendance sheet and the stock table.
"""
from .api import ApiError, OfficeClient
from .sheets import AttendanceSheet, EditModeError, StockTable

__all__ = ['ApiError', 'OfficeClient', 'AttendanceSheet', 'EditModeError', 'StockTable']
