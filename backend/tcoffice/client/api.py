# Overview: httpx wrapper around the office REST API.

from __future__ import annotations

import os
from datetime import date
from typing import Any, Dict, Iterable, Optional

import httpx


DEFAULT_BACKEND_URL = "http://127.0.0.1:5000"


class ApiError(Exception):
    """Non-2xx response from the API; message is the server's "error" string."""

    def __init__(self, status_code: int, message: str, payload: Optional[Dict[str, Any]] = None):
        self.status_code = status_code
        self.message = message
        self.payload = payload or {}
        super().__init__(f"{status_code}: {message}")


def _iso(day) -> Optional[str]:
    if day is None:
        return None
    if isinstance(day, date):
        return day.isoformat()
    return str(day)


class OfficeClient:
    """
    HTTP client with session handling and one method per endpoint.

    The session cookie set by /login is kept by the underlying httpx.Client;
    the token is also sent as a Bearer header so non-cookie transports work.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = (base_url or os.environ.get("TC_BACKEND_URL") or DEFAULT_BACKEND_URL).rstrip("/")
        self.client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)
        self.token: Optional[str] = None
        self.current_user: Optional[Dict] = None

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "OfficeClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self.client.request(method, path, headers=self._headers(), **kwargs)
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            message = payload.get("error") if isinstance(payload, dict) else None
            raise ApiError(
                response.status_code,
                message or response.reason_phrase,
                payload if isinstance(payload, dict) else None,
            )
        return payload

    # -- auth ---------------------------------------------------------------

    def register(self, email: str, password: str, name: Optional[str] = None) -> Dict:
        body = {"email": email, "password": password}
        if name:
            body["name"] = name
        return self._request("POST", "/register", json=body)["user"]

    def login(self, email: str, password: str) -> Dict:
        data = self._request("POST", "/login", json={"email": email, "password": password})
        self.token = data.get("token")
        self.current_user = data.get("user")
        return data

    def logout(self) -> None:
        try:
            self._request("POST", "/logout")
        finally:
            self.token = None
            self.current_user = None
            self.client.cookies.clear()

    def me(self) -> Dict:
        return self._request("GET", "/me")["user"]

    # -- attendance ---------------------------------------------------------

    def list_employees(self, search: Optional[str] = None) -> Dict:
        params = {"q": search} if search else None
        return self._request("GET", "/attendance", params=params)

    def get_attendance(self, day) -> Dict:
        return self._request("GET", f"/attendance/{_iso(day)}")

    def submit_attendance(self, entries: Iterable[Dict], *, day=None, edit: bool = False) -> Dict:
        body: Dict[str, Any] = {"attendance": list(entries), "edit": edit}
        if day is not None:
            body["date"] = _iso(day)
        return self._request("POST", "/attendance", json=body)

    def get_day_sheet(self, day=None) -> Dict:
        params = {"date": _iso(day)} if day is not None else None
        return self._request("GET", "/newattendance", params=params)

    def get_monthly_summary(self, month: int, year: Optional[int] = None) -> Dict:
        params = {"year": year} if year is not None else None
        return self._request("GET", f"/newattendance/{month}", params=params)

    def submit_dated_attendance(self, entries: Iterable[Dict], *, edit: bool = False) -> Dict:
        """Submit entries that each carry their own date."""
        body = {
            "attendance": [dict(e, date=_iso(e.get("date"))) for e in entries],
            "edit": edit,
        }
        return self._request("POST", "/newattendance", json=body)

    def set_holiday(self, day, *, holiday: bool = True, edit: bool = False) -> Dict:
        return self._request(
            "POST", "/newattendance/holiday",
            json={"date": _iso(day), "holiday": holiday, "edit": edit},
        )

    # -- stock --------------------------------------------------------------

    def list_stock(self, search: Optional[str] = None) -> list:
        params = {"q": search} if search else None
        return self._request("GET", "/stock", params=params)["items"]

    def get_stock(self, item_id: int) -> Dict:
        return self._request("GET", f"/stock/{item_id}")

    def create_stock(self, item: Dict) -> Dict:
        return self._request("POST", "/stock", json=item)

    def update_stock(self, item_id: int, changes: Dict) -> Dict:
        return self._request("PUT", f"/stock/{item_id}", json=changes)

    def delete_stock(self, item_id: int) -> None:
        self._request("DELETE", f"/stock/{item_id}")

    # -- system -------------------------------------------------------------

    def health(self) -> Dict:
        response = self.client.get("/health")
        return response.json()
