"""
issuance_services.api_client -- Thin client for the ERP backend.

Responsibility:
    The editor's only boundary.  ``RequestApi`` is the shape the panel
    needs; ``HttpRequestApi`` implements it over JSON/HTTP with
    ``requests``.  The backend owns the contract; this module only knows
    which path each call goes to and how to turn failures into
    ``RemoteRequestError``.

Failure modes:
    - Connection errors, timeouts and non-2xx responses raise
      ``RemoteRequestError`` carrying the status code (when there is one)
      and the backend's ``message``/``error`` text (when there is one).
    - No retries.  The caller decides what the user sees.
"""

from __future__ import annotations

from typing import Any, Protocol

import requests

from issuance_config.schema import ApiConfig
from issuance_kernel.domain.lines import RequestKind
from issuance_kernel.exceptions import RemoteRequestError
from issuance_kernel.logging_config import get_logger

logger = get_logger("services.api_client")

_PREFIXES: dict[RequestKind, str] = {
    RequestKind.MIF: "approvals",
    RequestKind.MRF: "mrf-approvals",
}


class RequestApi(Protocol):
    """Backend operations the approval panels depend on."""

    def fetch_request_details(
        self, kind: RequestKind, request_id: str, past: bool = False,
    ) -> list[dict[str, Any]]:
        ...

    def approve_request(
        self,
        kind: RequestKind,
        request_id: str,
        updated_items: list[dict[str, Any]],
        notes: list[dict[str, Any]],
        priority: bool,
        priority_set_by: str | None = None,
    ) -> dict[str, Any]:
        ...

    def reject_request(
        self,
        kind: RequestKind,
        request_id: str,
        notes: list[dict[str, Any]],
        updated_items: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        ...

    def update_vendor_details(
        self, parent_id: str, component_id: str, vendor_fields: dict[str, Any],
    ) -> dict[str, Any]:
        ...

    def submit_issue(
        self,
        request_id: str,
        items: list[dict[str, Any]],
        issue_date: str,
        notes: list[dict[str, Any]],
    ) -> dict[str, Any]:
        ...


def _backend_message(response: requests.Response | None) -> str | None:
    if response is None:
        return None
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return text or None
    if isinstance(body, dict):
        for key in ("message", "error"):
            if body.get(key):
                return str(body[key])
    return None


class HttpRequestApi:
    """``RequestApi`` over HTTP with a bearer token."""

    def __init__(
        self,
        config: ApiConfig,
        token: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = config.base_url.rstrip("/")
        self._timeout = config.timeout_seconds
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"
        else:
            logger.warning("api_client_without_token")

    def _call(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self._base_url}/{path}"
        try:
            response = self._session.request(
                method, url, json=json, params=params, timeout=self._timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = _backend_message(exc.response)
            logger.error(
                "api_call_failed",
                extra={"operation": operation, "url": url, "status_code": status, "detail": message},
            )
            raise RemoteRequestError(operation, status, message) from exc
        except requests.RequestException as exc:
            logger.error(
                "api_call_failed",
                extra={"operation": operation, "url": url, "detail": str(exc)},
            )
            raise RemoteRequestError(operation, None, None) from exc

        logger.debug(
            "api_call_succeeded",
            extra={"operation": operation, "url": url, "status_code": response.status_code},
        )
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteRequestError(operation, response.status_code, "Response was not JSON") from exc

    def fetch_request_details(
        self, kind: RequestKind, request_id: str, past: bool = False,
    ) -> list[dict[str, Any]]:
        data = self._call(
            "fetch_request_details",
            "GET",
            f"{_PREFIXES[kind]}/request-details/{request_id}",
            params={"past": "true"} if past else None,
        )
        return data if isinstance(data, list) else []

    def approve_request(
        self,
        kind: RequestKind,
        request_id: str,
        updated_items: list[dict[str, Any]],
        notes: list[dict[str, Any]],
        priority: bool,
        priority_set_by: str | None = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "updatedItems": updated_items,
            "note": notes,
            "priority": priority,
        }
        if kind is RequestKind.MRF:
            body["prioritySetBy"] = priority_set_by if priority else None
        return self._call(
            "approve_request", "PUT",
            f"{_PREFIXES[kind]}/approve-request/{request_id}",
            json=body,
        )

    def reject_request(
        self,
        kind: RequestKind,
        request_id: str,
        notes: list[dict[str, Any]],
        updated_items: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"note": notes}
        if kind is RequestKind.MRF:
            body["updatedItems"] = updated_items or []
        return self._call(
            "reject_request", "PUT",
            f"{_PREFIXES[kind]}/reject-request/{request_id}",
            json=body,
        )

    def update_vendor_details(
        self, parent_id: str, component_id: str, vendor_fields: dict[str, Any],
    ) -> dict[str, Any]:
        return self._call(
            "update_vendor_details", "PUT", "vendors/update",
            json={"mrf_id": parent_id, "component_id": component_id, **vendor_fields},
        )

    def submit_issue(
        self,
        request_id: str,
        items: list[dict[str, Any]],
        issue_date: str,
        notes: list[dict[str, Any]],
    ) -> dict[str, Any]:
        return self._call(
            "submit_issue", "POST", "nc-requests/submit-material-issue",
            json={"umi": request_id, "items": items, "issue_date": issue_date, "note": notes},
        )
