"""
Tests for HttpRequestApi against a mocked ``requests.Session``.
"""

import json
from unittest.mock import MagicMock

import pytest
import requests

from issuance_config.schema import ApiConfig
from issuance_kernel.domain.lines import RequestKind
from issuance_kernel.exceptions import RemoteRequestError
from issuance_services.api_client import HttpRequestApi

BASE_URL = "http://erp.test/api"


def make_response(status: int = 200, body=None, text: str | None = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.url = BASE_URL
    if text is not None:
        response._content = text.encode()
    elif body is not None:
        response._content = json.dumps(body).encode()
    else:
        response._content = b""
    return response


def make_client(*responses, token: str | None = "tok"):
    session = MagicMock()
    session.headers = {}
    if responses:
        session.request.side_effect = list(responses)
    client = HttpRequestApi(ApiConfig(base_url=BASE_URL + "/", timeout_seconds=3), token, session)
    return client, session


def sent(session, index: int = 0):
    args, kwargs = session.request.call_args_list[index]
    return args[0], args[1], kwargs


class TestSession:
    def test_bearer_token_header(self):
        _, session = make_client()
        assert session.headers["Authorization"] == "Bearer tok"
        assert session.headers["Accept"] == "application/json"

    def test_no_token_no_header(self):
        _, session = make_client(token=None)
        assert "Authorization" not in session.headers


class TestEndpoints:
    def test_fetch_mif_details(self):
        client, session = make_client(make_response(body=[{"component_id": "C-1"}]))
        rows = client.fetch_request_details(RequestKind.MIF, "UMI-1")
        method, url, kwargs = sent(session)
        assert (method, url) == ("GET", f"{BASE_URL}/approvals/request-details/UMI-1")
        assert kwargs["params"] is None
        assert kwargs["timeout"] == 3
        assert rows == [{"component_id": "C-1"}]

    def test_fetch_past_mrf_details(self):
        client, session = make_client(make_response(body={"unexpected": True}))
        rows = client.fetch_request_details(RequestKind.MRF, "MRF-1", past=True)
        _, url, kwargs = sent(session)
        assert url == f"{BASE_URL}/mrf-approvals/request-details/MRF-1"
        assert kwargs["params"] == {"past": "true"}
        assert rows == []

    def test_approve_mrf_body(self):
        client, session = make_client(make_response(body={"message": "done"}))
        result = client.approve_request(
            RequestKind.MRF, "MRF-1", [{"component_id": "C-1"}], [], True, "asha",
        )
        method, url, kwargs = sent(session)
        assert (method, url) == ("PUT", f"{BASE_URL}/mrf-approvals/approve-request/MRF-1")
        assert kwargs["json"] == {
            "updatedItems": [{"component_id": "C-1"}],
            "note": [],
            "priority": True,
            "prioritySetBy": "asha",
        }
        assert result == {"message": "done"}

    def test_approve_mif_has_no_priority_setter(self):
        client, session = make_client(make_response(body={}))
        client.approve_request(RequestKind.MIF, "UMI-1", [], [], False)
        assert "prioritySetBy" not in sent(session)[2]["json"]

    def test_reject_mif_sends_only_notes(self):
        client, session = make_client(make_response())
        assert client.reject_request(RequestKind.MIF, "UMI-1", [{"content": "x"}]) == {}
        assert sent(session)[2]["json"] == {"note": [{"content": "x"}]}

    def test_reject_mrf_includes_items(self):
        client, session = make_client(make_response(body={}))
        client.reject_request(RequestKind.MRF, "MRF-1", [], None)
        assert sent(session)[2]["json"] == {"note": [], "updatedItems": []}

    def test_update_vendor_details(self):
        client, session = make_client(make_response(body={}))
        client.update_vendor_details("MRF-1", "C-1", {"vendor": "Mouser"})
        method, url, kwargs = sent(session)
        assert (method, url) == ("PUT", f"{BASE_URL}/vendors/update")
        assert kwargs["json"] == {"mrf_id": "MRF-1", "component_id": "C-1", "vendor": "Mouser"}

    def test_submit_issue(self):
        client, session = make_client(make_response(body={}))
        client.submit_issue("UMI-1", [], "2024-01-01", [])
        method, url, kwargs = sent(session)
        assert (method, url) == ("POST", f"{BASE_URL}/nc-requests/submit-material-issue")
        assert kwargs["json"]["umi"] == "UMI-1"


class TestFailures:
    def test_http_error_carries_backend_message(self):
        client, _ = make_client(make_response(409, body={"message": "Already approved"}))
        with pytest.raises(RemoteRequestError) as exc_info:
            client.approve_request(RequestKind.MIF, "UMI-1", [], [], False)
        error = exc_info.value
        assert error.status_code == 409
        assert error.user_message == "Already approved"

    def test_error_field_used_when_no_message(self):
        client, _ = make_client(make_response(400, body={"error": "Bad quantity"}))
        with pytest.raises(RemoteRequestError) as exc_info:
            client.submit_issue("UMI-1", [], "2024-01-01", [])
        assert exc_info.value.backend_message == "Bad quantity"

    def test_plain_text_error_body(self):
        client, _ = make_client(make_response(502, text="Bad Gateway"))
        with pytest.raises(RemoteRequestError) as exc_info:
            client.fetch_request_details(RequestKind.MIF, "UMI-1")
        assert exc_info.value.backend_message == "Bad Gateway"

    def test_connection_error(self):
        client, session = make_client()
        session.request.side_effect = requests.ConnectionError("refused")
        with pytest.raises(RemoteRequestError) as exc_info:
            client.fetch_request_details(RequestKind.MIF, "UMI-1")
        assert exc_info.value.status_code is None
        assert exc_info.value.user_message == "Failed to fetch request details."

    def test_non_json_success_body(self):
        client, _ = make_client(make_response(200, text="<html>"))
        with pytest.raises(RemoteRequestError) as exc_info:
            client.fetch_request_details(RequestKind.MIF, "UMI-1")
        assert exc_info.value.backend_message == "Response was not JSON"
