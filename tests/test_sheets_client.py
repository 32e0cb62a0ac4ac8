"""Tests for app/connectors/sheets/client.py using httpx.MockTransport."""

import asyncio

import httpx
import pytest

from app.connectors.sheets import client as sheets_client
from app.connectors.sheets.client import SheetsAPIError, SheetsClient


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    monkeypatch.setattr(sheets_client, "RETRY_BASE_DELAY", 0)


def _client(handler, **kwargs) -> SheetsClient:
    c = SheetsClient(sheet_id="sheet123", **kwargs)
    c._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return c


def _run(c: SheetsClient, range_: str):
    async def go():
        try:
            return await c.fetch_values(range_)
        finally:
            await c.close()

    return asyncio.run(go())


def test_fetch_values_with_api_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        return httpx.Response(200, json={"values": [["Date"], ["10/1/2026", "5"]]})

    rows = _run(_client(handler, api_key="k"), "Summary: Day!A:J")
    assert rows == [["Date"], ["10/1/2026", "5"]]
    assert seen["url"].params["key"] == "k"
    assert "/spreadsheets/sheet123/values/" in str(seen["url"])


def test_bearer_token_preferred():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer t"
        assert "key" not in request.url.params
        return httpx.Response(200, json={})

    assert _run(_client(handler, api_key="k", access_token="t"), "A:B") == []


def test_server_error_is_retried():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) < 3:
            return httpx.Response(503, json={"error": {"message": "busy"}})
        return httpx.Response(200, json={"values": [["ok"]]})

    assert _run(_client(handler, api_key="k"), "A:B") == [["ok"]]
    assert len(calls) == 3


def test_client_error_raises_with_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"error": {"message": "The caller does not have permission"}})

    with pytest.raises(SheetsAPIError) as exc:
        _run(_client(handler, api_key="k"), "A:B")
    assert exc.value.status_code == 403
    assert "permission" in str(exc.value)


def test_rate_limit_exhausts_retries():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429)

    with pytest.raises(SheetsAPIError) as exc:
        _run(_client(handler, api_key="k"), "A:B")
    assert exc.value.status_code == 429


def test_missing_credentials(monkeypatch):
    monkeypatch.setattr(sheets_client.settings, "sheets_api_key", None)
    monkeypatch.setattr(sheets_client.settings, "sheets_access_token", None)

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(SheetsAPIError):
        _run(_client(handler), "A:B")


def test_server_error_after_last_attempt_keeps_status():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(500, json={"error": {"message": "Internal error encountered."}})

    with pytest.raises(SheetsAPIError) as exc:
        _run(_client(handler, api_key="k"), "A:B")
    assert exc.value.status_code == 500
    assert "Internal error" in str(exc.value)
    assert len(calls) == sheets_client.MAX_RETRIES
