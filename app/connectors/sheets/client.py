"""TRENDLINE — Google Sheets Values Client.

Fetches raw daily rows for the rollup engines. Handles authentication,
retry logic and rate limiting; the engines start only once rows are in memory.
"""

import asyncio
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from app.config import settings
from app.core.logging import get_logger

logger = get_logger("sheets.client")

MAX_RETRIES = 3
RETRY_BASE_DELAY = 2  # seconds


class SheetsAPIError(Exception):
    """Raised when the Sheets API returns an error."""

    def __init__(self, message: str, status_code: int = 0):
        self.status_code = status_code
        super().__init__(message)


class SheetsClient:
    """Async HTTP client for the Sheets v4 values endpoint."""

    def __init__(
        self,
        sheet_id: str | None = None,
        api_key: str | None = None,
        access_token: str | None = None,
    ):
        self.sheet_id = sheet_id or settings.sheet_id
        self.api_key = api_key or settings.sheets_api_key
        self.access_token = access_token or settings.sheets_access_token
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=30.0)
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    def _auth(self) -> tuple[Dict[str, str], Dict[str, str]]:
        """Return (params, headers) carrying the configured credential."""
        if self.access_token:
            return {}, {"Authorization": f"Bearer {self.access_token}"}
        if self.api_key:
            return {"key": self.api_key}, {}
        raise SheetsAPIError("Missing Sheets credentials", status_code=500)

    # ── Core Request Method ──

    @staticmethod
    def _backoff(attempt: int) -> float:
        return RETRY_BASE_DELAY * (2 ** (attempt - 1))

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        """Pull ``error.message`` out of a Google API error body."""
        if resp.headers.get("content-type", "").startswith("application/json"):
            message = resp.json().get("error", {}).get("message")
            if message:
                return message
        return f"Sheets API returned {resp.status_code}"

    async def _request(
        self,
        url: str,
        params: Dict[str, Any] | None = None,
    ) -> Dict[str, Any]:
        """GET ``url``; 429, 5xx and transport failures are retried with backoff."""
        auth_params, headers = self._auth()
        params = {**(params or {}), **auth_params}
        client = await self._get_client()

        for attempt in range(1, MAX_RETRIES + 1):
            try:
                resp = await client.get(url, params=params, headers=headers)
            except httpx.RequestError as e:
                if attempt == MAX_RETRIES:
                    raise SheetsAPIError(
                        f"Connection failed after {MAX_RETRIES} attempts: {e}"
                    ) from e
                logger.warning(f"Sheets request error: {e} (attempt {attempt}/{MAX_RETRIES})")
                await asyncio.sleep(self._backoff(attempt))
                continue

            if resp.is_success:
                return resp.json()

            retryable = resp.status_code == 429 or resp.status_code >= 500
            if not retryable:
                raise SheetsAPIError(self._error_message(resp), resp.status_code)
            if attempt == MAX_RETRIES:
                break
            logger.warning(
                f"Sheets returned {resp.status_code}; retrying "
                f"(attempt {attempt}/{MAX_RETRIES})"
            )
            await asyncio.sleep(self._backoff(attempt))

        if resp.status_code == 429:
            raise SheetsAPIError("Max retries exhausted", status_code=429)
        raise SheetsAPIError(self._error_message(resp), resp.status_code)

    # ── Values ──

    async def fetch_values(
        self, range_: str, sheet_id: str | None = None
    ) -> List[List[str]]:
        """Fetch a range as formatted strings, header row included."""
        sid = sheet_id or self.sheet_id
        if not sid:
            raise SheetsAPIError("No spreadsheet id configured", status_code=500)
        url = f"{settings.sheets_base_url}/spreadsheets/{sid}/values/{quote(range_, safe='')}"
        result = await self._request(url, {"valueRenderOption": "FORMATTED_VALUE"})
        values = result.get("values", [])
        logger.info(f"Fetched {len(values)} rows from {range_}")
        return values
