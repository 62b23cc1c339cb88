"""
Spreadsheet store client.

Range-addressed read / write / clear against the Google Sheets values API.
Reads use the static API key; writes and clears need a bearer token.

API docs: https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values
"""

import logging
from collections.abc import Sequence
from urllib.parse import quote

import httpx

from arcaneledger.config import Settings
from arcaneledger.models.failure import ConfigurationError, StoreError

logger = logging.getLogger(__name__)


def _upstream_message(response: httpx.Response) -> str:
    """Error message from a Sheets error body, empty if there is none."""
    try:
        body = response.json()
    except ValueError:
        return ""
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return str(body["error"].get("message") or "")
    return ""


class RemoteStoreClient:
    """
    Client for one spreadsheet.

    Every non-success status raises StoreError carrying the status code and
    the upstream message. Network failures raise StoreError with no status.
    """

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        if not settings.is_configured:
            raise ConfigurationError("spreadsheet_id, api_key and client_id are required")
        self._spreadsheet_id = settings.spreadsheet_id
        self._api_key = settings.api_key
        self._base_url = settings.sheets_base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.http_timeout)

    def _values_url(self, range_spec: str, suffix: str = "") -> str:
        encoded = quote(range_spec, safe="!")
        return f"{self._base_url}/{self._spreadsheet_id}/values/{encoded}{suffix}"

    async def _send(self, operation: str, request: httpx.Request) -> httpx.Response:
        try:
            response = await self._client.send(request)
        except httpx.RequestError as e:
            raise StoreError(operation, None, str(e)) from e
        if not response.is_success:
            raise StoreError(operation, response.status_code, _upstream_message(response))
        return response

    async def read_range(self, range_spec: str) -> list[list[str]]:
        """
        Read a range.

        Args:
            range_spec: A1 range, e.g. "Collection!A2:H1000"

        Returns:
            Rows as lists of strings; empty list for an empty range

        Raises:
            StoreError: On non-success status or network failure
        """
        request = self._client.build_request(
            "GET", self._values_url(range_spec), params={"key": self._api_key}
        )
        response = await self._send("read", request)
        try:
            rows = response.json().get("values") or []
        except ValueError as e:
            raise StoreError("read", response.status_code, "response is not valid JSON") from e
        logger.debug("Read %d rows from %s", len(rows), range_spec)
        return [[str(cell) for cell in row] for row in rows]

    async def write_range(
        self, range_spec: str, rows: Sequence[Sequence[str]], token: str
    ) -> None:
        """
        Overwrite a range starting at its anchor cell.

        Raises:
            StoreError: On non-success status or network failure
        """
        request = self._client.build_request(
            "PUT",
            self._values_url(range_spec),
            params={"valueInputOption": "RAW"},
            headers={"Authorization": f"Bearer {token}"},
            json={"range": range_spec, "majorDimension": "ROWS", "values": [list(r) for r in rows]},
        )
        await self._send("write", request)
        logger.debug("Wrote %d rows to %s", len(rows), range_spec)

    async def clear_range(self, range_spec: str, token: str) -> None:
        """
        Clear every value in a range.

        Raises:
            StoreError: On non-success status or network failure
        """
        request = self._client.build_request(
            "POST",
            self._values_url(range_spec, ":clear"),
            headers={"Authorization": f"Bearer {token}"},
        )
        await self._send("clear", request)
        logger.debug("Cleared %s", range_spec)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
