"""Record repository backed by a hosted PostgREST (Supabase) table."""

import logging
from typing import Any

import httpx

from card_scanner.errors import (
    ConfigurationError,
    RecordNotFoundError,
    ServiceError,
    TransportError,
)
from card_scanner.models.columns import DATE_KEY, ID_KEY, SHORT_ID_KEY
from card_scanner.models.record import Record
from card_scanner.storage.base import RecordRepository

logger = logging.getLogger(__name__)

TABLE = "contacts"
DATE_COLUMN = "date_added"


class HostedRecordRepository(RecordRepository):
    """Records stored in the ``contacts`` table of a PostgREST service."""

    def __init__(
        self,
        base_url: str | None,
        api_key: str | None,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ):
        """
        Initialize the hosted repository.

        Args:
            base_url: Project URL, e.g. "https://xyz.supabase.co".
            api_key: Anon or service key sent as ``apikey`` and bearer token.
            timeout: Request timeout in seconds.
            client: Optional preconfigured client, mainly for tests. It is
                left open by ``close``.

        Raises:
            ConfigurationError: If the URL or key is missing.
        """
        if not base_url or not api_key:
            raise ConfigurationError(
                "Hosted storage needs SUPABASE_URL and SUPABASE_KEY to be set."
            )
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    @property
    def name(self) -> str:
        return f"hosted:{self._base_url}"

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    @property
    def _table_url(self) -> str:
        return f"{self._base_url}/rest/v1/{TABLE}"

    def list_records(self) -> list[Record]:
        rows = self._request(
            "GET", params={"select": "*", "order": f"{DATE_COLUMN}.desc"}
        )
        return [self._from_row(row) for row in rows]

    def get(self, record_id: str) -> Record | None:
        rows = self._request("GET", params={"select": "*", "id": f"eq.{record_id}"})
        return self._from_row(rows[0]) if rows else None

    def create(self, record: Record) -> Record:
        row = self._to_row(record)
        row.pop(ID_KEY, None)
        rows = self._request("POST", json=[row], returning=True)
        if not rows:
            raise ServiceError("Insert returned no row")
        return self._from_row(rows[0])

    def update(self, record: Record) -> Record:
        row = self._to_row(record)
        row.pop(ID_KEY, None)
        rows = self._request(
            "PATCH", params={"id": f"eq.{record.id}"}, json=row, returning=True
        )
        if not rows:
            raise RecordNotFoundError(f"No contact with id {record.id}")
        return self._from_row(rows[0])

    def delete(self, record_id: str) -> None:
        self._request("DELETE", params={"id": f"eq.{record_id}"})

    def clear(self) -> None:
        # PostgREST refuses unfiltered deletes
        self._request("DELETE", params={"id": "not.is.null"})

    def short_id_exists(self, short_id: int) -> bool:
        rows = self._request(
            "GET",
            params={"select": SHORT_ID_KEY, SHORT_ID_KEY: f"eq.{short_id}"},
        )
        return bool(rows)

    def _request(
        self,
        method: str,
        params: dict[str, str] | None = None,
        json: Any = None,
        returning: bool = False,
    ) -> list[dict[str, Any]]:
        """Send one request to the table endpoint and return the JSON rows."""
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
        }
        if returning:
            headers["Prefer"] = "return=representation"

        try:
            resp = self._client.request(
                method, self._table_url, params=params, json=json, headers=headers
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            if e.response.status_code in (401, 403):
                raise ConfigurationError(
                    f"Hosted storage rejected the API key: {message}"
                ) from e
            raise ServiceError(f"Hosted storage error: {message}") from e
        except httpx.HTTPError as e:
            raise TransportError(
                f"Cannot reach hosted storage at {self._base_url}: {e}"
            ) from e

        if not resp.content:
            return []
        try:
            data = resp.json()
        except ValueError as e:
            raise ServiceError("Hosted storage returned a non-JSON body") from e
        return data if isinstance(data, list) else [data]

    def _to_row(self, record: Record) -> dict[str, Any]:
        row = record.to_flat()
        if DATE_KEY in row:
            row[DATE_COLUMN] = row.pop(DATE_KEY)
        return row

    def _from_row(self, row: dict[str, Any]) -> Record:
        row = dict(row)
        if DATE_COLUMN in row:
            row[DATE_KEY] = row.pop(DATE_COLUMN)
        return Record.from_flat(row)


def _error_message(response: httpx.Response) -> str:
    """Pull the message out of a PostgREST error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)
