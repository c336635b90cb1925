"""Append saved contacts to a Google Sheets spreadsheet."""

import logging
from typing import Any

import httpx

from card_scanner.errors import ConfigurationError, ServiceError, TransportError
from card_scanner.models.columns import ColumnConfig
from card_scanner.models.record import Record

logger = logging.getLogger(__name__)

DRIVE_FILES_URL = "https://www.googleapis.com/drive/v3/files"
SHEETS_URL = "https://sheets.googleapis.com/v4/spreadsheets"
SPREADSHEET_MIME = "application/vnd.google-apps.spreadsheet"
SHEET_TITLE = "Contacts"
DEFAULT_SPREADSHEET_NAME = "Visual Text Extractor Contacts"


class SheetsExporter:
    """
    Writes one row per contact into a named spreadsheet.

    The spreadsheet is looked up by name in the user's Drive and created
    with a header row of the visible column headers if missing. The header
    row is written only at creation.
    """

    def __init__(
        self,
        access_token: str | None,
        spreadsheet_name: str = DEFAULT_SPREADSHEET_NAME,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ):
        """
        Initialize the exporter.

        Args:
            access_token: OAuth access token with Drive file and Sheets scopes.
            spreadsheet_name: Title of the spreadsheet to find or create.
            timeout: Request timeout in seconds.
            client: Optional preconfigured client, mainly for tests. It is
                left open by ``close``.

        Raises:
            ConfigurationError: If no access token is given.
        """
        if not access_token:
            raise ConfigurationError(
                "Google Sheets export needs GOOGLE_ACCESS_TOKEN to be set."
            )
        self._token = access_token
        self._spreadsheet_name = spreadsheet_name
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)
        self._spreadsheet_id: str | None = None

    def __enter__(self) -> "SheetsExporter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client if this exporter created it."""
        if self._owns_client:
            self._client.close()

    def append(self, record: Record, config: ColumnConfig) -> str:
        """
        Append ``record`` as one row in visible-column order.

        Returns:
            Id of the spreadsheet written to.

        Raises:
            ConfigurationError: If the token is rejected.
            TransportError: If a Google API call fails.
        """
        visible = config.visible_fields()
        spreadsheet_id = self._spreadsheet_id or self._find_spreadsheet()
        if spreadsheet_id is None:
            spreadsheet_id = self._create_spreadsheet([f.header for f in visible])
        self._spreadsheet_id = spreadsheet_id

        row = [record.get(f.key) or "" for f in visible]
        self._call(
            "POST",
            f"{SHEETS_URL}/{spreadsheet_id}/values/{SHEET_TITLE}!A1:append",
            params={"valueInputOption": "USER_ENTERED"},
            json={"values": [row]},
        )
        logger.info("Appended contact %s to spreadsheet %s", record.id, spreadsheet_id)
        return spreadsheet_id

    def _find_spreadsheet(self) -> str | None:
        name = self._spreadsheet_name.replace("'", "\\'")
        data = self._call(
            "GET",
            DRIVE_FILES_URL,
            params={
                "q": (
                    f"name='{name}' and mimeType='{SPREADSHEET_MIME}' "
                    "and 'root' in parents and trashed=false"
                ),
                "fields": "files(id)",
            },
        )
        files = data.get("files") or []
        return files[0]["id"] if files else None

    def _create_spreadsheet(self, headers: list[str]) -> str:
        data = self._call(
            "POST",
            SHEETS_URL,
            json={
                "properties": {"title": self._spreadsheet_name},
                "sheets": [
                    {
                        "properties": {"title": SHEET_TITLE},
                        "data": [
                            {
                                "rowData": [
                                    {
                                        "values": [
                                            {"userEnteredValue": {"stringValue": h}}
                                            for h in headers
                                        ]
                                    }
                                ]
                            }
                        ],
                    }
                ],
            },
        )
        spreadsheet_id = data.get("spreadsheetId")
        if not spreadsheet_id:
            raise ServiceError("Could not create or find the spreadsheet.")
        logger.info("Created spreadsheet %r (%s)", self._spreadsheet_name, spreadsheet_id)
        return spreadsheet_id

    def _call(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {self._token}"}
        try:
            resp = self._client.request(method, url, headers=headers, **kwargs)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            message = _google_error(e.response)
            if e.response.status_code == 401:
                raise ConfigurationError(
                    f"Google API Error: {message}. Please re-authenticate."
                ) from e
            raise ServiceError(f"Google API Error: {message}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Google API Error: {e}") from e
        except ValueError as e:
            raise ServiceError("Google API returned a non-JSON body") from e
        return data if isinstance(data, dict) else {}


def _google_error(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return "An error occurred while saving to Google Sheets."
