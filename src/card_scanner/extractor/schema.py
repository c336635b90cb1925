"""Structured-output request building and response parsing."""

import base64
import json
import logging
import re
from typing import Any

from pydantic import BaseModel, Field

from card_scanner.models.columns import ColumnConfig
from card_scanner.models.record import Record

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = (
    "Analyze the image to find contact information. "
    "Extract the following fields: {fields}. "
    "If a field is not present, it should be omitted from the JSON output."
)


class ExtractionRequest(BaseModel):
    """Everything a vision model needs to fill one record from an image."""

    prompt: str = Field(description="Instruction text sent with the image")
    json_schema: dict[str, Any] = Field(description="JSON schema of the expected output")
    image_b64: str = Field(description="Base64 encoded image bytes")
    mime_type: str = Field(default="image/jpeg", description="Image MIME type")


def build_request(
    image: bytes,
    config: ColumnConfig,
    mime_type: str = "image/jpeg",
) -> ExtractionRequest:
    """
    Build an extraction request with one string property per field.

    Every configured field is requested, hidden ones included, so hiding a
    column never loses data at scan time.

    Args:
        image: Raw image bytes.
        config: Column configuration supplying keys and descriptions.
        mime_type: MIME type of ``image``.
    """
    properties = {
        f.key: {"type": "string", "description": f"The {f.header}."} for f in config
    }
    return ExtractionRequest(
        prompt=PROMPT_TEMPLATE.format(fields=", ".join(f.header for f in config)),
        json_schema={"type": "object", "properties": properties},
        image_b64=base64.b64encode(image).decode("ascii"),
        mime_type=mime_type,
    )


def parse_response(raw: str | None) -> Record:
    """
    Turn model output into a record. Never raises.

    Empty or malformed output gives an empty record so the user can fill
    the form by hand.
    """
    if not raw or not raw.strip():
        return Record()

    try:
        data = json.loads(_extract_json(raw))
    except (json.JSONDecodeError, RecursionError) as e:
        logger.warning("Discarding unparseable extraction output: %s", e)
        return Record()

    if not isinstance(data, dict):
        logger.warning("Discarding extraction output that is not an object")
        return Record()

    values: dict[str, str | None] = {}
    for key, value in data.items():
        text = _to_str(value)
        if text:
            values[str(key)] = text
    return Record(values=values)


def _to_str(value: Any) -> str | None:
    """Convert value to string, handling lists by taking first element."""
    while isinstance(value, list):
        value = value[0] if value else None
    if value is None or isinstance(value, (dict, bool)):
        return None
    return str(value).strip()


def _extract_json(text: str) -> str:
    """Extract JSON from text, handling potential markdown code blocks."""
    code_block_match = re.search(r"```(?:json)?\s*([\s\S]*?)```", text)
    if code_block_match:
        return code_block_match.group(1).strip()

    json_match = re.search(r"\{[\s\S]*\}", text)
    if json_match:
        return json_match.group(0)

    return text.strip()
