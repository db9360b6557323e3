"""Decode gateway responses delivered as plain JSON or as a Server-Sent Events stream"""
import json
import logging
from typing import Any, Dict, Optional

from .exceptions import DecodeError

logger = logging.getLogger(__name__)

EVENT_STREAM = "text/event-stream"
DATA_PREFIX = "data: "


def is_event_stream(content_type: Optional[str]) -> bool:
    return bool(content_type) and EVENT_STREAM in content_type.lower()


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Invalid JSON in gateway response: {e}") from e


def decode_envelope(content_type: Optional[str], body: str) -> Dict[str, Any]:
    """
    Extract the JSON-RPC envelope from a raw response body.

    An event stream looks like ``event: message\\ndata: {...}\\n\\n``; only the
    first ``data: `` line is read. Anything else is parsed as one JSON document.

    Args:
        content_type: Value of the response Content-Type header (may be None).
        body: Response body as text.

    Returns:
        The parsed envelope.

    Raises:
        DecodeError: No data line in an event stream, or unparseable JSON.
    """
    if is_event_stream(content_type):
        logger.debug(f"Raw SSE response (first 500 chars): {body[:500]}")

        data_line = next(
            (line for line in body.splitlines() if line.startswith(DATA_PREFIX)),
            None,
        )
        if data_line is None:
            raise DecodeError("no data in event stream")

        return _loads(data_line[len(DATA_PREFIX):])

    logger.debug(f"Raw JSON response (first 500 chars): {body[:500]}")
    return _loads(body)
