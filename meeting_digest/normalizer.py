"""
Turn a loosely-structured gateway result into Meeting records.

The gateway wraps Google Calendar's ``items`` list in a handful of
different shapes depending on the tool and deployment, e.g.:

    {"content": [{"type": "text", "text": "{\"items\": [...]}"}]}
    {"data": {"items": [...]}}
    {"data": {"responseData": {"items": [...]}}}
    {"responseData": {"items": [...]}}

Normalization never raises; failures come back as NormalizedEvents.error.
"""
import hashlib
import json
import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .models import Meeting, NormalizedEvents

logger = logging.getLogger(__name__)

ITEM_PATHS = (
    ("items",),
    ("data", "items"),
    ("data", "responseData", "items"),
    ("responseData", "items"),
)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 date or date-time. Naive values are read as UTC."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def placeholder_id(start: str, title: str) -> str:
    digest = hashlib.sha1(f"{start}|{title}".encode("utf-8")).hexdigest()
    return f"evt-{digest[:12]}"


def _dig(document: Any, path) -> Any:
    node = document
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _event_time(value: Any) -> Optional[str]:
    if not isinstance(value, dict):
        return None
    return value.get("dateTime") or value.get("date") or None


def _attendee_label(attendee: Any) -> str:
    if isinstance(attendee, dict):
        return attendee.get("email") or attendee.get("displayName") or "Unknown"
    return "Unknown"


def extract_document(payload: Any) -> Any:
    """Unwrap the MCP content container (or JSON string) around the events document."""
    if isinstance(payload, dict) and isinstance(payload.get("content"), list):
        content = payload["content"]
        logger.debug(f"Found {len(content)} content items")

        text_content = next(
            (c for c in content if isinstance(c, dict) and c.get("type") == "text"),
            None,
        )
        if text_content and text_content.get("text"):
            return json.loads(text_content["text"])
        return content[0] if content else None

    if isinstance(payload, str):
        return json.loads(payload)

    return payload


def _found(value: Any) -> bool:
    # An empty list or object still counts as found; only null, false, 0 and "" fall through
    if value is None or value is False or value == "":
        return False
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value != 0
    return True


def locate_items(document: Any) -> Any:
    for path in ITEM_PATHS:
        items = _dig(document, path)
        if _found(items):
            return items
    return []


def event_to_meeting(event: Dict[str, Any], now: datetime) -> Meeting:
    """
    Map one Google Calendar event to a Meeting.

    A missing start or end falls back to ``now``. The duration is
    round-half-up minutes and 0 unless both endpoints came from upstream.
    """
    start = _event_time(event.get("start"))
    end = _event_time(event.get("end"))

    duration = 0
    if start and end:
        seconds = (parse_timestamp(end) - parse_timestamp(start)).total_seconds()
        duration = math.floor(seconds / 60 + 0.5)
    elif start:
        # Classification depends on start being comparable
        parse_timestamp(start)

    fallback = to_iso(now)
    title = event.get("summary") or "No Title"
    start = start or fallback
    end = end or fallback

    return Meeting(
        id=event.get("id") or placeholder_id(start, title),
        title=title,
        start=start,
        end=end,
        duration=duration,
        attendees=[_attendee_label(a) for a in event.get("attendees") or []],
        description=event.get("description") or "",
    )


def normalize_events(payload: Any, now: Optional[datetime] = None) -> NormalizedEvents:
    now = now or datetime.now(timezone.utc)
    try:
        document = extract_document(payload)
        items = locate_items(document)

        if not isinstance(items, list):
            logger.error(f"Items is not a list: {type(items).__name__}")
            return NormalizedEvents()

        logger.info(f"Found {len(items)} calendar events")
        if not items:
            logger.debug(f"No items found in response: {json.dumps(document, default=str)[:1000]}")

        meetings: List[Meeting] = [event_to_meeting(item, now) for item in items]
        return NormalizedEvents(meetings=meetings)

    except Exception as e:
        logger.warning(f"Error parsing events: {e}")
        logger.debug(f"Response was: {json.dumps(payload, default=str)[:1000]}")
        return NormalizedEvents(error=str(e))
