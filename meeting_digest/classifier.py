from datetime import datetime, timezone
from typing import Iterable

from .models import CalendarData, Meeting
from .normalizer import parse_timestamp

MEETING_LIMIT = 5


def classify_meetings(meetings: Iterable[Meeting], now: datetime, limit: int = MEETING_LIMIT) -> CalendarData:
    """
    Split meetings into upcoming (start > now) and past (start <= now).

    Both buckets keep discovery order and are cut to ``limit``; the past
    bucket is then reversed so the meeting closest to ``now`` comes first.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    upcoming = []
    past = []

    for meeting in meetings:
        if parse_timestamp(meeting.start) > now:
            upcoming.append(meeting)
        else:
            past.append(meeting)

    return CalendarData(
        upcoming=upcoming[:limit],
        past=list(reversed(past[:limit])),
    )
