"""Unit tests for event normalization across the gateway's response shapes."""

import json

import pytest

from meeting_digest.normalizer import normalize_events, placeholder_id

from .conftest import NOW, mcp_text_result

pytestmark = pytest.mark.unit

EVENT = {
    "id": "e1",
    "summary": "X",
    "start": {"dateTime": "2024-01-01T10:00:00Z"},
    "end": {"dateTime": "2024-01-01T10:30:00Z"},
}


def test_google_calendar_items():
    parsed = normalize_events({"items": [EVENT]}, NOW)

    assert parsed.ok
    [meeting] = parsed.meetings
    assert meeting.id == "e1"
    assert meeting.title == "X"
    assert meeting.duration == 30
    assert meeting.start == "2024-01-01T10:00:00Z"
    assert meeting.end == "2024-01-01T10:30:00Z"
    assert meeting.attendees == []
    assert meeting.description == ""
    assert meeting.ai_summary is None


@pytest.mark.parametrize(
    "document",
    [
        {"items": [EVENT]},
        {"data": {"items": [EVENT]}},
        {"data": {"responseData": {"items": [EVENT]}}},
        {"responseData": {"items": [EVENT]}},
    ],
    ids=["items", "data.items", "data.responseData.items", "responseData.items"],
)
def test_all_nesting_shapes_yield_the_same_meetings(document):
    expected = normalize_events({"items": [EVENT]}, NOW).meetings

    assert normalize_events(document, NOW).meetings == expected
    assert normalize_events(mcp_text_result(document), NOW).meetings == expected
    assert normalize_events(json.dumps(document), NOW).meetings == expected


def test_content_without_text_element_uses_first_element():
    payload = {"content": [{"type": "json", "data": {"items": [EVENT]}}]}

    [meeting] = normalize_events(payload, NOW).meetings
    assert meeting.id == "e1"


def test_first_text_element_wins():
    payload = {
        "content": [
            {"type": "image", "data": "..."},
            {"type": "text", "text": json.dumps({"items": [EVENT]})},
            {"type": "text", "text": json.dumps({"items": []})},
        ]
    }

    assert len(normalize_events(payload, NOW).meetings) == 1


@pytest.mark.parametrize("items", [42, "not a list", {"id": "e1"}])
def test_non_list_items_yield_no_events(items):
    parsed = normalize_events({"items": items}, NOW)

    assert parsed.meetings == []
    assert parsed.ok


@pytest.mark.parametrize(
    "payload",
    [
        {"content": [{"type": "text", "text": "{not json"}]},
        "{not json",
        {"items": ["just a string"]},
        {"items": [{"start": {"dateTime": "not a date"}, "end": {"dateTime": "2024-01-01T10:00:00Z"}}]},
    ],
)
def test_malformed_payloads_degrade_to_empty_result(payload):
    parsed = normalize_events(payload, NOW)

    assert parsed.meetings == []
    assert not parsed.ok
    assert parsed.error


def test_empty_items_list_stops_the_shape_search():
    parsed = normalize_events({"items": [], "data": {"items": [EVENT]}}, NOW)

    assert parsed.ok
    assert parsed.meetings == []


@pytest.mark.parametrize("missing", [None, 0, "", False])
def test_falsy_items_fall_through_to_nested_shape(missing):
    [meeting] = normalize_events({"items": missing, "data": {"items": [EVENT]}}, NOW).meetings

    assert meeting.id == "e1"


def test_unknown_shape_yields_no_events():
    parsed = normalize_events({"something": {"else": []}}, NOW)

    assert parsed.meetings == []
    assert parsed.ok


def test_attendee_fallback_chain():
    event = {
        **EVENT,
        "attendees": [
            {"email": "a@example.com", "displayName": "Alice"},
            {"displayName": "Bob"},
            {"responseStatus": "accepted"},
        ],
    }

    [meeting] = normalize_events({"items": [event]}, NOW).meetings
    assert meeting.attendees == ["a@example.com", "Bob", "Unknown"]


def test_all_day_event_uses_date_fields():
    event = {"id": "e2", "summary": "Offsite", "start": {"date": "2024-01-01"}, "end": {"date": "2024-01-02"}}

    [meeting] = normalize_events({"items": [event]}, NOW).meetings
    assert meeting.start == "2024-01-01"
    assert meeting.duration == 24 * 60


def test_missing_fields_use_defaults():
    event = {"start": {"dateTime": "2024-01-01T10:00:00Z"}}

    [meeting] = normalize_events({"items": [event]}, NOW).meetings
    assert meeting.title == "No Title"
    assert meeting.end == "2025-01-15T12:00:00Z"
    assert meeting.duration == 0
    assert meeting.description == ""


def test_missing_start_falls_back_to_reference_instant():
    [meeting] = normalize_events({"items": [{"id": "e3", "summary": "Loose"}]}, NOW).meetings

    assert meeting.start == "2025-01-15T12:00:00Z"
    assert meeting.duration == 0


def test_placeholder_ids_are_deterministic():
    event = {key: value for key, value in EVENT.items() if key != "id"}

    first = normalize_events({"items": [event]}, NOW).meetings[0]
    second = normalize_events({"items": [event]}, NOW).meetings[0]

    assert first.id == second.id == placeholder_id("2024-01-01T10:00:00Z", "X")
    assert first.id.startswith("evt-")


def test_duration_rounds_half_up():
    event = {
        **EVENT,
        "end": {"dateTime": "2024-01-01T10:00:30Z"},
    }

    [meeting] = normalize_events({"items": [event]}, NOW).meetings
    assert meeting.duration == 1


def test_offsets_are_respected_in_duration():
    event = {
        **EVENT,
        "start": {"dateTime": "2024-01-01T10:00:00+02:00"},
        "end": {"dateTime": "2024-01-01T09:45:00Z"},
    }

    [meeting] = normalize_events({"items": [event]}, NOW).meetings
    assert meeting.duration == 105
