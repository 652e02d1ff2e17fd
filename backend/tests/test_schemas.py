"""
The request schemas and the pre-commit hooks apply the same rules:
whatever one layer rejects, the other rejects too.
"""

import pytest
from pydantic import ValidationError as SchemaError

from app.core.errors import ValidationError
from app.schemas.booking import BookingCreate
from app.schemas.event import EventCreate, EventUpdate
from app.services.booking_validator import coerce_email
from app.services.event_normalizer import normalize_date, normalize_event, normalize_time
from app.services.interfaces.persistence import PendingWrite
from conftest import event_fields


def rejects(rule, value) -> bool:
    try:
        rule(value)
    except ValidationError:
        return True
    return False


@pytest.mark.parametrize("value", ["2pm", "12am", "9:05 AM", "25:00", "abc", "12:60", "7 : 30"])
def test_time_rules_match(value):
    try:
        EventCreate(**event_fields(time=value))
        schema_rejects = False
    except SchemaError:
        schema_rejects = True
    assert schema_rejects == rejects(normalize_time, value)


@pytest.mark.parametrize("value", ["March 3, 2024", "2024-03-03", "not-a-date", "2024-02-30"])
def test_date_rules_match(value):
    try:
        EventCreate(**event_fields(date=value))
        schema_rejects = False
    except SchemaError:
        schema_rejects = True
    assert schema_rejects == rejects(normalize_date, value)


@pytest.mark.parametrize("value", ["a@b.co", " A@B.CO ", "a@b", "a@@b.co", "a b@c.co", "@c.co"])
def test_email_rules_match(value):
    try:
        BookingCreate(event_id=1, email=value)
        schema_rejects = False
    except SchemaError:
        schema_rejects = True
    assert schema_rejects == rejects(coerce_email, value)


def test_event_create_coerces():
    event = EventCreate(**event_fields(
        title="  Spaced Title ",
        date="March 3, 2024",
        time="9:05 am",
        tags=[" Web ", "API"],
        agenda=[" Intro "],
    ))
    assert event.title == "Spaced Title"
    assert event.date == "2024-03-03"
    assert event.time == "09:05"
    assert event.tags == ["web", "api"]
    assert event.agenda == ["Intro"]


def test_event_update_only_tracks_sent_fields():
    update = EventUpdate(venue=" Hall 3 ")
    assert update.model_dump(exclude_unset=True) == {"venue": "Hall 3"}


def test_booking_create_lowercases_email():
    assert BookingCreate(event_id=3, email="  Ada@Example.ORG").email == "ada@example.org"


@pytest.mark.parametrize("overrides", [
    {"time": "25:00"},
    {"date": "2pm"},
    {"tags": []},
    {"agenda": "Keynote"},
    {"venue": "   "},
    {"organizer": None},
    {"venue": "", "time": "abc"},
    {"mode": None, "description": " "},
])
def test_schema_reports_the_normalizer_error(overrides):
    fields = event_fields(**overrides)
    expected = normalize_event(PendingWrite.insert(fields)).error

    with pytest.raises(SchemaError) as exc_info:
        EventCreate(**fields)

    first = exc_info.value.errors()[0]
    assert first["loc"] == (expected.field,)
    assert first["msg"] == f"Value error, {expected.message}"


def test_omitted_event_field_uses_required_message():
    fields = event_fields()
    del fields["tags"]

    with pytest.raises(SchemaError) as exc_info:
        EventCreate(**fields)

    assert exc_info.value.errors()[0]["msg"] == (
        "Value error, Tags must be a non-empty array of non-empty strings"
    )


@pytest.mark.parametrize("event_id", [None, ""])
def test_booking_reference_message_matches(event_id):
    with pytest.raises(SchemaError) as exc_info:
        BookingCreate(event_id=event_id, email="a@b.co")

    assert exc_info.value.errors()[0]["msg"] == "Value error, eventId is required"
