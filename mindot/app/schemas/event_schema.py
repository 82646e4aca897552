"""
schemas/event_schema.py — Marshmallow schema for replayed lifecycle events.

Accepts the JSON a mocha-style reporter bridge emits, one object per line:

    {"event": "start", "total": 3, "width": 80}
    {"event": "suite", "title": "math"}
    {"event": "pass",  "title": "adds"}
    {"event": "fail",  "title": "divides", "error": {"message": "boom"}}
    {"event": "suite end"}
    {"event": "end"}

Extra keys (durations, full titles, stacks) are ignored. Each line loads
into one of the frozen dataclasses in models/event.py.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator

from marshmallow import (
    EXCLUDE,
    Schema,
    ValidationError,
    fields,
    post_load,
    validate,
    validates_schema,
)

from mindot.app.errors import ErrorCode, ReporterError
from mindot.app.models.event import (
    EVENT_NAMES,
    End,
    Event,
    Fail,
    Pass,
    Start,
    SuiteClose,
    SuiteOpen,
)


# Fields each event needs beyond "event" itself.
_REQUIRED: dict[str, tuple[str, ...]] = {
    "start": ("total",),
    "suite": ("title",),
    "fail":  ("title",),
}


class ErrorPayloadSchema(Schema):
    """The `error` object of a fail event. Only the message is kept."""

    class Meta:
        unknown = EXCLUDE

    message = fields.Str(load_default="", allow_none=True)


class EventSchema(Schema):

    class Meta:
        unknown = EXCLUDE

    event = fields.Str(
        required=True,
        validate=validate.OneOf(
            list(EVENT_NAMES),
            error="Unknown event {input!r}.",
        ),
    )

    # start
    total = fields.Int(strict=True, validate=validate.Range(min=0))
    width = fields.Int(strict=True, allow_none=True, validate=validate.Range(min=1))

    # suite / pass / fail
    title = fields.Str()

    # fail
    error = fields.Nested(ErrorPayloadSchema, allow_none=True)

    @validates_schema
    def _check_required_for_event(self, data: dict, **kwargs) -> None:
        missing = {
            name: ["Missing data for required field."]
            for name in _REQUIRED.get(data.get("event"), ())
            if name not in data
        }
        if missing:
            raise ValidationError(missing)

    @post_load
    def _make_event(self, data: dict, **kwargs) -> Event:
        name = data["event"]
        if name == "start":
            return Start(total=data["total"], width=data.get("width"))
        if name == "suite":
            return SuiteOpen(title=data["title"])
        if name == "pass":
            return Pass(title=data.get("title", ""))
        if name == "fail":
            error = data.get("error") or {}
            return Fail(title=data["title"], message=error.get("message") or "")
        if name == "suite end":
            return SuiteClose()
        return End()


def load_events(lines: Iterable[str]) -> Iterator[Event]:
    """
    Parses a JSON-lines event stream lazily. Blank lines are skipped.

    Raises:
        ReporterError(INVALID_EVENT): a line is not valid JSON or not an object.
        ValidationError:              a line is JSON but not a valid event.
    """
    schema = EventSchema()
    for lineno, raw in enumerate(lines, 1):
        line = raw.strip()
        if not line:
            continue
        try:
            payload = json.loads(line)
        except json.JSONDecodeError as err:
            raise ReporterError(
                ErrorCode.INVALID_EVENT,
                f"Line {lineno} is not valid JSON: {err.msg}.",
            ) from err
        if not isinstance(payload, dict):
            raise ReporterError(
                ErrorCode.INVALID_EVENT,
                f"Line {lineno} must be a JSON object.",
            )
        yield schema.load(payload)
