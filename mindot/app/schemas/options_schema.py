"""
schemas/options_schema.py — Marshmallow schema for reporter options.

Input sources (merged in config.py before reaching this schema):
  - [tool.mindot] in pyproject.toml   (TOML types: numbers, bools, strings)
  - MINDOT_* environment variables    (always strings)
  - command-line flags                (strings or already-typed values)

The schema is the single place where those values are validated, so every
source gets the same error for the same mistake.

Validation errors are converted to ReporterError(INVALID_OPTION) by
load_options(). Callers never see a marshmallow ValidationError.
"""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, post_load, validate

from mindot.app.errors import ErrorCode, ReporterError
from mindot.app.models.options import GateFormula, ReporterOptions, UnknownCoverage


class OptionsSchema(Schema):
    """
    Field rules:
      threshold        : optional number in [0, 100]; absent → no coverage gate
      gate_formula     : "round" | "truncate"
      unknown_coverage : "fail" | "pass"
      show_messages    : bool (accepts "true"/"false"/"1"/"0" from the env)
      width            : optional positive int; overrides the terminal width

    Unknown keys are rejected so a typo in [tool.mindot] is reported instead
    of silently disabling the gate.
    """

    threshold = fields.Float(
        allow_none=True,
        validate=validate.Range(
            min=0,
            max=100,
            error="threshold must be between 0 and 100.",
        ),
    )

    gate_formula     = fields.Enum(GateFormula, by_value=True)
    unknown_coverage = fields.Enum(UnknownCoverage, by_value=True)
    show_messages    = fields.Boolean()

    width = fields.Int(
        allow_none=True,
        validate=validate.Range(min=1, error="width must be a positive integer."),
    )

    @post_load
    def _make_options(self, data: dict, **kwargs) -> ReporterOptions:
        return ReporterOptions(**data)


def load_options(data: dict) -> ReporterOptions:
    """
    Validates raw option values and returns ReporterOptions.

    Raises ReporterError(INVALID_OPTION) for the FIRST offending field,
    naming it in `field`.
    """
    try:
        return OptionsSchema().load(data)
    except ValidationError as err:
        field, message = _first_error(err.messages)
        raise ReporterError(
            ErrorCode.INVALID_OPTION,
            f"Invalid mindot option {field!r}: {message}" if field else message,
            field=field,
        ) from err


def _first_error(messages) -> tuple[str | None, str]:
    """Flattens marshmallow's messages dict down to one field + message pair."""
    if isinstance(messages, dict):
        for field_name, field_errors in messages.items():
            field = field_name if field_name != "_schema" else None
            if isinstance(field_errors, list):
                return field, str(field_errors[0]) if field_errors else "Invalid value."
            return field, str(field_errors)
    if isinstance(messages, list) and messages:
        return None, str(messages[0])
    return None, "Invalid options."
