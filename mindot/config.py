"""
config.py — Resolves ReporterOptions for a run.

Precedence (later wins):
  1. [tool.mindot] in the nearest pyproject.toml at or above the root
  2. MINDOT_* environment variables (a .env in the root fills in unset ones)
  3. explicit overrides (command-line flags); None means "not given"

Missing manifest, missing section, or a manifest that cannot be read or
parsed all resolve to "nothing configured". Only invalid VALUES are errors
(ReporterError INVALID_OPTION, raised by schemas/options_schema.py).
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values

from mindot.app.models.options import ReporterOptions
from mindot.app.schemas.options_schema import load_options


logger = logging.getLogger(__name__)

MANIFEST_NAME = "pyproject.toml"
SECTION       = ("tool", "mindot")

ENV_VARS: dict[str, str] = {
    "threshold":        "MINDOT_THRESHOLD",
    "gate_formula":     "MINDOT_GATE_FORMULA",
    "unknown_coverage": "MINDOT_UNKNOWN_COVERAGE",
    "show_messages":    "MINDOT_SHOW_MESSAGES",
    "width":            "MINDOT_WIDTH",
}


def find_manifest(start: str | os.PathLike | None = None) -> Path | None:
    """Returns the nearest pyproject.toml at or above `start` (default: cwd)."""
    here = Path(start) if start is not None else Path.cwd()
    here = here.resolve()
    for directory in (here, *here.parents):
        candidate = directory / MANIFEST_NAME
        if candidate.is_file():
            return candidate
    return None


def read_manifest_options(path: str | os.PathLike | None) -> dict:
    """
    Returns the raw [tool.mindot] table, or {} when there is none.

    An unreadable or malformed manifest is logged and treated as empty.
    """
    if path is None:
        return {}
    try:
        with open(path, "rb") as fh:
            data = tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("ignoring unreadable manifest %s: %s", path, exc)
        return {}

    section = data
    for key in SECTION:
        section = section.get(key) if isinstance(section, Mapping) else None
    if not isinstance(section, Mapping):
        return {}
    return dict(section)


def _first_non_empty_env(environ: Mapping[str, str], *names: str) -> str | None:
    """Returns the first non-empty env var value from `names`, else None."""
    for name in names:
        value = environ.get(name)
        if value is not None and value != "":
            return value
    return None


def read_env_options(environ: Mapping[str, str] | None = None) -> dict:
    environ = os.environ if environ is None else environ
    raw = {}
    for option, name in ENV_VARS.items():
        value = _first_non_empty_env(environ, name)
        if value is not None:
            raw[option] = value
    return raw


def resolve_options(
        overrides: Mapping | None = None,
        root: str | os.PathLike | None = None,
        environ: Mapping[str, str] | None = None,
) -> ReporterOptions:
    """
    Merges manifest, environment and overrides, then validates.

    `environ` defaults to `<root>/.env` overlaid with os.environ (real
    variables win). os.environ itself is never modified.
    """
    root_dir = Path(root) if root is not None else Path.cwd()
    if environ is None:
        environ = {**dotenv_values(root_dir / ".env"), **os.environ}

    raw = read_manifest_options(find_manifest(root_dir))
    raw.update(read_env_options(environ))
    raw.update({k: v for k, v in (overrides or {}).items() if v is not None})

    options = load_options(raw)
    logger.debug("resolved mindot options: %s", options)
    return options
