"""Logging for ``lunchprep``.

Every module logs through ``get_logger("lunchprep.<module>")`` with short
``event key=value`` messages (``parse:done bank=DBS transactions=23``). Only
the console entry point decides where those lines go: it calls
:func:`configure_logging` once, which sends the ``lunchprep`` tree to stderr.
Imported as a library, the package stays silent because its root logger
carries a ``NullHandler``.

Level resolution: explicit ``level`` argument, then ``LUNCHPREP_LOG_LEVEL``,
then ``INFO``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

ROOT_LOGGER = "lunchprep"
LEVEL_ENV_VAR = "LUNCHPREP_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_configured = False


def _level_from_name(name: str) -> int | None:
    name = name.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelName(name)
    return numeric if isinstance(numeric, int) else None


def resolve_level(level: int | str | None = None) -> int:
    """Turn ``level`` (or the environment) into a numeric logging level.

    Unrecognised names fall through to the next source instead of failing.
    """

    if isinstance(level, int):
        return level
    for candidate in (level, os.getenv(LEVEL_ENV_VAR)):
        if candidate:
            parsed = _level_from_name(candidate)
            if parsed is not None:
                return parsed
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Route the ``lunchprep`` logger tree to ``stream`` (stderr by default).

    Runs once per process; later calls are no-ops so commands can call it
    unconditionally.
    """

    global _configured
    if _configured:
        return

    root = logging.getLogger(ROOT_LOGGER)
    for existing in [h for h in root.handlers if isinstance(h, logging.NullHandler)]:
        root.removeHandler(existing)

    resolved = resolve_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))

    root.setLevel(resolved)
    root.addHandler(handler)
    # Lines are already written once by our handler.
    root.propagate = False

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return ``logging.getLogger(name)``; silences the package until configured."""

    root = logging.getLogger(ROOT_LOGGER)
    if not _configured and not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)
