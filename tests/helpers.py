"""Helpers shared by test modules."""

from datetime import datetime, timezone


def utc(*args: int) -> datetime:
    """Shorthand for an aware UTC datetime."""
    return datetime(*args, tzinfo=timezone.utc)


def plain(lines) -> list[str]:
    """Rendered rich Text lines as plain strings."""
    return [line.plain for line in lines]


# Log lines used across reader, CLI and feature tests
RFC3339_LINES = (
    "[2021-04-15T06:25:31+00:00] foobar",
    "[2021-04-15T06:26:31+00:00] bar",
    "[2021-04-15T06:27:31+00:00] foobar",
    "[2021-04-15T06:28:31+00:00] foobar",
    "none",
)
