"""Exceptions raised by the tap log interpreter and its commands."""

from __future__ import annotations

from datetime import datetime


def format_time(dt: datetime) -> str:
    """Format a UTC datetime the way error messages show it."""
    return dt.strftime("%Y-%m-%d %H:%M:%S UTC")


class TapError(Exception):
    """Base exception for tap errors."""

    pass


class ConfigError(TapError):
    """Raised when the store location is missing or unusable."""

    pass


class StoreError(TapError):
    """Raised when the log file cannot be opened or written."""

    pass


class LogParseError(TapError):
    """Raised when a log line does not match the record grammar."""

    def __init__(self, line: str, line_number: int | None = None, reason: str = "malformed record") -> None:
        self.line = line
        self.line_number = line_number
        where = f"line {line_number}" if line_number is not None else "log line"
        super().__init__(f"{where}: {reason}: {line!r}")


class MissingRecordError(TapError):
    """Raised when the log holds no record of the requested kind."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"no {kind} record in log")


class TapStateError(TapError):
    """Base exception for illegal tap transitions."""

    pass


class AlreadyTappedInError(TapStateError):
    def __init__(self, recorded_at: datetime) -> None:
        self.recorded_at = recorded_at
        super().__init__(f"already tapped in today at {format_time(recorded_at)}")


class AlreadyTappedOutError(TapStateError):
    def __init__(self, recorded_at: datetime) -> None:
        self.recorded_at = recorded_at
        super().__init__(f"already tapped out today at {format_time(recorded_at)}")


class EarlyTapOutError(TapStateError):
    """Raised when a tap-out would come before the start of the working day."""

    def __init__(self, assumed_start: datetime) -> None:
        self.assumed_start = assumed_start
        super().__init__(f"cannot tap out before the start of work at {format_time(assumed_start)}")


class InvalidRangeError(TapError, ValueError):
    """Raised when a date range starts after it ends."""

    pass


class IncompleteRangeError(TapError, NotImplementedError):
    """Raised when a date range does not have one OUT record per day.

    Summing hours over partial days is not supported.
    """

    def __init__(self, expected_days: int, found_outs: int) -> None:
        self.expected_days = expected_days
        self.found_outs = found_outs
        super().__init__(
            f"hours over incomplete ranges are not supported: "
            f"expected {expected_days} OUT records, found {found_outs}"
        )
