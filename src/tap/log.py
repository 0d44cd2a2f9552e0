"""Log interpreter for the tap work-hours log.

The log is append-only text with one record per line:

    IN <unix_seconds>
    OUT <unix_seconds> <elapsed_seconds>

Everything here is a pure function of the log text and a reference time, so
it can be exercised without touching the filesystem.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from tap.errors import IncompleteRangeError, InvalidRangeError, LogParseError, MissingRecordError

logger = logging.getLogger(__name__)

# Assumed working day when a record for today is missing (UTC)
DEFAULT_START = time(9, 0, 0)
DEFAULT_END = time(17, 0, 0)

SECONDS_PER_HOUR = 60 * 60

_IN_LINE = re.compile(r"IN (-?[0-9]+)")
_OUT_LINE = re.compile(r"OUT (-?[0-9]+) ([0-9]+)")


def from_timestamp(timestamp: int) -> datetime:
    """Convert unix seconds to an aware UTC datetime."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def to_timestamp(dt: datetime) -> int:
    """Convert a datetime to whole unix seconds, reading naive values as UTC."""
    return int(as_utc(dt).timestamp())


def as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    """Current UTC time, truncated to whole seconds."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def utc_date_time(day: date, hours: int, minutes: int) -> datetime:
    """The given UTC calendar date at ``hours:minutes:00``."""
    return datetime.combine(day, time(hours, minutes), tzinfo=timezone.utc)


class InRecord(BaseModel):
    """A tap-in event."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["IN"] = "IN"
    timestamp: int

    @property
    def time(self) -> datetime:
        return from_timestamp(self.timestamp)

    def to_line(self) -> str:
        return f"IN {self.timestamp}"


class OutRecord(BaseModel):
    """A tap-out event with the seconds worked since the matching tap-in."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["OUT"] = "OUT"
    timestamp: int
    elapsed: int = Field(ge=0)

    @property
    def time(self) -> datetime:
        return from_timestamp(self.timestamp)

    def to_line(self) -> str:
        return f"OUT {self.timestamp} {self.elapsed}"


Record = InRecord | OutRecord


def parse_line(line: str, line_number: int | None = None) -> Record:
    """Parse a single log line into a typed record.

    Args:
        line: Raw line text without its newline.
        line_number: 1-based position in the log, used in error messages.

    Returns:
        InRecord or OutRecord.

    Raises:
        LogParseError: The line does not match the record grammar, or its
            timestamp cannot be represented as a datetime.
    """
    text = line.rstrip("\r")
    record: Record
    if match := _IN_LINE.fullmatch(text):
        record = InRecord(timestamp=int(match.group(1)))
    elif match := _OUT_LINE.fullmatch(text):
        record = OutRecord(timestamp=int(match.group(1)), elapsed=int(match.group(2)))
    else:
        raise LogParseError(line, line_number)

    try:
        from_timestamp(record.timestamp)
    except (OverflowError, OSError, ValueError) as e:
        raise LogParseError(line, line_number, reason="timestamp out of range") from e
    return record


def parse_log(log: str) -> list[Record]:
    """Parse every record in the log, in order.

    Blank lines are skipped. The first malformed line aborts parsing; the log
    is assumed intact and nothing is recovered past a bad line.
    """
    records = []
    for line_number, line in enumerate(log.splitlines(), 1):
        if not line.strip():
            continue
        records.append(parse_line(line, line_number))
    return records


def _last_record(log: str, kind: str) -> Record:
    """Parse the final line starting with ``kind``.

    Earlier lines are not validated. The marker must open the line, so an
    indented record such as ``  IN 5`` is not found.
    """
    marker = f"{kind} "
    lines = log.splitlines()
    for index in range(len(lines) - 1, -1, -1):
        if lines[index].startswith(marker):
            return parse_line(lines[index], index + 1)
    raise MissingRecordError(kind)


def last_in(log: str) -> datetime:
    """Time of the last IN record in the log.

    Raises:
        MissingRecordError: The log has no IN record.
        LogParseError: The last IN line is malformed.
    """
    return _last_record(log, "IN").time


def last_out(log: str) -> datetime:
    """Time of the last OUT record in the log.

    Raises:
        MissingRecordError: The log has no OUT record.
        LogParseError: The last OUT line is malformed.
    """
    return _last_record(log, "OUT").time


def last_in_today(log: str, now: datetime) -> tuple[bool, datetime]:
    """Whether the last IN happened on ``now``'s UTC date.

    Returns:
        ``(True, last_in)`` if so, otherwise ``(False, today at 09:00 UTC)``.
    """
    now = as_utc(now)
    last_in_dt = last_in(log)
    if last_in_dt.date() != now.date():
        return False, datetime.combine(now.date(), DEFAULT_START, tzinfo=timezone.utc)
    return True, last_in_dt


def last_out_today(log: str, now: datetime) -> tuple[bool, datetime]:
    """Whether the last OUT happened on ``now``'s UTC date.

    Returns:
        ``(True, last_out)`` if so, otherwise ``(False, today at 17:00 UTC)``.
    """
    now = as_utc(now)
    last_out_dt = last_out(log)
    if last_out_dt.date() != now.date():
        return False, datetime.combine(now.date(), DEFAULT_END, tzinfo=timezone.utc)
    return True, last_out_dt


def days_diff(start: date, end: date) -> int:
    """Number of days between two dates, inclusive.

    Raises:
        InvalidRangeError: ``start`` is after ``end``.
    """
    diff = (end - start).days
    if diff < 0:
        raise InvalidRangeError(f"start date {start} is after end date {end}")
    return diff + 1


def hours_worked(start: date, end: date, log: str) -> float:
    """Hours worked between two UTC dates, inclusive.

    Records count when their timestamp is strictly between ``start`` 00:00:00
    and ``end`` 23:59:00. An OUT in the last minute of ``end`` is therefore
    left out.

    Raises:
        InvalidRangeError: ``start`` is after ``end``.
        LogParseError: Any line in the log is malformed.
        IncompleteRangeError: The range does not hold exactly one OUT record
            per day.
    """
    expected_days = days_diff(start, end)
    start_ts = to_timestamp(utc_date_time(start, 0, 0))
    end_ts = to_timestamp(utc_date_time(end, 23, 59))

    ins: list[InRecord] = []
    outs: list[OutRecord] = []
    for record in parse_log(log):
        if not start_ts < record.timestamp < end_ts:
            continue
        if isinstance(record, InRecord):
            ins.append(record)
        else:
            outs.append(record)

    logger.debug(
        "Range %s..%s: %d IN, %d OUT records, %d days", start, end, len(ins), len(outs), expected_days
    )

    # Missing tap-ins are settled at tap-out time, so once every day has its
    # OUT the recorded elapsed times can be summed as-is.
    if len(outs) != expected_days:
        raise IncompleteRangeError(expected_days, len(outs))
    return sum(out.elapsed for out in outs) / SECONDS_PER_HOUR
