"""Tap-in and tap-out operations."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from tap.errors import AlreadyTappedInError, AlreadyTappedOutError, EarlyTapOutError, MissingRecordError
from tap.log import (
    DEFAULT_START,
    InRecord,
    OutRecord,
    as_utc,
    last_in_today,
    last_out_today,
    to_timestamp,
    utc_now,
)
from tap.store import LogStore

logger = logging.getLogger(__name__)


def _resolve_now(now: datetime | None) -> datetime:
    if now is None:
        return utc_now()
    return as_utc(now).replace(microsecond=0)


def tap_in(store: LogStore, now: datetime | None = None) -> InRecord:
    """Record the start of today's work.

    Args:
        store: Open log store.
        now: Time of the tap (default: current UTC time).

    Returns:
        The appended record.

    Raises:
        AlreadyTappedInError: There is already an IN record for today.
    """
    now = _resolve_now(now)
    log = store.read()
    try:
        tapped_in, recorded_at = last_in_today(log, now)
    except MissingRecordError:
        # Empty log: nothing recorded yet, so not tapped in
        tapped_in = False
    if tapped_in:
        raise AlreadyTappedInError(recorded_at)

    record = InRecord(timestamp=to_timestamp(now))
    store.append(record)
    logger.debug("Tapped in at %s", now)
    return record


def tap_out(store: LogStore, now: datetime | None = None) -> OutRecord:
    """Record the end of today's work and the seconds worked.

    Without an IN record for today, the working day is assumed to have
    started at 09:00 UTC. Tapping out before then without a tap-in fails
    rather than recording a negative elapsed time.

    Args:
        store: Open log store.
        now: Time of the tap (default: current UTC time).

    Returns:
        The appended record.

    Raises:
        AlreadyTappedOutError: There is already an OUT record for today.
        EarlyTapOutError: No IN today and ``now`` is before 09:00 UTC.
    """
    now = _resolve_now(now)
    log = store.read()
    try:
        tapped_out, recorded_at = last_out_today(log, now)
    except MissingRecordError:
        tapped_out = False
    if tapped_out:
        raise AlreadyTappedOutError(recorded_at)

    try:
        _, started_at = last_in_today(log, now)
    except MissingRecordError:
        started_at = datetime.combine(now.date(), DEFAULT_START, tzinfo=timezone.utc)

    elapsed = int((now - started_at).total_seconds())
    if elapsed < 0:
        raise EarlyTapOutError(started_at)

    record = OutRecord(timestamp=to_timestamp(now), elapsed=elapsed)
    store.append(record)
    logger.debug("Tapped out at %s after %d seconds", now, elapsed)
    return record
