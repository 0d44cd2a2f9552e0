"""Tests for tap-in and tap-out."""

from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from tap.actions import tap_in, tap_out
from tap.errors import AlreadyTappedInError, AlreadyTappedOutError, EarlyTapOutError, TapStateError
from tap.log import InRecord, OutRecord, hours_worked
from tap.store import LogStore


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def ts(*args: int) -> int:
    return int(utc(*args).timestamp())


def read_log(store_dir: Path) -> str:
    return (store_dir / "log.txt").read_text()


def write_log(store_dir: Path, text: str) -> None:
    (store_dir / "log.txt").write_text(text)


class TestTapIn:
    """Tests for tapping in."""

    def test_first_tap_in_on_empty_log(self, tmp_path: Path):
        with LogStore.open(tmp_path) as store:
            record = tap_in(store, utc(2024, 6, 17, 10))
        assert record == InRecord(timestamp=ts(2024, 6, 17, 10))
        assert read_log(tmp_path) == f"IN {ts(2024, 6, 17, 10)}\n"

    def test_second_tap_in_same_day_fails(self, tmp_path: Path):
        with LogStore.open(tmp_path) as store:
            tap_in(store, utc(2024, 6, 17, 10))
            with pytest.raises(AlreadyTappedInError) as exc_info:
                tap_in(store, utc(2024, 6, 17, 11))
        assert exc_info.value.recorded_at == utc(2024, 6, 17, 10)
        assert "already tapped in today at 2024-06-17 10:00:00 UTC" in str(exc_info.value)
        assert read_log(tmp_path) == f"IN {ts(2024, 6, 17, 10)}\n"

    def test_tap_in_after_tap_out_same_day_fails(self, tmp_path: Path):
        with LogStore.open(tmp_path) as store:
            tap_in(store, utc(2024, 6, 17, 10))
            tap_out(store, utc(2024, 6, 17, 18))
            with pytest.raises(AlreadyTappedInError):
                tap_in(store, utc(2024, 6, 17, 19))

    def test_tap_in_next_day(self, tmp_path: Path):
        write_log(tmp_path, f"IN {ts(2024, 6, 17, 10)}\nOUT {ts(2024, 6, 17, 18)} 28800\n")
        with LogStore.open(tmp_path) as store:
            tap_in(store, utc(2024, 6, 18, 9, 30))
        assert read_log(tmp_path).endswith(f"IN {ts(2024, 6, 18, 9, 30)}\n")

    def test_tap_in_with_only_out_records(self, tmp_path: Path):
        write_log(tmp_path, f"OUT {ts(2024, 6, 16, 17)} 28800\n")
        with LogStore.open(tmp_path) as store:
            tap_in(store, utc(2024, 6, 17, 10))
        assert read_log(tmp_path).endswith(f"IN {ts(2024, 6, 17, 10)}\n")

    def test_drops_sub_second_precision(self, tmp_path: Path):
        with LogStore.open(tmp_path) as store:
            record = tap_in(store, datetime(2024, 6, 17, 10, 0, 0, 999_999, tzinfo=timezone.utc))
        assert record.timestamp == ts(2024, 6, 17, 10)


class TestTapOut:
    """Tests for tapping out."""

    def test_tap_out_after_tap_in(self, tmp_path: Path):
        with LogStore.open(tmp_path) as store:
            tap_in(store, utc(2024, 6, 17, 10))
            record = tap_out(store, utc(2024, 6, 17, 18))
        assert record == OutRecord(timestamp=ts(2024, 6, 17, 18), elapsed=8 * 3600)
        assert read_log(tmp_path) == (
            f"IN {ts(2024, 6, 17, 10)}\nOUT {ts(2024, 6, 17, 18)} 28800\n"
        )

    def test_missing_tap_in_assumes_nine_am(self, tmp_path: Path):
        write_log(tmp_path, f"IN {ts(2024, 6, 16, 10)}\nOUT {ts(2024, 6, 16, 18)} 28800\n")
        with LogStore.open(tmp_path) as store:
            record = tap_out(store, utc(2024, 6, 17, 17, 30))
        assert record.elapsed == 8 * 3600 + 30 * 60

    def test_tap_out_on_empty_log(self, tmp_path: Path):
        with LogStore.open(tmp_path) as store:
            record = tap_out(store, utc(2024, 6, 17, 17))
        assert record.elapsed == 8 * 3600

    def test_unmatched_in_from_yesterday(self, tmp_path: Path):
        write_log(tmp_path, f"IN {ts(2024, 6, 16, 10)}\n")
        with LogStore.open(tmp_path) as store:
            record = tap_out(store, utc(2024, 6, 17, 12))
        assert record.elapsed == 3 * 3600

    def test_second_tap_out_same_day_fails(self, tmp_path: Path):
        with LogStore.open(tmp_path) as store:
            tap_in(store, utc(2024, 6, 17, 10))
            tap_out(store, utc(2024, 6, 17, 18))
            with pytest.raises(AlreadyTappedOutError) as exc_info:
                tap_out(store, utc(2024, 6, 17, 19))
        assert exc_info.value.recorded_at == utc(2024, 6, 17, 18)
        assert "already tapped out today" in str(exc_info.value)
        assert read_log(tmp_path).count("OUT") == 1

    def test_tap_out_before_assumed_start_fails(self, tmp_path: Path):
        with LogStore.open(tmp_path) as store:
            with pytest.raises(EarlyTapOutError) as exc_info:
                tap_out(store, utc(2024, 6, 17, 8))
        assert exc_info.value.assumed_start == utc(2024, 6, 17, 9)
        assert isinstance(exc_info.value, TapStateError)
        assert read_log(tmp_path) == ""


class TestWorkWeek:
    """Taps over several days feed hours_worked."""

    def test_hours_from_tapped_days(self, tmp_path: Path):
        with LogStore.open(tmp_path) as store:
            tap_in(store, utc(2024, 6, 17, 9))
            tap_out(store, utc(2024, 6, 17, 17))
            tap_in(store, utc(2024, 6, 18, 10))
            tap_out(store, utc(2024, 6, 18, 14, 30))
            # Forgot to tap in
            tap_out(store, utc(2024, 6, 19, 12))
            log = store.read()

        assert hours_worked(date(2024, 6, 17), date(2024, 6, 19), log) == 8 + 4.5 + 3
