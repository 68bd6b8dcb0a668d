"""Level filter and level menu derived from the record store."""

from dataclasses import dataclass
from typing import Iterable

from log_viewer.models import LogRecord

ALL_LEVELS = "ALL"


@dataclass(frozen=True)
class FilterView:
    records: tuple[LogRecord, ...]
    levels: tuple[str, ...]


def matches_level(record: LogRecord, level: str) -> bool:
    """True if the record's level equals ``level`` (case-insensitive)."""
    return record.level.upper() == level.upper()


def filter_records(records: Iterable[LogRecord], level: str = ALL_LEVELS) -> tuple[LogRecord, ...]:
    if level.upper() == ALL_LEVELS:
        return tuple(records)
    return tuple(r for r in records if matches_level(r, level))


def available_levels(records: Iterable[LogRecord]) -> tuple[str, ...]:
    """``ALL`` followed by each distinct level in first-seen order."""
    seen = [ALL_LEVELS]
    for record in records:
        level = record.level.upper()
        if level not in seen:
            seen.append(level)
    return tuple(seen)


def derive_view(records: Iterable[LogRecord], level: str = ALL_LEVELS) -> FilterView:
    snapshot = tuple(records)
    return FilterView(
        records=filter_records(snapshot, level),
        levels=available_levels(snapshot),
    )
