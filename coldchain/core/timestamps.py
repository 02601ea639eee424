"""Timestamp helpers for the wire boundary.

Timestamps cross the service boundary either as ISO-8601 strings or as
epoch milliseconds.  Both conversions are lossless because every stored
datetime is UTC and truncated to whole milliseconds at creation time.
"""

from __future__ import annotations

from datetime import datetime, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def truncate_to_millis(value: datetime) -> datetime:
    """Drop sub-millisecond precision and normalise to UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def utc_now() -> datetime:
    """Current UTC time at millisecond precision."""
    return truncate_to_millis(datetime.now(timezone.utc))


def to_epoch_ms(value: datetime) -> int:
    delta = truncate_to_millis(value) - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000


def from_epoch_ms(millis: int) -> datetime:
    seconds, ms = divmod(int(millis), 1000)
    return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(microsecond=ms * 1000)


def to_iso(value: datetime) -> str:
    """ISO-8601 with millisecond precision and an explicit UTC offset."""
    return truncate_to_millis(value).isoformat(timespec="milliseconds")


def from_iso(text: str) -> datetime:
    """Parse ISO-8601; a trailing ``Z`` is accepted as UTC."""
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return truncate_to_millis(datetime.fromisoformat(text))
