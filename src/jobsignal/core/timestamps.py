"""
UTC timestamp utilities (stdlib-only).

Job frameworks hand over enqueue times as ISO-8601 strings; the
telemetry backend wants integer milliseconds since the Unix epoch.

Tags:
    timestamps, utc, datetime, jobsignal, stdlib-only
"""

from datetime import UTC, datetime, timedelta

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MILLISECOND = timedelta(milliseconds=1)


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def from_iso8601(s: str | None) -> datetime | None:
    """Parse ISO 8601 string to an aware datetime.

    A trailing ``Z`` is accepted; naive values are taken to be UTC.
    Raises ``ValueError`` for unparsable input.
    """
    if s is None:
        return None
    dt = datetime.fromisoformat(s.strip())
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def to_epoch_millis(dt: datetime) -> int:
    """Milliseconds since the Unix epoch, truncated.

    Integer arithmetic on the timedelta keeps sub-second values exact.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return (dt - _EPOCH) // _ONE_MILLISECOND


def iso8601_to_epoch_millis(s: str) -> int:
    """Parse an ISO 8601 string straight to epoch milliseconds."""
    return to_epoch_millis(from_iso8601(s))
