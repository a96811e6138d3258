"""Fixed-timezone day boundaries."""

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone, tzinfo


def _require_aware(now: datetime) -> None:
	if now.tzinfo is None or now.utcoffset() is None:
		raise ValueError("now must be timezone-aware")


def next_midnight(now: datetime, tz: tzinfo) -> datetime:
	"""Return the first 00:00:00 in ``tz`` strictly after ``now``.

	A ``now`` that is exactly midnight maps to the following day's midnight,
	so a single day can never be triggered twice.
	"""

	_require_aware(now)
	local_day = now.astimezone(tz).date()
	return datetime.combine(local_day + timedelta(days=1), time(0, 0), tzinfo=tz)


def seconds_until_next_midnight(now: datetime, tz: tzinfo) -> float:
	"""Non-negative seconds from ``now`` to :func:`next_midnight`.

	Both ends are compared as UTC instants; subtracting two datetimes that
	share a ``ZoneInfo`` would otherwise ignore a DST change in between.
	"""

	target = next_midnight(now, tz)
	delta = target.astimezone(timezone.utc) - now.astimezone(timezone.utc)
	return max(delta.total_seconds(), 0.0)


__all__ = ["next_midnight", "seconds_until_next_midnight"]
