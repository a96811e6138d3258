"""Domain models for members, daily attendance and monthly streaks."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from enum import Enum
from typing import Optional

# time_in / time_out of a freshly seeded row, before any presence is marked
SENTINEL_TIME = time(0, 0, 0)


@dataclass(slots=True)
class Member:
	"""Identity record loaded by the roster reader."""

	id: int
	roll_no: str
	name: str
	hostel: str = ""
	email: str = ""
	sex: str = ""
	year: int = 0
	mac_address: str = ""
	discord_id: Optional[str] = None
	leaderboard_handle: Optional[str] = None
	cp_platform: Optional[str] = None
	rating: Optional[int] = None


@dataclass(slots=True)
class AttendanceRecord:
	"""One row per (member, date) in the organization's timezone."""

	member_id: int
	date: date
	is_present: bool = False
	time_in: time = SENTINEL_TIME
	time_out: time = SENTINEL_TIME


@dataclass(slots=True)
class StreakState:
	"""Monthly attendance streak keyed by (member, first day of month)."""

	member_id: int
	month: date
	streak: int = 0


@dataclass(frozen=True, slots=True)
class RunDates:
	"""Every date a single run needs, derived from one instant in one timezone."""

	today: date
	yesterday: date
	month_start: date

	@property
	def is_month_start(self) -> bool:
		return self.today == self.month_start

	@classmethod
	def at(cls, instant: datetime, tz: tzinfo) -> "RunDates":
		if instant.tzinfo is None:
			raise ValueError("instant must be timezone-aware")
		today = instant.astimezone(tz).date()
		return cls(
			today=today,
			yesterday=today - timedelta(days=1),
			month_start=today.replace(day=1),
		)


class SeedOutcome(str, Enum):
	CREATED = "created"
	EXISTING = "existing"


class StreakOutcome(str, Enum):
	"""Result of advancing one member's streak for one run."""

	RESET = "reset"
	RESET_KEPT = "reset_kept"
	INCREMENTED = "incremented"
	UNCHANGED = "unchanged"
	ANOMALY = "anomaly"


@dataclass(slots=True)
class StreakResult:
	outcome: StreakOutcome
	streak: Optional[int] = None
	anomaly: Optional[str] = None
