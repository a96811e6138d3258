"""Storage interfaces for the roster, attendance and streak tables."""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, Optional, Protocol, Sequence, Tuple

from rollcall.domain.attendance.models import AttendanceRecord, Member, StreakState


class RosterRepository(Protocol):
	async def list_all_members(self) -> Sequence[Member]:
		...


class AttendanceRepository(Protocol):
	async def insert_if_absent(self, member_id: int, day: date) -> bool:
		"""Create the default absent row; return False when it already existed."""
		...

	async def count_present(self, member_id: int, day: date) -> int:
		...


class StreakRepository(Protocol):
	async def get_streak(self, member_id: int, month: date) -> Optional[int]:
		...

	async def insert_streak_if_absent(self, member_id: int, month: date, value: int) -> bool:
		...

	async def increment_streak(self, member_id: int, month: date) -> Optional[int]:
		"""Add one in a single statement; return the new value, or None when the row is missing."""
		...


class RatingRepository(Protocol):
	async def update_member_rating(self, member_id: int, value: int) -> None:
		...


class InMemoryRosterRepository(RosterRepository, RatingRepository):
	"""Simple roster for development and tests; also holds the cached rating."""

	def __init__(self, members: Iterable[Member] = ()) -> None:
		self._members: Dict[int, Member] = {member.id: member for member in members}

	def add(self, member: Member) -> None:
		self._members[member.id] = member

	def get(self, member_id: int) -> Optional[Member]:
		return self._members.get(member_id)

	async def list_all_members(self) -> Sequence[Member]:
		return sorted(self._members.values(), key=lambda member: member.id)

	async def update_member_rating(self, member_id: int, value: int) -> None:
		member = self._members.get(member_id)
		if member is not None:
			member.rating = value


class InMemoryAttendanceRepository(AttendanceRepository):
	def __init__(self) -> None:
		self._rows: Dict[Tuple[int, date], AttendanceRecord] = {}

	def rows(self) -> list[AttendanceRecord]:
		return list(self._rows.values())

	def get(self, member_id: int, day: date) -> Optional[AttendanceRecord]:
		return self._rows.get((member_id, day))

	def mark_present(self, member_id: int, day: date) -> None:
		record = self._rows.setdefault((member_id, day), AttendanceRecord(member_id=member_id, date=day))
		record.is_present = True

	async def insert_if_absent(self, member_id: int, day: date) -> bool:
		key = (member_id, day)
		if key in self._rows:
			return False
		self._rows[key] = AttendanceRecord(member_id=member_id, date=day)
		return True

	async def count_present(self, member_id: int, day: date) -> int:
		record = self._rows.get((member_id, day))
		return 1 if record is not None and record.is_present else 0


class InMemoryStreakRepository(StreakRepository):
	def __init__(self) -> None:
		self._rows: Dict[Tuple[int, date], StreakState] = {}

	def get(self, member_id: int, month: date) -> Optional[StreakState]:
		return self._rows.get((member_id, month))

	async def get_streak(self, member_id: int, month: date) -> Optional[int]:
		row = self._rows.get((member_id, month))
		return row.streak if row is not None else None

	async def insert_streak_if_absent(self, member_id: int, month: date, value: int) -> bool:
		key = (member_id, month)
		if key in self._rows:
			return False
		self._rows[key] = StreakState(member_id=member_id, month=month, streak=value)
		return True

	async def increment_streak(self, member_id: int, month: date) -> Optional[int]:
		row = self._rows.get((member_id, month))
		if row is None:
			return None
		row.streak += 1
		return row.streak
