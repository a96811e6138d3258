"""PostgreSQL persistence for the roster, attendance and streak tables."""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from datetime import date
from typing import Iterator, Optional, Sequence

import asyncpg

from rollcall.domain.attendance.models import SENTINEL_TIME, Member
from rollcall.domain.attendance.repository import (
	AttendanceRepository,
	RatingRepository,
	RosterRepository,
	StreakRepository,
)
from rollcall.domain.common.exceptions import StoreError

_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
	"""Translate driver failures into StoreError for the given operation."""
	try:
		yield
	except _DRIVER_ERRORS as exc:
		raise StoreError(f"{operation} failed: {exc.__class__.__name__}: {exc}", operation=operation) from exc


def _row_to_member(row: asyncpg.Record) -> Member:
	return Member(
		id=int(row["id"]),
		roll_no=str(row["roll_no"]),
		name=str(row["name"]),
		hostel=row["hostel"] or "",
		email=row["email"] or "",
		sex=row["sex"] or "",
		year=int(row["year"] or 0),
		mac_address=row["mac_address"] or "",
		discord_id=row["discord_id"],
		leaderboard_handle=row["leaderboard_handle"],
		cp_platform=row["cp_platform"],
		rating=int(row["rating"]) if row["rating"] is not None else None,
	)


class PostgresRosterRepository(RosterRepository, RatingRepository):
	"""Reads the member table; writes only the cached rating column."""

	def __init__(self, pool: asyncpg.Pool) -> None:
		self._pool = pool

	async def list_all_members(self) -> Sequence[Member]:
		with store_errors("member.list"):
			rows = await self._pool.fetch(
				"""
				SELECT id, roll_no, name, hostel, email, sex, year, mac_address,
					discord_id, leaderboard_handle, cp_platform, rating
				FROM member
				ORDER BY id
				"""
			)
		return [_row_to_member(row) for row in rows]

	async def update_member_rating(self, member_id: int, value: int) -> None:
		with store_errors("member.update_rating"):
			await self._pool.execute("UPDATE member SET rating = $2 WHERE id = $1", member_id, value)


class PostgresAttendanceRepository(AttendanceRepository):
	def __init__(self, pool: asyncpg.Pool) -> None:
		self._pool = pool

	async def insert_if_absent(self, member_id: int, day: date) -> bool:
		with store_errors("attendance.insert"):
			inserted = await self._pool.fetchval(
				"""
				INSERT INTO attendance (member_id, date, is_present, time_in, time_out)
				VALUES ($1, $2, FALSE, $3, $4)
				ON CONFLICT (member_id, date) DO NOTHING
				RETURNING member_id
				""",
				member_id,
				day,
				SENTINEL_TIME,
				SENTINEL_TIME,
			)
		return inserted is not None

	async def count_present(self, member_id: int, day: date) -> int:
		with store_errors("attendance.count_present"):
			count = await self._pool.fetchval(
				"""
				SELECT COUNT(*)
				FROM attendance
				WHERE member_id = $1 AND date = $2 AND is_present = TRUE
				""",
				member_id,
				day,
			)
		return int(count or 0)


class PostgresStreakRepository(StreakRepository):
	def __init__(self, pool: asyncpg.Pool) -> None:
		self._pool = pool

	async def get_streak(self, member_id: int, month: date) -> Optional[int]:
		with store_errors("attendance_streak.get"):
			value = await self._pool.fetchval(
				"SELECT streak FROM attendance_streak WHERE member_id = $1 AND month = $2",
				member_id,
				month,
			)
		return int(value) if value is not None else None

	async def insert_streak_if_absent(self, member_id: int, month: date, value: int) -> bool:
		with store_errors("attendance_streak.insert"):
			inserted = await self._pool.fetchval(
				"""
				INSERT INTO attendance_streak (member_id, month, streak)
				VALUES ($1, $2, $3)
				ON CONFLICT (member_id, month) DO NOTHING
				RETURNING member_id
				""",
				member_id,
				month,
				value,
			)
		return inserted is not None

	async def increment_streak(self, member_id: int, month: date) -> Optional[int]:
		with store_errors("attendance_streak.increment"):
			value = await self._pool.fetchval(
				"""
				UPDATE attendance_streak
				SET streak = streak + 1
				WHERE member_id = $1 AND month = $2
				RETURNING streak
				""",
				member_id,
				month,
			)
		return int(value) if value is not None else None


__all__ = [
	"PostgresAttendanceRepository",
	"PostgresRosterRepository",
	"PostgresStreakRepository",
	"store_errors",
]
