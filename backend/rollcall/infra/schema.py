"""Canonical table layout for members, attendance, streaks and platform stats."""

from __future__ import annotations

import asyncpg

SCHEMA_STATEMENTS: tuple[str, ...] = (
	"""
	CREATE TABLE IF NOT EXISTS member (
		id SERIAL PRIMARY KEY,
		roll_no TEXT NOT NULL UNIQUE,
		name TEXT NOT NULL,
		hostel TEXT NOT NULL DEFAULT '',
		email TEXT NOT NULL DEFAULT '',
		sex TEXT NOT NULL DEFAULT '',
		year INTEGER NOT NULL DEFAULT 0,
		mac_address TEXT NOT NULL DEFAULT '',
		discord_id TEXT,
		leaderboard_handle TEXT,
		cp_platform TEXT,
		rating INTEGER
	)
	""",
	"""
	CREATE TABLE IF NOT EXISTS attendance (
		member_id INTEGER NOT NULL REFERENCES member(id) ON DELETE CASCADE,
		date DATE NOT NULL,
		is_present BOOLEAN NOT NULL DEFAULT FALSE,
		time_in TIME NOT NULL DEFAULT '00:00:00',
		time_out TIME NOT NULL DEFAULT '00:00:00',
		created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
		updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
		PRIMARY KEY (member_id, date)
	)
	""",
	"""
	CREATE TABLE IF NOT EXISTS attendance_streak (
		member_id INTEGER NOT NULL REFERENCES member(id) ON DELETE CASCADE,
		month DATE NOT NULL,
		streak INTEGER NOT NULL DEFAULT 0 CHECK (streak >= 0),
		PRIMARY KEY (member_id, month),
		CHECK (EXTRACT(DAY FROM month) = 1)
	)
	""",
	"""
	CREATE TABLE IF NOT EXISTS codeforces_stats (
		member_id INTEGER PRIMARY KEY REFERENCES member(id) ON DELETE CASCADE,
		codeforces_handle TEXT NOT NULL,
		codeforces_rating INTEGER NOT NULL DEFAULT 0,
		max_rating INTEGER NOT NULL DEFAULT 0,
		max_rank TEXT,
		contests_participated INTEGER NOT NULL DEFAULT 0,
		updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
	)
	""",
	"""
	CREATE TABLE IF NOT EXISTS leetcode_stats (
		member_id INTEGER PRIMARY KEY REFERENCES member(id) ON DELETE CASCADE,
		leetcode_username TEXT NOT NULL,
		problems_solved INTEGER NOT NULL DEFAULT 0,
		easy_solved INTEGER NOT NULL DEFAULT 0,
		medium_solved INTEGER NOT NULL DEFAULT 0,
		hard_solved INTEGER NOT NULL DEFAULT 0,
		contests_participated INTEGER NOT NULL DEFAULT 0,
		best_rank INTEGER NOT NULL DEFAULT 0,
		total_contests INTEGER NOT NULL DEFAULT 0,
		updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
	)
	""",
)


async def ensure_schema(pool: asyncpg.Pool) -> None:
	"""Create any missing table. Existing tables are left as they are."""

	async with pool.acquire() as conn:
		async with conn.transaction():
			for statement in SCHEMA_STATEMENTS:
				await conn.execute(statement)


__all__ = ["SCHEMA_STATEMENTS", "ensure_schema"]
