"""PostgreSQL persistence for codeforces_stats and leetcode_stats."""

from __future__ import annotations

from typing import Optional

import asyncpg

from rollcall.domain.leaderboards.models import CodeforcesStats, LeetCodeStats
from rollcall.domain.leaderboards.repository import CodeforcesStatsRepository, LeetCodeStatsRepository
from rollcall.infra.attendance_repo import store_errors


class PostgresCodeforcesStatsRepository(CodeforcesStatsRepository):
	def __init__(self, pool: asyncpg.Pool) -> None:
		self._pool = pool

	async def get(self, member_id: int) -> Optional[CodeforcesStats]:
		with store_errors("codeforces_stats.get"):
			row = await self._pool.fetchrow(
				"""
				SELECT member_id, codeforces_handle, codeforces_rating, max_rating, max_rank, contests_participated
				FROM codeforces_stats
				WHERE member_id = $1
				""",
				member_id,
			)
		if row is None:
			return None
		return CodeforcesStats(
			member_id=int(row["member_id"]),
			handle=str(row["codeforces_handle"]),
			rating=int(row["codeforces_rating"] or 0),
			max_rating=int(row["max_rating"] or 0),
			max_rank=row["max_rank"],
			contests_participated=int(row["contests_participated"] or 0),
		)

	async def save(self, stats: CodeforcesStats) -> None:
		with store_errors("codeforces_stats.save"):
			await self._pool.execute(
				"""
				UPDATE codeforces_stats
				SET codeforces_rating = $2,
					max_rating = $3,
					max_rank = $4,
					contests_participated = $5,
					updated_at = NOW()
				WHERE member_id = $1
				""",
				stats.member_id,
				stats.rating,
				stats.max_rating,
				stats.max_rank,
				stats.contests_participated,
			)


class PostgresLeetCodeStatsRepository(LeetCodeStatsRepository):
	def __init__(self, pool: asyncpg.Pool) -> None:
		self._pool = pool

	async def get(self, member_id: int) -> Optional[LeetCodeStats]:
		with store_errors("leetcode_stats.get"):
			row = await self._pool.fetchrow(
				"""
				SELECT member_id, leetcode_username, problems_solved, easy_solved, medium_solved,
					hard_solved, contests_participated, best_rank, total_contests
				FROM leetcode_stats
				WHERE member_id = $1
				""",
				member_id,
			)
		if row is None:
			return None
		return LeetCodeStats(
			member_id=int(row["member_id"]),
			username=str(row["leetcode_username"]),
			problems_solved=int(row["problems_solved"] or 0),
			easy_solved=int(row["easy_solved"] or 0),
			medium_solved=int(row["medium_solved"] or 0),
			hard_solved=int(row["hard_solved"] or 0),
			contests_participated=int(row["contests_participated"] or 0),
			best_rank=int(row["best_rank"] or 0),
			total_contests=int(row["total_contests"] or 0),
		)

	async def save(self, stats: LeetCodeStats) -> None:
		with store_errors("leetcode_stats.save"):
			await self._pool.execute(
				"""
				UPDATE leetcode_stats
				SET problems_solved = $2,
					easy_solved = $3,
					medium_solved = $4,
					hard_solved = $5,
					contests_participated = $6,
					best_rank = $7,
					total_contests = $8,
					updated_at = NOW()
				WHERE member_id = $1
				""",
				stats.member_id,
				stats.problems_solved,
				stats.easy_solved,
				stats.medium_solved,
				stats.hard_solved,
				stats.contests_participated,
				stats.best_rank,
				stats.total_contests,
			)


__all__ = ["PostgresCodeforcesStatsRepository", "PostgresLeetCodeStatsRepository"]
