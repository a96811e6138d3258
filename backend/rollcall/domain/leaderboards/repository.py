"""Storage interfaces for per-platform leaderboard statistics."""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Protocol

from rollcall.domain.leaderboards.models import CodeforcesStats, LeetCodeStats


class CodeforcesStatsRepository(Protocol):
	async def get(self, member_id: int) -> Optional[CodeforcesStats]:
		...

	async def save(self, stats: CodeforcesStats) -> None:
		...


class LeetCodeStatsRepository(Protocol):
	async def get(self, member_id: int) -> Optional[LeetCodeStats]:
		...

	async def save(self, stats: LeetCodeStats) -> None:
		...


class InMemoryCodeforcesStatsRepository(CodeforcesStatsRepository):
	def __init__(self, rows: Iterable[CodeforcesStats] = ()) -> None:
		self._rows: Dict[int, CodeforcesStats] = {row.member_id: row for row in rows}

	async def get(self, member_id: int) -> Optional[CodeforcesStats]:
		return self._rows.get(member_id)

	async def save(self, stats: CodeforcesStats) -> None:
		self._rows[stats.member_id] = stats


class InMemoryLeetCodeStatsRepository(LeetCodeStatsRepository):
	def __init__(self, rows: Iterable[LeetCodeStats] = ()) -> None:
		self._rows: Dict[int, LeetCodeStats] = {row.member_id: row for row in rows}

	async def get(self, member_id: int) -> Optional[LeetCodeStats]:
		return self._rows.get(member_id)

	async def save(self, stats: LeetCodeStats) -> None:
		self._rows[stats.member_id] = stats
