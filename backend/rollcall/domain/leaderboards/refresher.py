"""Per-member refresh of external leaderboard data."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Mapping, Optional, TypeVar

from rollcall.domain.attendance.models import Member
from rollcall.domain.attendance.repository import RatingRepository
from rollcall.domain.common.exceptions import ExternalLookupError, RollcallError, error_kind
from rollcall.domain.leaderboards.clients import LeaderboardClient
from rollcall.domain.leaderboards.models import (
	CodeforcesProfile,
	LeetCodeProfile,
	LookupKind,
	LookupResult,
	LookupStatus,
	Platform,
	RefreshResult,
)
from rollcall.domain.leaderboards.repository import CodeforcesStatsRepository, LeetCodeStatsRepository
from rollcall.obs import metrics as obs_metrics

_LOG = logging.getLogger(__name__)

T = TypeVar("T")


class LeaderboardRefresher:
	"""Looks up every platform a member is linked to, concurrently.

	A lookup that fails, times out or finds nothing is recorded and skipped;
	it never stops the member's other lookups or any other member.
	"""

	def __init__(
		self,
		*,
		clients: Mapping[Platform, LeaderboardClient],
		ratings: RatingRepository,
		codeforces_stats: Optional[CodeforcesStatsRepository] = None,
		leetcode_stats: Optional[LeetCodeStatsRepository] = None,
		lookup_timeout: float = 5.0,
	) -> None:
		self._clients = dict(clients)
		self._ratings = ratings
		self._codeforces_stats = codeforces_stats
		self._leetcode_stats = leetcode_stats
		self._timeout = lookup_timeout

	async def refresh(self, member: Member) -> RefreshResult:
		lookups: list[Awaitable[Optional[LookupResult]]] = []
		platform = Platform.parse(member.cp_platform)
		if member.leaderboard_handle and platform is not None and platform in self._clients:
			lookups.append(self._refresh_rating(member.id, platform, member.leaderboard_handle))
		if self._codeforces_stats is not None and Platform.CODEFORCES in self._clients:
			lookups.append(self._refresh_codeforces_stats(member.id))
		if self._leetcode_stats is not None and Platform.LEETCODE in self._clients:
			lookups.append(self._refresh_leetcode_stats(member.id))
		if not lookups:
			return RefreshResult(lookups=[])
		results = await asyncio.gather(*lookups)
		return RefreshResult(lookups=[item for item in results if item is not None])

	async def _refresh_rating(self, member_id: int, platform: Platform, handle: str) -> LookupResult:
		client = self._clients[platform]
		try:
			value = await self._bounded(client.fetch_rating(handle), platform, handle)
			if value is None:
				_LOG.info("no rating data for handle", extra={"platform": platform.value, "handle": handle})
				return self._record(LookupResult(platform, LookupKind.RATING, LookupStatus.NO_DATA))
			await self._ratings.update_member_rating(member_id, value)
		except Exception as exc:
			return self._failed(platform, LookupKind.RATING, handle, exc)
		return self._record(LookupResult(platform, LookupKind.RATING, LookupStatus.UPDATED, value=value))

	async def _refresh_codeforces_stats(self, member_id: int) -> Optional[LookupResult]:
		assert self._codeforces_stats is not None
		platform = Platform.CODEFORCES
		handle = None
		try:
			row = await self._codeforces_stats.get(member_id)
			if row is None or not row.handle:
				return None
			handle = row.handle
			profile: Optional[CodeforcesProfile] = await self._bounded(
				self._clients[platform].fetch_stats(handle), platform, handle
			)
			if profile is None:
				return self._record(LookupResult(platform, LookupKind.STATS, LookupStatus.NO_DATA))
			row.rating = profile.rating
			row.max_rating = max(row.max_rating, profile.max_rating)
			row.max_rank = profile.max_rank or row.max_rank
			row.contests_participated = profile.contests_participated
			await self._codeforces_stats.save(row)
		except Exception as exc:
			return self._failed(platform, LookupKind.STATS, handle, exc)
		return self._record(LookupResult(platform, LookupKind.STATS, LookupStatus.UPDATED, value=row.rating))

	async def _refresh_leetcode_stats(self, member_id: int) -> Optional[LookupResult]:
		assert self._leetcode_stats is not None
		platform = Platform.LEETCODE
		handle = None
		try:
			row = await self._leetcode_stats.get(member_id)
			if row is None or not row.username:
				return None
			handle = row.username
			profile: Optional[LeetCodeProfile] = await self._bounded(
				self._clients[platform].fetch_stats(handle), platform, handle
			)
			if profile is None:
				return self._record(LookupResult(platform, LookupKind.STATS, LookupStatus.NO_DATA))
			row.problems_solved = profile.problems_solved
			row.easy_solved = profile.easy_solved
			row.medium_solved = profile.medium_solved
			row.hard_solved = profile.hard_solved
			row.contests_participated = profile.contests_participated
			if profile.global_ranking is not None:
				row.best_rank = profile.global_ranking
			if profile.total_contests is not None:
				row.total_contests = profile.total_contests
			await self._leetcode_stats.save(row)
		except Exception as exc:
			return self._failed(platform, LookupKind.STATS, handle, exc)
		return self._record(LookupResult(platform, LookupKind.STATS, LookupStatus.UPDATED, value=row.problems_solved))

	async def _bounded(self, call: Awaitable[T], platform: Platform, handle: str) -> T:
		try:
			return await asyncio.wait_for(call, timeout=self._timeout)
		except asyncio.TimeoutError as exc:
			raise ExternalLookupError(
				f"lookup exceeded {self._timeout:.1f}s",
				platform=platform.value,
				handle=handle,
			) from exc

	def _failed(self, platform: Platform, kind: LookupKind, handle: Optional[str], exc: Exception) -> LookupResult:
		label = error_kind(exc)
		_LOG.warning(
			"leaderboard lookup failed: %s",
			exc.detail if isinstance(exc, RollcallError) else repr(exc),
			exc_info=not isinstance(exc, RollcallError),
			extra={"platform": platform.value, "lookup": kind.value, "handle": handle, "error_kind": label},
		)
		return self._record(LookupResult(platform, kind, LookupStatus.FAILED, error=label))

	@staticmethod
	def _record(result: LookupResult) -> LookupResult:
		obs_metrics.inc_leaderboard_lookup(result.platform.value, result.kind.value, result.status.value)
		return result


__all__ = ["LeaderboardRefresher"]
