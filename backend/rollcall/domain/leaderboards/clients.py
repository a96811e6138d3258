"""HTTP clients for the Codeforces and LeetCode public APIs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol

import httpx

from rollcall.domain.common.exceptions import ExternalLookupError
from rollcall.domain.leaderboards.models import CodeforcesProfile, LeetCodeProfile, Platform

_LEETCODE_QUERY = """
query userStats($username: String!) {
  matchedUser(username: $username) {
    profile { ranking }
    submitStatsGlobal { acSubmissionNum { difficulty count } }
  }
  userContestRanking(username: $username) {
    attendedContestsCount
    globalRanking
  }
  userContestRankingHistory(username: $username) {
    attended
  }
}
"""


class LeaderboardClient(Protocol):
	"""Interface the refresher expects from each platform."""

	platform: Platform

	async def fetch_rating(self, handle: str) -> Optional[int]:
		...

	async def fetch_stats(self, handle: str) -> Optional[Any]:
		...


def _as_int(value: Any, default: int = 0) -> int:
	if value is None:
		return default
	try:
		return int(value)
	except (TypeError, ValueError):
		return default


@dataclass
class CodeforcesClient(LeaderboardClient):
	"""Reads rating history and profile data from the Codeforces API."""

	http: httpx.AsyncClient
	base_url: str = "https://codeforces.com/api"
	request_timeout: float = 5.0
	platform: Platform = Platform.CODEFORCES

	async def fetch_rating(self, handle: str) -> Optional[int]:
		"""Most recent contest rating, or None when the handle has no history."""

		history = await self._call("user.rating", {"handle": handle}, handle)
		if history is None:
			return None
		if not isinstance(history, list):
			raise ExternalLookupError("user.rating result is not a list", platform=self.platform.value, handle=handle)
		if not history:
			return None
		latest = history[-1]
		if not isinstance(latest, Mapping) or "newRating" not in latest:
			raise ExternalLookupError("rating change without newRating", platform=self.platform.value, handle=handle)
		return _as_int(latest["newRating"])

	async def fetch_stats(self, handle: str) -> Optional[CodeforcesProfile]:
		users = await self._call("user.info", {"handles": handle}, handle)
		if not users:
			return None
		if not isinstance(users, list) or not isinstance(users[0], Mapping):
			raise ExternalLookupError("user.info result has unexpected shape", platform=self.platform.value, handle=handle)
		info = users[0]
		history = await self._call("user.rating", {"handle": handle}, handle) or []
		return CodeforcesProfile(
			rating=_as_int(info.get("rating")),
			max_rating=_as_int(info.get("maxRating")),
			max_rank=info.get("maxRank"),
			contests_participated=len(history) if isinstance(history, list) else 0,
		)

	async def _call(self, method: str, params: dict[str, str], handle: str) -> Any:
		url = f"{self.base_url.rstrip('/')}/{method}"
		try:
			response = await self.http.get(url, params=params, timeout=self.request_timeout)
		except httpx.HTTPError as exc:
			raise ExternalLookupError(f"{method} request failed: {exc!r}", platform=self.platform.value, handle=handle) from exc
		try:
			payload = response.json()
		except ValueError as exc:
			raise ExternalLookupError(
				f"{method} returned non-JSON body (HTTP {response.status_code})",
				platform=self.platform.value,
				handle=handle,
			) from exc
		if not isinstance(payload, Mapping):
			raise ExternalLookupError(f"{method} returned unexpected payload", platform=self.platform.value, handle=handle)
		if payload.get("status") == "OK":
			return payload.get("result")
		comment = str(payload.get("comment") or "")
		# Codeforces answers an unknown handle with HTTP 400 and status FAILED.
		if "not found" in comment.lower():
			return None
		raise ExternalLookupError(
			f"{method} failed (HTTP {response.status_code}): {comment or 'no comment'}",
			platform=self.platform.value,
			handle=handle,
		)


@dataclass
class LeetCodeClient(LeaderboardClient):
	"""Reads profile ranking and solve counts from the LeetCode GraphQL API."""

	http: httpx.AsyncClient
	base_url: str = "https://leetcode.com"
	request_timeout: float = 5.0
	platform: Platform = Platform.LEETCODE

	async def fetch_rating(self, handle: str) -> Optional[int]:
		"""Global profile ranking, or None for an unknown username."""

		profile = await self.fetch_stats(handle)
		if profile is None:
			return None
		return profile.ranking

	async def fetch_stats(self, handle: str) -> Optional[LeetCodeProfile]:
		data = await self._query(handle)
		user = data.get("matchedUser")
		if user is None:
			return None
		user = self._mapping(user, "matchedUser", handle)

		solved = {"All": 0, "Easy": 0, "Medium": 0, "Hard": 0}
		submit_stats = self._mapping(user.get("submitStatsGlobal"), "submitStatsGlobal", handle)
		entries = submit_stats.get("acSubmissionNum") or []
		if not isinstance(entries, list):
			raise ExternalLookupError("acSubmissionNum is not a list", platform=self.platform.value, handle=handle)
		for entry in entries:
			entry = self._mapping(entry, "acSubmissionNum entry", handle)
			difficulty = entry.get("difficulty")
			if difficulty in solved:
				solved[difficulty] = _as_int(entry.get("count"))

		ranking_raw = self._mapping(user.get("profile"), "profile", handle).get("ranking")
		contest = self._mapping(data.get("userContestRanking"), "userContestRanking", handle)
		history = data.get("userContestRankingHistory") or []
		return LeetCodeProfile(
			ranking=_as_int(ranking_raw) if ranking_raw is not None else None,
			problems_solved=solved["All"],
			easy_solved=solved["Easy"],
			medium_solved=solved["Medium"],
			hard_solved=solved["Hard"],
			contests_participated=_as_int(contest.get("attendedContestsCount")),
			global_ranking=_as_int(contest["globalRanking"]) if contest.get("globalRanking") is not None else None,
			total_contests=len(history) if isinstance(history, list) else None,
		)

	def _mapping(self, value: Any, what: str, handle: str) -> Mapping[str, Any]:
		"""Missing sections read as empty; anything other than an object is a bad payload."""
		if value is None:
			return {}
		if not isinstance(value, Mapping):
			raise ExternalLookupError(f"{what} has unexpected shape", platform=self.platform.value, handle=handle)
		return value

	async def _query(self, handle: str) -> Mapping[str, Any]:
		url = f"{self.base_url.rstrip('/')}/graphql"
		body = {"query": _LEETCODE_QUERY, "variables": {"username": handle}}
		try:
			response = await self.http.post(url, json=body, timeout=self.request_timeout)
			response.raise_for_status()
			payload = response.json()
		except httpx.HTTPError as exc:
			raise ExternalLookupError(f"graphql request failed: {exc!r}", platform=self.platform.value, handle=handle) from exc
		except ValueError as exc:
			raise ExternalLookupError("graphql returned non-JSON body", platform=self.platform.value, handle=handle) from exc
		data = payload.get("data") if isinstance(payload, Mapping) else None
		if not isinstance(data, Mapping):
			raise ExternalLookupError("graphql response has no data", platform=self.platform.value, handle=handle)
		return data


__all__ = ["CodeforcesClient", "LeaderboardClient", "LeetCodeClient"]
