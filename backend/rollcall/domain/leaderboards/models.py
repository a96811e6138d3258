"""Domain models for external competitive-programming leaderboards."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Platform(str, Enum):
	"""Supported external platforms."""

	CODEFORCES = "codeforces"
	LEETCODE = "leetcode"

	@classmethod
	def parse(cls, raw: Optional[str]) -> Optional["Platform"]:
		"""Map a stored platform selector ("Codeforces", "LeetCode", ...) to a member."""

		if not raw:
			return None
		try:
			return cls(raw.strip().lower())
		except ValueError:
			return None


@dataclass(slots=True)
class CodeforcesStats:
	member_id: int
	handle: str
	rating: int = 0
	max_rating: int = 0
	max_rank: Optional[str] = None
	contests_participated: int = 0


@dataclass(slots=True)
class LeetCodeStats:
	member_id: int
	username: str
	problems_solved: int = 0
	easy_solved: int = 0
	medium_solved: int = 0
	hard_solved: int = 0
	contests_participated: int = 0
	best_rank: int = 0
	total_contests: int = 0


@dataclass(slots=True)
class CodeforcesProfile:
	"""What the Codeforces API reports for a handle."""

	rating: int
	max_rating: int
	max_rank: Optional[str]
	contests_participated: int


@dataclass(slots=True)
class LeetCodeProfile:
	"""What the LeetCode API reports for a username."""

	ranking: Optional[int]
	problems_solved: int
	easy_solved: int
	medium_solved: int
	hard_solved: int
	contests_participated: int
	global_ranking: Optional[int]
	total_contests: Optional[int]


class LookupKind(str, Enum):
	RATING = "rating"
	STATS = "stats"


class LookupStatus(str, Enum):
	UPDATED = "updated"
	NO_DATA = "no_data"
	FAILED = "failed"


@dataclass(slots=True)
class LookupResult:
	platform: Platform
	kind: LookupKind
	status: LookupStatus
	value: Optional[int] = None
	error: Optional[str] = None


@dataclass(slots=True)
class RefreshResult:
	"""Every lookup attempted for one member in one run."""

	lookups: list[LookupResult]

	@property
	def failed(self) -> list[LookupResult]:
		return [item for item in self.lookups if item.status is LookupStatus.FAILED]

	@property
	def updated(self) -> list[LookupResult]:
		return [item for item in self.lookups if item.status is LookupStatus.UPDATED]
