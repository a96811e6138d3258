"""Nightly attendance rollover: seed today, refresh leaderboards, advance streaks."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timezone, tzinfo
from enum import Enum
from time import perf_counter
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence, TypeVar

from rollcall.domain.attendance.models import Member, RunDates, SeedOutcome, StreakResult
from rollcall.domain.attendance.repository import RosterRepository
from rollcall.domain.attendance.seeder import AttendanceSeeder
from rollcall.domain.attendance.streaks import StreakEngine
from rollcall.domain.common.exceptions import RolloverAlreadyCompleted, RollcallError, StoreError, error_kind
from rollcall.domain.leaderboards.models import LookupStatus, RefreshResult
from rollcall.domain.leaderboards.refresher import LeaderboardRefresher
from rollcall.obs import metrics as obs_metrics
from rollcall.obs.logging import bind_context, reset_context

_LOG = logging.getLogger(__name__)

JOB_NAME = "attendance-rollover"

T = TypeVar("T")


class MemberStep(str, Enum):
	SEED = "seed"
	REFRESH = "refresh"
	STREAK = "streak"


@dataclass(slots=True)
class StepFailure:
	member_id: int
	step: MemberStep
	error_kind: str
	detail: str


@dataclass(slots=True)
class MemberReport:
	"""Everything that happened to one member during one run."""

	member_id: int
	seed: Optional[SeedOutcome] = None
	refresh: Optional[RefreshResult] = None
	streak: Optional[StreakResult] = None
	failures: list[StepFailure] = field(default_factory=list)

	@property
	def ok(self) -> bool:
		return not self.failures


@dataclass(slots=True)
class RunSummary:
	run_id: str
	dates: RunDates
	members: list[MemberReport]
	duration_seconds: float = 0.0

	@property
	def failures(self) -> list[StepFailure]:
		return [failure for report in self.members for failure in report.failures]

	def report_for(self, member_id: int) -> Optional[MemberReport]:
		for report in self.members:
			if report.member_id == member_id:
				return report
		return None

	def counts(self) -> Dict[str, Any]:
		seeds = Counter(report.seed.value for report in self.members if report.seed is not None)
		streaks = Counter(report.streak.outcome.value for report in self.members if report.streak is not None)
		lookups = Counter(
			lookup.status.value
			for report in self.members
			if report.refresh is not None
			for lookup in report.refresh.lookups
		)
		steps_failed = Counter(failure.step.value for failure in self.failures)
		return {
			"day": self.dates.today.isoformat(),
			"members_total": len(self.members),
			"members_failed": sum(1 for report in self.members if not report.ok),
			"seeded_created": seeds.get(SeedOutcome.CREATED.value, 0),
			"seeded_existing": seeds.get(SeedOutcome.EXISTING.value, 0),
			"lookups_updated": lookups.get(LookupStatus.UPDATED.value, 0),
			"lookups_no_data": lookups.get(LookupStatus.NO_DATA.value, 0),
			"lookups_failed": lookups.get(LookupStatus.FAILED.value, 0),
			"streaks": dict(streaks),
			"steps_failed": dict(steps_failed),
		}


def _utcnow() -> datetime:
	return datetime.now(timezone.utc)


class NightlyRolloverJob:
	"""Runs the daily rollover over the whole roster.

	Members are processed concurrently, bounded by ``concurrency``. Within one
	member the steps run strictly in order (seed, refresh, streak) and each
	step's failure is recorded without skipping the rest. Only a failure to
	load the roster aborts the run.
	"""

	def __init__(
		self,
		*,
		roster: RosterRepository,
		seeder: AttendanceSeeder,
		refresher: LeaderboardRefresher,
		streaks: StreakEngine,
		tz: tzinfo,
		concurrency: int = 8,
		clock: Callable[[], datetime] = _utcnow,
	) -> None:
		if concurrency < 1:
			raise ValueError("concurrency must be >= 1")
		self._roster = roster
		self._seeder = seeder
		self._refresher = refresher
		self._streaks = streaks
		self._tz = tz
		self._concurrency = concurrency
		self._clock = clock
		self._lock = asyncio.Lock()
		self._last_completed: Optional[date] = None

	@property
	def tz(self) -> tzinfo:
		return self._tz

	@property
	def last_completed(self) -> Optional[date]:
		return self._last_completed

	async def run_once(self, *, now: Optional[datetime] = None) -> RunSummary:
		"""Run the rollover for the local day containing ``now``.

		Runs never overlap: the nightly trigger and a manual trigger queue on
		the same lock. A day whose run already finished is refused with
		:class:`RolloverAlreadyCompleted`, so streaks advance at most once per
		day. A run aborted by a roster failure does not count as finished.
		"""

		async with self._lock:
			dates = RunDates.at(now or self._clock(), self._tz)
			if self._last_completed is not None and dates.today <= self._last_completed:
				raise RolloverAlreadyCompleted(dates.today.isoformat())
			summary = await self._run(dates)
			self._last_completed = dates.today
			return summary

	async def _run(self, dates: RunDates) -> RunSummary:
		run_id = uuid.uuid4().hex[:12]
		tokens = bind_context(run_id=run_id, job=JOB_NAME)
		started = perf_counter()
		try:
			try:
				members = await self._roster.list_all_members()
			except StoreError:
				_LOG.exception("roster unavailable, rollover aborted", extra={"day": dates.today.isoformat()})
				obs_metrics.record_job_run(JOB_NAME, result="error", duration_seconds=perf_counter() - started)
				raise

			reports = await self._process_all(members, dates)
			summary = RunSummary(
				run_id=run_id,
				dates=dates,
				members=list(reports),
				duration_seconds=perf_counter() - started,
			)
			counts = summary.counts()
			_LOG.info(
				"rollover finished for %s: %s members, %s with failures",
				counts["day"],
				counts["members_total"],
				counts["members_failed"],
				extra={"summary": counts},
			)
			obs_metrics.set_rollover_members(len(reports))
			obs_metrics.record_job_run(
				JOB_NAME,
				result="success" if counts["members_failed"] == 0 else "partial",
				duration_seconds=summary.duration_seconds,
			)
			return summary
		finally:
			reset_context(tokens)

	async def _process_all(self, members: Sequence[Member], dates: RunDates) -> list[MemberReport]:
		semaphore = asyncio.Semaphore(self._concurrency)

		async def _guarded(member: Member) -> MemberReport:
			async with semaphore:
				return await self.process_member(member, dates)

		return list(await asyncio.gather(*(_guarded(member) for member in members)))

	async def process_member(self, member: Member, dates: RunDates) -> MemberReport:
		report = MemberReport(member_id=member.id)
		tokens = bind_context(member_id=member.id)
		try:
			report.seed = await self._step(report, MemberStep.SEED, lambda: self._seeder.seed(member.id, dates.today))
			report.refresh = await self._step(report, MemberStep.REFRESH, lambda: self._refresher.refresh(member))
			report.streak = await self._step(report, MemberStep.STREAK, lambda: self._streaks.advance(member.id, dates))
		finally:
			reset_context(tokens)
		return report

	async def _step(
		self,
		report: MemberReport,
		step: MemberStep,
		call: Callable[[], Awaitable[T]],
	) -> Optional[T]:
		try:
			result = await call()
		except Exception as exc:
			kind = error_kind(exc)
			detail = exc.detail if isinstance(exc, RollcallError) else repr(exc)
			_LOG.warning(
				"%s step failed: %s",
				step.value,
				detail,
				exc_info=not isinstance(exc, RollcallError),
				extra={"step": step.value, "error_kind": kind},
			)
			report.failures.append(StepFailure(member_id=report.member_id, step=step, error_kind=kind, detail=detail))
			obs_metrics.inc_member_step(step.value, "error")
			return None
		obs_metrics.inc_member_step(step.value, "ok")
		return result


__all__ = [
	"JOB_NAME",
	"MemberReport",
	"MemberStep",
	"NightlyRolloverJob",
	"RunSummary",
	"StepFailure",
]
