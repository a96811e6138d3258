"""APScheduler wrapper that fires the rollover job at local midnight."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone, tzinfo
from typing import Callable, Optional, Protocol

from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from rollcall.domain.attendance.clock import seconds_until_next_midnight
from rollcall.domain.common.exceptions import RolloverAlreadyCompleted
from rollcall.obs import metrics as obs_metrics

_LOG = logging.getLogger(__name__)

# A host that was asleep through midnight still gets that night's run.
_MISFIRE_GRACE_SECONDS = 6 * 60 * 60


class RunnableJob(Protocol):
	async def run_once(self, *, now: Optional[datetime] = None) -> object:
		...


def _utcnow() -> datetime:
	return datetime.now(timezone.utc)


class MidnightScheduler:
	"""Runs ``job`` once per local day at 00:00 in ``tz``.

	Overlapping fires are dropped (``max_instances=1``) and a backlog of
	missed fires collapses into one run (``coalesce=True``).
	"""

	def __init__(
		self,
		job: RunnableJob,
		tz: tzinfo,
		*,
		name: str = "attendance-rollover",
		scheduler: Optional[AsyncIOScheduler] = None,
		clock: Callable[[], datetime] = _utcnow,
	) -> None:
		self.job = job
		self.tz = tz
		self.name = name
		self._scheduler = scheduler or AsyncIOScheduler(timezone=tz)
		self._clock = clock
		self._started = False
		self.runs = 0

	def schedule(self) -> Job:
		trigger = CronTrigger(hour=0, minute=0, second=0, timezone=self.tz)
		return self._scheduler.add_job(
			self.run_job,
			trigger=trigger,
			id=self.name,
			name=self.name,
			replace_existing=True,
			max_instances=1,
			coalesce=True,
			misfire_grace_time=_MISFIRE_GRACE_SECONDS,
		)

	def start(self) -> None:
		if not self._started:
			self.schedule()
			self._scheduler.start()
			self._started = True
			self._publish_wait()
			_LOG.info("scheduler started", extra={"job": self.name})

	def shutdown(self) -> None:
		if self._started:
			self._scheduler.shutdown(wait=False)
			self._started = False
			_LOG.info("scheduler stopped", extra={"job": self.name})

	async def run_job(self) -> None:
		"""Run the job once; a failure is logged and the next midnight still fires."""
		self.runs += 1
		try:
			await self.job.run_once()
		except asyncio.CancelledError:
			raise
		except RolloverAlreadyCompleted as exc:
			_LOG.info("%s, skipping", exc.detail, extra={"job": self.name})
		except Exception:
			_LOG.exception("scheduled run failed, waiting for next midnight", extra={"job": self.name})
			obs_metrics.record_job_run(f"{self.name}-scheduler", result="error")
		finally:
			self._publish_wait()

	def _publish_wait(self) -> None:
		obs_metrics.set_scheduler_wait(seconds_until_next_midnight(self._clock(), self.tz))


__all__ = ["MidnightScheduler", "RunnableJob"]
