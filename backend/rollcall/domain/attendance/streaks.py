"""Monthly attendance streak state machine.

A member has either no row for the current month or an active streak ``n``.
On the first day of a month the row is created at 0 (a row created
concurrently is left alone) and nothing else happens on that run. On any
other day the streak goes up by one when yesterday's attendance row is
marked present; absence leaves the counter where it is, so only the month
boundary ever resets it. A present member with no row for the month is
reported and left alone.
"""

from __future__ import annotations

import logging

from rollcall.domain.attendance.models import RunDates, StreakOutcome, StreakResult
from rollcall.domain.attendance.repository import AttendanceRepository, StreakRepository
from rollcall.domain.common.exceptions import AnomalyWarning
from rollcall.obs import metrics as obs_metrics

_LOG = logging.getLogger(__name__)

ANOMALY_MISSING_ROW = "missing_streak_row"
ANOMALY_PRESENCE_COUNT = "unexpected_presence_count"


class StreakEngine:
	"""Advances one member's streak for one run."""

	def __init__(self, attendance: AttendanceRepository, streaks: StreakRepository) -> None:
		self._attendance = attendance
		self._streaks = streaks

	async def advance(self, member_id: int, dates: RunDates) -> StreakResult:
		if dates.is_month_start:
			result = await self._reset(member_id, dates)
		else:
			try:
				result = await self._apply_presence(member_id, dates)
			except AnomalyWarning as anomaly:
				_LOG.warning(
					"streak left untouched: %s",
					anomaly.detail,
					extra={"anomaly": anomaly.reason, "yesterday": dates.yesterday.isoformat()},
				)
				obs_metrics.inc_streak_anomaly(anomaly.reason)
				result = StreakResult(outcome=StreakOutcome.ANOMALY, anomaly=anomaly.reason)
		obs_metrics.inc_streak_transition(result.outcome.value)
		return result

	async def _reset(self, member_id: int, dates: RunDates) -> StreakResult:
		created = await self._streaks.insert_streak_if_absent(member_id, dates.month_start, 0)
		if created:
			_LOG.info("streak row created for new month", extra={"month": dates.month_start.isoformat()})
			return StreakResult(outcome=StreakOutcome.RESET, streak=0)
		return StreakResult(outcome=StreakOutcome.RESET_KEPT)

	async def _apply_presence(self, member_id: int, dates: RunDates) -> StreakResult:
		present = await self._attendance.count_present(member_id, dates.yesterday)
		if present == 0:
			return StreakResult(outcome=StreakOutcome.UNCHANGED)
		if present != 1:
			raise AnomalyWarning(
				ANOMALY_PRESENCE_COUNT,
				f"expected 0 or 1 present rows for {dates.yesterday.isoformat()}, got {present}",
			)

		updated = await self._streaks.increment_streak(member_id, dates.month_start)
		if updated is None:
			# The month began without a first-day run for this member.
			raise AnomalyWarning(
				ANOMALY_MISSING_ROW,
				f"no streak row for month {dates.month_start.isoformat()}",
			)
		return StreakResult(outcome=StreakOutcome.INCREMENTED, streak=updated)


__all__ = ["StreakEngine", "ANOMALY_MISSING_ROW", "ANOMALY_PRESENCE_COUNT"]
