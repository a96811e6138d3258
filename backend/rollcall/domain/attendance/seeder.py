"""Seeds the default absent attendance row for each member each day."""

from __future__ import annotations

import logging
from datetime import date

from rollcall.domain.attendance.models import SeedOutcome
from rollcall.domain.attendance.repository import AttendanceRepository

_LOG = logging.getLogger(__name__)


class AttendanceSeeder:
	"""Idempotent insert of (member, day) with presence=false."""

	def __init__(self, repository: AttendanceRepository) -> None:
		self._repo = repository

	async def seed(self, member_id: int, day: date) -> SeedOutcome:
		created = await self._repo.insert_if_absent(member_id, day)
		if created:
			_LOG.debug("attendance row seeded", extra={"day": day.isoformat()})
			return SeedOutcome.CREATED
		return SeedOutcome.EXISTING


__all__ = ["AttendanceSeeder"]
