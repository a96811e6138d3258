"""Error taxonomy shared by the attendance and leaderboard domains."""

from __future__ import annotations


class RollcallError(Exception):
	"""Base class for rollover errors."""

	kind: str = "rollcall_error"

	def __init__(self, detail: str | None = None) -> None:
		super().__init__(detail or self.kind)
		self.detail = detail or self.kind


class StoreError(RollcallError):
	"""Persistence unreachable, or a constraint violation other than the expected conflict."""

	kind = "store_error"

	def __init__(self, detail: str | None = None, *, operation: str | None = None) -> None:
		super().__init__(detail)
		self.operation = operation


class ExternalLookupError(RollcallError):
	"""Network, timeout or unexpected payload from a leaderboard platform."""

	kind = "external_lookup_error"

	def __init__(self, detail: str | None = None, *, platform: str | None = None, handle: str | None = None) -> None:
		super().__init__(detail)
		self.platform = platform
		self.handle = handle


class RolloverAlreadyCompleted(RollcallError):
	"""The rollover for this local day already finished in this process."""

	kind = "already_completed"

	def __init__(self, day: str) -> None:
		super().__init__(f"rollover for {day} already completed")
		self.day = day


class AnomalyWarning(RollcallError):
	"""Logical inconsistency in stored data. Logged, never fatal."""

	kind = "anomaly"

	def __init__(self, reason: str, detail: str | None = None) -> None:
		super().__init__(detail or reason)
		self.reason = reason


def error_kind(exc: BaseException) -> str:
	"""Return the short label used in logs and run summaries."""

	if isinstance(exc, RollcallError):
		return exc.kind
	return "unexpected_error"


__all__ = [
	"AnomalyWarning",
	"ExternalLookupError",
	"RollcallError",
	"RolloverAlreadyCompleted",
	"StoreError",
	"error_kind",
]
