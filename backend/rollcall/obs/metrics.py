"""Central registry for Prometheus metrics used by the rollover service."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, Summary


POSTGRES_UP = Gauge("rollcall_postgres_up", "Postgres availability (1=up,0=down)")
POSTGRES_LATENCY = Summary("rollcall_postgres_latency_seconds", "Postgres ping latency (seconds)")

BACKGROUND_RUNS = Counter(
	"rollcall_jobs_runs_total",
	"Background job executions",
	["name", "result"],
)

BACKGROUND_DURATION = Histogram(
	"rollcall_jobs_duration_seconds",
	"Background job duration",
	["name"],
	buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 15.0, 30.0, 60.0, 120.0, 300.0),
)

ROLLOVER_MEMBER_STEPS = Counter(
	"rollcall_rollover_member_steps_total",
	"Per-member rollover step outcomes",
	["step", "result"],
)

ROLLOVER_MEMBERS = Gauge(
	"rollcall_rollover_members",
	"Members processed by the most recent rollover run",
)

STREAK_TRANSITIONS = Counter(
	"rollcall_streak_transitions_total",
	"Streak state machine transitions",
	["outcome"],
)

STREAK_ANOMALIES = Counter(
	"rollcall_streak_anomalies_total",
	"Logical inconsistencies seen while advancing streaks",
	["kind"],
)

LEADERBOARD_LOOKUPS = Counter(
	"rollcall_leaderboard_lookups_total",
	"External leaderboard lookups",
	["platform", "kind", "result"],
)

SCHEDULER_WAIT = Gauge(
	"rollcall_scheduler_wait_seconds",
	"Seconds the scheduler is waiting before the next rollover",
)


def mark_postgres(ok: bool, *, latency_seconds: float | None = None) -> None:
	POSTGRES_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		POSTGRES_LATENCY.observe(latency_seconds)


def record_job_run(name: str, *, result: str, duration_seconds: float | None = None) -> None:
	BACKGROUND_RUNS.labels(name=name, result=result).inc()
	if duration_seconds is not None:
		BACKGROUND_DURATION.labels(name=name).observe(duration_seconds)


def inc_member_step(step: str, result: str) -> None:
	ROLLOVER_MEMBER_STEPS.labels(step=step, result=result).inc()


def inc_streak_transition(outcome: str) -> None:
	STREAK_TRANSITIONS.labels(outcome=outcome).inc()


def inc_streak_anomaly(kind: str) -> None:
	STREAK_ANOMALIES.labels(kind=kind).inc()


def inc_leaderboard_lookup(platform: str, kind: str, result: str) -> None:
	LEADERBOARD_LOOKUPS.labels(platform=platform, kind=kind, result=result).inc()


def set_scheduler_wait(seconds: float) -> None:
	SCHEDULER_WAIT.set(seconds)


def set_rollover_members(count: int) -> None:
	ROLLOVER_MEMBERS.set(count)
