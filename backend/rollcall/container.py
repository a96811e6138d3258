"""Builds the rollover job from a pool, an HTTP client and settings."""

from __future__ import annotations

import asyncpg
import httpx

from rollcall.domain.attendance.jobs import NightlyRolloverJob
from rollcall.domain.attendance.seeder import AttendanceSeeder
from rollcall.domain.attendance.streaks import StreakEngine
from rollcall.domain.leaderboards.clients import CodeforcesClient, LeaderboardClient, LeetCodeClient
from rollcall.domain.leaderboards.models import Platform
from rollcall.domain.leaderboards.refresher import LeaderboardRefresher
from rollcall.infra.attendance_repo import (
	PostgresAttendanceRepository,
	PostgresRosterRepository,
	PostgresStreakRepository,
)
from rollcall.infra.leaderboard_repo import PostgresCodeforcesStatsRepository, PostgresLeetCodeStatsRepository
from rollcall.settings import Settings, settings


def build_clients(http: httpx.AsyncClient, config: Settings = settings) -> dict[Platform, LeaderboardClient]:
	timeout = config.leaderboard_lookup_timeout_seconds
	return {
		Platform.CODEFORCES: CodeforcesClient(http=http, base_url=config.codeforces_api_base, request_timeout=timeout),
		Platform.LEETCODE: LeetCodeClient(http=http, base_url=config.leetcode_api_base, request_timeout=timeout),
	}


def build_rollover_job(
	pool: asyncpg.Pool,
	http: httpx.AsyncClient,
	config: Settings = settings,
) -> NightlyRolloverJob:
	roster = PostgresRosterRepository(pool)
	attendance = PostgresAttendanceRepository(pool)
	refresher = LeaderboardRefresher(
		clients=build_clients(http, config),
		ratings=roster,
		codeforces_stats=PostgresCodeforcesStatsRepository(pool),
		leetcode_stats=PostgresLeetCodeStatsRepository(pool),
		lookup_timeout=config.leaderboard_lookup_timeout_seconds,
	)
	return NightlyRolloverJob(
		roster=roster,
		seeder=AttendanceSeeder(attendance),
		refresher=refresher,
		streaks=StreakEngine(attendance, PostgresStreakRepository(pool)),
		tz=config.tz,
		concurrency=config.rollover_concurrency,
	)


__all__ = ["build_clients", "build_rollover_job"]
