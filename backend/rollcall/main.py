"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from rollcall import obs
from rollcall.api import ops
from rollcall.container import build_rollover_job
from rollcall.infra import postgres
from rollcall.infra.scheduler import MidnightScheduler
from rollcall.infra.schema import ensure_schema
from rollcall.settings import settings

_LOG = logging.getLogger(__name__)

obs.init()


@asynccontextmanager
async def lifespan(app: FastAPI):
	pool = await postgres.create_pool(settings)
	await ensure_schema(pool)
	http = httpx.AsyncClient(timeout=settings.leaderboard_lookup_timeout_seconds)
	job = build_rollover_job(pool, http, settings)
	app.state.pool = pool
	app.state.rollover_job = job

	scheduler: MidnightScheduler | None = None
	if settings.rollover_scheduler_enabled:
		scheduler = MidnightScheduler(job, job.tz)
		scheduler.start()
	else:
		_LOG.info("rollover scheduler disabled")
	app.state.rollover_scheduler = scheduler
	try:
		yield
	finally:
		if scheduler is not None:
			scheduler.shutdown()
		await http.aclose()
		await postgres.close_pool(pool)


app = FastAPI(title="Rollcall Attendance Rollover", lifespan=lifespan)
app.include_router(ops.router)
