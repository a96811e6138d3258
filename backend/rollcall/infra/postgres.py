"""AsyncPG pool management for the rollover service."""

from __future__ import annotations

import asyncpg

from rollcall.settings import Settings, settings


async def create_pool(config: Settings = settings) -> asyncpg.Pool:
	"""Open a pool; callers own it and pass it into each repository."""
	# Force 127.0.0.1 instead of localhost to avoid IPv6 issues on Windows
	dsn = config.postgres_url.replace("localhost", "127.0.0.1")
	return await asyncpg.create_pool(
		dsn=dsn,
		min_size=config.postgres_min_pool_size,
		max_size=config.postgres_max_pool_size,
		ssl="require" if config.postgres_ssl else "disable",
	)


async def close_pool(pool: asyncpg.Pool | None) -> None:
	if pool is not None:
		await pool.close()
