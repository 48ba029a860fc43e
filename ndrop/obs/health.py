"""Liveness and readiness probes.

Readiness needs Postgres, redis (admin login throttling) and a schema at or
above ``HEALTH_MIN_MIGRATION``. The configured event timezone is checked too,
since every event date is composed in it.
"""

from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Any, Dict, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ndrop.infra import postgres
from ndrop.infra.redis import redis_client
from ndrop.obs import metrics
from ndrop.settings import settings

LOGGER = logging.getLogger(__name__)

_REDIS_TIMEOUT = 0.2
_POSTGRES_TIMEOUT = 0.5


def _elapsed_ms(start: float) -> float:
	return round((perf_counter() - start) * 1000, 2)


async def _check_redis() -> Dict[str, Any]:
	start = perf_counter()
	try:
		await asyncio.wait_for(redis_client.ping(), timeout=_REDIS_TIMEOUT)
	except Exception as exc:  # pragma: no cover - depends on runtime
		metrics.mark_redis(False)
		LOGGER.warning("redis readiness check failed", exc_info=True)
		return {"ok": False, "error": type(exc).__name__}
	metrics.mark_redis(True, latency_seconds=perf_counter() - start)
	return {"ok": True, "latency_ms": _elapsed_ms(start)}


async def _check_postgres() -> Tuple[Dict[str, Any], Dict[str, Any]]:
	"""Round-trip the pool and read the newest applied migration in one acquire."""
	start = perf_counter()
	try:
		pool = await postgres.get_pool()
		async with pool.acquire() as conn:
			await asyncio.wait_for(conn.execute("SELECT 1"), timeout=_POSTGRES_TIMEOUT)
			latency = perf_counter() - start
			version = await conn.fetchval(
				"SELECT version FROM schema_migrations ORDER BY version DESC LIMIT 1"
			)
	except Exception as exc:  # pragma: no cover - depends on runtime
		metrics.mark_postgres(False)
		LOGGER.warning("postgres readiness check failed", exc_info=True)
		failure = {"ok": False, "error": type(exc).__name__}
		return failure, {"ok": False, "error": "unavailable"}
	metrics.mark_postgres(True, latency_seconds=latency)
	required = settings.health_min_migration
	if version is None:
		schema = {"ok": False, "error": "no_migrations", "required": required}
	else:
		schema = {"ok": str(version) >= required, "version": str(version), "required": required}
	return {"ok": True, "latency_ms": round(latency * 1000, 2)}, schema


def _check_timezone() -> Dict[str, Any]:
	try:
		ZoneInfo(settings.event_timezone)
	except (ZoneInfoNotFoundError, ValueError):
		return {"ok": False, "error": "unknown_timezone", "timezone": settings.event_timezone}
	return {"ok": True, "timezone": settings.event_timezone}


async def liveness() -> Dict[str, Any]:
	return {"status": "ok"}


async def readiness() -> Tuple[int, Dict[str, Any]]:
	redis_state, (postgres_state, migration_state) = await asyncio.gather(_check_redis(), _check_postgres())
	checks = {
		"redis": redis_state,
		"postgres": postgres_state,
		"migrations": migration_state,
		"timezone": _check_timezone(),
	}
	ok = all(check.get("ok") for check in checks.values())
	return (200 if ok else 503), {"status": "ok" if ok else "degraded", "checks": checks}
