"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram


REQUEST_COUNTER = Counter(
	"ndrop_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"ndrop_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

EVENT_JOINS = Counter(
	"ndrop_event_joins_total",
	"Event join attempts by outcome",
	["result"],
)

PARTICIPANTS_REMOVED = Counter(
	"ndrop_participants_removed_total",
	"Participations soft-removed by admins",
)

PARTICIPANT_COUNTER_DRIFT = Counter(
	"ndrop_participant_counter_drift_total",
	"Reconciliations that found current_participants out of sync",
)

NOTIFICATIONS_CREATED = Counter(
	"ndrop_notifications_created_total",
	"Notification rows persisted",
	["kind"],
)

NOTIFICATION_FAILURES = Counter(
	"ndrop_notification_failures_total",
	"Best-effort notifications that failed to persist",
	["kind"],
)

CARDS_COLLECTED = Counter(
	"ndrop_cards_collected_total",
	"Business cards saved to a card book",
)

CONNECTION_QUERIES = Counter(
	"ndrop_connection_queries_total",
	"Connection-count aggregations served",
)

ADMIN_LOGINS = Counter(
	"ndrop_admin_logins_total",
	"Admin login attempts by outcome",
	["result"],
)

PROFILES_PROVISIONED = Counter(
	"ndrop_profiles_provisioned_total",
	"Profile provisioning outcomes",
	["result"],
)

REDIS_UP = Gauge("ndrop_redis_up", "Redis readiness (1 up, 0 down)")
POSTGRES_UP = Gauge("ndrop_postgres_up", "Postgres readiness (1 up, 0 down)")
DEPENDENCY_LATENCY = Histogram(
	"ndrop_dependency_latency_seconds",
	"Readiness probe latency per dependency",
	["dependency"],
	buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5),
)


def observe_request(route: str, method: str, status: int, latency_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(latency_seconds)


def mark_redis(ok: bool, *, latency_seconds: float | None = None) -> None:
	REDIS_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		DEPENDENCY_LATENCY.labels(dependency="redis").observe(latency_seconds)


def mark_postgres(ok: bool, *, latency_seconds: float | None = None) -> None:
	POSTGRES_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		DEPENDENCY_LATENCY.labels(dependency="postgres").observe(latency_seconds)


def inc_event_join(result: str) -> None:
	EVENT_JOINS.labels(result=result).inc()


def inc_participant_removed() -> None:
	PARTICIPANTS_REMOVED.inc()


def inc_counter_drift() -> None:
	PARTICIPANT_COUNTER_DRIFT.inc()


def inc_notifications(kind: str, count: int = 1) -> None:
	if count > 0:
		NOTIFICATIONS_CREATED.labels(kind=kind).inc(count)


def inc_notification_failure(kind: str) -> None:
	NOTIFICATION_FAILURES.labels(kind=kind).inc()


def inc_card_collected() -> None:
	CARDS_COLLECTED.inc()


def inc_connection_query() -> None:
	CONNECTION_QUERIES.inc()


def inc_admin_login(result: str) -> None:
	ADMIN_LOGINS.labels(result=result).inc()


def inc_profile_provisioned(result: str) -> None:
	PROFILES_PROVISIONED.labels(result=result).inc()
