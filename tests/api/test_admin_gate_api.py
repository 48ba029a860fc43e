from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
import pytest
from httpx import AsyncClient

from ndrop.api import admin_events
from ndrop.domain import models
from ndrop.infra import jwt as jwt_helper
from ndrop.settings import settings


def _admin_headers(role_id: int = 2) -> dict[str, str]:
	token = jwt_helper.encode_admin(admin_id=str(uuid4()), username="host", role="admin", role_id=role_id)
	return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def stub_events(monkeypatch):
	now = datetime.now(timezone.utc)
	event = models.Event(
		id=uuid4(),
		title="Demo Night",
		start_date=now,
		end_date=now + timedelta(hours=2),
		event_code="DEMO01",
		created_at=now,
		updated_at=now,
	)

	async def _list_events():
		return [event]

	monkeypatch.setattr(admin_events._events, "list_events", _list_events)
	return event


@pytest.mark.asyncio
async def test_missing_token_is_401(api_client: AsyncClient, stub_events) -> None:
	response = await api_client.get("/api/admin/get-events")

	assert response.status_code == 401
	body = response.json()
	assert body["error"] == "token_required"
	assert body["request_id"]


@pytest.mark.asyncio
async def test_token_with_wrong_secret_is_401(api_client: AsyncClient, stub_events) -> None:
	now = int(time.time())
	forged = jwt.encode({"adminId": "x", "role_id": 2, "iat": now, "exp": now + 60}, "wrong", algorithm="HS256")

	response = await api_client.get("/api/admin/get-events", headers={"Authorization": f"Bearer {forged}"})

	assert response.status_code == 401
	assert response.json()["error"] == "invalid_token"


@pytest.mark.asyncio
async def test_non_admin_role_is_403(api_client: AsyncClient, stub_events) -> None:
	response = await api_client.get("/api/admin/get-events", headers=_admin_headers(role_id=1))

	assert response.status_code == 403
	assert response.json()["error"] == "admin_required"


@pytest.mark.asyncio
async def test_admin_lists_events(api_client: AsyncClient, stub_events) -> None:
	response = await api_client.get(
		"/api/admin/get-events",
		headers={**_admin_headers(), "X-Request-Id": "req-123"},
	)

	assert response.status_code == 200
	assert response.headers["X-Request-Id"] == "req-123"
	body = response.json()
	assert body["success"] is True
	assert body["events"][0]["event_code"] == "DEMO01"


@pytest.mark.asyncio
async def test_recount_reports_drift(api_client: AsyncClient, monkeypatch) -> None:
	from ndrop.domain.participation_service import RecountResult

	event_id = str(uuid4())

	async def _reconcile(eid):
		return RecountResult(event_id=eid, previous=5, current=3)

	monkeypatch.setattr(admin_events._participation, "reconcile", _reconcile)

	response = await api_client.post(f"/api/admin/events/{event_id}/recount-participants", headers=_admin_headers())

	assert response.status_code == 200
	assert response.json() == {"success": True, "eventId": event_id, "previous": 5, "current": 3, "drifted": True}


_ADMIN_ROUTES = [
	("POST", "/api/admin/create-event"),
	("PUT", f"/api/admin/update-event/{uuid4()}"),
	("DELETE", f"/api/admin/delete-event/{uuid4()}"),
	("GET", "/api/admin/get-events"),
	("POST", "/api/admin/get-participants"),
	("POST", "/api/admin/remove-participant"),
	("POST", f"/api/admin/events/{uuid4()}/recount-participants"),
	("POST", "/api/admin/send-notice"),
	("POST", "/api/admin/send-notification"),
	("POST", "/api/admin/event-connections"),
	("POST", "/api/admin/event-collection-timeline"),
	("POST", "/api/admin/event-report"),
]

_MISSING = object()


def _signed_admin_token(role_id) -> str:
	now = int(time.time())
	claims = {"adminId": str(uuid4()), "username": "host", "role": "admin", "iat": now, "exp": now + 600}
	if role_id is not _MISSING:
		claims["role_id"] = role_id
	return jwt.encode(claims, settings.jwt_secret, algorithm="HS256")


@pytest.mark.asyncio
@pytest.mark.parametrize("role_id", [_MISSING, "2", 2.7, True, None], ids=["missing", "string", "float", "bool", "null"])
@pytest.mark.parametrize("method,path", _ADMIN_ROUTES)
async def test_admin_routes_require_integer_admin_role(api_client: AsyncClient, method, path, role_id) -> None:
	headers = {"Authorization": f"Bearer {_signed_admin_token(role_id)}"}

	if method == "GET":
		response = await api_client.get(path, headers=headers)
	elif method == "DELETE":
		response = await api_client.delete(path, headers=headers)
	else:
		response = await api_client.request(method, path, headers=headers, json={"eventId": str(uuid4())})

	assert response.status_code == 403
	assert response.json()["error"] == "admin_required"
