from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from httpx import AsyncClient

from ndrop.api import saved_cards
from ndrop.domain import models
from ndrop.domain.exceptions import NotFoundError, ValidationError

USER_ID = "0d6c1f1e-8f3b-4a8e-9f0b-1d2c3b4a5e6f"
HEADERS = {"X-User-Id": USER_ID, "X-User-Email": "mina@example.com"}


def _edge() -> models.CollectedCard:
	card = models.BusinessCard(id=uuid4(), user_id=uuid4(), full_name="Joon Lee", company="Ndrop")
	return models.CollectedCard(
		id=uuid4(),
		collector_id=USER_ID,
		card_id=card.id,
		collected_at=datetime.now(timezone.utc),
		card=card,
	)


@pytest.mark.asyncio
async def test_list_saved_cards(api_client: AsyncClient, monkeypatch) -> None:
	edge = _edge()

	async def _list_saved(collector_id):
		assert collector_id == USER_ID
		return [edge]

	monkeypatch.setattr(saved_cards._service, "list_saved", _list_saved)

	response = await api_client.get("/api/user/saved-cards", headers=HEADERS)

	assert response.status_code == 200
	body = response.json()
	assert body["user"] == {"id": USER_ID, "email": "mina@example.com"}
	assert body["savedCards"][0]["card"]["full_name"] == "Joon Lee"


@pytest.mark.asyncio
async def test_collecting_own_card_is_400(api_client: AsyncClient, monkeypatch) -> None:
	async def _collect(collector_id, card_id):
		raise ValidationError("cannot_collect_own_card")

	monkeypatch.setattr(saved_cards._service, "collect", _collect)

	response = await api_client.post("/api/user/saved-cards", json={"cardId": str(uuid4())}, headers=HEADERS)

	assert response.status_code == 400
	assert response.json()["error"] == "cannot_collect_own_card"


@pytest.mark.asyncio
async def test_collect_returns_saved_card(api_client: AsyncClient, monkeypatch) -> None:
	edge = _edge()

	async def _collect(collector_id, card_id):
		return edge

	monkeypatch.setattr(saved_cards._service, "collect", _collect)

	response = await api_client.post("/api/user/saved-cards", json={"cardId": str(edge.card_id)}, headers=HEADERS)

	assert response.status_code == 200
	assert response.json()["savedCard"]["id"] == str(edge.id)


@pytest.mark.asyncio
async def test_favorite_and_delete(api_client: AsyncClient, monkeypatch) -> None:
	calls: list[tuple] = []

	async def _set_favorite(collector_id, edge_id, is_favorite):
		calls.append(("favorite", edge_id, is_favorite))

	async def _delete(collector_id, edge_id):
		raise NotFoundError("saved_card_not_found")

	monkeypatch.setattr(saved_cards._service, "set_favorite", _set_favorite)
	monkeypatch.setattr(saved_cards._service, "delete", _delete)
	edge_id = str(uuid4())

	favorite = await api_client.put(f"/api/user/saved-cards/{edge_id}", json={"is_favorite": True}, headers=HEADERS)
	missing = await api_client.delete(f"/api/user/saved-cards/{edge_id}", headers=HEADERS)

	assert favorite.status_code == 200
	assert calls == [("favorite", edge_id, True)]
	assert missing.status_code == 404
	assert missing.json()["error"] == "saved_card_not_found"


@pytest.mark.asyncio
async def test_clean_saved_cards(api_client: AsyncClient, monkeypatch) -> None:
	async def _clean(user_id):
		return 2

	monkeypatch.setattr(saved_cards._service, "clean_own_cards", _clean)

	response = await api_client.post("/api/user/clean-saved-cards", headers=HEADERS)

	assert response.json() == {"success": True, "removed": 2}


@pytest.mark.asyncio
async def test_public_business_card_needs_no_session(api_client: AsyncClient, monkeypatch) -> None:
	card = models.BusinessCard(id=uuid4(), user_id=uuid4(), full_name="Joon Lee")

	async def _get_public_card(card_id):
		return card

	monkeypatch.setattr(saved_cards._service, "get_public_card", _get_public_card)

	response = await api_client.get(f"/api/business-cards/{card.id}")

	assert response.status_code == 200
	assert response.json()["card"]["full_name"] == "Joon Lee"
