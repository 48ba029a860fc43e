from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from ndrop.domain import models
from ndrop.domain.cards_service import CardBookService
from ndrop.domain.exceptions import NotFoundError, ValidationError


class _RecordingNotifications:
	def __init__(self) -> None:
		self.sent: list[tuple] = []

	async def notify_best_effort(self, user_id, title, message, notification_type, **kwargs):
		self.sent.append((user_id, notification_type, kwargs.get("metadata")))
		return None


class _FakeRepo:
	def __init__(self) -> None:
		self.cards: dict[str, models.BusinessCard] = {}
		self.edges: dict[str, models.CollectedCard] = {}

	def add_card(self, owner_id: str, *, is_public: bool = True) -> models.BusinessCard:
		card = models.BusinessCard(id=uuid4(), user_id=owner_id, full_name="Mina Park", is_public=is_public)
		self.cards[str(card.id)] = card
		return card

	async def get_card(self, card_id, *, conn=None):
		return self.cards.get(str(card_id))

	async def insert_collected_card(self, collector_id, card_id, *, conn=None):
		for edge in self.edges.values():
			if str(edge.collector_id) == collector_id and str(edge.card_id) == card_id:
				return None
		edge = models.CollectedCard(
			id=uuid4(),
			collector_id=collector_id,
			card_id=card_id,
			collected_at=datetime.now(timezone.utc),
		)
		self.edges[str(edge.id)] = edge
		return edge

	async def set_collected_favorite(self, edge_id, collector_id, is_favorite, *, conn=None):
		edge = self.edges.get(edge_id)
		if edge is None or str(edge.collector_id) != collector_id:
			return False
		self.edges[edge_id] = edge.model_copy(update={"is_favorite": is_favorite})
		return True

	async def delete_collected_card(self, edge_id, collector_id, *, conn=None):
		edge = self.edges.get(edge_id)
		if edge is None or str(edge.collector_id) != collector_id:
			return False
		del self.edges[edge_id]
		return True

	async def delete_self_collected(self, user_id, *, conn=None):
		own = [
			key
			for key, edge in self.edges.items()
			if str(edge.collector_id) == user_id and str(self.cards[str(edge.card_id)].user_id) == user_id
		]
		for key in own:
			del self.edges[key]
		return len(own)


@pytest.fixture
def service_parts():
	repo = _FakeRepo()
	notifications = _RecordingNotifications()
	return repo, notifications, CardBookService(repo, notifications)


@pytest.mark.asyncio
async def test_collect_creates_edge_and_notifies(service_parts) -> None:
	repo, notifications, service = service_parts
	owner, collector = str(uuid4()), str(uuid4())
	card = repo.add_card(owner)

	edge = await service.collect(collector, str(card.id))

	assert edge.card is not None and edge.card.id == card.id
	assert notifications.sent == [
		(collector, "business_card_collected", {"card_id": str(card.id), "card_owner_id": owner}),
	]


@pytest.mark.asyncio
async def test_collect_rejections(service_parts) -> None:
	repo, _, service = service_parts
	owner = str(uuid4())
	card = repo.add_card(owner)

	with pytest.raises(ValidationError) as own:
		await service.collect(owner, str(card.id))
	assert own.value.detail == "cannot_collect_own_card"

	collector = str(uuid4())
	await service.collect(collector, str(card.id))
	with pytest.raises(ValidationError) as dup:
		await service.collect(collector, str(card.id))
	assert dup.value.detail == "already_collected"

	with pytest.raises(NotFoundError):
		await service.collect(collector, str(uuid4()))
	with pytest.raises(ValidationError):
		await service.collect(collector, None)


@pytest.mark.asyncio
async def test_favorite_and_delete_require_ownership(service_parts) -> None:
	repo, _, service = service_parts
	collector, stranger = str(uuid4()), str(uuid4())
	card = repo.add_card(str(uuid4()))
	edge = await service.collect(collector, str(card.id))

	await service.set_favorite(collector, str(edge.id), True)
	assert repo.edges[str(edge.id)].is_favorite is True

	with pytest.raises(NotFoundError):
		await service.set_favorite(stranger, str(edge.id), False)
	with pytest.raises(NotFoundError):
		await service.delete(stranger, str(edge.id))
	with pytest.raises(NotFoundError):
		await service.delete(collector, "garbage")

	await service.delete(collector, str(edge.id))
	assert repo.edges == {}


@pytest.mark.asyncio
async def test_clean_own_cards_removes_self_edges(service_parts) -> None:
	repo, _, service = service_parts
	user_id = str(uuid4())
	own_card = repo.add_card(user_id)
	other_card = repo.add_card(str(uuid4()))
	now = datetime.now(timezone.utc)
	# Legacy rows written before own-card collection was rejected.
	legacy = models.CollectedCard(id=uuid4(), collector_id=user_id, card_id=own_card.id, collected_at=now)
	repo.edges[str(legacy.id)] = legacy
	await service.collect(user_id, str(other_card.id))

	removed = await service.clean_own_cards(user_id)

	assert removed == 1
	assert [str(edge.card_id) for edge in repo.edges.values()] == [str(other_card.id)]


@pytest.mark.asyncio
async def test_private_card_is_not_public(service_parts) -> None:
	repo, _, service = service_parts
	card = repo.add_card(str(uuid4()), is_public=False)

	with pytest.raises(NotFoundError):
		await service.get_public_card(str(card.id))
