from __future__ import annotations

from datetime import date, datetime, timezone
from uuid import uuid4

import asyncpg
import pytest

from ndrop.domain import models
from ndrop.domain import profile_service as profile_module
from ndrop.domain.exceptions import NotFoundError, ValidationError
from ndrop.domain.notifications_service import NotificationService
from ndrop.domain.profile_service import ProfileService, card_fields, clean_updates


class _FakeTransaction:
	def __init__(self, conn):
		self._conn = conn

	async def __aenter__(self):
		self._conn.depth += 1
		return None

	async def __aexit__(self, exc_type, exc, tb):
		self._conn.depth -= 1
		return False


class _FakeAcquire:
	def __init__(self, conn):
		self._conn = conn

	async def __aenter__(self):
		return self._conn

	async def __aexit__(self, exc_type, exc, tb):
		return False


class _FakeConnection:
	def __init__(self) -> None:
		self.depth = 0

	def transaction(self):
		return _FakeTransaction(self)


class _FakePool:
	def __init__(self, conn):
		self._conn = conn

	def acquire(self):
		return _FakeAcquire(self._conn)


class _FakeRepo:
	def __init__(self, conn: _FakeConnection) -> None:
		self.conn = conn
		self.profiles: dict[str, models.UserProfile] = {}
		self.cards: dict[str, models.BusinessCard] = {}
		self.card_writes: list[dict] = []
		self.fail_card_sync = False
		self.fail_notifications = False
		self.notifications: list[dict] = []

	def add_user(self, user_id: str) -> None:
		self.profiles[user_id] = models.UserProfile(id=user_id, full_name="Mina", company="Old Co")
		self.cards[user_id] = models.BusinessCard(id=uuid4(), user_id=user_id, full_name="Mina", company="Old Co")

	async def update_profile(self, user_id, fields, *, conn=None):
		assert conn is self.conn and self.conn.depth == 1
		profile = self.profiles.get(user_id)
		if profile is None:
			return None
		updated = profile.model_copy(update=dict(fields))
		self.profiles[user_id] = updated
		return updated

	async def update_card_for_user(self, user_id, fields, *, conn=None):
		assert conn is self.conn and self.conn.depth == 2
		if self.fail_card_sync:
			raise asyncpg.PostgresError("card update failed")
		self.card_writes.append(dict(fields))
		card = self.cards.get(user_id)
		if card is None:
			return None
		updated = card.model_copy(update=dict(fields))
		self.cards[user_id] = updated
		return updated

	async def insert_notifications(self, **kwargs):
		if self.fail_notifications:
			raise asyncpg.PostgresError("insert failed")
		self.notifications.append(kwargs)
		return [
			models.Notification(
				id=uuid4(),
				title=kwargs["title"],
				message=kwargs["message"],
				target_type=kwargs["target_type"],
				notification_type=kwargs["notification_type"],
				user_id=kwargs["user_ids"][0],
				created_at=datetime.now(timezone.utc),
			)
		]


@pytest.fixture
def conn():
	return _FakeConnection()


@pytest.fixture(autouse=True)
def fake_pool(monkeypatch, conn):
	pool = _FakePool(conn)

	async def _get_pool():
		return pool

	monkeypatch.setattr(profile_module, "get_pool", _get_pool)
	return pool


def _service(repo: _FakeRepo) -> ProfileService:
	return ProfileService(repo, NotificationService(repo))


@pytest.mark.asyncio
async def test_update_writes_profile_syncs_card_and_notifies(conn) -> None:
	repo = _FakeRepo(conn)
	user_id = str(uuid4())
	repo.add_user(user_id)

	result = await _service(repo).update(
		user_id,
		{"company": "Ndrop", "job_title": "PM", "mbti": "ENFP", "role_id": 2, "role": "admin"},
	)

	assert result.profile.company == "Ndrop"
	assert result.profile.role_id == 1
	assert result.updated_fields == ["company", "job_title", "mbti"]
	assert repo.card_writes == [{"company": "Ndrop", "role": "PM"}]
	assert result.card is not None and result.card.company == "Ndrop"
	[sent] = repo.notifications
	assert sent["notification_type"] == "profile_updated"
	assert sent["user_ids"] == [user_id]
	assert sent["metadata"]["updated_fields"] == ["company", "job_title", "mbti"]


@pytest.mark.asyncio
async def test_card_sync_failure_keeps_profile_update(conn) -> None:
	repo = _FakeRepo(conn)
	repo.fail_card_sync = True
	user_id = str(uuid4())
	repo.add_user(user_id)

	result = await _service(repo).update(user_id, {"full_name": "Mina Park"})

	assert result.profile.full_name == "Mina Park"
	assert result.card is None
	assert len(repo.notifications) == 1


@pytest.mark.asyncio
async def test_notification_failure_does_not_fail_update(conn) -> None:
	repo = _FakeRepo(conn)
	repo.fail_notifications = True
	user_id = str(uuid4())
	repo.add_user(user_id)

	result = await _service(repo).update(user_id, {"introduction": "Hello"})

	assert result.profile.introduction == "Hello"


@pytest.mark.asyncio
async def test_unknown_profile_is_not_found(conn) -> None:
	with pytest.raises(NotFoundError) as excinfo:
		await _service(_FakeRepo(conn)).update(str(uuid4()), {"company": "Ndrop"})

	assert excinfo.value.detail == "profile_not_found"


@pytest.mark.asyncio
async def test_nothing_editable_is_rejected(conn) -> None:
	with pytest.raises(ValidationError) as excinfo:
		await _service(_FakeRepo(conn)).update(str(uuid4()), {"role_id": 2})

	assert excinfo.value.detail == "missing_fields"


def test_invalid_birth_date_is_dropped() -> None:
	cleaned = clean_updates({"birth_date": "123123123", "nickname": "mina"})

	assert cleaned == {"nickname": "mina"}
	assert clean_updates({"birth_date": "1990-04-02"})["birth_date"] == date(1990, 4, 2)
	assert clean_updates({"birth_date": ""})["birth_date"] is None


def test_bad_affiliation_type_is_rejected() -> None:
	with pytest.raises(ValidationError):
		clean_updates({"affiliation_type": "freelance"})


def test_only_non_empty_shared_fields_reach_the_card() -> None:
	assert card_fields({"company": "", "email": "m@ndrop.kr", "mbti": "INTJ"}) == {"email": "m@ndrop.kr"}
