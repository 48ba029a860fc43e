from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import asyncpg
import pytest

from ndrop.domain import models
from ndrop.domain import participation_service as participation_module
from ndrop.domain.exceptions import AlreadyJoinedError, InternalError, NotFoundError, ValidationError
from ndrop.domain.participation_service import ParticipationService


class _FakeTransaction:
	async def __aenter__(self):
		return None

	async def __aexit__(self, exc_type, exc, tb):
		return False


class _FakeAcquire:
	def __init__(self, conn):
		self._conn = conn

	async def __aenter__(self):
		return self._conn

	async def __aexit__(self, exc_type, exc, tb):
		return False


class _FakeConnection:
	def transaction(self):
		return _FakeTransaction()


class _FakePool:
	def __init__(self, conn):
		self._conn = conn

	def acquire(self):
		return _FakeAcquire(self._conn)


def _event(*, code: str = "DEMO01", current: int = 0) -> models.Event:
	now = datetime.now(timezone.utc)
	return models.Event(
		id=uuid4(),
		title="Demo Night",
		start_date=now,
		end_date=now + timedelta(hours=3),
		max_participants=50,
		current_participants=current,
		event_code=code,
		created_at=now,
		updated_at=now,
	)


class _FakeRepo:
	def __init__(self, event: models.Event) -> None:
		self.event = event
		self.participants: dict[str, models.Participant] = {}
		self.fail_count_update = False
		self.known_users: set[str] | None = None

	async def get_event(self, event_id, *, conn=None, for_update=False):
		return self.event if str(event_id) == str(self.event.id) else None

	async def get_event_by_code(self, event_code, *, conn=None):
		return self.event if event_code == self.event.event_code else None

	async def insert_participant_if_absent(self, event_id, user_id, *, conn):
		if self.known_users is not None and user_id not in self.known_users:
			raise asyncpg.ForeignKeyViolationError("event_participants_user_id_fkey")
		for row in self.participants.values():
			if str(row.user_id) == user_id and row.status != "removed":
				return None
		row = models.Participant(
			id=uuid4(),
			event_id=event_id,
			user_id=user_id,
			status="confirmed",
			joined_at=datetime.now(timezone.utc),
		)
		self.participants[str(row.id)] = row
		return row

	async def adjust_participant_count(self, event_id, delta, *, conn):
		if self.fail_count_update:
			raise asyncpg.PostgresError("counter update failed")
		current = max(self.event.current_participants + delta, 0)
		self.event = self.event.model_copy(update={"current_participants": current})
		return self.event

	async def get_participant(self, participant_id, *, conn=None, for_update=False):
		return self.participants.get(participant_id)

	async def set_participant_status(self, participant_id, status, *, conn):
		row = self.participants[participant_id].model_copy(update={"status": status})
		self.participants[participant_id] = row
		return row

	async def recount_participants(self, event_id, *, conn):
		if str(event_id) != str(self.event.id):
			return None
		previous = self.event.current_participants
		current = sum(1 for row in self.participants.values() if row.is_live)
		self.event = self.event.model_copy(update={"current_participants": current})
		return previous, current


@pytest.fixture
def fake_pool(monkeypatch):
	pool = _FakePool(_FakeConnection())

	async def _get_pool():
		return pool

	monkeypatch.setattr(participation_module, "get_pool", _get_pool)
	return pool


@pytest.mark.asyncio
async def test_join_by_lowercase_code_increments_counter(fake_pool) -> None:
	repo = _FakeRepo(_event(code="DEMO01", current=25))
	service = ParticipationService(repo)

	result = await service.join(str(uuid4()), event_code="demo01")

	assert result.participant.status == "confirmed"
	assert result.event.current_participants == 26


@pytest.mark.asyncio
async def test_second_join_is_rejected_without_touching_counter(fake_pool) -> None:
	repo = _FakeRepo(_event(current=0))
	service = ParticipationService(repo)
	user_id = str(uuid4())

	await service.join(user_id, event_id=str(repo.event.id))
	with pytest.raises(AlreadyJoinedError) as excinfo:
		await service.join(user_id, event_id=str(repo.event.id))

	assert excinfo.value.status_code == 400
	assert excinfo.value.detail == "already_joined"
	assert repo.event.current_participants == 1
	assert len(repo.participants) == 1


@pytest.mark.asyncio
async def test_join_unknown_event(fake_pool) -> None:
	service = ParticipationService(_FakeRepo(_event()))

	with pytest.raises(NotFoundError):
		await service.join(str(uuid4()), event_code="NOPE00")
	with pytest.raises(NotFoundError):
		await service.join(str(uuid4()), event_id="not-a-uuid")


@pytest.mark.asyncio
async def test_join_without_reference(fake_pool) -> None:
	service = ParticipationService(_FakeRepo(_event()))

	with pytest.raises(ValidationError) as excinfo:
		await service.join(str(uuid4()))

	assert excinfo.value.detail == "missing_fields"


@pytest.mark.asyncio
async def test_join_write_failure_surfaces_as_internal(fake_pool) -> None:
	repo = _FakeRepo(_event())
	repo.fail_count_update = True
	service = ParticipationService(repo)

	with pytest.raises(InternalError):
		await service.join(str(uuid4()), event_id=str(repo.event.id))


@pytest.mark.asyncio
async def test_join_without_profile_is_not_found(fake_pool) -> None:
	repo = _FakeRepo(_event(current=4))
	repo.known_users = set()
	service = ParticipationService(repo)

	with pytest.raises(NotFoundError) as excinfo:
		await service.join(str(uuid4()), event_id=str(repo.event.id))

	assert excinfo.value.detail == "profile_not_found"
	assert repo.event.current_participants == 4


@pytest.mark.asyncio
async def test_remove_decrements_once(fake_pool) -> None:
	repo = _FakeRepo(_event(current=0))
	service = ParticipationService(repo)
	joined = await service.join(str(uuid4()), event_id=str(repo.event.id))
	participant_id = str(joined.participant.id)

	removed = await service.remove(participant_id)
	assert removed.status == "removed"
	assert repo.event.current_participants == 0

	# Already removed: counter untouched.
	await service.remove(participant_id)
	assert repo.event.current_participants == 0


@pytest.mark.asyncio
async def test_remove_counter_is_floored_at_zero(fake_pool) -> None:
	repo = _FakeRepo(_event(current=0))
	row = models.Participant(
		id=uuid4(),
		event_id=repo.event.id,
		user_id=uuid4(),
		status="checked_in",
		joined_at=datetime.now(timezone.utc),
	)
	repo.participants[str(row.id)] = row
	service = ParticipationService(repo)

	await service.remove(str(row.id))

	assert repo.event.current_participants == 0


@pytest.mark.asyncio
async def test_remove_unknown_participant(fake_pool) -> None:
	service = ParticipationService(_FakeRepo(_event()))

	with pytest.raises(NotFoundError) as excinfo:
		await service.remove(str(uuid4()))

	assert excinfo.value.detail == "participant_not_found"


@pytest.mark.asyncio
async def test_reconcile_corrects_drift(fake_pool) -> None:
	repo = _FakeRepo(_event(current=0))
	service = ParticipationService(repo)
	for _ in range(3):
		await service.join(str(uuid4()), event_id=str(repo.event.id))
	repo.event = repo.event.model_copy(update={"current_participants": 7})

	result = await service.reconcile(str(repo.event.id))

	assert (result.previous, result.current) == (7, 3)
	assert result.drifted
	assert repo.event.current_participants == 3

	again = await service.reconcile(str(repo.event.id))
	assert not again.drifted
