"""Event participation: join, removal and counter reconciliation."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import asyncpg

from ndrop.domain import models, repo as repo_module
from ndrop.domain.exceptions import AlreadyJoinedError, InternalError, NotFoundError, ValidationError
from ndrop.infra.postgres import get_pool
from ndrop.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class JoinResult:
	participant: models.Participant
	event: models.Event


@dataclass(slots=True)
class RecountResult:
	event_id: str
	previous: int
	current: int

	@property
	def drifted(self) -> bool:
		return self.previous != self.current


class ParticipationService:
	"""Keeps participations and the per-event participant counter in step.

	Every write that touches both runs in one transaction, so a join either
	creates the row and bumps the counter or does neither.
	"""

	def __init__(self, repository: repo_module.NdropRepository | None = None) -> None:
		self.repo = repository or repo_module.NdropRepository()

	async def resolve_event(self, *, event_code: str | None = None, event_id: str | None = None) -> models.Event:
		"""Find an event by id or by its join code (matched upper-case)."""
		event: models.Event | None = None
		if event_code:
			event = await self.repo.get_event_by_code(event_code.strip().upper())
		elif event_id:
			if models.is_uuid(event_id):
				event = await self.repo.get_event(event_id)
		else:
			raise ValidationError("missing_fields")
		if event is None:
			raise NotFoundError("event_not_found")
		return event

	async def join(
		self,
		user_id: str,
		*,
		event_code: str | None = None,
		event_id: str | None = None,
	) -> JoinResult:
		if not user_id:
			raise ValidationError("missing_fields")
		event = await self.resolve_event(event_code=event_code, event_id=event_id)
		pool = await get_pool()
		try:
			async with pool.acquire() as conn:
				async with conn.transaction():
					participant = await self.repo.insert_participant_if_absent(str(event.id), user_id, conn=conn)
					if participant is None:
						raise AlreadyJoinedError()
					updated = await self.repo.adjust_participant_count(str(event.id), 1, conn=conn)
		except AlreadyJoinedError:
			obs_metrics.inc_event_join("already_joined")
			raise
		except asyncpg.ForeignKeyViolationError as exc:
			# Signed in but never provisioned.
			obs_metrics.inc_event_join("no_profile")
			logger.info("event join without profile", extra={"event_id": str(event.id), "user_id": user_id})
			raise NotFoundError("profile_not_found") from exc
		except asyncpg.PostgresError as exc:
			obs_metrics.inc_event_join("error")
			logger.error(
				"event join failed",
				extra={"event_id": str(event.id), "user_id": user_id, "error": str(exc)},
			)
			raise InternalError() from exc
		obs_metrics.inc_event_join("joined")
		logger.info("event joined", extra={"event_id": str(event.id), "user_id": user_id})
		return JoinResult(participant=participant, event=updated or event)

	async def remove(self, participant_id: str) -> models.Participant:
		"""Soft-remove a participation; the counter drops only if the row was live."""
		if not participant_id or not models.is_uuid(participant_id):
			raise NotFoundError("participant_not_found")
		pool = await get_pool()
		try:
			async with pool.acquire() as conn:
				async with conn.transaction():
					current = await self.repo.get_participant(participant_id, conn=conn, for_update=True)
					if current is None:
						raise NotFoundError("participant_not_found")
					removed = await self.repo.set_participant_status(participant_id, "removed", conn=conn)
					if current.is_live:
						await self.repo.adjust_participant_count(str(current.event_id), -1, conn=conn)
		except asyncpg.PostgresError as exc:
			logger.error(
				"participant removal failed",
				extra={"participant_id": participant_id, "error": str(exc)},
			)
			raise InternalError() from exc
		obs_metrics.inc_participant_removed()
		assert removed is not None
		return removed

	async def reconcile(self, event_id: str) -> RecountResult:
		"""Recompute current_participants from confirmed and checked-in rows."""
		if not models.is_uuid(event_id):
			raise NotFoundError("event_not_found")
		pool = await get_pool()
		try:
			async with pool.acquire() as conn:
				async with conn.transaction():
					counts = await self.repo.recount_participants(event_id, conn=conn)
		except asyncpg.PostgresError as exc:
			logger.error("participant recount failed", extra={"event_id": event_id, "error": str(exc)})
			raise InternalError() from exc
		if counts is None:
			raise NotFoundError("event_not_found")
		result = RecountResult(event_id=event_id, previous=counts[0], current=counts[1])
		if result.drifted:
			obs_metrics.inc_counter_drift()
			logger.warning(
				"participant counter drift corrected",
				extra={"event_id": event_id, "previous": result.previous, "current": result.current},
			)
		return result
