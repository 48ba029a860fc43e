"""Admin event management: create, update, delete and listings."""

from __future__ import annotations

import logging
import secrets
import string
from datetime import datetime
from typing import Any, Awaitable, Callable
from zoneinfo import ZoneInfo

import asyncpg

from ndrop.domain import models, repo as repo_module
from ndrop.domain.exceptions import ForbiddenError, InternalError, NotFoundError, ValidationError
from ndrop.infra.auth import AdminPrincipal
from ndrop.schemas import dto
from ndrop.settings import settings

logger = logging.getLogger(__name__)

EVENT_CODE_LENGTH = 6
EVENT_CODE_ALPHABET = string.ascii_uppercase + string.digits
_CODE_ATTEMPTS = 5


def generate_event_code() -> str:
	return "".join(secrets.choice(EVENT_CODE_ALPHABET) for _ in range(EVENT_CODE_LENGTH))


def compose_local(day: str, clock: str, tz_name: str | None = None) -> datetime:
	"""Combine YYYY-MM-DD and HH:MM in the event timezone into an aware datetime."""
	try:
		naive = datetime.fromisoformat(f"{day.strip()}T{clock.strip()}")
	except ValueError as exc:
		raise ValidationError("invalid_date") from exc
	return naive.replace(tzinfo=ZoneInfo(tz_name or settings.event_timezone))


def _aware(moment: datetime) -> datetime:
	if moment.tzinfo is None:
		return moment.replace(tzinfo=ZoneInfo(settings.event_timezone))
	return moment


class EventService:
	def __init__(
		self,
		repository: repo_module.NdropRepository | None = None,
		*,
		code_factory: Callable[[], str] = generate_event_code,
	) -> None:
		self.repo = repository or repo_module.NdropRepository()
		self._code_factory = code_factory

	async def list_events(self) -> list[models.Event]:
		return await self.repo.list_events()

	async def get_event(self, event_id: str) -> models.Event:
		event = await self.repo.get_event(event_id) if models.is_uuid(event_id) else None
		if event is None:
			raise NotFoundError("event_not_found")
		return event

	async def create_event(self, admin: AdminPrincipal, payload: dto.CreateEventRequest) -> models.Event:
		required = (
			payload.title,
			payload.description,
			payload.start_date,
			payload.start_time,
			payload.end_date,
			payload.end_time,
			payload.location,
			payload.max_participants,
		)
		if not all(required):
			raise ValidationError("missing_fields")
		start = compose_local(payload.start_date, payload.start_time)
		end = compose_local(payload.end_date, payload.end_time)
		if end <= start:
			raise ValidationError("invalid_date_range")
		fields: dict[str, Any] = {
			"title": payload.title.strip(),
			"description": payload.description.strip(),
			"location": payload.location.strip(),
			"start_date": start,
			"end_date": end,
			"max_participants": int(payload.max_participants),
			"image_url": payload.image_url,
			"organizer_name": payload.admin_name or admin.username or "admin",
			"organizer_email": f"{admin.username}@admin.local" if admin.username else None,
			"overview_points": payload.overview_points,
			"target_audience": payload.target_audience,
			"special_benefits": payload.special_benefits,
			"status": "upcoming",
		}
		for attempt in range(1, _CODE_ATTEMPTS + 1):
			code = self._code_factory()
			try:
				event = await self.repo.create_event(event_code=code, fields=fields, admin_id=admin.admin_id)
			except asyncpg.UniqueViolationError:
				logger.info("event code collision", extra={"attempt": attempt})
				continue
			except asyncpg.PostgresError as exc:
				logger.error("event create failed", extra={"admin_id": admin.admin_id, "error": str(exc)})
				raise InternalError() from exc
			logger.info("event created", extra={"event_id": str(event.id), "admin_id": admin.admin_id})
			return event
		logger.error("event code space exhausted", extra={"attempts": _CODE_ATTEMPTS})
		raise InternalError()

	async def _owned_event(self, admin: AdminPrincipal, event_id: str) -> models.Event:
		event = await self.get_event(event_id)
		if event.admin_created_by is None or str(event.admin_created_by) != admin.admin_id:
			raise ForbiddenError("not_event_owner")
		return event

	async def update_event(
		self,
		admin: AdminPrincipal,
		event_id: str,
		payload: dto.UpdateEventRequest,
	) -> models.Event:
		if not payload.title or not payload.start_date or not payload.end_date:
			raise ValidationError("missing_fields")
		await self._owned_event(admin, event_id)
		start = _aware(payload.start_date)
		end = _aware(payload.end_date)
		if start >= end:
			raise ValidationError("invalid_date_range")
		fields = payload.model_dump(exclude_none=True)
		fields["start_date"] = start
		fields["end_date"] = end
		fields["title"] = payload.title.strip()
		for key in ("description", "location", "organizer_name", "organizer_email", "organizer_phone", "organizer_kakao"):
			if key in fields:
				fields[key] = fields[key].strip()
		try:
			updated = await self.repo.update_event(event_id, fields)
		except asyncpg.PostgresError as exc:
			logger.error("event update failed", extra={"event_id": event_id, "error": str(exc)})
			raise InternalError() from exc
		if updated is None:
			raise NotFoundError("event_not_found")
		return updated

	async def delete_event(self, admin: AdminPrincipal, event_id: str) -> None:
		"""Delete dependent rows best-effort, then the event itself.

		Not transactional: a failing dependent delete is logged and skipped.
		"""
		await self._owned_event(admin, event_id)
		cascade: list[tuple[str, Callable[[str], Awaitable[Any]]]] = [
			("event_participants", self.repo.delete_event_participants),
			("feedback", self.repo.delete_event_feedback),
			("notifications", self.repo.delete_event_notifications),
		]
		for table, delete in cascade:
			try:
				await delete(event_id)
			except Exception:
				logger.warning(
					"related delete failed, continuing",
					extra={"event_id": event_id, "table": table},
					exc_info=True,
				)
		try:
			await self.repo.delete_event(event_id)
		except asyncpg.PostgresError as exc:
			logger.error("event delete failed", extra={"event_id": event_id, "error": str(exc)})
			raise InternalError() from exc
		logger.info("event deleted", extra={"event_id": event_id, "admin_id": admin.admin_id})

	async def list_participants(self, event_id: str) -> list[models.ParticipantProfile]:
		if not event_id:
			raise ValidationError("missing_fields")
		await self.get_event(event_id)
		return await self.repo.list_participant_profiles(event_id, statuses=("confirmed",))
