"""Notification fan-out and user inbox operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

import asyncpg

from ndrop.domain import models, repo as repo_module
from ndrop.domain.exceptions import InternalError, NotFoundError, ValidationError
from ndrop.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = (
	"announcement",
	"business_card_collected",
	"event_joined",
	"event_created",
	"profile_updated",
	"system",
)
TARGET_TYPES = ("all", "specific", "event_participants")


@dataclass(slots=True)
class FanoutResult:
	notifications: list[models.Notification] = field(default_factory=list)
	target_count: int = 0


def _check_type(notification_type: str) -> None:
	if notification_type not in NOTIFICATION_TYPES:
		raise ValidationError("invalid_notification_type")


class NotificationService:
	def __init__(self, repository: repo_module.NdropRepository | None = None) -> None:
		self.repo = repository or repo_module.NdropRepository()

	async def notify_event_participants(
		self,
		event_id: str,
		title: str,
		message: str,
		*,
		sent_by: str | None = None,
		notification_type: str = "announcement",
	) -> FanoutResult:
		"""One addressed row per confirmed participant, in a single insert.

		An event with no confirmed participants yields an empty result and no write.
		"""
		if not models.is_uuid(event_id):
			raise ValidationError("invalid_event_id")
		_check_type(notification_type)
		try:
			user_ids = await self.repo.list_participant_user_ids(event_id, statuses=("confirmed",))
			if not user_ids:
				return FanoutResult()
			rows = await self.repo.insert_notifications(
				user_ids=user_ids,
				title=title,
				message=message,
				target_type="specific",
				notification_type=notification_type,
				target_event_id=event_id,
				sent_by=sent_by,
			)
		except asyncpg.PostgresError as exc:
			logger.error("participant fan-out failed", extra={"event_id": event_id, "error": str(exc)})
			raise InternalError() from exc
		obs_metrics.inc_notifications("event_participants", len(rows))
		return FanoutResult(notifications=rows, target_count=len(user_ids))

	async def notify_user(
		self,
		user_id: str,
		title: str,
		message: str,
		notification_type: str,
		*,
		metadata: Mapping[str, Any] | None = None,
		related_event_id: str | None = None,
		sent_by: str | None = None,
	) -> models.Notification:
		_check_type(notification_type)
		try:
			rows = await self.repo.insert_notifications(
				user_ids=[user_id],
				title=title,
				message=message,
				target_type="specific",
				notification_type=notification_type,
				target_event_id=related_event_id,
				metadata=metadata,
				sent_by=sent_by,
			)
		except asyncpg.PostgresError as exc:
			logger.error(
				"notification insert failed",
				extra={"user_id": user_id, "notification_type": notification_type, "error": str(exc)},
			)
			raise InternalError() from exc
		obs_metrics.inc_notifications("specific", len(rows))
		return rows[0]

	async def notify_users(
		self,
		user_ids: Sequence[str],
		title: str,
		message: str,
		*,
		notification_type: str = "announcement",
		sent_by: str | None = None,
	) -> FanoutResult:
		_check_type(notification_type)
		unique_ids = list(dict.fromkeys(str(uid) for uid in user_ids if uid))
		if not unique_ids:
			raise ValidationError("target_ids_required")
		try:
			rows = await self.repo.insert_notifications(
				user_ids=unique_ids,
				title=title,
				message=message,
				target_type="specific",
				notification_type=notification_type,
				sent_by=sent_by,
			)
		except asyncpg.PostgresError as exc:
			logger.error("notification insert failed", extra={"targets": len(unique_ids), "error": str(exc)})
			raise InternalError() from exc
		obs_metrics.inc_notifications("specific", len(rows))
		return FanoutResult(notifications=rows, target_count=len(unique_ids))

	async def broadcast(
		self,
		title: str,
		message: str,
		*,
		notification_type: str = "announcement",
		sent_by: str | None = None,
		metadata: Mapping[str, Any] | None = None,
	) -> models.Notification:
		_check_type(notification_type)
		try:
			row = await self.repo.insert_broadcast(
				title=title,
				message=message,
				notification_type=notification_type,
				metadata=metadata,
				sent_by=sent_by,
			)
		except asyncpg.PostgresError as exc:
			logger.error("broadcast insert failed", extra={"error": str(exc)})
			raise InternalError() from exc
		obs_metrics.inc_notifications("all")
		return row

	async def send(
		self,
		*,
		title: str,
		message: str,
		target_type: str,
		target_event_id: str | None = None,
		target_ids: Sequence[str] | None = None,
		sent_by: str | None = None,
		notification_type: str = "announcement",
	) -> FanoutResult:
		"""Dispatch an admin notification by target type."""
		if target_type not in TARGET_TYPES:
			raise ValidationError("invalid_target_type")
		if target_type == "all":
			row = await self.broadcast(title, message, notification_type=notification_type, sent_by=sent_by)
			return FanoutResult(notifications=[row], target_count=1)
		if target_type == "event_participants":
			if not target_event_id:
				raise ValidationError("target_event_id_required")
			return await self.notify_event_participants(
				target_event_id,
				title,
				message,
				sent_by=sent_by,
				notification_type=notification_type,
			)
		return await self.notify_users(
			target_ids or [],
			title,
			message,
			notification_type=notification_type,
			sent_by=sent_by,
		)

	async def notify_best_effort(
		self,
		user_id: str,
		title: str,
		message: str,
		notification_type: str,
		**kwargs: Any,
	) -> models.Notification | None:
		"""Like notify_user, but a failure is logged instead of raised."""
		try:
			return await self.notify_user(user_id, title, message, notification_type, **kwargs)
		except Exception:
			obs_metrics.inc_notification_failure(notification_type)
			logger.warning(
				"best-effort notification dropped",
				extra={"user_id": user_id, "notification_type": notification_type},
				exc_info=True,
			)
			return None

	async def list_for_user(self, user_id: str, *, limit: int = 100) -> list[models.Notification]:
		return await self.repo.list_notifications_for_user(user_id, limit=limit)

	async def mark_read(self, notification_id: str, user_id: str) -> models.Notification:
		if not models.is_uuid(notification_id):
			raise NotFoundError("notification_not_found")
		row = await self.repo.mark_notification_read(notification_id, user_id)
		if row is None:
			raise NotFoundError("notification_not_found")
		return row

	async def mark_all_read(self, user_id: str) -> int:
		return await self.repo.mark_all_read(user_id)
