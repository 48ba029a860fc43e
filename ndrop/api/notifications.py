"""User notification inbox."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ndrop.api._errors import to_http_error
from ndrop.domain.exceptions import ForbiddenError, ValidationError
from ndrop.domain.notifications_service import NotificationService
from ndrop.infra.auth import AuthenticatedUser, get_current_user
from ndrop.schemas import dto

router = APIRouter(prefix="/api/user", tags=["notifications"])

_service = NotificationService()


@router.post("/create-notification", response_model=dto.NotificationResponse)
async def create_notification(
	payload: dto.CreateNotificationRequest,
	user: AuthenticatedUser = Depends(get_current_user),
) -> dto.NotificationResponse:
	try:
		if not payload.title or not payload.message or not payload.notification_type:
			raise ValidationError("missing_fields")
		# Only the caller's own inbox; admins address others via send-notification.
		if payload.target_user_id and payload.target_user_id != user.id:
			raise ForbiddenError("user_mismatch")
		row = await _service.notify_user(
			user.id,
			payload.title,
			payload.message,
			payload.notification_type,
			metadata=payload.metadata,
			related_event_id=payload.related_event_id,
		)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.NotificationResponse(notification=row)


@router.get("/notifications", response_model=dto.NotificationListResponse)
async def list_notifications(user: AuthenticatedUser = Depends(get_current_user)) -> dto.NotificationListResponse:
	try:
		rows = await _service.list_for_user(user.id)
	except Exception as exc:
		raise to_http_error(exc) from exc
	unread = sum(1 for row in rows if row.read_at is None)
	return dto.NotificationListResponse(notifications=rows, unread=unread)


@router.post("/notifications/read-all", response_model=dto.MarkAllReadResponse)
async def mark_all_read(user: AuthenticatedUser = Depends(get_current_user)) -> dto.MarkAllReadResponse:
	try:
		updated = await _service.mark_all_read(user.id)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.MarkAllReadResponse(updated=updated)


@router.post("/notifications/{notification_id}/read", response_model=dto.NotificationResponse)
async def mark_read(
	notification_id: str,
	user: AuthenticatedUser = Depends(get_current_user),
) -> dto.NotificationResponse:
	try:
		row = await _service.mark_read(notification_id, user.id)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.NotificationResponse(notification=row)
