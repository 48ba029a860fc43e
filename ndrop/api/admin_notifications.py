"""Admin notice and notification dispatch."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ndrop.api._errors import to_http_error
from ndrop.domain.exceptions import ValidationError
from ndrop.domain.notifications_service import NotificationService
from ndrop.infra.auth import AdminPrincipal, get_admin_principal
from ndrop.schemas import dto

router = APIRouter(prefix="/api/admin", tags=["admin-notifications"])

_service = NotificationService()


@router.post("/send-notice", response_model=dto.SendNoticeResponse)
async def send_notice(
	payload: dto.SendNoticeRequest,
	admin: AdminPrincipal = Depends(get_admin_principal),
) -> dto.SendNoticeResponse:
	"""Notify every confirmed participant of one event."""
	try:
		if not payload.event_id or not payload.title or not payload.message:
			raise ValidationError("missing_fields")
		result = await _service.notify_event_participants(
			payload.event_id,
			payload.title,
			payload.message,
			sent_by=admin.admin_id,
		)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.SendNoticeResponse(notifications=result.notifications, target_count=result.target_count)


@router.post("/send-notification", response_model=dto.SendNoticeResponse)
async def send_notification(
	payload: dto.SendNotificationRequest,
	admin: AdminPrincipal = Depends(get_admin_principal),
) -> dto.SendNoticeResponse:
	try:
		if not payload.title or not payload.message:
			raise ValidationError("missing_fields")
		result = await _service.send(
			title=payload.title,
			message=payload.message,
			target_type=payload.target_type,
			target_event_id=payload.target_event_id,
			target_ids=payload.target_ids,
			sent_by=admin.admin_id,
			notification_type=payload.notification_type,
		)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.SendNoticeResponse(notifications=result.notifications, target_count=result.target_count)
