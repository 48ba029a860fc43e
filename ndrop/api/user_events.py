"""Event listing and joining for signed-in users."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ndrop.api._errors import to_http_error
from ndrop.domain.events_service import EventService
from ndrop.domain.exceptions import ForbiddenError
from ndrop.domain.notifications_service import NotificationService
from ndrop.domain.participation_service import ParticipationService
from ndrop.infra.auth import AuthenticatedUser, get_current_user
from ndrop.schemas import dto

router = APIRouter(prefix="/api/user", tags=["user-events"])

_participation = ParticipationService()
_notifications = NotificationService()
_events = EventService()


@router.post("/join-event", response_model=dto.JoinEventResponse)
async def join_event(
	payload: dto.JoinEventRequest,
	user: AuthenticatedUser = Depends(get_current_user),
) -> dto.JoinEventResponse:
	try:
		if payload.user_id and payload.user_id != user.id:
			raise ForbiddenError("user_mismatch")
		result = await _participation.join(user.id, event_code=payload.event_code, event_id=payload.event_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
	event = result.event
	await _notifications.notify_best_effort(
		user.id,
		"Event joined",
		f"You joined {event.title}.",
		"event_joined",
		metadata={"event_code": event.event_code},
		related_event_id=str(event.id),
	)
	return dto.JoinEventResponse(participant=result.participant, event=event)


@router.get("/get-events", response_model=dto.EventListResponse)
async def get_events(user: AuthenticatedUser = Depends(get_current_user)) -> dto.EventListResponse:
	try:
		events = await _events.list_events()
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.EventListResponse(events=events)
