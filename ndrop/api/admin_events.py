"""Admin event management and participant roster endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ndrop.api._errors import to_http_error
from ndrop.domain import models
from ndrop.domain.events_service import EventService
from ndrop.domain.participation_service import ParticipationService
from ndrop.infra.auth import AdminPrincipal, get_admin_principal
from ndrop.schemas import dto

router = APIRouter(prefix="/api/admin", tags=["admin-events"])

_events = EventService()
_participation = ParticipationService()


def _participant_item(row: models.ParticipantProfile) -> dto.ParticipantItem:
	profile = row.profile
	return dto.ParticipantItem(
		id=row.participant_id,
		user_id=profile.id,
		status=row.status,
		joined_at=row.joined_at,
		full_name=profile.full_name,
		email=profile.email,
		company=profile.company,
		position=profile.position,
		profile_image_url=profile.profile_image_url,
	)


@router.post("/create-event", response_model=dto.EventResponse)
async def create_event(
	payload: dto.CreateEventRequest,
	admin: AdminPrincipal = Depends(get_admin_principal),
) -> dto.EventResponse:
	try:
		event = await _events.create_event(admin, payload)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.EventResponse(event=event, message="event_created")


@router.put("/update-event/{event_id}", response_model=dto.EventResponse)
async def update_event(
	event_id: str,
	payload: dto.UpdateEventRequest,
	admin: AdminPrincipal = Depends(get_admin_principal),
) -> dto.EventResponse:
	try:
		event = await _events.update_event(admin, event_id, payload)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.EventResponse(event=event, message="event_updated")


@router.delete("/delete-event/{event_id}", response_model=dto.SuccessResponse)
async def delete_event(
	event_id: str,
	admin: AdminPrincipal = Depends(get_admin_principal),
) -> dto.SuccessResponse:
	try:
		await _events.delete_event(admin, event_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.SuccessResponse(message="event_deleted")


@router.get("/get-events", response_model=dto.EventListResponse)
async def get_events(admin: AdminPrincipal = Depends(get_admin_principal)) -> dto.EventListResponse:
	try:
		events = await _events.list_events()
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.EventListResponse(events=events)


@router.post("/get-participants", response_model=dto.ParticipantListResponse)
async def get_participants(
	payload: dto.EventRefRequest,
	admin: AdminPrincipal = Depends(get_admin_principal),
) -> dto.ParticipantListResponse:
	try:
		rows = await _events.list_participants(payload.event_id or "")
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.ParticipantListResponse(participants=[_participant_item(row) for row in rows])


@router.post("/remove-participant", response_model=dto.SuccessResponse)
async def remove_participant(
	payload: dto.RemoveParticipantRequest,
	admin: AdminPrincipal = Depends(get_admin_principal),
) -> dto.SuccessResponse:
	try:
		await _participation.remove(payload.participant_id or "")
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.SuccessResponse(message="participant_removed")


@router.post("/events/{event_id}/recount-participants", response_model=dto.RecountResponse)
async def recount_participants(
	event_id: str,
	admin: AdminPrincipal = Depends(get_admin_principal),
) -> dto.RecountResponse:
	try:
		result = await _participation.reconcile(event_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.RecountResponse(
		event_id=result.event_id,
		previous=result.previous,
		current=result.current,
		drifted=result.drifted,
	)
