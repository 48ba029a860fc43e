"""In-event networking reads: participant directory and meeting slots."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ndrop.api._errors import to_http_error
from ndrop.domain.networking_service import NetworkingService
from ndrop.infra.auth import AuthenticatedUser, get_current_user
from ndrop.schemas import dto

router = APIRouter(prefix="/api/events", tags=["event-networking"])

_service = NetworkingService()


@router.get("/{event_id}/participants", response_model=dto.ParticipantSearchResponse)
async def search_participants(
	event_id: str,
	q: Optional[str] = Query(default=None, max_length=100),
	user: AuthenticatedUser = Depends(get_current_user),
) -> dto.ParticipantSearchResponse:
	try:
		profiles = await _service.search_participants(event_id, user.id, q)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.ParticipantSearchResponse(participants=profiles)


@router.get("/{event_id}/time-slots", response_model=dto.TimeSlotListResponse)
async def list_time_slots(
	event_id: str,
	user: AuthenticatedUser = Depends(get_current_user),
) -> dto.TimeSlotListResponse:
	try:
		slots = await _service.list_time_slots(event_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.TimeSlotListResponse(slots=slots)
