"""Connection counts, collection timelines and event reports for admins."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ndrop.api._errors import to_http_error
from ndrop.domain.connections_service import ConnectionService, TimelineBucket
from ndrop.infra.auth import AdminPrincipal, get_admin_principal
from ndrop.schemas import dto

router = APIRouter(prefix="/api/admin", tags=["admin-reports"])

_service = ConnectionService()


def _buckets(rows: list[TimelineBucket]) -> list[dto.TimelineBucketOut]:
	return [dto.TimelineBucketOut(date=row.date, count=row.count) for row in rows]


@router.post("/event-connections", response_model=dto.ConnectionsResponse)
async def event_connections(
	payload: dto.EventRefRequest,
	admin: AdminPrincipal = Depends(get_admin_principal),
) -> dto.ConnectionsResponse:
	try:
		total = await _service.count_connections(payload.event_id or "")
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.ConnectionsResponse(total_connections=total)


@router.post("/event-collection-timeline", response_model=dto.TimelineResponse)
async def event_collection_timeline(
	payload: dto.TimelineRequest,
	admin: AdminPrincipal = Depends(get_admin_principal),
) -> dto.TimelineResponse:
	try:
		rows = await _service.collection_timeline(payload.event_id or "", payload.group_by)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.TimelineResponse(timeline=_buckets(rows))


@router.post("/event-report", response_model=dto.EventReportResponse)
async def event_report(
	payload: dto.EventRefRequest,
	admin: AdminPrincipal = Depends(get_admin_principal),
) -> dto.EventReportResponse:
	try:
		report = await _service.event_report(payload.event_id or "")
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.EventReportResponse(
		event_info=report.event_info,
		kpi=report.kpi,
		checkin_timeline=_buckets(report.checkin_timeline),
		analytics=report.analytics,
	)
