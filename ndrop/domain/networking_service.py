"""Read-side queries for in-event networking."""

from __future__ import annotations

from ndrop.domain import models, repo as repo_module
from ndrop.domain.exceptions import NotFoundError
from ndrop.settings import settings


class NetworkingService:
	def __init__(self, repository: repo_module.NdropRepository | None = None) -> None:
		self.repo = repository or repo_module.NdropRepository()

	async def search_participants(
		self,
		event_id: str,
		viewer_id: str,
		query: str | None = None,
	) -> list[models.DirectoryProfile]:
		"""Other non-removed participants, optionally filtered by a free-text term.

		The term matches nickname, company, role, job title and introduction
		case-insensitively, or one interest keyword exactly.
		"""
		if not models.is_uuid(event_id):
			raise NotFoundError("event_not_found")
		return await self.repo.search_participants(
			event_id,
			viewer_id=viewer_id,
			query=query,
			limit=settings.participant_search_limit,
		)

	async def list_time_slots(self, event_id: str) -> list[models.TimeSlot]:
		if not models.is_uuid(event_id):
			raise NotFoundError("event_not_found")
		return await self.repo.list_time_slots(event_id)
