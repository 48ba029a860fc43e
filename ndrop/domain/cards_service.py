"""Card book: collecting, listing and curating saved business cards."""

from __future__ import annotations

import logging

from ndrop.domain import models, repo as repo_module
from ndrop.domain.exceptions import NotFoundError, ValidationError
from ndrop.domain.notifications_service import NotificationService
from ndrop.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


class CardBookService:
	def __init__(
		self,
		repository: repo_module.NdropRepository | None = None,
		notifications: NotificationService | None = None,
	) -> None:
		self.repo = repository or repo_module.NdropRepository()
		self.notifications = notifications or NotificationService(self.repo)

	async def get_public_card(self, card_id: str) -> models.BusinessCard:
		card = await self.repo.get_card(card_id) if models.is_uuid(card_id) else None
		if card is None or not card.is_public:
			raise NotFoundError("card_not_found")
		return card

	async def collect(self, collector_id: str, card_id: str | None) -> models.CollectedCard:
		if not card_id:
			raise ValidationError("missing_fields")
		card = await self.repo.get_card(card_id) if models.is_uuid(card_id) else None
		if card is None:
			raise NotFoundError("card_not_found")
		if str(card.user_id) == str(collector_id):
			raise ValidationError("cannot_collect_own_card")
		edge = await self.repo.insert_collected_card(collector_id, card_id)
		if edge is None:
			raise ValidationError("already_collected")
		edge.card = card
		obs_metrics.inc_card_collected()
		await self.notifications.notify_best_effort(
			collector_id,
			"Business card saved",
			f"{card.full_name or 'A business card'} was added to your card book.",
			"business_card_collected",
			metadata={"card_id": str(card.id), "card_owner_id": str(card.user_id)},
		)
		return edge

	async def list_saved(self, collector_id: str) -> list[models.CollectedCard]:
		return await self.repo.list_collected_cards(collector_id)

	async def set_favorite(self, collector_id: str, edge_id: str, is_favorite: bool) -> None:
		updated = models.is_uuid(edge_id) and await self.repo.set_collected_favorite(edge_id, collector_id, is_favorite)
		if not updated:
			raise NotFoundError("saved_card_not_found")

	async def delete(self, collector_id: str, edge_id: str) -> None:
		deleted = models.is_uuid(edge_id) and await self.repo.delete_collected_card(edge_id, collector_id)
		if not deleted:
			raise NotFoundError("saved_card_not_found")

	async def clean_own_cards(self, user_id: str) -> int:
		"""Drop edges that point at the user's own card."""
		removed = await self.repo.delete_self_collected(user_id)
		if removed:
			logger.info("self-collected cards removed", extra={"user_id": user_id, "removed": removed})
		return removed
