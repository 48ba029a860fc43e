"""Self-service profile edits, mirrored onto the user's business card."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional

import asyncpg

from ndrop.domain import models, repo as repo_module
from ndrop.domain.exceptions import InternalError, NotFoundError, ValidationError
from ndrop.domain.notifications_service import NotificationService
from ndrop.infra.postgres import get_pool

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
	"full_name",
	"nickname",
	"email",
	"contact",
	"company",
	"job_title",
	"work_field",
	"affiliation_type",
	"introduction",
	"mbti",
	"birth_date",
	"gender",
	"interest_keywords",
	"profile_image_url",
)
AFFILIATION_TYPES = ("affiliated", "unaffiliated")

# profile column -> card column
_CARD_SYNC = {
	"full_name": "full_name",
	"email": "email",
	"contact": "contact",
	"company": "company",
	"job_title": "role",
	"introduction": "introduction",
	"profile_image_url": "profile_image_url",
}


@dataclass(slots=True)
class ProfileUpdate:
	profile: models.UserProfile
	updated_fields: list[str]
	card: Optional[models.BusinessCard] = None


def _parse_birth_date(value: Any) -> Optional[date]:
	"""A date, None to clear, or raises ValueError."""
	if value is None or value == "":
		return None
	if isinstance(value, date):
		return value
	return date.fromisoformat(str(value).strip()[:10])


def clean_updates(updates: Mapping[str, Any]) -> dict[str, Any]:
	"""Keep editable fields only. An unparseable birth_date is dropped, not rejected."""
	cleaned = {key: updates[key] for key in EDITABLE_FIELDS if key in updates}
	if "birth_date" in cleaned:
		try:
			cleaned["birth_date"] = _parse_birth_date(cleaned["birth_date"])
		except ValueError:
			logger.info("invalid birth_date dropped", extra={"birth_date": str(cleaned["birth_date"])[:32]})
			del cleaned["birth_date"]
	affiliation = cleaned.get("affiliation_type")
	if affiliation is not None and affiliation not in AFFILIATION_TYPES:
		raise ValidationError("invalid_affiliation_type")
	keywords = cleaned.get("interest_keywords")
	if keywords is not None:
		if not isinstance(keywords, list) or not all(isinstance(item, str) for item in keywords):
			raise ValidationError("invalid_interest_keywords")
	if cleaned.get("full_name") is None:
		cleaned.pop("full_name", None)
	return cleaned


def card_fields(cleaned: Mapping[str, Any]) -> dict[str, Any]:
	# Only non-empty values overwrite the card.
	return {_CARD_SYNC[key]: value for key, value in cleaned.items() if key in _CARD_SYNC and value}


class ProfileService:
	def __init__(
		self,
		repository: repo_module.NdropRepository | None = None,
		notifications: NotificationService | None = None,
	) -> None:
		self.repo = repository or repo_module.NdropRepository()
		self.notifications = notifications or NotificationService(self.repo)

	async def update(self, user_id: str, updates: Mapping[str, Any] | None) -> ProfileUpdate:
		if not models.is_uuid(user_id):
			raise ValidationError("invalid_user_id")
		cleaned = clean_updates(updates or {})
		if not cleaned:
			raise ValidationError("missing_fields")

		card: Optional[models.BusinessCard] = None
		pool = await get_pool()
		try:
			async with pool.acquire() as conn:
				async with conn.transaction():
					profile = await self.repo.update_profile(user_id, cleaned, conn=conn)
					if profile is None:
						raise NotFoundError("profile_not_found")
					synced = card_fields(cleaned)
					if synced:
						try:
							# Savepoint: a failed card write leaves the profile write intact.
							async with conn.transaction():
								card = await self.repo.update_card_for_user(user_id, synced, conn=conn)
						except asyncpg.PostgresError:
							logger.warning("business card sync failed", extra={"user_id": user_id}, exc_info=True)
		except asyncpg.PostgresError as exc:
			logger.error("profile update failed", extra={"user_id": user_id, "error": str(exc)})
			raise InternalError() from exc

		fields = list(cleaned)
		logger.info("profile updated", extra={"user_id": user_id, "fields": fields})
		await self.notifications.notify_best_effort(
			user_id,
			"Profile updated",
			f"{', '.join(fields)} updated.",
			"profile_updated",
			metadata={"update_type": ", ".join(fields), "updated_fields": fields, "action": "updated"},
		)
		return ProfileUpdate(profile=profile, updated_fields=fields, card=card)
