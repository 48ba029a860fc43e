"""Profile and business-card provisioning for newly signed-in users."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import asyncpg

from ndrop.domain import models, repo as repo_module
from ndrop.domain.exceptions import InternalError, ValidationError
from ndrop.infra.auth import AuthenticatedUser
from ndrop.infra.jwt import ADMIN_ROLE_ID
from ndrop.infra.postgres import get_pool
from ndrop.obs import metrics as obs_metrics
from ndrop.settings import settings

logger = logging.getLogger(__name__)

USER_ROLE_ID = 1
ROLE_NAMES = {USER_ROLE_ID: "user", ADMIN_ROLE_ID: "admin"}


@dataclass(slots=True)
class ProvisionResult:
	profile: models.UserProfile
	created: bool
	card: Optional[models.BusinessCard] = None

	@property
	def role(self) -> str:
		return self.profile.role


def _display_name(identity: AuthenticatedUser) -> str:
	if identity.full_name:
		return identity.full_name
	if identity.email:
		return identity.email.split("@", 1)[0]
	return ""


class ProvisioningService:
	"""Creates the profile and its public business card together, once."""

	def __init__(self, repository: repo_module.NdropRepository | None = None) -> None:
		self.repo = repository or repo_module.NdropRepository()

	async def ensure_profile(
		self,
		identity: AuthenticatedUser,
		*,
		role_id: Optional[int] = None,
	) -> ProvisionResult:
		if not identity.id or not models.is_uuid(identity.id):
			raise ValidationError("invalid_user_id")
		existing = await self.repo.get_profile(identity.id)
		if existing is not None:
			return ProvisionResult(profile=existing, created=False)

		if role_id not in ROLE_NAMES:
			role_id = ADMIN_ROLE_ID if settings.is_admin_email(identity.email) else USER_ROLE_ID
		full_name = _display_name(identity)
		card: Optional[models.BusinessCard] = None
		pool = await get_pool()
		try:
			async with pool.acquire() as conn:
				async with conn.transaction():
					profile = await self.repo.insert_profile_if_absent(
						user_id=identity.id,
						full_name=full_name,
						email=identity.email,
						role=ROLE_NAMES[role_id],
						role_id=role_id,
						profile_image_url=identity.avatar_url,
						conn=conn,
					)
					if profile is not None:
						card = await self.repo.insert_business_card(
							user_id=identity.id,
							full_name=full_name,
							email=identity.email,
							profile_image_url=identity.avatar_url,
							conn=conn,
						)
		except asyncpg.PostgresError as exc:
			obs_metrics.inc_profile_provisioned("error")
			logger.error("profile provisioning failed", extra={"user_id": identity.id, "error": str(exc)})
			raise InternalError() from exc

		if profile is None:
			# Lost the race to a concurrent sign-in; return what it created.
			winner = await self.repo.get_profile(identity.id)
			if winner is None:
				raise InternalError()
			obs_metrics.inc_profile_provisioned("existing")
			return ProvisionResult(profile=winner, created=False)
		obs_metrics.inc_profile_provisioned("created")
		logger.info("profile provisioned", extra={"user_id": identity.id, "role": profile.role})
		return ProvisionResult(profile=profile, created=True, card=card)
