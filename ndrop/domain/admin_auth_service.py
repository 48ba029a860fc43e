"""Admin account login and token issuance."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ndrop.domain import models, repo as repo_module
from ndrop.domain.exceptions import RateLimitedError, UnauthorizedError, ValidationError
from ndrop.infra import jwt as jwt_helper
from ndrop.infra import rate_limit
from ndrop.infra.password import check_needs_rehash, hash_password, verify_password
from ndrop.obs import metrics as obs_metrics
from ndrop.settings import settings

logger = logging.getLogger(__name__)

_RATE_KIND = "admin_login"


@dataclass(slots=True)
class AdminSession:
	token: str
	admin: models.AdminAccount


class AdminAuthService:
	def __init__(self, repository: repo_module.NdropRepository | None = None) -> None:
		self.repo = repository or repo_module.NdropRepository()

	async def login(self, username: str | None, password: str | None) -> AdminSession:
		if not username or not password:
			raise ValidationError("missing_fields")
		actor = username.strip().lower()
		allowed = await rate_limit.allow(
			_RATE_KIND,
			actor,
			limit=settings.admin_login_max_attempts,
			window_seconds=settings.admin_login_window_seconds,
		)
		if not allowed:
			obs_metrics.inc_admin_login("rate_limited")
			logger.warning("admin login rate limited", extra={"username": actor})
			raise RateLimitedError()

		account = await self.repo.get_admin_by_username(actor)
		if account is None or not account.is_active or not verify_password(account.password_hash, password):
			obs_metrics.inc_admin_login("rejected")
			logger.info("admin login rejected", extra={"username": actor})
			raise UnauthorizedError("invalid_credentials")

		new_hash = hash_password(password) if check_needs_rehash(account.password_hash) else None
		await self.repo.record_admin_login(str(account.id), password_hash=new_hash)
		await rate_limit.reset(_RATE_KIND, actor, window_seconds=settings.admin_login_window_seconds)
		token = jwt_helper.encode_admin(
			admin_id=str(account.id),
			username=account.username,
			role=account.role,
			role_id=account.role_id,
		)
		obs_metrics.inc_admin_login("ok")
		logger.info("admin login", extra={"admin_id": str(account.id)})
		return AdminSession(token=token, admin=account)
