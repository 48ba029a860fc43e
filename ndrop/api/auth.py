"""Sign-in provisioning and self-service profile edits."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from ndrop.api._errors import to_http_error
from ndrop.domain.exceptions import ForbiddenError
from ndrop.domain.profile_service import ProfileService
from ndrop.domain.provisioning_service import USER_ROLE_ID, ProvisioningService
from ndrop.infra.auth import AuthenticatedUser, get_current_user
from ndrop.schemas import dto

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

_service = ProvisioningService()
_profiles = ProfileService()


@router.post("/provision", response_model=dto.ProvisionResponse)
async def provision(user: AuthenticatedUser = Depends(get_current_user)) -> dto.ProvisionResponse:
	"""Ensure the signed-in user has a profile and card.

	Sign-in never fails on provisioning; the client sees ``provisioned: false``.
	"""
	try:
		result = await _service.ensure_profile(user)
	except Exception:
		logger.warning("sign-in provisioning failed", extra={"user_id": user.id}, exc_info=True)
		return dto.ProvisionResponse(provisioned=False)
	return dto.ProvisionResponse(
		provisioned=True,
		created=result.created,
		role=result.role,
		profile=result.profile,
	)


@router.post("/create-profile", response_model=dto.ProvisionResponse)
async def create_profile(
	payload: dto.CreateProfileRequest,
	user: AuthenticatedUser = Depends(get_current_user),
) -> dto.ProvisionResponse:
	try:
		if payload.user_id and payload.user_id != user.id:
			raise ForbiddenError("user_mismatch")
		identity = AuthenticatedUser(
			id=user.id,
			email=payload.email or user.email,
			full_name=payload.name or user.full_name,
			avatar_url=user.avatar_url,
		)
		# Elevated roles come only from the admin e-mail allow-list.
		role_id = USER_ROLE_ID if payload.role_id == USER_ROLE_ID else None
		result = await _service.ensure_profile(identity, role_id=role_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.ProvisionResponse(
		provisioned=True,
		created=result.created,
		role=result.role,
		profile=result.profile,
	)


@router.put("/update-profile", response_model=dto.UpdateProfileResponse)
async def update_profile(
	payload: dto.UpdateProfileRequest,
	user: AuthenticatedUser = Depends(get_current_user),
) -> dto.UpdateProfileResponse:
	try:
		if payload.user_id and payload.user_id != user.id:
			raise ForbiddenError("user_mismatch")
		result = await _profiles.update(user.id, payload.updates)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.UpdateProfileResponse(
		updated_fields=result.updated_fields,
		data=result.profile,
		card=result.card,
	)
