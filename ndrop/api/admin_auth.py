"""Admin console sign-in."""

from __future__ import annotations

from fastapi import APIRouter

from ndrop.api._errors import to_http_error
from ndrop.domain.admin_auth_service import AdminAuthService
from ndrop.schemas import dto

router = APIRouter(tags=["admin-auth"])

_service = AdminAuthService()


@router.post("/api/auth/admin-login", response_model=dto.AdminLoginResponse)
async def admin_login(payload: dto.AdminLoginRequest) -> dto.AdminLoginResponse:
	try:
		session = await _service.login(payload.username, payload.password)
	except Exception as exc:
		raise to_http_error(exc) from exc
	admin = session.admin
	return dto.AdminLoginResponse(
		token=session.token,
		admin=dto.AdminOut(
			id=admin.id,
			username=admin.username,
			full_name=admin.full_name,
			role=admin.role,
			role_id=admin.role_id,
		),
	)
