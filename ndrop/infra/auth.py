"""Authentication dependencies for FastAPI endpoints.

Two kinds of callers reach the API:
- regular users, identified by the auth provider's session token (bearer header
  or session cookie);
- administrators, identified by an admin bearer token issued by ``/api/auth/admin-login``.

Every admin route depends on ``get_admin_principal``; there is no other admin check.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ndrop.infra import jwt as jwt_helper
from ndrop.obs import logging as obs_logging
from ndrop.settings import settings


@dataclass(slots=True)
class AuthenticatedUser:
	id: str
	email: Optional[str] = None
	full_name: Optional[str] = None
	avatar_url: Optional[str] = None


@dataclass(slots=True)
class AdminPrincipal:
	admin_id: str
	username: str
	role: str
	role_id: Any

	@property
	def is_admin(self) -> bool:
		# Strict: "2", 2.0 and True are not the admin role.
		return type(self.role_id) is int and self.role_id == jwt_helper.ADMIN_ROLE_ID


_bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
	return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def user_from_claims(payload: Mapping[str, Any]) -> AuthenticatedUser:
	sub = str(payload.get("sub") or "").strip()
	if not sub:
		raise _unauthorized("invalid_token")
	metadata = payload.get("user_metadata") or {}
	if not isinstance(metadata, Mapping):
		metadata = {}
	full_name = metadata.get("full_name") or metadata.get("name")
	avatar = metadata.get("avatar_url") or metadata.get("picture")
	email = payload.get("email")
	return AuthenticatedUser(
		id=sub,
		email=str(email) if email else None,
		full_name=str(full_name) if full_name else None,
		avatar_url=str(avatar) if avatar else None,
	)


def verify_session_token(token: str) -> AuthenticatedUser:
	try:
		payload = jwt_helper.decode_session(token)
	except Exception:
		# Normalise all decode failures to invalid_token for the API surface
		raise _unauthorized("invalid_token")
	return user_from_claims(payload)


def verify_admin_token(token: str) -> AdminPrincipal:
	"""Decode an admin bearer token into a principal.

	Role is not checked here; the raw ``role_id`` claim is kept as-is and
	judged by ``get_admin_principal``.
	"""
	try:
		payload = jwt_helper.decode_admin(token)
	except Exception:
		raise _unauthorized("invalid_token")
	return AdminPrincipal(
		admin_id=str(payload["adminId"]),
		username=str(payload.get("username") or ""),
		role=str(payload.get("role") or ""),
		role_id=payload.get("role_id"),
	)


async def get_current_user(
	request: Request,
	x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
	x_user_email: Optional[str] = Header(default=None, alias="X-User-Email"),
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthenticatedUser:
	"""Resolve the signed-in user.

	Bearer token first, then the session cookie. In development the
	X-User-Id header is accepted for local tools.
	"""
	if credentials and credentials.scheme.lower() == "bearer":
		user = verify_session_token(credentials.credentials)
	else:
		cookie = request.cookies.get(settings.session_cookie_name)
		if cookie:
			user = verify_session_token(cookie)
		elif settings.is_dev() and x_user_id:
			user = AuthenticatedUser(id=x_user_id, email=x_user_email)
		else:
			raise _unauthorized("token_required")
	obs_logging.bind_context(user_id=user.id)
	return user


async def get_admin_principal(
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AdminPrincipal:
	"""Shared guard for every admin route.

	401 when the credential is missing or unverifiable, 403 when it verifies
	but does not carry the admin role.
	"""
	if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
		raise _unauthorized("token_required")
	principal = verify_admin_token(credentials.credentials)
	if not principal.is_admin:
		raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="admin_required")
	obs_logging.bind_context(admin_id=principal.admin_id)
	return principal
