"""JWT helpers for admin bearer tokens and provider session tokens.

Admin tokens are issued here (HS256, ``settings.jwt_secret``). Session tokens
for regular users are issued by the hosted auth provider and only verified
here with ``settings.auth_jwt_secret``.
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

import jwt
from jwt import InvalidTokenError

from ndrop.settings import settings


ADMIN_ROLE_ID = 2
_DAY_SECONDS = 86400


def encode_admin(
	*,
	admin_id: str,
	username: str,
	role: str,
	role_id: int,
	ttl_days: Optional[int] = None,
	now: Optional[int] = None,
) -> str:
	"""Issue an admin bearer token carrying the admin identity and role claims."""
	issued = int(now if now is not None else time.time())
	days = settings.admin_token_ttl_days if ttl_days is None else ttl_days
	body: Dict[str, Any] = {
		"adminId": admin_id,
		"username": username,
		"role": role,
		"role_id": role_id,
		"iat": issued,
		"exp": issued + days * _DAY_SECONDS,
	}
	return jwt.encode(body, settings.jwt_secret, algorithm="HS256")


def decode_admin(token: str) -> dict[str, Any]:
	"""Decode and validate an admin bearer token.

	Raises jwt.InvalidTokenError subclasses on failure.
	"""
	payload = jwt.decode(
		token,
		settings.jwt_secret,
		algorithms=["HS256"],
		leeway=5,
		options={"require": ["exp", "iat"]},
	)
	if not payload.get("adminId"):
		raise InvalidTokenError("missing_claim:adminId")
	return payload


def decode_session(token: str) -> dict[str, Any]:
	"""Verify a session token issued by the auth provider."""
	audience = settings.auth_jwt_audience
	payload = jwt.decode(
		token,
		settings.auth_jwt_secret,
		algorithms=["HS256"],
		audience=audience,
		leeway=5,
		options={"require": ["exp", "sub"], "verify_aud": bool(audience)},
	)
	return payload
