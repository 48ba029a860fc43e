"""Custom exceptions for ndrop services."""

from __future__ import annotations

from fastapi import status


class NdropError(Exception):
	"""Base class for domain errors surfaced to API callers."""

	status_code: int = status.HTTP_400_BAD_REQUEST
	detail: str = "bad_request"

	def __init__(self, detail: str | None = None) -> None:
		super().__init__(detail or self.detail)
		if detail:
			self.detail = detail


class UnauthorizedError(NdropError):
	"""Credential missing or unverifiable."""

	status_code = status.HTTP_401_UNAUTHORIZED
	detail = "unauthorized"


class ForbiddenError(NdropError):
	"""Raised when authorization fails."""

	status_code = status.HTTP_403_FORBIDDEN
	detail = "forbidden"


class NotFoundError(NdropError):
	"""Thrown when a resource is missing."""

	status_code = status.HTTP_404_NOT_FOUND
	detail = "not_found"


class ValidationError(NdropError):
	"""Raised for validation errors not covered by request schema validation."""

	status_code = status.HTTP_400_BAD_REQUEST
	detail = "validation_error"


class AlreadyJoinedError(ValidationError):
	"""The user already holds a live participation for the event."""

	detail = "already_joined"


class RateLimitedError(NdropError):
	status_code = status.HTTP_429_TOO_MANY_REQUESTS
	detail = "too_many_attempts"


class InternalError(NdropError):
	"""A persistence failure; the cause is logged where it is raised."""

	status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
	detail = "server_error"
