"""Domain models for ndrop rows."""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

LIVE_PARTICIPANT_STATUSES = ("confirmed", "checked_in")


def is_uuid(value: Any) -> bool:
	try:
		UUID(str(value))
	except ValueError:
		return False
	return True


class Event(BaseModel):
	"""An admin-created networking event."""

	id: UUID
	title: str
	description: str = ""
	location: str = ""
	start_date: datetime
	end_date: datetime
	max_participants: int = 0
	current_participants: int = 0
	status: str = "upcoming"
	event_code: str
	image_url: Optional[str] = None
	organizer_name: Optional[str] = None
	organizer_email: Optional[str] = None
	organizer_phone: Optional[str] = None
	organizer_kakao: Optional[str] = None
	overview_points: list[str] = []
	target_audience: list[str] = []
	special_benefits: list[str] = []
	is_public: bool = True
	created_by: Optional[UUID] = None
	admin_created_by: Optional[UUID] = None
	created_at: datetime
	updated_at: datetime

	model_config = ConfigDict(from_attributes=True)

	@field_validator("event_code", mode="before")
	@classmethod
	def _strip_code(cls, value: Any) -> Any:
		return value.strip() if isinstance(value, str) else value

	@field_validator("overview_points", "target_audience", "special_benefits", mode="before")
	@classmethod
	def _null_list(cls, value: Any) -> Any:
		return [] if value is None else value


class Participant(BaseModel):
	"""A user's participation in an event."""

	id: UUID
	event_id: UUID
	user_id: UUID
	status: str
	joined_at: datetime
	created_at: Optional[datetime] = None

	model_config = ConfigDict(from_attributes=True)

	@property
	def is_live(self) -> bool:
		return self.status in LIVE_PARTICIPANT_STATUSES


class Notification(BaseModel):
	id: UUID
	title: str
	message: str
	target_type: str
	user_id: Optional[UUID] = None
	target_event_id: Optional[UUID] = None
	notification_type: str = "announcement"
	metadata: dict[str, Any] = {}
	sent_by: Optional[UUID] = None
	sent_date: Optional[datetime] = None
	status: str = "sent"
	read_at: Optional[datetime] = None
	created_at: datetime

	model_config = ConfigDict(from_attributes=True)

	@field_validator("metadata", mode="before")
	@classmethod
	def _decode_metadata(cls, value: Any) -> Any:
		if value is None:
			return {}
		if isinstance(value, (str, bytes)):
			return json.loads(value)
		return value


class UserProfile(BaseModel):
	id: UUID
	full_name: str = ""
	nickname: Optional[str] = None
	email: Optional[str] = None
	contact: Optional[str] = None
	company: Optional[str] = None
	role: str = "user"
	role_id: int = 1
	job_title: Optional[str] = None
	work_field: Optional[str] = None
	affiliation_type: Optional[str] = None
	introduction: Optional[str] = None
	mbti: Optional[str] = None
	birth_date: Optional[date] = None
	gender: Optional[str] = None
	interest_keywords: list[str] = []
	profile_image_url: Optional[str] = None
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None

	model_config = ConfigDict(from_attributes=True)

	@field_validator("interest_keywords", mode="before")
	@classmethod
	def _null_list(cls, value: Any) -> Any:
		return [] if value is None else value

	@property
	def position(self) -> Optional[str]:
		"""Job title for affiliated users, work field otherwise."""
		if self.affiliation_type == "affiliated":
			return self.job_title
		return self.work_field


class DirectoryProfile(BaseModel):
	"""What one attendee may see of another in the event directory."""

	id: UUID
	user_id: UUID
	nickname: Optional[str] = None
	role: Optional[str] = None
	job_title: Optional[str] = None
	work_field: Optional[str] = None
	company: Optional[str] = None
	interest_keywords: list[str] = []
	profile_image_url: Optional[str] = None
	introduction: Optional[str] = None

	model_config = ConfigDict(from_attributes=True)

	@field_validator("interest_keywords", mode="before")
	@classmethod
	def _null_list(cls, value: Any) -> Any:
		return [] if value is None else value


class BusinessCard(BaseModel):
	id: UUID
	user_id: UUID
	full_name: str = ""
	email: Optional[str] = None
	contact: Optional[str] = None
	company: Optional[str] = None
	role: Optional[str] = None
	introduction: Optional[str] = None
	profile_image_url: Optional[str] = None
	is_public: bool = True
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None

	model_config = ConfigDict(from_attributes=True)


class CollectedCard(BaseModel):
	"""A directed edge from a collector to somebody else's business card."""

	id: UUID
	collector_id: UUID
	card_id: UUID
	is_favorite: bool = False
	memo: Optional[str] = None
	collected_at: datetime
	card: Optional[BusinessCard] = None

	model_config = ConfigDict(from_attributes=True)


class AdminAccount(BaseModel):
	id: UUID
	username: str
	password_hash: str
	full_name: Optional[str] = None
	role: str = "admin"
	role_id: int = 2
	is_active: bool = True
	last_login_at: Optional[datetime] = None

	model_config = ConfigDict(from_attributes=True)


class TimeSlot(BaseModel):
	id: UUID
	event_id: UUID
	start_time: datetime
	end_time: datetime
	location: Optional[str] = None
	is_blocked: bool = False
	is_booked: bool = False

	model_config = ConfigDict(from_attributes=True)


class ParticipantProfile(BaseModel):
	"""A participation joined with the participant's profile."""

	participant_id: UUID
	event_id: UUID
	status: str
	joined_at: datetime
	profile: UserProfile

	model_config = ConfigDict(from_attributes=True)
