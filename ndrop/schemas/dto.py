"""Pydantic schemas for the ndrop API.

Request and response bodies keep the camelCase keys the web and admin clients
already send; Python-side names are snake_case with aliases.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ndrop.domain import models


class _Body(BaseModel):
	model_config = ConfigDict(populate_by_name=True)


# --- Participation ------------------------------------------------------


class JoinEventRequest(_Body):
	event_code: Optional[str] = Field(default=None, alias="eventCode")
	event_id: Optional[str] = Field(default=None, alias="eventId")
	user_id: Optional[str] = Field(default=None, alias="userId")


class JoinEventResponse(_Body):
	success: bool = True
	participant: models.Participant
	event: models.Event
	message: str = "joined"


class RemoveParticipantRequest(_Body):
	participant_id: Optional[str] = Field(default=None, alias="participantId")


class EventRefRequest(_Body):
	event_id: Optional[str] = Field(default=None, alias="eventId")


class RecountResponse(_Body):
	success: bool = True
	event_id: str = Field(alias="eventId")
	previous: int
	current: int
	drifted: bool


class ParticipantItem(_Body):
	id: UUID
	user_id: UUID
	status: str
	joined_at: datetime
	full_name: str
	email: Optional[str] = None
	company: Optional[str] = None
	position: Optional[str] = None
	profile_image_url: Optional[str] = None


class ParticipantListResponse(_Body):
	success: bool = True
	participants: List[ParticipantItem]


# --- Notifications ------------------------------------------------------


class SendNoticeRequest(_Body):
	event_id: Optional[str] = Field(default=None, alias="eventId")
	title: Optional[str] = None
	message: Optional[str] = None


class SendNoticeResponse(_Body):
	success: bool = True
	notifications: List[models.Notification]
	target_count: int = Field(alias="targetCount")


class SendNotificationRequest(_Body):
	title: Optional[str] = None
	message: Optional[str] = None
	target_type: str = "all"
	target_event_id: Optional[str] = None
	target_ids: List[str] = Field(default_factory=list)
	notification_type: str = "announcement"


class CreateNotificationRequest(_Body):
	title: Optional[str] = None
	message: Optional[str] = None
	notification_type: Optional[str] = None
	target_user_id: Optional[str] = None
	related_event_id: Optional[str] = None
	metadata: Dict[str, Any] = Field(default_factory=dict)


class NotificationResponse(_Body):
	success: bool = True
	notification: models.Notification


class NotificationListResponse(_Body):
	success: bool = True
	notifications: List[models.Notification]
	unread: int


class MarkAllReadResponse(_Body):
	success: bool = True
	updated: int


# --- Connections & reports ----------------------------------------------


class ConnectionsResponse(_Body):
	success: bool = True
	total_connections: int = Field(alias="totalConnections")


class TimelineRequest(_Body):
	event_id: Optional[str] = Field(default=None, alias="eventId")
	group_by: str = Field(default="hour", alias="groupBy")


class TimelineBucketOut(_Body):
	date: str
	count: int


class TimelineResponse(_Body):
	success: bool = True
	timeline: List[TimelineBucketOut]


class EventReportResponse(_Body):
	event_info: Dict[str, Any] = Field(alias="eventInfo")
	kpi: Dict[str, Any]
	checkin_timeline: List[TimelineBucketOut] = Field(alias="checkinTimeline")
	analytics: Dict[str, List[Dict[str, Any]]]


# --- Events -------------------------------------------------------------


class CreateEventRequest(_Body):
	title: Optional[str] = None
	description: Optional[str] = None
	start_date: Optional[str] = Field(default=None, alias="startDate")
	start_time: Optional[str] = Field(default=None, alias="startTime")
	end_date: Optional[str] = Field(default=None, alias="endDate")
	end_time: Optional[str] = Field(default=None, alias="endTime")
	location: Optional[str] = None
	max_participants: Optional[int] = Field(default=None, alias="maxParticipants")
	image_url: Optional[str] = Field(default=None, alias="imageUrl")
	admin_name: Optional[str] = Field(default=None, alias="adminName")
	overview_points: List[str] = Field(default_factory=list, alias="overviewPoints")
	target_audience: List[str] = Field(default_factory=list, alias="targetAudience")
	special_benefits: List[str] = Field(default_factory=list, alias="specialBenefits")


class UpdateEventRequest(_Body):
	title: Optional[str] = None
	description: Optional[str] = None
	start_date: Optional[datetime] = None
	end_date: Optional[datetime] = None
	location: Optional[str] = None
	max_participants: Optional[int] = None
	image_url: Optional[str] = None
	organizer_name: Optional[str] = None
	organizer_email: Optional[str] = None
	organizer_phone: Optional[str] = None
	organizer_kakao: Optional[str] = None
	overview_points: Optional[List[str]] = None
	target_audience: Optional[List[str]] = None
	special_benefits: Optional[List[str]] = None
	is_public: Optional[bool] = None


class EventResponse(_Body):
	success: bool = True
	event: models.Event
	message: Optional[str] = None


class EventListResponse(_Body):
	success: bool = True
	events: List[models.Event]


class SuccessResponse(_Body):
	success: bool = True
	message: Optional[str] = None


# --- Networking ---------------------------------------------------------


class ParticipantSearchResponse(_Body):
	participants: List[models.DirectoryProfile]


class TimeSlotListResponse(_Body):
	slots: List[models.TimeSlot]


# --- Cards --------------------------------------------------------------


class CollectCardRequest(_Body):
	card_id: Optional[str] = Field(default=None, alias="cardId")


class FavoriteRequest(_Body):
	is_favorite: bool


class SavedCardsResponse(_Body):
	success: bool = True
	user: Dict[str, Any]
	saved_cards: List[models.CollectedCard] = Field(alias="savedCards")


class SavedCardResponse(_Body):
	success: bool = True
	saved_card: models.CollectedCard = Field(alias="savedCard")


class CleanSavedCardsResponse(_Body):
	success: bool = True
	removed: int


class BusinessCardResponse(_Body):
	success: bool = True
	card: models.BusinessCard


# --- Auth ---------------------------------------------------------------


class AdminLoginRequest(_Body):
	username: Optional[str] = None
	password: Optional[str] = None


class AdminOut(_Body):
	id: UUID
	username: str
	full_name: Optional[str] = None
	role: str
	role_id: int


class AdminLoginResponse(_Body):
	success: bool = True
	token: str
	admin: AdminOut


class CreateProfileRequest(_Body):
	user_id: Optional[str] = Field(default=None, alias="userId")
	email: Optional[str] = None
	name: Optional[str] = None
	role_id: Optional[int] = Field(default=None, alias="roleId")


class ProvisionResponse(_Body):
	success: bool = True
	provisioned: bool
	created: bool = False
	role: Optional[str] = None
	profile: Optional[models.UserProfile] = None


class UpdateProfileRequest(_Body):
	user_id: Optional[str] = Field(default=None, alias="userId")
	updates: Optional[Dict[str, Any]] = None


class UpdateProfileResponse(_Body):
	success: bool = True
	message: str = "profile_updated"
	updated_fields: List[str] = Field(default_factory=list, alias="updatedFields")
	data: models.UserProfile
	card: Optional[models.BusinessCard] = None
