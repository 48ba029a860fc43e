"""Connection counts, collection timelines and event reports.

A "connection" is a business card collected by one of the event's confirmed
participants while the event was running, i.e. with ``collected_at`` inside
``[start_date, end_date]`` inclusive.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Optional
from zoneinfo import ZoneInfo

from ndrop.domain import models, repo as repo_module
from ndrop.domain.exceptions import NotFoundError, ValidationError
from ndrop.obs import metrics as obs_metrics
from ndrop.settings import settings

logger = logging.getLogger(__name__)

GROUP_BY_CHOICES = ("hour", "day")
_INTEREST_TOP = 6
_ROLE_TOP = 5
_AGE_TOP = 5
_MBTI_TOP = 6


@dataclass(slots=True)
class TimelineBucket:
	date: str
	count: int


@dataclass(slots=True)
class EventReport:
	event_info: dict[str, Any]
	kpi: dict[str, Any]
	checkin_timeline: list[TimelineBucket] = field(default_factory=list)
	analytics: dict[str, list[dict[str, Any]]] = field(default_factory=dict)


def _tz() -> ZoneInfo:
	return ZoneInfo(settings.event_timezone)


def _bucket_key(moment: datetime, group_by: str, tz: ZoneInfo) -> str:
	local = moment.astimezone(tz)
	if group_by == "hour":
		return local.strftime("%Y-%m-%d %H:00")
	return local.strftime("%Y-%m-%d")


def _empty_buckets(start: datetime, end: datetime, group_by: str, tz: ZoneInfo) -> dict[str, int]:
	"""Every hour (or day) from the local start day through the local end day."""
	buckets: dict[str, int] = {}
	day = start.astimezone(tz).date()
	last = end.astimezone(tz).date()
	while day <= last:
		if group_by == "hour":
			for hour in range(24):
				buckets[f"{day.isoformat()} {hour:02d}:00"] = 0
		else:
			buckets[day.isoformat()] = 0
		day += timedelta(days=1)
	return buckets


def age_band(birth_date: Optional[date], *, today: Optional[date] = None) -> Optional[str]:
	if birth_date is None:
		return None
	current_year = (today or date.today()).year
	age = current_year - birth_date.year
	if 20 <= age < 23:
		return "early_20s"
	if 23 <= age < 26:
		return "mid_20s"
	if 26 <= age < 30:
		return "late_20s"
	if age >= 30:
		return "30s_plus"
	return None


def work_label(profile: models.UserProfile) -> Optional[str]:
	job_title = (profile.job_title or "").strip() or None
	work_field = (profile.work_field or "").strip() or None
	if profile.affiliation_type == "affiliated":
		return job_title
	if profile.affiliation_type == "unaffiliated":
		return work_field
	return job_title or work_field


def _top(counter: Counter, limit: int) -> list[dict[str, Any]]:
	return [{"label": label, "value": value} for label, value in counter.most_common(limit)]


def build_analytics(profiles: Iterable[models.UserProfile], *, today: Optional[date] = None) -> dict[str, list[dict[str, Any]]]:
	interests: Counter = Counter()
	roles: Counter = Counter()
	ages: Counter = Counter()
	mbtis: Counter = Counter()
	for profile in profiles:
		for keyword in profile.interest_keywords:
			if keyword:
				interests[keyword] += 1
		label = work_label(profile)
		if label:
			roles[label] += 1
		band = age_band(profile.birth_date, today=today)
		if band:
			ages[band] += 1
		if profile.mbti:
			mbtis[profile.mbti.upper()] += 1
	return {
		"interestStats": _top(interests, _INTEREST_TOP),
		"roleStats": _top(roles, _ROLE_TOP),
		"ageStats": _top(ages, _AGE_TOP),
		"mbtiStats": _top(mbtis, _MBTI_TOP),
	}


class ConnectionService:
	def __init__(self, repository: repo_module.NdropRepository | None = None) -> None:
		self.repo = repository or repo_module.NdropRepository()

	async def _load_event(self, event_id: str) -> models.Event:
		if not event_id:
			raise ValidationError("missing_fields")
		event = await self.repo.get_event(event_id) if models.is_uuid(event_id) else None
		if event is None:
			raise NotFoundError("event_not_found")
		return event

	async def count_connections(self, event_id: str) -> int:
		event = await self._load_event(event_id)
		participant_ids = await self.repo.list_participant_user_ids(event_id, statuses=("confirmed",))
		obs_metrics.inc_connection_query()
		if not participant_ids:
			return 0
		return await self.repo.count_collections(participant_ids, event.start_date, event.end_date)

	async def collection_timeline(self, event_id: str, group_by: str = "hour") -> list[TimelineBucket]:
		"""Collections per hour or day over the event window, zero-filled.

		Empty when nobody confirmed or nothing was collected.
		"""
		if group_by not in GROUP_BY_CHOICES:
			raise ValidationError("invalid_group_by")
		event = await self._load_event(event_id)
		participant_ids = await self.repo.list_participant_user_ids(event_id, statuses=("confirmed",))
		if not participant_ids:
			return []
		moments = await self.repo.list_collection_times(participant_ids, event.start_date, event.end_date)
		if not moments:
			return []
		tz = _tz()
		buckets = _empty_buckets(event.start_date, event.end_date, group_by, tz)
		for moment in moments:
			key = _bucket_key(moment, group_by, tz)
			if key in buckets:
				buckets[key] += 1
		return [TimelineBucket(date=key, count=count) for key, count in sorted(buckets.items())]

	async def event_report(self, event_id: str, *, today: Optional[date] = None) -> EventReport:
		event = await self._load_event(event_id)
		rows = await self.repo.list_participant_profiles(
			event_id,
			statuses=("confirmed", "checked_in", "removed"),
		)
		live = [row for row in rows if row.status in models.LIVE_PARTICIPANT_STATUSES]
		total_registered = len(rows)
		checked_in = len(live)
		base = event.max_participants if event.max_participants > 0 else total_registered
		attendance_rate = round(checked_in / base * 100) if base > 0 else 0

		confirmed_ids = [str(row.profile.id) for row in rows if row.status == "confirmed"]
		connections = 0
		if confirmed_ids:
			connections = await self.repo.count_collections(confirmed_ids, event.start_date, event.end_date)
		senders, messages = await self.repo.meeting_stats(event_id)
		rating = await self.repo.average_feedback_rating(event_id)

		tz = _tz()
		timeline: Counter = Counter(_bucket_key(row.joined_at, "hour", tz) for row in live)
		unique_profiles = {row.profile.id: row.profile for row in rows}

		return EventReport(
			event_info={
				"title": event.title,
				"startDate": event.start_date.isoformat(),
				"endDate": event.end_date.isoformat(),
				"location": event.location or None,
			},
			kpi={
				"attendanceRate": attendance_rate,
				"totalParticipants": total_registered,
				"checkedIn": checked_in,
				"connections": connections,
				"avgConnectionsPerPerson": round(connections / checked_in, 1) if checked_in else 0,
				"messages": messages,
				"satisfaction": rating,
				"networkingParticipants": senders,
				"networkingParticipationRate": round(senders / checked_in * 100) if checked_in else 0,
			},
			checkin_timeline=[TimelineBucket(date=key, count=count) for key, count in sorted(timeline.items())],
			analytics=build_analytics(unique_profiles.values(), today=today),
		)
