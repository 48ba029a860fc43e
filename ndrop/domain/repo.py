"""Async repository helpers for the ndrop domain."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Iterable, Mapping, Optional, Sequence

import asyncpg

from ndrop.domain import models
from ndrop.infra.postgres import get_pool

_EVENT_UPDATABLE_COLUMNS = (
	"title",
	"description",
	"location",
	"start_date",
	"end_date",
	"max_participants",
	"image_url",
	"organizer_name",
	"organizer_email",
	"organizer_phone",
	"organizer_kakao",
	"overview_points",
	"target_audience",
	"special_benefits",
	"is_public",
	"status",
)

_PROFILE_UPDATABLE_COLUMNS = (
	"full_name",
	"nickname",
	"email",
	"contact",
	"company",
	"job_title",
	"work_field",
	"affiliation_type",
	"introduction",
	"mbti",
	"birth_date",
	"gender",
	"interest_keywords",
	"profile_image_url",
)
_CARD_UPDATABLE_COLUMNS = (
	"full_name",
	"email",
	"contact",
	"company",
	"role",
	"introduction",
	"profile_image_url",
)


@asynccontextmanager
async def _acquire(conn: asyncpg.Connection | None) -> AsyncIterator[asyncpg.Connection]:
	if conn is not None:
		yield conn
		return
	pool = await get_pool()
	async with pool.acquire() as pooled_conn:
		yield pooled_conn


def escape_like(term: str) -> str:
	"""Escape LIKE wildcards so user input matches literally."""
	return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _ids(values: Iterable[Any]) -> list[str]:
	return [str(value) for value in values]


class NdropRepository:
	"""Thin data-access layer around asyncpg."""

	# --- Events -----------------------------------------------------------

	async def get_event(
		self,
		event_id: str,
		*,
		conn: asyncpg.Connection | None = None,
		for_update: bool = False,
	) -> models.Event | None:
		query = "SELECT * FROM events WHERE id = $1"
		if for_update:
			query += " FOR UPDATE"
		async with _acquire(conn) as connection:
			record = await connection.fetchrow(query, str(event_id))
		return models.Event.model_validate(dict(record)) if record else None

	async def get_event_by_code(
		self,
		event_code: str,
		*,
		conn: asyncpg.Connection | None = None,
	) -> models.Event | None:
		async with _acquire(conn) as connection:
			record = await connection.fetchrow("SELECT * FROM events WHERE event_code = $1", event_code)
		return models.Event.model_validate(dict(record)) if record else None

	async def list_events(self, *, conn: asyncpg.Connection | None = None) -> list[models.Event]:
		async with _acquire(conn) as connection:
			rows = await connection.fetch("SELECT * FROM events ORDER BY created_at DESC")
		return [models.Event.model_validate(dict(row)) for row in rows]

	async def create_event(
		self,
		*,
		event_code: str,
		fields: Mapping[str, Any],
		admin_id: str | None,
		conn: asyncpg.Connection | None = None,
	) -> models.Event:
		"""Insert an event. Raises asyncpg.UniqueViolationError on a code collision."""
		columns = [key for key in _EVENT_UPDATABLE_COLUMNS if key in fields]
		values = [fields[key] for key in columns]
		columns += ["event_code", "admin_created_by", "current_participants"]
		values += [event_code, str(admin_id) if admin_id else None, 0]
		placeholders = ", ".join(f"${idx}" for idx in range(1, len(columns) + 1))
		query = f"INSERT INTO events ({', '.join(columns)}) VALUES ({placeholders}) RETURNING *"
		async with _acquire(conn) as connection:
			record = await connection.fetchrow(query, *values)
		return models.Event.model_validate(dict(record))

	async def update_event(
		self,
		event_id: str,
		fields: Mapping[str, Any],
		*,
		conn: asyncpg.Connection | None = None,
	) -> models.Event | None:
		columns = [key for key in _EVENT_UPDATABLE_COLUMNS if key in fields]
		if not columns:
			return await self.get_event(event_id, conn=conn)
		assignments = ", ".join(f"{column} = ${idx}" for idx, column in enumerate(columns, start=2))
		query = f"UPDATE events SET {assignments}, updated_at = NOW() WHERE id = $1 RETURNING *"
		async with _acquire(conn) as connection:
			record = await connection.fetchrow(query, str(event_id), *(fields[key] for key in columns))
		return models.Event.model_validate(dict(record)) if record else None

	async def delete_event(self, event_id: str, *, conn: asyncpg.Connection | None = None) -> bool:
		async with _acquire(conn) as connection:
			result = await connection.execute("DELETE FROM events WHERE id = $1", str(event_id))
		return result.endswith(" 1")

	async def adjust_participant_count(
		self,
		event_id: str,
		delta: int,
		*,
		conn: asyncpg.Connection,
	) -> models.Event | None:
		"""Apply a relative change to current_participants, floored at zero."""
		record = await conn.fetchrow(
			"""
			UPDATE events
			SET current_participants = GREATEST(current_participants + $2, 0),
				updated_at = NOW()
			WHERE id = $1
			RETURNING *
			""",
			str(event_id),
			delta,
		)
		return models.Event.model_validate(dict(record)) if record else None

	async def recount_participants(
		self,
		event_id: str,
		*,
		conn: asyncpg.Connection,
	) -> tuple[int, int] | None:
		"""Recompute current_participants from live rows; returns (previous, current)."""
		previous = await conn.fetchval(
			"SELECT current_participants FROM events WHERE id = $1 FOR UPDATE",
			str(event_id),
		)
		if previous is None:
			return None
		current = await conn.fetchval(
			"""
			UPDATE events
			SET current_participants = (
				SELECT COUNT(*) FROM event_participants
				WHERE event_id = $1 AND status = ANY($2::text[])
			),
				updated_at = NOW()
			WHERE id = $1
			RETURNING current_participants
			""",
			str(event_id),
			list(models.LIVE_PARTICIPANT_STATUSES),
		)
		return int(previous), int(current)

	# --- Participants -----------------------------------------------------

	async def insert_participant_if_absent(
		self,
		event_id: str,
		user_id: str,
		*,
		conn: asyncpg.Connection,
	) -> models.Participant | None:
		"""Insert a confirmed participation unless a live one exists.

		Returns None when the partial unique index already holds a row.
		"""
		record = await conn.fetchrow(
			"""
			INSERT INTO event_participants (event_id, user_id, status, joined_at)
			VALUES ($1, $2, 'confirmed', NOW())
			ON CONFLICT (event_id, user_id) WHERE status <> 'removed' DO NOTHING
			RETURNING *
			""",
			str(event_id),
			str(user_id),
		)
		return models.Participant.model_validate(dict(record)) if record else None

	async def get_participant(
		self,
		participant_id: str,
		*,
		conn: asyncpg.Connection | None = None,
		for_update: bool = False,
	) -> models.Participant | None:
		query = "SELECT * FROM event_participants WHERE id = $1"
		if for_update:
			query += " FOR UPDATE"
		async with _acquire(conn) as connection:
			record = await connection.fetchrow(query, str(participant_id))
		return models.Participant.model_validate(dict(record)) if record else None

	async def set_participant_status(
		self,
		participant_id: str,
		status: str,
		*,
		conn: asyncpg.Connection,
	) -> models.Participant | None:
		record = await conn.fetchrow(
			"UPDATE event_participants SET status = $2 WHERE id = $1 RETURNING *",
			str(participant_id),
			status,
		)
		return models.Participant.model_validate(dict(record)) if record else None

	async def list_participant_user_ids(
		self,
		event_id: str,
		*,
		statuses: Sequence[str] = ("confirmed",),
		conn: asyncpg.Connection | None = None,
	) -> list[str]:
		async with _acquire(conn) as connection:
			rows = await connection.fetch(
				"""
				SELECT user_id FROM event_participants
				WHERE event_id = $1 AND status = ANY($2::text[])
				ORDER BY joined_at ASC
				""",
				str(event_id),
				list(statuses),
			)
		return [str(row["user_id"]) for row in rows]

	async def list_participant_profiles(
		self,
		event_id: str,
		*,
		statuses: Sequence[str] = ("confirmed",),
		conn: asyncpg.Connection | None = None,
	) -> list[models.ParticipantProfile]:
		async with _acquire(conn) as connection:
			rows = await connection.fetch(
				"""
				SELECT ep.id AS participant_id, ep.event_id, ep.status, ep.joined_at, p.*
				FROM event_participants ep
				JOIN user_profiles p ON p.id = ep.user_id
				WHERE ep.event_id = $1 AND ep.status = ANY($2::text[])
				ORDER BY ep.joined_at ASC
				""",
				str(event_id),
				list(statuses),
			)
		result: list[models.ParticipantProfile] = []
		for row in rows:
			data = dict(row)
			result.append(
				models.ParticipantProfile(
					participant_id=data.pop("participant_id"),
					event_id=data.pop("event_id"),
					status=data.pop("status"),
					joined_at=data.pop("joined_at"),
					profile=models.UserProfile.model_validate(data),
				)
			)
		return result

	async def search_participants(
		self,
		event_id: str,
		*,
		viewer_id: str,
		query: str | None,
		limit: int,
		conn: asyncpg.Connection | None = None,
	) -> list[models.DirectoryProfile]:
		term = (query or "").strip() or None
		pattern = f"%{escape_like(term)}%" if term else None
		async with _acquire(conn) as connection:
			rows = await connection.fetch(
				"""
				SELECT
					p.id,
					p.id AS user_id,
					p.nickname,
					p.role,
					p.job_title,
					p.work_field,
					p.company,
					p.interest_keywords,
					p.profile_image_url,
					p.introduction
				FROM event_participants ep
				JOIN user_profiles p ON p.id = ep.user_id
				WHERE ep.event_id = $1
					AND ep.status <> 'removed'
					AND ep.user_id <> $2
					AND (
						$3::text IS NULL
						OR p.nickname ILIKE $4
						OR p.company ILIKE $4
						OR p.role ILIKE $4
						OR p.job_title ILIKE $4
						OR p.introduction ILIKE $4
						OR $3 = ANY(p.interest_keywords)
					)
				ORDER BY ep.joined_at ASC
				LIMIT $5
				""",
				str(event_id),
				str(viewer_id),
				term,
				pattern,
				limit,
			)
		return [models.DirectoryProfile.model_validate(dict(row)) for row in rows]

	async def delete_event_participants(self, event_id: str, *, conn: asyncpg.Connection | None = None) -> None:
		async with _acquire(conn) as connection:
			await connection.execute("DELETE FROM event_participants WHERE event_id = $1", str(event_id))

	# --- Notifications ----------------------------------------------------

	async def insert_notifications(
		self,
		*,
		user_ids: Sequence[str],
		title: str,
		message: str,
		target_type: str,
		notification_type: str,
		target_event_id: str | None = None,
		metadata: Mapping[str, Any] | None = None,
		sent_by: str | None = None,
		conn: asyncpg.Connection | None = None,
	) -> list[models.Notification]:
		"""Insert one row per user id in a single statement."""
		if not user_ids:
			return []
		async with _acquire(conn) as connection:
			rows = await connection.fetch(
				"""
				INSERT INTO notifications (
					title, message, target_type, user_id, target_event_id,
					notification_type, metadata, sent_by, status
				)
				SELECT $2, $3, $4, uid, $5, $6, $7::jsonb, $8, 'sent'
				FROM unnest($1::uuid[]) AS uid
				RETURNING *
				""",
				_ids(user_ids),
				title,
				message,
				target_type,
				str(target_event_id) if target_event_id else None,
				notification_type,
				json.dumps(dict(metadata or {})),
				str(sent_by) if sent_by else None,
			)
		return [models.Notification.model_validate(dict(row)) for row in rows]

	async def insert_broadcast(
		self,
		*,
		title: str,
		message: str,
		notification_type: str,
		target_event_id: str | None = None,
		metadata: Mapping[str, Any] | None = None,
		sent_by: str | None = None,
		conn: asyncpg.Connection | None = None,
	) -> models.Notification:
		async with _acquire(conn) as connection:
			record = await connection.fetchrow(
				"""
				INSERT INTO notifications (
					title, message, target_type, user_id, target_event_id,
					notification_type, metadata, sent_by, status
				)
				VALUES ($1, $2, 'all', NULL, $3, $4, $5::jsonb, $6, 'sent')
				RETURNING *
				""",
				title,
				message,
				str(target_event_id) if target_event_id else None,
				notification_type,
				json.dumps(dict(metadata or {})),
				str(sent_by) if sent_by else None,
			)
		return models.Notification.model_validate(dict(record))

	async def list_notifications_for_user(
		self,
		user_id: str,
		*,
		limit: int = 100,
		conn: asyncpg.Connection | None = None,
	) -> list[models.Notification]:
		async with _acquire(conn) as connection:
			rows = await connection.fetch(
				"""
				SELECT * FROM notifications
				WHERE target_type = 'all' OR user_id = $1
				ORDER BY created_at DESC
				LIMIT $2
				""",
				str(user_id),
				limit,
			)
		return [models.Notification.model_validate(dict(row)) for row in rows]

	async def mark_notification_read(
		self,
		notification_id: str,
		user_id: str,
		*,
		conn: asyncpg.Connection | None = None,
	) -> models.Notification | None:
		async with _acquire(conn) as connection:
			record = await connection.fetchrow(
				"""
				UPDATE notifications
				SET read_at = COALESCE(read_at, NOW())
				WHERE id = $1 AND (target_type = 'all' OR user_id = $2)
				RETURNING *
				""",
				str(notification_id),
				str(user_id),
			)
		return models.Notification.model_validate(dict(record)) if record else None

	async def mark_all_read(self, user_id: str, *, conn: asyncpg.Connection | None = None) -> int:
		async with _acquire(conn) as connection:
			result = await connection.execute(
				"""
				UPDATE notifications
				SET read_at = NOW()
				WHERE read_at IS NULL AND (target_type = 'all' OR user_id = $1)
				""",
				str(user_id),
			)
		return int(result.split()[-1])

	async def delete_event_notifications(self, event_id: str, *, conn: asyncpg.Connection | None = None) -> None:
		async with _acquire(conn) as connection:
			await connection.execute("DELETE FROM notifications WHERE target_event_id = $1", str(event_id))

	# --- Business cards ---------------------------------------------------

	async def get_card(self, card_id: str, *, conn: asyncpg.Connection | None = None) -> models.BusinessCard | None:
		async with _acquire(conn) as connection:
			record = await connection.fetchrow("SELECT * FROM business_cards WHERE id = $1", str(card_id))
		return models.BusinessCard.model_validate(dict(record)) if record else None

	async def get_card_by_user(
		self,
		user_id: str,
		*,
		conn: asyncpg.Connection | None = None,
	) -> models.BusinessCard | None:
		async with _acquire(conn) as connection:
			record = await connection.fetchrow("SELECT * FROM business_cards WHERE user_id = $1", str(user_id))
		return models.BusinessCard.model_validate(dict(record)) if record else None

	async def insert_business_card(
		self,
		*,
		user_id: str,
		full_name: str,
		email: str | None,
		profile_image_url: str | None,
		conn: asyncpg.Connection,
	) -> models.BusinessCard | None:
		record = await conn.fetchrow(
			"""
			INSERT INTO business_cards (user_id, full_name, email, contact, company, role,
				introduction, profile_image_url, is_public)
			VALUES ($1, $2, $3, '', '', '', '', $4, TRUE)
			ON CONFLICT (user_id) DO NOTHING
			RETURNING *
			""",
			str(user_id),
			full_name,
			email,
			profile_image_url,
		)
		return models.BusinessCard.model_validate(dict(record)) if record else None

	async def update_card_for_user(
		self,
		user_id: str,
		fields: Mapping[str, Any],
		*,
		conn: asyncpg.Connection | None = None,
	) -> models.BusinessCard | None:
		"""Returns None when the user has no card."""
		columns = [key for key in _CARD_UPDATABLE_COLUMNS if key in fields]
		if not columns:
			return await self.get_card_by_user(user_id, conn=conn)
		assignments = ", ".join(f"{column} = ${idx}" for idx, column in enumerate(columns, start=2))
		query = f"UPDATE business_cards SET {assignments}, updated_at = NOW() WHERE user_id = $1 RETURNING *"
		async with _acquire(conn) as connection:
			record = await connection.fetchrow(query, str(user_id), *(fields[key] for key in columns))
		return models.BusinessCard.model_validate(dict(record)) if record else None

	async def insert_collected_card(
		self,
		collector_id: str,
		card_id: str,
		*,
		conn: asyncpg.Connection | None = None,
	) -> models.CollectedCard | None:
		"""Returns None when the collector already holds the card."""
		async with _acquire(conn) as connection:
			record = await connection.fetchrow(
				"""
				INSERT INTO collected_cards (collector_id, card_id)
				VALUES ($1, $2)
				ON CONFLICT (collector_id, card_id) DO NOTHING
				RETURNING *
				""",
				str(collector_id),
				str(card_id),
			)
		return models.CollectedCard.model_validate(dict(record)) if record else None

	async def list_collected_cards(
		self,
		collector_id: str,
		*,
		conn: asyncpg.Connection | None = None,
	) -> list[models.CollectedCard]:
		async with _acquire(conn) as connection:
			rows = await connection.fetch(
				"""
				SELECT cc.id, cc.collector_id, cc.card_id, cc.is_favorite, cc.memo, cc.collected_at,
					to_jsonb(bc.*) AS card
				FROM collected_cards cc
				JOIN business_cards bc ON bc.id = cc.card_id
				WHERE cc.collector_id = $1 AND bc.user_id <> $1
				ORDER BY cc.collected_at DESC
				""",
				str(collector_id),
			)
		result: list[models.CollectedCard] = []
		for row in rows:
			data = dict(row)
			card = data.pop("card")
			if isinstance(card, str):
				card = json.loads(card)
			data["card"] = models.BusinessCard.model_validate(card) if card else None
			result.append(models.CollectedCard.model_validate(data))
		return result

	async def set_collected_favorite(
		self,
		edge_id: str,
		collector_id: str,
		is_favorite: bool,
		*,
		conn: asyncpg.Connection | None = None,
	) -> bool:
		async with _acquire(conn) as connection:
			result = await connection.execute(
				"UPDATE collected_cards SET is_favorite = $3 WHERE id = $1 AND collector_id = $2",
				str(edge_id),
				str(collector_id),
				is_favorite,
			)
		return result.endswith(" 1")

	async def delete_collected_card(
		self,
		edge_id: str,
		collector_id: str,
		*,
		conn: asyncpg.Connection | None = None,
	) -> bool:
		async with _acquire(conn) as connection:
			result = await connection.execute(
				"DELETE FROM collected_cards WHERE id = $1 AND collector_id = $2",
				str(edge_id),
				str(collector_id),
			)
		return result.endswith(" 1")

	async def delete_self_collected(self, user_id: str, *, conn: asyncpg.Connection | None = None) -> int:
		async with _acquire(conn) as connection:
			result = await connection.execute(
				"""
				DELETE FROM collected_cards
				WHERE collector_id = $1
					AND card_id IN (SELECT id FROM business_cards WHERE user_id = $1)
				""",
				str(user_id),
			)
		return int(result.split()[-1])

	async def count_collections(
		self,
		collector_ids: Sequence[str],
		start: datetime,
		end: datetime,
		*,
		conn: asyncpg.Connection | None = None,
	) -> int:
		async with _acquire(conn) as connection:
			total = await connection.fetchval(
				"""
				SELECT COUNT(*) FROM collected_cards
				WHERE collector_id = ANY($1::uuid[])
					AND collected_at >= $2
					AND collected_at <= $3
				""",
				_ids(collector_ids),
				start,
				end,
			)
		return int(total or 0)

	async def list_collection_times(
		self,
		collector_ids: Sequence[str],
		start: datetime,
		end: datetime,
		*,
		conn: asyncpg.Connection | None = None,
	) -> list[datetime]:
		async with _acquire(conn) as connection:
			rows = await connection.fetch(
				"""
				SELECT collected_at FROM collected_cards
				WHERE collector_id = ANY($1::uuid[])
					AND collected_at >= $2
					AND collected_at <= $3
				ORDER BY collected_at ASC
				""",
				_ids(collector_ids),
				start,
				end,
			)
		return [row["collected_at"] for row in rows]

	# --- Profiles ---------------------------------------------------------

	async def get_profile(self, user_id: str, *, conn: asyncpg.Connection | None = None) -> models.UserProfile | None:
		async with _acquire(conn) as connection:
			record = await connection.fetchrow("SELECT * FROM user_profiles WHERE id = $1", str(user_id))
		return models.UserProfile.model_validate(dict(record)) if record else None

	async def update_profile(
		self,
		user_id: str,
		fields: Mapping[str, Any],
		*,
		conn: asyncpg.Connection | None = None,
	) -> models.UserProfile | None:
		columns = [key for key in _PROFILE_UPDATABLE_COLUMNS if key in fields]
		if not columns:
			return await self.get_profile(user_id, conn=conn)
		assignments = ", ".join(f"{column} = ${idx}" for idx, column in enumerate(columns, start=2))
		query = f"UPDATE user_profiles SET {assignments}, updated_at = NOW() WHERE id = $1 RETURNING *"
		async with _acquire(conn) as connection:
			record = await connection.fetchrow(query, str(user_id), *(fields[key] for key in columns))
		return models.UserProfile.model_validate(dict(record)) if record else None

	async def insert_profile_if_absent(
		self,
		*,
		user_id: str,
		full_name: str,
		email: str | None,
		role: str,
		role_id: int,
		profile_image_url: str | None,
		conn: asyncpg.Connection,
	) -> models.UserProfile | None:
		"""Returns None when a concurrent provisioning already created the row."""
		record = await conn.fetchrow(
			"""
			INSERT INTO user_profiles (id, full_name, email, contact, company, role, role_id,
				introduction, mbti, interest_keywords, profile_image_url)
			VALUES ($1, $2, $3, '', '', $4, $5, '', '', '{}', $6)
			ON CONFLICT (id) DO NOTHING
			RETURNING *
			""",
			str(user_id),
			full_name,
			email,
			role,
			role_id,
			profile_image_url,
		)
		return models.UserProfile.model_validate(dict(record)) if record else None

	# --- Admin accounts ---------------------------------------------------

	async def get_admin_by_username(
		self,
		username: str,
		*,
		conn: asyncpg.Connection | None = None,
	) -> models.AdminAccount | None:
		async with _acquire(conn) as connection:
			record = await connection.fetchrow(
				"SELECT * FROM admin_accounts WHERE lower(username) = lower($1)",
				username,
			)
		return models.AdminAccount.model_validate(dict(record)) if record else None

	async def record_admin_login(
		self,
		admin_id: str,
		*,
		password_hash: str | None = None,
		conn: asyncpg.Connection | None = None,
	) -> None:
		async with _acquire(conn) as connection:
			await connection.execute(
				"""
				UPDATE admin_accounts
				SET last_login_at = NOW(),
					password_hash = COALESCE($2, password_hash),
					updated_at = NOW()
				WHERE id = $1
				""",
				str(admin_id),
				password_hash,
			)

	async def upsert_admin(
		self,
		*,
		username: str,
		password_hash: str,
		full_name: str | None,
		conn: asyncpg.Connection | None = None,
	) -> models.AdminAccount:
		async with _acquire(conn) as connection:
			record = await connection.fetchrow(
				"""
				INSERT INTO admin_accounts (username, password_hash, full_name, role, role_id)
				VALUES ($1, $2, $3, 'admin', 2)
				ON CONFLICT (username) DO UPDATE
				SET password_hash = EXCLUDED.password_hash,
					full_name = COALESCE(EXCLUDED.full_name, admin_accounts.full_name),
					updated_at = NOW()
				RETURNING *
				""",
				username,
				password_hash,
				full_name,
			)
		return models.AdminAccount.model_validate(dict(record))

	# --- Feedback, meetings, slots ----------------------------------------

	async def delete_event_feedback(self, event_id: str, *, conn: asyncpg.Connection | None = None) -> None:
		async with _acquire(conn) as connection:
			await connection.execute("DELETE FROM feedback WHERE event_id = $1", str(event_id))

	async def average_feedback_rating(self, event_id: str, *, conn: asyncpg.Connection | None = None) -> Optional[float]:
		async with _acquire(conn) as connection:
			value = await connection.fetchval(
				"SELECT AVG(rating)::float FROM feedback WHERE event_id = $1 AND rating IS NOT NULL",
				str(event_id),
			)
		return float(value) if value is not None else None

	async def meeting_stats(self, event_id: str, *, conn: asyncpg.Connection | None = None) -> tuple[int, int]:
		"""Returns (distinct message senders, messages exchanged) across the event's meetings."""
		async with _acquire(conn) as connection:
			record = await connection.fetchrow(
				"""
				SELECT COUNT(DISTINCT m.sender_id) AS senders, COUNT(*) AS messages
				FROM event_meeting_messages m
				JOIN event_meetings em ON em.id = m.meeting_id
				WHERE em.event_id = $1
				""",
				str(event_id),
			)
		if not record:
			return 0, 0
		return int(record["senders"] or 0), int(record["messages"] or 0)

	async def list_time_slots(self, event_id: str, *, conn: asyncpg.Connection | None = None) -> list[models.TimeSlot]:
		async with _acquire(conn) as connection:
			rows = await connection.fetch(
				"""
				SELECT s.*, EXISTS (
					SELECT 1 FROM event_meetings m
					WHERE m.slot_id = s.id AND m.status = 'confirmed'
				) AS is_booked
				FROM event_time_slots s
				WHERE s.event_id = $1 AND s.is_blocked = FALSE
				ORDER BY s.start_time ASC
				""",
				str(event_id),
			)
		return [models.TimeSlot.model_validate(dict(row)) for row in rows]
