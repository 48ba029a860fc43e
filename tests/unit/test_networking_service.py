from __future__ import annotations

from uuid import uuid4

import pytest

from ndrop.domain import models
from ndrop.domain.exceptions import NotFoundError
from ndrop.domain.networking_service import NetworkingService
from ndrop.domain.repo import NdropRepository, escape_like


class _FakeRepo:
	def __init__(self, profiles: list[models.DirectoryProfile]) -> None:
		self.profiles = profiles
		self.calls: list[dict] = []

	async def search_participants(self, event_id, *, viewer_id, query, limit, conn=None):
		self.calls.append({"viewer_id": viewer_id, "query": query, "limit": limit})
		return [profile for profile in self.profiles if str(profile.id) != viewer_id][:limit]


def _directory_row(nickname: str) -> models.DirectoryProfile:
	row_id = uuid4()
	return models.DirectoryProfile(id=row_id, user_id=row_id, nickname=nickname)


@pytest.mark.asyncio
async def test_search_excludes_viewer_and_caps_rows() -> None:
	viewer = _directory_row("me")
	others = [_directory_row(f"p{i}") for i in range(1005)]
	repo = _FakeRepo([viewer, *others])

	rows = await NetworkingService(repo).search_participants(str(uuid4()), str(viewer.id), "p1")

	assert len(rows) == 1000
	assert all(row.id != viewer.id for row in rows)
	assert repo.calls == [{"viewer_id": str(viewer.id), "query": "p1", "limit": 1000}]


@pytest.mark.asyncio
async def test_search_unknown_event_id() -> None:
	with pytest.raises(NotFoundError):
		await NetworkingService(_FakeRepo([])).search_participants("DEMO01", str(uuid4()))


class _RecordingConnection:
	def __init__(self, rows: list[dict]) -> None:
		self.rows = rows
		self.sql: list[str] = []

	async def fetch(self, sql, *args):
		self.sql.append(sql)
		return self.rows


@pytest.mark.asyncio
async def test_directory_query_selects_only_public_columns() -> None:
	user_id = uuid4()
	conn = _RecordingConnection(
		[
			{
				"id": user_id,
				"user_id": user_id,
				"nickname": "Joon",
				"role": "user",
				"job_title": "PM",
				"work_field": None,
				"company": "Ndrop",
				"interest_keywords": None,
				"profile_image_url": None,
				"introduction": "hi",
			}
		]
	)

	rows = await NdropRepository().search_participants(
		str(uuid4()), viewer_id=str(uuid4()), query=None, limit=10, conn=conn
	)

	sql = conn.sql[0]
	assert "p.*" not in sql
	for private in ("p.email", "p.contact", "p.birth_date", "p.gender", "p.role_id"):
		assert private not in sql
	dumped = rows[0].model_dump()
	assert "email" not in dumped and "birth_date" not in dumped
	assert dumped["interest_keywords"] == []


def test_escape_like_neutralises_wildcards() -> None:
	assert escape_like("50%_off\\") == "50\\%\\_off\\\\"
