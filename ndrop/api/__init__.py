"""FastAPI routers for the ndrop HTTP surface."""

from __future__ import annotations

from fastapi import APIRouter

from ndrop.api import (
	admin_auth,
	admin_events,
	admin_notifications,
	admin_reports,
	auth,
	event_networking,
	notifications,
	ops,
	saved_cards,
	user_events,
)

router = APIRouter()

router.include_router(auth.router)
router.include_router(admin_auth.router)
router.include_router(user_events.router)
router.include_router(saved_cards.router)
router.include_router(notifications.router)
router.include_router(event_networking.router)
router.include_router(admin_events.router)
router.include_router(admin_notifications.router)
router.include_router(admin_reports.router)
router.include_router(ops.router)

__all__ = ["router"]
