from __future__ import annotations

from coach_api.api.routes.coach import router as coach_router
from coach_api.api.routes.health import router as health_router
from coach_api.api.routes.waitlist import router as waitlist_router

__all__ = ["coach_router", "health_router", "waitlist_router"]
