# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - audio.py: Audio upload, job management and processing endpoints
#
# Auth endpoints live in app/auth/routes.py.
# Each router is mounted in main.py under settings.API_PREFIX.
# =============================================================================

from . import audio
from . import health

__all__ = [
    "audio",
    "health",
]
