# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .auth_service import AuthService
from .job_service import JobService
from .processing_service import ProcessingService
from .storage_service import StorageService

__all__ = [
    "AuthService",
    "JobService",
    "ProcessingService",
    "StorageService",
]
