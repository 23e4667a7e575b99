# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends() and can be
# swapped in tests via app.dependency_overrides.
# =============================================================================

from typing import Annotated

from fastapi import Depends

from core.services.processing_service import ProcessingService


def get_processing_service() -> ProcessingService:
    """
    Get a processing service.

    Remote clients inside it are created lazily, so this is cheap.
    """
    return ProcessingService()


# Type alias for dependency injection
ProcessingServiceDep = Annotated[ProcessingService, Depends(get_processing_service)]
