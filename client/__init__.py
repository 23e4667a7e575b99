# =============================================================================
# client/ - Python API Client
# =============================================================================
# Programmatic access to a running LivePrompt API:
# - api_client.py: LivePromptClient (auth, uploads, jobs, status polling)
# =============================================================================

from client.api_client import (
    ApiError,
    JobNotFound,
    LivePromptClient,
    PollingTimeoutError,
)

__all__ = [
    "ApiError",
    "JobNotFound",
    "LivePromptClient",
    "PollingTimeoutError",
]
