# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase operations.
# It implements the singleton pattern to reuse a single service-role client
# and hands out short-lived anon clients for Supabase Auth flows:
# - Service client: audio_jobs table and Storage (bypasses RLS)
# - Auth client: sign-up / sign-in / refresh, one per call so that
#   no user session leaks between requests
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   job = SupabaseClient.fetch_job(job_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.utils import ApplicationError, normalize_uuid

# Set up logging for this module
logger = logging.getLogger(__name__)

JOBS_TABLE = "audio_jobs"

# PostgREST code returned by .single() when no row matches
NO_ROWS_CODE = "PGRST116"


class SupabaseClientError(ApplicationError):
    """Error during Supabase operations."""

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)


class SupabaseClient:
    """
    Typed wrapper for Supabase operations.

    Implements singleton pattern - one service client instance is shared
    across the application. All methods are class methods for easy access
    without instantiation.

    Example:
        job = SupabaseClient.fetch_job("550e8400-...")
        if job is None:
            ...  # not found
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Ownership is enforced in the service layer instead.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def create_auth_client(cls) -> Client:
        """
        Create a fresh anon-key client for Supabase Auth calls.

        Sign-in and refresh store the session on the client object, so each
        auth request gets its own client.

        Raises:
            SupabaseClientError: If client creation fails
        """
        try:
            return create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to create Supabase auth client: {e}",
                code="AUTH_CLIENT_INIT_FAILED",
                suggestion="Check SUPABASE_URL and SUPABASE_ANON_KEY in your .env file"
            )

    # -------------------------------------------------------------------------
    # Audio Jobs
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_job(cls, job_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch an audio job by ID.

        Args:
            job_id: The job UUID

        Returns:
            Job dict with all fields, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        job_id_str = normalize_uuid(job_id)

        try:
            response = (
                client.table(JOBS_TABLE)
                .select("*")
                .eq("id", job_id_str)
                .single()
                .execute()
            )

            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch audio job: {e}",
                code="FETCH_JOB_FAILED",
                suggestion="Check that the audio_jobs table exists and is reachable",
                details={"job_id": job_id_str}
            )
