# =============================================================================
# core/services/job_service.py - Audio Job Business Logic
# =============================================================================
# Handles audio_jobs CRUD and ownership checks.
# Separates HTTP concerns from database/business logic.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import JOBS_TABLE, SupabaseClient
from lib.utils import normalize_uuid, utc_now_iso
from core.models.job import JobStatus
from app.exceptions import JobAccessDeniedError, JobNotFoundError

logger = logging.getLogger(__name__)


class JobService:
    """
    Service for audio job operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def create_job(
        user_id: UUID | str,
        filename: str,
        file_path: str,
        file_size: int | None = None,
        mime_type: str | None = None,
    ) -> dict[str, Any]:
        """
        Insert a new job in "uploaded" status.

        Returns:
            Created job row

        Raises:
            Exception: If the insert fails
        """
        client = SupabaseClient.get_client()

        data = {
            "user_id": normalize_uuid(user_id),
            "filename": filename,
            "file_path": file_path,
            "file_size": file_size,
            "mime_type": mime_type,
            "status": JobStatus.UPLOADED.value,
        }

        try:
            response = client.table(JOBS_TABLE).insert(data).execute()

            if response.data:
                job = response.data[0]
                logger.info(f"Created audio job: {job['id']} for user: {user_id}")
                return job

            raise Exception("Insert returned no data")

        except Exception as e:
            logger.error(f"Failed to create audio job: {e}")
            raise

    @staticmethod
    def get_job(
        job_id: str | UUID,
        user_id: UUID | str | None = None,
    ) -> dict[str, Any]:
        """
        Get a job by ID.

        Args:
            job_id: The job UUID
            user_id: If provided, verify the job belongs to this user

        Raises:
            JobNotFoundError: If the job doesn't exist
            JobAccessDeniedError: If it belongs to another user
        """
        job_id_str = normalize_uuid(job_id)
        job = SupabaseClient.fetch_job(job_id_str)

        if not job:
            raise JobNotFoundError(job_id_str)

        if user_id and str(job.get("user_id")) != str(user_id):
            logger.warning(f"User {user_id} denied access to job {job_id_str}")
            raise JobAccessDeniedError(job_id_str)

        return job

    @staticmethod
    def list_jobs(
        user_id: UUID | str,
        status: JobStatus | str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """
        List a user's jobs, newest first.

        Args:
            user_id: Owner
            status: Optional status filter
            limit: Page size
            offset: Rows to skip
        """
        client = SupabaseClient.get_client()

        query = (
            client.table(JOBS_TABLE)
            .select("*")
            .eq("user_id", normalize_uuid(user_id))
        )
        if status:
            query = query.eq("status", status.value if isinstance(status, JobStatus) else status)

        try:
            response = (
                query.order("created_at", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
            return response.data or []

        except Exception as e:
            logger.error(f"Failed to list audio jobs: {e}")
            raise

    @staticmethod
    def update_job(
        job_id: str | UUID,
        updates: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Apply a partial update. updated_at is always refreshed.

        Returns:
            Updated job row, or None if no row matched
        """
        client = SupabaseClient.get_client()
        job_id_str = normalize_uuid(job_id)

        data = {
            key: value.value if isinstance(value, JobStatus) else value
            for key, value in updates.items()
        }
        data["updated_at"] = utc_now_iso()

        try:
            response = (
                client.table(JOBS_TABLE)
                .update(data)
                .eq("id", job_id_str)
                .execute()
            )
            return response.data[0] if response.data else None

        except Exception as e:
            logger.error(f"Failed to update audio job {job_id_str}: {e}")
            raise

    @staticmethod
    def update_job_status(
        job_id: str | UUID,
        status: JobStatus | str,
        **extra: Any,
    ) -> dict[str, Any] | None:
        """
        Set a job's status plus any extra columns.

        processing_completed_at is stamped on completion unless given.
        """
        status_value = status.value if isinstance(status, JobStatus) else status
        updates = {"status": status_value, **extra}
        if status_value == JobStatus.COMPLETED.value:
            updates.setdefault("processing_completed_at", utc_now_iso())

        job = JobService.update_job(job_id, updates)
        logger.info(f"Job {job_id} -> {status_value}")
        return job
