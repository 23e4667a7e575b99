# =============================================================================
# core/models/job.py - Audio Job Schemas
# =============================================================================
# These models define the API contract for audio job operations:
# - JobStatus: Enum for the processing lifecycle
# - JobCreate / JobUpdate: Inputs for creating and patching jobs
# - ProcessingOptions: Which analysis and summary to run
# - AudioJob: Output when returning a job row to clients
# - ProcessingStatus(Response): Output of the lightweight status endpoint
#
# One job = one uploaded recording and everything derived from it.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class JobStatus(str, Enum):
    """
    Possible states for an audio job.

    Flow: uploaded -> transcribing -> analyzing -> completed
    Any step before completed can end in failed.
    """
    UPLOADED = "uploaded"
    TRANSCRIBING = "transcribing"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})

# Rough progress percentage shown for each status
PROGRESS_BY_STATUS: dict[str, int] = {
    JobStatus.UPLOADED.value: 10,
    JobStatus.TRANSCRIBING.value: 40,
    JobStatus.ANALYZING.value: 70,
    JobStatus.COMPLETED.value: 100,
    JobStatus.FAILED.value: 0,
}


class AnalysisType(str, Enum):
    """Structure requested from the analysis model."""
    COMPREHENSIVE = "comprehensive"
    MEETING = "meeting"


class SummaryType(str, Enum):
    """Style of the free-text summary."""
    EXECUTIVE = "executive"
    DETAILED = "detailed"
    BULLET_POINTS = "bullet_points"


class ProcessingOptions(BaseModel):
    """
    Options for one processing run.

    Accepts the camelCase names the web client sends as well as
    snake_case field names.

    Example:
        {"analysisType": "meeting", "summaryType": "bullet_points"}
    """

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True, validate_default=True)

    analysis_type: AnalysisType = Field(
        default=AnalysisType.COMPREHENSIVE,
        alias="analysisType",
        description="comprehensive or meeting"
    )

    summary_type: SummaryType = Field(
        default=SummaryType.EXECUTIVE,
        alias="summaryType",
        description="executive, detailed or bullet_points"
    )

    # Remove the stored recording once processing finishes
    delete_file_after_processing: bool = Field(
        default=False,
        alias="deleteFileAfterProcessing",
    )


class JobCreate(BaseModel):
    """
    Schema for creating a job for a file that is already in storage.

    Example:
        {"filename": "standup.mp3", "file_path": "users/<id>/audio-<hex>.mp3"}
    """

    filename: str = Field(..., min_length=1, max_length=255)
    file_path: str = Field(..., min_length=1)
    file_size: int | None = Field(default=None, ge=0)
    mime_type: str | None = None


class JobUpdate(BaseModel):
    """
    Fields a client may change on its own job.

    Everything else (transcript, analysis, report) is written only by
    the processing pipeline.
    """

    filename: str | None = Field(default=None, min_length=1, max_length=255)
    status: JobStatus | None = None
    error_message: str | None = None


class AudioJob(BaseModel):
    """Full audio job row as returned to clients."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    filename: str
    file_path: str
    file_size: int | None = None
    mime_type: str | None = None
    status: JobStatus

    transcript_id: str | None = None
    transcript_data: dict[str, Any] | None = None
    analysis_data: dict[str, Any] | None = None
    report_data: dict[str, Any] | None = None

    audio_duration: float | None = None
    confidence_score: float | None = None
    speaker_count: int | None = None
    language_detected: str | None = None
    error_message: str | None = None

    processing_started_at: datetime | None = None
    processing_completed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProcessingStatus(BaseModel):
    """
    Returned by GET /audio/jobs/{id}/status.

    Example:
        {"id": "...", "status": "analyzing", "progress": 70, ...}
    """

    id: UUID
    status: JobStatus
    progress: int = Field(..., ge=0, le=100)
    processing_started_at: datetime | None = None
    processing_completed_at: datetime | None = None
    error_message: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProcessingStatusResponse(BaseModel):
    """Envelope for GET /audio/jobs/{id}/status."""

    success: bool = True
    data: ProcessingStatus
