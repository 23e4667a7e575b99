# =============================================================================
# app/routers/audio.py - Audio Upload & Job Endpoints
# =============================================================================
# Upload recordings, manage audio jobs and start/track processing.
# Every endpoint requires a Bearer token; jobs are visible only to
# their owner (403 otherwise).
#
# Processing runs after the response is sent via BackgroundTasks.
# =============================================================================

import logging
from typing import Annotated, Any, Optional
from uuid import UUID

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Body,
    Depends,
    File,
    Form,
    Path,
    Query,
    UploadFile,
    status,
)

from app.auth import AuthUser, get_current_user
from app.config import settings
from app.dependencies import ProcessingServiceDep
from app.exceptions import (
    FileTooLargeError,
    InvalidFileTypeError,
    InvalidJobStateError,
    MissingFileError,
)
from core.models.job import (
    AnalysisType,
    JobCreate,
    JobStatus,
    JobUpdate,
    ProcessingOptions,
    ProcessingStatusResponse,
    SummaryType,
)
from core.services.job_service import JobService
from core.services.storage_service import StorageService
from lib.audio_files import build_storage_path, format_file_size, is_audio_file

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/audio", tags=["Audio"])

JobIdPath = Annotated[UUID, Path(description="Audio job UUID")]


# =============================================================================
# Helper Functions
# =============================================================================

async def _read_audio_upload(audio: Optional[UploadFile]) -> bytes:
    """
    Validate an uploaded recording and return its bytes.

    Raises:
        MissingFileError: No file in the request
        InvalidFileTypeError: Neither MIME type nor extension is allowed
        FileTooLargeError: Larger than MAX_UPLOAD_SIZE_MB
    """
    if audio is None or not audio.filename:
        raise MissingFileError()

    if not is_audio_file(
        audio.filename,
        audio.content_type,
        settings.allowed_mime_types_list,
        settings.allowed_extensions_list,
    ):
        raise InvalidFileTypeError(audio.filename, settings.allowed_extensions_list)

    # Reject early when the multipart parser already knows the size
    if audio.size is not None and audio.size > settings.max_upload_size_bytes:
        raise FileTooLargeError(audio.size / (1024 * 1024), settings.MAX_UPLOAD_SIZE_MB)

    content = await audio.read()
    if len(content) > settings.max_upload_size_bytes:
        raise FileTooLargeError(len(content) / (1024 * 1024), settings.MAX_UPLOAD_SIZE_MB)

    logger.info(f"Received upload: {audio.filename} ({format_file_size(len(content))})")
    return content


def _store_and_create_job(user: AuthUser, audio: UploadFile, content: bytes) -> dict[str, Any]:
    """Put the recording in storage and create its job row."""
    path = build_storage_path(str(user.id), audio.filename)
    StorageService.upload_audio(path, content, audio.content_type)

    try:
        return JobService.create_job(
            user_id=user.id,
            filename=audio.filename,
            file_path=path,
            file_size=len(content),
            mime_type=audio.content_type,
        )
    except Exception:
        # Don't leave orphaned recordings behind
        StorageService.delete_file(path)
        raise


# =============================================================================
# Upload Endpoints
# =============================================================================

@router.post("/upload", status_code=status.HTTP_201_CREATED)
async def upload_audio(
    audio: Annotated[Optional[UploadFile], File(description="Audio recording")] = None,
    user: AuthUser = Depends(get_current_user),
):
    """
    Upload a recording and create a job in "uploaded" status.

    Processing is started separately via POST /audio/jobs/{id}/process.
    """
    content = await _read_audio_upload(audio)
    job = _store_and_create_job(user, audio, content)

    return {
        "success": True,
        "data": job,
        "message": "Audio file uploaded and job created successfully",
    }


@router.post("/process-audio", status_code=status.HTTP_201_CREATED)
async def process_audio(
    background_tasks: BackgroundTasks,
    processing: ProcessingServiceDep,
    audio: Annotated[Optional[UploadFile], File(description="Audio recording")] = None,
    analysis_type: Annotated[AnalysisType, Form(alias="analysisType")] = AnalysisType.COMPREHENSIVE,
    summary_type: Annotated[SummaryType, Form(alias="summaryType")] = SummaryType.EXECUTIVE,
    user: AuthUser = Depends(get_current_user),
):
    """
    Upload a recording and start processing it immediately.

    The stored recording is deleted once processing finishes.
    """
    content = await _read_audio_upload(audio)
    job = _store_and_create_job(user, audio, content)

    options = ProcessingOptions(
        analysis_type=analysis_type,
        summary_type=summary_type,
        delete_file_after_processing=True,
    )
    background_tasks.add_task(processing.process_audio_file, job["id"], job["file_path"], options)
    logger.info(f"Scheduled processing for job {job['id']}")

    return {
        "success": True,
        "data": {
            "id": job["id"],
            "status": JobStatus.TRANSCRIBING.value,
            "filename": job["filename"],
        },
        "message": "Audio uploaded and processing started",
    }


# =============================================================================
# Job Endpoints
# =============================================================================

@router.post("/jobs", status_code=status.HTTP_201_CREATED)
async def create_job(
    body: JobCreate,
    user: AuthUser = Depends(get_current_user),
):
    """Create a job for a recording that is already in storage."""
    job = JobService.create_job(
        user_id=user.id,
        filename=body.filename,
        file_path=body.file_path,
        file_size=body.file_size,
        mime_type=body.mime_type,
    )
    return {"success": True, "data": job, "message": "Audio job created successfully"}


@router.get("/jobs")
async def list_jobs(
    status_filter: Annotated[Optional[JobStatus], Query(alias="status")] = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    offset: Annotated[int, Query(ge=0)] = 0,
    user: AuthUser = Depends(get_current_user),
):
    """List the caller's jobs, newest first."""
    jobs = JobService.list_jobs(user.id, status=status_filter, limit=limit, offset=offset)
    return {"success": True, "data": jobs, "count": len(jobs)}


@router.get("/jobs/{job_id}")
async def get_job(
    job_id: JobIdPath,
    user: AuthUser = Depends(get_current_user),
):
    job = JobService.get_job(job_id, user_id=user.id)
    return {"success": True, "data": job}


@router.patch("/jobs/{job_id}")
async def update_job(
    job_id: JobIdPath,
    body: JobUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """Rename a job or set its status / error message."""
    job = JobService.get_job(job_id, user_id=user.id)

    updates = body.model_dump(exclude_unset=True, exclude_none=True, mode="json")
    if updates:
        job = JobService.update_job(job_id, updates) or job

    return {"success": True, "data": job, "message": "Job updated successfully"}


@router.post("/jobs/{job_id}/process")
async def start_processing(
    job_id: JobIdPath,
    background_tasks: BackgroundTasks,
    processing: ProcessingServiceDep,
    options: Annotated[Optional[ProcessingOptions], Body()] = None,
    user: AuthUser = Depends(get_current_user),
):
    """
    Start processing an uploaded job.

    Raises:
        400: Job is not in "uploaded" status, or its recording is
            missing / too large
    """
    job = JobService.get_job(job_id, user_id=user.id)

    if job["status"] != JobStatus.UPLOADED.value:
        raise InvalidJobStateError(str(job_id), job["status"])

    processing.validate_audio_file(job["file_path"])

    background_tasks.add_task(
        processing.process_audio_file,
        job["id"],
        job["file_path"],
        options or ProcessingOptions(),
    )
    logger.info(f"Scheduled processing for job {job['id']}")

    return {
        "success": True,
        "data": {"id": job["id"], "status": JobStatus.TRANSCRIBING.value},
        "message": "Processing started",
    }


@router.get("/jobs/{job_id}/status", response_model=ProcessingStatusResponse)
async def get_processing_status(
    job_id: JobIdPath,
    processing: ProcessingServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """Status, progress percentage and timestamps for a job."""
    job = JobService.get_job(job_id, user_id=user.id)

    return {"success": True, "data": processing.describe_status(job)}
