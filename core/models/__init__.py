# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - job.py: Audio job lifecycle and CRUD schemas
# - report.py: Report blob written when processing completes
#
# These models define the "contract" between API and clients.
# =============================================================================

from .job import (
    PROGRESS_BY_STATUS,
    TERMINAL_STATUSES,
    AnalysisType,
    AudioJob,
    JobCreate,
    JobStatus,
    JobUpdate,
    ProcessingOptions,
    ProcessingStatus,
    ProcessingStatusResponse,
    SummaryType,
)
from .report import (
    ActionItem,
    Report,
    ReportMetadata,
    TranscriptSegment,
)

__all__ = [
    # Job
    "PROGRESS_BY_STATUS",
    "TERMINAL_STATUSES",
    "AnalysisType",
    "AudioJob",
    "JobCreate",
    "JobStatus",
    "JobUpdate",
    "ProcessingOptions",
    "ProcessingStatus",
    "ProcessingStatusResponse",
    "SummaryType",
    # Report
    "ActionItem",
    "Report",
    "ReportMetadata",
    "TranscriptSegment",
]
