# =============================================================================
# core/models/report.py - Report Schemas
# =============================================================================
# Shape of the report_data blob stored on a completed job.
# The processing service builds plain dicts; these models document the
# contract and let the Python client validate what it receives.
# =============================================================================

from typing import Any

from pydantic import BaseModel, Field


class ActionItem(BaseModel):
    """A follow-up task extracted from the conversation."""

    task: str
    assignee: str | None = None
    priority: str = "medium"
    due_date: str | None = None


class TranscriptSegment(BaseModel):
    """One utterance in the report's full transcript (times in ms)."""

    speaker: str
    start: float | None = 0
    end: float | None = 0
    text: str | None = ""
    confidence: float | None = None
    segment_id: int = Field(..., ge=1)


class ReportMetadata(BaseModel):
    duration: float | None = None
    speakers_count: int = 0
    processed_at: str


class Report(BaseModel):
    """
    Rendered report for one job.

    Example:
        {
            "title": "Meeting Discussion Report",
            "executive_summary": "The team agreed to ...",
            "summary_type": "executive",
            "key_points": ["..."],
            "action_items": [{"task": "...", "priority": "medium", ...}],
            "full_transcript": [{"speaker": "A", "segment_id": 1, ...}],
            "metadata": {"duration": 312.5, "speakers_count": 2, "processed_at": "..."}
        }
    """

    title: str
    executive_summary: str = ""
    summary_type: str | None = None
    key_points: list[Any] = Field(default_factory=list)
    action_items: list[ActionItem] = Field(default_factory=list)
    full_transcript: list[TranscriptSegment] = Field(default_factory=list)
    metadata: ReportMetadata
