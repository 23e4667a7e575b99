# =============================================================================
# core/services/processing_service.py - Audio Processing Pipeline
# =============================================================================
# Runs one job through the pipeline and records each step on the job row:
#
#   uploaded -> transcribing -> analyzing -> completed
#   (any step may end in failed)
#
# 1. Download the recording from Supabase Storage
# 2. Transcribe it (TranscriptionService / AssemblyAI)
# 3. Analyze and summarize the transcript (AnalystAgent / OpenAI)
# 4. Build the report and mark the job completed
#
# process_audio_file() never raises: failures are written to the job's
# error_message and returned as {"success": False, ...}. It is meant to be
# scheduled with FastAPI BackgroundTasks.
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from agents.analyst import AnalystAgent
from app.config import settings
from app.exceptions import AudioValidationError
from core.models.job import PROGRESS_BY_STATUS, JobStatus, ProcessingOptions
from core.services.job_service import JobService
from core.services.storage_service import StorageService
from lib.transcription import TranscriptionService
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

TITLE_KEYWORD_WINDOW = 50


def _insights(analysis: dict[str, Any]) -> dict[str, Any]:
    """content_insights when the model returned an object, else {}."""
    insights = analysis.get("content_insights")
    return insights if isinstance(insights, dict) else {}


class ProcessingService:
    """
    Orchestrates transcription, analysis and report building for a job.

    The remote clients are created on first use so that constructing the
    service (e.g. as a FastAPI dependency) does not require API keys.
    """

    def __init__(
        self,
        transcriber: TranscriptionService | None = None,
        analyst: AnalystAgent | None = None,
    ):
        self._transcriber = transcriber
        self._analyst = analyst

    @property
    def transcriber(self) -> TranscriptionService:
        if self._transcriber is None:
            self._transcriber = TranscriptionService()
        return self._transcriber

    @property
    def analyst(self) -> AnalystAgent:
        if self._analyst is None:
            self._analyst = AnalystAgent()
        return self._analyst

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------

    def process_audio_file(
        self,
        job_id: str,
        file_path: str,
        options: ProcessingOptions | dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Run the full pipeline for one job.

        Args:
            job_id: Job to process
            file_path: Storage path of the recording
            options: Analysis/summary types and cleanup flag

        Returns:
            {"success": True, "data": {"jobId", "status", "results"}} or
            {"success": False, "error": message, "jobId": job_id}
        """
        if options is None:
            options = ProcessingOptions()
        elif isinstance(options, dict):
            options = ProcessingOptions.model_validate(options)

        try:
            self.update_job_status(job_id, JobStatus.TRANSCRIBING, {
                "processing_started_at": utc_now_iso(),
            })

            # Step 1: Transcribe (speaker count is auto-detected)
            logger.info(f"Starting transcription for job {job_id}")
            audio = StorageService.download_audio(file_path)
            transcript_data = self.transcriber.transcribe_audio(audio)

            try:
                self.update_job_status(job_id, JobStatus.ANALYZING, {
                    "transcript_id": transcript_data.get("id"),
                    "transcript_data": transcript_data,
                    "audio_duration": transcript_data.get("audio_duration"),
                    "confidence_score": transcript_data.get("confidence"),
                    "speaker_count": len(transcript_data.get("speakers") or []),
                    "language_detected": transcript_data.get("language_code"),
                })
            except Exception as e:
                logger.warning(f"Full update failed for job {job_id}, trying basic update: {e}")
                self.update_job_status(job_id, JobStatus.ANALYZING, {
                    "transcript_data": transcript_data,
                })

            # Step 2: Analyze
            logger.info(f"Starting AI analysis for job {job_id}")
            analysis = self.analyst.analyze_transcript(transcript_data, options.analysis_type)

            # Step 3: Summarize
            summary = self.analyst.generate_summary(transcript_data, options.summary_type)

            # Step 4: Save results
            report = self.build_report(transcript_data, analysis, summary)
            self.update_job_status(job_id, JobStatus.COMPLETED, {
                "analysis_data": analysis,
                "report_data": report,
                "processing_completed_at": utc_now_iso(),
            })

            if options.delete_file_after_processing:
                self.cleanup_file(file_path)

            logger.info(f"Processing completed for job {job_id}")
            return {
                "success": True,
                "data": {
                    "jobId": job_id,
                    "status": JobStatus.COMPLETED.value,
                    "results": {
                        "transcript": transcript_data,
                        "analysis": analysis,
                        "summary": summary,
                    },
                },
            }

        except Exception as e:
            error_message = getattr(e, "message", None) or str(e)
            logger.error(f"Processing failed for job {job_id}: {e}")
            self._mark_failed(job_id, error_message)
            return {"success": False, "error": error_message, "jobId": job_id}

    def _mark_failed(self, job_id: str, error_message: str) -> None:
        """Record a failure, falling back to an error-only update."""
        try:
            self.update_job_status(job_id, JobStatus.FAILED, {
                "error_message": error_message,
                "processing_completed_at": utc_now_iso(),
            })
        except Exception as e:
            logger.warning(f"Failed-status update failed for job {job_id}, trying basic update: {e}")
            try:
                self.update_job_status(job_id, JobStatus.FAILED, {"error_message": error_message})
            except Exception as final_error:
                logger.error(f"Could not record failure for job {job_id}: {final_error}")

    def update_job_status(
        self,
        job_id: str,
        status: JobStatus,
        additional_data: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Write a status (plus extra columns) to the job row."""
        return JobService.update_job_status(job_id, status, **(additional_data or {}))

    # -------------------------------------------------------------------------
    # Status & Validation
    # -------------------------------------------------------------------------

    @classmethod
    def describe_status(cls, job: dict[str, Any]) -> dict[str, Any]:
        """Reduce a job row to its status fields plus a progress percentage."""
        return {
            "id": job["id"],
            "status": job["status"],
            "progress": cls.calculate_progress(job["status"]),
            "created_at": job.get("created_at"),
            "updated_at": job.get("updated_at"),
            "processing_started_at": job.get("processing_started_at"),
            "processing_completed_at": job.get("processing_completed_at"),
            "error_message": job.get("error_message"),
        }

    @staticmethod
    def calculate_progress(status: JobStatus | str) -> int:
        value = status.value if isinstance(status, JobStatus) else status
        return PROGRESS_BY_STATUS.get(value, 0)

    @staticmethod
    def validate_audio_file(file_path: str) -> dict[str, Any]:
        """
        Check that a stored recording exists and is within the size limit.

        Returns:
            {"valid": True, "size": bytes, "size_mb": float}

        Raises:
            AudioValidationError: If the object is missing or too large
        """
        try:
            info = StorageService.file_info(file_path)
        except Exception as e:
            raise AudioValidationError(f"File validation failed: {e}", file_path)

        if info is None:
            raise AudioValidationError("File validation failed: file not found", file_path)

        size = info.get("size") or 0
        size_mb = size / (1024 * 1024)
        if size > settings.max_upload_size_bytes:
            raise AudioValidationError(
                f"File size exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit", file_path
            )

        return {"valid": True, "size": size, "size_mb": size_mb}

    @staticmethod
    def cleanup_file(file_path: str) -> bool:
        """Remove a processed recording from storage. Never raises."""
        return StorageService.delete_file(file_path)

    # -------------------------------------------------------------------------
    # Report Building
    # -------------------------------------------------------------------------

    @staticmethod
    def generate_report_title(transcript_data: dict[str, Any]) -> str:
        """Pick a title from keywords in the first 50 words."""
        text = transcript_data.get("text") or ""
        opening = " ".join(text.split(" ")[:TITLE_KEYWORD_WINDOW]).lower()

        if "meeting" in opening or "discussion" in opening:
            return "Meeting Discussion Report"
        if "interview" in opening:
            return "Interview Analysis Report"
        if "presentation" in opening:
            return "Presentation Summary Report"
        return "Conversation Analysis Report"

    @staticmethod
    def format_transcript_for_report(transcript_data: dict[str, Any]) -> list[dict[str, Any]]:
        """
        Convert utterances into numbered report segments.

        Without utterances, the whole text becomes one segment for speaker A.
        """
        utterances = transcript_data.get("utterances") or []
        if utterances:
            return [
                {
                    "speaker": utterance.get("speaker") or "Unknown",
                    "start": utterance.get("start"),
                    "end": utterance.get("end"),
                    "text": utterance.get("text"),
                    "confidence": utterance.get("confidence"),
                    "segment_id": index,
                }
                for index, utterance in enumerate(utterances, start=1)
            ]

        return [{
            "speaker": "A",
            "start": 0,
            "end": transcript_data.get("audio_duration") or 0,
            "text": transcript_data.get("text") or "No transcript available",
            "confidence": transcript_data.get("confidence") or 0,
            "segment_id": 1,
        }]

    @staticmethod
    def format_action_items(analysis: dict[str, Any]) -> list[dict[str, Any]]:
        """
        Normalize action items from either analysis structure.

        Comprehensive analyses nest them under content_insights; meeting
        analyses keep them at the top level. Entries that are neither
        strings nor objects are skipped.
        """
        items = _insights(analysis).get("action_items") or analysis.get("action_items")
        if not isinstance(items, list):
            return []

        normalized = []
        for index, item in enumerate(items, start=1):
            if isinstance(item, str):
                normalized.append({
                    "task": item,
                    "assignee": None,
                    "priority": "medium",
                    "due_date": None,
                })
                continue
            if not isinstance(item, dict):
                continue

            normalized.append({
                "task": item.get("task") or item.get("action") or item.get("description")
                or f"Action item {index}",
                "assignee": item.get("assignee") or item.get("assigned_to") or item.get("responsible"),
                "priority": item.get("priority") or "medium",
                "due_date": item.get("due_date") or item.get("deadline"),
            })
        return normalized

    @staticmethod
    def extract_key_points(analysis: dict[str, Any]) -> list[Any]:
        summary = analysis.get("summary")
        if isinstance(summary, dict) and isinstance(summary.get("key_points"), list) and summary["key_points"]:
            return summary["key_points"]

        decisions = _insights(analysis).get("key_decisions")
        return decisions if isinstance(decisions, list) else []

    @classmethod
    def build_report(
        cls,
        transcript_data: dict[str, Any],
        analysis: dict[str, Any],
        summary: dict[str, Any],
    ) -> dict[str, Any]:
        """Assemble the report_data blob for a completed job."""
        return {
            "title": cls.generate_report_title(transcript_data),
            "executive_summary": summary.get("content", ""),
            "summary_type": summary.get("type"),
            "key_points": cls.extract_key_points(analysis),
            "action_items": cls.format_action_items(analysis),
            "full_transcript": cls.format_transcript_for_report(transcript_data),
            "metadata": {
                "duration": transcript_data.get("audio_duration"),
                "speakers_count": len(transcript_data.get("speakers") or []),
                "processed_at": utc_now_iso(),
            },
        }
