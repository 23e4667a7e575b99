# =============================================================================
# lib/transcription.py - AssemblyAI Transcription Client
# =============================================================================
# Thin REST client for AssemblyAI speech-to-text:
# 1. Upload raw audio bytes -> temporary upload_url
# 2. Request a transcript with diarization and audio intelligence features
# 3. Poll until the transcript is completed (or errors)
# 4. Normalize the response into the transcript_data stored on a job
#
# Usage:
#   from lib.transcription import TranscriptionService
#   transcript = TranscriptionService().transcribe_audio(audio_bytes)
#   print(transcript["text"], len(transcript["speakers"]))
# =============================================================================

from __future__ import annotations

import logging
import time
from typing import Any, Callable

import httpx

from app.config import settings
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)


class TranscriptionError(ApplicationError):
    """Error talking to the speech-to-text API."""

    def __init__(
        self,
        message: str,
        code: str = "TRANSCRIPTION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)


class TranscriptionService:
    """
    AssemblyAI client with speaker diarization.

    Speaker count is left to AssemblyAI's auto-detection; chapters,
    sentiment, entities, topic categories and language are requested so
    the analysis step has more to work with.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        poll_interval: float | None = None,
        timeout: float | None = None,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.api_key = api_key if api_key is not None else settings.ASSEMBLYAI_API_KEY
        self.base_url = (base_url or settings.ASSEMBLYAI_BASE_URL).rstrip("/")
        self.poll_interval = poll_interval if poll_interval is not None else settings.TRANSCRIPTION_POLL_INTERVAL
        self.timeout = timeout if timeout is not None else settings.TRANSCRIPTION_TIMEOUT
        self.http = http_client or httpx.Client(timeout=httpx.Timeout(60.0, read=300.0))
        self._sleep = sleep

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            raise TranscriptionError(
                message="ASSEMBLYAI_API_KEY is not set",
                code="MISSING_API_KEY",
                suggestion="Add ASSEMBLYAI_API_KEY to your .env file",
            )
        return {"authorization": self.api_key}

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        """Send a request and return the decoded JSON body."""
        url = f"{self.base_url}{path}"
        try:
            response = self.http.request(method, url, headers=self._headers(), **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise TranscriptionError(
                message=f"AssemblyAI returned {e.response.status_code}: {e.response.text[:200]}",
                code="API_ERROR",
                suggestion="Check your ASSEMBLYAI_API_KEY and account limits",
                details={"url": url, "status": e.response.status_code},
            )
        except httpx.HTTPError as e:
            raise TranscriptionError(
                message=f"AssemblyAI request failed: {e}",
                code="NETWORK_ERROR",
                suggestion="Check network connectivity to api.assemblyai.com",
                details={"url": url},
            )

    # -------------------------------------------------------------------------
    # Transcript Lifecycle
    # -------------------------------------------------------------------------

    def upload_audio(self, audio: bytes) -> str:
        """Upload audio bytes and return AssemblyAI's temporary URL."""
        body = self._request("POST", "/upload", content=audio)
        # Older responses used "url"
        upload_url = body.get("upload_url") or body.get("url")
        if not upload_url:
            raise TranscriptionError("Upload response did not include an upload_url", code="UPLOAD_FAILED")
        logger.info(f"Uploaded {len(audio)} bytes to AssemblyAI")
        return upload_url

    @staticmethod
    def build_config(audio_url: str) -> dict[str, Any]:
        """Transcript request body."""
        return {
            "audio_url": audio_url,
            "speaker_labels": True,
            "punctuate": True,
            "format_text": True,
            "auto_chapters": True,
            "sentiment_analysis": True,
            "entity_detection": True,
            "iab_categories": True,
            "language_detection": True,
        }

    def request_transcript(self, audio_url: str) -> str:
        """Start a transcription job and return its transcript id."""
        config = self.build_config(audio_url)
        logger.debug(f"AssemblyAI transcript config: {config}")
        body = self._request("POST", "/transcript", json=config)
        return body["id"]

    def get_transcript(self, transcript_id: str) -> dict[str, Any]:
        return self._request("GET", f"/transcript/{transcript_id}")

    def wait_for_transcript(self, transcript_id: str) -> dict[str, Any]:
        """
        Poll a transcript until it completes.

        Raises:
            TranscriptionError: If AssemblyAI reports an error or the
                configured timeout elapses
        """
        deadline = time.monotonic() + self.timeout
        polls = 0

        while True:
            transcript = self.get_transcript(transcript_id)
            status = transcript.get("status")
            polls += 1

            if status == "completed":
                logger.info(f"Transcript {transcript_id} completed after {polls} polls")
                return transcript

            if status == "error":
                raise TranscriptionError(
                    message=f"AssemblyAI transcription failed: {transcript.get('error', 'Unknown error')}",
                    code="TRANSCRIPTION_FAILED",
                    suggestion="Check that the file is a valid, non-silent audio recording",
                    details={"transcript_id": transcript_id},
                )

            if time.monotonic() >= deadline:
                raise TranscriptionError(
                    message=f"Transcript {transcript_id} not ready after {self.timeout:.0f}s",
                    code="TRANSCRIPTION_TIMEOUT",
                    suggestion="Increase TRANSCRIPTION_TIMEOUT for long recordings",
                    details={"transcript_id": transcript_id, "last_status": status},
                )

            if polls % 10 == 0:
                logger.debug(f"Transcript {transcript_id} still {status} (poll #{polls})")
            self._sleep(self.poll_interval)

    def transcribe_audio(self, audio: bytes) -> dict[str, Any]:
        """
        Run the full upload -> transcribe -> poll cycle.

        Returns:
            Normalized transcript data with keys: id, text, confidence,
            audio_duration, speakers, chapters, entities,
            sentiment_analysis_results, iab_categories_result,
            language_code, utterances
        """
        upload_url = self.upload_audio(audio)
        transcript_id = self.request_transcript(upload_url)
        logger.info(f"Transcription job created: {transcript_id}")

        transcript = self.wait_for_transcript(transcript_id)

        return {
            "id": transcript.get("id", transcript_id),
            "text": transcript.get("text") or "",
            "confidence": transcript.get("confidence"),
            "audio_duration": transcript.get("audio_duration"),
            "speakers": self.extract_speaker_data(transcript),
            "chapters": transcript.get("chapters") or [],
            "entities": transcript.get("entities") or [],
            "sentiment_analysis_results": transcript.get("sentiment_analysis_results") or [],
            "iab_categories_result": transcript.get("iab_categories_result") or {},
            "language_code": transcript.get("language_code"),
            "utterances": transcript.get("utterances") or [],
        }

    # -------------------------------------------------------------------------
    # Response Shaping
    # -------------------------------------------------------------------------

    @staticmethod
    def extract_speaker_data(transcript: dict[str, Any]) -> list[dict[str, Any]]:
        """
        Group utterances by speaker.

        Times are in milliseconds, as AssemblyAI reports them.

        Returns:
            One dict per speaker, in order of first appearance:
            speaker_id, total_time, word_count, utterances
        """
        speakers: dict[str, dict[str, Any]] = {}

        for utterance in transcript.get("utterances") or []:
            speaker_id = utterance.get("speaker")
            entry = speakers.setdefault(speaker_id, {
                "speaker_id": speaker_id,
                "total_time": 0,
                "word_count": 0,
                "utterances": [],
            })

            start = utterance.get("start") or 0
            end = utterance.get("end") or 0
            entry["total_time"] += end - start
            entry["word_count"] += len(utterance.get("words") or [])
            entry["utterances"].append({
                "text": utterance.get("text", ""),
                "start": start,
                "end": end,
                "confidence": utterance.get("confidence"),
            })

        return list(speakers.values())
