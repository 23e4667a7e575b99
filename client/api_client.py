# =============================================================================
# client/api_client.py - Python Client for the LivePrompt API
# =============================================================================
# Synchronous httpx client covering the auth and audio endpoints, plus
# a fixed-interval status poller.
#
# Usage:
#   client = LivePromptClient("http://localhost:4000/api")
#   client.login("me@example.com", "secret")
#   job = client.process_audio("standup.mp3", analysis_type="meeting")
#   job = client.poll_job_status(job["id"], on_update=lambda j: print(j["status"]))
#   print(job["report_data"]["executive_summary"])
# =============================================================================

from __future__ import annotations

import logging
import mimetypes
import time
from collections import Counter
from pathlib import Path
from typing import Any, Callable

import httpx

from core.models.job import TERMINAL_STATUSES, JobStatus

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 10.0
DEFAULT_MAX_ATTEMPTS = 100


# =============================================================================
# Exceptions
# =============================================================================

class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(
        self,
        status_code: int,
        message: str,
        code: str | None = None,
        payload: dict[str, Any] | None = None,
    ):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.code = code
        self.payload = payload or {}


class JobNotFound(ApiError):
    """Polled job does not exist (or is not visible to this user)."""


class PollingTimeoutError(Exception):
    """Job did not reach a terminal status within the attempt cap."""

    def __init__(self, job_id: str, attempts: int, last_status: str | None):
        super().__init__(
            f"Polling timeout: job {job_id} still '{last_status}' after {attempts} attempts"
        )
        self.job_id = job_id
        self.attempts = attempts
        self.last_status = last_status


# =============================================================================
# Client
# =============================================================================

class LivePromptClient:
    """
    API client with session handling.

    Tokens from login are kept on the instance. An access token whose
    expires_at has passed is refreshed before the next authenticated call.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:4000/api",
        http_client: httpx.Client | None = None,
        timeout: float = 60.0,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.http = http_client or httpx.Client(timeout=timeout)
        self._clock = clock
        self._sleep = sleep

        self.access_token: str | None = None
        self.refresh_token: str | None = None
        self.expires_at: int | None = None
        self.user: dict[str, Any] | None = None

    # -------------------------------------------------------------------------
    # Plumbing
    # -------------------------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _set_session(self, session: dict[str, Any]) -> None:
        self.access_token = session.get("access_token")
        self.refresh_token = session.get("refresh_token")
        self.expires_at = session.get("expires_at")

    def clear_session(self) -> None:
        self.access_token = None
        self.refresh_token = None
        self.expires_at = None
        self.user = None

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None

    def _token_expired(self) -> bool:
        return self.expires_at is not None and self.expires_at <= self._clock()

    def _auth_headers(self) -> dict[str, str]:
        if self.access_token and self.refresh_token and self._token_expired():
            logger.info("Access token expired, refreshing")
            self.refresh()
        if not self.access_token:
            return {}
        return {"Authorization": f"Bearer {self.access_token}"}

    def _request(
        self,
        method: str,
        path: str,
        auth: bool = True,
        **kwargs: Any,
    ) -> dict[str, Any]:
        headers = self._auth_headers() if auth else {}
        response = self.http.request(method, self._url(path), headers=headers, **kwargs)

        try:
            body = response.json()
        except ValueError:
            body = {"detail": response.text}

        if response.is_error:
            message = body.get("detail") or body.get("error") or response.reason_phrase
            raise ApiError(response.status_code, str(message), code=body.get("code"), payload=body)

        return body

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    def register(
        self,
        email: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"email": email, "password": password}
        if first_name:
            payload["firstName"] = first_name
        if last_name:
            payload["lastName"] = last_name
        return self._request("POST", "/auth/register", auth=False, json=payload)["data"]

    def login(self, email: str, password: str) -> dict[str, Any]:
        """Sign in and keep the session tokens. Returns the user dict."""
        data = self._request(
            "POST", "/auth/login", auth=False, json={"email": email, "password": password}
        )["data"]
        self._set_session(data["session"])
        self.user = data["user"]
        logger.info(f"Logged in as {self.user.get('email')}")
        return self.user

    def logout(self) -> None:
        """Revoke the session server-side. Local tokens are cleared even if that fails."""
        try:
            if self.access_token:
                self._request("POST", "/auth/logout")
        except (ApiError, httpx.HTTPError) as e:
            logger.warning(f"Logout request failed: {e}")
        finally:
            self.clear_session()

    def refresh(self) -> dict[str, Any]:
        """Exchange the refresh token for a new session."""
        if not self.refresh_token:
            raise ApiError(401, "No refresh token available", code="NO_REFRESH_TOKEN")

        data = self._request(
            "POST", "/auth/refresh-token", auth=False, json={"refresh_token": self.refresh_token}
        )["data"]
        self._set_session(data["session"])
        return data["session"]

    def get_profile(self) -> dict[str, Any]:
        return self._request("GET", "/auth/profile")["data"]["user"]

    # -------------------------------------------------------------------------
    # Audio Jobs
    # -------------------------------------------------------------------------

    @staticmethod
    def _audio_file(path: str | Path) -> tuple[str, bytes, str]:
        file_path = Path(path)
        mime_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
        return file_path.name, file_path.read_bytes(), mime_type

    def upload_audio(self, path: str | Path) -> dict[str, Any]:
        """Upload a recording; returns the created job (status "uploaded")."""
        files = {"audio": self._audio_file(path)}
        return self._request("POST", "/audio/upload", files=files)["data"]

    def process_audio(
        self,
        path: str | Path,
        analysis_type: str = "comprehensive",
        summary_type: str = "executive",
    ) -> dict[str, Any]:
        """Upload a recording and start processing in one call."""
        files = {"audio": self._audio_file(path)}
        data = {"analysisType": analysis_type, "summaryType": summary_type}
        return self._request("POST", "/audio/process-audio", files=files, data=data)["data"]

    def create_job(
        self,
        filename: str,
        file_path: str,
        file_size: int | None = None,
        mime_type: str | None = None,
    ) -> dict[str, Any]:
        payload = {
            "filename": filename,
            "file_path": file_path,
            "file_size": file_size,
            "mime_type": mime_type,
        }
        return self._request("POST", "/audio/jobs", json=payload)["data"]

    def list_jobs(
        self,
        status: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"limit": limit, "offset": offset}
        if status:
            params["status"] = status
        return self._request("GET", "/audio/jobs", params=params)["data"]

    def get_job(self, job_id: str) -> dict[str, Any]:
        return self._request("GET", f"/audio/jobs/{job_id}")["data"]

    def update_job(self, job_id: str, **updates: Any) -> dict[str, Any]:
        """PATCH a job. Allowed fields: filename, status, error_message."""
        return self._request("PATCH", f"/audio/jobs/{job_id}", json=updates)["data"]

    def start_processing(
        self,
        job_id: str,
        analysis_type: str = "comprehensive",
        summary_type: str = "executive",
    ) -> dict[str, Any]:
        payload = {"analysisType": analysis_type, "summaryType": summary_type}
        return self._request("POST", f"/audio/jobs/{job_id}/process", json=payload)["data"]

    def get_processing_status(self, job_id: str) -> dict[str, Any]:
        return self._request("GET", f"/audio/jobs/{job_id}/status")["data"]

    # -------------------------------------------------------------------------
    # Polling
    # -------------------------------------------------------------------------

    def poll_job_status(
        self,
        job_id: str,
        interval: float = DEFAULT_POLL_INTERVAL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        on_update: Callable[[dict[str, Any]], None] | None = None,
    ) -> dict[str, Any]:
        """
        Re-fetch a job every `interval` seconds until it is completed or failed.

        Args:
            job_id: Job to watch
            interval: Seconds between fetches
            max_attempts: Give up after this many fetches
            on_update: Called with every fetched job

        Returns:
            The job in its terminal state

        Raises:
            JobNotFound: If the job doesn't exist
            PollingTimeoutError: If max_attempts is reached first
            ApiError: Any other API error
        """
        last_status: str | None = None

        for attempt in range(1, max_attempts + 1):
            try:
                job = self.get_job(job_id)
            except ApiError as e:
                if e.status_code == 404:
                    raise JobNotFound(e.status_code, "Job not found", code=e.code, payload=e.payload)
                raise

            if not job:
                raise JobNotFound(404, "Job not found")

            if on_update:
                on_update(job)

            last_status = job.get("status")
            if last_status in {status.value for status in TERMINAL_STATUSES}:
                logger.info(f"Job {job_id} finished as {last_status} after {attempt} polls")
                return job

            if attempt < max_attempts:
                self._sleep(interval)

        raise PollingTimeoutError(job_id, max_attempts, last_status)

    def summarize_jobs(self, limit: int = 100) -> dict[str, int]:
        """
        Dashboard counts for the user's most recent jobs.

        Returns:
            {"total", "completed", "processing", "failed", "uploaded"}
        """
        counts = Counter(job.get("status") for job in self.list_jobs(limit=limit))
        total = sum(counts.values())
        return {
            "total": total,
            "completed": counts[JobStatus.COMPLETED.value],
            "processing": counts[JobStatus.TRANSCRIBING.value] + counts[JobStatus.ANALYZING.value],
            "failed": counts[JobStatus.FAILED.value],
            "uploaded": counts[JobStatus.UPLOADED.value],
        }
