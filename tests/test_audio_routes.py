# =============================================================================
# tests/test_audio_routes.py - Audio Endpoint Tests
# =============================================================================
# Exercises the /api/audio endpoints through FastAPI's TestClient with
# real signed tokens. JobService / StorageService are patched in the
# router module and the ProcessingService dependency is overridden.
# =============================================================================

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from starlette.datastructures import UploadFile as StarletteUploadFile

from app.config import settings
from app.dependencies import get_processing_service
from app.exceptions import JobAccessDeniedError, JobNotFoundError
from app.main import app
from core.services.processing_service import ProcessingService
from tests.conftest import JOB_ID, USER_ID, make_access_token

API = settings.API_PREFIX


@pytest.fixture
def processing():
    service = MagicMock(spec=ProcessingService)
    service.describe_status.side_effect = ProcessingService.describe_status
    app.dependency_overrides[get_processing_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


@pytest.fixture
def client(processing):
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def job_service(sample_job):
    with patch("app.routers.audio.JobService") as mock:
        mock.create_job.return_value = sample_job
        mock.get_job.return_value = sample_job
        yield mock


@pytest.fixture
def storage_service():
    with patch("app.routers.audio.StorageService") as mock:
        yield mock


def audio_file(name="weekly-sync.mp3", content=b"ID3fake-mp3", content_type="audio/mpeg"):
    return {"audio": (name, content, content_type)}


# =============================================================================
# Authentication
# =============================================================================

class TestAuthRequired:
    def test_missing_token(self, client, job_service):
        response = client.get(f"{API}/audio/jobs")

        assert response.status_code == 401

    def test_garbage_token(self, client, job_service):
        response = client.get(f"{API}/audio/jobs", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401

    def test_expired_token(self, client, job_service):
        token = make_access_token(expires_in=-60)

        response = client.get(f"{API}/audio/jobs", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Token has expired"


# =============================================================================
# Upload
# =============================================================================

class TestUpload:
    def test_upload_creates_job(self, client, auth_headers, job_service, storage_service, sample_job):
        response = client.post(f"{API}/audio/upload", files=audio_file(), headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["id"] == JOB_ID

        path = storage_service.upload_audio.call_args.args[0]
        assert path.startswith(f"users/{USER_ID}/audio-")
        assert path.endswith(".mp3")
        kwargs = job_service.create_job.call_args.kwargs
        assert kwargs["filename"] == "weekly-sync.mp3"
        assert kwargs["file_size"] == len(b"ID3fake-mp3")
        assert kwargs["mime_type"] == "audio/mpeg"

    def test_extension_allowed_with_generic_mime(self, client, auth_headers, job_service, storage_service):
        response = client.post(
            f"{API}/audio/upload",
            files=audio_file("memo.m4a", content_type="application/octet-stream"),
            headers=auth_headers,
        )

        assert response.status_code == 201

    def test_invalid_type(self, client, auth_headers, job_service, storage_service):
        response = client.post(
            f"{API}/audio/upload",
            files=audio_file("notes.txt", b"hello", "text/plain"),
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_FILE_TYPE"
        storage_service.upload_audio.assert_not_called()

    def test_missing_file(self, client, auth_headers, job_service, storage_service):
        response = client.post(
            f"{API}/audio/upload",
            files={"document": ("talk.mp3", b"x", "audio/mpeg")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "NO_FILE"

    def test_too_large(self, client, auth_headers, job_service, storage_service, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 1)

        response = client.post(
            f"{API}/audio/upload",
            files=audio_file(content=b"0" * (1024 * 1024 + 1)),
            headers=auth_headers,
        )

        assert response.status_code == 413
        assert response.json()["code"] == "FILE_TOO_LARGE"

    def test_too_large_rejected_before_reading(
        self, client, auth_headers, job_service, storage_service, monkeypatch
    ):
        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 1)

        async def fail_read(self, size=-1):
            raise AssertionError("upload body should not be read")

        monkeypatch.setattr(StarletteUploadFile, "read", fail_read)

        response = client.post(
            f"{API}/audio/upload",
            files=audio_file(content=b"0" * (2 * 1024 * 1024)),
            headers=auth_headers,
        )

        assert response.status_code == 413
        assert response.json()["details"]["size_mb"] == 2.0

    def test_orphan_removed_when_job_insert_fails(self, client, auth_headers, job_service, storage_service):
        job_service.create_job.side_effect = RuntimeError("insert failed")

        response = client.post(f"{API}/audio/upload", files=audio_file(), headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["code"] == "INTERNAL_ERROR"
        stored_path = storage_service.upload_audio.call_args.args[0]
        storage_service.delete_file.assert_called_once_with(stored_path)


class TestProcessAudio:
    def test_upload_and_schedule(self, client, auth_headers, job_service, storage_service, processing, sample_job):
        response = client.post(
            f"{API}/audio/process-audio",
            files=audio_file(),
            data={"analysisType": "meeting", "summaryType": "detailed"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["data"] == {
            "id": JOB_ID,
            "status": "transcribing",
            "filename": "weekly-sync.mp3",
        }

        job_id, file_path, options = processing.process_audio_file.call_args.args
        assert job_id == JOB_ID
        assert file_path == sample_job["file_path"]
        assert options.analysis_type == "meeting"
        assert options.summary_type == "detailed"
        assert options.delete_file_after_processing is True

    def test_invalid_analysis_type(self, client, auth_headers, job_service, storage_service):
        response = client.post(
            f"{API}/audio/process-audio",
            files=audio_file(),
            data={"analysisType": "sentiment"},
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"


# =============================================================================
# Jobs
# =============================================================================

class TestJobs:
    def test_create_job(self, client, auth_headers, job_service):
        response = client.post(
            f"{API}/audio/jobs",
            json={"filename": "talk.mp3", "file_path": "users/u/talk.mp3", "file_size": 100},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert job_service.create_job.call_args.kwargs["file_path"] == "users/u/talk.mp3"

    def test_create_job_validation_envelope(self, client, auth_headers, job_service):
        response = client.post(f"{API}/audio/jobs", json={"filename": "talk.mp3"}, headers=auth_headers)

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "VALIDATION_ERROR"
        assert body["errors"]

    def test_list_jobs(self, client, auth_headers, job_service, sample_job):
        job_service.list_jobs.return_value = [sample_job]

        response = client.get(
            f"{API}/audio/jobs",
            params={"status": "uploaded", "limit": 5, "offset": 10},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["count"] == 1
        kwargs = job_service.list_jobs.call_args.kwargs
        assert kwargs["status"] == "uploaded"
        assert kwargs["limit"] == 5
        assert kwargs["offset"] == 10

    def test_list_limit_bounds(self, client, auth_headers, job_service):
        response = client.get(f"{API}/audio/jobs", params={"limit": 500}, headers=auth_headers)

        assert response.status_code == 422

    def test_get_job(self, client, auth_headers, job_service):
        response = client.get(f"{API}/audio/jobs/{JOB_ID}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["filename"] == "weekly-sync.mp3"
        assert str(job_service.get_job.call_args.kwargs["user_id"]) == USER_ID

    def test_get_foreign_job(self, client, auth_headers, job_service):
        job_service.get_job.side_effect = JobAccessDeniedError(JOB_ID)

        response = client.get(f"{API}/audio/jobs/{JOB_ID}", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["detail"] == "Access denied"

    def test_get_missing_job(self, client, auth_headers, job_service):
        job_service.get_job.side_effect = JobNotFoundError(JOB_ID)

        response = client.get(f"{API}/audio/jobs/{JOB_ID}", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["code"] == "JOB_NOT_FOUND"

    def test_malformed_job_id(self, client, auth_headers, job_service):
        response = client.get(f"{API}/audio/jobs/not-a-uuid", headers=auth_headers)

        assert response.status_code == 422

    def test_patch_ignores_pipeline_fields(self, client, auth_headers, job_service, sample_job):
        job_service.update_job.return_value = {**sample_job, "filename": "renamed.mp3"}

        response = client.patch(
            f"{API}/audio/jobs/{JOB_ID}",
            json={"filename": "renamed.mp3", "report_data": {"title": "forged"}},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["filename"] == "renamed.mp3"
        job_id, updates = job_service.update_job.call_args.args
        assert updates == {"filename": "renamed.mp3"}

    def test_patch_nothing_to_update(self, client, auth_headers, job_service):
        response = client.patch(f"{API}/audio/jobs/{JOB_ID}", json={}, headers=auth_headers)

        assert response.status_code == 200
        job_service.update_job.assert_not_called()

    def test_patch_drops_nulls(self, client, auth_headers, job_service, sample_job):
        job_service.update_job.return_value = {**sample_job, "error_message": "cancelled"}

        response = client.patch(
            f"{API}/audio/jobs/{JOB_ID}",
            json={"filename": None, "status": None, "error_message": "cancelled"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        job_id, updates = job_service.update_job.call_args.args
        assert updates == {"error_message": "cancelled"}

    def test_patch_only_nulls_is_a_no_op(self, client, auth_headers, job_service):
        response = client.patch(
            f"{API}/audio/jobs/{JOB_ID}",
            json={"filename": None, "status": None},
            headers=auth_headers,
        )

        assert response.status_code == 200
        job_service.update_job.assert_not_called()


# =============================================================================
# Processing
# =============================================================================

class TestStartProcessing:
    def test_schedules_processing(self, client, auth_headers, job_service, processing, sample_job):
        response = client.post(
            f"{API}/audio/jobs/{JOB_ID}/process",
            json={"analysisType": "meeting"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"id": JOB_ID, "status": "transcribing"}
        processing.validate_audio_file.assert_called_once_with(sample_job["file_path"])
        job_id, file_path, options = processing.process_audio_file.call_args.args
        assert job_id == JOB_ID
        assert options.analysis_type == "meeting"
        assert options.summary_type == "executive"

    def test_default_options_without_body(self, client, auth_headers, job_service, processing):
        response = client.post(f"{API}/audio/jobs/{JOB_ID}/process", headers=auth_headers)

        assert response.status_code == 200
        options = processing.process_audio_file.call_args.args[2]
        assert options.analysis_type == "comprehensive"
        assert options.delete_file_after_processing is False

    @pytest.mark.parametrize("current", ["transcribing", "analyzing", "completed", "failed"])
    def test_rejects_non_uploaded_job(self, client, auth_headers, job_service, processing, sample_job, current):
        job_service.get_job.return_value = {**sample_job, "status": current}

        response = client.post(f"{API}/audio/jobs/{JOB_ID}/process", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == f"Cannot start processing. Current status: {current}"
        processing.process_audio_file.assert_not_called()

    def test_status(self, client, auth_headers, job_service, sample_job):
        job_service.get_job.return_value = {**sample_job, "status": "analyzing"}

        response = client.get(f"{API}/audio/jobs/{JOB_ID}/status", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "analyzing"
        assert data["progress"] == 70
        assert data["id"] == JOB_ID

    def test_status_shape(self, client, auth_headers, job_service, sample_job):
        job_service.get_job.return_value = {
            **sample_job,
            "status": "failed",
            "error_message": "Transcription failed",
            "transcript_data": {"text": "not part of the status view"},
        }

        response = client.get(f"{API}/audio/jobs/{JOB_ID}/status", headers=auth_headers)

        body = response.json()
        assert body["success"] is True
        assert set(body["data"]) == {
            "id", "status", "progress", "processing_started_at", "processing_completed_at",
            "error_message", "created_at", "updated_at",
        }
        assert body["data"]["progress"] == 0
        assert body["data"]["error_message"] == "Transcription failed"
