# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides sample jobs, transcripts and analyses
# - Signs HS256 access tokens so endpoint tests exercise real JWT checks
# =============================================================================

import os
import time

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-enough-length-123")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("ASSEMBLYAI_API_KEY", "test-assemblyai-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest
from jose import jwt

USER_ID = "11111111-1111-4111-8111-111111111111"
OTHER_USER_ID = "22222222-2222-4222-8222-222222222222"
JOB_ID = "33333333-3333-4333-8333-333333333333"


def make_access_token(user_id: str = USER_ID, email: str = "ada@example.com", expires_in: int = 3600) -> str:
    """Sign a Supabase-style access token with the test secret."""
    now = int(time.time())
    claims = {
        "sub": user_id,
        "email": email,
        "aud": "authenticated",
        "role": "authenticated",
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(claims, os.environ["SUPABASE_JWT_SECRET"], algorithm="HS256")


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def auth_headers():
    """Bearer header for USER_ID."""
    return {"Authorization": f"Bearer {make_access_token()}"}


@pytest.fixture
def sample_job():
    """An audio_jobs row owned by USER_ID, freshly uploaded."""
    return {
        "id": JOB_ID,
        "user_id": USER_ID,
        "filename": "weekly-sync.mp3",
        "file_path": f"users/{USER_ID}/audio-0f1e2d3c.mp3",
        "file_size": 2_048_000,
        "mime_type": "audio/mpeg",
        "status": "uploaded",
        "transcript_id": None,
        "transcript_data": None,
        "analysis_data": None,
        "report_data": None,
        "audio_duration": None,
        "confidence_score": None,
        "speaker_count": None,
        "language_detected": None,
        "error_message": None,
        "processing_started_at": None,
        "processing_completed_at": None,
        "created_at": "2024-05-02T09:00:00+00:00",
        "updated_at": "2024-05-02T09:00:00+00:00",
    }


@pytest.fixture
def raw_transcript():
    """A completed AssemblyAI transcript response."""
    return {
        "id": "tr_abc123",
        "status": "completed",
        "text": "Welcome to the weekly meeting. Let's review the launch plan.",
        "confidence": 0.93,
        "audio_duration": 125.4,
        "language_code": "en_us",
        "utterances": [
            {
                "speaker": "A",
                "text": "Welcome to the weekly meeting.",
                "start": 0,
                "end": 2400,
                "confidence": 0.95,
                "words": [{"text": w} for w in ["Welcome", "to", "the", "weekly", "meeting."]],
            },
            {
                "speaker": "B",
                "text": "Let's review the launch plan.",
                "start": 2600,
                "end": 4600,
                "confidence": 0.91,
                "words": [{"text": w} for w in ["Let's", "review", "the", "launch", "plan."]],
            },
            {
                "speaker": "A",
                "text": "Sounds good.",
                "start": 5000,
                "end": 6000,
                "confidence": 0.97,
                "words": [{"text": "Sounds"}, {"text": "good."}],
            },
        ],
        "chapters": [{"headline": "Launch plan review", "start": 0, "end": 6000}],
        "entities": [{"entity_type": "event", "text": "launch"}],
        "sentiment_analysis_results": [],
        "iab_categories_result": {"status": "success", "results": []},
    }


@pytest.fixture
def transcript_data(raw_transcript):
    """Normalized transcript as stored in transcript_data."""
    return {
        "id": raw_transcript["id"],
        "text": raw_transcript["text"],
        "confidence": raw_transcript["confidence"],
        "audio_duration": raw_transcript["audio_duration"],
        "speakers": [
            {"speaker_id": "A", "total_time": 3400, "word_count": 7, "utterances": []},
            {"speaker_id": "B", "total_time": 2000, "word_count": 5, "utterances": []},
        ],
        "chapters": raw_transcript["chapters"],
        "entities": raw_transcript["entities"],
        "sentiment_analysis_results": [],
        "iab_categories_result": {},
        "language_code": "en_us",
        "utterances": raw_transcript["utterances"],
    }


@pytest.fixture
def comprehensive_analysis():
    """A comprehensive analysis as returned by the model."""
    return {
        "summary": {
            "overview": "Weekly sync reviewing the launch plan.",
            "key_points": ["Launch plan reviewed", "Team aligned on timeline"],
            "main_topics": ["launch"],
            "audio_type": "meeting",
        },
        "content_insights": {
            "sentiment_overview": "positive",
            "key_decisions": ["Ship on Friday"],
            "action_items": [
                {"task": "Update the launch checklist", "assignee": "A", "priority": "high"},
                "Email the beta group",
            ],
        },
    }


@pytest.fixture
def meeting_analysis():
    """A meeting-structure analysis as returned by the model."""
    return {
        "meeting_summary": {"meeting_type": "planning", "duration_minutes": 2, "attendee_count": 2},
        "action_items": [
            {"action": "Book the venue", "assigned_to": "B", "deadline": "Friday"},
            {"description": "Draft the agenda", "responsible": "A"},
            {},
        ],
        "decisions_made": [],
    }
