# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the LivePrompt API:
# - test_models.py: Pydantic model validation
# - test_transcription.py / test_analyst.py: AssemblyAI and OpenAI clients
# - test_processing_service.py: The processing pipeline and report building
# - test_job_service.py: Job CRUD and storage against a mocked Supabase
# - test_audio_routes.py / test_auth_routes.py: HTTP endpoints
# - test_health.py: Health, readiness and liveness endpoints
# - test_client.py: Python client and status polling
#
# Run tests with: pytest
# =============================================================================
