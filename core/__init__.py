# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the business logic behind the HTTP layer:
# - models/: Pydantic schemas for jobs and reports
# - services/: Job CRUD, storage, auth and the processing pipeline
#
# Routers stay thin and delegate to these services.
# =============================================================================
