"""Import pipeline services (dates, validation, credentials, orchestration)."""
