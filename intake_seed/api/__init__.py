"""HTTP API for intake-seed (FastAPI)."""
