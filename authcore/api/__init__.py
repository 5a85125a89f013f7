"""HTTP adapter over the auth core (FastAPI)."""
