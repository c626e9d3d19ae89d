"""Backend package exposing the FastAPI application (``institut_backend.main:app``)."""
