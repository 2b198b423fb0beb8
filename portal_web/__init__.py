"""HTTP gateway for the user portal (FastAPI)."""
