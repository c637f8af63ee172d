"""API layer - FastAPI application, routes and request admission."""
