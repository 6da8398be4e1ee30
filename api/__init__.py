"""FastAPI routes and dependency providers."""
