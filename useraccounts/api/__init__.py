"""HTTP layer - FastAPI application, routers, models and dependencies."""
