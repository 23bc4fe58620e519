"""API layer - FastAPI routers, schemas, middleware and dependencies."""
