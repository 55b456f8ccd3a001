"""Health check endpoint."""

from datetime import UTC, datetime

from fastapi import APIRouter
from fastapi.responses import JSONResponse


def setup_router() -> APIRouter:
    router = APIRouter(tags=["health"])

    @router.get("/api/health")
    async def health():
        return JSONResponse(
            {
                "status": "healthy",
                "timestamp": datetime.now(UTC).isoformat(),
                "database": "in-memory",
            }
        )

    return router
