"""
Health check endpoint
"""
from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.api_route("/api/health", methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"])
async def health_check():
    """Liveness probe; answers any method except the OPTIONS pre-flight"""
    return {"ok": True}
