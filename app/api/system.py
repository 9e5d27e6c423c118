"""
System / health routes.
"""

from fastapi import APIRouter

from app.config import settings

router = APIRouter(tags=["System"])


@router.get("/health")
async def health():
    return {"status": "healthy", "model": settings.inference_model}
