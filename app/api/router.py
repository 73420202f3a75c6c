from fastapi import APIRouter

from app.api.endpoints import analytics, ml

api_router = APIRouter()

api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
api_router.include_router(ml.router, prefix="/ml", tags=["ml"])
