"""API v1 router aggregator."""

from fastapi import APIRouter

from app.api.v1.admin.routes import router as admin_router
from app.api.v1.auth.routes import router as auth_router
from app.api.v1.blogs.routes import router as blogs_router
from app.api.v1.generation.routes import router as generation_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
api_router.include_router(blogs_router, prefix="/blogs", tags=["Blog"])
api_router.include_router(admin_router, prefix="/admin", tags=["Admin"])
api_router.include_router(generation_router, prefix="/functions", tags=["Generation"])
