from fastapi import APIRouter

from app.api.endpoints import screening

api_router = APIRouter()

api_router.include_router(screening.router, tags=["screening"])
