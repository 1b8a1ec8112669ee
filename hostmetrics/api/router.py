from fastapi import APIRouter

from hostmetrics.api.server import router as server_router

api_router = APIRouter()

api_router.include_router(server_router, tags=["Server"])
