from fastapi import APIRouter

from mathpaste.api.v1.convert import router as convert_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(convert_router)
