from fastapi import APIRouter
from subrelay.api.routes import public_sub

api_router = APIRouter()
api_router.include_router(public_sub.router, tags=["subscription"])
