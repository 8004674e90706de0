from fastapi import APIRouter
from app.api.v1.endpoints import auth, members, teams

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(members.router, prefix="/members", tags=["members"])
api_router.include_router(teams.router, prefix="/teams", tags=["teams"])
