from fastapi import APIRouter, Depends
from app.api.deps import get_member_service
from app.schemas.member import ReorderRequest
from app.services.member_service import MemberService

router = APIRouter()


@router.get("/{team_id}/members")
async def get_team_members(team_id: str, service: MemberService = Depends(get_member_service)):
    """Get the members of one team"""
    members = await service.get_team_members(team_id)
    return {
        "success": True,
        "message": f"Found {len(members)} members",
        "data": members
    }


@router.post("/reorder")
async def reorder_team(request: ReorderRequest, service: MemberService = Depends(get_member_service)):
    """Replace a team's members list with a new ordering"""
    result = await service.reorder(request)
    return {
        "success": True,
        "message": "Member positions updated successfully",
        "data": result
    }
