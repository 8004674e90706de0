from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from app.api.deps import get_member_service
from app.schemas.member import MemberCreate, MemberUpdate
from app.services.member_service import MemberService

router = APIRouter()


@router.get("/")
async def list_members(service: MemberService = Depends(get_member_service)):
    """Get every team document with its members"""
    docs = await service.list_directory()
    return {
        "success": True,
        "message": f"Retrieved {len(docs)} documents",
        "data": docs
    }


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_member(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    designation: Optional[str] = Form(None),
    doj: Optional[str] = Form(None),
    dob: Optional[str] = Form(None),
    yoe: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    team_ids: Optional[List[str]] = Form(None, alias="teamIds"),
    team_names: Optional[List[str]] = Form(None, alias="teamNames"),
    profile_pic: Optional[UploadFile] = File(None, alias="profilePic"),
    service: MemberService = Depends(get_member_service)
):
    """Save a new member into its teams and the All Members team"""
    member_in = MemberCreate(
        name=name,
        email=email,
        bio=content,
        designation=designation,
        doj=doj,
        dob=dob,
        yoe=yoe,
        team_ids=team_ids,
        team_names=team_names
    )
    result = await service.create(member_in, profile_pic)
    return {
        "success": True,
        "message": "Member data saved successfully",
        "data": result
    }


@router.post("/update")
async def update_member(
    importance: Optional[str] = Form(None),
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    about: Optional[str] = Form(None),
    designation: Optional[str] = Form(None),
    designation_text: Optional[str] = Form(None, alias="designationText"),
    doj: Optional[str] = Form(None),
    dob: Optional[str] = Form(None),
    yoe: Optional[str] = Form(None),
    team: Optional[str] = Form(None),
    team_ids: Optional[List[str]] = Form(None, alias="teamIds"),
    profile_picture: Optional[str] = Form(None, alias="profilePicture"),
    profile_pic: Optional[UploadFile] = File(None, alias="profilePic"),
    service: MemberService = Depends(get_member_service)
):
    """Update a member; fields left out keep their stored values"""
    member_in = MemberUpdate(
        member_id=importance,
        name=name,
        email=email,
        bio=about,
        designation=designation,
        designation_text=designation_text,
        doj=doj,
        dob=dob,
        yoe=yoe,
        team=team,
        team_ids=team_ids,
        profile_picture_url=profile_picture
    )
    result = await service.update(member_in, profile_pic)
    return {
        "success": True,
        "message": "Member updated successfully",
        "data": result
    }


@router.delete("/{member_id}")
async def delete_member(member_id: str, service: MemberService = Depends(get_member_service)):
    """Remove a member from every team"""
    result = await service.delete(member_id)
    return {
        "success": True,
        "message": "Member successfully removed from all teams.",
        "data": result
    }
