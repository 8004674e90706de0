"""Request schemas for member and team operations."""
from typing import Any, List, Optional
from pydantic import BaseModel, Field, field_validator

from app.utils.team_reconcile import parse_id_list, parse_team_list


class MemberCreate(BaseModel):
    """Fields accepted when saving a new member."""
    name: Optional[str] = None
    email: Optional[str] = None
    bio: Optional[str] = None
    designation: Optional[str] = None
    doj: Optional[str] = None
    dob: Optional[str] = None
    yoe: Optional[str] = None
    team_ids: List[str] = []
    team_names: List[str] = []

    @field_validator("team_ids", mode="before")
    @classmethod
    def _parse_team_ids(cls, value: Any) -> List[str]:
        return parse_id_list(value)

    @field_validator("team_names", mode="before")
    @classmethod
    def _parse_team_names(cls, value: Any) -> List[str]:
        if value is None:
            return []
        return parse_id_list(value, keep_empty=True)


class MemberUpdate(BaseModel):
    """Partial update; anything left as None keeps its stored value."""
    member_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    bio: Optional[str] = None
    designation: Optional[str] = None
    designation_text: Optional[str] = None
    doj: Optional[str] = None
    dob: Optional[str] = None
    yoe: Optional[str] = None
    profile_picture_url: Optional[str] = None
    team: Optional[List[dict]] = None
    team_ids: Optional[List[str]] = None

    @field_validator("team", mode="before")
    @classmethod
    def _parse_team(cls, value: Any) -> Optional[List[dict]]:
        if value is None or value == "":
            return None
        return parse_team_list(value)

    @field_validator("team_ids", mode="before")
    @classmethod
    def _parse_team_ids(cls, value: Any) -> Optional[List[str]]:
        if value is None or value == "" or value == []:
            return None
        return parse_id_list(value)


class ReorderRequest(BaseModel):
    """New ordering for one team's members list."""
    team: Optional[str] = None
    members: Any = Field(default=None)
