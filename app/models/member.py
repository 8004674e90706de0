from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from app.models.base import DocumentModel, _utcnow, new_object_id


def _as_text(value: Any) -> Any:
    """Stored documents may hold numbers or nulls where text is expected."""
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class ProfilePicture(BaseModel):
    """Picture stored inline in the member document."""
    data: str  # base64
    contentType: str = ""
    filename: str = ""
    size: int = 0


class TeamRef(DocumentModel):
    """Denormalized {_id, name} pair kept on the member."""
    id: str = Field(alias="_id")
    name: str = ""

    @field_validator("id", "name", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Any:
        return _as_text(value)


class Member(DocumentModel):
    id: str = Field(default_factory=new_object_id, alias="_id")
    name: str
    email: str = ""
    profile_picture: Union[ProfilePicture, str, None] = Field(default="", alias="profilePicture")
    bio: str = ""
    designation: str = ""
    designation_text: str = Field(default="", alias="designationText")
    team: List[TeamRef] = []
    doj: str = ""
    dob: str = ""
    yoe: str = ""
    is_active: bool = Field(default=True, alias="isActive")
    created_by: str = ""
    position: Optional[int] = None
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=_utcnow, alias="updatedAt")
    schema_version: int = Field(default=0, alias="__v")

    @field_validator(
        "id", "name", "email", "bio", "designation", "designation_text",
        "doj", "dob", "yoe", "created_by", mode="before"
    )
    @classmethod
    def _text(cls, value: Any) -> Any:
        return _as_text(value)

    @field_validator("team", mode="before")
    @classmethod
    def _team_list(cls, value: Any) -> Any:
        if value is None or value == "":
            return []
        if isinstance(value, dict):
            value = [value]
        if isinstance(value, list):
            return [
                {"_id": item.get("_id") or item.get("id"), "name": item.get("name")}
                if isinstance(item, dict) else {"_id": item}
                for item in value
                if not isinstance(item, dict) or item.get("_id") or item.get("id")
            ]
        return value


class MemberEntry(DocumentModel):
    """Join object linking a member into one team's members list."""
    id: str = Field(default_factory=new_object_id, alias="_id")
    member: Member = Field(alias="memberID")
