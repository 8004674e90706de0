from datetime import datetime, timezone

from bson import ObjectId
from pydantic import BaseModel, ConfigDict


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_object_id() -> str:
    """Fresh ObjectId rendered as a string; ids are stored as strings."""
    return str(ObjectId())


class DocumentModel(BaseModel):
    """Base for embedded documents stored with Mongo-style field names."""

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        extra="allow"
    )

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)
