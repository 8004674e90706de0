import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorDatabase
from pymongo.results import UpdateResult

from app.core.config import settings


def _email_pattern(email: str) -> dict:
    """Case-insensitive exact match on an email address."""
    return {"$regex": f"^{re.escape(email)}$", "$options": "i"}


def _serialize(doc: Dict[str, Any]) -> Dict[str, Any]:
    doc["_id"] = str(doc["_id"])
    return doc


class TeamRepository:
    """Team document database operations."""

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: Optional[str] = None):
        self.db = db
        self.collection = db[collection_name or settings.COLLECTION_NAME]

    async def list_documents(self) -> List[Dict[str, Any]]:
        """Every organization document, root ids as strings."""
        docs = await self.collection.find({}).to_list(None)
        return [_serialize(doc) for doc in docs]

    async def push_entry(
        self,
        team_id: str,
        entry: Dict[str, Any],
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> UpdateResult:
        """Append a member entry to the team with the given id."""
        return await self.collection.update_one(
            {"teams._id": team_id},
            {
                "$push": {"teams.$.members": entry},
                "$set": {"updatedAt": datetime.now(timezone.utc)}
            },
            session=session
        )

    async def find_document_with_member(self, member_id: str) -> Optional[Dict[str, Any]]:
        """The document holding an entry for this member, if any."""
        return await self.collection.find_one({"teams.members.memberID._id": member_id})

    async def member_exists(self, member_id: str) -> bool:
        doc = await self.collection.find_one(
            {"teams.members.memberID._id": member_id},
            {"_id": 1}
        )
        return doc is not None

    async def replace_teams(
        self,
        document_id: Any,
        teams: List[Dict[str, Any]],
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> UpdateResult:
        """Write a whole teams array back to its document."""
        return await self.collection.update_one(
            {"_id": document_id},
            {"$set": {"teams": teams, "updatedAt": datetime.now(timezone.utc)}},
            session=session
        )

    async def pull_member(self, member_id: str) -> UpdateResult:
        """Remove the member's entries from every team of every document."""
        return await self.collection.update_many(
            {"teams.members.memberID._id": member_id},
            {
                "$pull": {"teams.$[].members": {"memberID._id": member_id}},
                "$set": {"updatedAt": datetime.now(timezone.utc)}
            }
        )

    async def replace_team_members(self, team_id: str, entries: List[Dict[str, Any]]) -> UpdateResult:
        """Overwrite one team's members list."""
        return await self.collection.update_one(
            {"teams._id": team_id},
            {"$set": {"teams.$.members": entries, "updatedAt": datetime.now(timezone.utc)}}
        )

    async def get_team_members(self, team_id: str) -> Optional[List[Dict[str, Any]]]:
        """Members of the first team matching ``team_id``; None when no team matches."""
        pipeline = [
            {"$unwind": "$teams"},
            {"$match": {"teams._id": team_id}},
            {"$project": {"_id": 0, "members": {"$ifNull": ["$teams.members", []]}}},
            {"$limit": 1}
        ]
        cursor = self.collection.aggregate(pipeline)
        results = await cursor.to_list(None)
        if not results:
            return None
        return results[0]["members"]

    async def find_member_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return await self.collection.find_one(
            {"teams.members.memberID.email": _email_pattern(email)},
            {"_id": 1}
        )

    async def email_in_team(self, email: str, team_id: str) -> bool:
        """Whether an entry with this email sits in the given team."""
        doc = await self.collection.find_one(
            {
                "teams": {
                    "$elemMatch": {
                        "_id": team_id,
                        "members.memberID.email": _email_pattern(email)
                    }
                }
            },
            {"_id": 1}
        )
        return doc is not None
