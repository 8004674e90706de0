import copy
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId

from app.core.config import settings
from app.repositories.team_repo import TeamRepository
from app.services.member_service import MemberService

ALL_TEAM_ID = settings.ALL_MEMBERS_TEAM_ID
HR_TEAM_ID = settings.PRIVILEGED_TEAM_ID
TECH_TEAM_ID = "634eefb4b35a8abf6acbdd2c"
DESIGN_TEAM_ID = "634eefb4b35a8abf6acbdd2d"


def update_result(matched: int = 1, modified: int = 1) -> MagicMock:
    """Stand-in for pymongo's UpdateResult."""
    result = MagicMock()
    result.matched_count = matched
    result.modified_count = modified
    return result


def cursor_returning(docs) -> MagicMock:
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor


def make_entry(member_id: str, name: str, email: str, teams=None, entry_id: str = None, **fields) -> dict:
    member = {
        "_id": member_id,
        "name": name,
        "email": email,
        "profilePicture": "",
        "bio": "",
        "designation": "",
        "designationText": "",
        "team": teams or [],
        "doj": "",
        "dob": "",
        "yoe": "",
        "isActive": True,
        "created_by": "",
        "createdAt": datetime(2024, 1, 1),
        "updatedAt": datetime(2024, 1, 1),
        "__v": 0,
    }
    member.update(fields)
    return {"_id": entry_id or f"entry-{member_id}", "memberID": member}


@pytest.fixture
def ann_entry():
    return make_entry(
        "m-ann", "Ann", "ann@example.com",
        teams=[{"_id": TECH_TEAM_ID, "name": "Technology"}],
        bio="old", designation="Engineer", designationText="Engineer", yoe="3",
    )


@pytest.fixture
def bob_entry():
    return make_entry(
        "m-bob", "Bob", "bob@example.com",
        teams=[{"_id": HR_TEAM_ID, "name": "HR & Finance"}],
    )


@pytest.fixture
def org_document(ann_entry, bob_entry):
    """One organization document: Ann in Technology, Bob in HR, both in All Members."""
    return {
        "_id": ObjectId("6650f1f77bcf86cd79943901"),
        "teams": [
            {"_id": ALL_TEAM_ID, "name": "All Members", "members": [copy.deepcopy(ann_entry), copy.deepcopy(bob_entry)]},
            {"_id": TECH_TEAM_ID, "name": "Technology", "members": [copy.deepcopy(ann_entry)]},
            {"_id": HR_TEAM_ID, "name": "HR & Finance", "members": [copy.deepcopy(bob_entry)]},
            {"_id": DESIGN_TEAM_ID, "name": "Design", "members": []},
        ],
        "updatedAt": datetime(2024, 1, 1),
    }


@pytest.fixture
def mock_collection():
    """Mock MongoDB collection for the team documents"""
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.update_one = AsyncMock(return_value=update_result())
    collection.update_many = AsyncMock(return_value=update_result())
    collection.find = MagicMock(return_value=cursor_returning([]))
    collection.aggregate = MagicMock(return_value=cursor_returning([]))
    return collection


@pytest.fixture
def mock_db(mock_collection):
    db = MagicMock()
    db.__getitem__.return_value = mock_collection
    return db


@pytest.fixture
def team_repo(mock_db):
    return TeamRepository(mock_db)


@pytest.fixture
def member_service(team_repo):
    return MemberService(team_repo)
