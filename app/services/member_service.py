import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pydantic
from fastapi import UploadFile

from app.core.config import settings
from app.core.exceptions import ConflictError, NotFoundError, UpstreamError, ValidationError
from app.db.mongo import optional_transaction, store_errors
from app.models.base import new_object_id
from app.models.member import Member, MemberEntry, TeamRef
from app.repositories.team_repo import TeamRepository
from app.schemas.member import MemberCreate, MemberUpdate, ReorderRequest
from app.utils.profile_picture import build_profile_picture
from app.utils.team_reconcile import (
    build_reorder_entries,
    dedupe,
    find_member_entry,
    merge_member_fields,
    reconcile_membership,
    resolve_team_refs,
    team_names_by_id,
    teams_containing,
)

logger = logging.getLogger(__name__)


class MemberService:
    """Keeps the per-team member lists consistent across member operations."""

    def __init__(self, repo: TeamRepository):
        self.repo = repo

    @property
    def _client(self):
        return getattr(self.repo.db, "client", None)

    async def list_directory(self) -> List[Dict[str, Any]]:
        with store_errors("retrieve team data"):
            docs = await self.repo.list_documents()
        logger.info("Retrieved %d team documents", len(docs))
        return docs

    async def create(self, data: MemberCreate, picture: Optional[UploadFile] = None) -> Dict[str, Any]:
        """
        Save a new member into every requested team and the All Members team.

        Each team gets its own atomic push, so a failure part way through
        leaves the member in some teams only; the per-team outcomes gathered
        so far travel with the raised error.
        """
        if not data.name or not data.name.strip():
            raise ValidationError("Missing required field: name")

        profile_picture = await build_profile_picture(picture)
        team_refs = resolve_team_refs(data.team_ids, data.team_names)
        now = datetime.now(timezone.utc)

        member = Member(
            name=data.name.strip(),
            email=(data.email or "").strip(),
            profile_picture=profile_picture or "",
            bio=data.bio or "",
            designation=data.designation or "",
            designation_text=data.designation or "",
            team=[TeamRef(**ref) for ref in team_refs],
            doj=data.doj or "",
            dob=data.dob or "",
            yoe=data.yoe or "",
            created_at=now,
            updated_at=now,
        )
        entry = MemberEntry(member=member).to_document()

        all_team_id = settings.ALL_MEMBERS_TEAM_ID
        details: List[Dict[str, Any]] = []
        partial = {"memberId": member.id, "teamUpdateDetails": details}
        updated_team_count = 0
        in_transaction = False

        try:
            with store_errors("save member data", data=partial):
                async with optional_transaction(self._client) as session:
                    in_transaction = session is not None
                    for ref in team_refs:
                        if ref["_id"] == all_team_id:
                            continue
                        result = await self.repo.push_entry(ref["_id"], entry, session=session)
                        matched = result.modified_count > 0
                        details.append({
                            "teamId": ref["_id"],
                            "status": "matched" if matched else "not found",
                            "modifiedCount": result.modified_count,
                        })
                        if matched:
                            updated_team_count += 1
                        else:
                            logger.warning("Team %s not found while saving member %s", ref["_id"], member.id)

                    result = await self.repo.push_entry(all_team_id, entry, session=session)
                    all_team_updated = result.modified_count > 0
        except UpstreamError:
            if in_transaction:
                # the aborted transaction undid every push listed so far
                for detail in details:
                    detail["status"] = "rolled back"
            raise

        if any(ref["_id"] == all_team_id for ref in team_refs):
            details.append({
                "teamId": all_team_id,
                "status": "matched" if all_team_updated else "not found",
                "modifiedCount": result.modified_count,
            })
            if all_team_updated:
                updated_team_count += 1
        if not all_team_updated:
            logger.warning("All Members team %s not found while saving member %s", all_team_id, member.id)

        logger.info("Saved member %s into %d team(s)", member.id, updated_team_count)
        return {
            "memberData": entry,
            "results": {
                "specificTeams": f"{updated_team_count} teams updated" if updated_team_count else "No teams matched",
                "allTeam": "Success" if all_team_updated else "All team not found",
                "teamUpdateDetails": details,
            },
        }

    async def update(self, data: MemberUpdate, picture: Optional[UploadFile] = None) -> Dict[str, Any]:
        """
        Patch a member and reconcile which teams hold it.

        Reads the whole document, rewrites the teams array in memory and
        writes it back, so concurrent edits to the same document are last
        writer wins.
        """
        member_id = (data.member_id or "").strip()
        if not member_id:
            raise ValidationError("Member ID is required")

        uploaded = await build_profile_picture(picture)

        with store_errors("load member"):
            doc = await self.repo.find_document_with_member(member_id)
        if not doc:
            logger.warning("Update requested for unknown member %s", member_id)
            raise NotFoundError("Member not found in any team")

        teams = doc.get("teams") or []
        existing_entry = find_member_entry(teams, member_id)
        if existing_entry is None:
            raise NotFoundError("Member not found in teams")
        existing = existing_entry["memberID"]
        all_team_id = settings.ALL_MEMBERS_TEAM_ID
        document_names = team_names_by_id(teams)

        if data.team_ids is not None:
            target_ids = dedupe(data.team_ids)
        elif data.team is not None:
            target_ids = dedupe(team["_id"] for team in data.team)
        else:
            target_ids = [t for t in teams_containing(teams, member_id) if t != all_team_id]

        if data.team_ids is None and data.team is None and existing.get("team"):
            team_field = existing["team"]
        else:
            known_names = {t["_id"]: t["name"] for t in data.team or [] if t["name"]}
            known_names.update({k: v for k, v in document_names.items() if v})
            team_field = resolve_team_refs(target_ids, known_names=known_names)

        now = datetime.now(timezone.utc)
        merged = merge_member_fields(existing, {
            "name": data.name,
            "email": data.email,
            "bio": data.bio,
            "designation": data.designation,
            "designationText": data.designation_text or data.designation,
            "doj": data.doj,
            "dob": data.dob,
            "yoe": data.yoe,
            "profilePicture": uploaded if uploaded is not None else data.profile_picture_url,
            "team": team_field,
        })
        if not merged.get("name"):
            raise ValidationError("Name is required")
        merged["_id"] = member_id
        merged["updatedAt"] = now
        merged.setdefault("createdAt", now)
        merged.setdefault("__v", 0)

        try:
            member = Member(**merged)
        except pydantic.ValidationError as exc:
            logger.warning("Stored data for member %s is not valid: %s", member_id, exc)
            raise ValidationError("Member data is not valid", cause=exc) from exc
        entry = {"_id": existing_entry.get("_id") or new_object_id(), "memberID": member.to_document()}
        new_teams, actions = reconcile_membership(teams, entry, target_ids, all_team_id)
        missing = [team_id for team_id in target_ids if team_id not in document_names]
        for team_id in missing:
            logger.warning("Team %s not found in document while updating member %s", team_id, member_id)

        with store_errors("update member"):
            async with optional_transaction(self._client) as session:
                result = await self.repo.replace_teams(doc["_id"], new_teams, session=session)

        if result.modified_count == 0:
            raise ConflictError("No changes were applied to the member")

        logger.info("Updated member %s (%d team change(s))", member_id, len(actions))
        return {
            "member": entry["memberID"],
            "teamResults": actions + [
                {"teamId": team_id, "action": "not found"} for team_id in missing
            ],
        }

    async def delete(self, member_id: Optional[str]) -> Dict[str, int]:
        """Pull the member from every team; a second delete reports not found."""
        member_id = (member_id or "").strip()
        if not member_id:
            raise ValidationError("Member ID is required")

        with store_errors("delete member"):
            if not await self.repo.member_exists(member_id):
                logger.warning("Delete requested for unknown member %s", member_id)
                raise NotFoundError("Member not found in any team.")
            result = await self.repo.pull_member(member_id)

        if result.modified_count == 0:
            raise NotFoundError("Member not found or could not be removed.")

        logger.info("Removed member %s from %d document(s)", member_id, result.modified_count)
        return {"matchedCount": result.matched_count, "modifiedCount": result.modified_count}

    async def reorder(self, data: ReorderRequest) -> Dict[str, int]:
        """
        Replace one team's members list with the client's ordering.

        Only the named team changes. Members' own ``team`` fields are not
        refreshed, so they can drift from the list they were placed in.
        """
        team_id = (data.team or "").strip()
        if not team_id:
            raise ValidationError("Team is required")
        if not isinstance(data.members, list):
            raise ValidationError("Members must be a list")

        entries = build_reorder_entries(data.members, datetime.now(timezone.utc))

        with store_errors("update member positions"):
            result = await self.repo.replace_team_members(team_id, entries)

        if result.matched_count == 0:
            raise NotFoundError(f"Team {team_id} not found")
        if result.modified_count == 0:
            raise ConflictError("Team order was not changed")

        logger.info("Reordered team %s with %d member(s)", team_id, len(entries))
        return {
            "matchedCount": result.matched_count,
            "modifiedCount": result.modified_count,
            "memberCount": len(entries),
        }

    async def get_team_members(self, team_id: Optional[str]) -> List[Dict[str, Any]]:
        team_id = (team_id or "").strip()
        if not team_id:
            raise ValidationError("Team ID is required")

        with store_errors("retrieve team members"):
            members = await self.repo.get_team_members(team_id)
        if members is None:
            raise NotFoundError(f"Team {team_id} not found")
        return members
