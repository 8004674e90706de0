"""Team membership reconciliation rules.

Pure functions over the raw ``teams[].members[]`` structure as stored in
MongoDB. Services load documents, apply these rules and write the result
back; nothing here touches the database.
"""
import copy
import json
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

UNKNOWN_TEAM = "Unknown Team"
PLACEHOLDER = "N/A"

# Fallback labels for teams whose name is not supplied by the client.
TEAM_LABELS: Dict[str, str] = {
    "634eefb4b35a8abf6acbdd3a": "HR & Finance",
    "634eefb4b35a8abf6acbdd2c": "Technology",
}

# Member fields filled with a placeholder when a reorder payload omits them.
REORDER_TEXT_FIELDS = ("name", "email", "bio", "designation", "designationText", "doj", "dob", "yoe")


def parse_id_list(value: Any, keep_empty: bool = False) -> List[str]:
    """
    Coerce a loosely typed id field into a list of strings.

    Accepts None, a single id, a JSON-encoded list or scalar, or an actual
    list (whose items may themselves be JSON-encoded). Empty items are
    dropped unless ``keep_empty`` is set, which parallel name lists need to
    stay aligned with their ids.
    """
    if value is None:
        return [""] if keep_empty else []

    if isinstance(value, (list, tuple)):
        items: List[str] = []
        for item in value:
            items.extend(parse_id_list(item, keep_empty=keep_empty))
        return items

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return [""] if keep_empty else []
        if text[0] in "[\"" or text[0].isdigit():
            try:
                decoded = json.loads(text)
            except ValueError:
                return [text]
            return parse_id_list(decoded, keep_empty=keep_empty)
        return [text]

    return [str(value)]


def parse_team_list(value: Any) -> List[Dict[str, str]]:
    """Parse a JSON-encoded (or already decoded) team list into ``{_id, name}`` dicts."""
    if value is None:
        return []
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        try:
            value = json.loads(text)
        except ValueError:
            return [{"_id": text, "name": ""}]

    if isinstance(value, dict):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return [{"_id": str(value), "name": ""}]

    teams = []
    for item in value:
        if isinstance(item, dict):
            team_id = item.get("_id") or item.get("id") or item.get("value")
            if not team_id:
                continue
            teams.append({"_id": str(team_id), "name": str(item.get("name") or item.get("label") or "")})
        elif item not in (None, ""):
            teams.append({"_id": str(item), "name": ""})
    return teams


def dedupe(ids: Iterable[str]) -> List[str]:
    seen = set()
    unique = []
    for team_id in ids:
        if team_id not in seen:
            seen.add(team_id)
            unique.append(team_id)
    return unique


def resolve_team_refs(
    team_ids: List[str],
    team_names: Optional[List[str]] = None,
    known_names: Optional[Dict[str, str]] = None,
) -> List[Dict[str, str]]:
    """
    Name each requested team.

    Precedence: the parallel ``team_names`` entry at the same position, then
    ``known_names`` (names read from the stored document), then the static
    label table, then ``"Unknown Team"``. Repeated ids keep their first
    position.
    """
    team_names = team_names or []
    known_names = known_names or {}
    refs = []
    seen = set()
    for index, team_id in enumerate(team_ids):
        if team_id in seen:
            continue
        seen.add(team_id)
        name = team_names[index] if index < len(team_names) else ""
        if not name:
            name = known_names.get(team_id) or TEAM_LABELS.get(team_id) or UNKNOWN_TEAM
        refs.append({"_id": team_id, "name": name})
    return refs


def _entry_member_id(entry: Dict[str, Any]) -> Optional[str]:
    member = entry.get("memberID")
    if isinstance(member, dict):
        return member.get("_id")
    return None


def find_member_entry(teams: List[Dict[str, Any]], member_id: str) -> Optional[Dict[str, Any]]:
    """First entry across ``teams`` whose member id matches."""
    for team in teams:
        for entry in team.get("members") or []:
            if _entry_member_id(entry) == member_id:
                return entry
    return None


def teams_containing(teams: List[Dict[str, Any]], member_id: str) -> List[str]:
    return [
        team["_id"]
        for team in teams
        if any(_entry_member_id(entry) == member_id for entry in team.get("members") or [])
    ]


def team_names_by_id(teams: List[Dict[str, Any]]) -> Dict[str, str]:
    return {team["_id"]: team.get("name") or "" for team in teams if "_id" in team}


def merge_member_fields(existing: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Patch a stored member with the supplied changes.

    Values that are None or empty strings count as "not supplied" and leave
    the stored value in place.
    """
    merged = copy.deepcopy(existing)
    for key, value in changes.items():
        if value is None or value == "":
            continue
        merged[key] = value
    return merged


def reconcile_membership(
    teams: List[Dict[str, Any]],
    entry: Dict[str, Any],
    target_team_ids: Iterable[str],
    all_team_id: str,
) -> Tuple[List[Dict[str, Any]], List[Dict[str, str]]]:
    """
    Place ``entry`` in exactly the teams it should belong to.

    For every team: when it is the All Members team or in
    ``target_team_ids`` the entry is replaced in place (or appended when
    absent); otherwise any entry for the member is removed. Teams that
    neither hold the member nor are targeted are left as they are.

    Returns the new teams list and one ``{teamId, action}`` record per team
    that changed, where action is ``inserted``, ``updated`` or ``removed``.
    """
    member_id = _entry_member_id(entry)
    targets = set(target_team_ids)
    new_teams = []
    actions = []

    for team in teams:
        team = dict(team)
        members = list(team.get("members") or [])
        index = next(
            (i for i, existing in enumerate(members) if _entry_member_id(existing) == member_id),
            None,
        )
        wanted = team.get("_id") == all_team_id or team.get("_id") in targets

        if wanted and index is None:
            members.append(copy.deepcopy(entry))
            actions.append({"teamId": team.get("_id"), "action": "inserted"})
        elif wanted:
            members[index] = copy.deepcopy(entry)
            actions.append({"teamId": team.get("_id"), "action": "updated"})
        elif index is not None:
            members = [m for m in members if _entry_member_id(m) != member_id]
            actions.append({"teamId": team.get("_id"), "action": "removed"})

        team["members"] = members
        new_teams.append(team)

    return new_teams, actions


def build_reorder_entries(items: List[Any], now: datetime) -> List[Dict[str, Any]]:
    """
    Build a team's new members list from client-supplied ordering data.

    Items may be full entries (``{_id, memberID}``) or bare member objects.
    Missing text fields become ``"N/A"`` and the rest are stored as text;
    missing ids get an index-derived placeholder and missing timestamps get
    ``now``. The member's own ``team`` field keeps the teams given, reduced
    to ``{_id, name}`` pairs.
    """
    entries = []
    for index, item in enumerate(items):
        item = item if isinstance(item, dict) else {}
        raw_member = item.get("memberID") if isinstance(item.get("memberID"), dict) else item

        member = dict(raw_member)
        member["_id"] = str(raw_member.get("_id") or raw_member.get("id") or f"member-{index}")
        member.pop("id", None)
        for field in REORDER_TEXT_FIELDS:
            value = member.get(field)
            member[field] = PLACEHOLDER if value in (None, "") else str(value)
        member["profilePicture"] = raw_member.get("profilePicture") or ""
        member["team"] = parse_team_list(raw_member.get("team"))
        member["isActive"] = raw_member.get("isActive", True)
        member["createdAt"] = raw_member.get("createdAt") or now
        member["updatedAt"] = raw_member.get("updatedAt") or now
        member["position"] = index

        entry_id = item.get("_id") if raw_member is not item else item.get("entryId")
        entries.append({
            "_id": str(entry_id or f"entry-{index}"),
            "memberID": member,
        })
    return entries
