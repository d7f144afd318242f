"""
Read-only aggregates over a division: schedule delays, completion rates
and flat export rows for rubrics and scores.
"""

from typing import Any, Dict, List

from lems.models import Status
from lems.database import crud, DocumentStore

Document = Dict[str, Any]


def _delay_stats(entities: List[Document]) -> Dict[str, Any]:
    """Start delay (seconds after the scheduled time) and status counts."""
    delays = [
        (e["startTime"] - e["scheduledTime"]).total_seconds()
        for e in entities
        if e.get("startTime") and e.get("scheduledTime")
    ]
    counts = {status.value: 0 for status in Status}
    for entity in entities:
        counts[entity.get("status", Status.NOT_STARTED.value)] += 1

    total = len(entities)
    return {
        "total": total,
        "statusCounts": counts,
        "completionRate": counts[Status.COMPLETED.value] / total if total else 0.0,
        "started": len(delays),
        "averageDelay": sum(delays) / len(delays) if delays else 0.0,
        "maxDelay": max(delays) if delays else 0.0
    }


def judging_insights(store: DocumentStore, division_id: str) -> Dict[str, Any]:
    sessions = [s for s in crud.sessions.get_division_sessions(store, division_id) if s.get("teamId")]
    stats = _delay_stats(sessions)

    by_room = {}
    for room in crud.rooms.get_division_rooms(store, division_id):
        room_sessions = [s for s in sessions if s["roomId"] == room["_id"]]
        by_room[room["name"]] = _delay_stats(room_sessions)
    stats["rooms"] = by_room
    return stats


def field_insights(store: DocumentStore, division_id: str) -> Dict[str, Any]:
    matches = crud.matches.get_division_matches(store, division_id)
    stats = _delay_stats(matches)

    by_stage = {}
    for match in matches:
        by_stage.setdefault(match["stage"], []).append(match)
    stats["stages"] = {stage: _delay_stats(items) for stage, items in by_stage.items()}

    scoresheets = crud.scoresheets.get_scoresheets(store, {"divisionId": division_id})
    stats["escalatedScoresheets"] = sum(1 for s in scoresheets if s.get("escalated"))
    return stats


def _teams_by_id(store: DocumentStore, division_id: str) -> Dict[str, Document]:
    return {team["_id"]: team for team in crud.teams.get_division_teams(store, division_id)}


def export_rubrics(store: DocumentStore, division_id: str) -> List[Document]:
    """One row per rubric, ordered by team number then category."""
    teams = _teams_by_id(store, division_id)
    rows = []
    for rubric in crud.rubrics.get_rubrics(store, {"divisionId": division_id}):
        team = teams.get(rubric["teamId"], {})
        rows.append({
            "teamNumber": team.get("number"),
            "teamName": team.get("name"),
            "category": rubric["category"],
            "status": rubric["status"],
            "data": rubric.get("data")
        })
    return sorted(rows, key=lambda r: (r["teamNumber"] or 0, r["category"]))


def export_scores(store: DocumentStore, division_id: str) -> List[Document]:
    """One row per scoresheet, ordered by team number, stage then round."""
    teams = _teams_by_id(store, division_id)
    rows = []
    for scoresheet in crud.scoresheets.get_scoresheets(store, {"divisionId": division_id}):
        team = teams.get(scoresheet["teamId"], {})
        data = scoresheet.get("data") or {}
        rows.append({
            "teamNumber": team.get("number"),
            "teamName": team.get("name"),
            "stage": scoresheet["stage"],
            "round": scoresheet["round"],
            "status": scoresheet["status"],
            "score": data.get("score"),
            "escalated": scoresheet.get("escalated", False)
        })
    return sorted(rows, key=lambda r: (r["teamNumber"] or 0, r["stage"], r["round"]))
