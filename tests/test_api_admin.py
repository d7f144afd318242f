"""
Tests for the administrative setup endpoints.
"""

import sys
import os
from datetime import datetime
from unittest import mock

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from fastapi.testclient import TestClient

from lems.main import create_app
from lems.database import MemoryStore, crud
from lems.services.notifier import Notifier
from sample_data import add_user, build_division, record_events

EVENT = {
    "name": "Regional Qualifier",
    "startDate": "2024-05-01T08:00:00",
    "endDate": "2024-05-01T18:00:00",
    "enableDivisions": True,
    "color": "#ff0000"
}

ROSTER = {
    "teams": [{"number": 100 + i, "name": f"Team {i}", "registered": True} for i in range(6)],
    "rooms": ["Room A", "Room B"],
    "tables": ["Table 1", "Table 2"]
}

GENERATE = {"start": "2024-05-01T08:00:00", "practiceRounds": 1, "rankingRounds": 2}


def setup_admin():
    store = MemoryStore()
    notifier = Notifier()
    client = TestClient(create_app(store=store, notifier=notifier))
    admin = add_user(store, is_admin=True)
    return client, store, notifier, {"X-User-Id": admin}


def create_division(client, headers):
    event = client.post("/api/admin/events", json=EVENT, headers=headers).json()["event"]
    assert event["divisions"] == []
    response = client.post(f"/api/admin/events/{event['_id']}/divisions",
                           json={"name": "Explore", "color": "#00ff00"}, headers=headers)
    return response.json()["division"]


def test_admin_only():
    client, store, notifier, headers = setup_admin()
    manager = add_user(store, "tournament-manager")

    response = client.post("/api/admin/events", json=EVENT, headers={"X-User-Id": manager})
    assert response.status_code == 403
    assert crud.events.get_events(store) == []

    print("[PASS] Admin only test passed")


def test_event_without_divisions_gets_one():
    client, store, notifier, headers = setup_admin()

    event = client.post("/api/admin/events", json={**EVENT, "enableDivisions": False},
                        headers=headers).json()["event"]
    assert len(event["divisions"]) == 1
    assert event["divisions"][0]["name"] == EVENT["name"]
    # Default awards come with the division
    assert len(crud.awards.get_division_awards(store, event["divisions"][0]["_id"])) > 0

    listed = client.get("/api/admin/events", headers=headers).json()
    assert [division["_id"] for division in listed[0]["divisions"]] == [event["divisions"][0]["_id"]]
    assert "schedule" not in listed[0]["divisions"][0]

    print("[PASS] Single division test passed")


def test_roster_generate_and_reset():
    client, store, notifier, headers = setup_admin()
    division = create_division(client, headers)
    base = f"/api/admin/divisions/{division['_id']}"

    response = client.post(f"{base}/roster", json=ROSTER, headers=headers)
    assert response.json()["imported"] == {"teams": 6, "rooms": 2, "tables": 2}

    response = client.post(f"{base}/roster", json={"teams": [{"number": 100, "name": "Again"}]},
                           headers=headers)
    assert response.status_code == 400

    response = client.post(f"{base}/generate", json=GENERATE, headers=headers)
    assert response.status_code == 200
    assert response.json()["validation"]["is_valid"] is True
    assert len(crud.sessions.get_division_sessions(store, division["_id"])) == 6
    assert len(crud.scoresheets.get_scoresheets(store, {"divisionId": division["_id"]})) == 6 * 3
    assert crud.events.get_division(store, {"_id": division["_id"]})["hasState"] is True

    # Locked once running
    assert client.post(f"{base}/generate", json=GENERATE, headers=headers).status_code == 409
    assert client.post(f"{base}/roster", json=ROSTER, headers=headers).status_code == 409

    response = client.delete(f"{base}/data", headers=headers)
    assert response.json()["deleted"]["teams"] == 6
    assert crud.events.get_event_state(store, {"divisionId": division["_id"]}) is None
    assert crud.events.get_division(store, {"_id": division["_id"]})["hasState"] is False

    print("[PASS] Roster/generate/reset test passed")


def test_generate_without_teams():
    client, store, notifier, headers = setup_admin()
    division = create_division(client, headers)

    response = client.post(f"/api/admin/divisions/{division['_id']}/generate", json=GENERATE, headers=headers)
    assert response.status_code == 400

    print("[PASS] Generate without teams test passed")


def test_generate_with_offset_times():
    client, store, notifier, headers = setup_admin()
    division = create_division(client, headers)
    base = f"/api/admin/divisions/{division['_id']}"
    client.post(f"{base}/roster", json=ROSTER, headers=headers)

    # 10:00+02:00 is 08:00 UTC; the lunch break carries no offset
    response = client.post(f"{base}/generate", json={
        **GENERATE,
        "start": "2024-05-01T10:00:00+02:00",
        "breaks": [{"name": "Lunch", "startTime": "2024-05-01T12:00:00", "endTime": "2024-05-01T12:45:00"}]
    }, headers=headers)
    assert response.status_code == 200

    sessions = crud.sessions.get_division_sessions(store, division["_id"])
    first = min(session["scheduledTime"] for session in sessions)
    assert first == datetime(2024, 5, 1, 8, 0)
    assert first.tzinfo is None

    print("[PASS] Offset times test passed")


def test_generate_async_queues_task():
    client, store, notifier, headers = setup_admin()
    division = create_division(client, headers)

    with mock.patch("lems.api.routers.admin.generate_division_schedule") as task:
        task.delay.return_value = mock.Mock(id="task-1")
        response = client.post(f"/api/admin/divisions/{division['_id']}/generate/async",
                               json=GENERATE, headers=headers)

    assert response.json()["task_id"] == "task-1"
    division_id, settings = task.delay.call_args[0]
    assert division_id == division["_id"]
    assert settings["ranking_rounds"] == 2

    print("[PASS] Async generate test passed")


def test_schedule_blocks():
    client, store, notifier, headers = setup_admin()
    division = create_division(client, headers)
    url = f"/api/admin/divisions/{division['_id']}/schedule"

    response = client.put(url, json={"schedule": [
        {"name": "Lunch", "startTime": "2024-05-01T12:00:00", "endTime": "2024-05-01T12:45:00"},
        {"name": "Opening", "startTime": "2024-05-01T08:00:00", "endTime": "2024-05-01T08:30:00"}
    ]}, headers=headers)
    assert [entry["name"] for entry in response.json()["schedule"]] == ["Opening", "Lunch"]

    response = client.put(url, json={"schedule": [
        {"name": "Backwards", "startTime": "2024-05-01T12:00:00", "endTime": "2024-05-01T11:00:00"}
    ]}, headers=headers)
    assert response.status_code == 400

    print("[PASS] Schedule blocks test passed")


def test_awards():
    store, notifier, division_id = build_division()
    client = TestClient(create_app(store=store, notifier=notifier))
    admin = {"X-User-Id": add_user(store, is_admin=True)}
    advisor = {"X-User-Id": add_user(store, "judge-advisor", division_id)}
    events = record_events(notifier, division_id, "audience")

    response = client.put(f"/api/admin/divisions/{division_id}/awards",
                          json={"awards": [{"name": "champions", "places": 2}]}, headers=admin)
    awards = response.json()["awards"]
    assert [(a["name"], a["place"]) for a in awards] == [("champions", 1), ("champions", 2)]

    team = crud.teams.get_division_teams(store, division_id)[0]
    response = client.put(f"/api/events/{division_id}/awards",
                          json={"awards": [{"awardId": awards[0]["_id"], "winner": team["_id"]}]},
                          headers=advisor)
    assert response.json()["awards"][0]["winner"] == team["_id"]
    assert events == [("awardsUpdated", ())]

    response = client.put(f"/api/events/{division_id}/awards",
                          json={"awards": [{"awardId": "missing", "winner": "x"}]}, headers=advisor)
    assert response.status_code == 404

    print("[PASS] Awards test passed")


def run_all_tests():
    """Run all tests."""
    print("\n" + "=" * 60)
    print("Running Admin API Tests")
    print("=" * 60 + "\n")

    try:
        test_admin_only()
        test_event_without_divisions_gets_one()
        test_roster_generate_and_reset()
        test_generate_without_teams()
        test_generate_with_offset_times()
        test_generate_async_queues_task()
        test_schedule_blocks()
        test_awards()

        print("\n" + "=" * 60)
        print("All tests passed!")
        print("=" * 60 + "\n")
        return 0

    except AssertionError as e:
        print(f"\n[FAIL] Test failed: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(run_all_tests())
