"""
Tests for the judging session, match and scoresheet endpoints.
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from fastapi.testclient import TestClient

from lems.main import create_app
from lems.database import crud
from sample_data import add_user, build_division, first_session, record_events


def setup_client(**kwargs):
    store, notifier, division_id = build_division(**kwargs)
    client = TestClient(create_app(store=store, notifier=notifier))
    return client, store, notifier, division_id


def headers(user_id):
    return {"X-User-Id": user_id}


def test_session_flow():
    client, store, notifier, division_id = setup_client()
    events = record_events(notifier, division_id, "judging")
    session = first_session(store, division_id)
    judge = add_user(store, "judge", division_id, {"type": "room", "value": session["roomId"]})
    base = f"/api/events/{division_id}/sessions/{session['_id']}"

    response = client.post(f"{base}/start", headers=headers(judge))
    assert response.status_code == 200
    assert response.json()["session"]["status"] == "in-progress"
    assert crud.events.get_event_state(store, {"divisionId": division_id})["currentSession"] == session["number"]

    timer = client.get(f"{base}/timer", headers=headers(judge)).json()
    assert timer["stage"] == "setup"

    # Rubric indicators still empty
    response = client.post(f"{base}/complete", headers=headers(judge))
    assert response.status_code == 400
    assert "incomplete" in response.json()["details"]

    response = client.put(base, json={
        "coreValues": "completed", "innovationProject": "completed", "robotDesign": "completed"
    }, headers=headers(judge))
    assert response.status_code == 200

    response = client.post(f"{base}/complete", headers=headers(judge))
    assert response.status_code == 200
    assert response.json()["session"]["status"] == "completed"

    assert [name for name, _ in events] == ["sessionStarted", "sessionUpdated", "sessionCompleted"]

    print("[PASS] Session flow test passed")


def test_judge_limited_to_own_room():
    client, store, notifier, division_id = setup_client()
    session = first_session(store, division_id)
    other_room = next(
        room["_id"] for room in crud.rooms.get_division_rooms(store, division_id)
        if room["_id"] != session["roomId"]
    )
    judge = add_user(store, "judge", division_id, {"type": "room", "value": other_room})

    response = client.post(f"/api/events/{division_id}/sessions/{session['_id']}/start", headers=headers(judge))
    assert response.status_code == 403
    assert crud.sessions.get_session(store, {"_id": session["_id"]})["status"] == "not-started"

    print("[PASS] Judge room test passed")


def test_invalid_transitions():
    client, store, notifier, division_id = setup_client()
    session = first_session(store, division_id)
    advisor = add_user(store, "judge-advisor", division_id)
    base = f"/api/events/{division_id}/sessions/{session['_id']}"

    response = client.post(f"{base}/abort", json={"reason": "late"}, headers=headers(advisor))
    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_TRANSITION"

    response = client.post(f"{base}/abort", json={}, headers=headers(advisor))
    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"

    response = client.get(f"/api/events/{division_id}/sessions/missing", headers=headers(advisor))
    assert response.status_code == 404

    print("[PASS] Invalid transition test passed")


def test_reset_requires_admin():
    client, store, notifier, division_id = setup_client()
    session = first_session(store, division_id)
    advisor = add_user(store, "judge-advisor", division_id)
    admin = add_user(store, is_admin=True)
    base = f"/api/events/{division_id}/sessions/{session['_id']}"

    client.post(f"{base}/start", headers=headers(advisor))
    client.post(f"{base}/abort", json={"reason": "fire alarm"}, headers=headers(advisor))

    assert client.post(f"{base}/reset", headers=headers(advisor)).status_code == 403
    response = client.post(f"{base}/reset", headers=headers(admin))
    assert response.status_code == 200
    assert response.json()["session"]["status"] == "not-started"

    print("[PASS] Session reset test passed")


def test_match_flow_persists_state():
    client, store, notifier, division_id = setup_client()
    head_referee = add_user(store, "head-referee", division_id)
    first, second = crud.matches.get_division_matches(store, division_id)[:2]
    base = f"/api/events/{division_id}/matches"

    response = client.post(f"{base}/{first['_id']}/start", headers=headers(head_referee))
    assert response.status_code == 200
    assert crud.events.get_event_state(store, {"divisionId": division_id})["activeMatch"] == first["_id"]

    response = client.post(f"{base}/{second['_id']}/start", headers=headers(head_referee))
    assert response.status_code == 409

    response = client.post(f"{base}/{first['_id']}/complete", headers=headers(head_referee))
    assert response.status_code == 200
    assert response.json()["state"]["activeMatch"] is None
    assert crud.events.get_event_state(store, {"divisionId": division_id})["activeMatch"] is None

    print("[PASS] Match flow test passed")


def test_referee_limited_to_own_table():
    client, store, notifier, division_id = setup_client(team_count=2, table_count=2)
    tables = crud.tables.get_division_tables(store, division_id)
    match = crud.matches.get_division_matches(store, division_id)[0]
    playing = {p["tableId"] for p in match["participants"] if p["teamId"]}
    referee = add_user(store, "referee", division_id, {"type": "table", "value": tables[0]["_id"]})
    outsider = add_user(store, "referee", division_id, {"type": "table", "value": "table-elsewhere"})

    assert tables[0]["_id"] in playing
    url = f"/api/events/{division_id}/matches/{match['_id']}"
    update = {"participants": [{"tableId": tables[0]["_id"], "present": True}]}

    assert client.put(url, json=update, headers=headers(outsider)).status_code == 403
    response = client.put(url, json=update, headers=headers(referee))
    assert response.status_code == 200
    seat = next(p for p in response.json()["match"]["participants"] if p["tableId"] == tables[0]["_id"])
    assert seat["present"] is True

    print("[PASS] Referee table test passed")


def test_scoresheet_status_change():
    client, store, notifier, division_id = setup_client()
    events = record_events(notifier, division_id, "field")
    scoresheet = crud.scoresheets.get_scoresheets(store, {"divisionId": division_id})[0]
    referee = add_user(store, "referee", division_id, {"type": "table", "value": scoresheet["tableId"]})
    url = f"/api/events/{division_id}/scoresheets/{scoresheet['_id']}"

    response = client.put(url, json={"data": {"missions": {}}}, headers=headers(referee))
    assert response.status_code == 200
    assert events == []

    response = client.put(url, json={"status": "in-progress"}, headers=headers(referee))
    assert response.status_code == 200
    assert events == [("scoresheetStatusChanged", (scoresheet["_id"], "in-progress"))]

    response = client.put(url, json={"status": "finished"}, headers=headers(referee))
    assert response.status_code == 400

    filtered = client.get(f"/api/events/{division_id}/scoresheets?team_id={scoresheet['teamId']}",
                          headers=headers(referee)).json()
    assert all(s["teamId"] == scoresheet["teamId"] for s in filtered)
    assert len(filtered) == 2

    print("[PASS] Scoresheet test passed")


def run_all_tests():
    """Run all tests."""
    print("\n" + "=" * 60)
    print("Running Session/Match API Tests")
    print("=" * 60 + "\n")

    try:
        test_session_flow()
        test_judge_limited_to_own_room()
        test_invalid_transitions()
        test_reset_requires_admin()
        test_match_flow_persists_state()
        test_referee_limited_to_own_table()
        test_scoresheet_status_change()

        print("\n" + "=" * 60)
        print("All tests passed!")
        print("=" * 60 + "\n")
        return 0

    except AssertionError as e:
        print(f"\n[FAIL] Test failed: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(run_all_tests())
