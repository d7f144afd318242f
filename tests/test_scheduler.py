"""
Tests for timetable generation.
Checks:
1. Judging sessions run back-to-back in every room, in team-number order
2. Breaks push slots past their end
3. Every team plays exactly once per round, never while it is being judged
4. Teams that do not fit raise instead of being dropped
"""

import sys
import os
from datetime import datetime, timedelta

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lems.models import MatchStage, ScheduleBreak, ScheduleSettings
from lems.core.errors import SchedulingInfeasibleError
from lems.services.scheduler import ScheduleGenerator, schedule_from_documents
from lems.services.validator import ScheduleValidator

START = datetime(2024, 5, 1, 8, 0)


def make_teams(count):
    # Reversed so ordering by number is actually exercised
    return [{"_id": f"team-{i}", "number": 100 + i} for i in reversed(range(count))]


def make_rooms(count):
    return [{"_id": f"room-{i}", "name": f"Room {i}"} for i in range(count)]


def make_tables(count):
    return [{"_id": f"table-{i}", "name": f"Table {i}"} for i in range(count)]


def test_models():
    """Test overlap helpers."""
    lunch = ScheduleBreak("Lunch", START + timedelta(hours=4), START + timedelta(hours=5))
    assert lunch.intersects(START + timedelta(hours=3, minutes=50), START + timedelta(hours=4, minutes=10))
    assert not lunch.intersects(START + timedelta(hours=3), START + timedelta(hours=4))
    assert not lunch.intersects(START + timedelta(hours=5), START + timedelta(hours=6))

    print("[PASS] Model tests passed")


def test_judging_slots_back_to_back():
    """10 teams, 2 rooms, 1500 s sessions: 5 slots per room."""
    settings = ScheduleSettings(start=START, session_length=1500, practice_rounds=0, ranking_rounds=0)
    schedule = ScheduleGenerator(make_teams(10), make_rooms(2), make_tables(2), settings).generate_schedule()

    assert len(schedule.sessions) == 10
    for room_id in ("room-0", "room-1"):
        sessions = schedule.get_room_sessions(room_id)
        assert len(sessions) == 5
        for index, session in enumerate(sessions):
            assert session.start == START + timedelta(seconds=1500 * index)
            assert session.end == session.start + timedelta(seconds=1500)

    # Slot k, room r holds team k * rooms + r in number order
    assert schedule.sessions[0].team_id == "team-0"
    assert schedule.sessions[1].team_id == "team-1"
    assert schedule.sessions[2].team_id == "team-2"
    assert schedule.matches == []

    print("[PASS] Judging slot test passed")


def test_uneven_teams_leave_trailing_slots_empty():
    settings = ScheduleSettings(start=START, practice_rounds=0, ranking_rounds=0)
    schedule = ScheduleGenerator(make_teams(5), make_rooms(2), make_tables(2), settings).generate_schedule()

    assert len(schedule.sessions) == 6
    assert schedule.sessions[-1].team_id is None
    assert len([s for s in schedule.sessions if s.team_id]) == 5

    print("[PASS] Uneven team count test passed")


def test_breaks_shift_slots():
    lunch = ScheduleBreak("Lunch", START + timedelta(minutes=30), START + timedelta(minutes=60))
    settings = ScheduleSettings(start=START, practice_rounds=0, ranking_rounds=0, breaks=[lunch])
    schedule = ScheduleGenerator(make_teams(4), make_rooms(2), make_tables(2), settings).generate_schedule()

    starts = sorted({s.start for s in schedule.sessions})
    assert starts == [START, lunch.end]

    validation = ScheduleValidator().validate_schedule(schedule, breaks=[lunch])
    assert validation.is_valid

    print("[PASS] Break test passed")


def test_matches_cover_every_round():
    settings = ScheduleSettings(start=START, practice_rounds=1, ranking_rounds=3)
    teams = make_teams(10)
    schedule = ScheduleGenerator(teams, make_rooms(2), make_tables(4), settings).generate_schedule()

    for team in teams:
        matches = schedule.get_team_matches(team["_id"])
        rounds = sorted((m.stage.value, m.round) for m in matches)
        assert rounds == [("practice", 1), ("ranking", 1), ("ranking", 2), ("ranking", 3)]

    # Rounds follow each other on the field
    practice_end = max(m.end for m in schedule.matches if m.stage == MatchStage.PRACTICE)
    ranking_start = min(m.start for m in schedule.matches if m.stage == MatchStage.RANKING)
    assert practice_end <= ranking_start

    numbers = [m.number for m in schedule.matches]
    assert numbers == list(range(1, len(numbers) + 1))

    validation = ScheduleValidator().validate_schedule(schedule, team_ids=[t["_id"] for t in teams])
    assert validation.is_valid, validation.get_summary()

    print("[PASS] Match coverage test passed")


def test_teams_never_play_while_judged():
    settings = ScheduleSettings(start=START, practice_rounds=1, ranking_rounds=1)
    schedule = ScheduleGenerator(make_teams(6), make_rooms(3), make_tables(2), settings).generate_schedule()

    for match in schedule.matches:
        for team_id in match.team_ids():
            session = schedule.get_team_sessions(team_id)[0]
            assert not session.overlaps_with(match.start, match.end)

    print("[PASS] Judging/match separation test passed")


def test_infeasible_schedule_raises():
    """10 teams in 2 rooms need over two hours of judging."""
    settings = ScheduleSettings(start=START, end=START + timedelta(hours=1), session_length=1500)

    with pytest.raises(SchedulingInfeasibleError) as error:
        ScheduleGenerator(make_teams(10), make_rooms(2), make_tables(2), settings).generate_schedule()
    assert error.value.details["teams"] == 10

    print("[PASS] Infeasible schedule test passed")


def test_missing_rooms_or_tables_raise():
    settings = ScheduleSettings(start=START)
    with pytest.raises(SchedulingInfeasibleError):
        ScheduleGenerator(make_teams(2), [], make_tables(2), settings).generate_schedule()
    with pytest.raises(SchedulingInfeasibleError):
        ScheduleGenerator(make_teams(2), make_rooms(1), [], settings).generate_schedule()

    print("[PASS] Missing resources test passed")


def test_schedule_from_documents():
    sessions = [{"number": 1, "roomId": "room-0", "teamId": "team-0", "scheduledTime": START}]
    matches = [{
        "number": 1, "stage": "ranking", "round": 2, "scheduledTime": START,
        "participants": [{"tableId": "table-0", "teamId": "team-0"}, {"tableId": "table-1", "teamId": None}]
    }]
    schedule = schedule_from_documents(sessions, matches)

    assert schedule.sessions[0].end == START + timedelta(seconds=27 * 60)
    assert schedule.matches[0].stage == MatchStage.RANKING
    assert schedule.matches[0].team_ids() == ["team-0"]

    # Same team in both at the same time
    validation = ScheduleValidator().validate_schedule(schedule)
    assert not validation.is_valid

    print("[PASS] Schedule from documents test passed")


def run_all_tests():
    """Run all tests."""
    print("\n" + "=" * 60)
    print("Running Schedule Generation Tests")
    print("=" * 60 + "\n")

    try:
        test_models()
        test_judging_slots_back_to_back()
        test_uneven_teams_leave_trailing_slots_empty()
        test_breaks_shift_slots()
        test_matches_cover_every_round()
        test_teams_never_play_while_judged()
        test_infeasible_schedule_raises()
        test_missing_rooms_or_tables_raise()
        test_schedule_from_documents()

        print("\n" + "=" * 60)
        print("All tests passed!")
        print("=" * 60 + "\n")
        return 0

    except AssertionError as e:
        print(f"\n[FAIL] Test failed: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(run_all_tests())
