"""
Schedule validation module.
Validates a division timetable against its hard and soft constraints.
"""

from collections import defaultdict
from itertools import combinations
from typing import Dict, List, Optional, Set, Tuple

from lems.models import (
    DivisionSchedule, ScheduleBreak, ScheduleValidationResult,
    SchedulingConstraint
)
from lems.core.logging_config import get_logger

logger = get_logger(__name__)


class ScheduleValidator:
    """
    Validates judging and robot game timetables.
    Hard constraints must be satisfied; soft constraints are preferences.
    """

    def validate_schedule(self, schedule: DivisionSchedule,
                          team_ids: Optional[List[str]] = None,
                          breaks: Optional[List[ScheduleBreak]] = None) -> ScheduleValidationResult:
        """
        Validate a complete timetable.

        Args:
            schedule: The timetable to validate
            team_ids: Teams that must each get one session and one match per round
            breaks: Break blocks no slot may intersect

        Returns:
            ScheduleValidationResult with all violations found
        """
        result = ScheduleValidationResult(is_valid=True)

        self._check_room_conflicts(schedule, result)
        self._check_table_conflicts(schedule, result)
        self._check_team_double_booking(schedule, result)
        if team_ids is not None:
            self._check_team_coverage(schedule, team_ids, result)
        if breaks:
            self._check_break_conflicts(schedule, breaks, result)
        self._check_empty_seats(schedule, result)

        logger.info(
            f"Schedule validation: valid={result.is_valid}, "
            f"hard={len(result.hard_constraint_violations)}, "
            f"soft={len(result.soft_constraint_violations)}"
        )
        for violation in result.hard_constraint_violations[:10]:
            logger.warning(f"  - {violation.constraint_type}: {violation.description}")

        return result

    def _check_room_conflicts(self, schedule: DivisionSchedule, result: ScheduleValidationResult):
        """Check that no room hosts two overlapping sessions."""
        by_room = defaultdict(list)
        for session in schedule.sessions:
            by_room[session.room_id].append(session)

        for room_id, sessions in by_room.items():
            for first, second in combinations(sessions, 2):
                if first.overlaps_with(second.start, second.end):
                    result.add_violation(SchedulingConstraint(
                        constraint_type="room_conflict",
                        severity="hard",
                        description=f"Room {room_id} hosts sessions {first.number} and {second.number} at the same time",
                        affected_teams=[t for t in (first.team_id, second.team_id) if t],
                        penalty_score=1000.0
                    ))

    def _check_table_conflicts(self, schedule: DivisionSchedule, result: ScheduleValidationResult):
        """Check that no table hosts two overlapping matches."""
        by_table = defaultdict(list)
        for match in schedule.matches:
            for seat in match.participants:
                by_table[seat.table_id].append(match)

        for table_id, matches in by_table.items():
            for first, second in combinations(matches, 2):
                if first is not second and first.overlaps_with(second.start, second.end):
                    result.add_violation(SchedulingConstraint(
                        constraint_type="table_conflict",
                        severity="hard",
                        description=f"Table {table_id} hosts matches {first.number} and {second.number} at the same time",
                        penalty_score=1000.0
                    ))

    def _check_team_double_booking(self, schedule: DivisionSchedule, result: ScheduleValidationResult):
        """Check that no team is in two places at once."""
        bookings: Dict[str, List[Tuple[str, object]]] = defaultdict(list)
        for session in schedule.sessions:
            if session.team_id:
                bookings[session.team_id].append((f"session {session.number}", session))
        for match in schedule.matches:
            for team_id in match.team_ids():
                bookings[team_id].append((f"match {match.number}", match))

        for team_id, slots in bookings.items():
            for (first_name, first), (second_name, second) in combinations(slots, 2):
                if first.overlaps_with(second.start, second.end):
                    result.add_violation(SchedulingConstraint(
                        constraint_type="team_double_booking",
                        severity="hard",
                        description=f"Team {team_id} is booked into {first_name} and {second_name} at the same time",
                        affected_teams=[team_id],
                        penalty_score=1000.0
                    ))

    def _check_team_coverage(self, schedule: DivisionSchedule, team_ids: List[str],
                             result: ScheduleValidationResult):
        """Every team gets exactly one judging session and one match per round."""
        rounds: Set[Tuple[str, int]] = {(m.stage.value, m.round) for m in schedule.matches}

        for team_id in team_ids:
            sessions = schedule.get_team_sessions(team_id)
            if len(sessions) != 1:
                result.add_violation(SchedulingConstraint(
                    constraint_type="judging_session_count",
                    severity="hard",
                    description=f"Team {team_id} has {len(sessions)} judging sessions (expected 1)",
                    affected_teams=[team_id],
                    penalty_score=500.0
                ))

            played = defaultdict(int)
            for match in schedule.get_team_matches(team_id):
                played[(match.stage.value, match.round)] += 1
            for stage, round_number in sorted(rounds):
                count = played.get((stage, round_number), 0)
                if count != 1:
                    result.add_violation(SchedulingConstraint(
                        constraint_type="match_count",
                        severity="hard",
                        description=f"Team {team_id} plays {count} times in {stage} round {round_number} (expected 1)",
                        affected_teams=[team_id],
                        penalty_score=500.0
                    ))

    def _check_break_conflicts(self, schedule: DivisionSchedule, breaks: List[ScheduleBreak],
                               result: ScheduleValidationResult):
        """Check that no slot runs through a break."""
        for block in breaks:
            for session in schedule.sessions:
                if block.intersects(session.start, session.end):
                    result.add_violation(SchedulingConstraint(
                        constraint_type="break_conflict",
                        severity="hard",
                        description=f"Session {session.number} in room {session.room_id} runs into break '{block.name}'",
                        penalty_score=200.0
                    ))
            for match in schedule.matches:
                if block.intersects(match.start, match.end):
                    result.add_violation(SchedulingConstraint(
                        constraint_type="break_conflict",
                        severity="hard",
                        description=f"Match {match.number} runs into break '{block.name}'",
                        penalty_score=200.0
                    ))

    def _check_empty_seats(self, schedule: DivisionSchedule, result: ScheduleValidationResult):
        """Empty tables are allowed but penalized (soft constraint)."""
        for match in schedule.matches:
            empty = len(match.participants) - len(match.team_ids())
            if empty and match.stage.value != "test":
                result.add_violation(SchedulingConstraint(
                    constraint_type="empty_table",
                    severity="soft",
                    description=f"Match {match.number} has {empty} empty table(s)",
                    penalty_score=empty * 5.0
                ))
