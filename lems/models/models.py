"""
Data models for the LEMS tournament backend.
Defines the status vocabularies and the schedule structures used throughout
the application. Stored entities are plain documents (dicts); see
``lems.models.schemas`` for their request/response shapes.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Dict
from enum import Enum

from lems.core.config import (
    JUDGING_SESSION_LENGTH, MATCH_LENGTH,
    DEFAULT_PRACTICE_ROUNDS, DEFAULT_RANKING_ROUNDS
)


class Status(str, Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    ABORTED = "aborted"

class RubricIndicator(str, Enum):
    """Per-category progress flag kept on a judging session."""
    EMPTY = "empty"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

class RubricStatus(str, Enum):
    EMPTY = "empty"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    WAITING_FOR_REVIEW = "waiting-for-review"
    READY = "ready"

class DeliberationStatus(str, Enum):
    """Judging deliberation: started by the advisors, locked once awards are picked."""
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

class JudgingCategory(str, Enum):
    INNOVATION_PROJECT = "innovation-project"
    ROBOT_DESIGN = "robot-design"
    CORE_VALUES = "core-values"

class MatchStage(str, Enum):
    PRACTICE = "practice"
    RANKING = "ranking"
    TEST = "test"

class ScoresheetStatus(str, Enum):
    EMPTY = "empty"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    WAITING_FOR_GP = "waiting-for-gp"
    READY = "ready"

class Role(str, Enum):
    JUDGE = "judge"
    LEAD_JUDGE = "lead-judge"
    JUDGE_ADVISOR = "judge-advisor"
    REFEREE = "referee"
    HEAD_REFEREE = "head-referee"
    SCOREKEEPER = "scorekeeper"
    PIT_ADMIN = "pit-admin"
    TOURNAMENT_MANAGER = "tournament-manager"
    DISPLAY = "display"
    AUDIENCE_DISPLAY = "audience-display"
    MC = "mc"

TERMINAL_STATUSES = {Status.COMPLETED, Status.ABORTED}


@dataclass
class ScheduleBreak:
    name: str
    start: datetime
    end: datetime

    def intersects(self, start: datetime, end: datetime) -> bool:
        return self.start < end and start < self.end


@dataclass
class ScheduleSettings:
    """Inputs for timetable generation. Lengths and gaps are in seconds."""
    start: datetime
    end: Optional[datetime] = None
    match_start: Optional[datetime] = None
    session_length: int = JUDGING_SESSION_LENGTH
    match_length: int = MATCH_LENGTH
    session_gap: int = 0
    match_gap: int = 0
    practice_rounds: int = DEFAULT_PRACTICE_ROUNDS
    ranking_rounds: int = DEFAULT_RANKING_ROUNDS
    breaks: List[ScheduleBreak] = field(default_factory=list)


@dataclass
class SessionSlot:
    number: int
    room_id: str
    start: datetime
    end: datetime
    team_id: Optional[str] = None

    def overlaps_with(self, start: datetime, end: datetime) -> bool:
        return not (self.end <= start or self.start >= end)


@dataclass
class MatchSeat:
    table_id: str
    team_id: Optional[str] = None


@dataclass
class MatchSlot:
    number: int
    stage: MatchStage
    round: int
    start: datetime
    end: datetime
    participants: List[MatchSeat] = field(default_factory=list)

    def overlaps_with(self, start: datetime, end: datetime) -> bool:
        return not (self.end <= start or self.start >= end)

    def team_ids(self) -> List[str]:
        return [seat.team_id for seat in self.participants if seat.team_id]

    def free_seat(self) -> Optional[MatchSeat]:
        for seat in self.participants:
            if seat.team_id is None:
                return seat
        return None


@dataclass
class DivisionSchedule:
    sessions: List[SessionSlot] = field(default_factory=list)
    matches: List[MatchSlot] = field(default_factory=list)

    def get_team_sessions(self, team_id: str) -> List[SessionSlot]:
        return [s for s in self.sessions if s.team_id == team_id]

    def get_team_matches(self, team_id: str) -> List[MatchSlot]:
        return [m for m in self.matches if team_id in m.team_ids()]

    def get_room_sessions(self, room_id: str) -> List[SessionSlot]:
        return [s for s in self.sessions if s.room_id == room_id]

    def team_is_busy(self, team_id: str, start: datetime, end: datetime) -> bool:
        for session in self.get_team_sessions(team_id):
            if session.overlaps_with(start, end):
                return True
        for match in self.get_team_matches(team_id):
            if match.overlaps_with(start, end):
                return True
        return False

    @property
    def end(self) -> Optional[datetime]:
        ends = [s.end for s in self.sessions] + [m.end for m in self.matches]
        return max(ends) if ends else None


@dataclass
class SchedulingConstraint:
    constraint_type: str
    severity: str
    description: str
    affected_teams: List[str] = field(default_factory=list)
    penalty_score: float = 0.0


@dataclass
class ScheduleValidationResult:
    is_valid: bool
    hard_constraint_violations: List[SchedulingConstraint] = field(default_factory=list)
    soft_constraint_violations: List[SchedulingConstraint] = field(default_factory=list)
    total_penalty_score: float = 0.0

    def add_violation(self, constraint: SchedulingConstraint):
        if constraint.severity == 'hard':
            self.hard_constraint_violations.append(constraint)
            self.is_valid = False
        else:
            self.soft_constraint_violations.append(constraint)
        self.total_penalty_score += constraint.penalty_score

    def get_summary(self) -> Dict:
        return {
            "is_valid": self.is_valid,
            "hard_violations": len(self.hard_constraint_violations),
            "soft_violations": len(self.soft_constraint_violations),
            "total_penalty": self.total_penalty_score,
            "violations": [
                {"type": v.constraint_type, "severity": v.severity, "description": v.description}
                for v in self.hard_constraint_violations + self.soft_constraint_violations
            ]
        }

