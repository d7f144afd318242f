"""
Data models for the tournament backend.
"""

from .models import (
    Status,
    RubricIndicator,
    RubricStatus,
    DeliberationStatus,
    JudgingCategory,
    MatchStage,
    ScoresheetStatus,
    Role,
    TERMINAL_STATUSES,
    ScheduleBreak,
    ScheduleSettings,
    SessionSlot,
    MatchSeat,
    MatchSlot,
    DivisionSchedule,
    SchedulingConstraint,
    ScheduleValidationResult
)

__all__ = [
    "Status",
    "RubricIndicator",
    "RubricStatus",
    "DeliberationStatus",
    "JudgingCategory",
    "MatchStage",
    "ScoresheetStatus",
    "Role",
    "TERMINAL_STATUSES",
    "ScheduleBreak",
    "ScheduleSettings",
    "SessionSlot",
    "MatchSeat",
    "MatchSlot",
    "DivisionSchedule",
    "SchedulingConstraint",
    "ScheduleValidationResult"
]
