"""
CRUD helpers, one module per collection. Every function takes the store as
its first argument and contains no business rules.
"""

from . import (
    awards,
    cv_forms,
    deliberations,
    events,
    matches,
    rooms,
    rubrics,
    scoresheets,
    sessions,
    tables,
    teams,
    tickets,
    users
)

__all__ = [
    "awards",
    "cv_forms",
    "deliberations",
    "events",
    "matches",
    "rooms",
    "rubrics",
    "scoresheets",
    "sessions",
    "tables",
    "teams",
    "tickets",
    "users"
]
