"""
Access policy.

Every role check in the API goes through ``authorize``. Capabilities map to
the roles allowed to exercise them; some roles are further restricted by
their association (the room a judge sits in, the table a referee runs, the
category a lead judge owns). Admins pass every check.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from lems.models import Role
from lems.core.logging_config import get_logger

logger = get_logger(__name__)

# capability -> [(role, association type that must match the request context or None)]
CAPABILITIES: Dict[str, List[Tuple[Role, Optional[str]]]] = {
    "judging:session": [
        (Role.JUDGE, "room"),
        (Role.JUDGE_ADVISOR, None),
    ],
    "judging:rubric": [
        (Role.JUDGE, None),
        (Role.JUDGE_ADVISOR, None),
        (Role.LEAD_JUDGE, "category"),
    ],
    "judging:deliberation": [
        (Role.JUDGE_ADVISOR, None),
        (Role.LEAD_JUDGE, "category"),
    ],
    "field:match": [
        (Role.HEAD_REFEREE, None),
        (Role.SCOREKEEPER, None),
        (Role.REFEREE, "table"),
    ],
    "field:scoresheet": [
        (Role.HEAD_REFEREE, None),
        (Role.SCOREKEEPER, None),
        (Role.REFEREE, "table"),
    ],
    "state:write": [
        (Role.TOURNAMENT_MANAGER, None),
        (Role.SCOREKEEPER, None),
        (Role.HEAD_REFEREE, None),
        (Role.JUDGE_ADVISOR, None),
    ],
    "teams:register": [
        (Role.PIT_ADMIN, None),
        (Role.TOURNAMENT_MANAGER, None),
    ],
    "tickets:write": [
        (Role.PIT_ADMIN, None),
        (Role.TOURNAMENT_MANAGER, None),
        (Role.HEAD_REFEREE, None),
        (Role.JUDGE_ADVISOR, None),
    ],
    "cv-forms:write": [
        (Role.JUDGE_ADVISOR, None),
        (Role.TOURNAMENT_MANAGER, None),
        (Role.HEAD_REFEREE, None),
        (Role.REFEREE, None),
        (Role.JUDGE, None),
        (Role.PIT_ADMIN, None),
        (Role.LEAD_JUDGE, None),
    ],
    "awards:write": [
        (Role.JUDGE_ADVISOR, None),
        (Role.TOURNAMENT_MANAGER, None),
    ],
    "schedule:admin": [],
}


@dataclass
class Decision:
    allowed: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.allowed


def _association_matches(user: Dict[str, Any], association_type: str,
                         context: Dict[str, Any]) -> bool:
    """
    The user's association must equal the context value of the same type
    (or be one of them, when the context lists several). A request that does
    not concern a specific room/table/category passes.
    """
    expected = context.get(association_type)
    if expected is None:
        return True
    association = user.get("roleAssociation") or {}
    if association.get("type") != association_type:
        return False
    if isinstance(expected, (list, tuple, set)):
        return association.get("value") in expected
    return association.get("value") == expected


def authorize(user: Optional[Dict[str, Any]], capabilities: Iterable[str],
              context: Optional[Dict[str, Any]] = None) -> Decision:
    """
    Decide whether the user holds every requested capability.

    Args:
        user: User document (or None for anonymous)
        capabilities: Capability names from CAPABILITIES
        context: Optional ``{"room": id, "table": id or [ids], "category": name}``
            describing the entity the request touches

    Returns:
        Decision with the reason for a refusal
    """
    if user is None:
        return Decision(False, "Not signed in")
    if user.get("isAdmin"):
        return Decision(True, "admin")

    context = context or {}
    role = user.get("role")
    for capability in capabilities:
        if capability not in CAPABILITIES:
            raise ValueError(f"Unknown capability: {capability}")

        grants = [association for granted_role, association in CAPABILITIES[capability]
                  if granted_role.value == role]
        if not grants:
            return Decision(False, f"Role '{role}' lacks {capability}")
        if not any(a is None or _association_matches(user, a, context) for a in grants):
            return Decision(False, f"{capability} is limited to the user's own {grants[0]}")

    return Decision(True, "role")


def can_access_division(user: Optional[Dict[str, Any]], division_id: str) -> Decision:
    if user is None:
        return Decision(False, "Not signed in")
    if user.get("isAdmin"):
        return Decision(True, "admin")
    if user.get("divisionId") != division_id:
        return Decision(False, "User belongs to another division")
    return Decision(True, "division member")
