"""
Request bodies accepted by the API.

Wire format is camelCase (it mirrors the stored documents); Python code uses
snake_case attributes.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from lems.models.models import (
    RubricIndicator, RubricStatus, ScoresheetStatus,
    ScheduleBreak, ScheduleSettings
)
from lems.core.config import (
    JUDGING_SESSION_LENGTH, MATCH_LENGTH,
    DEFAULT_PRACTICE_ROUNDS, DEFAULT_RANKING_ROUNDS
)


def to_naive_utc(value: datetime) -> datetime:
    """Stored times are naive UTC; offset-aware input is converted."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


UtcDateTime = Annotated[datetime, AfterValidator(to_naive_utc)]

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        """Only the fields the client actually sent, keyed as stored."""
        return self.model_dump(by_alias=True, exclude_unset=True, mode="python")


class Affiliation(CamelModel):
    name: str = ""
    institution: str = ""
    city: str = ""


class RosterTeam(CamelModel):
    number: int
    name: str
    affiliation: Affiliation = Field(default_factory=Affiliation)
    registered: bool = False


class RosterImport(CamelModel):
    """Teams, judging rooms and robot game tables of one division."""
    teams: List[RosterTeam] = Field(default_factory=list)
    rooms: List[str] = Field(default_factory=list)
    tables: List[str] = Field(default_factory=list)


class EventCreate(CamelModel):
    name: str
    start_date: UtcDateTime
    end_date: UtcDateTime
    enable_divisions: bool = False
    color: str = ""


class DivisionCreate(CamelModel):
    name: str
    color: str = ""


class ScheduleEntry(CamelModel):
    name: str
    start_time: UtcDateTime
    end_time: UtcDateTime
    roles: List[str] = Field(default_factory=list)


class EventScheduleUpdate(CamelModel):
    schedule: List[ScheduleEntry]


class BreakBody(CamelModel):
    name: str
    start_time: UtcDateTime
    end_time: UtcDateTime


class GenerateScheduleRequest(CamelModel):
    """Timetable generation settings. Lengths and gaps in seconds."""
    start: UtcDateTime
    end: Optional[UtcDateTime] = None
    match_start: Optional[UtcDateTime] = None
    session_length: int = Field(default=JUDGING_SESSION_LENGTH, gt=0)
    match_length: int = Field(default=MATCH_LENGTH, gt=0)
    session_gap: int = Field(default=0, ge=0)
    match_gap: int = Field(default=0, ge=0)
    practice_rounds: int = Field(default=DEFAULT_PRACTICE_ROUNDS, ge=0)
    ranking_rounds: int = Field(default=DEFAULT_RANKING_ROUNDS, ge=0)
    breaks: List[BreakBody] = Field(default_factory=list)

    def to_settings(self) -> ScheduleSettings:
        return ScheduleSettings(
            start=self.start,
            end=self.end,
            match_start=self.match_start,
            session_length=self.session_length,
            match_length=self.match_length,
            session_gap=self.session_gap,
            match_gap=self.match_gap,
            practice_rounds=self.practice_rounds,
            ranking_rounds=self.ranking_rounds,
            breaks=[ScheduleBreak(b.name, b.start_time, b.end_time) for b in self.breaks]
        )


class TeamUpdate(CamelModel):
    registered: bool


class AbortRequest(CamelModel):
    reason: str = Field(min_length=1)


class SessionIndicatorsUpdate(CamelModel):
    core_values: Optional[RubricIndicator] = None
    innovation_project: Optional[RubricIndicator] = None
    robot_design: Optional[RubricIndicator] = None


class MatchParticipantUpdate(CamelModel):
    table_id: str
    team_id: Optional[str] = None
    present: Optional[bool] = None
    ready: Optional[bool] = None


class MatchParticipantsUpdate(CamelModel):
    participants: List[MatchParticipantUpdate]


class RubricUpdate(CamelModel):
    status: Optional[RubricStatus] = None
    data: Optional[Dict[str, Any]] = None


class PicklistUpdate(CamelModel):
    """Ranked team ids for the category's awards."""
    picklist: List[str]


class ScoresheetUpdate(CamelModel):
    status: Optional[ScoresheetStatus] = None
    escalated: Optional[bool] = None
    data: Optional[Dict[str, Any]] = None


class TicketCreate(CamelModel):
    team_id: Optional[str] = None
    type: str = "general"
    content: str = Field(min_length=1)


class TicketUpdate(CamelModel):
    content: Optional[str] = None
    closed: Optional[bool] = None


class AwardWinner(CamelModel):
    award_id: str
    winner: Optional[str] = None


class AwardWinnersUpdate(CamelModel):
    awards: List[AwardWinner]


class AwardDefinition(CamelModel):
    name: str
    places: int = Field(default=1, ge=1)


class AwardsConfig(CamelModel):
    awards: List[AwardDefinition]


class CVFormReporter(CamelModel):
    name: str = ""
    phone: str = ""
    affiliation: str = ""


class CVFormCheckboxes(CamelModel):
    fields: List[bool] = Field(default_factory=list)
    other: str = ""


class CVFormCategory(CamelModel):
    """Checked behaviours of one category, per subject group."""
    team_or_student: CVFormCheckboxes = Field(default_factory=CVFormCheckboxes)
    anyone_else: CVFormCheckboxes = Field(default_factory=CVFormCheckboxes)


class CVFormBody(CamelModel):
    """A core values incident report. Rule checks live in ``lems.services.cv_forms``."""
    observers: List[str] = Field(default_factory=list)
    observer_affiliation: str = ""
    demonstrators: List[str] = Field(default_factory=list)
    demonstrator_affiliation: str = ""
    data: Dict[str, CVFormCategory] = Field(default_factory=dict)
    details: str = ""
    completed_by: CVFormReporter = Field(default_factory=CVFormReporter)
    action_taken: str = ""
    severity: Optional[str] = None


class CVFormUpdate(CamelModel):
    details: Optional[str] = None
    action_taken: Optional[str] = None
    severity: Optional[str] = None
