"""
Timetable generation for a division.

Judging sessions run back-to-back in every room; robot game matches run
back-to-back on the field with all tables playing at once. Both skip any
break block that intersects a slot. Teams are never booked into two
overlapping slots.
"""

import math
from datetime import datetime, timedelta
from typing import Any, Dict, List

from lems.models import (
    DivisionSchedule, MatchSeat, MatchSlot, MatchStage,
    ScheduleSettings, SessionSlot
)
from lems.core.config import JUDGING_SESSION_LENGTH, MATCH_LENGTH
from lems.core.errors import SchedulingInfeasibleError
from lems.core.logging_config import get_logger

logger = get_logger(__name__)


class ScheduleGenerator:
    """
    Builds the judging and robot game timetable of one division.
    """

    def __init__(self, teams: List[Dict[str, Any]], rooms: List[Dict[str, Any]],
                 tables: List[Dict[str, Any]], settings: ScheduleSettings):
        """
        Initialize the generator.

        Args:
            teams: Team documents; scheduled in team-number order
            rooms: Judging room documents
            tables: Robot game table documents
            settings: Lengths, rounds, breaks and the event window
        """
        self.teams = sorted(teams, key=lambda t: t["number"])
        self.rooms = rooms
        self.tables = tables
        self.settings = settings
        self.breaks = sorted(settings.breaks, key=lambda b: b.start)

        logger.info(
            f"Schedule generator initialized: {len(self.teams)} teams, "
            f"{len(self.rooms)} rooms, {len(self.tables)} tables"
        )

    def generate_schedule(self) -> DivisionSchedule:
        """
        Generate the full timetable.

        Returns:
            DivisionSchedule with session and match slots

        Raises:
            SchedulingInfeasibleError: when teams do not fit before the event end
        """
        schedule = DivisionSchedule()
        self._schedule_judging(schedule)
        self._schedule_matches(schedule)

        logger.info(
            f"Generated {len(schedule.sessions)} judging slots and "
            f"{len(schedule.matches)} matches ending at {schedule.end}"
        )
        return schedule

    def _next_slot_start(self, start: datetime, length: timedelta) -> datetime:
        """Earliest start >= ``start`` whose slot does not intersect any break."""
        while True:
            end = start + length
            blocking = [b for b in self.breaks if b.intersects(start, end)]
            if not blocking:
                return start
            start = max(b.end for b in blocking)

    def _check_fits(self, end: datetime, what: str):
        if self.settings.end is not None and end > self.settings.end:
            raise SchedulingInfeasibleError(
                f"Cannot fit {len(self.teams)} teams: {what} would end at "
                f"{end.isoformat()}, after the event end {self.settings.end.isoformat()}",
                details={
                    "teams": len(self.teams),
                    "rooms": len(self.rooms),
                    "tables": len(self.tables)
                }
            )

    def _schedule_judging(self, schedule: DivisionSchedule):
        if not self.teams:
            return
        if not self.rooms:
            raise SchedulingInfeasibleError("Cannot schedule judging sessions without judging rooms")

        length = timedelta(seconds=self.settings.session_length)
        gap = timedelta(seconds=self.settings.session_gap)
        slot_count = math.ceil(len(self.teams) / len(self.rooms))

        current = self.settings.start
        for slot_index in range(slot_count):
            current = self._next_slot_start(current, length)
            end = current + length
            self._check_fits(end, f"judging session {slot_index + 1}")

            for room_index, room in enumerate(self.rooms):
                team_index = slot_index * len(self.rooms) + room_index
                # Trailing slots stay empty when teams do not divide evenly
                team_id = self.teams[team_index]["_id"] if team_index < len(self.teams) else None
                schedule.sessions.append(SessionSlot(
                    number=slot_index + 1,
                    room_id=room["_id"],
                    start=current,
                    end=end,
                    team_id=team_id
                ))

            current = end + gap

    def _schedule_matches(self, schedule: DivisionSchedule):
        rounds = [(MatchStage.PRACTICE, r) for r in range(1, self.settings.practice_rounds + 1)]
        rounds += [(MatchStage.RANKING, r) for r in range(1, self.settings.ranking_rounds + 1)]
        if not self.teams or not rounds:
            return
        if not self.tables:
            raise SchedulingInfeasibleError("Cannot schedule robot game matches without tables")

        length = timedelta(seconds=self.settings.match_length)
        gap = timedelta(seconds=self.settings.match_gap)
        current = self.settings.match_start or self.settings.start
        match_number = 0

        for stage, round_number in rounds:
            pending = [team["_id"] for team in self.teams]

            while pending:
                current = self._next_slot_start(current, length)
                end = current + length
                self._check_fits(end, f"{stage.value} round {round_number}")

                slot = MatchSlot(
                    number=match_number + 1,
                    stage=stage,
                    round=round_number,
                    start=current,
                    end=end,
                    participants=[MatchSeat(table_id=table["_id"]) for table in self.tables]
                )
                placed = []
                for team_id in pending:
                    seat = slot.free_seat()
                    if seat is None:
                        break
                    if schedule.team_is_busy(team_id, current, end):
                        continue
                    seat.team_id = team_id
                    placed.append(team_id)

                # Every pending team is judging right now; try the next slot
                if placed:
                    match_number += 1
                    schedule.matches.append(slot)
                    pending = [team_id for team_id in pending if team_id not in placed]

                current = end + gap


def schedule_from_documents(sessions: List[Dict[str, Any]], matches: List[Dict[str, Any]],
                            session_length: int = JUDGING_SESSION_LENGTH,
                            match_length: int = MATCH_LENGTH) -> DivisionSchedule:
    """Rebuild a DivisionSchedule from stored session and match documents."""
    schedule = DivisionSchedule()
    for session in sessions:
        start = session["scheduledTime"]
        schedule.sessions.append(SessionSlot(
            number=session["number"],
            room_id=session["roomId"],
            start=start,
            end=start + timedelta(seconds=session_length),
            team_id=session.get("teamId")
        ))
    for match in matches:
        start = match["scheduledTime"]
        schedule.matches.append(MatchSlot(
            number=match["number"],
            stage=MatchStage(match["stage"]),
            round=match["round"],
            start=start,
            end=start + timedelta(seconds=match_length),
            participants=[
                MatchSeat(table_id=p["tableId"], team_id=p.get("teamId"))
                for p in match.get("participants", [])
            ]
        ))
    return schedule

