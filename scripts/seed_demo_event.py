"""
Seed a demo event: one division with a roster, volunteers and a generated schedule.

Usage:
    LEMS_STORE=mongo python scripts/seed_demo_event.py
"""

import os
import sys
from datetime import datetime, timedelta

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lems.models import ScheduleBreak, ScheduleSettings
from lems.core.logging_config import setup_logging
from lems.database import create_store, crud
from lems.services.event_setup import EventSetup
from lems.services.notifier import Notifier

TEAM_COUNT = 24
ROOMS = ["Room A", "Room B", "Room C"]
TABLES = ["Red", "Blue", "Green", "Yellow"]


def seed_users(store, division_id, rooms, tables):
    """One volunteer per role; judges and referees are tied to a room/table."""
    users = [{"username": "admin", "role": None, "divisionId": None, "isAdmin": True, "roleAssociation": None}]
    for role in ("judge-advisor", "lead-judge", "head-referee", "scorekeeper",
                 "pit-admin", "tournament-manager"):
        users.append({"username": role, "role": role, "divisionId": division_id,
                      "isAdmin": False, "roleAssociation": None})
    for room in rooms:
        users.append({"username": f"judge-{room['name']}", "role": "judge", "divisionId": division_id,
                      "isAdmin": False, "roleAssociation": {"type": "room", "value": room["_id"]}})
    for table in tables:
        users.append({"username": f"referee-{table['name']}", "role": "referee", "divisionId": division_id,
                      "isAdmin": False, "roleAssociation": {"type": "table", "value": table["_id"]}})
    crud.users.add_users(store, users)
    return users


def main():
    setup_logging()
    store = create_store()
    setup = EventSetup(store, Notifier())

    start = datetime.now().replace(hour=8, minute=0, second=0, microsecond=0) + timedelta(days=1)

    print("=" * 60)
    print("Seeding demo event")
    print("=" * 60)

    event = setup.create_event({
        "name": "Demo Qualifier",
        "startDate": start,
        "endDate": start + timedelta(hours=10),
        "enableDivisions": False,
        "color": "#1e88e5"
    })
    division = event["divisions"][0]
    print(f"Event: {event['_id']}  Division: {division['_id']}")

    teams = [
        {"number": 1000 + i, "name": f"Team {i + 1}",
         "affiliation": {"name": f"School {i + 1}", "institution": "", "city": "Springfield"},
         "registered": True}
        for i in range(TEAM_COUNT)
    ]
    setup.import_roster(division["_id"], teams, ROOMS, TABLES)

    rooms = crud.rooms.get_division_rooms(store, division["_id"])
    tables = crud.tables.get_division_tables(store, division["_id"])
    users = seed_users(store, division["_id"], rooms, tables)
    print(f"Created {len(users)} users")

    settings = ScheduleSettings(
        start=start + timedelta(hours=1),
        end=start + timedelta(hours=10),
        breaks=[ScheduleBreak("Lunch", start + timedelta(hours=4), start + timedelta(hours=4, minutes=45))]
    )
    validation = setup.generate(division["_id"], settings)

    summary = validation.get_summary()
    print(f"Schedule valid: {summary['is_valid']} (soft violations: {summary['soft_violations']})")
    print(f"Sessions: {len(crud.sessions.get_division_sessions(store, division['_id']))}")
    print(f"Matches:  {len(crud.matches.get_division_matches(store, division['_id']))}")
    print("=" * 60)

    store.close()


if __name__ == "__main__":
    main()
