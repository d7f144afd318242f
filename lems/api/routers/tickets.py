from fastapi import APIRouter, Depends

from lems.models.schemas import TicketCreate, TicketUpdate
from lems.core.errors import NotFoundError, PersistenceError, ValidationError
from lems.database import crud, DocumentStore, utcnow
from lems.services.notifier import Notifier
from lems.api.deps import get_division, get_notifier, get_store, require

router = APIRouter(prefix="/tickets", tags=["tickets"])


@router.get("")
async def list_tickets(division: dict = Depends(get_division), store: DocumentStore = Depends(get_store)):
    return crud.tickets.get_division_tickets(store, division["_id"])


@router.post("")
async def create_ticket(body: TicketCreate, division: dict = Depends(get_division),
                        user: dict = Depends(require("tickets:write")),
                        store: DocumentStore = Depends(get_store),
                        notifier: Notifier = Depends(get_notifier)):
    if body.team_id and crud.teams.get_team(store, {"_id": body.team_id, "divisionId": division["_id"]}) is None:
        raise ValidationError(f"Team {body.team_id} is not part of this division")

    ticket = {
        "divisionId": division["_id"],
        "teamId": body.team_id,
        "type": body.type,
        "content": body.content,
        "created": utcnow(),
        "closed": None
    }
    result = crud.tickets.add_ticket(store, ticket)
    if not result.acknowledged:
        raise PersistenceError("Could not create ticket")

    ticket = {"_id": result.inserted_id, **ticket}
    notifier.emit(division["_id"], "ticketCreated", ticket["_id"])
    return {"ok": True, "ticket": ticket}


@router.put("/{ticket_id}")
async def update_ticket(ticket_id: str, body: TicketUpdate, division: dict = Depends(get_division),
                        user: dict = Depends(require("tickets:write")),
                        store: DocumentStore = Depends(get_store),
                        notifier: Notifier = Depends(get_notifier)):
    filter = {"_id": ticket_id, "divisionId": division["_id"]}
    ticket = crud.tickets.get_ticket(store, filter)
    if ticket is None:
        raise NotFoundError(f"Ticket {ticket_id} not found")

    fields = {}
    if body.content is not None:
        fields["content"] = body.content
    if body.closed is not None:
        fields["closed"] = utcnow() if body.closed else None
    if not fields:
        raise ValidationError("Nothing to update")

    result = crud.tickets.update_ticket(store, filter, fields)
    if not result.acknowledged:
        raise PersistenceError(f"Could not update ticket {ticket_id}")

    ticket.update(fields)
    notifier.emit(division["_id"], "ticketUpdated", ticket_id)
    return {"ok": True, "ticket": ticket}
