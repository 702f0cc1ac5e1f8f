"""Ticket collection: creation with auto-classification, updates, and read-side views."""

import logging
import random
from collections import Counter
from datetime import datetime, time, timedelta
from typing import Callable, Iterable, List, Optional

from pydantic import TypeAdapter, ValidationError

from classifier import classify
from config import SEED_TICKET_COUNT, TICKETS_KEY
from ids import generate_ticket_id
from models import (
    DONE_STATUSES,
    OPEN_STATUSES,
    AuthorRole,
    Team,
    TeamStats,
    Ticket,
    TicketCategory,
    TicketResponse,
    TicketStats,
    TicketStatus,
    TicketUrgency,
    TimelineEvent,
)
from priority import utc_now
from seed_data import generate_seed_tickets
from storage import KeyValueStorage, MalformedStateError, StorageReadError

logger = logging.getLogger(__name__)

_TICKET_LIST = TypeAdapter(List[Ticket])

SUPPORT_AGENT = "Support Agent"
URGENCY_ORDER = {TicketUrgency.HIGH: 0, TicketUrgency.MEDIUM: 1, TicketUrgency.LOW: 2}


class TicketStore:
    """Owns the ticket collection. Tickets are never deleted."""

    def __init__(
        self,
        storage: KeyValueStorage,
        clock: Callable[[], datetime] = utc_now,
        rng: Optional[random.Random] = None,
        key: str = TICKETS_KEY,
        seed_count: int = SEED_TICKET_COUNT,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._rng = rng or random.Random()
        self._key = key
        self._seed_count = seed_count
        self._tickets: List[Ticket] = self._load()

    def _load(self) -> List[Ticket]:
        persist_seed = True
        try:
            data = self._storage.load_json(self._key)
            if data is not None:
                tickets = _TICKET_LIST.validate_python(data)
                logger.info("Loaded %d tickets from %s", len(tickets), self._key)
                return tickets
        except (MalformedStateError, ValidationError) as e:
            logger.warning("Discarding persisted tickets: %s", e)
        except StorageReadError as e:
            # Entry may still exist; keep the seed in memory only
            logger.warning("Could not read persisted tickets, using demo data: %s", e)
            persist_seed = False
        tickets = generate_seed_tickets(self._seed_count, self._rng, self._clock())
        logger.info("Seeded %d demo tickets", len(tickets))
        if persist_seed:
            self._save(tickets)
        return tickets

    def _save(self, tickets: List[Ticket]) -> None:
        self._storage.save_json(self._key, _TICKET_LIST.dump_python(tickets, mode="json"))

    def _replace(self, tickets: List[Ticket]) -> None:
        self._tickets = tickets
        self._save(tickets)

    def _new_id(self) -> str:
        existing = {t.id for t in self._tickets}
        ticket_id = generate_ticket_id(self._rng)
        while ticket_id in existing:
            ticket_id = generate_ticket_id(self._rng)
        return ticket_id

    def _touch(self, ticket: Ticket) -> datetime:
        # updated_at never moves backwards
        now = self._clock()
        return max(now, ticket.updated_at)

    def list_all(self) -> List[Ticket]:
        return list(self._tickets)

    def get_ticket_by_id(self, ticket_id: str) -> Optional[Ticket]:
        return next((t for t in self._tickets if t.id == ticket_id), None)

    def add_ticket(
        self,
        customer_id: str,
        customer_name: str,
        customer_email: str,
        subject: str,
        description: str,
    ) -> Ticket:
        """Classify, route and store a new ticket; returns it with its classification."""
        category, urgency, team = classify(subject, description)
        now = self._clock()
        ticket_id = self._new_id()
        ticket = Ticket(
            id=ticket_id,
            customer_id=customer_id,
            customer_name=customer_name,
            customer_email=customer_email,
            subject=subject,
            description=description,
            category=category,
            status=TicketStatus.NEW,
            urgency=urgency,
            assigned_team=team,
            created_at=now,
            updated_at=now,
            responses=[],
            timeline=[
                TimelineEvent(id=f"tl-{ticket_id}-1", event="Ticket Created", timestamp=now, actor=customer_name),
                TimelineEvent(id=f"tl-{ticket_id}-2", event=f"Assigned to {team.value}", timestamp=now, actor="System"),
            ],
        )
        self._replace([ticket] + self._tickets)
        logger.info(
            "Created ticket %s category=%s urgency=%s team=%s",
            ticket_id, category.value, urgency.value, team.value,
        )
        return ticket

    def update_ticket_status(self, ticket_id: str, status: TicketStatus) -> Optional[Ticket]:
        """Any status may move to any other. None if the id is unknown."""
        ticket = self.get_ticket_by_id(ticket_id)
        if ticket is None:
            return None
        now = self._touch(ticket)
        event = TimelineEvent(
            id=f"tl-{ticket_id}-{len(ticket.timeline) + 1}",
            event=f"Status changed to {status.value}",
            timestamp=now,
            actor=SUPPORT_AGENT,
        )
        updated = ticket.model_copy(update={"status": status, "updated_at": now, "timeline": ticket.timeline + [event]})
        self._replace([updated if t.id == ticket_id else t for t in self._tickets])
        return updated

    def add_response(self, ticket_id: str, message: str, author_role: AuthorRole) -> Optional[Ticket]:
        ticket = self.get_ticket_by_id(ticket_id)
        if ticket is None:
            return None
        now = self._touch(ticket)
        if author_role == AuthorRole.SUPPORT:
            author, who = SUPPORT_AGENT, SUPPORT_AGENT
        else:
            author, who = ticket.customer_name, "Customer"
        response = TicketResponse(
            id=f"resp-{ticket_id}-{len(ticket.responses) + 1}",
            author=author,
            author_role=author_role,
            message=message,
            created_at=now,
        )
        event = TimelineEvent(
            id=f"tl-{ticket_id}-{len(ticket.timeline) + 1}",
            event=f"{who} added a response",
            timestamp=now,
            actor=author,
        )
        updated = ticket.model_copy(
            update={
                "updated_at": now,
                "responses": ticket.responses + [response],
                "timeline": ticket.timeline + [event],
            }
        )
        self._replace([updated if t.id == ticket_id else t for t in self._tickets])
        return updated

    def for_customer(self, customer_id: str) -> List[Ticket]:
        return [t for t in self._tickets if t.customer_id == customer_id]

    def for_team(self, team: Team) -> List[Ticket]:
        return [t for t in self._tickets if t.assigned_team == team]

    def team_queue(self, team: Team, status: Optional[TicketStatus] = None) -> List[Ticket]:
        """Team tickets, optionally filtered by status, High urgency first."""
        tickets = filter_tickets(self.for_team(team), status=status)
        return sorted(tickets, key=lambda t: URGENCY_ORDER[t.urgency])

    def stats(self, now: Optional[datetime] = None) -> TicketStats:
        return ticket_stats(self._tickets, now or self._clock())

    def team_stats(self, team: Team) -> TeamStats:
        tickets = self.for_team(team)
        return TeamStats(
            total=len(tickets),
            open=sum(1 for t in tickets if t.status not in DONE_STATUSES),
            high_urgency=sum(1 for t in tickets if t.urgency == TicketUrgency.HIGH),
            resolved=sum(1 for t in tickets if t.status in DONE_STATUSES),
        )


def filter_tickets(
    tickets: Iterable[Ticket],
    search: Optional[str] = None,
    status: Optional[TicketStatus] = None,
    category: Optional[TicketCategory] = None,
    urgency: Optional[TicketUrgency] = None,
    customer_id: Optional[str] = None,
    team: Optional[Team] = None,
) -> List[Ticket]:
    """Linear scan; search matches subject, id or customer name, case-insensitively."""
    needle = (search or "").strip().lower()
    out = []
    for t in tickets:
        if status is not None and t.status != status:
            continue
        if category is not None and t.category != category:
            continue
        if urgency is not None and t.urgency != urgency:
            continue
        if customer_id is not None and t.customer_id != customer_id:
            continue
        if team is not None and t.assigned_team != team:
            continue
        if needle and not any(needle in field.lower() for field in (t.subject, t.id, t.customer_name)):
            continue
        out.append(t)
    return out


def ticket_stats(tickets: List[Ticket], now: datetime) -> TicketStats:
    by_status = Counter(t.status for t in tickets)
    by_category = Counter(t.category for t in tickets)
    by_urgency = Counter(t.urgency for t in tickets)
    start_of_today = datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)
    stale_before = start_of_today - timedelta(days=2)
    return TicketStats(
        total=len(tickets),
        by_status=dict(by_status),
        by_category=dict(by_category),
        by_urgency=dict(by_urgency),
        new_today=sum(1 for t in tickets if t.created_at >= start_of_today),
        overdue=sum(1 for t in tickets if t.status in OPEN_STATUSES and t.created_at < stale_before),
        open=sum(by_status[s] for s in OPEN_STATUSES),
        resolved=sum(by_status[s] for s in DONE_STATUSES),
        high_urgency=by_urgency[TicketUrgency.HIGH],
    )
