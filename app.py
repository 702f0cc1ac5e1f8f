"""Dashboard REST API: task tracker and support tickets for the presentation layer."""

import logging
import random
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Response

from classifier import classify
from config import BOUNDARY_CHECK_INTERVAL, LOG_FORMAT, LOG_LEVEL, get_seed
from models import (
    Classification,
    ClassifyRequest,
    Notification,
    ResponseCreate,
    StatusUpdate,
    Task,
    TaskCreate,
    TaskOverview,
    TaskPriority,
    TaskWithPriority,
    Team,
    TeamStats,
    Ticket,
    TicketCategory,
    TicketCreate,
    TicketStats,
    TicketStatus,
    TicketUrgency,
)
from notifications import Notifier
from routing import CATEGORY_TO_TEAM
from storage import get_storage
from task_store import TaskStore
from ticket_store import TicketStore, filter_tickets
from worker import BoundaryWorker

logger = logging.getLogger(__name__)


def create_app(
    task_store: Optional[TaskStore] = None,
    ticket_store: Optional[TicketStore] = None,
    boundary_interval: float = BOUNDARY_CHECK_INTERVAL,
) -> FastAPI:
    """Build the API. Stores not supplied are created from configuration at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        tasks, tickets = task_store, ticket_store
        if tasks is None or tickets is None:
            logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
            storage = get_storage()
            rng = random.Random(get_seed())
            if tasks is None:
                tasks = TaskStore(storage, Notifier(), rng=rng)
            if tickets is None:
                tickets = TicketStore(storage, rng=rng)
        app.state.task_store = tasks
        app.state.ticket_store = tickets
        worker = BoundaryWorker(tasks, interval=boundary_interval)
        worker.start()
        logger.info("Dashboard API ready: %d tasks, %d tickets", len(tasks.tasks), len(tickets.list_all()))
        try:
            yield
        finally:
            await worker.stop()

    app = FastAPI(title="Support & Task Dashboard", version="1.0.0", lifespan=lifespan)
    _register_routes(app)
    return app


def get_task_store(request: Request) -> TaskStore:
    return request.app.state.task_store


def get_ticket_store(request: Request) -> TicketStore:
    return request.app.state.ticket_store


def _register_routes(app: FastAPI) -> None:
    @app.get("/health")
    def health() -> dict:
        """Health check."""
        return {"status": "ok"}

    # --- Tasks ---

    @app.get("/tasks", response_model=List[TaskWithPriority])
    async def list_tasks(
        priority: Optional[TaskPriority] = None,
        store: TaskStore = Depends(get_task_store),
    ) -> List[TaskWithPriority]:
        """All tasks annotated with their current priority tier."""
        tasks = store.list_with_priority()
        if priority is not None:
            tasks = [t for t in tasks if t.priority == priority]
        return tasks

    @app.get("/tasks/overview", response_model=TaskOverview)
    async def task_overview(store: TaskStore = Depends(get_task_store)) -> TaskOverview:
        return store.overview()

    @app.post("/tasks", response_model=Task, status_code=201)
    async def create_task(payload: TaskCreate, store: TaskStore = Depends(get_task_store)) -> Task:
        return store.add_task(
            payload.title,
            payload.description,
            payload.deadline,
            payload.warning_boundary_hours,
        )

    @app.post("/tasks/{task_id}/complete", response_model=Task)
    async def complete_task(task_id: str, store: TaskStore = Depends(get_task_store)) -> Task:
        task = store.complete_task(task_id)
        if task is None:
            raise HTTPException(status_code=404, detail="Task not found")
        return task

    @app.delete("/tasks/{task_id}", status_code=204)
    async def delete_task(task_id: str, store: TaskStore = Depends(get_task_store)) -> Response:
        if not store.delete_task(task_id):
            raise HTTPException(status_code=404, detail="Task not found")
        return Response(status_code=204)

    @app.get("/notifications", response_model=List[Notification])
    async def drain_notifications(store: TaskStore = Depends(get_task_store)) -> List[Notification]:
        """Pending toasts, oldest first. Each toast is returned once."""
        return store.notifier.drain()

    # --- Tickets ---

    @app.get("/tickets", response_model=List[Ticket])
    async def list_tickets(
        search: Optional[str] = None,
        status: Optional[TicketStatus] = None,
        category: Optional[TicketCategory] = None,
        urgency: Optional[TicketUrgency] = None,
        customer_id: Optional[str] = None,
        team: Optional[Team] = None,
        store: TicketStore = Depends(get_ticket_store),
    ) -> List[Ticket]:
        return filter_tickets(
            store.list_all(),
            search=search,
            status=status,
            category=category,
            urgency=urgency,
            customer_id=customer_id,
            team=team,
        )

    @app.post("/tickets", response_model=Ticket, status_code=201)
    async def create_ticket(payload: TicketCreate, store: TicketStore = Depends(get_ticket_store)) -> Ticket:
        """Create a ticket; category, urgency and team are detected from its text."""
        return store.add_ticket(
            payload.customer_id,
            payload.customer_name,
            payload.customer_email,
            payload.subject,
            payload.description,
        )

    @app.get("/tickets/stats", response_model=TicketStats)
    async def ticket_stats(store: TicketStore = Depends(get_ticket_store)) -> TicketStats:
        return store.stats()

    @app.get("/tickets/{ticket_id}", response_model=Ticket)
    async def get_ticket(ticket_id: str, store: TicketStore = Depends(get_ticket_store)) -> Ticket:
        ticket = store.get_ticket_by_id(ticket_id)
        if ticket is None:
            raise HTTPException(status_code=404, detail="Ticket not found")
        return ticket

    @app.patch("/tickets/{ticket_id}/status", response_model=Ticket)
    async def update_status(
        ticket_id: str,
        payload: StatusUpdate,
        store: TicketStore = Depends(get_ticket_store),
    ) -> Ticket:
        ticket = store.update_ticket_status(ticket_id, payload.status)
        if ticket is None:
            raise HTTPException(status_code=404, detail="Ticket not found")
        return ticket

    @app.post("/tickets/{ticket_id}/responses", response_model=Ticket, status_code=201)
    async def add_response(
        ticket_id: str,
        payload: ResponseCreate,
        store: TicketStore = Depends(get_ticket_store),
    ) -> Ticket:
        ticket = store.add_response(ticket_id, payload.message, payload.author_role)
        if ticket is None:
            raise HTTPException(status_code=404, detail="Ticket not found")
        return ticket

    @app.get("/teams/{team}/tickets", response_model=List[Ticket])
    async def team_tickets(
        team: Team,
        status: Optional[TicketStatus] = None,
        store: TicketStore = Depends(get_ticket_store),
    ) -> List[Ticket]:
        """Team queue sorted by urgency, High first."""
        return store.team_queue(team, status)

    @app.get("/teams/{team}/stats", response_model=TeamStats)
    async def team_stats(team: Team, store: TicketStore = Depends(get_ticket_store)) -> TeamStats:
        return store.team_stats(team)

    @app.get("/routing")
    def routing_table() -> dict:
        return {category.value: team.value for category, team in CATEGORY_TO_TEAM.items()}

    @app.post("/classify", response_model=Classification)
    def classify_text(payload: ClassifyRequest) -> Classification:
        """Preview the classification a ticket with this text would receive."""
        category, urgency, team = classify(payload.subject, payload.description)
        return Classification(category=category, urgency=urgency, assigned_team=team)


app = create_app()
