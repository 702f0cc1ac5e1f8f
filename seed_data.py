"""Demo records used when no persisted state is available."""

import random
from datetime import datetime, timedelta
from typing import List

from ids import generate_task_id, generate_ticket_id
from models import (
    DONE_STATUSES,
    AuthorRole,
    Task,
    TaskStatus,
    Ticket,
    TicketCategory,
    TicketResponse,
    TicketStatus,
    TicketUrgency,
    TimelineEvent,
)
from routing import team_for

HOUR = timedelta(hours=1)
DAY = timedelta(days=1)

# (title, description, deadline offset, warning hours, created offset, completed offset)
_TASKS = [
    (
        "Prepare quarterly report",
        "Compile data from all departments and create the Q4 financial report for stakeholders.",
        5 * DAY, 48, -10 * DAY, None,
    ),
    (
        "Review client proposal",
        "Review and provide feedback on the new client project proposal before the meeting.",
        16 * HOUR, 24, -3 * DAY, None,
    ),
    (
        "Fix authentication bug",
        "The login page throws a 500 error on mobile devices. Needs immediate attention.",
        -3 * HOUR, 12, -2 * DAY, None,
    ),
    (
        "Update design system",
        "Migrate all components to the new brand color palette and typography.",
        7 * DAY, 72, -5 * DAY, None,
    ),
    (
        "Deploy staging environment",
        "Set up the CI/CD pipeline for the staging branch and verify deployment.",
        -1 * DAY, 24, -4 * DAY, None,
    ),
    (
        "Write API documentation",
        "Document all REST endpoints with request/response examples for the developer portal.",
        3 * DAY, 48, -7 * DAY, None,
    ),
    (
        "Set up monitoring alerts",
        "Configure alerts for server health, error rates, and response times.",
        14 * DAY, 72, -1 * DAY, None,
    ),
    (
        "Onboard new team member",
        "Prepare environment access, schedule intro meetings, and share documentation.",
        -5 * HOUR, 48, -6 * DAY, -1 * DAY,
    ),
]


def create_seed_tasks(now: datetime, rng: random.Random) -> List[Task]:
    tasks = []
    for title, description, deadline, hours, created, completed in _TASKS:
        tasks.append(
            Task(
                id=generate_task_id(now, rng),
                title=title,
                description=description,
                deadline=now + deadline,
                warning_boundary_hours=hours,
                status=TaskStatus.COMPLETED if completed is not None else TaskStatus.ACTIVE,
                created_at=now + created,
                completed_at=now + completed if completed is not None else None,
            )
        )
    return tasks


CUSTOMER_NAMES = [
    "Sarah Johnson", "Michael Chen", "Emily Rodriguez", "David Kim",
    "Jessica Thompson", "James Wilson", "Amanda Foster", "Robert Martinez",
    "Lisa Anderson", "Christopher Lee", "Jennifer Brown", "Matthew Davis",
    "Nicole Taylor", "Daniel Garcia", "Ashley Moore",
]

SUBJECTS = {
    TicketCategory.BILLING: [
        "Invoice discrepancy for last month",
        "Unable to update payment method",
        "Unexpected charge on my account",
        "Need billing statement for tax purposes",
        "Payment failed but amount deducted",
    ],
    TicketCategory.ACCOUNT: [
        "Cannot reset my password",
        "Two-factor authentication not working",
        "Account locked after multiple attempts",
        "Unable to update email address",
        "Profile settings not saving",
    ],
    TicketCategory.TECHNICAL: [
        "Application crashes on startup",
        "Data sync issues between devices",
        "Slow performance on dashboard",
        "Export feature not working",
        "Integration with third-party app failing",
    ],
    TicketCategory.REFUND: [
        "Request refund for unused subscription",
        "Double charged for single purchase",
        "Service not as described, requesting refund",
        "Cancellation within trial period",
        "Refund for accidental purchase",
    ],
    TicketCategory.GENERAL: [
        "How to upgrade my plan?",
        "Questions about enterprise features",
        "Need help understanding pricing",
        "Feature request for mobile app",
        "General feedback about service",
    ],
}

DESCRIPTIONS = {
    TicketCategory.BILLING: (
        "I noticed an issue with my billing and need assistance resolving this matter. "
        "The amount charged does not match what I expected based on my subscription plan."
    ),
    TicketCategory.ACCOUNT: (
        "I am experiencing difficulties accessing my account. "
        "I have tried the standard troubleshooting steps but the issue persists."
    ),
    TicketCategory.TECHNICAL: (
        "There seems to be a technical problem with the application. "
        "This is affecting my workflow and I need urgent assistance."
    ),
    TicketCategory.REFUND: (
        "I would like to request a refund for my recent purchase. "
        "Please review my account and process this request."
    ),
    TicketCategory.GENERAL: (
        "I have some questions about the service and would appreciate "
        "if someone could provide clarification on a few points."
    ),
}

FIRST_REPLY = "Thank you for contacting us. We are looking into your issue and will get back to you shortly."
RESOLVED_REPLY = "Your issue has been resolved. Please let us know if you need any further assistance."


def _between(rng: random.Random, start: datetime, end: datetime) -> datetime:
    return start + (end - start) * rng.random()


def generate_seed_tickets(count: int, rng: random.Random, now: datetime) -> List[Ticket]:
    """Random demo tickets from the last 30 days, newest first."""
    tickets = []
    seen_ids = set()
    for i in range(count):
        category = rng.choice(list(TicketCategory))
        status = rng.choice(list(TicketStatus))
        urgency = rng.choice(list(TicketUrgency))
        name = rng.choice(CUSTOMER_NAMES)
        created_at = _between(rng, now - 30 * DAY, now)
        updated_at = _between(rng, created_at, now)
        team = team_for(category)

        ticket_id = generate_ticket_id(rng)
        while ticket_id in seen_ids:
            ticket_id = generate_ticket_id(rng)
        seen_ids.add(ticket_id)

        responses = []
        timeline = [TimelineEvent(id=f"tl-{ticket_id}-1", event="Ticket Created", timestamp=created_at, actor=name)]
        if status != TicketStatus.NEW:
            responses.append(
                TicketResponse(
                    id=f"resp-{ticket_id}-1",
                    author="Support Agent",
                    author_role=AuthorRole.SUPPORT,
                    message=FIRST_REPLY,
                    created_at=min(created_at + 2 * HOUR, updated_at),
                )
            )
            timeline.append(
                TimelineEvent(
                    id=f"tl-{ticket_id}-2",
                    event=f"Assigned to {team.value}",
                    timestamp=min(created_at + timedelta(minutes=30), updated_at),
                    actor="System",
                )
            )
        if status in DONE_STATUSES:
            responses.append(
                TicketResponse(
                    id=f"resp-{ticket_id}-{len(responses) + 1}",
                    author="Support Agent",
                    author_role=AuthorRole.SUPPORT,
                    message=RESOLVED_REPLY,
                    created_at=updated_at,
                )
            )
            timeline.append(
                TimelineEvent(
                    id=f"tl-{ticket_id}-{len(timeline) + 1}",
                    event=f"Status changed to {status.value}",
                    timestamp=updated_at,
                    actor="Support Agent",
                )
            )

        tickets.append(
            Ticket(
                id=ticket_id,
                customer_id=f"CUST-{1000 + i}",
                customer_name=name,
                customer_email=f"{name.lower().replace(' ', '.')}@email.com",
                subject=rng.choice(SUBJECTS[category]),
                description=DESCRIPTIONS[category],
                category=category,
                status=status,
                urgency=urgency,
                assigned_team=team,
                created_at=created_at,
                updated_at=updated_at,
                responses=responses,
                timeline=timeline,
            )
        )

    tickets.sort(key=lambda t: t.created_at, reverse=True)
    return tickets
