"""Keyword classifier for ticket category and urgency."""

from typing import Tuple

from models import Team, TicketCategory, TicketUrgency
from routing import team_for

# First matching rule wins: Refund > Billing > Login > Technical, else General Query
CATEGORY_RULES = [
    (TicketCategory.REFUND, ["refund", "money back", "reimburse", "double charged", "charged twice", "cancellation"]),
    (TicketCategory.BILLING, ["billing", "invoice", "payment", "charge", "credit card", "subscription"]),
    (
        TicketCategory.ACCOUNT,
        [
            "login",
            "log in",
            "sign in",
            "password",
            "two-factor",
            "2fa",
            "account locked",
            "locked out",
            "email address",
            "profile",
            "username",
        ],
    ),
    (
        TicketCategory.TECHNICAL,
        [
            "error",
            "bug",
            "crash",
            "not working",
            "broken",
            "failing",
            "slow",
            "sync",
            "outage",
            "integration",
            "export",
        ],
    ),
]
DEFAULT_CATEGORY = TicketCategory.GENERAL

HIGH_URGENCY_WORDS = ["urgent", "critical", "emergency"]
LOW_URGENCY_PHRASES = ["when you can", "no rush", "minor"]


def combined_text(subject: str, description: str) -> str:
    """Single text used for category and urgency detection."""
    return " ".join(p for p in (subject, description) if p).strip()


def detect_category(text: str) -> TicketCategory:
    """Route ticket text into one of the fixed categories by keyword rules."""
    lower = (text or "").lower()
    for category, keywords in CATEGORY_RULES:
        if any(kw in lower for kw in keywords):
            return category
    return DEFAULT_CATEGORY


def detect_urgency(text: str) -> TicketUrgency:
    """High on severity words, Low on de-escalation phrases, otherwise Medium."""
    lower = (text or "").lower()
    if any(word in lower for word in HIGH_URGENCY_WORDS):
        return TicketUrgency.HIGH
    if any(phrase in lower for phrase in LOW_URGENCY_PHRASES):
        return TicketUrgency.LOW
    return TicketUrgency.MEDIUM


def classify(subject: str, description: str) -> Tuple[TicketCategory, TicketUrgency, Team]:
    text = combined_text(subject, description)
    category = detect_category(text)
    return category, detect_urgency(text), team_for(category)
