import pytest

from classifier import classify, combined_text, detect_category, detect_urgency
from models import Team, TicketCategory, TicketUrgency
from routing import CATEGORY_TO_TEAM, team_for


def test_urgent_billing_issue():
    text = "This is an URGENT billing issue, please help"
    assert detect_urgency(text) == TicketUrgency.HIGH
    assert detect_category(text) == TicketCategory.BILLING
    assert classify("URGENT billing issue", "please help") == (
        TicketCategory.BILLING,
        TicketUrgency.HIGH,
        Team.BILLING,
    )


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Request refund for unused subscription", TicketCategory.REFUND),
        ("I was double charged for a single purchase", TicketCategory.REFUND),
        ("Unexpected charge on my account", TicketCategory.BILLING),
        ("Invoice discrepancy for last month", TicketCategory.BILLING),
        ("Cannot reset my password", TicketCategory.ACCOUNT),
        ("Two-factor authentication not working", TicketCategory.ACCOUNT),
        ("Application crashes on startup", TicketCategory.TECHNICAL),
        ("Export feature not working", TicketCategory.TECHNICAL),
        ("How to upgrade my plan?", TicketCategory.GENERAL),
        ("", TicketCategory.GENERAL),
    ],
)
def test_detect_category(text, expected):
    assert detect_category(text) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Critical outage in production", TicketUrgency.HIGH),
        ("EMERGENCY: cannot access anything", TicketUrgency.HIGH),
        ("Minor typo on the pricing page", TicketUrgency.LOW),
        ("Take a look when you can", TicketUrgency.LOW),
        ("urgent, although it is a minor thing", TicketUrgency.HIGH),
        ("The export is slow", TicketUrgency.MEDIUM),
        ("", TicketUrgency.MEDIUM),
    ],
)
def test_detect_urgency(text, expected):
    assert detect_urgency(text) == expected


def test_combined_text_skips_empty_parts():
    assert combined_text("Subject", "") == "Subject"
    assert combined_text("Subject", "Body") == "Subject Body"


def test_routing_is_total_and_one_team_per_category():
    assert set(CATEGORY_TO_TEAM) == set(TicketCategory)
    assert len(set(CATEGORY_TO_TEAM.values())) == len(Team)
    assert team_for(TicketCategory.REFUND) == Team.FINANCE
    assert team_for(TicketCategory.ACCOUNT) == Team.ACCOUNT
