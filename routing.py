"""Static category -> team routing."""

from typing import Dict

from models import Team, TicketCategory

CATEGORY_TO_TEAM: Dict[TicketCategory, Team] = {
    TicketCategory.BILLING: Team.BILLING,
    TicketCategory.ACCOUNT: Team.ACCOUNT,
    TicketCategory.TECHNICAL: Team.TECHNICAL,
    TicketCategory.REFUND: Team.FINANCE,
    TicketCategory.GENERAL: Team.GENERAL,
}


def team_for(category: TicketCategory) -> Team:
    return CATEGORY_TO_TEAM[category]
