from dataclasses import dataclass, field
from datetime import date, timedelta

from dataclasses_json import config, dataclass_json

BUDGET_LABELS = {
    "low": "₹0 – ₹2,00,000",
    "medium": "₹2,00,000 – ₹5,00,000",
    "high": "₹5,00,000+",
}


@dataclass_json
@dataclass
class TripRequest:
    """Planner input, decoded from the wire names the front-end sends."""

    traveler_type: str = field(metadata=config(field_name="selected_member"))
    days: int
    departure: str
    destination: str
    start_date: date = field(
        metadata=config(field_name="date", encoder=date.isoformat, decoder=date.fromisoformat)
    )
    activities: list[str] = field(metadata=config(field_name="selectedActivities"))
    budget: str = field(metadata=config(field_name="selected_budget"))
    user_id: str = field(metadata=config(field_name="userID"))
    adults: int = 1
    children: int = 0
    infants: int = 0

    def readable_budget(self) -> str:
        """Display label for the budget tier (falls back to the raw value)."""
        return BUDGET_LABELS.get(self.budget, self.budget)

    def end_date(self) -> date:
        """Last day of the trip; a 1-day trip ends on its start date."""
        return self.start_date + timedelta(days=max(self.days, 1) - 1)

    def interests(self) -> str:
        return ", ".join(self.activities) or "general sightseeing"
