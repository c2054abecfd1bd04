import copy
import os
import sys
import pytest
from datetime import date

# Project root, needed for main, database, TripRequest and the agents package
_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _root not in sys.path:
    sys.path.insert(0, _root)

# Keep tests off the on-disk SQLite file; must be set before main is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("UNSPLASH_ACCESS_KEY", None)
os.environ.pop("ENFORCE_DAY_COUNT", None)
os.environ.pop("MAX_GENERATION_ATTEMPTS", None)

from TripRequest import TripRequest


VALID_ITINERARY = {
    "tripName": "Paris and Lyon Getaway",
    "startDate": "2026-06-01",
    "endDate": "2026-06-02",
    "cities": [
        {
            "name": "Paris",
            "coordinates": {"lat": 48.8566, "lng": 2.3522},
            "startDate": "2026-06-01",
            "endDate": "2026-06-01",
            "activities": [
                {
                    "day": 1,
                    "plan": [
                        {
                            "name": "Eiffel Tower",
                            "location": {"name": "Champ de Mars", "lat": 48.8584, "lng": 2.2945},
                            "time": "10:00 AM",
                            "transportFromPrevious": None,
                            "notes": "Book tickets ahead",
                        },
                        {
                            "name": "Louvre",
                            "location": {"name": "Rue de Rivoli", "lat": 48.8606, "lng": 2.3376},
                            "time": "1:00 PM",
                            "transportFromPrevious": {
                                "mode": "Metro",
                                "from": "Champ de Mars",
                                "to": "Rue de Rivoli",
                                "duration": "25 mins",
                            },
                            "notes": "Closed Tuesdays",
                        },
                    ],
                }
            ],
            "notes": "Stay in Le Marais",
        },
        {
            "name": "Lyon",
            "coordinates": {"lat": 45.764, "lng": 4.8357},
            "startDate": "2026-06-02",
            "endDate": "2026-06-02",
            "activities": [
                {
                    "day": 2,
                    "plan": [
                        {
                            "name": "Vieux Lyon",
                            "location": {"name": "Vieux Lyon", "lat": 45.7626, "lng": 4.8271},
                            "time": "9:30 AM",
                            "transportFromPrevious": None,
                            "notes": "",
                        }
                    ],
                }
            ],
            "notes": "Try a bouchon",
        },
    ],
    "hotels": [
        {
            "city": "Paris",
            "cityCode": "PAR",
            "checkIn": "2026-06-01",
            "checkOut": "2026-06-02",
            "notes": "Mid-range",
        }
    ],
    "travelling": [
        {
            "from": "Delhi",
            "to": "Paris",
            "date": "2026-06-01",
            "modeOfTransport": "Flight",
            "departure_airport_city_IATAcode": "DEL",
            "destination_airport_city_IATAcode": "CDG",
            "notes": "Overnight flight",
        },
        {
            "from": "Paris",
            "to": "Lyon",
            "date": "2026-06-02",
            "modeOfTransport": "Train",
            "departure_airport_city_IATAcode": None,
            "destination_airport_city_IATAcode": None,
            "notes": "TGV from Gare de Lyon",
        },
    ],
}

WIRE_REQUEST = {
    "selected_member": "couple",
    "days": 2,
    "departure": "Delhi",
    "destination": "France",
    "date": "2026-06-01",
    "selectedActivities": ["Museums", "Food"],
    "selected_budget": "medium",
    "userID": "user-1",
    "adults": 2,
    "children": 0,
    "infants": 0,
}


@pytest.fixture
def valid_itinerary():
    """A fresh, fully valid itinerary dict (departure city: Delhi)."""
    return copy.deepcopy(VALID_ITINERARY)


@pytest.fixture
def wire_request():
    return copy.deepcopy(WIRE_REQUEST)


@pytest.fixture
def trip():
    return TripRequest(
        traveler_type="couple",
        days=2,
        departure="Delhi",
        destination="France",
        start_date=date(2026, 6, 1),
        activities=["Museums", "Food"],
        budget="medium",
        user_id="user-1",
        adults=2,
    )
