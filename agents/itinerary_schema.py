"""
Pydantic models for the itinerary JSON the model is asked to return.

Attribute names are snake_case; aliases carry the exact wire keys so that
``model_validate`` reads the raw model output and ``model_dump(by_alias=True)``
writes the same shape back out for storage.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator
from pydantic.alias_generators import to_camel

TransportMode = Literal["Walk", "Car", "Metro", "Bus", "Bike", "Taxi"]
TravelMode = Literal["Flight", "Train", "Bus", "Car"]


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Coordinates(_WireModel):
    # numbers only; "48.85" is rejected rather than coerced
    lat: float = Field(strict=True)
    lng: float = Field(strict=True)


class Location(_WireModel):
    name: str
    lat: float = Field(strict=True)
    lng: float = Field(strict=True)


class Transport(_WireModel):
    mode: TransportMode
    from_: str = Field(alias="from")
    to: str
    duration: str


class Activity(_WireModel):
    name: str
    location: Location
    time: str
    transport_from_previous: Optional[Transport] = None
    notes: str = ""


class Day(_WireModel):
    day: PositiveInt
    plan: List[Activity]


class City(_WireModel):
    name: str
    coordinates: Coordinates
    start_date: str = ""
    end_date: str = ""
    activities: List[Day]
    notes: str = ""


class Hotel(_WireModel):
    city: str
    city_code: str = ""
    check_in: str = ""
    check_out: str = ""
    notes: str = ""


class Leg(_WireModel):
    from_: str = Field(alias="from")
    to: str
    date: str = ""
    mode_of_transport: TravelMode
    departure_airport: Optional[str] = Field(default=None, alias="departure_airport_city_IATAcode")
    destination_airport: Optional[str] = Field(default=None, alias="destination_airport_city_IATAcode")
    notes: str = ""

    @model_validator(mode="after")
    def _check_airport_codes(self) -> "Leg":
        if self.mode_of_transport == "Flight":
            if not self.departure_airport or not self.destination_airport:
                raise ValueError("Flight legs must include both airport IATA codes")
        elif self.departure_airport is not None or self.destination_airport is not None:
            raise ValueError("Airport IATA codes must be null unless modeOfTransport is Flight")
        return self


class Itinerary(_WireModel):
    trip_name: str
    start_date: str
    end_date: str
    cities: List[City]
    hotels: List[Hotel] = []
    travelling: List[Leg]

    def city_names(self) -> list[str]:
        return [c.name for c in self.cities]

    def to_record(self) -> dict:
        """JSON-safe dict in the wire shape."""
        return self.model_dump(mode="json", by_alias=True)
