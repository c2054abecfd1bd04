"""FastAPI Backend - Multi-city itinerary generation"""
import logging
import os

# Load .env before anything else
from dotenv import load_dotenv
load_dotenv()

from datetime import date
from typing import List, Literal

from fastapi import FastAPI, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from agents.ImageAgent import fetch_banner_image, track_download
from agents.itinerary_schema import Itinerary
from agents.planning_agent import ItineraryPlanner, planning_agent
from database import init_db, get_db, Trip
from TripRequest import TripRequest

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize database
init_db()

# FastAPI app
app = FastAPI(
    title="Itinerary Generator API",
    description="Multi-city trip itineraries generated and validated with litellm",
    version="1.0.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

GENERATION_FAILED = "Failed to generate itinerary"


# Pydantic models
class ItineraryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    selected_member: str
    days: int = Field(ge=1)
    departure: str
    destination: str
    start_date: date = Field(alias="date")
    selected_activities: List[str] = Field(default_factory=list, alias="selectedActivities")
    selected_budget: Literal["low", "medium", "high"]
    user_id: str = Field(alias="userID")
    adults: int = 1
    children: int = 0
    infants: int = 0

    def to_trip_request(self) -> TripRequest:
        return TripRequest.from_dict(self.model_dump(mode="json", by_alias=True))


# Dependencies
def get_planner() -> ItineraryPlanner:
    return planning_agent


# Helper functions
def _save_trip_to_db(db: Session, trip: TripRequest, itinerary: Itinerary, banner: dict) -> Trip:
    """Persist the validated itinerary plus trip metadata as one Trip row."""
    record = itinerary.to_record()
    db_trip = Trip(
        user_id=trip.user_id,
        title=itinerary.trip_name,
        banner_image_url=banner.get("url", ""),
        banner_photographer_name=banner.get("photographerName", ""),
        banner_photographer_profile=banner.get("photographerProfile", ""),
        adults=trip.adults,
        children=trip.children,
        infants=trip.infants,
        start_date=itinerary.start_date,
        end_date=itinerary.end_date,
        budget=trip.budget,
        traveler_type=trip.traveler_type,
        cities=record["cities"],
        hotels=record["hotels"],
        travelling=record["travelling"],
    )
    db.add(db_trip)
    db.commit()
    db.refresh(db_trip)
    return db_trip


# Itinerary endpoints
@app.post("/api/generate-itinerary")
def generate_itinerary(
    body: ItineraryRequest,
    planner: ItineraryPlanner = Depends(get_planner),
    db: Session = Depends(get_db),
):
    """Generate, validate, illustrate and store a multi-city itinerary."""
    trip = body.to_trip_request()
    try:
        itinerary = planner.plan(trip)

        banner = fetch_banner_image(trip.destination)
        track_download(banner.get("download_location"))

        db_trip = _save_trip_to_db(db, trip, itinerary, banner)
    except Exception:
        db.rollback()
        logger.exception("Itinerary generation failed for %s -> %s", trip.departure, trip.destination)
        return JSONResponse(status_code=500, content={"error": GENERATION_FAILED})

    return {"itinerary": db_trip.to_dict()}


# Trip endpoints
@app.get("/trips")
def get_trips(user_id: str, db: Session = Depends(get_db)):
    trips = (
        db.query(Trip)
        .filter(Trip.user_id == user_id)
        .order_by(Trip.created_at.desc())
        .all()
    )
    return [t.to_dict() for t in trips]


@app.get("/trips/{trip_id}")
def get_trip(trip_id: str, db: Session = Depends(get_db)):
    trip = db.query(Trip).filter(Trip.id == trip_id).first()
    if not trip:
        raise HTTPException(status_code=404, detail="Trip not found")
    return trip.to_dict()


# Health check
@app.get("/health")
def health_check(planner: ItineraryPlanner = Depends(get_planner)):
    return {
        "status": "ok",
        "version": "1.0.0",
        "llm": getattr(planner.client, "model", "unknown"),
        "llm_provider": os.getenv("LLM_PROVIDER", "gemini"),
        "max_attempts": planner.max_attempts,
        "enforce_day_count": planner.enforce_day_count,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
