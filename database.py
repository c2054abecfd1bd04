"""
Trip storage - SQLite (or any DATABASE_URL) with SQLAlchemy
"""
import os
import uuid
from datetime import datetime, timezone

from sqlalchemy import create_engine, Column, String, Integer, DateTime, JSON
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()

DEFAULT_DATABASE_URL = "sqlite:///./trip_planner.db"

SessionLocal = sessionmaker()


def generate_id():
    return str(uuid.uuid4())[:8]


def _utcnow():
    return datetime.now(timezone.utc)


class Trip(Base):
    __tablename__ = "trips"

    id = Column(String, primary_key=True, default=generate_id)
    user_id = Column(String, index=True)
    title = Column(String)
    banner_image_url = Column(String, default='')
    banner_photographer_name = Column(String, default='')
    banner_photographer_profile = Column(String, default='')
    adults = Column(Integer, default=1)
    children = Column(Integer, default=0)
    infants = Column(Integer, default=0)
    start_date = Column(String)  # YYYY-MM-DD
    end_date = Column(String)  # YYYY-MM-DD
    budget = Column(String)  # low, medium, high
    traveler_type = Column(String)  # solo, couple, family, friends
    cities = Column(JSON, default=list)
    hotels = Column(JSON, default=list)
    travelling = Column(JSON, default=list)
    created_at = Column(DateTime, default=_utcnow)

    def to_dict(self) -> dict:
        """Stored record in the camelCase shape the front-end reads."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "bannerImageUrl": self.banner_image_url,
            "bannerPhotographerName": self.banner_photographer_name,
            "bannerPhotographerProfile": self.banner_photographer_profile,
            "adults": self.adults,
            "children": self.children,
            "infants": self.infants,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "budget": self.budget,
            "travelerType": self.traveler_type,
            "cities": self.cities,
            "hotels": self.hotels,
            "travelling": self.travelling,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


def _engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {}
    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # one shared connection, otherwise every session sees an empty database
        kwargs["poolclass"] = StaticPool
    return kwargs


def init_db(url=None):
    """Create the engine and tables, and bind SessionLocal to them."""
    url = url or os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
    engine = create_engine(url, **_engine_kwargs(url))
    Base.metadata.create_all(bind=engine)
    SessionLocal.configure(bind=engine)
    return engine


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
