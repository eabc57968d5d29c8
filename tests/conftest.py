"""
Shared pytest fixtures.

Uses a SQLite file database so no Postgres is required for tests.
Tables are recreated for every test: badges are global, so one test's
catalog must never leak into another's evaluation.
"""
import json
from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import travelog.models  # noqa: F401  (registers every table on Base.metadata)
from travelog.db.base import Base, get_db
from travelog.main import app
from travelog.models import (
    Badge, Dream, EntryTag, Journey, JourneyExperience, MediaFile, TravelEntry,
)

SQLITE_URL = "sqlite:///./test_travelog.db"

engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def create_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Seed helpers
# ---------------------------------------------------------------------------

@pytest.fixture()
def make_badge(db):
    """Create a badge. `criteria` may be a dict (JSON-encoded) or raw text."""
    def _make(
        criteria_type: str,
        criteria,
        name: str | None = None,
        points: int = 10,
        badge_type: str = "achievement",
        is_active: bool = True,
    ) -> Badge:
        payload = criteria if isinstance(criteria, str) else json.dumps(criteria)
        badge = Badge(
            name=name or f"{criteria_type} badge",
            description=f"Test {criteria_type} badge",
            badge_type=badge_type,
            criteria_type=criteria_type,
            criteria_payload=payload,
            points=points,
            is_active=is_active,
        )
        db.add(badge)
        db.commit()
        db.refresh(badge)
        return badge
    return _make


@pytest.fixture()
def add_memory(db):
    """Commit a travel entry (plus tags) and return the payload a caller would dispatch."""
    def _add(
        user_id: int,
        memory_type: str = "other",
        tags: tuple[str, ...] = (),
        location_name: str | None = None,
    ) -> dict:
        entry = TravelEntry(
            user_id=user_id,
            title=f"{memory_type} memory",
            memory_type=memory_type,
            location_name=location_name,
            entry_date=date(2026, 5, 1),
        )
        db.add(entry)
        db.flush()
        for tag in tags:
            db.add(EntryTag(entry_id=entry.id, tag=tag))
        db.commit()
        return {
            "entry_id": entry.id,
            "type": memory_type,
            "tags": list(tags),
            "location_name": location_name,
        }
    return _add


@pytest.fixture()
def make_journey(db):
    """Commit a journey spanning `days` days with experiences on `planned_days` (1-based)."""
    def _make(user_id: int, days: int, planned_days=(), start: date = date(2026, 7, 1)) -> Journey:
        journey = Journey(
            user_id=user_id,
            title="Test trip",
            destination="Lisbon",
            start_date=start,
            end_date=start + timedelta(days=days - 1),
        )
        db.add(journey)
        db.flush()
        for day in planned_days:
            db.add(JourneyExperience(journey_id=journey.id, day=day, title=f"Day {day} plan"))
        db.commit()
        db.refresh(journey)
        return journey
    return _make


@pytest.fixture()
def add_dream(db):
    def _add(user_id: int, title: str = "See the aurora", dream_type: str = "destination") -> Dream:
        dream = Dream(user_id=user_id, title=title, dream_type=dream_type)
        db.add(dream)
        db.commit()
        db.refresh(dream)
        return dream
    return _add


@pytest.fixture()
def add_media(db):
    """Attach `count` files of `file_type` ("image" | "video") to an entry."""
    def _add(entry_id: int, file_type: str = "image", count: int = 1) -> None:
        for i in range(count):
            db.add(MediaFile(entry_id=entry_id, file_name=f"{file_type}-{i}", file_type=file_type))
        db.commit()
    return _add
