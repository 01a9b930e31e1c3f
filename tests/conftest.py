"""Shared fixtures: in-memory database, seeded clinic, API client."""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from medappoint import redis_client as redis_module
from medappoint.database import get_db, make_engine
from medappoint.models import (
    Availabilities,
    Base,
    Clinics,
    Patients,
    Providers,
    Services,
)

# The seeded schedule is on Monday 2030-01-07
BEFORE_MONDAY = datetime(2030, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def no_redis(monkeypatch):
    """Events are skipped unless a test installs a client."""
    monkeypatch.setattr(redis_module, "redis_client", None)


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def seed(db):
    """
    One clinic in Kuala Lumpur, one provider working Mondays 09:00-11:00,
    two patients, a 30 minute service.
    """
    clinic = Clinics(name="Klinik Bangsar", timezone="Asia/Kuala_Lumpur")
    db.add(clinic)
    db.flush()

    provider = Providers(clinic_id=clinic.id, user_id=100, full_name="Dr. Aminah", specialty="GP")
    other_provider = Providers(clinic_id=clinic.id, user_id=101, full_name="Dr. Lim")
    alice = Patients(user_id=200, full_name="Alice Tan")
    bob = Patients(user_id=201, full_name="Bob Lee")
    service = Services(name="General Consultation", duration_minutes=30)
    db.add_all([provider, other_provider, alice, bob, service])
    db.flush()

    db.add(Availabilities(provider_id=provider.id, weekday=1, start_hhmm="09:00", end_hhmm="11:00"))
    db.commit()

    return {
        "clinic": clinic,
        "provider": provider,
        "other_provider": other_provider,
        "alice": alice,
        "bob": bob,
        "service": service,
    }


@pytest.fixture
def now():
    return BEFORE_MONDAY


@pytest.fixture
def client(engine, seed, now):
    """Test client sharing the seeded in-memory database."""
    from medappoint.main import app
    from medappoint.routers.deps import get_now

    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = Session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_now] = lambda: now
    yield TestClient(app)
    app.dependency_overrides.clear()
