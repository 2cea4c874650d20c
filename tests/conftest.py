import os

os.environ.setdefault("AUTO_CREATE_TABLES", "false")

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import get_session
from dependencies import get_artifact_store, get_clock
from main import app
from models import Base, Lease, Property, User
from repositories.document_repository import SqlDocumentRepository
from services.artifact_store import ArtifactStore
from services.clock import FixedClock
from services.invoice_document import CompanyHeader
from services.invoice_service import InvoiceService

NOW = datetime(2024, 3, 15, 10, 0, 0, tzinfo=timezone.utc)


class CountingRenderer:
    """Stands in for the PDF renderer and records how often it ran."""

    def __init__(self):
        self.calls = 0

    def render(self, content, title=None):
        self.calls += 1
        return b"%PDF-stub\n" + content.encode("utf-8")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def renderer():
    return CountingRenderer()


@pytest.fixture
def artifact_store(tmp_path, renderer):
    return ArtifactStore(str(tmp_path), renderer=renderer)


@pytest.fixture
def company():
    return CompanyHeader(name="Acme Rentals", address="1 Main Road", phone="555-0100", email="billing@acme.test")


@pytest.fixture
def repository(db):
    return SqlDocumentRepository(db)


@pytest.fixture
def service(repository, artifact_store, clock, company):
    return InvoiceService(repository, artifact_store, clock=clock, company=company)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(first_name="Jane", last_name="Doe", role="tenant"):
        counter["n"] += 1
        user = User(
            email=f"user{counter['n']}@example.com",
            first_name=first_name,
            last_name=last_name,
            role=role,
        )
        db.add(user)
        db.commit()
        return user.id

    return _make


@pytest.fixture
def make_property(db):
    def _make(manager_id=None, name="Sunset Condos", address="12 Beach Road"):
        prop = Property(property_name=name, address=address, manager_id=manager_id, units=4)
        db.add(prop)
        db.commit()
        return prop.id

    return _make


@pytest.fixture
def make_lease(db):
    def _make(property_id, tenant_id, rent="1500.00", start=date(2024, 1, 1), end=None, status="active"):
        lease = Lease(
            property_id=property_id,
            tenant_id=tenant_id,
            unit_number="A1",
            rent_price=Decimal(rent),
            start_date=start,
            end_date=end,
            status=status,
        )
        db.add(lease)
        db.commit()
        return lease.id

    return _make


@pytest.fixture
def client(session_factory, artifact_store, clock):
    def override_get_session():
        session = session_factory()
        try:
            yield session
            session.commit()
        finally:
            session.close()

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_artifact_store] = lambda: artifact_store
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()
