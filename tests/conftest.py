"""Pytest configuration and fixtures for tests."""
import pytest
from datetime import date, datetime, time
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Generator, Optional
from contextlib import contextmanager

from carebook.database import Base
from carebook.models import Carer, Client, LineItem, Shift
from carebook.record_store import RecordStoreGateway
import carebook.models  # noqa: F401


def create_test_engine():
    """
    In-memory SQLite engine shared by every connection.

    StaticPool keeps one connection so that sessions opened from other
    threads (TestClient) see the same database.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture(scope="function")
def test_engine():
    """Create a fresh in-memory database for each test."""
    engine = create_test_engine()
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def test_session_factory(test_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def test_db(test_session_factory) -> Generator[Session, None, None]:
    """
    Create a test database session for each test.
    Uses an in-memory SQLite database for fast testing.
    """
    session = test_session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def gateway(test_db: Session) -> RecordStoreGateway:
    return RecordStoreGateway(test_db)


@contextmanager
def get_test_gateway():
    """
    Context manager for creating a gateway over a fresh database.
    Used for property-based tests where fixtures don't work well.
    """
    engine = create_test_engine()
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestSessionLocal()

    try:
        yield RecordStoreGateway(session)
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


def add_carer(db: Session, carer_id: int, first_name: str = "Alex", last_name: str = "Nguyen", **kwargs) -> Carer:
    """Insert a carer with the given ID."""
    carer = Carer(id=carer_id, first_name=first_name, last_name=last_name, **kwargs)
    db.add(carer)
    db.commit()
    return carer


def add_client(db: Session, client_id: int, first_name: str = "Jordan", last_name: str = "Lee", **kwargs) -> Client:
    """Insert a client with the given ID."""
    client = Client(id=client_id, first_name=first_name, last_name=last_name, **kwargs)
    db.add(client)
    db.commit()
    return client


def add_line_item(
    db: Session,
    code: str = "01_011_0107_1_1",
    category: str = "Assistance with Self-Care",
    description: Optional[str] = "Self-Care Activities - Weekday Daytime",
    billed_rate: Optional[str] = "50.00"
) -> LineItem:
    """Insert a line item."""
    item = LineItem(
        code=code,
        category=category,
        description=description,
        billed_rate=Decimal(billed_rate) if billed_rate is not None else None
    )
    db.add(item)
    db.commit()
    return item


def add_shift(
    db: Session,
    shift_date: date,
    carer_id: int,
    client_id: int,
    cost: Optional[str] = None,
    line_item_id: Optional[int] = None,
    category: Optional[str] = None,
    start: time = time(9, 0),
    end: time = time(12, 0)
) -> Shift:
    """Insert a shift running from ``start`` to ``end`` on ``shift_date``."""
    shift = Shift(
        shift_date=shift_date,
        time_from=datetime.combine(shift_date, start),
        time_to=datetime.combine(shift_date, end),
        carer_id=carer_id,
        client_id=client_id,
        line_item_id=line_item_id,
        category=category,
        cost=Decimal(cost) if cost is not None else None
    )
    db.add(shift)
    db.commit()
    return shift
