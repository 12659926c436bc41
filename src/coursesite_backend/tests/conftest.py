"""
Pytest configuration and fixtures for all tests.

Every test gets its own in-memory SQLite database and a unit of work with a
mocked notification sink, a mocked blob store and a clock it can move.
"""

import datetime
import itertools
import pytest
from unittest.mock import MagicMock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from coursesite_backend.domain import Course, User
from coursesite_backend.model import Base
from coursesite_backend.unit_of_work import UnitOfWork


class FakeClock:
    """Callable clock that only moves when a test advances it."""

    def __init__(self, now: datetime.datetime):
        self.now = now

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, **kwargs) -> datetime.datetime:
        self.now += datetime.timedelta(**kwargs)
        return self.now


@pytest.fixture
def engine():
    """Create an in-memory database shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def Session(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def session(Session):
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sink():
    return MagicMock()


@pytest.fixture
def storage():
    return MagicMock()


@pytest.fixture
def clock():
    return FakeClock(datetime.datetime(2024, 3, 4, 10, 0, 0))


@pytest.fixture
def uow(session, sink, clock, storage):
    return UnitOfWork(session, sink=sink, clock=clock, storage=storage)


@pytest.fixture
def make_user(uow):
    """Factory creating persisted users with unique email addresses."""
    counter = itertools.count(1)

    def _make_user(first_name="Ada", last_name="Lovelace", email=None, password="correct-horse", is_admin=False) -> User:
        email = email or f"user{next(counter)}@example.org"
        return User.create(uow, first_name, last_name, email, password, is_admin=is_admin)

    return _make_user


@pytest.fixture
def admin(make_user):
    return make_user("Grace", "Hopper", "admin@example.org", is_admin=True)


@pytest.fixture
def professor(make_user):
    return make_user("Alan", "Turing", "professor@example.org")


@pytest.fixture
def student(make_user):
    return make_user("Edsger", "Dijkstra", "student@example.org")


@pytest.fixture
def outsider(make_user):
    return make_user("Barbara", "Liskov", "outsider@example.org")


@pytest.fixture
def course(uow, professor, student, sink):
    """A course with one professor and one student and a clean dirty set."""
    course = Course.create(uow, professor, "Algorithms", "ALG-1")
    course.add_student(student)
    uow.sync.flush()
    sink.reset_mock()
    return course
