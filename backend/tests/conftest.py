"""
Pytest fixtures for test database, client, authentication and booking data.

Each test gets a fresh in-memory SQLite database; the app's get_db dependency
is overridden to hand out the test session.
"""

import os

# Settings are cached on first import, so the environment must be set first
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

from typing import AsyncGenerator, Awaitable, Callable

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from hotel_booking.main import app
from hotel_booking.db.base import Base
from hotel_booking.db.session import get_db
from hotel_booking.core.security import create_access_token
from hotel_booking.models import (
    Booking,
    Enrollment,
    Hotel,
    Room,
    Ticket,
    TicketStatus,
    TicketType,
    User,
    UserSession,
)

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """One in-memory database per test, shared by every connection."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    # No commit/rollback: tests read request writes through the same session
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _save(db_session: AsyncSession, obj):
    db_session.add(obj)
    await db_session.commit()
    await db_session.refresh(obj)
    return obj


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    counter = {"n": 0}

    async def _make_user() -> User:
        counter["n"] += 1
        return await _save(db_session, User(email=f"guest{counter['n']}@example.com"))

    return _make_user


@pytest_asyncio.fixture
async def make_auth_headers(db_session: AsyncSession) -> Callable[[User], Awaitable[dict]]:
    """Issue a token for the user and register its session."""

    async def _make_auth_headers(user: User) -> dict:
        token = create_access_token(data={"sub": str(user.id)})
        await _save(db_session, UserSession(user_id=user.id, token=token))
        return {"Authorization": f"Bearer {token}"}

    return _make_auth_headers


@pytest_asyncio.fixture
async def make_ticket(db_session: AsyncSession) -> Callable[..., Awaitable[Ticket]]:
    """Enroll the user and give them a ticket of the requested kind."""

    async def _make_ticket(
        user: User,
        *,
        status: TicketStatus = TicketStatus.PAID,
        is_remote: bool = False,
        includes_hotel: bool = True,
    ) -> Ticket:
        enrollment = await _save(db_session, Enrollment(user_id=user.id, name=f"Guest {user.id}"))
        ticket_type = await _save(
            db_session,
            TicketType(
                name="In person + hotel" if includes_hotel else "In person",
                price=600 if includes_hotel else 250,
                is_remote=is_remote,
                includes_hotel=includes_hotel,
            ),
        )
        return await _save(
            db_session,
            Ticket(enrollment_id=enrollment.id, ticket_type_id=ticket_type.id, status=status.value),
        )

    return _make_ticket


@pytest_asyncio.fixture
async def hotel(db_session: AsyncSession) -> Hotel:
    return await _save(db_session, Hotel(name="Driven Resort", image="https://example.com/hotel.png"))


@pytest_asyncio.fixture
async def make_room(db_session: AsyncSession, hotel: Hotel) -> Callable[[int], Awaitable[Room]]:
    async def _make_room(capacity: int) -> Room:
        return await _save(db_session, Room(name=f"Room for {capacity}", capacity=capacity, hotel_id=hotel.id))

    return _make_room


@pytest_asyncio.fixture
async def make_booking(db_session: AsyncSession) -> Callable[[User, Room], Awaitable[Booking]]:
    async def _make_booking(user: User, room: Room) -> Booking:
        return await _save(db_session, Booking(user_id=user.id, room_id=room.id))

    return _make_booking


@pytest_asyncio.fixture
async def guest(make_user, make_ticket) -> User:
    """A user holding a paid, in-person ticket that includes the hotel."""
    user = await make_user()
    await make_ticket(user)
    return user


@pytest_asyncio.fixture
async def auth_headers(guest: User, make_auth_headers) -> dict:
    return await make_auth_headers(guest)
