import os

# Settings are read at import time, so the environment must be ready first
os.environ["DB_DSN"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from datetime import datetime, timedelta
from decimal import Decimal

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from trekdesk.core.unit_of_work import UnitOfWork
from trekdesk.infrastructure.database import get_session
from trekdesk.main import app
from trekdesk.models import Base, Batch, Booking, BookingParticipant, Trek, User
from trekdesk.security import create_token


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def uow(session):
    return UnitOfWork(session)


@pytest_asyncio.fixture
async def trek(session):
    trek = Trek(name="Hampta Pass", region="Himachal", difficulty="moderate", duration_days=5)
    session.add(trek)
    await session.commit()
    return trek


@pytest.fixture
def make_batch(session):
    async def _make(trek, *, days_ahead=30, max_participants=10,
                    current_participants=0, reserved_slots=0, price="5000"):
        start = datetime.utcnow() + timedelta(days=days_ahead)
        batch = Batch(
            trek_id=trek.id,
            start_date=start,
            end_date=start + timedelta(days=5),
            price=Decimal(price),
            max_participants=max_participants,
            current_participants=current_participants,
            reserved_slots=reserved_slots,
        )
        session.add(batch)
        await session.commit()
        return batch

    return _make


@pytest_asyncio.fixture
async def batch(make_batch, trek):
    return await make_batch(trek)


@pytest_asyncio.fixture
async def user(session):
    user = User(name="Asha Rao", email="asha.rao@gmail.com", phone="+919123456789")
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
def make_booking(session):
    """Store a booking directly and count its seats on the batch"""
    async def _make(batch, user, *, participants=2, status="confirmed", total_price=None):
        booking = Booking(
            trek_id=batch.trek_id,
            batch_id=batch.id,
            user_id=user.id,
            number_of_participants=participants,
            total_price=Decimal(total_price) if total_price is not None else batch.price * participants,
            payment_status="payment_completed",
            status=status,
            user_name=user.name,
            user_email=user.email,
            user_phone=user.phone,
            participants=[
                BookingParticipant(name=f"Trekker {i + 1}", age=30, gender="Female")
                for i in range(participants)
            ],
        )
        session.add(booking)
        if status in ("pending", "confirmed"):
            batch.current_participants = (batch.current_participants or 0) + participants
        await session.commit()
        return booking

    return _make


@pytest.fixture
def participant_details():
    return [
        {"name": "Asha Rao", "age": 29, "gender": "Female"},
        {"name": "Vikram Rao", "age": "31", "gender": "Male", "medical_conditions": "Asthma"},
    ]


@pytest_asyncio.fixture
async def client(session_factory):
    async def _get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _get_session
    token = create_token(1, "admin")
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport,
        base_url="http://testserver",
        headers={"Authorization": f"Bearer {token}"},
    ) as client:
        yield client
    app.dependency_overrides.clear()
