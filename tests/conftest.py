"""
Pytest configuration for the application
"""
import hashlib
import hmac
import json
import os
import time
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncGenerator, Dict, Tuple
from uuid import UUID, uuid4

import httpx
import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from npsdesk.auth.jwt import create_access_token
from npsdesk.core.config import settings
from npsdesk.db import models  # noqa: F401
from npsdesk.db.base import Base
from npsdesk.db.models import Account, Campaign, NpsResponse, Subscription
from npsdesk.db.session import get_db, get_session_factory
from npsdesk.main import create_application
from npsdesk.services import limits as limits_service


# Set test environment and override runtime settings to avoid external deps
os.environ["ENV"] = "test"
settings.ENV = "test"
API_PREFIX = f"{settings.API_PREFIX}/v1"
WEBHOOK_SECRET = "whsec_test_signing_secret"


class FakeRedis:
    """Minimal async Redis stub for rate limiting and idempotency tests."""

    def __init__(self) -> None:
        self.store: Dict[str, int | str] = {}

    async def incr(self, key: str) -> int:
        current = int(self.store.get(key, 0)) + 1
        self.store[key] = current
        return current

    async def expire(self, key: str, seconds: int) -> None:
        self.store.setdefault(f"{key}:ttl", seconds)

    async def set(self, key: str, value: str, ex: int | None = None, nx: bool = False) -> bool:
        if nx and key in self.store:
            return False
        self.store[key] = value
        if ex is not None:
            self.store[f"{key}:ttl"] = ex
        return True


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch) -> FakeRedis:
    """Patch the limits module to use an in-memory Redis stub."""

    fake = FakeRedis()
    monkeypatch.setattr(limits_service, "_redis_client", fake, raising=False)
    yield fake
    monkeypatch.setattr(limits_service, "_redis_client", None, raising=False)


@pytest_asyncio.fixture
async def test_db_engine(tmp_path):
    """
    Create a throwaway SQLite database with all tables.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test_app.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(test_db_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Create a new database session for a test.
    """
    session_factory = async_sessionmaker(test_db_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_app(test_db: AsyncSession, test_db_engine) -> AsyncGenerator[FastAPI, None]:
    """
    Create a FastAPI test application sharing the test session.

    Endpoints that open their own sessions get a factory bound to the test
    database.
    """
    app = create_application()
    session_factory = async_sessionmaker(test_db_engine, expire_on_commit=False)

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield test_db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    async with LifespanManager(app):
        yield app


@pytest_asyncio.fixture
async def client(test_app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    Create an async HTTP client for testing.
    """
    transport = httpx.ASGITransport(app=test_app)
    async with httpx.AsyncClient(
        transport=transport,
        base_url="http://test",
    ) as client:
        yield client


def build_auth_header(account_id: UUID) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(account_id)}"}


@pytest.fixture
def webhook_secret(monkeypatch) -> str:
    """Configure the Stripe webhook signing secret for the test."""

    monkeypatch.setattr(settings.billing, "stripe_webhook_secret", WEBHOOK_SECRET)
    return WEBHOOK_SECRET


def stripe_signed(
    event: Dict[str, Any], secret: str = WEBHOOK_SECRET, timestamp: int | None = None
) -> Tuple[bytes, Dict[str, str]]:
    """Serialize ``event`` and sign it the way Stripe signs webhook deliveries."""

    payload = json.dumps(event).encode()
    ts = timestamp if timestamp is not None else int(time.time())
    signature = hmac.new(
        secret.encode(), f"{ts}.".encode() + payload, hashlib.sha256
    ).hexdigest()
    return payload, {
        "Stripe-Signature": f"t={ts},v1={signature}",
        "Content-Type": "application/json",
    }


def stripe_event(event_type: str, obj: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": f"evt_{uuid4().hex[:16]}",
        "object": "event",
        "type": event_type,
        "data": {"object": obj},
    }


def days_ago(days: float, now: datetime | None = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now - timedelta(days=days)


async def seed_account(
    session: AsyncSession,
    *,
    created_at: datetime | None = None,
    email: str | None = None,
    status: str | None = None,
    plan_id: str | None = None,
    provider_subscription_id: str | None = None,
) -> Account:
    """Insert an account, optionally with a subscription record."""

    account = Account(
        email=email or f"owner-{uuid4().hex[:10]}@example.com",
        name="Owner",
        created_at=created_at or datetime.now(timezone.utc),
    )
    session.add(account)
    await session.flush()

    if status is not None:
        today = datetime.now(timezone.utc).date()
        session.add(
            Subscription(
                account_id=account.id,
                status=status,
                plan_id=plan_id,
                current_period_start=today,
                current_period_end=today + timedelta(days=30),
                cancel_at_period_end=False,
                provider_subscription_id=provider_subscription_id,
            )
        )
    await session.commit()
    return account


async def seed_campaign(
    session: AsyncSession, account_id: UUID, name: str = "Campaign", active: bool = True
) -> Campaign:
    campaign = Campaign(account_id=account_id, name=name, active=active)
    session.add(campaign)
    await session.commit()
    return campaign


async def seed_responses(
    session: AsyncSession,
    campaign_id: UUID,
    count: int,
    *,
    score: int = 9,
    created_at: datetime | None = None,
    source: str | None = None,
) -> None:
    for _ in range(count):
        session.add(
            NpsResponse(
                campaign_id=campaign_id,
                score=score,
                source=source,
                created_at=created_at or datetime.now(timezone.utc),
            )
        )
    await session.commit()
