"""Fixtures comunes: SQLite en memoria, reloj fijo y random determinístico."""

from __future__ import annotations

import os
import random

# antes de importar app.*: Settings() se instancia al importar
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-0123456789abcdef0123456789")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.core import base32, totp
from app.core.db import build_engine, create_all
from app.models.user import User
from app.services.two_factor import TwoFactorService

# 2020-09-13T12:26:40Z, justo al inicio de un step de 30s
T0 = 1_600_000_020.0


class FixedClock:
    def __init__(self, now: float = T0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SeededRandom:
    """Reemplazo de secrets.token_bytes para tests (nunca en prod)."""

    def __init__(self, seed: int = 1234):
        self._rng = random.Random(seed)

    def __call__(self, n: int) -> bytes:
        return self._rng.randbytes(n)


@pytest.fixture
async def engine():
    engine = build_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def rng() -> SeededRandom:
    return SeededRandom()


@pytest.fixture
async def user(session) -> User:
    user = User(
        email="ada@example.com",
        full_name="Ada Lovelace",
        hashed_password="not-a-real-hash",
        is_active=True,
        two_factor_enabled=False,
    )
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
def service(session, clock, rng) -> TwoFactorService:
    return TwoFactorService(session, clock=clock, random_bytes=rng)


@pytest.fixture
def code_for(clock):
    """Código TOTP del step actual del reloj fijo (+offset steps)."""
    def _code(secret_b32: str, offset: int = 0) -> str:
        step = totp.time_step(clock()) + offset
        return totp.derive_code(base32.decode(secret_b32), step)
    return _code
