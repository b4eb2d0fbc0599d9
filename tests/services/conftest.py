"""Service test fixtures — stores, fake gateways, and the FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory store (and a fresh SQLite database when asked)
    - Gateways are fakes that record calls and can be switched to fail
    - The client installs its own Services bundle on app.state and removes it afterwards

Design Decisions:
    - ASGITransport does not run the lifespan, so no sweep runner starts during route tests
    - SQLite in-memory for SQL repository tests: fast, no external dependency
      (PostgreSQL-specific isolation is not exercised here)
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from slot_scheduler.api.dependencies import build_services
from slot_scheduler.core.domain_types import ContractResolution
from slot_scheduler.db.base import Base
from slot_scheduler.infrastructure.database import DatabaseSessionManager
from slot_scheduler.infrastructure.gateways import SimulatedContractGateway
from slot_scheduler.infrastructure.memory_store import InMemoryTransactionManager
from slot_scheduler.infrastructure.sql_store import SqlTransactionManager
from slot_scheduler.main import app
from slot_scheduler.services.notification_dispatch import NotificationDispatch
from slot_scheduler.services.scheduling_engine import SchedulingEngine
from slot_scheduler.services.sweep_engine import SweepEngine


class FakeMeetProvider:
    """Deterministic meeting links; raises when `fail` is set."""

    def __init__(self):
        self.calls: list[str] = []
        self.fail = False

    async def create_meeting(self, slot_id, executive_id, owner_id):
        self.calls.append(slot_id)
        if self.fail:
            raise ConnectionError("meet provider unreachable")
        return f"https://meet.google.com/{slot_id}-{len(self.calls)}"


class FakeContractGateway:
    """Suffix-based resolution (ok/br), with per-contract overrides and a failure switch."""

    def __init__(self):
        self.calls: list[str] = []
        self.overrides: dict[str, ContractResolution] = {}
        self.fail = False
        self._simulated = SimulatedContractGateway()

    async def evaluate_contract(self, contract_id):
        self.calls.append(contract_id)
        if self.fail:
            raise TimeoutError("contract service timed out")
        if contract_id in self.overrides:
            return self.overrides[contract_id]
        return await self._simulated.evaluate_contract(contract_id)


@pytest.fixture
def tx():
    return InMemoryTransactionManager()


@pytest.fixture
def meet():
    return FakeMeetProvider()


@pytest.fixture
def contracts():
    return FakeContractGateway()


@pytest.fixture
def scheduling(tx, meet):
    return SchedulingEngine(tx, meet)


@pytest.fixture
def sweeper(tx, contracts):
    return SweepEngine(tx, contracts)


@pytest.fixture
def dispatch(tx):
    return NotificationDispatch(tx)


@pytest.fixture
async def sql_manager():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield DatabaseSessionManager.from_engine(engine)
    await engine.dispose()


@pytest.fixture
def sql_tx(sql_manager):
    return SqlTransactionManager(sql_manager)


@pytest.fixture
async def client(tx, meet, contracts):
    """FastAPI test client over the in-memory store and fake gateways."""
    app.state.services = build_services(tx, meet, contracts)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    app.state.services = None


