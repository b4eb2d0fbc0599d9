"""Dependencies — engine wiring and caller identity for route handlers.

Invariants:
    - One Services bundle per app, built in the lifespan from Settings
    - Every calendar route receives an Actor parsed from x-user-id / x-role headers;
      a missing or unknown role is a 401
    - SQL store when DATABASE_URL is set, in-memory store otherwise

Design Decisions:
    - Services stored on app.state, so tests can install their own bundle without patching modules
"""

from dataclasses import dataclass

from fastapi import Header, Request

from slot_scheduler.config import Settings
from slot_scheduler.core.domain_types import UserRole
from slot_scheduler.core.errors import AuthenticationError, ForbiddenError
from slot_scheduler.core.repository_protocols import (
    ContractGateway, MeetingProvider, TransactionManager,
)
from slot_scheduler.infrastructure.database import DatabaseSessionManager, init_db
from slot_scheduler.infrastructure.gateways import (
    SimulatedContractGateway, SimulatedMeetProvider,
)
from slot_scheduler.infrastructure.memory_store import InMemoryTransactionManager
from slot_scheduler.infrastructure.sql_store import SqlTransactionManager
from slot_scheduler.services.notification_dispatch import NotificationDispatch
from slot_scheduler.services.scheduling_engine import SchedulingEngine
from slot_scheduler.services.sweep_engine import SweepEngine


@dataclass
class Services:
    tx: TransactionManager
    scheduling: SchedulingEngine
    sweep: SweepEngine
    notifications: NotificationDispatch
    persistence: str
    db: DatabaseSessionManager | None = None


def build_services(
    tx: TransactionManager,
    meet_provider: MeetingProvider | None = None,
    contract_gateway: ContractGateway | None = None,
    persistence: str = "in-memory",
    db: DatabaseSessionManager | None = None,
) -> Services:
    return Services(
        tx=tx,
        scheduling=SchedulingEngine(tx, meet_provider or SimulatedMeetProvider()),
        sweep=SweepEngine(tx, contract_gateway or SimulatedContractGateway()),
        notifications=NotificationDispatch(tx),
        persistence=persistence,
        db=db,
    )


def services_from_settings(settings: Settings) -> Services:
    if settings.database_url:
        db = init_db(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )
        return build_services(SqlTransactionManager(db), persistence="postgres", db=db)
    return build_services(InMemoryTransactionManager())


def get_services(request: Request) -> Services:
    return request.app.state.services


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: UserRole

    def require(self, *roles: UserRole, message: str) -> None:
        if self.role not in roles:
            raise ForbiddenError(message)


async def get_actor(
    x_user_id: str | None = Header(None),
    x_role: str | None = Header(None),
) -> Actor:
    """Caller identity from headers."""
    if not x_user_id or x_role not in {r.value for r in UserRole}:
        raise AuthenticationError()
    return Actor(user_id=x_user_id, role=UserRole(x_role))
