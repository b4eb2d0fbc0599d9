"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - Every repository call happens inside TransactionManager.run_in_transaction

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE these results are never async themselves —
      the services orchestrate the async calls around the pure logic
    - Repositories return frozen entities (copies), never live storage objects
"""

from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol, TypeVar

from slot_scheduler.core.domain_types import ContractResolution, SlotStatus
from slot_scheduler.core.entities import (
    DailyBlock, ExecutiveCalendar, Notification, NotificationDraft, ScheduledSlot,
)

T = TypeVar("T")


class CalendarRepository(Protocol):
    """Contract for executive calendar persistence."""
    async def get_by_executive_id(self, executive_id: str) -> ExecutiveCalendar | None: ...
    async def upsert(
        self, executive_id: str, availability: Sequence[DailyBlock],
    ) -> ExecutiveCalendar: ...


class SlotRepository(Protocol):
    """Contract for scheduled slot persistence."""
    async def create(
        self, *, slot_id: str, executive_id: str, owner_id: str, contract_id: str,
        start_date: str, end_date: str, status: SlotStatus, meeting_link: str,
        contract_deadline_date: str | None = None,
    ) -> ScheduledSlot: ...
    async def find_by_slot_id(self, slot_id: str) -> ScheduledSlot | None: ...
    async def list_by_executive_id(self, executive_id: str) -> list[ScheduledSlot]: ...
    async def list_by_owner_id(self, owner_id: str) -> list[ScheduledSlot]: ...
    async def list_all(self) -> list[ScheduledSlot]: ...
    async def update_status(
        self, slot_id: str, status: SlotStatus,
    ) -> ScheduledSlot | None: ...


class NotificationRepository(Protocol):
    """Contract for notification persistence."""
    async def create_many(
        self, drafts: Sequence[NotificationDraft],
    ) -> list[Notification]: ...
    async def list_by_user_id(self, user_id: str) -> list[Notification]: ...
    async def list_all(self) -> list[Notification]: ...
    async def mark_read(self, user_id: str, notification_ids: Sequence[str]) -> int: ...
    async def exists_by_signature(self, draft: NotificationDraft) -> bool: ...


class RepositoryBundle(Protocol):
    """The three repositories bound to one unit of work."""
    calendars: CalendarRepository
    slots: SlotRepository
    notifications: NotificationRepository


class TransactionManager(Protocol):
    """Runs a unit of work atomically: all writes become visible, or none do."""
    async def run_in_transaction(
        self, work: Callable[[RepositoryBundle], Awaitable[T]],
    ) -> T: ...


class MeetingProvider(Protocol):
    """External meeting-link provisioning; must return a unique link per call."""
    async def create_meeting(
        self, slot_id: str, executive_id: str, owner_id: str,
    ) -> str: ...


class ContractGateway(Protocol):
    """External contract resolution lookup."""
    async def evaluate_contract(self, contract_id: str) -> ContractResolution: ...
