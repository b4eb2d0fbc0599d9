"""In-Memory Store — snapshot-on-entry, swap-on-commit transaction manager.

Invariants:
    - Committed state is immutable (MappingProxyType over frozen entities)
    - Each unit of work writes to a private copy; the copy replaces committed state
      only if the work returns without raising
    - Units of work are serialized by an asyncio.Lock: no dirty reads, no lost writes
    - Repositories return entities, which are frozen, so callers cannot mutate the store

Design Decisions:
    - Shallow dict copies suffice for snapshots because every stored value is frozen
    - Used when no DATABASE_URL is configured and as the default store in tests
"""

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import TypeVar

from slot_scheduler.core.domain_types import SlotStatus
from slot_scheduler.core.entities import (
    DailyBlock, ExecutiveCalendar, Notification, NotificationDraft, ScheduledSlot,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class StoreState:
    """Committed, read-only view of the whole store."""
    calendars: Mapping[str, ExecutiveCalendar] = field(
        default_factory=lambda: MappingProxyType({}),
    )
    slots: Mapping[str, ScheduledSlot] = field(
        default_factory=lambda: MappingProxyType({}),
    )
    notifications: Mapping[str, Notification] = field(
        default_factory=lambda: MappingProxyType({}),
    )


@dataclass
class _WorkingState:
    """Private mutable copy owned by exactly one unit of work."""
    calendars: dict[str, ExecutiveCalendar]
    slots: dict[str, ScheduledSlot]
    notifications: dict[str, Notification]

    @classmethod
    def from_committed(cls, state: StoreState) -> "_WorkingState":
        return cls(
            calendars=dict(state.calendars),
            slots=dict(state.slots),
            notifications=dict(state.notifications),
        )

    def freeze(self) -> StoreState:
        return StoreState(
            calendars=MappingProxyType(dict(self.calendars)),
            slots=MappingProxyType(dict(self.slots)),
            notifications=MappingProxyType(dict(self.notifications)),
        )


class InMemoryCalendarRepository:
    def __init__(self, state: _WorkingState, clock: Clock):
        self._state = state
        self._clock = clock

    async def get_by_executive_id(self, executive_id: str) -> ExecutiveCalendar | None:
        return self._state.calendars.get(executive_id)

    async def upsert(
        self, executive_id: str, availability: Sequence[DailyBlock],
    ) -> ExecutiveCalendar:
        now = self._clock()
        current = self._state.calendars.get(executive_id)
        calendar = ExecutiveCalendar(
            executive_id=executive_id,
            availability=tuple(availability),
            created_at=current.created_at if current else now,
            updated_at=now,
        )
        self._state.calendars[executive_id] = calendar
        return calendar


class InMemorySlotRepository:
    def __init__(self, state: _WorkingState, clock: Clock):
        self._state = state
        self._clock = clock

    async def create(
        self, *, slot_id: str, executive_id: str, owner_id: str, contract_id: str,
        start_date: str, end_date: str, status: SlotStatus, meeting_link: str,
        contract_deadline_date: str | None = None,
    ) -> ScheduledSlot:
        slot = ScheduledSlot(
            id=str(uuid.uuid4()),
            slot_id=slot_id,
            executive_id=executive_id,
            owner_id=owner_id,
            contract_id=contract_id,
            start_date=start_date,
            end_date=end_date,
            status=status,
            meeting_link=meeting_link,
            contract_deadline_date=contract_deadline_date,
            created_at=self._clock(),
        )
        self._state.slots[slot.id] = slot
        return slot

    async def find_by_slot_id(self, slot_id: str) -> ScheduledSlot | None:
        return next(
            (s for s in self._state.slots.values() if s.slot_id == slot_id), None,
        )

    async def list_by_executive_id(self, executive_id: str) -> list[ScheduledSlot]:
        return [s for s in self._state.slots.values() if s.executive_id == executive_id]

    async def list_by_owner_id(self, owner_id: str) -> list[ScheduledSlot]:
        return [s for s in self._state.slots.values() if s.owner_id == owner_id]

    async def list_all(self) -> list[ScheduledSlot]:
        return list(self._state.slots.values())

    async def update_status(
        self, slot_id: str, status: SlotStatus,
    ) -> ScheduledSlot | None:
        slot = await self.find_by_slot_id(slot_id)
        if slot is None:
            return None
        updated = slot.with_status(status)
        self._state.slots[slot.id] = updated
        return updated


class InMemoryNotificationRepository:
    def __init__(self, state: _WorkingState, clock: Clock):
        self._state = state
        self._clock = clock

    async def create_many(
        self, drafts: Sequence[NotificationDraft],
    ) -> list[Notification]:
        created_at = self._clock()
        created = []
        for draft in drafts:
            notification = Notification(
                id=str(uuid.uuid4()),
                user_id=draft.user_id,
                type=draft.type,
                reference_id=draft.reference_id,
                message=draft.message,
                created_at=created_at,
            )
            self._state.notifications[notification.id] = notification
            created.append(notification)
        return created

    async def list_by_user_id(self, user_id: str) -> list[Notification]:
        # dict order is insertion order; it breaks created_at ties newest-first
        owned = [
            (seq, n) for seq, n in enumerate(self._state.notifications.values())
            if n.user_id == user_id
        ]
        owned.sort(key=lambda pair: (pair[1].created_at, pair[0]), reverse=True)
        return [n for _, n in owned]

    async def list_all(self) -> list[Notification]:
        return list(self._state.notifications.values())

    async def mark_read(self, user_id: str, notification_ids: Sequence[str]) -> int:
        count = 0
        for notification_id in notification_ids:
            existing = self._state.notifications.get(notification_id)
            if existing and existing.user_id == user_id and not existing.read:
                self._state.notifications[notification_id] = replace(existing, read=True)
                count += 1
        return count

    async def exists_by_signature(self, draft: NotificationDraft) -> bool:
        return any(
            n.signature == draft.signature for n in self._state.notifications.values()
        )


@dataclass
class InMemoryRepositoryBundle:
    calendars: InMemoryCalendarRepository
    slots: InMemorySlotRepository
    notifications: InMemoryNotificationRepository


class InMemoryTransactionManager:
    """Serializable units of work over an immutable committed snapshot."""

    def __init__(self, clock: Clock = _utc_now):
        self._state = StoreState()
        self._lock = asyncio.Lock()
        self._clock = clock

    @property
    def state(self) -> StoreState:
        """Last committed state (read-only)."""
        return self._state

    def _bundle(self, working: _WorkingState) -> InMemoryRepositoryBundle:
        return InMemoryRepositoryBundle(
            calendars=InMemoryCalendarRepository(working, self._clock),
            slots=InMemorySlotRepository(working, self._clock),
            notifications=InMemoryNotificationRepository(working, self._clock),
        )

    async def run_in_transaction(
        self, work: Callable[[InMemoryRepositoryBundle], Awaitable[T]],
    ) -> T:
        async with self._lock:
            working = _WorkingState.from_committed(self._state)
            try:
                result = await work(self._bundle(working))
            except Exception:
                logger.debug("Unit of work failed, discarding private snapshot")
                raise
            self._state = working.freeze()
            return result
