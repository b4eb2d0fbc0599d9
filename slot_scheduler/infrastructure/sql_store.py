"""SQL Store — SQLAlchemy repositories and the transactional executor for persistent deployments.

Invariants:
    - One AsyncSession per unit of work, wrapped in session.begin(): commit on success,
      rollback on any exception
    - Rows are converted to frozen entities before leaving this module
    - DateTimes read back without tzinfo (SQLite) are treated as UTC
    - A unique-key violation on slot_id surfaces as DuplicateSlotError, not DatabaseError
    - Notifications of one batch get strictly increasing created_at values

Design Decisions:
    - Repositories share the unit of work's session, so reads see earlier writes
      of the same unit of work (autoflush) and nothing else uncommitted
    - Isolation comes from the engine (SERIALIZABLE, see database.py)
"""

import logging
import uuid
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TypeVar

from sqlalchemy import and_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from slot_scheduler.core.domain_types import DailyBlockStatus, NotificationType, SlotStatus
from slot_scheduler.core.entities import (
    DailyBlock, ExecutiveCalendar, Notification, NotificationDraft, ScheduledSlot,
)
from slot_scheduler.core.errors import DuplicateSlotError
from slot_scheduler.infrastructure.database import DatabaseSessionManager
from slot_scheduler.models import CalendarRecord, NotificationRecord, SlotRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _to_calendar(row: CalendarRecord) -> ExecutiveCalendar:
    return ExecutiveCalendar(
        executive_id=row.executive_id,
        availability=tuple(
            DailyBlock(entry["date"], DailyBlockStatus(entry["status"]))
            for entry in row.availability or []
        ),
        timezone=row.timezone,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def _to_slot(row: SlotRecord) -> ScheduledSlot:
    return ScheduledSlot(
        id=str(row.id),
        slot_id=row.slot_id,
        executive_id=row.executive_id,
        owner_id=row.owner_id,
        contract_id=row.contract_id,
        start_date=row.start_date,
        end_date=row.end_date,
        status=SlotStatus(row.status),
        meeting_link=row.meeting_link,
        contract_deadline_date=row.contract_deadline_date,
        created_at=_aware(row.created_at),
    )


def _to_notification(row: NotificationRecord) -> Notification:
    return Notification(
        id=str(row.id),
        user_id=row.user_id,
        type=NotificationType(row.type),
        reference_id=row.reference_id,
        message=row.message,
        read=row.read,
        created_at=_aware(row.created_at),
    )


class SqlCalendarRepository:
    def __init__(self, db: AsyncSession):
        self._db = db

    async def get_by_executive_id(self, executive_id: str) -> ExecutiveCalendar | None:
        row = await self._db.get(CalendarRecord, executive_id)
        return _to_calendar(row) if row else None

    async def upsert(
        self, executive_id: str, availability: Sequence[DailyBlock],
    ) -> ExecutiveCalendar:
        payload = [{"date": b.date, "status": b.status.value} for b in availability]
        now = datetime.now(timezone.utc)
        row = await self._db.get(CalendarRecord, executive_id)
        if row is None:
            row = CalendarRecord(
                executive_id=executive_id, availability=payload,
                created_at=now, updated_at=now,
            )
            self._db.add(row)
        else:
            row.availability = payload
            row.updated_at = now
        await self._db.flush()
        return _to_calendar(row)


class SqlSlotRepository:
    def __init__(self, db: AsyncSession):
        self._db = db

    async def create(
        self, *, slot_id: str, executive_id: str, owner_id: str, contract_id: str,
        start_date: str, end_date: str, status: SlotStatus, meeting_link: str,
        contract_deadline_date: str | None = None,
    ) -> ScheduledSlot:
        row = SlotRecord(
            id=uuid.uuid4(),
            slot_id=slot_id,
            executive_id=executive_id,
            owner_id=owner_id,
            contract_id=contract_id,
            start_date=start_date,
            end_date=end_date,
            status=status.value,
            meeting_link=meeting_link,
            contract_deadline_date=contract_deadline_date,
            created_at=datetime.now(timezone.utc),
        )
        self._db.add(row)
        try:
            await self._db.flush()
        except IntegrityError as e:
            # only slot_id is unique besides the generated primary key
            logger.warning(
                "Concurrent insert of an existing slot_id", extra={"slot_id": slot_id},
            )
            raise DuplicateSlotError(slot_id) from e
        return _to_slot(row)

    async def find_by_slot_id(self, slot_id: str) -> ScheduledSlot | None:
        result = await self._db.execute(
            select(SlotRecord).where(SlotRecord.slot_id == slot_id),
        )
        row = result.scalar_one_or_none()
        return _to_slot(row) if row else None

    async def list_by_executive_id(self, executive_id: str) -> list[ScheduledSlot]:
        result = await self._db.execute(
            select(SlotRecord).where(SlotRecord.executive_id == executive_id),
        )
        return [_to_slot(r) for r in result.scalars().all()]

    async def list_by_owner_id(self, owner_id: str) -> list[ScheduledSlot]:
        result = await self._db.execute(
            select(SlotRecord).where(SlotRecord.owner_id == owner_id),
        )
        return [_to_slot(r) for r in result.scalars().all()]

    async def list_all(self) -> list[ScheduledSlot]:
        result = await self._db.execute(select(SlotRecord))
        return [_to_slot(r) for r in result.scalars().all()]

    async def update_status(
        self, slot_id: str, status: SlotStatus,
    ) -> ScheduledSlot | None:
        result = await self._db.execute(
            select(SlotRecord).where(SlotRecord.slot_id == slot_id),
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None
        updated = _to_slot(row).with_status(status)
        row.status = updated.status.value
        await self._db.flush()
        return updated


class SqlNotificationRepository:
    def __init__(self, db: AsyncSession):
        self._db = db

    async def create_many(
        self, drafts: Sequence[NotificationDraft],
    ) -> list[Notification]:
        if not drafts:
            return []
        # one microsecond apart: newest-first listing keeps batch order reversed
        created_at = datetime.now(timezone.utc)
        rows = [
            NotificationRecord(
                id=uuid.uuid4(),
                user_id=d.user_id,
                type=d.type.value,
                reference_id=d.reference_id,
                message=d.message,
                read=False,
                created_at=created_at + timedelta(microseconds=i),
            )
            for i, d in enumerate(drafts)
        ]
        self._db.add_all(rows)
        await self._db.flush()
        return [_to_notification(r) for r in rows]

    async def list_by_user_id(self, user_id: str) -> list[Notification]:
        result = await self._db.execute(
            select(NotificationRecord)
            .where(NotificationRecord.user_id == user_id)
            .order_by(NotificationRecord.created_at.desc()),
        )
        return [_to_notification(r) for r in result.scalars().all()]

    async def list_all(self) -> list[Notification]:
        result = await self._db.execute(select(NotificationRecord))
        return [_to_notification(r) for r in result.scalars().all()]

    async def mark_read(self, user_id: str, notification_ids: Sequence[str]) -> int:
        ids = []
        for raw in notification_ids:
            try:
                ids.append(uuid.UUID(raw))
            except ValueError:
                continue  # not one of ours; ignored like any other foreign id
        if not ids:
            return 0
        result = await self._db.execute(
            update(NotificationRecord)
            .where(and_(
                NotificationRecord.user_id == user_id,
                NotificationRecord.read.is_(False),
                NotificationRecord.id.in_(ids),
            ))
            .values(read=True)
            .execution_options(synchronize_session="fetch"),
        )
        return result.rowcount or 0

    async def exists_by_signature(self, draft: NotificationDraft) -> bool:
        result = await self._db.execute(
            select(NotificationRecord.id).where(and_(
                NotificationRecord.user_id == draft.user_id,
                NotificationRecord.type == draft.type.value,
                NotificationRecord.reference_id == draft.reference_id,
                NotificationRecord.message == draft.message,
            )).limit(1),
        )
        return result.first() is not None


@dataclass
class SqlRepositoryBundle:
    calendars: SqlCalendarRepository
    slots: SqlSlotRepository
    notifications: SqlNotificationRepository

    @classmethod
    def for_session(cls, db: AsyncSession) -> "SqlRepositoryBundle":
        return cls(
            calendars=SqlCalendarRepository(db),
            slots=SqlSlotRepository(db),
            notifications=SqlNotificationRepository(db),
        )


class SqlTransactionManager:
    """Runs each unit of work in its own database transaction."""

    def __init__(self, manager: DatabaseSessionManager):
        self._manager = manager

    async def run_in_transaction(
        self, work: Callable[[SqlRepositoryBundle], Awaitable[T]],
    ) -> T:
        async with self._manager.session() as db:
            async with db.begin():
                return await work(SqlRepositoryBundle.for_session(db))
