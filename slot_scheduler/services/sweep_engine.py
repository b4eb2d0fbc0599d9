"""Sweep Engine — one idempotent periodic tick over all non-terminal slots.

Invariants:
    - The whole tick is one unit of work: a failure leaves every slot and notification untouched
    - A notification is created only if its signature exists neither in storage
      nor among drafts already produced by this tick
    - Status only moves forward; a slot is written at most once per tick
    - Contract resolution is queried only once the deadline instant has passed,
      and again on every tick while it reports PENDING

Design Decisions:
    - All drafts persisted together at the end of the tick
    - Slots processed in (start_date, slot_id) order: deterministic notification order
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from slot_scheduler.core.domain_types import ContractResolution
from slot_scheduler.core.entities import NotificationDraft, ScheduledSlot
from slot_scheduler.core.errors import ExternalResolutionError, SchedulerError
from slot_scheduler.core.repository_protocols import (
    ContractGateway, RepositoryBundle, TransactionManager,
)
from slot_scheduler.core.sweep_rules import (
    deadline_alerts, deadline_reached, meeting_reminders, status_after_resolution,
    status_after_start, sweepable,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    created_notifications: int
    transitioned: int = 0

    def to_dict(self) -> dict:
        return {
            "created_notifications": self.created_notifications,
            "transitioned": self.transitioned,
        }


class SweepEngine:
    """Reminder emission, start transition, and contract-driven terminal transitions."""

    def __init__(self, tx: TransactionManager, contract_gateway: ContractGateway):
        self._tx = tx
        self._contracts = contract_gateway

    async def sweep(self, now: datetime | None = None) -> SweepResult:
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        async def work(repos: RepositoryBundle) -> SweepResult:
            pending: list[NotificationDraft] = []
            seen: set[tuple] = set()
            transitioned = 0

            for slot in sweepable(await repos.slots.list_all()):
                drafts = meeting_reminders(slot, now) + deadline_alerts(slot, now)
                for draft in drafts:
                    if draft.signature in seen:
                        continue
                    seen.add(draft.signature)
                    if not await repos.notifications.exists_by_signature(draft):
                        pending.append(draft)

                status = status_after_start(slot.status, slot.start_date, now)
                if deadline_reached(slot, now):
                    resolution = await self._resolve(slot)
                    status = status_after_resolution(status, resolution)

                if status != slot.status:
                    await repos.slots.update_status(slot.slot_id, status)
                    transitioned += 1
                    logger.info(
                        f"Slot {slot.status.value} -> {status.value}",
                        extra={"slot_id": slot.slot_id},
                    )

            if pending:
                await repos.notifications.create_many(pending)
            return SweepResult(len(pending), transitioned)

        result = await self._tx.run_in_transaction(work)
        logger.info(
            "Sweep tick committed",
            extra={
                "created_notifications": result.created_notifications,
                "transitioned": result.transitioned,
            },
        )
        return result

    async def _resolve(self, slot: ScheduledSlot) -> ContractResolution:
        try:
            return ContractResolution(
                await self._contracts.evaluate_contract(slot.contract_id),
            )
        except SchedulerError:
            raise
        except Exception as e:
            logger.error(
                f"Contract resolution failed: {e}",
                extra={"slot_id": slot.slot_id, "error_code": "EXTERNAL_RESOLUTION_FAILURE"},
            )
            raise ExternalResolutionError(slot.contract_id, str(e)) from e
