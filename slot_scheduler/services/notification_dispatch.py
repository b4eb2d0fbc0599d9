"""Notification Dispatch — direct pushes and mark-read for one user.

Invariants:
    - Direct pushes bypass the dedup signature (only the sweep deduplicates)
    - mark-read touches only ids owned by the user and still unread; others are ignored
    - Result is the user's full list, newest first
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from slot_scheduler.core.domain_types import NotificationType
from slot_scheduler.core.entities import Notification, NotificationDraft
from slot_scheduler.core.repository_protocols import RepositoryBundle, TransactionManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PushNotification:
    type: NotificationType
    reference_id: str
    message: str


class NotificationDispatch:
    def __init__(self, tx: TransactionManager):
        self._tx = tx

    async def push_or_read(
        self,
        user_id: str,
        notifications: Sequence[PushNotification] | None = None,
        mark_read_ids: Sequence[str] | None = None,
    ) -> list[Notification]:
        drafts = [
            NotificationDraft(user_id, NotificationType(n.type), n.reference_id, n.message)
            for n in notifications or ()
        ]

        async def work(repos: RepositoryBundle) -> list[Notification]:
            if drafts:
                await repos.notifications.create_many(drafts)
            if mark_read_ids:
                marked = await repos.notifications.mark_read(user_id, mark_read_ids)
                logger.debug(f"Marked {marked} notification(s) read", extra={"user_id": user_id})
            return await repos.notifications.list_by_user_id(user_id)

        return await self._tx.run_in_transaction(work)
