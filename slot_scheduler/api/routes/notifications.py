"""Notification Routes — push and mark-read for one user.

Invariants:
    - Pushing requires SYSTEM
    - Marking read requires SYSTEM or the notified user
"""

from fastapi import APIRouter, Depends

from slot_scheduler.api.dependencies import Actor, Services, get_actor, get_services
from slot_scheduler.core.domain_types import UserRole
from slot_scheduler.core.errors import ForbiddenError
from slot_scheduler.schemas.calendar import NotifyRequest
from slot_scheduler.services.notification_dispatch import PushNotification

router = APIRouter(prefix="/api/v1/calendar", tags=["notifications"])


@router.post("/notify/{user_id}")
async def push_or_read(
    user_id: str,
    body: NotifyRequest,
    actor: Actor = Depends(get_actor),
    services: Services = Depends(get_services),
):
    if body.notifications:
        actor.require(UserRole.SYSTEM, message="Only system can push notifications")
    if body.mark_read_ids and actor.role != UserRole.SYSTEM and actor.user_id != user_id:
        raise ForbiddenError("Cannot mark notifications for another user")

    notifications = await services.notifications.push_or_read(
        user_id,
        notifications=[
            PushNotification(n.type, n.reference_id, n.message)
            for n in body.notifications or []
        ],
        mark_read_ids=body.mark_read_ids,
    )
    return [n.to_dict() for n in notifications]
