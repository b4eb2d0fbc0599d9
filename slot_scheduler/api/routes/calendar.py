"""Calendar Routes — availability, calendar view, slot allocation, and cancellation.

Invariants:
    - Executives may only replace and view their own availability
    - Owners see only their own slots with the requested executive
    - Only SYSTEM allocates and cancels slots (auction outcomes are system events)

Design Decisions:
    - Role checks live here; the engines still re-validate every scheduling invariant
"""

from fastapi import APIRouter, Depends, status

from slot_scheduler.api.dependencies import Actor, Services, get_actor, get_services
from slot_scheduler.core.domain_types import UserRole
from slot_scheduler.core.errors import ForbiddenError
from slot_scheduler.schemas.calendar import AvailabilityUpdate, CancelRequest, ScheduleRequest

router = APIRouter(prefix="/api/v1/calendar", tags=["calendar"])


@router.post("/executive/{executive_id}")
async def update_availability(
    executive_id: str,
    body: AvailabilityUpdate,
    actor: Actor = Depends(get_actor),
    services: Services = Depends(get_services),
):
    """Replace the executive's availability (executive only, own calendar)."""
    if actor.role != UserRole.EXECUTIVE or actor.user_id != executive_id:
        raise ForbiddenError("Only executive can modify own availability")
    calendar = await services.scheduling.set_availability(
        executive_id, [(b.date, b.status) for b in body.availability],
    )
    return calendar.to_dict()


@router.get("/executive/{executive_id}")
async def get_calendar(
    executive_id: str,
    actor: Actor = Depends(get_actor),
    services: Services = Depends(get_services),
):
    """Calendar plus the slots visible to the caller."""
    if actor.role == UserRole.EXECUTIVE and actor.user_id != executive_id:
        raise ForbiddenError("Executive can only view own calendar")
    owner_id = actor.user_id if actor.role == UserRole.OWNER else None
    view = await services.scheduling.get_calendar_view(executive_id, owner_id)
    return view.to_dict()


@router.post("/schedule/{slot_id}", status_code=status.HTTP_201_CREATED)
async def schedule_slot(
    slot_id: str,
    body: ScheduleRequest,
    actor: Actor = Depends(get_actor),
    services: Services = Depends(get_services),
):
    """Allocate a slot from an auction outcome (system only)."""
    actor.require(UserRole.SYSTEM, message="Only system can trigger scheduling")
    slot = await services.scheduling.schedule_after_auction(
        slot_id,
        executive_id=body.executive_id,
        owner_id=body.owner_id,
        contract_id=body.contract_id,
        auction_end_date=body.auction_end_date,
        tier_offset_days=body.tier_offset_days,
        tier_duration_days=body.tier_duration_days,
        contract_deadline_date=body.contract_deadline_date,
    )
    return slot.to_dict()


@router.post("/schedule/{slot_id}/cancel")
async def cancel_slot(
    slot_id: str,
    body: CancelRequest,
    actor: Actor = Depends(get_actor),
    services: Services = Depends(get_services),
):
    """Cancel a slot strictly before its start day (system only)."""
    actor.require(UserRole.SYSTEM, message="Only system can cancel scheduled slots")
    slot = await services.scheduling.cancel_before_start(slot_id, body.now_date)
    return slot.to_dict()
