"""Sweep Route — manual trigger of one sweep tick (system only).

Invariants:
    - Goes through the same engine and transaction manager as the background runner,
      so a manual tick and a scheduled tick never interleave writes
"""

from fastapi import APIRouter, Depends

from slot_scheduler.api.dependencies import Actor, Services, get_actor, get_services
from slot_scheduler.core.domain_types import UserRole
from slot_scheduler.schemas.calendar import SweepRequest

router = APIRouter(prefix="/api/v1/calendar", tags=["sweep"])


@router.post("/sweep")
async def run_sweep(
    body: SweepRequest | None = None,
    actor: Actor = Depends(get_actor),
    services: Services = Depends(get_services),
):
    actor.require(UserRole.SYSTEM, message="Only system can run the sweep")
    result = await services.sweep.sweep(body.now if body else None)
    return result.to_dict()
