"""External Gateways — simulated meeting provisioning and contract resolution.

Invariants:
    - SimulatedMeetProvider returns a fresh meet.google.com-style link on every call
    - SimulatedContractGateway is deterministic: ids ending in "ok" complete,
      ids ending in "br" are breached, everything else stays pending

Design Decisions:
    - Simulations stand in for the real providers in local and test deployments;
      production wiring swaps in any object satisfying MeetingProvider / ContractGateway
    - No retries here: failures propagate and abort the caller's unit of work
"""

import hashlib
import logging
import uuid

from slot_scheduler.core.domain_types import ContractResolution

logger = logging.getLogger(__name__)


class SimulatedMeetProvider:
    """Meeting links of the form https://meet.google.com/abc-defg-hij."""

    async def create_meeting(
        self, slot_id: str, executive_id: str, owner_id: str,
    ) -> str:
        seed = f"{slot_id}:{executive_id}:{owner_id}:{uuid.uuid4()}"
        token = hashlib.sha256(seed.encode()).hexdigest()[:12]
        link = f"https://meet.google.com/{token[:3]}-{token[3:7]}-{token[7:12]}"
        logger.debug("Provisioned meeting link", extra={"slot_id": slot_id})
        return link


class SimulatedContractGateway:
    """Resolution keyed on the contract id suffix."""

    async def evaluate_contract(self, contract_id: str) -> ContractResolution:
        if contract_id.endswith("ok"):
            return ContractResolution.COMPLETED
        if contract_id.endswith("br"):
            return ContractResolution.BREACHED
        return ContractResolution.PENDING
