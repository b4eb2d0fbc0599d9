"""Runtime support — settings, sweep runner, simulated gateways, and JSON logging.

Invariants:
    - Settings reject sweep intervals that could skip a reminder window
    - postgresql:// URLs are rewritten for asyncpg; production requires a database
    - A failing sweep tick is logged and does not stop the runner
    - Simulated contract resolution is keyed on the contract id suffix
"""

import asyncio
import json
import logging
import re

import pytest
from pydantic import ValidationError

from slot_scheduler.config import Settings
from slot_scheduler.core.domain_types import ContractResolution
from slot_scheduler.core.errors import DatabaseError
from slot_scheduler.infrastructure.gateways import (
    SimulatedContractGateway, SimulatedMeetProvider,
)
from slot_scheduler.infrastructure.observability import (
    ContextTextFormatter, JSONFormatter, setup_logging,
)
from slot_scheduler.infrastructure.sweep_runner import SweepRunner


# -- Settings ---------------------------------------------------------------------

def test_settings_defaults():
    settings = Settings(_env_file=None, environment="development")
    assert settings.database_url is None
    assert 0 < settings.sweep_interval_seconds < 3600


@pytest.mark.parametrize("interval", [0, 3600, 7200])
def test_settings_reject_interval_outside_window(interval):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, sweep_interval_seconds=interval)


def test_settings_rewrite_postgres_url():
    settings = Settings(_env_file=None, database_url="postgresql://u:p@db/slots")
    assert settings.database_url == "postgresql+asyncpg://u:p@db/slots"


def test_production_requires_database():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, environment="production", database_url=None)


# -- SweepRunner ------------------------------------------------------------------

async def test_runner_keeps_going_after_failure(caplog):
    calls = []

    async def tick():
        calls.append(len(calls))
        if len(calls) == 1:
            raise DatabaseError("gone", "execute")

    runner = SweepRunner(tick, interval_seconds=0.01)
    with caplog.at_level(logging.ERROR):
        runner.start()
        while len(calls) < 3:
            await asyncio.sleep(0.01)
        await runner.stop()

    assert not runner.running
    assert "Sweep tick failed" in caplog.text


async def test_runner_start_is_idempotent():
    async def tick():
        return None

    runner = SweepRunner(tick, interval_seconds=60)
    runner.start()
    first = runner._task
    runner.start()

    assert runner._task is first
    await runner.stop()
    await runner.stop()


# -- Gateways ---------------------------------------------------------------------

async def test_simulated_meet_links_are_unique():
    provider = SimulatedMeetProvider()
    links = {await provider.create_meeting("slot-1", "exec-1", "owner-1") for _ in range(5)}

    assert len(links) == 5
    assert all(
        re.fullmatch(r"https://meet\.google\.com/[0-9a-f]{3}-[0-9a-f]{4}-[0-9a-f]{5}", link)
        for link in links
    )


@pytest.mark.parametrize("contract_id,expected", [
    ("contract-ok", ContractResolution.COMPLETED),
    ("contract-br", ContractResolution.BREACHED),
    ("contract-1", ContractResolution.PENDING),
])
async def test_simulated_contract_resolution(contract_id, expected):
    assert await SimulatedContractGateway().evaluate_contract(contract_id) is expected


# -- Logging ----------------------------------------------------------------------

def test_json_formatter_includes_extras():
    record = logging.LogRecord("slot_scheduler", logging.INFO, __file__, 1, "scheduled", (), None)
    record.slot_id = "slot-1"
    record.error_code = None

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "scheduled"
    assert payload["slot_id"] == "slot-1"
    assert "error_code" not in payload


def test_json_timestamp_is_record_creation_time():
    record = logging.LogRecord("slot_scheduler", logging.INFO, __file__, 1, "tick", (), None)
    record.created = 0.0

    payload = json.loads(JSONFormatter().format(record))

    assert payload["timestamp"] == "1970-01-01T00:00:00+00:00"


def test_text_format_appends_context():
    record = logging.LogRecord("slot_scheduler", logging.WARNING, __file__, 1, "overlap", (), None)
    record.slot_id = "slot-1"
    record.error_code = "SLOT_OVERLAP"

    line = ContextTextFormatter().format(record)

    assert line.endswith("overlap [slot_id=slot-1 error_code=SLOT_OVERLAP]")


def test_setup_logging_replaces_own_handler_only():
    root = logging.getLogger()
    level, foreign = root.level, logging.NullHandler()
    root.addHandler(foreign)
    try:
        first = setup_logging("DEBUG", "json")
        second = setup_logging("INFO", "text")

        assert first not in root.handlers
        assert second in root.handlers
        assert foreign in root.handlers
        assert isinstance(second.formatter, ContextTextFormatter)
    finally:
        root.removeHandler(second)
        root.removeHandler(foreign)
        root.setLevel(level)
