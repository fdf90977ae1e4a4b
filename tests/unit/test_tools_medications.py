"""Unit tests for the medication tools (healthdesk/tools/medications.py)."""

import pytest
from pydantic import ValidationError

from healthdesk.persistence.schema import MEDICATION_REMINDERS
from healthdesk.tools.medications import (
    add_medication,
    list_medication_reminders,
    list_medications,
    mark_medication_reminder,
)
from tests.fakes import ALICE, BOB, tool_config

METFORMIN = {
    "name": "Metformin",
    "dosage": "500mg",
    "start_date": "2026-10-19",
    "reminders": [
        {"date": "2026-10-19", "time_of_day": "08:00"},
        {"date": "2026-10-19", "time_of_day": "20:00"},
    ],
}


@pytest.mark.asyncio
async def test_add_medication_schedules_reminders(tool_store):
    result = await add_medication.ainvoke(METFORMIN, config=tool_config(ALICE))

    assert result["status"] == "success"
    data = result["data"]
    assert data["name"] == "Metformin"
    assert data["start_date"] == "2026-10-19"
    assert data["end_date"] is None
    assert [r["time_of_day"] for r in data["reminders"]] == ["08:00", "20:00"]
    assert all(r["medication_id"] == data["id"] for r in data["reminders"])
    assert all(r["status"] == "pending" for r in data["reminders"])

    stored = await tool_store.list_owned(MEDICATION_REMINDERS, ALICE)
    assert len(stored) == 2


@pytest.mark.asyncio
async def test_add_medication_without_reminders(tool_store):
    result = await add_medication.ainvoke(
        {"name": "Ibuprofen", "dosage": "200mg", "start_date": "2026-10-19", "notes": "PRN"},
        config=tool_config(ALICE),
    )
    assert result["data"]["reminders"] == []
    assert result["data"]["notes"] == "PRN"


@pytest.mark.asyncio
async def test_reminder_time_must_be_hh_mm(tool_store):
    bad = {**METFORMIN, "reminders": [{"date": "2026-10-19", "time_of_day": "8am"}]}
    with pytest.raises(ValidationError):
        await add_medication.ainvoke(bad, config=tool_config(ALICE))


@pytest.mark.asyncio
async def test_lists_are_per_user(tool_store):
    await add_medication.ainvoke(METFORMIN, config=tool_config(ALICE))

    mine = await list_medications.ainvoke({}, config=tool_config(ALICE))
    theirs = await list_medications.ainvoke({}, config=tool_config(BOB))
    reminders = await list_medication_reminders.ainvoke({}, config=tool_config(ALICE))

    assert [m["name"] for m in mine["data"]] == ["Metformin"]
    assert theirs["data"] == []
    assert len(reminders["data"]) == 2


@pytest.mark.asyncio
async def test_mark_reminder_taken(tool_store):
    added = (await add_medication.ainvoke(METFORMIN, config=tool_config(ALICE)))["data"]
    reminder_id = added["reminders"][0]["id"]

    result = await mark_medication_reminder.ainvoke(
        {"reminder_id": reminder_id, "status": "taken"}, config=tool_config(ALICE)
    )

    assert result["data"]["status"] == "taken"


@pytest.mark.asyncio
async def test_mark_reminder_of_other_user(tool_store):
    added = (await add_medication.ainvoke(METFORMIN, config=tool_config(ALICE)))["data"]
    result = await mark_medication_reminder.ainvoke(
        {"reminder_id": added["reminders"][0]["id"], "status": "missed"},
        config=tool_config(BOB),
    )
    assert result["status"] == "error"
    assert result["error"] == "Reminder not found or not yours"


@pytest.mark.asyncio
async def test_mark_reminder_rejects_unknown_status(tool_store):
    with pytest.raises(ValidationError):
        await mark_medication_reminder.ainvoke(
            {"reminder_id": 1, "status": "skipped"}, config=tool_config(ALICE)
        )
