"""Unit tests for the prescription tools (healthdesk/tools/prescriptions.py)."""

import pytest

from healthdesk.persistence.schema import PRESCRIPTIONS
from healthdesk.tools.prescriptions import (
    download_prescription,
    is_refillable,
    list_prescriptions,
    request_prescription_refill,
)
from tests.fakes import ALICE, BOB, tool_config


async def _prescription(store, user_id=ALICE, **overrides):
    values = {
        "user_id": user_id,
        "doctor_id": 1,
        "medication": "Atorvastatin",
        "dosage": "20mg",
        "issued_at": "2026-09-01",
        "refillable": True,
        "refills_remaining": 3,
        "file_url": "https://files.example.com/rx/atorvastatin.pdf",
    }
    values.update(overrides)
    return await store.insert(PRESCRIPTIONS, values)


def test_is_refillable():
    base = {"refillable": True, "refills_remaining": 1, "status": "active"}
    assert is_refillable(base)
    assert not is_refillable({**base, "refillable": False})
    assert not is_refillable({**base, "refills_remaining": 0})
    assert not is_refillable({**base, "refills_remaining": None})
    assert not is_refillable({**base, "status": "expired"})


@pytest.mark.asyncio
async def test_refill_decrements_remaining(tool_store):
    row = await _prescription(tool_store)

    result = await request_prescription_refill.ainvoke(
        {"prescription_id": row["id"]}, config=tool_config(ALICE)
    )

    assert result["status"] == "success"
    assert result["data"]["refills_remaining"] == 2
    assert result["data"]["message"] == "Refill requested and processed."
    assert (await tool_store.get(PRESCRIPTIONS, row["id"]))["refills_remaining"] == 2


@pytest.mark.asyncio
async def test_refill_with_no_refills_left_changes_nothing(tool_store):
    row = await _prescription(tool_store, refills_remaining=0)

    result = await request_prescription_refill.ainvoke(
        {"prescription_id": row["id"]}, config=tool_config(ALICE)
    )

    assert result["status"] == "error"
    assert result["code"] == "not_refillable"
    assert (await tool_store.get(PRESCRIPTIONS, row["id"]))["refills_remaining"] == 0


@pytest.mark.asyncio
async def test_refill_not_refillable(tool_store):
    row = await _prescription(tool_store, refillable=False)
    result = await request_prescription_refill.ainvoke(
        {"prescription_id": row["id"]}, config=tool_config(ALICE)
    )
    assert result["code"] == "not_refillable"


@pytest.mark.asyncio
async def test_refill_other_users_prescription(tool_store):
    row = await _prescription(tool_store, user_id=BOB)
    result = await request_prescription_refill.ainvoke(
        {"prescription_id": row["id"]}, config=tool_config(ALICE)
    )
    assert result["code"] == "not_found"
    assert (await tool_store.get(PRESCRIPTIONS, row["id"]))["refills_remaining"] == 3


@pytest.mark.asyncio
async def test_refill_requires_session_user(tool_store):
    row = await _prescription(tool_store)
    result = await request_prescription_refill.ainvoke(
        {"prescription_id": row["id"]}, config=tool_config(None)
    )
    assert result["code"] == "unauthenticated"


def test_refill_schema_hides_config():
    assert set(request_prescription_refill.args) == {"prescription_id"}


@pytest.mark.asyncio
async def test_list_prescriptions(tool_store):
    await _prescription(tool_store)
    await _prescription(tool_store, user_id=BOB, medication="Lisinopril")

    result = await list_prescriptions.ainvoke({}, config=tool_config(ALICE))

    assert [p["medication"] for p in result["data"]] == ["Atorvastatin"]
    assert result["data"][0]["refillable"] is True


@pytest.mark.asyncio
async def test_download_returns_url(tool_store):
    row = await _prescription(tool_store)
    result = await download_prescription.ainvoke(
        {"prescription_id": row["id"]}, config=tool_config(ALICE)
    )
    assert result["data"] == {"url": "https://files.example.com/rx/atorvastatin.pdf"}


@pytest.mark.asyncio
async def test_download_without_file(tool_store):
    row = await _prescription(tool_store, file_url=None)
    result = await download_prescription.ainvoke(
        {"prescription_id": row["id"]}, config=tool_config(ALICE)
    )
    assert result["status"] == "error"
    assert result["error"] == "Prescription file not found"


@pytest.mark.asyncio
async def test_download_other_users_file(tool_store):
    row = await _prescription(tool_store, user_id=BOB)
    result = await download_prescription.ainvoke(
        {"prescription_id": row["id"]}, config=tool_config(ALICE)
    )
    assert result["code"] == "not_found"
