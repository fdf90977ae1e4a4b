"""Prescription tools: list, refill and download digital prescriptions."""

from typing import Any

from langchain_core.runnables import RunnableConfig
from langchain_core.tools import tool
from pydantic import BaseModel, Field

from healthdesk.errors import NotFound, NotRefillable
from healthdesk.persistence.records import RecordStore
from healthdesk.persistence.schema import PRESCRIPTIONS
from healthdesk.schemas.records import Prescription, PrescriptionFile, PrescriptionRefill
from healthdesk.tools.base import (
    Effect,
    _get_store,
    current_user_id,
    dump,
    owned_record_tool,
    tool_error_handler,
)

NOT_FOUND = "Prescription not found"
REFILL_MESSAGE = "Refill requested and processed."


class PrescriptionIdArgs(BaseModel):
    prescription_id: int = Field(description="The id of one of the user's prescriptions.")


def is_refillable(prescription: dict[str, Any]) -> bool:
    remaining = prescription.get("refills_remaining")
    return (
        bool(prescription.get("refillable"))
        and remaining is not None
        and remaining > 0
        and prescription.get("status") == "active"
    )


@tool
@tool_error_handler
async def request_prescription_refill(
    prescription_id: int, config: RunnableConfig
) -> dict[str, Any]:
    """Request a refill of one of the current user's prescriptions.

    Only active prescriptions marked refillable with refills remaining can be
    refilled; each refill uses up one of the remaining refills.

    Args:
        prescription_id: The id of one of the user's prescriptions.
    """
    user_id = current_user_id(config)
    store = _get_store()
    prescription = await store.get_owned(PRESCRIPTIONS, prescription_id, user_id, NOT_FOUND)
    if not is_refillable(prescription):
        raise NotRefillable()
    updated = await store.update_owned(
        PRESCRIPTIONS,
        prescription_id,
        user_id,
        {"refills_remaining": prescription["refills_remaining"] - 1},
        NOT_FOUND,
    )
    return dump(PrescriptionRefill, {**updated, "message": REFILL_MESSAGE})


async def _file_url(
    store: RecordStore, row: dict[str, Any], params: BaseModel, user_id: str
) -> dict[str, Any]:
    if not row.get("file_url"):
        raise NotFound("Prescription file not found")
    return {"url": row["file_url"]}


list_prescriptions = owned_record_tool(
    name="list_prescriptions",
    description="List the current user's prescriptions, including refills remaining.",
    table=PRESCRIPTIONS,
    effect=Effect.LIST,
    result_model=Prescription,
)

download_prescription = owned_record_tool(
    name="download_prescription",
    description="Get the download link of one of the current user's digital prescriptions.",
    table=PRESCRIPTIONS,
    effect=Effect.GET,
    args_schema=PrescriptionIdArgs,
    result_model=PrescriptionFile,
    id_field="prescription_id",
    extend=_file_url,
    not_found="Prescription file not found",
)
