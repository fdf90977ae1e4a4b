"""Lab tools: browse labs and their tests, book and cancel lab tests."""

import asyncio
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from healthdesk.persistence.records import Join, RecordStore
from healthdesk.persistence.schema import LAB_BOOKINGS, LAB_TESTS, LABS
from healthdesk.schemas.records import Lab, LabBooking
from healthdesk.tools.base import Effect, owned_record_tool, reference_tool

LAB_SUMMARY = Join(LABS, "lab_id", "lab", ("id", "name", "address"))
TEST_SUMMARY = Join(LAB_TESTS, "lab_test_id", "test", ("id", "name", "type", "price"))


class BookLabTestArgs(BaseModel):
    lab_id: int = Field(description="The id of the lab, as returned by list_labs.")
    lab_test_id: int = Field(description="The id of a test offered by that lab.")
    time: datetime = Field(description="Booking date and time, ISO 8601.")
    location_type: Literal["home", "clinic"] = Field(
        description="Sample collection at home or at the clinic."
    )


class LabBookingIdArgs(BaseModel):
    booking_id: int = Field(description="The id of one of the user's lab bookings.")


async def _labs_with_tests(store: RecordStore, params: BaseModel) -> list[dict[str, Any]]:
    labs = await store.select(LABS)
    tests = await asyncio.gather(
        *(store.select(LAB_TESTS, {"lab_id": lab["id"]}) for lab in labs)
    )
    return [{**lab, "tests": lab_tests} for lab, lab_tests in zip(labs, tests)]


async def _with_lab_and_test(
    store: RecordStore, row: dict[str, Any], params: BaseModel, user_id: str
) -> dict[str, Any]:
    lab, test = await asyncio.gather(
        store.get(LABS, row["lab_id"]), store.get(LAB_TESTS, row["lab_test_id"])
    )
    return {**row, "lab": lab, "test": test}


list_labs = reference_tool(
    name="list_labs",
    description=(
        "List diagnostic labs with their address, available time slots and the "
        "tests each one offers."
    ),
    result_model=Lab,
    fetch=_labs_with_tests,
)

book_lab_test = owned_record_tool(
    name="book_lab_test",
    description="Book a lab test for the current user.",
    table=LAB_BOOKINGS,
    effect=Effect.CREATE,
    args_schema=BookLabTestArgs,
    result_model=LabBooking,
    extend=_with_lab_and_test,
)

list_lab_bookings = owned_record_tool(
    name="list_lab_bookings",
    description="List the current user's lab test bookings with lab and test details.",
    table=LAB_BOOKINGS,
    effect=Effect.LIST,
    result_model=LabBooking,
    joins=(LAB_SUMMARY, TEST_SUMMARY),
)

cancel_lab_booking = owned_record_tool(
    name="cancel_lab_booking",
    description="Cancel one of the current user's lab test bookings.",
    table=LAB_BOOKINGS,
    effect=Effect.UPDATE,
    args_schema=LabBookingIdArgs,
    result_model=LabBooking,
    id_field="booking_id",
    changes=lambda params: {"status": "cancelled"},
    not_found="Lab booking not found or not yours",
)
