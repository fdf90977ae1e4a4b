"""Appointment tools: book, list, cancel and reschedule visits with a doctor."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from healthdesk.persistence.records import Join, RecordStore
from healthdesk.persistence.schema import APPOINTMENTS, DOCTORS
from healthdesk.schemas.records import Appointment
from healthdesk.tools.base import Effect, owned_record_tool

NOT_FOUND = "Appointment not found or not yours"

DOCTOR_SUMMARY = Join(DOCTORS, "doctor_id", "doctor", ("id", "name", "specialty"))


class BookAppointmentArgs(BaseModel):
    doctor_id: int = Field(description="The id of the doctor to book with.")
    time: datetime = Field(description="Appointment date and time, ISO 8601.")


class AppointmentIdArgs(BaseModel):
    appointment_id: int = Field(description="The id of one of the user's appointments.")


class RescheduleAppointmentArgs(AppointmentIdArgs):
    new_time: datetime = Field(description="The new date and time, ISO 8601.")


async def _with_doctor(
    store: RecordStore, row: dict[str, Any], params: BaseModel, user_id: str
) -> dict[str, Any]:
    return {**row, "doctor": await store.get(DOCTORS, row["doctor_id"])}


book_appointment = owned_record_tool(
    name="book_appointment",
    description=(
        "Book an appointment with a doctor for the current user. Resolve the "
        "doctor's id with list_doctors or doctor_details first."
    ),
    table=APPOINTMENTS,
    effect=Effect.CREATE,
    args_schema=BookAppointmentArgs,
    result_model=Appointment,
    extend=_with_doctor,
)

list_appointments = owned_record_tool(
    name="list_appointments",
    description="List the current user's appointments with a summary of each doctor.",
    table=APPOINTMENTS,
    effect=Effect.LIST,
    result_model=Appointment,
    joins=(DOCTOR_SUMMARY,),
)

cancel_appointment = owned_record_tool(
    name="cancel_appointment",
    description="Cancel one of the current user's appointments.",
    table=APPOINTMENTS,
    effect=Effect.UPDATE,
    args_schema=AppointmentIdArgs,
    result_model=Appointment,
    id_field="appointment_id",
    changes=lambda params: {"status": "cancelled"},
    not_found=NOT_FOUND,
)

reschedule_appointment = owned_record_tool(
    name="reschedule_appointment",
    description="Move one of the current user's appointments to a new time.",
    table=APPOINTMENTS,
    effect=Effect.UPDATE,
    args_schema=RescheduleAppointmentArgs,
    result_model=Appointment,
    id_field="appointment_id",
    changes=lambda params: {"time": params.new_time, "status": "rescheduled"},
    not_found=NOT_FOUND,
)
