"""Medication tools: track medications and their dose reminders."""

import datetime as dt
import re
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from healthdesk.persistence.records import RecordStore
from healthdesk.persistence.schema import MEDICATION_REMINDERS, MEDICATIONS
from healthdesk.schemas.records import AddedMedication, Medication, MedicationReminder
from healthdesk.tools.base import Effect, owned_record_tool

_TIME_OF_DAY = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class ReminderArgs(BaseModel):
    date: dt.date = Field(description="Day of the dose, YYYY-MM-DD.")
    time_of_day: str = Field(description='Time of the dose, 24h "HH:MM", e.g. "08:00".')

    @field_validator("time_of_day")
    @classmethod
    def _check_time_of_day(cls, value: str) -> str:
        if not _TIME_OF_DAY.match(value):
            raise ValueError('time_of_day must be "HH:MM"')
        return value


class AddMedicationArgs(BaseModel):
    name: str = Field(min_length=1, description="Medication name.")
    dosage: str = Field(min_length=1, description='Dose per intake, e.g. "500mg".')
    notes: str | None = Field(default=None, description="Free-form notes.")
    start_date: dt.date = Field(description="First day of the course, YYYY-MM-DD.")
    end_date: dt.date | None = Field(default=None, description="Last day, YYYY-MM-DD.")
    reminders: list[ReminderArgs] = Field(
        default_factory=list, description="Dose reminders to schedule."
    )


class MarkReminderArgs(BaseModel):
    reminder_id: int = Field(description="The id of one of the user's medication reminders.")
    status: Literal["taken", "missed"] = Field(description="Whether the dose was taken.")


def _medication_fields(params: BaseModel) -> dict[str, Any]:
    return params.model_dump(exclude={"reminders"}, exclude_none=True)


async def _schedule_reminders(
    store: RecordStore, row: dict[str, Any], params: BaseModel, user_id: str
) -> dict[str, Any]:
    assert isinstance(params, AddMedicationArgs)
    reminders = await store.insert_many(
        MEDICATION_REMINDERS,
        [
            {
                "medication_id": row["id"],
                "user_id": user_id,
                "date": reminder.date,
                "time_of_day": reminder.time_of_day,
            }
            for reminder in params.reminders
        ],
    )
    return {**row, "reminders": reminders}


add_medication = owned_record_tool(
    name="add_medication",
    description="Add a medication for the current user and set up its dose reminders.",
    table=MEDICATIONS,
    effect=Effect.CREATE,
    args_schema=AddMedicationArgs,
    result_model=AddedMedication,
    values=_medication_fields,
    extend=_schedule_reminders,
)

list_medications = owned_record_tool(
    name="list_medications",
    description="List the current user's medications.",
    table=MEDICATIONS,
    effect=Effect.LIST,
    result_model=Medication,
)

list_medication_reminders = owned_record_tool(
    name="list_medication_reminders",
    description="List the current user's medication reminders and whether each dose was taken.",
    table=MEDICATION_REMINDERS,
    effect=Effect.LIST,
    result_model=MedicationReminder,
)

mark_medication_reminder = owned_record_tool(
    name="mark_medication_reminder",
    description="Mark one of the current user's medication reminders as taken or missed.",
    table=MEDICATION_REMINDERS,
    effect=Effect.UPDATE,
    args_schema=MarkReminderArgs,
    result_model=MedicationReminder,
    id_field="reminder_id",
    changes=lambda params: {"status": params.status},
    not_found="Reminder not found or not yours",
)
