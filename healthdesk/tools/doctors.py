"""Doctor directory tools."""

from typing import Any

from pydantic import BaseModel, Field, model_validator

from healthdesk.errors import NotFound
from healthdesk.persistence.records import RecordStore
from healthdesk.persistence.schema import DOCTORS
from healthdesk.schemas.records import Doctor
from healthdesk.tools.base import reference_tool


class DoctorLookupArgs(BaseModel):
    doctor_id: int | None = Field(
        default=None, description="The id of the doctor, as returned by list_doctors."
    )
    name: str | None = Field(
        default=None, description='Exact full name of the doctor, e.g. "Dr. Alice Smith".'
    )

    @model_validator(mode="after")
    def _one_key(self) -> "DoctorLookupArgs":
        if self.doctor_id is None and not self.name:
            raise ValueError("Provide either doctor_id or name")
        return self


async def _all_doctors(store: RecordStore, params: BaseModel) -> list[dict[str, Any]]:
    return await store.select(DOCTORS)


async def _one_doctor(store: RecordStore, params: BaseModel) -> dict[str, Any]:
    assert isinstance(params, DoctorLookupArgs)
    if params.doctor_id is not None:
        rows = await store.select(DOCTORS, {"id": params.doctor_id})
    else:
        rows = await store.select(DOCTORS, {"name": params.name})
    if not rows:
        raise NotFound("Doctor not found")
    return rows[0]


list_doctors = reference_tool(
    name="list_doctors",
    description=(
        "List all available doctors with their specialty, hospital, years of "
        "experience, availability and consultation fees."
    ),
    result_model=Doctor,
    fetch=_all_doctors,
)

doctor_details = reference_tool(
    name="doctor_details",
    description=(
        "Get the full profile of a single doctor, looked up by id or by exact name. "
        "Use this to resolve a doctor the user names before booking."
    ),
    result_model=Doctor,
    fetch=_one_doctor,
    args_schema=DoctorLookupArgs,
)
