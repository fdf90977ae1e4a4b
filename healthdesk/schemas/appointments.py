"""Request schemas for the appointments REST endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AppointmentCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    doctor_id: int = Field(alias="doctorId")
    time: datetime


class AppointmentReschedule(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    new_time: datetime = Field(alias="newTime")


class AppointmentCancel(BaseModel):
    id: int
