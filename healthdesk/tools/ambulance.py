"""Ambulance booking tools."""

from datetime import datetime

from pydantic import BaseModel, Field

from healthdesk.persistence.schema import AMBULANCE_BOOKINGS
from healthdesk.schemas.records import AmbulanceBooking
from healthdesk.tools.base import Effect, owned_record_tool


class BookAmbulanceArgs(BaseModel):
    pickup_location: str = Field(min_length=1, description="Where to pick the patient up.")
    destination: str = Field(min_length=1, description="Hospital or address to drive to.")
    time: datetime = Field(description="Requested pickup date and time, ISO 8601.")


class AmbulanceBookingIdArgs(BaseModel):
    booking_id: int = Field(description="The id of one of the user's ambulance bookings.")


book_ambulance = owned_record_tool(
    name="book_ambulance",
    description="Book an ambulance for the current user.",
    table=AMBULANCE_BOOKINGS,
    effect=Effect.CREATE,
    args_schema=BookAmbulanceArgs,
    result_model=AmbulanceBooking,
)

list_ambulance_bookings = owned_record_tool(
    name="list_ambulance_bookings",
    description="List the current user's ambulance bookings.",
    table=AMBULANCE_BOOKINGS,
    effect=Effect.LIST,
    result_model=AmbulanceBooking,
)

cancel_ambulance_booking = owned_record_tool(
    name="cancel_ambulance_booking",
    description="Cancel one of the current user's ambulance bookings.",
    table=AMBULANCE_BOOKINGS,
    effect=Effect.UPDATE,
    args_schema=AmbulanceBookingIdArgs,
    result_model=AmbulanceBooking,
    id_field="booking_id",
    changes=lambda params: {"status": "cancelled"},
    not_found="Ambulance booking not found or not yours",
)
