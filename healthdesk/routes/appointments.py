"""Appointment REST endpoints for the signed-in user."""

import sqlite3

from fastapi import APIRouter, Depends, Request

from healthdesk.auth import current_user
from healthdesk.errors import NotFound
from healthdesk.persistence.records import RecordStore
from healthdesk.persistence.schema import APPOINTMENTS
from healthdesk.persistence.store import UserRecord
from healthdesk.schemas.appointments import (
    AppointmentCancel,
    AppointmentCreate,
    AppointmentReschedule,
)
from healthdesk.schemas.records import Appointment
from healthdesk.tools.appointments import DOCTOR_SUMMARY, NOT_FOUND
from healthdesk.tools.base import dump

router = APIRouter()


def _records(request: Request) -> RecordStore:
    return request.app.state.records


@router.post("/api/appointments")
async def create_appointment(
    req: AppointmentCreate, request: Request, user: UserRecord = Depends(current_user)
):
    try:
        row = await _records(request).insert(
            APPOINTMENTS, {"doctor_id": req.doctor_id, "user_id": user.id, "time": req.time}
        )
    except sqlite3.IntegrityError:
        raise NotFound("Doctor not found")
    return dump(Appointment, row)


@router.get("/api/appointments")
async def list_appointments(request: Request, user: UserRecord = Depends(current_user)):
    rows = await _records(request).list_owned(APPOINTMENTS, user.id, joins=(DOCTOR_SUMMARY,))
    return [dump(Appointment, row) for row in rows]


@router.patch("/api/appointments")
async def reschedule_appointment(
    req: AppointmentReschedule, request: Request, user: UserRecord = Depends(current_user)
):
    row = await _records(request).update_owned(
        APPOINTMENTS, req.id, user.id, {"time": req.new_time, "status": "rescheduled"}, NOT_FOUND
    )
    return dump(Appointment, row)


@router.delete("/api/appointments")
async def cancel_appointment(
    req: AppointmentCancel, request: Request, user: UserRecord = Depends(current_user)
):
    row = await _records(request).update_owned(
        APPOINTMENTS, req.id, user.id, {"status": "cancelled"}, NOT_FOUND
    )
    return dump(Appointment, row)
