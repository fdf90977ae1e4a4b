"""Doctor directory endpoint."""

from fastapi import APIRouter, Request

from healthdesk.persistence.schema import DOCTORS
from healthdesk.schemas.records import Doctor
from healthdesk.tools.base import dump

router = APIRouter()


@router.get("/api/doctors")
async def list_doctors(request: Request):
    rows = await request.app.state.records.select(DOCTORS)
    return [dump(Doctor, row) for row in rows]
