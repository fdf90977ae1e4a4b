"""Web push endpoints: subscription registration and medication reminder fan-out."""

from datetime import datetime

from fastapi import APIRouter, Depends, Request

from healthdesk.auth import current_user
from healthdesk.notifications.reminders import send_due_medication_reminders
from healthdesk.persistence.schema import PUSH_SUBSCRIPTIONS
from healthdesk.persistence.store import UserRecord
from healthdesk.schemas.push import SendRemindersResponse, SubscribeRequest

router = APIRouter()


@router.post("/api/push/subscribe")
async def subscribe(
    req: SubscribeRequest, request: Request, user: UserRecord = Depends(current_user)
):
    await request.app.state.records.insert(
        PUSH_SUBSCRIPTIONS,
        {"user_id": user.id, "subscription": req.subscription.model_dump()},
    )
    return {"success": True}


@router.post("/api/push/send-reminders", response_model=SendRemindersResponse)
async def send_reminders(request: Request, user: UserRecord = Depends(current_user)):
    sent = await send_due_medication_reminders(
        request.app.state.records, request.app.state.push_client, datetime.now()
    )
    return SendRemindersResponse(success=True, sent=sent)
