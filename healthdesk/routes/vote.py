"""Vote endpoints: thumbs up/down on assistant messages of an owned chat."""

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from healthdesk.agent.orchestrator import require_owned_chat
from healthdesk.auth import current_user
from healthdesk.errors import NotFound
from healthdesk.persistence.store import UserRecord
from healthdesk.schemas.chat import VoteRequest

router = APIRouter()


@router.get("/api/vote")
async def get_votes(
    request: Request,
    chat_id: str | None = Query(default=None, alias="chatId"),
    user: UserRecord = Depends(current_user),
):
    if not chat_id:
        raise HTTPException(status_code=400, detail="chatId is required")
    store = request.app.state.chat_store
    await require_owned_chat(store, chat_id, user.id)
    votes = await store.get_votes(chat_id)
    return [
        {"chatId": v.chat_id, "messageId": v.message_id, "isUpvoted": v.is_upvoted}
        for v in votes
    ]


@router.patch("/api/vote")
async def vote(req: VoteRequest, request: Request, user: UserRecord = Depends(current_user)):
    store = request.app.state.chat_store
    await require_owned_chat(store, req.chat_id, user.id)
    if not await store.has_message(req.chat_id, req.message_id):
        raise NotFound("Message not found")
    await store.vote_message(req.chat_id, req.message_id, is_upvoted=req.type == "up")
    return {"status": "ok"}
