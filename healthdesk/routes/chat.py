"""Chat endpoints: stream a turn, resume the latest stream, delete a chat."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import StreamingResponse

from healthdesk.agent.orchestrator import ChatOrchestrator
from healthdesk.agent.prompts import RequestHints
from healthdesk.auth import current_user
from healthdesk.errors import HealthdeskError
from healthdesk.persistence.store import UserRecord
from healthdesk.schemas.chat import ChatRequest, VisibilityRequest

router = APIRouter()
logger = logging.getLogger(__name__)

GENERIC_FAILURE = "An error occurred while processing your request!"


def _get_orchestrator(request: Request) -> ChatOrchestrator:
    return request.app.state.orchestrator


@router.post("/api/chat")
async def chat(request: Request):
    """Accept a user message and stream the assistant's turn as server-sent events."""
    try:
        body = ChatRequest.model_validate(await request.json())
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid request body")

    user = await current_user(request)
    orchestrator = _get_orchestrator(request)
    try:
        stream_id, stream = await orchestrator.start_turn(
            user, body, RequestHints.from_headers(request.headers)
        )
    except HealthdeskError:
        raise
    except Exception:
        logger.exception("Chat turn for %s could not start", body.id)
        raise HTTPException(status_code=500, detail=GENERIC_FAILURE)

    return StreamingResponse(
        stream, media_type="text/event-stream", headers={"X-Stream-Id": stream_id}
    )


@router.get("/api/chat")
async def resume_chat(
    request: Request, chat_id: str | None = Query(default=None, alias="chatId")
):
    """Reconnect to the most recent stream of a chat."""
    orchestrator = _get_orchestrator(request)
    if not orchestrator.resumable:
        return Response(status_code=204)
    if not chat_id:
        raise HTTPException(status_code=400, detail="id is required")

    user = await current_user(request)
    stream_id, stream = await orchestrator.resume(user, chat_id)
    if stream is None:
        return Response(status_code=200)
    return StreamingResponse(
        stream, media_type="text/event-stream", headers={"X-Stream-Id": stream_id}
    )


@router.delete("/api/chat")
async def delete_chat(
    request: Request, chat_id: str | None = Query(default=None, alias="id")
):
    if not chat_id:
        raise HTTPException(status_code=404, detail="Not Found")
    user = await current_user(request)
    deleted = await _get_orchestrator(request).delete(user, chat_id)
    return deleted.as_dict()


@router.post("/api/chat/visibility")
async def update_visibility(
    req: VisibilityRequest, request: Request, user: UserRecord = Depends(current_user)
):
    await _get_orchestrator(request).set_visibility(user, req.chat_id, req.visibility)
    return {"status": "ok", "visibility": req.visibility}
