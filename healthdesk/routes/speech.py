"""Speech-to-text endpoint."""

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile

from healthdesk.auth import current_user
from healthdesk.clients.transcription import TranscriptionClient
from healthdesk.persistence.store import UserRecord

router = APIRouter()


@router.post("/api/speech-to-text")
async def speech_to_text(
    request: Request,
    audio: UploadFile | None = File(default=None),
    user: UserRecord = Depends(current_user),
):
    """Transcribe an uploaded English audio clip."""
    if audio is None:
        raise HTTPException(status_code=400, detail="No audio file provided")
    content = await audio.read()
    if not content:
        raise HTTPException(status_code=400, detail="Audio file is empty")
    transcriber: TranscriptionClient = request.app.state.transcriber
    text = await transcriber.transcribe(
        audio.filename or "audio.webm", content, audio.content_type or ""
    )
    return {"text": text}
