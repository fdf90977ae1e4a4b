"""Healthdesk FastAPI application with lifespan-managed stores, clients and agent graphs."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from healthdesk.agent.graph import build_graph
from healthdesk.agent.models import CHAT_MODELS, active_tools, get_chat_model, get_title_model
from healthdesk.agent.orchestrator import ChatOrchestrator
from healthdesk.clients.push import PushClient
from healthdesk.clients.transcription import TranscriptionClient
from healthdesk.config import settings
from healthdesk.errors import HealthdeskError
from healthdesk.middleware.audit_logger import AuditLogMiddleware
from healthdesk.persistence.records import RecordStore
from healthdesk.persistence.store import ChatStore, Database
from healthdesk.routes.appointments import router as appointments_router
from healthdesk.routes.chat import router as chat_router
from healthdesk.routes.doctors import router as doctors_router
from healthdesk.routes.health import router as health_router
from healthdesk.routes.push import router as push_router
from healthdesk.routes.speech import router as speech_router
from healthdesk.routes.vote import router as vote_router
from healthdesk.streaming.resumable import ResumableStreamContext
from healthdesk.tools.base import set_store

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database, inject the record store into tools, build agent graphs."""
    db = Database(settings.db_path)
    await db.init_db()
    chat_store = ChatStore(db)
    records = RecordStore(db)
    set_store(records)
    app.state.chat_store = chat_store
    app.state.records = records
    logger.info("SQLite persistence initialized at %s", settings.db_path)

    graphs = {
        info.id: build_graph(
            get_chat_model(settings, info.id),
            tools=active_tools(info.id),
            max_steps=settings.max_steps,
            tool_timeout=settings.tool_timeout_seconds,
        )
        for info in CHAT_MODELS
    }

    streams = None
    if settings.resumable_streams:
        streams = ResumableStreamContext(settings.stream_retention_seconds)
    else:
        logger.info(" > Resumable streams are disabled")

    orchestrator = ChatOrchestrator(
        chat_store,
        graphs,
        settings,
        title_model=get_title_model(settings),
        streams=streams,
    )
    app.state.orchestrator = orchestrator

    transcriber = TranscriptionClient(
        api_key=settings.groq_api_key,
        url=settings.transcription_url,
        model=settings.transcription_model,
    )
    app.state.transcriber = transcriber
    app.state.push_client = PushClient(settings.vapid_private_key, settings.vapid_subject)

    logger.info("Healthdesk started with %d chat models", len(graphs))
    yield

    # Cleanup
    await orchestrator.background.drain()
    await transcriber.close()
    await db.close()
    logger.info("Healthdesk shutdown complete")


app = FastAPI(title="Healthdesk Healthcare Assistant", lifespan=lifespan)


@app.exception_handler(HealthdeskError)
async def healthdesk_error_handler(request: Request, exc: HealthdeskError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    missing = [".".join(str(p) for p in err["loc"][1:]) for err in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={"detail": f"Missing or invalid fields: {', '.join(missing)}"},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Stream-Id"],
)
app.add_middleware(AuditLogMiddleware)

app.include_router(health_router)
app.include_router(chat_router)
app.include_router(doctors_router)
app.include_router(appointments_router)
app.include_router(vote_router)
app.include_router(speech_router)
app.include_router(push_router)
