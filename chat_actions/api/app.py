"""FastAPI application exposing the chat actions.

Provides endpoints for the model preference cookie, title generation,
message truncation, chat visibility and transaction extraction.
"""

import shutil
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from openai import OpenAI
from sqlalchemy.exc import NoResultFound
from sqlalchemy.orm import Session, sessionmaker

from chat_actions.actions.messages import delete_trailing_messages
from chat_actions.actions.preferences import get_model_id, save_model_id
from chat_actions.actions.titles import generate_title_from_user_message
from chat_actions.actions.transactions import extract_transactions
from chat_actions.actions.visibility import update_chat_visibility
from chat_actions.db.session import get_engine, get_session_factory, iter_sessions
from chat_actions.llm.client import get_client
from chat_actions.ocr.image_loader import host_allowed
from chat_actions.ocr.recognizer import ScreenshotRecognizer
from chat_actions.utils.config import AppConfig, load_config
from chat_actions.utils.logger import get_logger

from .schemas import (
    DeleteTrailingResponse,
    ExtractTransactionsRequest,
    ExtractTransactionsResponse,
    HealthResponse,
    ModelPreference,
    ModelPreferenceRequest,
    TitleRequest,
    TitleResponse,
    VisibilityRequest,
    VisibilityResponse,
)

logger = get_logger(__name__)

VERSION = "1.0.0"

app = FastAPI(
    title="Chat Actions API",
    description="Server-side actions for the chat UI",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache
def get_config() -> AppConfig:
    return load_config()


@lru_cache
def _session_factory() -> sessionmaker[Session]:
    return get_session_factory(get_engine(get_config().database))


def get_session():
    """Yield a database session for one request."""
    yield from iter_sessions(_session_factory())


def get_openai_client() -> OpenAI:
    return get_client(get_config().llm)


@lru_cache
def get_recognizer() -> ScreenshotRecognizer:
    return ScreenshotRecognizer(get_config().ocr)


ConfigDep = Annotated[AppConfig, Depends(get_config)]
SessionDep = Annotated[Session, Depends(get_session)]
ClientDep = Annotated[OpenAI, Depends(get_openai_client)]
RecognizerDep = Annotated[ScreenshotRecognizer, Depends(get_recognizer)]


@app.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return system health status."""
    return HealthResponse(
        status="healthy",
        version=VERSION,
        tesseract_available=shutil.which("tesseract") is not None,
    )


@app.put("/preferences/model", response_model=ModelPreference)
def put_model_preference(
    body: ModelPreferenceRequest, response: Response, config: ConfigDep
) -> ModelPreference:
    """Remember the selected chat model for later requests."""
    save_model_id(response, body.model, config.cookie)
    return ModelPreference(model=body.model)


@app.get("/preferences/model", response_model=ModelPreference)
def get_model_preference(request: Request, config: ConfigDep) -> ModelPreference:
    """Return the stored chat model, or null if none was saved."""
    return ModelPreference(model=get_model_id(request.cookies, config.cookie))


@app.post("/titles", response_model=TitleResponse)
def create_title(
    body: TitleRequest, client: ClientDep, config: ConfigDep
) -> TitleResponse:
    """Generate a conversation title from the first user message."""
    try:
        title = generate_title_from_user_message(body.message, client, config.llm)
    except Exception as exc:
        logger.error("Title generation failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return TitleResponse(title=title)


@app.delete(
    "/messages/{message_id}/trailing", response_model=DeleteTrailingResponse
)
def delete_trailing(message_id: str, session: SessionDep) -> DeleteTrailingResponse:
    """Delete all messages that follow ``message_id`` in its chat."""
    try:
        deleted = delete_trailing_messages(session, message_id)
    except NoResultFound as exc:
        raise HTTPException(
            status_code=404, detail=f"Message {message_id} not found"
        ) from exc
    return DeleteTrailingResponse(deleted=deleted)


@app.patch("/chats/{chat_id}/visibility", response_model=VisibilityResponse)
def patch_visibility(
    chat_id: str, body: VisibilityRequest, session: SessionDep
) -> VisibilityResponse:
    """Set a chat's visibility."""
    updated = update_chat_visibility(session, chat_id, body.visibility)
    return VisibilityResponse(updated=updated)


@app.post("/transactions/extract", response_model=ExtractTransactionsResponse)
def extract(
    body: ExtractTransactionsRequest,
    client: ClientDep,
    recognizer: RecognizerDep,
    config: ConfigDep,
) -> ExtractTransactionsResponse:
    """Extract card transactions from uploaded screenshots.

    A ``null`` payload means the model request failed or its reply was
    not valid JSON.
    """
    blocked = [
        ref for ref in body.images if not host_allowed(ref, config.ocr.allowed_hosts)
    ]
    if blocked:
        raise HTTPException(
            status_code=400, detail=f"Image host not allowed: {blocked[0]}"
        )

    payload = extract_transactions(
        body.images,
        client=client,
        recognizer=recognizer,
        config=config,
        expected_counts=body.expected_counts,
    )
    return ExtractTransactionsResponse(transactions=payload)
