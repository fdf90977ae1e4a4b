"""Request/response schemas for the chat endpoints."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

ChatModelId = Literal["chat-model", "chat-model-reasoning"]
Visibility = Literal["public", "private"]


class TextPart(BaseModel):
    type: Literal["text"]
    text: str = Field(min_length=1, max_length=2000)


class Attachment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    name: str = Field(min_length=1, max_length=2000)
    content_type: Literal["image/png", "image/jpg", "image/jpeg"] = Field(alias="contentType")


class UserMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    created_at: datetime = Field(alias="createdAt")
    role: Literal["user"]
    content: str = Field(min_length=1, max_length=2000)
    parts: list[TextPart]
    experimental_attachments: list[Attachment] | None = None


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    message: UserMessage
    selected_chat_model: ChatModelId = Field(alias="selectedChatModel")
    selected_visibility_type: Visibility = Field(alias="selectedVisibilityType")


class VisibilityRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    chat_id: str = Field(alias="chatId")
    visibility: Visibility


class VoteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    chat_id: str = Field(alias="chatId")
    message_id: str = Field(alias="messageId")
    type: Literal["up", "down"]
