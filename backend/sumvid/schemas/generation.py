"""Generation request and response schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from sumvid.schemas.usage import UsageResponse


class SummaryRequest(BaseModel):
    """Schema for summarizing a transcript."""

    transcript: Optional[str] = None
    title: Optional[str] = None
    context: Optional[str] = None


class QuizRequest(BaseModel):
    """Schema for generating a quiz."""

    transcript: Optional[str] = None
    summary: Optional[str] = None
    title: Optional[str] = None
    difficulty: Optional[str] = None


class ChatMessage(BaseModel):
    """One previous turn of a Q&A conversation."""

    role: str
    content: str


class QaRequest(BaseModel):
    """Schema for asking a question about a video."""

    question: Optional[str] = None
    transcript: Optional[str] = None
    summary: Optional[str] = None
    title: Optional[str] = None
    chat_history: list[ChatMessage] = Field(default_factory=list, alias="chatHistory")

    model_config = ConfigDict(populate_by_name=True)


class GenerationResponse(BaseModel):
    """Generated content plus the usage after this request."""

    content: str
    usage: UsageResponse
