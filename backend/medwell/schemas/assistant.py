"""
Schemas for the symptom checker and chat endpoints.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class SymptomCheckRequest(BaseModel):
    symptoms: Optional[List[str]] = Field(default=None, description="Non-empty list of symptoms")


class SymptomCheckResponse(BaseModel):
    result: str


class ChatTurn(BaseModel):
    """
    One prior turn of the conversation.

    Older clients send the text under `message`; it takes precedence over
    `content` when both are set.
    """
    role: str = Field(default="user", description="user or assistant")
    content: Optional[str] = None
    message: Optional[str] = None

    @property
    def text(self) -> str:
        return self.message or self.content or ""


class ChatRequest(BaseModel):
    message: Optional[str] = None
    chatHistory: Optional[List[ChatTurn]] = Field(default=None, description="Prior turns, oldest first")


class ChatResponse(BaseModel):
    response: str
