from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class Message(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str = Field(..., min_length=1)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class TokenUsage(BaseModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class ChatRequest(BaseModel):
    messages: List[Message] = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    json_mode: bool = False
    temperature: Optional[float] = None
    max_tokens: Optional[int] = 500


class ChatResponse(BaseModel):
    content: str
    model: str
    provider: str = "openai"
    token_usage: Optional[TokenUsage] = None
    finish_reason: Optional[str] = None
