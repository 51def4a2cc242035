"""
Pydantic models for copilot conversations.

Models:
- ChatMessage: Individual message in a session transcript
- Transcript: Ordered message history for one session
- SessionState: Payload returned by the session inspection endpoint
"""
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any, Literal
from pydantic import BaseModel, Field


Role = Literal["system", "user", "assistant", "tool"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatMessage(BaseModel):
    """A single message in the conversation."""

    role: Role = Field(..., description="Message role: system, user, assistant or tool")
    content: Optional[str] = Field(
        None,
        description="Message text (null only for assistant tool-call messages)"
    )
    tool_calls: Optional[List[Dict[str, Any]]] = Field(
        None,
        description="Tool calls proposed by the assistant, in OpenAI wire format"
    )
    tool_call_id: Optional[str] = Field(
        None,
        description="Id of the tool call a tool message answers"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "role": "user",
                "content": "Do you have a waterproof jacket for trekking?"
            }
        }

    def to_openai(self) -> Dict[str, Any]:
        """Render the message as a Chat Completions API dict."""
        message: Dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            message["tool_calls"] = self.tool_calls
        if self.tool_call_id:
            message["tool_call_id"] = self.tool_call_id
        return message


class Transcript(BaseModel):
    """Ordered message history for one session.

    A fresh transcript always starts with the system prompt followed by
    the assistant greeting.
    """

    session_id: str = Field(..., description="Caller-supplied session identifier")
    messages: List[ChatMessage] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def append(self, message: ChatMessage) -> None:
        self.messages.append(message)
        self.updated_at = _utcnow()

    @property
    def last_message(self) -> Optional[ChatMessage]:
        return self.messages[-1] if self.messages else None


class SessionState(BaseModel):
    """Session inspection response."""

    session_id: str
    found: bool
    message_count: int = 0
    transcript: Optional[Transcript] = None
