"""API request and response models."""
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field

from models.assistant import AssistantProfile


class AssistantCreate(BaseModel):
    """Body of POST /assistants. Every field is optional free-form text."""
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    name: Optional[str] = None
    description: Optional[str] = None
    user_role: Optional[str] = Field(None, alias="userRole")
    model_info: Optional[str] = Field(None, alias="modelInfo")


class AssistantOut(BaseModel):
    """Assistant record as returned by the API."""
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    id: int
    name: Optional[str] = None
    description: Optional[str] = None
    user_role: Optional[str] = Field(None, alias="userRole")
    model_info: Optional[str] = Field(None, alias="modelInfo")

    @classmethod
    def from_profile(cls, profile: AssistantProfile) -> "AssistantOut":
        return cls(
            id=profile.id,
            name=profile.name,
            description=profile.description,
            user_role=profile.user_role,
            model_info=profile.model_info,
        )


class ChatRequest(BaseModel):
    message: str = Field(..., description="User message")
    session_id: Optional[str] = Field(None, description="Conversation session; omit for a new conversation")
    assistant_id: Optional[int] = Field(None, description="Assistant whose persona configures a new session")


class ErrorInfo(BaseModel):
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class ChatResponse(BaseModel):
    reply: str = Field(..., description="Assistant reply, or the fallback text when generation failed")
    session_id: str = Field(..., description="Session id (use for follow-up messages)")
    error: Optional[ErrorInfo] = Field(None, description="Set when the reply is a fallback")


class SpeechRequest(BaseModel):
    text: str = Field(..., description="Text to synthesize")
    voice_name: Optional[str] = Field(None, description="Voice override, e.g. fr-CA-Neural2-B")
