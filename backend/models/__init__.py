"""Data models for the Assistant Chat backend."""
from .conversation import ConversationTurn, GenerationParams, GenerationRequest, RequestMessage
from .assistant import AssistantProfile
from .api import AssistantCreate, AssistantOut, ChatRequest, ChatResponse, ErrorInfo, SpeechRequest

__all__ = [
    "ConversationTurn",
    "GenerationParams",
    "GenerationRequest",
    "RequestMessage",
    "AssistantProfile",
    "AssistantCreate",
    "AssistantOut",
    "ChatRequest",
    "ChatResponse",
    "ErrorInfo",
    "SpeechRequest",
]
