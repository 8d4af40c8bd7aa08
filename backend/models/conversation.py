"""Conversation data models."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Turn kinds
QUESTION = "question"
RESPONSE = "response"

# Request roles
SYSTEM_ROLE = "system"
USER_ROLE = "user"
MODEL_ROLE = "model"


@dataclass
class ConversationTurn:
    """Represents a single turn in a conversation."""
    kind: str  # "question" or "response"
    text: str

    def __post_init__(self):
        if self.kind not in (QUESTION, RESPONSE):
            raise ValueError(f"Turn kind must be '{QUESTION}' or '{RESPONSE}', got {self.kind!r}")


@dataclass
class GenerationParams:
    """Sampling options forwarded to the generative-language API."""
    temperature: float = 0.1
    top_p: float = 0.95
    top_k: int = 64
    max_output_tokens: int = 8192
    response_mime_type: str = "text/plain"

    def __post_init__(self):
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError("temperature must be within [0, 2]")
        if not 0.0 <= self.top_p <= 1.0:
            raise ValueError("top_p must be within [0, 1]")
        if self.top_k <= 0:
            raise ValueError("top_k must be positive")
        if self.max_output_tokens <= 0:
            raise ValueError("max_output_tokens must be positive")

    def to_generation_config(self) -> Dict[str, Any]:
        return {
            "temperature": self.temperature,
            "topP": self.top_p,
            "topK": self.top_k,
            "maxOutputTokens": self.max_output_tokens,
            "responseMimeType": self.response_mime_type,
        }


@dataclass
class RequestMessage:
    """One role-tagged entry of a generation request."""
    role: str  # "system", "user" or "model"
    text: str


@dataclass
class GenerationRequest:
    """Provider-shaped request built from a conversation."""
    messages: List[RequestMessage]
    params: GenerationParams
    safety_settings: Optional[List[Dict[str, str]]] = field(default=None)

    def to_payload(self) -> Dict[str, Any]:
        """
        Serialize to the generateContent JSON body.

        System messages become the ``systemInstruction``; every other
        message is kept in order under ``contents``.
        """
        system_parts = [
            {"text": message.text}
            for message in self.messages
            if message.role == SYSTEM_ROLE
        ]
        contents = [
            {"role": message.role, "parts": [{"text": message.text}]}
            for message in self.messages
            if message.role != SYSTEM_ROLE
        ]

        payload: Dict[str, Any] = {
            "contents": contents,
            "generationConfig": self.params.to_generation_config(),
        }
        if system_parts:
            payload["systemInstruction"] = {"role": USER_ROLE, "parts": system_parts}
        if self.safety_settings:
            payload["safetySettings"] = list(self.safety_settings)
        return payload
