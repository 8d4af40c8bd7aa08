"""
Conversation Transformer.

Turns a running conversation into a generateContent request body and turns
the provider's response body back into display text. Everything here is a
pure transform: no I/O except ``load_persona``.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from models.assistant import AssistantProfile
from models.conversation import (
    ConversationTurn,
    GenerationParams,
    GenerationRequest,
    RequestMessage,
    QUESTION,
    SYSTEM_ROLE,
    USER_ROLE,
    MODEL_ROLE,
)
from services.errors import ChatError, MalformedResponseError

logger = logging.getLogger(__name__)

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "'": "\\'",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def escape_text(text: str) -> str:
    """
    Escape characters that break embedding text into a request payload.

    Not idempotent: escaping twice double-escapes, so apply it exactly once
    where raw text enters request building.
    """
    out = []
    for char in text:
        if char in _ESCAPES:
            out.append(_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            out.append(f"\\u{ord(char):04x}")
        else:
            out.append(char)
    return "".join(out)


def role_for(turn: ConversationTurn) -> str:
    """Map a turn kind to its request role."""
    return USER_ROLE if turn.kind == QUESTION else MODEL_ROLE


def build_request(
    persona: str,
    history: Sequence[ConversationTurn],
    new_input: str,
    params: GenerationParams,
    safety_settings: Optional[List[Dict[str, str]]] = None,
    escape: bool = False,
) -> GenerationRequest:
    """
    Build a generation request from a conversation.

    The result holds one system message for the persona, one message per
    history turn in the original order, and the new input last. Nothing is
    reordered, deduplicated or truncated, and role alternation is left for
    the provider to judge.

    Args:
        persona: Persona/system preamble (may be empty)
        history: Prior turns, oldest first
        new_input: Text of the new user message (not validated)
        params: Sampling options
        safety_settings: Optional provider safety settings
        escape: Apply ``escape_text`` once to every text

    Returns:
        GenerationRequest with ``len(history) + 2`` messages
    """
    prepare = escape_text if escape else (lambda text: text)

    messages = [RequestMessage(role=SYSTEM_ROLE, text=prepare(persona))]
    messages.extend(
        RequestMessage(role=role_for(turn), text=prepare(turn.text))
        for turn in history
    )
    messages.append(RequestMessage(role=USER_ROLE, text=prepare(new_input)))

    # History is forwarded whole; there is no token budget.
    logger.debug(f"Built generation request with {len(messages)} messages")
    return GenerationRequest(messages=messages, params=params, safety_settings=safety_settings)


def _malformed(reason: str, body: Any, **extra: Any) -> MalformedResponseError:
    details: Dict[str, Any] = {"reason": reason, **extra}
    if isinstance(body, dict):
        details["keys"] = sorted(body.keys())
        if isinstance(body.get("error"), dict):
            details["provider_error"] = body["error"].get("message")
        feedback = body.get("promptFeedback")
        if isinstance(feedback, dict) and feedback.get("blockReason"):
            details["block_reason"] = feedback["blockReason"]
    return MalformedResponseError(ChatError(
        code="MALFORMED_RESPONSE",
        message=f"Invalid API response structure: {reason}",
        details=details,
    ))


def extract_text(response_body: Any) -> str:
    """
    Extract the generated text from a generateContent response body.

    Joins the text of every part of the first candidate with a single space.

    Raises:
        MalformedResponseError: If the candidate/content/parts path is missing
    """
    if not isinstance(response_body, dict):
        raise _malformed("body is not a JSON object", response_body)

    candidates = response_body.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        raise _malformed("no candidates", response_body)

    candidate = candidates[0]
    content = candidate.get("content") if isinstance(candidate, dict) else None
    if not isinstance(content, dict):
        finish_reason = candidate.get("finishReason") if isinstance(candidate, dict) else None
        raise _malformed("first candidate has no content", response_body, finish_reason=finish_reason)

    parts = content.get("parts")
    if not isinstance(parts, list):
        raise _malformed("content has no parts", response_body)

    texts = []
    for part in parts:
        text = part.get("text") if isinstance(part, dict) else None
        if not isinstance(text, str):
            raise _malformed("part without text", response_body)
        texts.append(text)

    return " ".join(texts)


def persona_from_assistant(profile: AssistantProfile, default: str = "") -> str:
    """Compose persona text from an assistant's description, role and model info."""
    sections = [
        section.strip()
        for section in (profile.description, profile.user_role, profile.model_info)
        if section and section.strip()
    ]
    return "\n".join(sections) if sections else default


def load_persona(path: str, default: str = "") -> str:
    """Read persona text from a file, falling back to ``default`` when unreadable."""
    try:
        text = Path(path).read_text(encoding="utf-8")
        logger.info(f"Persona loaded from {path}")
        return text
    except OSError as e:
        logger.warning(f"Failed to load persona from {path}: {e}")
        return default


class ConversationTransformer:
    """Shared request builder and response parser, configured once per persona."""

    def __init__(
        self,
        persona: str,
        params: Optional[GenerationParams] = None,
        safety_settings: Optional[List[Dict[str, str]]] = None,
        escape_input: bool = False
    ):
        """
        Initialize the transformer.

        Args:
            persona: Persona/system preamble sent with every request
            params: Sampling options (defaults to GenerationParams())
            safety_settings: Optional provider safety settings
            escape_input: Escape persona, history and input once while building
        """
        self.persona = persona
        self.params = params or GenerationParams()
        self.safety_settings = safety_settings
        self.escape_input = escape_input

    def build_request(self, history: Sequence[ConversationTurn], new_input: str) -> GenerationRequest:
        return build_request(
            self.persona,
            history,
            new_input,
            self.params,
            safety_settings=self.safety_settings,
            escape=self.escape_input,
        )

    @staticmethod
    def extract_text(response_body: Any) -> str:
        return extract_text(response_body)
