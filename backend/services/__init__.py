"""Services for the Assistant Chat backend."""
from .errors import ChatError, ChatServiceError, MalformedResponseError, TransportError, NotFoundError, StorageError
from .conversation_transformer import ConversationTransformer, build_request, extract_text, escape_text
from .llm_client import LLMClient, LLMResponse
from .speech_client import SpeechClient
from .chat_session import ChatSession, ChatReply, SessionRegistry
from .assistant_store import AssistantStore

__all__ = ['ChatError', 'ChatServiceError', 'MalformedResponseError', 'TransportError', 'NotFoundError', 'StorageError', 'ConversationTransformer', 'build_request', 'extract_text', 'escape_text', 'LLMClient', 'LLMResponse', 'SpeechClient', 'ChatSession', 'ChatReply', 'SessionRegistry', 'AssistantStore']
