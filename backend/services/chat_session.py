"""In-memory chat sessions."""
import logging
import threading
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from config import FALLBACK_RESPONSE, MAX_SESSIONS, SESSION_TTL_SECONDS
from models.conversation import ConversationTurn, QUESTION, RESPONSE
from services.conversation_transformer import ConversationTransformer
from services.errors import ChatError, MalformedResponseError, TransportError
from services.llm_client import LLMClient

logger = logging.getLogger(__name__)


@dataclass
class ChatReply:
    """Outcome of one chat turn: generated text, or fallback text plus the error."""
    text: str
    error: Optional[ChatError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ChatSession:
    """Append-only conversation log for one session."""

    def __init__(
        self,
        transformer: ConversationTransformer,
        llm_client: LLMClient,
        fallback_response: str = FALLBACK_RESPONSE
    ):
        self.transformer = transformer
        self.llm_client = llm_client
        self.fallback_response = fallback_response
        self._turns: List[ConversationTurn] = []
        self._lock = threading.Lock()

    @property
    def history(self) -> List[ConversationTurn]:
        return list(self._turns)

    def send(self, text: str) -> ChatReply:
        """
        Send a user message and record the reply.

        Empty input is not rejected here; callers validate before sending.
        Upstream failures never propagate: the fallback text is recorded as
        the response turn and returned with the error attached. Turns of one
        session are sent one at a time so each question stays next to its reply.
        """
        with self._lock:
            history = list(self._turns)
            self._turns.append(ConversationTurn(kind=QUESTION, text=text))

            try:
                request = self.transformer.build_request(history, text)
                response = self.llm_client.generate(request.to_payload())
                reply = ChatReply(text=self.transformer.extract_text(response.body))
            except (MalformedResponseError, TransportError) as e:
                logger.warning(
                    f"Chat turn failed, using fallback: {e.error.message}",
                    extra={"error_code": e.error.code}
                )
                reply = ChatReply(text=self.fallback_response, error=e.error)

            self._turns.append(ConversationTurn(kind=RESPONSE, text=reply.text))
            return reply


class SessionRegistry:
    """
    Keeps chat sessions in process memory, keyed by session id.

    Sessions idle for longer than ``ttl_seconds`` are dropped, and once
    ``max_sessions`` is reached the least recently used one is evicted.
    """

    def __init__(
        self,
        max_sessions: int = MAX_SESSIONS,
        ttl_seconds: float = SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic
    ):
        if max_sessions <= 0:
            raise ValueError("max_sessions must be positive")

        self.max_sessions = max_sessions
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # session id -> (session, last used), least recently used first
        self._sessions: "OrderedDict[str, Tuple[ChatSession, float]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, session_id: str) -> Optional[ChatSession]:
        with self._lock:
            self._evict_expired()
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            self._touch(session_id, entry[0])
            return entry[0]

    def get_or_create(
        self,
        session_id: Optional[str],
        factory: Callable[[], ChatSession]
    ) -> Tuple[str, ChatSession]:
        """
        Return the session for ``session_id``, creating one when unknown.

        Unknown ids are kept rather than replaced so a client can choose its
        own id.
        """
        with self._lock:
            self._evict_expired()

            if session_id and session_id in self._sessions:
                session = self._sessions[session_id][0]
                self._touch(session_id, session)
                return session_id, session

            new_id = session_id or self._generate_session_id()
            session = factory()
            self._touch(new_id, session)

            while len(self._sessions) > self.max_sessions:
                evicted_id, _ = self._sessions.popitem(last=False)
                logger.info(f"Evicted chat session {evicted_id} (max_sessions={self.max_sessions})")

            logger.info(f"Created chat session {new_id}")
            return new_id, session

    def __len__(self) -> int:
        with self._lock:
            self._evict_expired()
            return len(self._sessions)

    def _touch(self, session_id: str, session: ChatSession) -> None:
        self._sessions[session_id] = (session, self._clock())
        self._sessions.move_to_end(session_id)

    def _evict_expired(self) -> None:
        cutoff = self._clock() - self.ttl_seconds
        while self._sessions:
            oldest_id, (_, last_used) = next(iter(self._sessions.items()))
            if last_used > cutoff:
                break
            del self._sessions[oldest_id]
            logger.info(f"Expired idle chat session {oldest_id}")

    @staticmethod
    def _generate_session_id() -> str:
        return f"sess_{uuid.uuid4().hex[:12]}"
