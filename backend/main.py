"""Main entry point for the Assistant Chat API."""
import logging
from typing import List, Optional
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from config import (
    PORT,
    LOG_LEVEL,
    CORS_ORIGINS,
    PERSONA_FILE,
    DEFAULT_PERSONA,
    ESCAPE_INPUT,
    TEMPERATURE,
    TOP_P,
    TOP_K,
    MAX_OUTPUT_TOKENS,
    SAFETY_SETTINGS,
)
from logger import setup_logging
from models.api import AssistantCreate, AssistantOut, ChatRequest, ChatResponse, ErrorInfo, SpeechRequest
from models.conversation import GenerationParams
from services.assistant_store import AssistantStore
from services.chat_session import ChatSession, SessionRegistry
from services.conversation_transformer import ConversationTransformer, load_persona, persona_from_assistant
from services.errors import ChatError, MalformedResponseError, NotFoundError, StorageError, TransportError
from services.llm_client import LLMClient
from services.speech_client import SpeechClient

# Initialize logging
setup_logging(LOG_LEVEL)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Assistant Chat API",
    description="Chat widget backend: assistant profiles, generative replies and speech synthesis",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services (will be done on startup)
assistant_store: AssistantStore = None
llm_client: LLMClient = None
speech_client: SpeechClient = None
session_registry: SessionRegistry = SessionRegistry()
generation_params: GenerationParams = GenerationParams()
default_persona: str = DEFAULT_PERSONA


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global assistant_store, llm_client, speech_client, generation_params, default_persona

    logger.info("Initializing Assistant Chat services...")

    try:
        generation_params = GenerationParams(
            temperature=TEMPERATURE,
            top_p=TOP_P,
            top_k=TOP_K,
            max_output_tokens=MAX_OUTPUT_TOKENS
        )
        default_persona = load_persona(PERSONA_FILE, default=DEFAULT_PERSONA)

        assistant_store = AssistantStore()
        logger.info("Initialized AssistantStore")

        llm_client = LLMClient()
        logger.info("Initialized LLMClient")

        speech_client = SpeechClient()
        logger.info("Initialized SpeechClient")

        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


def _error_detail(error: ChatError) -> dict:
    return {"error": error.to_dict()}


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "Assistant Chat API"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "assistant-chat",
        "version": "1.0.0",
        "sessions": len(session_registry)
    }


@app.post("/assistants", response_model=AssistantOut, status_code=201)
def create_assistant(request: AssistantCreate) -> AssistantOut:
    """Create an assistant. Every field is optional free-form text."""
    try:
        assistant = assistant_store.create(request.model_dump())
    except StorageError as e:
        raise HTTPException(status_code=500, detail=_error_detail(e.error))
    return AssistantOut.from_profile(assistant)


@app.get("/assistants", response_model=List[AssistantOut])
def list_assistants() -> List[AssistantOut]:
    """List every assistant in insertion order."""
    try:
        assistants = assistant_store.list()
    except StorageError as e:
        raise HTTPException(status_code=500, detail=_error_detail(e.error))
    return [AssistantOut.from_profile(assistant) for assistant in assistants]


@app.get("/assistants/{assistant_id}", response_model=AssistantOut)
def get_assistant(assistant_id: int) -> AssistantOut:
    """Retrieve a specific assistant by id."""
    try:
        assistant = assistant_store.get_by_id(assistant_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=_error_detail(e.error))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=_error_detail(e.error))
    return AssistantOut.from_profile(assistant)


def _persona_for(assistant_id: Optional[int]) -> str:
    if assistant_id is None:
        return default_persona
    try:
        assistant = assistant_store.get_by_id(assistant_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=_error_detail(e.error))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=_error_detail(e.error))
    return persona_from_assistant(assistant, default=default_persona)


@app.post("/chat", response_model=ChatResponse)
def chat_endpoint(request: ChatRequest) -> ChatResponse:
    """
    Send a message and get the assistant reply.

    Pass ``session_id`` for a multi-turn conversation. ``assistant_id`` only
    matters when a new session is created: that assistant's description,
    role and model info become the persona.

    Upstream failures do not fail the request: the reply carries the
    fallback text and ``error`` describes what went wrong.
    """
    if not request.message or not request.message.strip():
        raise HTTPException(status_code=400, detail="Message field is required and cannot be empty")

    session = session_registry.get(request.session_id) if request.session_id else None
    if session is None:
        persona = _persona_for(request.assistant_id)

        def factory() -> ChatSession:
            transformer = ConversationTransformer(
                persona,
                generation_params,
                safety_settings=SAFETY_SETTINGS,
                escape_input=ESCAPE_INPUT
            )
            return ChatSession(transformer, llm_client)

        session_id, session = session_registry.get_or_create(request.session_id, factory)
    else:
        session_id = request.session_id

    logger.info(f"Processing chat message for session {session_id}: {request.message[:100]}...")
    reply = session.send(request.message)

    return ChatResponse(
        reply=reply.text,
        session_id=session_id,
        error=ErrorInfo(**reply.error.to_dict()) if reply.error else None
    )


@app.post("/speech")
def speech_endpoint(request: SpeechRequest) -> Response:
    """Synthesize ``text`` and return MP3 audio."""
    if not request.text or not request.text.strip():
        raise HTTPException(status_code=400, detail="Text field is required and cannot be empty")

    try:
        audio = speech_client.synthesize(request.text, voice_name=request.voice_name)
    except (TransportError, MalformedResponseError) as e:
        logger.error(f"Speech synthesis error: {e.error.message}")
        raise HTTPException(status_code=502, detail=_error_detail(e.error))

    return Response(content=audio, media_type="audio/mpeg")


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting Assistant Chat API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
