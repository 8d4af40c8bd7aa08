"""LLM Client for the Gemini generateContent API."""
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional
import httpx
import logging

from config import GEMINI_API_KEY, GEMINI_API_URL, GEMINI_MODEL, REQUEST_TIMEOUT_SECONDS
from services.errors import ChatError, MalformedResponseError, transport_error_from

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Response from LLM generation."""
    body: Dict[str, Any]
    latency_ms: int
    model_used: str


class LLMClient:
    """Client for the generative-language API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: str = GEMINI_API_URL,
        model: str = GEMINI_MODEL,
        timeout_seconds: float = REQUEST_TIMEOUT_SECONDS
    ):
        """
        Initialize LLM client.

        Args:
            api_key: API key (defaults to GEMINI_API_KEY from environment)
            api_url: Base URL of the API, without the model path
            model: Model name, e.g. gemini-1.5-flash-latest
            timeout_seconds: Deadline for each call
        """
        self.api_key = api_key or GEMINI_API_KEY
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY must be provided or set in environment")

        self.api_url = api_url.rstrip("/")
        self.model = model
        self.timeout_seconds = timeout_seconds
        logger.info(f"LLMClient initialized for model {model}")

    @property
    def endpoint(self) -> str:
        return f"{self.api_url}/models/{self.model}:generateContent"

    def generate(self, payload: Dict[str, Any]) -> LLMResponse:
        """
        Send a generateContent request.

        Args:
            payload: JSON body built by GenerationRequest.to_payload()

        Returns:
            LLMResponse with the decoded JSON body and latency

        Raises:
            TransportError: Timeout, HTTP error status or connection failure
            MalformedResponseError: Body is not a JSON object
        """
        start_time = time.time()

        try:
            logger.debug(f"Generating response with model: {self.model}")

            with httpx.Client(timeout=self.timeout_seconds) as client:
                response = client.post(
                    self.endpoint,
                    json=payload,
                    headers={"x-goog-api-key": self.api_key},
                )
                response.raise_for_status()
                data = response.json()

        except httpx.HTTPError as e:
            latency_ms = int((time.time() - start_time) * 1000)
            error = transport_error_from(
                e, "Gemini API", {"model": self.model, "latency_ms": latency_ms}
            )
            logger.error(
                f"Generation failed: model={self.model}, latency={latency_ms}ms, error={e}",
                exc_info=True,
                extra={"error_code": error.error.code, "error_details": error.error.details}
            )
            raise error

        except ValueError as e:
            latency_ms = int((time.time() - start_time) * 1000)
            error = MalformedResponseError(ChatError(
                code="MALFORMED_RESPONSE",
                message="Response body is not valid JSON",
                details={
                    "model": self.model,
                    "latency_ms": latency_ms,
                    "original_error": str(e)
                }
            ))
            logger.error(
                f"Non-JSON response: model={self.model}, latency={latency_ms}ms",
                extra={"error_code": error.error.code, "error_details": error.error.details}
            )
            raise error

        latency_ms = int((time.time() - start_time) * 1000)

        if not isinstance(data, dict):
            error = MalformedResponseError(ChatError(
                code="MALFORMED_RESPONSE",
                message="Response body is not a JSON object",
                details={"model": self.model, "latency_ms": latency_ms}
            ))
            logger.error(
                f"Unexpected response type: model={self.model}, type={type(data).__name__}",
                extra={"error_code": error.error.code, "error_details": error.error.details}
            )
            raise error

        logger.info(f"Generated response: model={self.model}, latency={latency_ms}ms")

        return LLMResponse(
            body=data,
            latency_ms=latency_ms,
            model_used=self.model
        )
