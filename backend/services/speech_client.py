"""Text-to-speech client for the Google Cloud text:synthesize API."""
import base64
import binascii
import logging
import time
from typing import Any, Dict, Optional

import httpx

from config import GEMINI_API_KEY, TTS_API_URL, TTS_LANGUAGE_CODE, TTS_VOICE_NAME, REQUEST_TIMEOUT_SECONDS
from services.errors import ChatError, MalformedResponseError, transport_error_from

logger = logging.getLogger(__name__)


class SpeechClient:
    """Synthesize MP3 audio for assistant replies."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: str = TTS_API_URL,
        language_code: str = TTS_LANGUAGE_CODE,
        voice_name: str = TTS_VOICE_NAME,
        ssml_gender: str = "MALE",
        timeout_seconds: float = REQUEST_TIMEOUT_SECONDS
    ):
        """
        Initialize the speech client.

        Args:
            api_key: Google API key (defaults to GEMINI_API_KEY; both APIs accept the same key)
            api_url: text:synthesize endpoint
            language_code: Voice language, e.g. fr-CA
            voice_name: Default voice, e.g. fr-CA-Neural2-B
            ssml_gender: Voice gender hint
            timeout_seconds: Deadline for each call
        """
        self.api_key = api_key or GEMINI_API_KEY
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY must be provided or set in environment")

        self.api_url = api_url
        self.language_code = language_code
        self.voice_name = voice_name
        self.ssml_gender = ssml_gender
        self.timeout_seconds = timeout_seconds
        logger.info(f"SpeechClient initialized with voice {voice_name}")

    def build_request(self, text: str, voice_name: Optional[str] = None) -> Dict[str, Any]:
        return {
            "input": {"text": text},
            "voice": {
                "languageCode": self.language_code,
                "name": voice_name or self.voice_name,
                "ssmlGender": self.ssml_gender,
            },
            "audioConfig": {
                "audioEncoding": "MP3",
                "speakingRate": 1,
                "pitch": 0,
                "volumeGainDb": 0,
                "sampleRateHertz": 24000,
                "effectsProfileId": [],
            },
        }

    def synthesize(self, text: str, voice_name: Optional[str] = None) -> bytes:
        """
        Synthesize speech for ``text``.

        The API returns base64 in ``audioContent``; it is decoded here so
        callers receive playable MP3 bytes.

        Raises:
            TransportError: Timeout, HTTP error status or connection failure
            MalformedResponseError: Body lacks decodable ``audioContent``
        """
        voice = voice_name or self.voice_name
        start_time = time.time()

        try:
            with httpx.Client(timeout=self.timeout_seconds) as client:
                response = client.post(
                    self.api_url,
                    json=self.build_request(text, voice),
                    headers={"x-goog-api-key": self.api_key},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            latency_ms = int((time.time() - start_time) * 1000)
            error = transport_error_from(
                e, "Text-to-Speech API", {"voice": voice, "latency_ms": latency_ms}
            )
            logger.error(
                f"Speech synthesis failed: voice={voice}, latency={latency_ms}ms, error={e}",
                exc_info=True,
                extra={"error_code": error.error.code, "error_details": error.error.details}
            )
            raise error
        except ValueError as e:
            raise self._malformed("response body is not valid JSON", voice, str(e))

        audio_content = data.get("audioContent") if isinstance(data, dict) else None
        if not isinstance(audio_content, str) or not audio_content:
            raise self._malformed("no audioContent in response", voice)

        try:
            audio = base64.b64decode(audio_content, validate=True)
        except (binascii.Error, ValueError) as e:
            raise self._malformed("audioContent is not valid base64", voice, str(e))

        latency_ms = int((time.time() - start_time) * 1000)
        logger.info(f"Synthesized speech: voice={voice}, bytes={len(audio)}, latency={latency_ms}ms")
        return audio

    @staticmethod
    def _malformed(reason: str, voice: str, original_error: Optional[str] = None) -> MalformedResponseError:
        details: Dict[str, Any] = {"reason": reason, "voice": voice}
        if original_error:
            details["original_error"] = original_error
        logger.error(f"Malformed speech response: {reason}", extra={"error_code": "MALFORMED_RESPONSE"})
        return MalformedResponseError(ChatError(
            code="MALFORMED_RESPONSE",
            message=f"Invalid speech response: {reason}",
            details=details,
        ))
