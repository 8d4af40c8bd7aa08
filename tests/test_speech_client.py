"""Unit tests for SpeechClient."""
import sys
sys.path.insert(0, 'backend')

import base64
import httpx
import pytest
from unittest.mock import MagicMock, patch
from services.speech_client import SpeechClient
from services.errors import MalformedResponseError, TransportError

URL = "https://tts.example.test/v1beta1/text:synthesize"


def _http_response(status_code=200, json=None, content=None):
    return httpx.Response(status_code, json=json, content=content, request=httpx.Request("POST", URL))


def _install(mock_client_class, response=None, side_effect=None):
    mock_client = MagicMock()
    mock_client.__enter__.return_value = mock_client
    if side_effect is not None:
        mock_client.post.side_effect = side_effect
    else:
        mock_client.post.return_value = response
    mock_client_class.return_value = mock_client
    return mock_client


class TestSpeechClient:
    """Test suite for SpeechClient."""

    @pytest.fixture
    def client(self):
        return SpeechClient(api_key="test_key", api_url=URL)

    def test_initialization_without_api_key_raises_error(self):
        with patch('services.speech_client.GEMINI_API_KEY', None):
            with pytest.raises(ValueError, match="GEMINI_API_KEY"):
                SpeechClient()

    def test_build_request_defaults(self, client):
        body = client.build_request("Bonjour")

        assert body["input"] == {"text": "Bonjour"}
        assert body["voice"] == {"languageCode": "fr-CA", "name": "fr-CA-Neural2-B", "ssmlGender": "MALE"}
        assert body["audioConfig"]["audioEncoding"] == "MP3"
        assert body["audioConfig"]["sampleRateHertz"] == 24000

    def test_build_request_voice_override(self, client):
        body = client.build_request("Bonjour", voice_name="fr-CA-Neural2-A")

        assert body["voice"]["name"] == "fr-CA-Neural2-A"

    @patch('services.speech_client.httpx.Client')
    def test_synthesize_decodes_base64(self, mock_client_class, client):
        audio = b"ID3\x04fake-mp3-bytes"
        mock_client = _install(
            mock_client_class,
            _http_response(json={"audioContent": base64.b64encode(audio).decode("ascii")})
        )

        result = client.synthesize("Bonjour")

        assert result == audio
        args, kwargs = mock_client.post.call_args
        assert args[0] == URL
        assert kwargs["json"]["input"]["text"] == "Bonjour"
        assert kwargs["headers"] == {"x-goog-api-key": "test_key"}

    @patch('services.speech_client.httpx.Client')
    def test_missing_audio_content_raises(self, mock_client_class, client):
        _install(mock_client_class, _http_response(json={"timepoints": []}))

        with pytest.raises(MalformedResponseError) as exc_info:
            client.synthesize("Bonjour")

        assert exc_info.value.error.details["reason"] == "no audioContent in response"

    @patch('services.speech_client.httpx.Client')
    def test_invalid_base64_raises(self, mock_client_class, client):
        _install(mock_client_class, _http_response(json={"audioContent": "not base64!!"}))

        with pytest.raises(MalformedResponseError):
            client.synthesize("Bonjour")

    @patch('services.speech_client.httpx.Client')
    def test_http_error_raises_transport_error(self, mock_client_class, client):
        _install(mock_client_class, _http_response(400, json={"error": {"message": "bad voice"}}))

        with pytest.raises(TransportError) as exc_info:
            client.synthesize("Bonjour")

        error = exc_info.value.error
        assert error.code == "API_ERROR"
        assert error.details["voice"] == "fr-CA-Neural2-B"

    @patch('services.speech_client.httpx.Client')
    def test_timeout_raises_transport_error(self, mock_client_class, client):
        _install(mock_client_class, side_effect=httpx.ConnectTimeout("timed out"))

        with pytest.raises(TransportError) as exc_info:
            client.synthesize("Bonjour")

        assert exc_info.value.error.code == "TIMEOUT_ERROR"
