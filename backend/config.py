"""Configuration management for the Assistant Chat backend."""
import json
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# API Keys
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

# Server Configuration
PORT = int(os.getenv("PORT", "3001"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# CORS Configuration
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:3001"
).split(",")

# Generative language API
GEMINI_API_URL = os.getenv("GEMINI_API_URL", "https://generativelanguage.googleapis.com/v1beta")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-flash-latest")

# Generation defaults
TEMPERATURE = float(os.getenv("GENERATION_TEMPERATURE", "0.1"))
TOP_P = float(os.getenv("GENERATION_TOP_P", "0.95"))
TOP_K = int(os.getenv("GENERATION_TOP_K", "64"))
MAX_OUTPUT_TOKENS = int(os.getenv("GENERATION_MAX_OUTPUT_TOKENS", "8192"))

# Text-to-speech API
TTS_API_URL = os.getenv("TTS_API_URL", "https://texttospeech.googleapis.com/v1beta1/text:synthesize")
TTS_LANGUAGE_CODE = os.getenv("TTS_LANGUAGE_CODE", "fr-CA")
TTS_VOICE_NAME = os.getenv("TTS_VOICE_NAME", "fr-CA-Neural2-B")

# Deadline for every outbound call
REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))

# Storage
ASSISTANTS_TABLE = os.getenv("ASSISTANTS_TABLE", "assistants")

# Chat behaviour
PERSONA_FILE = os.getenv("PERSONA_FILE", "description.txt")
DEFAULT_PERSONA = os.getenv("DEFAULT_PERSONA", "You are a helpful assistant.")
FALLBACK_RESPONSE = os.getenv("FALLBACK_RESPONSE", "Error fetching response")
ESCAPE_INPUT = os.getenv("ESCAPE_INPUT", "0").strip().lower() in ("1", "true", "yes")

# Chat sessions live in memory; least recently used ones are dropped past the cap
MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", "1000"))
SESSION_TTL_SECONDS = float(os.getenv("SESSION_TTL_SECONDS", "3600"))

# Provider safety settings, as a JSON list; "[]" disables them
DEFAULT_SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_NONE"},
]
_safety_settings_raw = os.getenv("SAFETY_SETTINGS")
SAFETY_SETTINGS = json.loads(_safety_settings_raw) if _safety_settings_raw else DEFAULT_SAFETY_SETTINGS
