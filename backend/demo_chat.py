"""Interactive terminal demo for ChatSession."""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent))

from config import PERSONA_FILE, DEFAULT_PERSONA, SAFETY_SETTINGS
from services.chat_session import ChatSession
from services.conversation_transformer import ConversationTransformer, load_persona
from services.llm_client import LLMClient


def main():
    """Chat with the configured model until an empty line or Ctrl-D."""
    print("=== Assistant Chat Demo ===\n")

    persona = load_persona(PERSONA_FILE, default=DEFAULT_PERSONA)
    print(f"Persona: {persona[:80]}\n")

    session = ChatSession(ConversationTransformer(persona, safety_settings=SAFETY_SETTINGS), LLMClient())

    while True:
        try:
            text = input("you> ")
        except EOFError:
            break
        if not text.strip():
            break

        reply = session.send(text)
        print(f"bot> {reply.text}")
        if not reply.ok:
            print(f"     ({reply.error.code}: {reply.error.message})")

    print(f"\n{len(session.history)} turns in this session")


if __name__ == "__main__":
    main()
