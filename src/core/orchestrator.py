# src/core/orchestrator.py

from typing import List

from src.config import Settings, log
from src.core.errors import (
    GenerationError,
    MissingCredential,
    ModelError,
    PersonaUnavailable,
    ServiceUnavailable,
)
from src.core.prompts import build_system_prompt, build_user_prompt
from src.models.chat_models import ChatRequest, ChatResponse, Turn
from src.modules.gemini_client import ModelGateway
from src.modules.persona_client import PersonaLoader


class ChatOrchestrator:
    """
    Runs one authenticated chat turn: load the persona, compose the
    instruction, call Gemini. The persona fetch always completes before
    generation starts; failures surface as ScribeError subclasses that the
    API maps to `{"error": ...}` bodies.
    """

    def __init__(self, settings: Settings, persona_loader: PersonaLoader, model_gateway: ModelGateway):
        self.settings = settings
        self.persona_loader = persona_loader
        self.model_gateway = model_gateway

    def trim_history(self, history: List[Turn]) -> List[Turn]:
        limit = self.settings.MAX_HISTORY_TURNS
        if limit > 0 and len(history) > limit:
            log.info(f"History trimmed from {len(history)} to the last {limit} turns")
            return history[-limit:]
        return list(history)

    async def handle(self, chat_request: ChatRequest, user_id: str) -> ChatResponse:
        # 1. Persona
        try:
            persona = await self.persona_loader.load_persona()
        except MissingCredential as e:
            log.error(f"No persona for user {user_id}: {e.credential} is not configured")
            raise ServiceUnavailable("The Scribe is unavailable right now (no voice configured).") from e
        except PersonaUnavailable as e:
            log.error(f"No persona for user {user_id}: {e.message}")
            raise ServiceUnavailable("The Scribe is unavailable right now. Please try again.") from e

        # 2. Prompt
        system_prompt = build_system_prompt(persona)
        prompt = build_user_prompt(chat_request.context, chat_request.message)
        history = self.trim_history(chat_request.history)

        # 3. Generation
        try:
            text = await self.model_gateway.generate(system_prompt, prompt, history)
        except MissingCredential as e:
            log.error(f"Generation skipped for user {user_id}: {e.credential} is not configured")
            raise GenerationError("The Scribe could not respond (model not configured).") from e
        except ModelError as e:
            log.error(f"Generation failed for user {user_id}: {e.message}")
            raise GenerationError("The Scribe could not respond. Please try again.") from e

        return ChatResponse(response=text)
