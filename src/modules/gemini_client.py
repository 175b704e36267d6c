# src/modules/gemini_client.py

import asyncio
from typing import List

from google import genai
from google.genai import types

from src.config import Settings, log
from src.core.errors import MissingCredential, ModelError
from src.core.prompts import join_instruction
from src.models.chat_models import Turn


def prepare_history_for_gemini(history: List[Turn]) -> List[types.Content]:
    """Converts our Pydantic history into the Content list the Gemini API expects. Order and text are kept as-is."""
    gemini_history = []
    for turn in history:
        gemini_history.append(types.Content(role=turn.role, parts=[types.Part.from_text(text=turn.text)]))
    return gemini_history


class ModelGateway:
    """Single-shot Gemini chat: the system prompt is prefixed to the outgoing user turn on every call."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._client: genai.Client | None = None

    def _get_client(self, api_key: str) -> genai.Client:
        # One client (and HTTP session) per gateway, reused across turns.
        if self._client is None:
            self._client = genai.Client(api_key=api_key)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aio.aclose()
            self._client = None

    def _generation_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            max_output_tokens=self.settings.MAX_OUTPUT_TOKENS,
            temperature=self.settings.TEMPERATURE,
            top_p=self.settings.TOP_P,
        )

    async def generate(self, system_prompt: str, message: str, history: List[Turn]) -> str:
        api_key = self.settings.GEMINI_API_KEY
        if not api_key:
            log.critical("GEMINI_API_KEY is missing. Cannot reach the model.")
            raise MissingCredential("GEMINI_API_KEY")

        try:
            client = self._get_client(api_key)
            chat = client.aio.chats.create(
                model=self.settings.GEMINI_MODEL,
                config=self._generation_config(),
                history=prepare_history_for_gemini(history),
            )
            full_prompt = join_instruction(system_prompt, message)
            log.info(f"Sending turn to {self.settings.GEMINI_MODEL} with {len(history)} prior turns")
            response = await asyncio.wait_for(chat.send_message(full_prompt), timeout=self.settings.MODEL_TIMEOUT)
            text = response.text
        except asyncio.TimeoutError as e:
            log.error(f"Gemini did not answer within {self.settings.MODEL_TIMEOUT}s")
            raise ModelError("The model took too long to respond.") from e
        except Exception as e:
            log.error(f"Error generating the response from Gemini: {e}", exc_info=True)
            raise ModelError("There was a problem contacting the AI service.") from e

        if not text:
            log.error("Gemini returned an empty response.")
            raise ModelError("The AI service returned an empty response.")
        return text
