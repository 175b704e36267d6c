"""Tests for the chat orchestrator with stubbed collaborators."""

import pytest

from factories import PERSONA, make_settings
from src.core.errors import (
    GenerationError,
    MissingCredential,
    ModelError,
    PersonaUnavailable,
    ServiceUnavailable,
)
from src.core.orchestrator import ChatOrchestrator
from src.core.prompts import CLINICAL_GUIDELINES, join_instruction
from src.models.chat_models import ChatRequest, Turn


def _orchestrator(persona_loader, model_gateway, **overrides):
    return ChatOrchestrator(make_settings(**overrides), persona_loader, model_gateway)


@pytest.mark.asyncio
async def test_scribe_scenario(persona_loader, model_gateway):
    request = ChatRequest(message="I have severe cramps", history=[], context="")

    result = await _orchestrator(persona_loader, model_gateway).handle(request, "user_123")

    assert result.response == "Document as dysmenorrhea."
    system_prompt, prompt, history = model_gateway.generate.await_args.args
    instruction = join_instruction(system_prompt, prompt)
    assert instruction.startswith(PERSONA)
    assert "I have severe cramps" in instruction
    assert CLINICAL_GUIDELINES in instruction
    assert history == []


@pytest.mark.asyncio
async def test_context_reaches_the_prompt(persona_loader, model_gateway):
    context = "Date: 1/2/2026, Pain: 8/10, Symptoms: Cramps, Notes: missed work"
    request = ChatRequest(message="summarize", context=context)

    await _orchestrator(persona_loader, model_gateway).handle(request, "user_123")

    prompt = model_gateway.generate.await_args.args[1]
    assert context in prompt
    assert prompt.endswith("summarize")


@pytest.mark.asyncio
async def test_persona_is_loaded_once_per_turn(persona_loader, model_gateway):
    orchestrator = _orchestrator(persona_loader, model_gateway)

    await orchestrator.handle(ChatRequest(message="one"), "user_123")
    await orchestrator.handle(ChatRequest(message="two"), "user_123")

    assert persona_loader.load_persona.await_count == 2
    assert model_gateway.generate.await_count == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [PersonaUnavailable("down"), MissingCredential("SOUL_REPO_TOKEN")])
async def test_persona_failure_is_service_unavailable(persona_loader, model_gateway, error):
    persona_loader.load_persona.side_effect = error

    with pytest.raises(ServiceUnavailable) as exc_info:
        await _orchestrator(persona_loader, model_gateway).handle(ChatRequest(message="hi"), "user_123")

    assert exc_info.value.status_code == 500
    model_gateway.generate.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [ModelError("quota"), MissingCredential("GEMINI_API_KEY")])
async def test_model_failure_is_generation_error(persona_loader, model_gateway, error):
    model_gateway.generate.side_effect = error

    with pytest.raises(GenerationError) as exc_info:
        await _orchestrator(persona_loader, model_gateway).handle(ChatRequest(message="hi"), "user_123")

    assert exc_info.value.status_code == 500
    assert model_gateway.generate.await_count == 1


@pytest.mark.asyncio
async def test_history_capped_to_most_recent_turns(persona_loader, model_gateway):
    history = [Turn(role="user" if i % 2 == 0 else "model", text=str(i)) for i in range(10)]

    await _orchestrator(persona_loader, model_gateway, MAX_HISTORY_TURNS=4).handle(
        ChatRequest(message="hi", history=history), "user_123"
    )

    forwarded = model_gateway.generate.await_args.args[2]
    assert [t.text for t in forwarded] == ["6", "7", "8", "9"]


def test_history_cap_disabled_with_zero(persona_loader, model_gateway):
    history = [Turn(role="user", text=str(i)) for i in range(100)]
    orchestrator = _orchestrator(persona_loader, model_gateway, MAX_HISTORY_TURNS=0)
    assert orchestrator.trim_history(history) == history
