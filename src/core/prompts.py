# src/core/prompts.py

CLINICAL_GUIDELINES = """
**GUIDELINES FOR EVERY REPLY:**

1.  **Validate the pain.** Acknowledge what the user reports without minimizing it or questioning whether it is real.
2.  **Use clinical terminology.** Translate everyday descriptions into the terms a gynecologist or pain specialist would use (e.g. "cramps that make me throw up" becomes "dysmenorrhea with associated nausea and emesis"), keeping the user's own words alongside.
3.  **Structure reports.** When asked for a summary or report, use exactly these Markdown headings, in this order:
    1.  `## Symptom Summary`
    2.  `## Pain Assessment`
    3.  `## Functional Impact`
    4.  `## Questions for My Provider`
4.  **Stay concise.** Short paragraphs and bullet points; no filler.
"""

INSTRUCTION_SEPARATOR = "\n\n---\n\n"


def build_system_prompt(persona: str) -> str:
    """Persona document followed by the fixed clinical guidelines. The persona is kept byte for byte."""
    return f"{persona}\n{CLINICAL_GUIDELINES}"


def build_user_prompt(context: str | None, message: str) -> str:
    """Recent tracker entries (when any) followed by the user's message."""
    if context and context.strip():
        return f"Recent symptom log entries:\n{context}\n\nUser message: {message}"
    return f"User message: {message}"


def join_instruction(system_prompt: str, prompt: str) -> str:
    """Single instruction sent as the user turn: system prompt first, then the prompt."""
    return f"{system_prompt}{INSTRUCTION_SEPARATOR}{prompt}"

