# src/models/chat_models.py

from pydantic import BaseModel, Field, model_validator
from typing import Any, List, Literal, Optional


class Turn(BaseModel):
    """One message in the conversation history."""
    role: Literal["user", "model"]
    text: str

    @model_validator(mode="before")
    @classmethod
    def accept_gemini_parts(cls, data: Any) -> Any:
        # The browser client stores history as {role, parts: [{text}]}.
        if isinstance(data, dict) and "text" not in data and "parts" in data:
            parts = data.get("parts")
            if not isinstance(parts, list):
                raise ValueError("parts must be a list of {text} objects")
            texts = []
            for part in parts:
                if not isinstance(part, dict) or not isinstance(part.get("text"), str):
                    raise ValueError("each part must carry a text string")
                texts.append(part["text"])
            return {"role": data.get("role"), "text": "".join(texts)}
        return data


class ChatRequest(BaseModel):
    """Body of POST /api/chat."""
    message: str
    history: List[Turn] = []
    context: Optional[str] = Field("", description="Free-text summary of recent tracker entries.")


class ChatResponse(BaseModel):
    response: str


class ErrorResponse(BaseModel):
    error: str


class ClerkKeyResponse(BaseModel):
    key: str


class EmbedUrlResponse(BaseModel):
    url: str
