from __future__ import annotations

from typing import Protocol

from notes_backend.config import settings


class TextGenerationError(RuntimeError):
    pass


class TextGenerator(Protocol):
    """Turns one prompt into plain text. Raises TextGenerationError on failure."""

    async def generate(self, prompt: str) -> str: ...


def get_text_generator() -> TextGenerator:
    from .gemini import GeminiTextGenerator

    return GeminiTextGenerator(
        api_key=settings.ai_api_key,
        base_url=settings.ai_base_url,
        model=settings.ai_model,
        timeout_seconds=settings.ai_timeout_seconds,
    )
