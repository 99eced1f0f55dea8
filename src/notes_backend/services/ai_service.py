"""AI writing aids: title, summary, tag suggestions and rewrite.

Inputs are stripped of HTML markup and truncated before they reach the model.
Provider failures surface as UnavailableError (retryable); nothing is stored.
"""

from __future__ import annotations

import logging
import re
from typing import Final

from notes_backend.domain.sharing import MAX_TAG_LENGTH
from notes_backend.errors import InvalidArgumentError, UnavailableError
from notes_backend.integrations.ai.client import TextGenerationError, TextGenerator

logger = logging.getLogger(__name__)

MIN_TITLE_SOURCE_CHARS: Final = 10
MIN_SUMMARY_SOURCE_CHARS: Final = 50
MIN_IMPROVE_SOURCE_CHARS: Final = 20
MAX_SUGGESTED_TAGS: Final = 5

_MARKUP_RE = re.compile(r"<[^>]*>")
_EDGE_QUOTES_RE = re.compile(r"^[\"']|[\"']$")


def plain_text(content: str, *, limit: int) -> str:
    return _MARKUP_RE.sub("", content or "")[:limit]


def _require_length(content: str, *, minimum: int, message: str) -> None:
    if len((content or "").strip()) < minimum:
        raise InvalidArgumentError(message, details={"min_length": minimum})


def _require_text(text: str) -> str:
    if not text.strip():
        raise InvalidArgumentError("content is empty once markup is removed")
    return text


async def _generate(generator: TextGenerator, prompt: str, *, op: str) -> str:
    try:
        text = await generator.generate(prompt)
    except TextGenerationError as exc:
        logger.warning("ai %s failed: %s", op, exc)
        raise UnavailableError(f"failed to {op}; please try again", details={"op": op}) from exc
    return text.strip()


def parse_tag_list(text: str) -> list[str]:
    """Comma-separated model output -> at most five distinct usable tags."""
    out: list[str] = []
    seen: set[str] = set()
    for raw in text.split(","):
        tag = raw.strip()
        key = tag.lower()
        if not tag or len(tag) > MAX_TAG_LENGTH or key in seen:
            continue
        seen.add(key)
        out.append(tag)
        if len(out) == MAX_SUGGESTED_TAGS:
            break
    return out


async def generate_title(*, generator: TextGenerator, content: str) -> str:
    _require_length(
        content,
        minimum=MIN_TITLE_SOURCE_CHARS,
        message=f"content must be at least {MIN_TITLE_SOURCE_CHARS} characters",
    )
    text = _require_text(plain_text(content, limit=500))
    prompt = (
        "Generate a concise, descriptive title (maximum 10 words) for the following note "
        f'content. Return ONLY the title, nothing else:\n\n"{text}"'
    )
    title = await _generate(generator, prompt, op="generate title")
    return _EDGE_QUOTES_RE.sub("", title)


async def summarize(*, generator: TextGenerator, content: str) -> str:
    _require_length(
        content,
        minimum=MIN_SUMMARY_SOURCE_CHARS,
        message=f"content must be at least {MIN_SUMMARY_SOURCE_CHARS} characters to summarize",
    )
    text = _require_text(plain_text(content, limit=2000))
    prompt = (
        "Summarize the following note in 3-5 concise bullet points. "
        f'Preserve key information:\n\n"{text}"\n\nSummary:'
    )
    return await _generate(generator, prompt, op="summarize")


async def suggest_tags(*, generator: TextGenerator, content: str, title: str) -> list[str]:
    if not (content or "").strip() and not (title or "").strip():
        raise InvalidArgumentError("provide either content or title")
    text = plain_text(content, limit=1000)
    prompt = (
        "Based on the following note, suggest 3-5 relevant tags (single words or short "
        "phrases). Return ONLY a comma-separated list of tags:\n\n"
        f'Title: "{(title or "").strip() or "Untitled"}"\nContent: "{text}"\n\nTags:'
    )
    return parse_tag_list(await _generate(generator, prompt, op="suggest tags"))


async def improve_writing(*, generator: TextGenerator, content: str) -> str:
    _require_length(
        content,
        minimum=MIN_IMPROVE_SOURCE_CHARS,
        message=f"content must be at least {MIN_IMPROVE_SOURCE_CHARS} characters",
    )
    text = _require_text(plain_text(content, limit=1500))
    prompt = (
        "Improve the grammar, clarity, and readability of the following text while "
        f'preserving its original meaning. Return ONLY the improved text:\n\n"{text}"'
    )
    return await _generate(generator, prompt, op="improve writing")
