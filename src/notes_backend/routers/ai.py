"""AI writing aids. Stateless: the client sends the text, nothing is stored."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from notes_backend.deps import current_user_id
from notes_backend.integrations.ai.client import TextGenerator, get_text_generator
from notes_backend.schemas import (
    AIContentRequest,
    AITagsRequest,
    GeneratedTitle,
    ImprovedText,
    NoteSummary,
    SuggestedTags,
)
from notes_backend.services import ai_service

router = APIRouter(tags=["ai"], dependencies=[Depends(current_user_id)])


@router.post("/ai/generate-title", response_model=GeneratedTitle)
async def generate_title(
    body: AIContentRequest,
    generator: TextGenerator = Depends(get_text_generator),
) -> GeneratedTitle:
    title = await ai_service.generate_title(generator=generator, content=body.content)
    return GeneratedTitle(title=title)


@router.post("/ai/summarize", response_model=NoteSummary)
async def summarize(
    body: AIContentRequest,
    generator: TextGenerator = Depends(get_text_generator),
) -> NoteSummary:
    return NoteSummary(summary=await ai_service.summarize(generator=generator, content=body.content))


@router.post("/ai/suggest-tags", response_model=SuggestedTags)
async def suggest_tags(
    body: AITagsRequest,
    generator: TextGenerator = Depends(get_text_generator),
) -> SuggestedTags:
    tags = await ai_service.suggest_tags(generator=generator, content=body.content, title=body.title)
    return SuggestedTags(tags=tags)


@router.post("/ai/improve", response_model=ImprovedText)
async def improve_writing(
    body: AIContentRequest,
    generator: TextGenerator = Depends(get_text_generator),
) -> ImprovedText:
    improved = await ai_service.improve_writing(generator=generator, content=body.content)
    return ImprovedText(improved=improved)
