from __future__ import annotations

from pydantic import BaseModel, Field


class AIContentRequest(BaseModel):
    content: str = Field(default="", max_length=50_000)


class AITagsRequest(BaseModel):
    content: str = Field(default="", max_length=50_000)
    title: str = Field(default="", max_length=200)


class GeneratedTitle(BaseModel):
    title: str


class NoteSummary(BaseModel):
    summary: str


class SuggestedTags(BaseModel):
    tags: list[str] = Field(default_factory=list)


class ImprovedText(BaseModel):
    improved: str
