from __future__ import annotations

from typing import Any

import httpx

from .client import TextGenerationError


def _candidate_text(data: Any) -> str:
    # {"candidates": [{"content": {"parts": [{"text": "..."}]}}]}
    if not isinstance(data, dict):
        return ""
    for candidate in data.get("candidates") or []:
        parts = ((candidate or {}).get("content") or {}).get("parts") or []
        text = "".join(str(p.get("text") or "") for p in parts if isinstance(p, dict))
        if text.strip():
            return text
    return ""


class GeminiTextGenerator:
    """Calls the Gemini `generateContent` REST endpoint."""

    def __init__(self, *, api_key: str, base_url: str, model: str, timeout_seconds: float) -> None:
        self._api_key = api_key.strip()
        self._base_url = base_url.strip().rstrip("/")
        self._model = model.strip()
        self._timeout = timeout_seconds

    def _url(self) -> str:
        return f"{self._base_url}/models/{self._model}:generateContent"

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json", "x-goog-api-key": self._api_key}

    async def generate(self, prompt: str) -> str:
        if not self._api_key:
            raise TextGenerationError("AI_API_KEY is empty")
        body = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(self._url(), headers=self._headers(), json=body)
        except httpx.HTTPError as exc:
            raise TextGenerationError(f"AI request failed: {exc!r}") from exc
        if not 200 <= resp.status_code < 300:
            raise TextGenerationError(f"AI request failed: {resp.status_code} {resp.text[:200]}")
        try:
            data = resp.json()
        except ValueError as exc:
            raise TextGenerationError("AI response was not JSON") from exc
        text = _candidate_text(data)
        if not text.strip():
            raise TextGenerationError("AI response had no text")
        return text
