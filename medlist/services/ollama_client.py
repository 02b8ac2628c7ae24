from typing import Any, Dict, Optional

import httpx

from medlist.core.llm_config import (
    OLLAMA_BASE_URL,
    OLLAMA_MODEL_VISION,
    OLLAMA_TEMPERATURE,
    OLLAMA_TIMEOUT_S,
)
from medlist.services.errors import UpstreamError
from medlist.services.image_input import ImagePayload

class OllamaVisionClient:
    """
    Calls Ollama /api/chat with the image attached to the user message and
    returns the assistant message content as plain text.
    """

    name = "ollama"

    def __init__(
        self,
        *,
        base_url: str = OLLAMA_BASE_URL,
        model: str = OLLAMA_MODEL_VISION,
        temperature: float = OLLAMA_TEMPERATURE,
        timeout_s: float = OLLAMA_TIMEOUT_S,
        schema: Optional[Dict[str, Any]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = f"{base_url.rstrip('/')}/chat"
        self.model = model
        self.temperature = temperature
        self.schema = schema
        self._http = httpx.AsyncClient(timeout=timeout_s, transport=transport)

    async def complete(self, payload: ImagePayload, prompt: str) -> str:
        body: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "user", "content": prompt, "images": [payload.b64]},
            ],
            "stream": False,
            "options": {"temperature": self.temperature},
        }
        # structured JSON output when the model supports it
        if self.schema is not None:
            body["format"] = self.schema

        try:
            r = await self._http.post(self.url, json=body)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Ollama request failed: {e}") from e

        if r.status_code >= 400:
            raise UpstreamError(f"Ollama {r.status_code}: {r.text}")

        try:
            data = r.json()
        except ValueError as e:
            raise UpstreamError(f"Ollama returned a non-JSON body: {r.text[:200]}") from e

        content = (data.get("message") or {}).get("content", "")
        if not content.strip():
            raise UpstreamError("Ollama returned an empty reply")
        return content

    async def aclose(self) -> None:
        await self._http.aclose()
