from typing import Any, Dict, Optional

from huggingface_hub import AsyncInferenceClient

from medlist.core.llm_config import (
    HF_MAX_TOKENS,
    HF_MODEL_VISION,
    HF_PROVIDER,
    HF_TEMPERATURE,
    HF_TIMEOUT_S,
)
from medlist.services.errors import UpstreamError
from medlist.services.image_input import ImagePayload

class HFVisionClient:
    """Hugging Face Inference Providers chat completion with one image + one instruction."""

    name = "hf"

    def __init__(
        self,
        *,
        token: str,
        model: str = HF_MODEL_VISION,
        provider: str = HF_PROVIDER,
        temperature: float = HF_TEMPERATURE,
        max_tokens: int = HF_MAX_TOKENS,
        timeout_s: float = HF_TIMEOUT_S,
        schema: Optional[Dict[str, Any]] = None,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.schema = schema
        self._token = (token or "").strip()
        self._client = None
        if self._token:
            self._client = AsyncInferenceClient(
                provider=provider,
                api_key=self._token,
                timeout=float(timeout_s),
            )

    def _response_format(self) -> Optional[Dict[str, Any]]:
        if not self.schema:
            return None
        return {
            "type": "json_schema",
            "json_schema": {
                "name": "MedicationList",
                "schema": self.schema,
                "strict": True,
            },
        }

    async def complete(self, payload: ImagePayload, prompt: str) -> str:
        if self._client is None:
            raise UpstreamError("HF_TOKEN is missing. Set it in config.env and restart.")

        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "image_url", "image_url": {"url": payload.data_url}},
                    {"type": "text", "text": prompt},
                ],
            }
        ]

        try:
            out = await self._client.chat_completion(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format=self._response_format(),
            )
        except Exception as e:
            # network, auth, rate limit and provider errors all surface the same way
            raise UpstreamError(f"HF {type(e).__name__}: {e}") from e

        content = (out.choices[0].message.content if out.choices else None) or ""
        if not content.strip():
            raise UpstreamError("HF returned an empty reply")
        return content

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
