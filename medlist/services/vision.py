import os
from typing import Protocol

from medlist.core.llm_config import LLM_PROVIDER, USE_STRUCTURED_OUTPUT
from medlist.services.hf_client import HFVisionClient
from medlist.services.image_input import ImagePayload
from medlist.services.llm.extraction_schema import MEDICATION_LIST_SCHEMA
from medlist.services.ollama_client import OllamaVisionClient


class VisionClient(Protocol):
    name: str

    async def complete(self, payload: ImagePayload, prompt: str) -> str: ...

    async def aclose(self) -> None: ...


def build_vision_client(provider: str | None = None) -> VisionClient:
    """Build the process-wide vision client from environment configuration."""
    provider = (provider or LLM_PROVIDER).strip().lower()
    schema = MEDICATION_LIST_SCHEMA if USE_STRUCTURED_OUTPUT else None

    if provider == "hf":
        return HFVisionClient(token=os.getenv("HF_TOKEN", ""), schema=schema)
    if provider == "ollama":
        return OllamaVisionClient(schema=schema)
    raise ValueError(f"Unknown LLM_PROVIDER {provider!r} (expected 'hf' or 'ollama')")
