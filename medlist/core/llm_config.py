import os

from medlist.core.env import load_env

load_env()

LLM_PROVIDER = os.getenv("LLM_PROVIDER", "hf").strip().lower() or "hf"

HF_PROVIDER = os.getenv("HF_PROVIDER", "auto").strip() or "auto"
HF_MODEL_VISION = os.getenv("HF_MODEL_VISION", "Qwen/Qwen2.5-VL-7B-Instruct")
HF_TEMPERATURE = float(os.getenv("HF_TEMPERATURE", "0.0"))
HF_MAX_TOKENS = int(os.getenv("HF_MAX_TOKENS", "4096"))
HF_TIMEOUT_S = int(os.getenv("HF_TIMEOUT_S", "120"))

OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434/api")
OLLAMA_MODEL_VISION = os.getenv("OLLAMA_MODEL_VISION", "llama3.2-vision")
OLLAMA_TEMPERATURE = float(os.getenv("OLLAMA_TEMPERATURE", "0.0"))
OLLAMA_TIMEOUT_S = int(os.getenv("OLLAMA_TIMEOUT_S", "120"))

# ask the provider to constrain output to the medication list schema
USE_STRUCTURED_OUTPUT = os.getenv("USE_STRUCTURED_OUTPUT", "false").lower() == "true"
