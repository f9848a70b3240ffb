from __future__ import annotations
from typing import Any, Dict

from .adapter import AdapterSpec, bearer_headers
from .types import PromptRequest, ProviderDescriptor

HUGGINGFACE_BASE_URL = "https://api-inference.huggingface.co"
HUGGINGFACE_DEFAULT_MODEL = "mistralai/Mistral-7B-Instruct-v0.2"


def hf_url(d: ProviderDescriptor) -> str:
    return f"{d.base_url.rstrip('/')}/models/{d.model}"


def hf_payload(d: ProviderDescriptor, req: PromptRequest) -> Dict[str, Any]:
    return {
        "inputs": req.prompt,
        "parameters": {
            # inference API rejects a temperature of exactly 0
            "temperature": max(0.01, req.temperature),
            "max_new_tokens": req.max_tokens,
            "return_full_text": False,
        },
    }


def hf_text(data: Any) -> Any:
    # text-generation models answer with a list of generations
    return data[0].get("generated_text", "")


HUGGINGFACE_SPEC = AdapterSpec(
    build_url=hf_url,
    build_headers=bearer_headers,
    build_payload=hf_payload,
    extract_text=hf_text,
)
