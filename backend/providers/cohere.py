from __future__ import annotations
from typing import Any, Dict

from .adapter import AdapterSpec, bearer_headers
from .types import PromptRequest, ProviderDescriptor

COHERE_BASE_URL = "https://api.cohere.ai/v1"
COHERE_DEFAULT_MODEL = "command"


def cohere_url(d: ProviderDescriptor) -> str:
    return f"{d.base_url.rstrip('/')}/generate"


def cohere_payload(d: ProviderDescriptor, req: PromptRequest) -> Dict[str, Any]:
    return {
        "model": d.model,
        "prompt": req.prompt,
        "temperature": req.temperature,
        "max_tokens": req.max_tokens,
    }


def cohere_text(data: Dict[str, Any]) -> Any:
    return data.get("generations", [{}])[0].get("text", "")


COHERE_SPEC = AdapterSpec(
    build_url=cohere_url,
    build_headers=bearer_headers,
    build_payload=cohere_payload,
    extract_text=cohere_text,
)
