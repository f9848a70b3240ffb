from __future__ import annotations
from typing import Any, Dict

from .adapter import AdapterSpec, bearer_headers
from .types import PromptRequest, ProviderDescriptor

OPENAI_BASE_URL = "https://api.openai.com/v1"
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
OPENAI_DEFAULT_MODEL = "gpt-3.5-turbo"
OPENROUTER_DEFAULT_MODEL = "openai/gpt-3.5-turbo"


def chat_completions_url(d: ProviderDescriptor) -> str:
    return f"{d.base_url.rstrip('/')}/chat/completions"


def chat_payload(d: ProviderDescriptor, req: PromptRequest) -> Dict[str, Any]:
    return {
        "model": d.model,
        "messages": [{"role": "user", "content": req.prompt}],
        "temperature": req.temperature,
        "max_tokens": req.max_tokens,
    }


def chat_text(data: Dict[str, Any]) -> Any:
    return (
        (data.get("choices", [{}])[0] or {})
        .get("message", {})
        .get("content", "")
    )


# OpenRouter speaks the same protocol; its attribution headers travel in
# the descriptor's extra_headers.
OPENAI_SPEC = AdapterSpec(
    build_url=chat_completions_url,
    build_headers=bearer_headers,
    build_payload=chat_payload,
    extract_text=chat_text,
)
