from __future__ import annotations
from typing import Any, Dict

from .adapter import AdapterSpec
from .types import PromptRequest, ProviderDescriptor

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
GEMINI_DEFAULT_MODEL = "gemini-1.5-flash"


def gemini_url(d: ProviderDescriptor) -> str:
    return f"{d.base_url.rstrip('/')}/models/{d.model}:generateContent?key={d.api_key}"


def gemini_headers(d: ProviderDescriptor) -> Dict[str, str]:
    # key travels in the query string
    return dict(d.extra_headers)


def gemini_payload(d: ProviderDescriptor, req: PromptRequest) -> Dict[str, Any]:
    return {
        "contents": [{"role": "user", "parts": [{"text": req.prompt}]}],
        "generationConfig": {
            "temperature": req.temperature,
            "maxOutputTokens": req.max_tokens,
        },
    }


def gemini_text(data: Dict[str, Any]) -> Any:
    return (
        data.get("candidates", [{}])[0]
        .get("content", {})
        .get("parts", [{}])[0]
        .get("text", "")
    )


GEMINI_SPEC = AdapterSpec(
    build_url=gemini_url,
    build_headers=gemini_headers,
    build_payload=gemini_payload,
    extract_text=gemini_text,
)
