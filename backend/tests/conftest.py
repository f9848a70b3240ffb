import json
from typing import Any, Dict, List, Optional

import httpx
import pytest

from providers.registry import ProviderRegistry

HOSTS = {
    "api.openai.com": "openai",
    "openrouter.ai": "openrouter",
    "generativelanguage.googleapis.com": "gemini",
    "api.cohere.ai": "cohere",
    "api-inference.huggingface.co": "huggingface",
}

ALL_KEYS = {
    "OPENAI_API_KEY": "sk-openai",
    "OPENROUTER_API_KEY": "sk-or",
    "GEMINI_API_KEY": "g-key",
    "COHERE_API_KEY": "co-key",
    "HUGGINGFACE_API_KEY": "hf-key",
}


def ok_body(provider: str, text: str) -> Any:
    if provider in ("openai", "openrouter"):
        return {"choices": [{"message": {"role": "assistant", "content": text}}], "model": "m"}
    if provider == "gemini":
        return {"candidates": [{"content": {"parts": [{"text": text}]}}]}
    if provider == "cohere":
        return {"generations": [{"text": text}]}
    if provider == "huggingface":
        return [{"generated_text": text}]
    raise KeyError(provider)


class FakeUpstream:
    """Scripted provider endpoints behind an httpx.MockTransport."""

    def __init__(self) -> None:
        self.routes: Dict[str, Dict[str, Any]] = {}
        self.calls: List[tuple[str, httpx.Request]] = []

    def reply(self, provider: str, text: str) -> None:
        self.routes[provider] = {"status": 200, "json": ok_body(provider, text)}

    def fail(self, provider: str, status: int = 500, body: Any = None) -> None:
        self.routes[provider] = {"status": status, "json": body if body is not None else {"error": "boom"}}

    def raw(self, provider: str, status: int, json_body: Any = None, text: Optional[str] = None) -> None:
        self.routes[provider] = {"status": status, "json": json_body, "text": text}

    def raise_(self, provider: str, exc_type: type) -> None:
        self.routes[provider] = {"exc": exc_type}

    def handler(self, request: httpx.Request) -> httpx.Response:
        name = HOSTS[request.url.host]
        self.calls.append((name, request))
        route = self.routes.get(name)
        if route is None:
            return httpx.Response(500, json={"error": f"no route for {name}"})
        if "exc" in route:
            raise route["exc"]("scripted failure", request=request)
        if route.get("text") is not None:
            return httpx.Response(route["status"], text=route["text"])
        return httpx.Response(route["status"], json=route["json"])

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def called(self) -> List[str]:
        return [n for n, _ in self.calls]

    def body(self, index: int = 0) -> Any:
        return json.loads(self.calls[index][1].content)


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def make_registry(upstream):
    def _make(env: Optional[Dict[str, str]] = None) -> ProviderRegistry:
        return ProviderRegistry(ALL_KEYS if env is None else env, transport=upstream.transport, timeout_s=2.0)
    return _make
