from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx

from .adapter import DEFAULT_TIMEOUT_S, AdapterSpec, HttpAdapter
from .cohere import COHERE_BASE_URL, COHERE_DEFAULT_MODEL, COHERE_SPEC
from .errors import UnknownProvider
from .gemini import GEMINI_BASE_URL, GEMINI_DEFAULT_MODEL, GEMINI_SPEC
from .huggingface import HUGGINGFACE_BASE_URL, HUGGINGFACE_DEFAULT_MODEL, HUGGINGFACE_SPEC
from .openai import (
    OPENAI_BASE_URL,
    OPENAI_DEFAULT_MODEL,
    OPENAI_SPEC,
    OPENROUTER_BASE_URL,
    OPENROUTER_DEFAULT_MODEL,
)
from .types import ProviderDescriptor

log = logging.getLogger(__name__)

DEFAULT_PRIORITY = ("openai", "openrouter", "gemini", "cohere", "huggingface")


@dataclass(frozen=True)
class _ProviderDef:
    spec: AdapterSpec
    base_url: str
    model: str
    key_vars: Tuple[str, ...]  # first non-empty wins


PROVIDER_DEFS: Dict[str, _ProviderDef] = {
    "openai": _ProviderDef(OPENAI_SPEC, OPENAI_BASE_URL, OPENAI_DEFAULT_MODEL, ("OPENAI_API_KEY", "OPENAI_KEY")),
    "openrouter": _ProviderDef(OPENAI_SPEC, OPENROUTER_BASE_URL, OPENROUTER_DEFAULT_MODEL, ("OPENROUTER_API_KEY", "OPENROUTER_KEY")),
    "gemini": _ProviderDef(GEMINI_SPEC, GEMINI_BASE_URL, GEMINI_DEFAULT_MODEL, ("GEMINI_API_KEY", "GOOGLE_API_KEY")),
    "cohere": _ProviderDef(COHERE_SPEC, COHERE_BASE_URL, COHERE_DEFAULT_MODEL, ("COHERE_API_KEY", "COHERE_KEY")),
    "huggingface": _ProviderDef(HUGGINGFACE_SPEC, HUGGINGFACE_BASE_URL, HUGGINGFACE_DEFAULT_MODEL, ("HUGGINGFACE_API_KEY", "HF_TOKEN")),
}


def parse_priority(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw or not raw.strip():
        return DEFAULT_PRIORITY
    out: List[str] = []
    for part in raw.split(","):
        name = part.strip().lower()
        if not name:
            continue
        if name not in PROVIDER_DEFS:
            log.warning("ignoring unknown provider in PROVIDER_PRIORITY: %s", name)
            continue
        if name not in out:
            out.append(name)
    return tuple(out) or DEFAULT_PRIORITY


class ProviderRegistry:
    """Read-only set of provider descriptors and adapters, built once from the environment."""

    def __init__(
        self,
        env: Optional[Mapping[str, str]] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout_s: Optional[float] = None,
    ) -> None:
        env = os.environ if env is None else env
        if timeout_s is None:
            timeout_s = float(env.get("PROVIDER_TIMEOUT_S") or DEFAULT_TIMEOUT_S)
        self.timeout_s = timeout_s
        self._priority = parse_priority(env.get("PROVIDER_PRIORITY"))
        descriptors: Dict[str, ProviderDescriptor] = {}
        adapters: Dict[str, HttpAdapter] = {}
        for name, pd in PROVIDER_DEFS.items():
            prefix = name.upper()
            api_key = next((env.get(k) for k in pd.key_vars if env.get(k)), None)
            extra: Dict[str, str] = {}
            if name == "openrouter":
                extra = {
                    "HTTP-Referer": env.get("OPENROUTER_REFERER") or "http://localhost",
                    "X-Title": env.get("OPENROUTER_TITLE") or "AI Business Promoter",
                }
            descriptors[name] = ProviderDescriptor(
                name=name,
                base_url=env.get(f"{prefix}_BASE_URL") or pd.base_url,
                api_key=api_key,
                model=env.get(f"{prefix}_MODEL") or pd.model,
                extra_headers=MappingProxyType(extra),
            )
            adapters[name] = HttpAdapter(pd.spec, timeout_s=timeout_s, transport=transport)
        self._descriptors = MappingProxyType(descriptors)
        self._adapters = MappingProxyType(adapters)

    @property
    def priority(self) -> Tuple[str, ...]:
        return self._priority

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self._descriptors)

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def get(self, provider: str) -> HttpAdapter:
        try:
            return self._adapters[provider]
        except KeyError:
            raise UnknownProvider(provider) from None

    def descriptor(self, provider: str) -> ProviderDescriptor:
        try:
            return self._descriptors[provider]
        except KeyError:
            raise UnknownProvider(provider) from None

    def is_enabled(self, provider: str) -> bool:
        d = self._descriptors.get(provider)
        return bool(d and d.enabled)

    def enabled_providers(self) -> List[str]:
        return [n for n in self._priority if self.is_enabled(n)]

    def status(self) -> List[Dict[str, Any]]:
        # never expose keys
        out: List[Dict[str, Any]] = []
        ordered = list(self._priority) + [n for n in self._descriptors if n not in self._priority]
        for name in ordered:
            d = self._descriptors[name]
            out.append({
                "name": name,
                "configured": d.enabled,
                "model": d.model,
                "priority": self._priority.index(name) + 1 if name in self._priority else None,
            })
        return out
