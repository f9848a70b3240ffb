from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

DEFAULT_CREATIVITY = 70
AUTO = "auto"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ProviderDescriptor:
    name: str
    base_url: str
    api_key: Optional[str]
    model: str
    extra_headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)


@dataclass
class PromptRequest:
    prompt: str  # final text sent to the provider
    raw_prompt: str = ""
    creativity: int = DEFAULT_CREATIVITY
    max_tokens: int = 800
    api_preference: Optional[str] = None
    tool: Optional[str] = None
    template: Optional[str] = None
    tone: Optional[str] = None
    length: Optional[str] = None
    business_type: Optional[str] = None

    @property
    def temperature(self) -> float:
        return min(1.0, max(0.0, self.creativity / 100.0))

    @property
    def preferred_provider(self) -> Optional[str]:
        pref = (self.api_preference or "").strip().lower()
        if not pref or pref == AUTO:
            return None
        return pref


@dataclass
class ProviderReply:
    provider: str
    text: str
    latency_ms: int
    provider_meta: Dict[str, Any] = field(default_factory=dict)


@dataclass
class DispatchResult:
    ok: bool
    reply: Optional[str] = None
    provider: Optional[str] = None
    elapsed_ms: int = 0
    attempts: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[Exception] = None
    created_at: str = field(default_factory=_now_iso)

    @property
    def attempted(self) -> List[str]:
        return [a["provider"] for a in self.attempts]
