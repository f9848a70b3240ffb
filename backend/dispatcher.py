from __future__ import annotations
import logging
import time
from typing import Any, Dict, List

try:
    from .providers.errors import AllProvidersExhausted, DispatchError, MissingCredential
    from .providers.registry import ProviderRegistry
    from .providers.types import DispatchResult, PromptRequest
except ImportError:
    from providers.errors import AllProvidersExhausted, DispatchError, MissingCredential
    from providers.registry import ProviderRegistry
    from providers.types import DispatchResult, PromptRequest

log = logging.getLogger(__name__)

PROBE_PROMPT = "Reply with the single word OK."


class Dispatcher:
    """Sends a prompt to providers one at a time until one answers.

    An explicit, configured preference is tried alone and its failure is
    returned as-is. Otherwise providers are tried in the registry's
    priority order; unconfigured ones are skipped without counting as an
    attempt, and the first non-empty reply wins.
    """

    def __init__(self, registry: ProviderRegistry) -> None:
        self.registry = registry

    def candidates(self, req: PromptRequest) -> tuple[list[str], bool]:
        """Return (providers to try, whether the list is an explicit preference)."""
        pref = req.preferred_provider
        if pref is not None:
            if self.registry.is_enabled(pref):
                return [pref], True
            reason = "not configured" if pref in self.registry else "unknown"
            log.warning("api preference %s is %s; using priority order", pref, reason)
        return self.registry.enabled_providers(), False

    async def dispatch(self, req: PromptRequest) -> DispatchResult:
        t0 = time.perf_counter()
        names, explicit = self.candidates(req)
        attempts: List[Dict[str, Any]] = []
        errors: List[DispatchError] = []

        for name in names:
            adapter = self.registry.get(name)
            descriptor = self.registry.descriptor(name)
            t_call = time.perf_counter()
            try:
                reply = await adapter.generate(descriptor, req)
            except MissingCredential:
                continue
            except DispatchError as e:
                latency_ms = int((time.perf_counter() - t_call) * 1000)
                attempts.append({"provider": name, "ok": False, "error": e.message, "latency_ms": latency_ms})
                errors.append(e)
                log.warning(
                    "provider %s failed: %s", name, e.message,
                    extra={"payload": {"provider": name, "kind": e.kind, "status": e.status_code}},
                )
                if explicit:
                    return DispatchResult(
                        ok=False,
                        elapsed_ms=int((time.perf_counter() - t0) * 1000),
                        attempts=attempts,
                        error=e,
                    )
                continue
            attempts.append({"provider": name, "ok": True, "error": None, "latency_ms": reply.latency_ms})
            elapsed_ms = int((time.perf_counter() - t0) * 1000)
            log.info("dispatch ok via %s in %dms", name, elapsed_ms)
            return DispatchResult(
                ok=True,
                reply=reply.text,
                provider=name,
                elapsed_ms=elapsed_ms,
                attempts=attempts,
            )

        message = "All providers failed" if errors else "No provider is configured"
        log.error("dispatch exhausted: %s", message, extra={"payload": {"attempted": [a["provider"] for a in attempts]}})
        return DispatchResult(
            ok=False,
            elapsed_ms=int((time.perf_counter() - t0) * 1000),
            attempts=attempts,
            error=AllProvidersExhausted(errors, message=message),
        )

    async def probe(self, name: str, prompt: str = PROBE_PROMPT) -> DispatchResult:
        """Single-provider dispatch used by key checks; raises UnknownProvider for bad names."""
        d = self.registry.descriptor(name)
        if not d.enabled:
            return DispatchResult(ok=False, error=MissingCredential(f"{name} disabled: missing API key", provider=name))
        req = PromptRequest(prompt=prompt, raw_prompt=prompt, creativity=0, max_tokens=16, api_preference=name)
        return await self.dispatch(req)
