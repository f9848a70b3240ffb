from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import httpx

from .errors import MalformedResponse, MissingCredential, ProviderError, TransportError
from .types import PromptRequest, ProviderDescriptor, ProviderReply

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 15.0


@dataclass(frozen=True)
class AdapterSpec:
    """Per-provider request/response shape plugged into ``HttpAdapter``."""

    build_url: Callable[[ProviderDescriptor], str]
    build_headers: Callable[[ProviderDescriptor], Dict[str, str]]
    build_payload: Callable[[ProviderDescriptor, PromptRequest], Any]
    extract_text: Callable[[Any], Any]


def bearer_headers(d: ProviderDescriptor) -> Dict[str, str]:
    return {"Authorization": f"Bearer {d.api_key}", **dict(d.extra_headers)}


def error_message(data: Any) -> Optional[str]:
    """Return the provider-reported error text from a JSON body, if any."""
    if not isinstance(data, dict):
        return None
    err = data.get("error")
    if not err:
        return None
    if isinstance(err, dict):
        return str(err.get("message") or err.get("status") or err)
    return str(err)


class HttpAdapter:
    def __init__(
        self,
        spec: AdapterSpec,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.spec = spec
        self.timeout_s = timeout_s
        self.transport = transport

    async def generate(self, d: ProviderDescriptor, req: PromptRequest) -> ProviderReply:
        if not d.enabled:
            raise MissingCredential(f"{d.name} disabled: missing API key", provider=d.name)
        t0 = time.perf_counter()
        url = self.spec.build_url(d)
        headers = {"Content-Type": "application/json", **self.spec.build_headers(d)}
        payload = self.spec.build_payload(d, req)
        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self.transport) as client:
            try:
                r = await client.post(url, json=payload, headers=headers)
            except httpx.TimeoutException as e:
                raise TransportError(
                    f"{d.name} timed out after {self.timeout_s}s", provider=d.name
                ) from e
            except httpx.HTTPError as e:
                raise TransportError(
                    f"{d.name} request failed: {e}", provider=d.name, details={"err": str(e)}
                ) from e
        latency_ms = int((time.perf_counter() - t0) * 1000)

        if not 200 <= r.status_code < 300:
            try:
                reported = error_message(r.json())
            except ValueError:
                reported = None
            raise TransportError(
                f"{d.name} returned HTTP {r.status_code}" + (f": {reported}" if reported else ""),
                provider=d.name,
                status_code=r.status_code,
                details={"text_head": r.text[:500]},
            )

        try:
            data = r.json()
        except ValueError as e:
            raise MalformedResponse(
                f"{d.name} returned invalid JSON",
                provider=d.name,
                status_code=r.status_code,
                details={"text_head": r.text[:500]},
            ) from e

        reported = error_message(data)
        if reported:
            raise ProviderError(reported, provider=d.name, status_code=r.status_code)

        try:
            text = self.spec.extract_text(data)
        except (LookupError, TypeError, AttributeError) as e:
            raise MalformedResponse(
                f"{d.name} response missing text field",
                provider=d.name,
                details={"data_head": str(data)[:500]},
            ) from e
        if not isinstance(text, str) or not text.strip():
            raise MalformedResponse(f"{d.name} returned empty text", provider=d.name)

        log.debug("provider_reply", extra={"payload": {"provider": d.name, "latency_ms": latency_ms}})
        meta = {"model": data.get("model") if isinstance(data, dict) else None, "status": r.status_code}
        return ProviderReply(provider=d.name, text=text.strip(), latency_ms=latency_ms, provider_meta=meta)
