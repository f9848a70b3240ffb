"""Errors raised by provider adapters and the dispatcher.

Adapters raise one of the ``DispatchError`` subclasses; the dispatcher
catches them per provider and only surfaces ``AllProvidersExhausted``
(or the preferred provider's own error) to callers.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional


class DispatchError(Exception):
    kind = "dispatch_error"

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"kind": self.kind, "provider": self.provider, "message": self.message}
        if self.status_code is not None:
            out["status"] = self.status_code
        return out


class MissingCredential(DispatchError):
    """Provider has no key configured; it is skipped, not failed."""

    kind = "missing_credential"


class TransportError(DispatchError):
    """Network failure, timeout or non-2xx status."""

    kind = "transport_error"


class MalformedResponse(DispatchError):
    """Body was not JSON or the expected text field was missing/empty."""

    kind = "malformed_response"


class ProviderError(DispatchError):
    """Provider answered with an error payload."""

    kind = "provider_error"


class AllProvidersExhausted(DispatchError):
    kind = "all_providers_exhausted"

    def __init__(self, errors: List[DispatchError], message: str = "All providers failed") -> None:
        super().__init__(message, details={"errors": [e.to_dict() for e in errors]})
        self.errors = list(errors)


class UnknownProvider(KeyError):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown provider: {self.name}"
