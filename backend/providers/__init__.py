"""Text-generation provider adapters and the registry that wires them from the environment."""
from .errors import (
    AllProvidersExhausted,
    DispatchError,
    MalformedResponse,
    MissingCredential,
    ProviderError,
    TransportError,
    UnknownProvider,
)
from .registry import DEFAULT_PRIORITY, ProviderRegistry
from .types import DispatchResult, PromptRequest, ProviderDescriptor, ProviderReply

__all__ = [
    "AllProvidersExhausted",
    "DEFAULT_PRIORITY",
    "DispatchError",
    "DispatchResult",
    "MalformedResponse",
    "MissingCredential",
    "PromptRequest",
    "ProviderDescriptor",
    "ProviderError",
    "ProviderRegistry",
    "ProviderReply",
    "TransportError",
    "UnknownProvider",
]
