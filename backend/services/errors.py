"""Error taxonomy for the discovery pipeline.

Provider-level failures are recovered inside the stage that fans out to
the provider; only ConfigurationError and NoResultsError are expected to
reach the request handler.
"""


class DiscoveryError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(DiscoveryError):
    """A required provider credential is missing, leaving no usable provider."""


class ProviderError(DiscoveryError):
    """A single provider call failed (timeout, non-2xx, malformed payload)."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class NoResultsError(DiscoveryError):
    """Every cascading search level returned zero candidates."""


class DegradedModeWarning(UserWarning):
    """Embedding similarity unavailable; keyword similarity is used instead."""
