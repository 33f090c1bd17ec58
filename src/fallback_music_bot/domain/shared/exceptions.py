"""Base exception classes for domain-level errors."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..music.value_objects import SourcingAttempt


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class ConfigurationMissingError(DomainError):
    """Raised when an optional feature has no credentials or command configured."""

    def __init__(self, feature: str, message: str | None = None) -> None:
        msg = message or f"{feature} is not configured"
        super().__init__(msg, code="CONFIGURATION_MISSING")
        self.feature = feature


class StreamingServiceError(DomainError):
    """Raised when a streaming-service token exchange, lookup, or search fails."""

    def __init__(self, operation: str, message: str | None = None) -> None:
        msg = message or f"Streaming service {operation} failed"
        super().__init__(msg, code="RESOLUTION_FAILURE")
        self.operation = operation


class SourcingTierError(DomainError):
    """Raised by a sourcing tier that could not produce a playable stream."""

    def __init__(
        self,
        strategy: str,
        diagnostic: str,
        *,
        candidates: list[SourcingAttempt] | None = None,
    ) -> None:
        super().__init__(f"{strategy}: {diagnostic}", code="SOURCING_TIER_FAILURE")
        self.strategy = strategy
        self.diagnostic = diagnostic
        self.candidates = list(candidates or [])


class AllTiersExhaustedError(DomainError):
    """Raised when every sourcing tier failed for a request."""

    def __init__(self, query: str, attempts: list[SourcingAttempt]) -> None:
        super().__init__(
            f"No sourcing tier could play '{query}' ({len(attempts)} failed attempts)",
            code="ALL_TIERS_EXHAUSTED",
        )
        self.query = query
        self.attempts = list(attempts)


class AuthorizationDeniedError(DomainError):
    """Raised when a control action comes from someone other than the panel owner."""

    def __init__(self, issuer_id: int, owner_id: int) -> None:
        super().__init__(
            f"User {issuer_id} is not the owner ({owner_id}) of this control panel",
            code="AUTHORIZATION_DENIED",
        )
        self.issuer_id = issuer_id
        self.owner_id = owner_id


class VoiceEnvironmentError(DomainError):
    """Raised when a request arrives outside a usable voice context."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason, code="ENVIRONMENT_ERROR")
        self.reason = reason
