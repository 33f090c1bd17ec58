"""
Shared Domain Kernel

Contains constrained types, message catalogues and the exception hierarchy
shared by every layer.
"""

from fallback_music_bot.domain.shared.exceptions import (
    AllTiersExhaustedError,
    AuthorizationDeniedError,
    ConfigurationMissingError,
    DomainError,
    SourcingTierError,
    StreamingServiceError,
    VoiceEnvironmentError,
)

__all__ = [
    "AllTiersExhaustedError",
    "AuthorizationDeniedError",
    "ConfigurationMissingError",
    "DomainError",
    "SourcingTierError",
    "StreamingServiceError",
    "VoiceEnvironmentError",
]
