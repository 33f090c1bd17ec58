"""Reusable Pydantic Annotated types for domain-wide validation.

Every constrained type used across the package is defined here once,
so models can simply annotate their fields::

    from fallback_music_bot.domain.shared.types import DiscordSnowflake, VolumeFloat

    class MyModel(BaseModel):
        guild_id: DiscordSnowflake
        volume: VolumeFloat
"""

from __future__ import annotations

from typing import Annotated, Final

from pydantic import Field

# ── Numeric constraints ─────────────────────────────────────────────

DiscordSnowflake = Annotated[int, Field(gt=0, lt=2**64)]
"""Positive integer that fits a Discord snowflake (1 … 2^64-1)."""

NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0."""

PositiveInt = Annotated[int, Field(gt=0)]
"""Integer > 0."""

NonNegativeFloat = Annotated[float, Field(ge=0.0)]
"""Float >= 0.0."""

PositiveFloat = Annotated[float, Field(gt=0.0)]
"""Float > 0.0."""

MIN_VOLUME: Final[float] = 0.0
MAX_VOLUME: Final[float] = 5.0

VolumeFloat = Annotated[float, Field(ge=MIN_VOLUME, le=MAX_VOLUME)]
"""Audio volume multiplier in [0.0, 5.0]."""

TierIndex = Annotated[int, Field(ge=1)]
"""One-based position of a sourcing tier in the fallback pipeline."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

HttpUrlStr = Annotated[str, Field(pattern=r"^https?://")]
"""String that starts with http:// or https://."""


# ── Pydantic-compatible ID aliases ──────────────────────────────────

GuildIdField = DiscordSnowflake
"""Alias: guild ID, also used as the playback session key."""

UserIdField = DiscordSnowflake
"""Alias: user ID used as a plain Pydantic field."""

ChannelIdField = DiscordSnowflake
"""Alias: channel ID used as a plain Pydantic field."""

MessageIdField = DiscordSnowflake
"""Alias: message ID used as a plain Pydantic field."""
