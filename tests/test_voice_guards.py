"""Tests for the voice guard helpers and connect_to()."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from fallback_music_bot.domain.shared.exceptions import VoiceEnvironmentError
from fallback_music_bot.domain.shared.messages import DiscordUIMessages
from fallback_music_bot.infrastructure.discord.guards.voice_guards import (
    connect_to,
    require_bot_connected,
    require_guild,
    require_member,
    resolve_join_target,
    send_ephemeral,
)


def _make_interaction(
    *,
    in_guild: bool = True,
    user_is_member: bool = True,
    in_voice: bool = True,
    voice_client: MagicMock | None = None,
) -> MagicMock:
    interaction = MagicMock(spec=discord.Interaction)
    interaction.response = MagicMock()
    interaction.response.is_done.return_value = False
    interaction.response.send_message = AsyncMock()
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock()

    if user_is_member:
        user = MagicMock(spec=discord.Member)
        if in_voice:
            user.voice = MagicMock()
            user.voice.channel = MagicMock()
            user.voice.channel.id = 100
        else:
            user.voice = None
    else:
        user = MagicMock(spec=discord.User)
    interaction.user = user

    if in_guild:
        interaction.guild = MagicMock()
        interaction.guild.voice_client = voice_client
    else:
        interaction.guild = None
    return interaction


def _voice_client(*, connected: bool = True, channel_id: int = 100) -> MagicMock:
    vc = MagicMock(spec=discord.VoiceClient)
    vc.is_connected.return_value = connected
    vc.channel = MagicMock()
    vc.channel.id = channel_id
    vc.move_to = AsyncMock()
    vc.disconnect = AsyncMock()
    return vc


def _channel(channel_id: int = 200) -> MagicMock:
    channel = MagicMock(spec=discord.VoiceChannel)
    channel.id = channel_id
    channel.name = "General"
    channel.connect = AsyncMock()
    return channel


# =============================================================================
# send_ephemeral
# =============================================================================


class TestSendEphemeral:
    async def test_fresh_interaction_uses_response(self):
        interaction = _make_interaction()

        await send_ephemeral(interaction, "hi")

        interaction.response.send_message.assert_awaited_once_with("hi", ephemeral=True)
        interaction.followup.send.assert_not_called()

    async def test_responded_interaction_uses_followup(self):
        interaction = _make_interaction()
        interaction.response.is_done.return_value = True

        await send_ephemeral(interaction, "hi")

        interaction.followup.send.assert_awaited_once_with("hi", ephemeral=True)


# =============================================================================
# Guards
# =============================================================================


class TestGuards:
    def test_require_guild_outside_server(self):
        with pytest.raises(VoiceEnvironmentError) as exc_info:
            require_guild(_make_interaction(in_guild=False))

        assert exc_info.value.reason == DiscordUIMessages.STATE_SERVER_ONLY

    def test_require_member_rejects_plain_user(self):
        with pytest.raises(VoiceEnvironmentError) as exc_info:
            require_member(_make_interaction(user_is_member=False))

        assert exc_info.value.reason == DiscordUIMessages.STATE_VERIFY_VOICE_FAILED

    def test_join_target_prefers_explicit_channel(self):
        """Should use the given channel even when the caller is not in voice."""
        channel = _channel()

        assert resolve_join_target(_make_interaction(in_voice=False), channel) is channel

    def test_join_target_falls_back_to_callers_channel(self):
        interaction = _make_interaction()

        assert resolve_join_target(interaction) is interaction.user.voice.channel

    def test_join_target_needs_voice(self):
        with pytest.raises(VoiceEnvironmentError) as exc_info:
            resolve_join_target(_make_interaction(in_voice=False))

        assert exc_info.value.reason == DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE

    def test_bot_connected(self):
        vc = _voice_client()

        assert require_bot_connected(_make_interaction(voice_client=vc)) is vc

    @pytest.mark.parametrize("vc", [None, "disconnected"])
    def test_bot_not_connected(self, vc):
        """Should raise when there is no voice client or it dropped."""
        if vc == "disconnected":
            vc = _voice_client(connected=False)

        with pytest.raises(VoiceEnvironmentError) as exc_info:
            require_bot_connected(_make_interaction(voice_client=vc), "custom")

        assert exc_info.value.reason == "custom"


# =============================================================================
# connect_to
# =============================================================================


class TestConnectTo:
    async def test_connects_when_idle(self):
        guild = MagicMock()
        guild.voice_client = None
        channel = _channel()

        await connect_to(guild, channel)

        channel.connect.assert_awaited_once_with(self_deaf=True)

    async def test_moves_existing_connection(self):
        """Should move rather than reconnect when already in another channel."""
        guild = MagicMock()
        guild.voice_client = _voice_client(channel_id=100)
        channel = _channel(200)

        await connect_to(guild, channel)

        guild.voice_client.move_to.assert_awaited_once_with(channel)
        channel.connect.assert_not_called()

    async def test_already_in_channel(self):
        guild = MagicMock()
        guild.voice_client = _voice_client(channel_id=200)
        channel = _channel(200)

        await connect_to(guild, channel)

        guild.voice_client.move_to.assert_not_called()
        channel.connect.assert_not_called()

    async def test_stale_client_is_dropped(self):
        guild = MagicMock()
        guild.voice_client = _voice_client(connected=False)
        channel = _channel()

        await connect_to(guild, channel)

        guild.voice_client.disconnect.assert_awaited_once_with(force=True)
        channel.connect.assert_awaited_once()

    @pytest.mark.parametrize(
        "error",
        [
            TimeoutError(),
            discord.Forbidden(MagicMock(status=403, reason="Forbidden"), "Missing Permissions"),
            discord.ClientException("Already connecting"),
        ],
    )
    async def test_failures_raise_environment_error(self, error):
        guild = MagicMock()
        guild.voice_client = None
        channel = _channel()
        channel.connect.side_effect = error

        with pytest.raises(VoiceEnvironmentError) as exc_info:
            await connect_to(guild, channel)

        assert exc_info.value.reason == DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE
