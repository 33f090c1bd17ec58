"""
Unit Tests for Bot Lifecycle

Tests for src/fallback_music_bot/infrastructure/discord/bot.py:
- Initialization: intents, help command, container wiring
- setup_hook: container init, cog loading, error handler, optional sync
- _sync_commands: per-guild copy and global sync
- _on_app_command_error: environment errors vs unexpected errors
- close: container shutdown and voice disconnects
- on_interaction: panel buttons left without a live view
"""

from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import discord
import pytest

from fallback_music_bot.application.services.playback_models import ControlOutcome
from fallback_music_bot.domain.music.value_objects import PanelAction
from fallback_music_bot.domain.shared.exceptions import (
    AuthorizationDeniedError,
    VoiceEnvironmentError,
)
from fallback_music_bot.domain.shared.messages import DiscordUIMessages
from fallback_music_bot.infrastructure.discord.bot import COGS, MusicBot, create_bot
from fallback_music_bot.infrastructure.discord.views import make_custom_id


@pytest.fixture
def mock_settings():
    settings = MagicMock()
    settings.discord.sync_on_startup = False
    settings.discord.guild_ids = []
    return settings


@pytest.fixture
def mock_container():
    container = MagicMock()
    container.initialize = AsyncMock()
    container.shutdown = AsyncMock()
    container.set_bot = MagicMock()
    return container


@pytest.fixture
def bot(mock_container, mock_settings):
    return MusicBot(container=mock_container, settings=mock_settings)


def make_interaction(*, responded: bool = False) -> MagicMock:
    interaction = MagicMock()
    interaction.response.is_done.return_value = responded
    interaction.response.send_message = AsyncMock()
    interaction.followup.send = AsyncMock()
    interaction.command.name = "play"
    return interaction


# =============================================================================
# Initialization
# =============================================================================


class TestBotInitialization:
    async def test_intents(self, bot):
        """Should enable only what voice playback needs."""
        assert bot.intents.voice_states is True
        assert bot.intents.guilds is True
        assert bot.intents.message_content is False

    async def test_disables_default_help(self, bot):
        assert bot.help_command is None

    async def test_wires_container(self, bot, mock_container, mock_settings):
        assert bot.container is mock_container
        assert bot.settings is mock_settings
        mock_container.set_bot.assert_called_once_with(bot)

    async def test_create_bot(self, mock_container, mock_settings):
        bot = create_bot(mock_container, mock_settings)

        assert isinstance(bot, MusicBot)


# =============================================================================
# setup_hook
# =============================================================================


class TestSetupHook:
    async def test_initializes_and_loads_cogs(self, bot, mock_container):
        with patch.object(bot, "load_extension", new_callable=AsyncMock) as mock_load:
            await bot.setup_hook()

        mock_container.initialize.assert_awaited_once()
        assert [c.args[0] for c in mock_load.call_args_list] == list(COGS)
        assert bot.tree.on_error == bot._on_app_command_error

    async def test_skips_sync_by_default(self, bot):
        with patch.object(bot, "load_extension", new_callable=AsyncMock), patch.object(
            bot, "_sync_commands", new_callable=AsyncMock
        ) as mock_sync:
            await bot.setup_hook()

        mock_sync.assert_not_called()

    async def test_sync_failure_does_not_abort(self, bot, mock_settings):
        """Should log and continue when syncing commands fails."""
        mock_settings.discord.sync_on_startup = True
        error = discord.HTTPException(MagicMock(status=500, reason="Server Error"), "boom")

        with patch.object(bot, "load_extension", new_callable=AsyncMock), patch.object(
            bot, "_sync_commands", new_callable=AsyncMock, side_effect=error
        ) as mock_sync:
            await bot.setup_hook()

        mock_sync.assert_awaited_once()


# =============================================================================
# _sync_commands
# =============================================================================


class TestSyncCommands:
    async def test_global_only(self, bot):
        with patch.object(
            bot.tree, "sync", new_callable=AsyncMock, return_value=[MagicMock()]
        ) as mock_sync:
            await bot._sync_commands()

        mock_sync.assert_called_once_with()

    async def test_configured_guilds(self, bot, mock_settings):
        """Should copy global commands to each guild before syncing it."""
        mock_settings.discord.guild_ids = [111111, 222222]

        with patch.object(
            bot.tree, "sync", new_callable=AsyncMock, return_value=[]
        ) as mock_sync, patch.object(bot.tree, "copy_global_to") as mock_copy:
            await bot._sync_commands()

        assert mock_sync.call_count == 3
        assert [c.kwargs["guild"].id for c in mock_copy.call_args_list] == [111111, 222222]


# =============================================================================
# _on_app_command_error
# =============================================================================


class TestAppCommandErrorHandler:
    async def test_environment_error_shows_reason(self, bot):
        """Should reply with the reason of a VoiceEnvironmentError."""
        interaction = make_interaction()
        error = MagicMock()
        error.original = VoiceEnvironmentError(DiscordUIMessages.STATE_NOT_CONNECTED)

        await bot._on_app_command_error(interaction, error)

        interaction.response.send_message.assert_awaited_once_with(
            DiscordUIMessages.STATE_NOT_CONNECTED, ephemeral=True
        )

    async def test_unexpected_error(self, bot):
        interaction = make_interaction()

        await bot._on_app_command_error(interaction, Exception("Test error"))

        message = interaction.response.send_message.call_args.args[0]
        assert "Test error" in message

    async def test_uses_followup_when_responded(self, bot):
        interaction = make_interaction(responded=True)

        await bot._on_app_command_error(interaction, Exception("late"))

        interaction.followup.send.assert_awaited_once()
        interaction.response.send_message.assert_not_called()

    async def test_send_failure_is_logged(self, bot):
        interaction = make_interaction()
        interaction.response.send_message.side_effect = discord.HTTPException(
            MagicMock(status=404, reason="Not Found"), "Unknown interaction"
        )

        await bot._on_app_command_error(interaction, Exception("x"))


# =============================================================================
# close
# =============================================================================


class TestBotClose:
    async def test_close_disconnects_voice_clients(self, bot, mock_container):
        vc1, vc2 = MagicMock(), MagicMock()
        vc1.disconnect = AsyncMock()
        vc2.disconnect = AsyncMock()

        with patch.object(type(bot), "voice_clients", PropertyMock(return_value=[vc1, vc2])):
            await bot.close()

        mock_container.shutdown.assert_awaited_once()
        vc1.disconnect.assert_awaited_once_with(force=True)
        vc2.disconnect.assert_awaited_once_with(force=True)

    async def test_close_tolerates_container_error(self, bot, mock_container):
        mock_container.shutdown.side_effect = RuntimeError("boom")
        vc = MagicMock()
        vc.disconnect = AsyncMock()

        with patch.object(type(bot), "voice_clients", PropertyMock(return_value=[vc])):
            await bot.close()

        vc.disconnect.assert_awaited_once()


# =============================================================================
# on_interaction
# =============================================================================

OWNER_ID = 42
GUILD_ID = 111


@pytest.fixture
def controller(mock_container):
    controller = mock_container.playback_controller
    controller.get_panel.return_value = None
    controller.on_control_action = AsyncMock(
        return_value=ControlOutcome(success=True, message="Paused")
    )
    return controller


def make_button_press(custom_id: str, *, user_id: int = OWNER_ID) -> MagicMock:
    interaction = make_interaction()
    interaction.type = discord.InteractionType.component
    interaction.data = {"custom_id": custom_id, "component_type": 2}
    interaction.user.id = user_id
    interaction.message.id = 9001
    return interaction


class TestPanelButtonDispatch:
    async def test_press_without_live_panel_is_applied(self, bot, controller):
        """Should apply buttons from a panel posted before a restart."""
        interaction = make_button_press(make_custom_id(PanelAction.PAUSE, OWNER_ID, GUILD_ID))

        await bot.on_interaction(interaction)

        controller.get_panel.assert_called_once_with(9001)
        controller.on_control_action.assert_awaited_once_with(
            PanelAction.PAUSE, issuer_id=OWNER_ID, session_key=GUILD_ID, owner_id=OWNER_ID
        )
        interaction.response.send_message.assert_awaited_once_with("Paused", ephemeral=True)

    async def test_live_panel_is_left_to_its_view(self, bot, controller):
        """Should not handle a press twice when the panel's view is still running."""
        controller.get_panel.return_value = MagicMock()
        interaction = make_button_press(make_custom_id(PanelAction.STOP, OWNER_ID, GUILD_ID))

        await bot.on_interaction(interaction)

        controller.on_control_action.assert_not_awaited()
        interaction.response.send_message.assert_not_awaited()

    async def test_non_owner_is_denied(self, bot, controller):
        """Should answer other users ephemerally and change nothing."""
        controller.on_control_action.side_effect = AuthorizationDeniedError(7, OWNER_ID)
        interaction = make_button_press(
            make_custom_id(PanelAction.VOLUME_UP, OWNER_ID, GUILD_ID), user_id=7
        )

        await bot.on_interaction(interaction)

        interaction.response.send_message.assert_awaited_once_with(
            DiscordUIMessages.CONTROL_NOT_OWNER, ephemeral=True
        )

    @pytest.mark.parametrize("custom_id", ["other:pause:42:111", "music:rewind:42:111", ""])
    async def test_foreign_ids_are_ignored(self, bot, controller, custom_id):
        interaction = make_button_press(custom_id)

        await bot.on_interaction(interaction)

        controller.on_control_action.assert_not_awaited()

    async def test_slash_commands_are_ignored(self, bot, controller):
        interaction = make_button_press(make_custom_id(PanelAction.PAUSE, OWNER_ID, GUILD_ID))
        interaction.type = discord.InteractionType.application_command

        await bot.on_interaction(interaction)

        controller.get_panel.assert_not_called()
        controller.on_control_action.assert_not_awaited()
