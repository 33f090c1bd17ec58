"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Settings Validation Errors
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    INVALID_EMBED_COLOR = "Embed color must be between 0x000000 and 0xFFFFFF"
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"

    # Session Errors
    VOLUME_CHANGE_REQUIRED = "Exactly one of delta or absolute must be given"
    HANDLE_ALREADY_STARTED = "Playable handle has already been started"

    # Resolution Errors
    SPOTIFY_TOKEN_MISSING = "Token response did not contain an access token"
    SPOTIFY_TRACK_INCOMPLETE = "Track payload is missing a name or artist"
    SPOTIFY_TRACK_ID_UNPARSABLE = "Could not extract a track id from '{link}'"

    # Sourcing Errors
    TIER_TIMED_OUT = "timed out after {seconds:g}s"
    TIER_NOT_APPLICABLE_NO_LINK = "request did not come from a streaming-service link"
    TIER_DISABLED_PREFER_YOUTUBE = "disabled by prefer_youtube"
    HELPER_NOT_CONFIGURED = (
        "no decode helper configured (set SPOTIFY__STREAM_CMD or place an executable "
        "librespot-wrapper in .bin)"
    )
    EXTRACTOR_NO_INFO = "extractor returned no information for '{target}'"
    EXTRACTOR_NO_URL = "extractor returned no stream URL for '{target}'"
    EXTRACTOR_NO_ENTRIES = "search returned no results for '{target}'"
    DOWNLOAD_FILE_MISSING = "download reported success but no file starting with '{prefix}' exists in {directory}"
    DOWNLOAD_FILE_VANISHED = "downloaded file no longer exists: {path}"
    STREAM_NOT_DECODABLE = "stream produced no audio frames"
    TRANSCODER_FAILED = "ffmpeg exited with status {code}: {stderr}"
    TRANSCODER_NOT_FOUND = "executable '{executable}' was not found"
    VOICE_CLIENT_MISSING = "not connected to voice in guild {guild_id}"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Resolver
    RESOLVER_DIRECT_URL = "Resolved '%s' as direct media URL"
    RESOLVER_SERVICE_LOOKUP_OK = "Streaming-service lookup for '%s' -> '%s'"
    RESOLVER_SERVICE_LOOKUP_FAILED = "Streaming-service lookup failed for '%s': %s"
    RESOLVER_SEARCH_ENRICHED = "Enriched query '%s' -> '%s'"
    RESOLVER_SEARCH_FAILED = "Streaming-service search failed for '%s', using raw text: %s"
    SPOTIFY_TOKEN_REFRESHED = "Fetched Spotify access token (expires in %ss)"

    # Stream Acquirer
    TIER_STARTED = "Tier %d (%s) attempting '%s' in guild %s"
    TIER_SUCCEEDED = "Tier %d (%s) produced a playable stream in guild %s"
    TIER_FAILED = "Tier %d (%s) failed in guild %s: %s"
    TIER_CANDIDATE_FAILED = "Tier %s candidate %s failed: %s"
    ALL_TIERS_EXHAUSTED = "All %d tiers exhausted for '%s' in guild %s"

    # Audio Engine
    ENGINE_PROBE_FAILED = "Probe failed for %s input in guild %s: %s"
    ENGINE_SOURCE_CLEANUP_ERROR = "Error cleaning up audio source: %s"
    ENGINE_PROCESS_CLEANUP_ERROR = "Error cleaning up child process: %s"
    PLAYBACK_ERROR = "Playback error in guild %s: %s"
    MEDIA_TOOL_MISSING = "%s not found on PATH; some sourcing tiers will fail"
    MEDIA_TOOL_FOUND = "%s found at %s"

    # Media Extraction
    YTDLP_EXTRACT_FAILED = "yt-dlp extraction failed for %s (format %s): %s"
    YTDLP_DOWNLOAD_FAILED = "yt-dlp download failed for %s: %s"
    YTDLP_DOWNLOADED = "Downloaded %s to %s"

    # Transcoder
    TRANSCODE_STARTED = "Transcoding %s -> %s"
    TRANSCODE_FAILED = "Transcode of %s failed: %s"

    # Session Store
    SESSION_OPENED = "Opened playback session in guild %s (volume %.2f)"
    SESSION_SUPERSEDED = "Superseding existing playback session in guild %s"
    SESSION_START_FAILED = "Playback handle failed to start in guild %s; session discarded"
    SESSION_CLOSED = "Closed playback session in guild %s"
    SESSION_NOT_FOUND = "No playback session for guild %s"
    SESSION_STALE_TERMINAL = "Ignoring terminal signal from superseded handle in guild %s"
    PLAYBACK_PAUSED = "Paused playback in guild %s"
    PLAYBACK_RESUMED = "Resumed playback in guild %s"
    VOLUME_CHANGED = "Volume in guild %s set to %.2f"

    # Reaper
    REAPER_DELETED = "Reaped temporary file %s"
    REAPER_DELETE_FAILED = "Failed to delete temporary file %s: %r"
    REAPER_ALREADY_REAPED = "Cleanup set already reaped, ignoring %s signal"

    # Control Panel
    PANEL_STARTED = "Control panel %s started for guild %s (owner %s)"
    PANEL_TERMINATED = "Control panel %s terminated for guild %s"
    PANEL_RENDER_FAILED = "Control panel %s render failed for guild %s"
    PANEL_ACTION_DENIED = "User %s denied %s on panel owned by %s"
    PANEL_ACTION = "Panel action %s by %s in guild %s -> %s"
    PANEL_DETACHED_ACTION = "Panel action %s for guild %s received without a live panel"

    # Controller
    PLAY_REQUESTED = "Play requested in guild %s: '%s'"
    PLAY_STARTED = "Now playing '%s' in guild %s via %s"
    PLAY_START_FAILED = "Acquired stream for guild %s could not start"
    STREAMTEST_FAILED = "Stream test failed for %s: %s"

    # Voice
    VOICE_CONNECTED = "Connected to voice channel %s in %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"

    # Application Lifecycle
    BOT_STARTING = "Starting fallback music bot in {environment} mode"
    BOT_STARTING_RUN = "Connecting to Discord..."
    BOT_SOURCING_SUMMARY = (
        "Sourcing: %s fallback formats, tier timeout %ss, download timeout %ss, downloads in %s"
    )
    BOT_SPOTIFY_SUMMARY = "Spotify: metadata lookups %s, decode helper %s, prefer YouTube %s"
    BOT_STOPPED = "Bot stopped"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt"
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SETUP = "Setting up bot..."
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_READY = "Logged in as %s (%s)"
    BOT_COG_LOADED = "Loaded cog %s"
    BOT_COMMANDS_SYNCED = "Synced %d commands"
    BOT_SYNC_FAILED = "Failed to sync commands on startup: %r"
    BOT_SHUTTING_DOWN = "Shutting down, closing playback sessions"
    BOT_CLOSING = "Closing bot..."
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown timed out after %.0fs"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error shutting down container: %s"
    BOT_COMMANDS_SYNCED_GUILD = "Synced %d commands to guild %s"
    BOT_SLASH_COMMAND_ERROR = "Slash command '%s' failed: %s"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Failed to send error message to user"


class DiscordUIMessages:
    """User-facing Discord messages and responses.

    These strings are shown directly to users in Discord interactions.
    Keep them concise and friendly.
    """

    # Environment
    STATE_SERVER_ONLY = "This command only works in a server."
    STATE_NEED_TO_BE_IN_VOICE = "Join a voice channel first, or pass one: `/music join <channel>`."
    STATE_NOT_CONNECTED = "I'm not in a voice channel (use `/music join`)."
    STATE_NOT_CONNECTED_LEAVE = "I'm not connected to a voice channel."
    STATE_VERIFY_VOICE_FAILED = "I couldn't verify your voice channel."
    ERROR_COULD_NOT_JOIN_VOICE = "I couldn't join that voice channel."
    ERROR_EMPTY_QUERY = "Provide a song name: `/music play <song>`."
    ERROR_OCCURRED = "\u274c An error occurred: {error}"

    # Join / leave
    SUCCESS_JOINED = "Joined <#{channel_id}>"
    SUCCESS_LEFT = "Left the voice channel"

    # Play
    PLAY_RESOLVING = "\U0001f50e Looking for **{query}**..."
    PLAY_NOW_PLAYING = "\U0001f3b6 Now playing: {display}"
    PLAY_VIA = " _(via {strategy})_"
    PLAY_FAILED = "❌ Couldn't play **{query}**. Every source failed."
    PLAY_START_FAILED = "❌ Found **{query}** but playback could not start: {error}"
    PLAY_DIAGNOSTICS_HEADER = "Diagnostics:"

    # Control actions
    CONTROL_NOT_OWNER = "You are not the owner of this control panel."
    CONTROL_PAUSED = "Paused"
    CONTROL_RESUMED = "Resumed"
    CONTROL_STOPPED = "Stopped"
    CONTROL_VOLUME = "Volume: {volume:.2f}"
    CONTROL_NOTHING_PLAYING = "Nothing is playing right now."
    CONTROL_ALREADY_PAUSED = "Playback is not running."
    CONTROL_NOT_PAUSED = "Playback is not paused."

    # Control panel embed
    PANEL_TITLE = "Music Controls"
    PANEL_NO_ACTIVE_TRACK = "No active track"
    PANEL_DESCRIPTION = "Status: {status}\nVolume: {volume:.2f}\nRemaining: {remaining}"
    PANEL_REMAINING_UNKNOWN = "Unknown"
    PANEL_STATUS_PLAYING = "Playing"
    PANEL_STATUS_PAUSED = "Paused"
    PANEL_STATUS_STOPPED = "Stopped"
    PANEL_FAILED = "Status: Unavailable\nThis panel stopped updating."

    # Control panel buttons
    BUTTON_PAUSE = "\u23f8 Pause"
    BUTTON_RESUME = "\u25b6 Resume"
    BUTTON_STOP = "\u23f9 Stop"
    BUTTON_VOLUME_DOWN = "\U0001f509 Vol -"
    BUTTON_VOLUME_UP = "\U0001f50a Vol +"

    # Stream test
    STREAMTEST_EMPTY = "Provide a Spotify track URL: `/music streamtest <url>`."
    STREAMTEST_NO_HELPER = (
        "No Spotify stream command configured (set SPOTIFY__STREAM_CMD or place "
        "`librespot-wrapper` in .bin)."
    )
    STREAMTEST_RECORD_FAILED = "Recording failed.\nffmpeg stderr:\n{stderr}"
    STREAMTEST_OK = "Recorded a {seconds}s sample ({size} bytes). ffprobe output:\n```json\n{probe}\n```"
