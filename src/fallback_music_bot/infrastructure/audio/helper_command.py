"""Locates the Spotify decode helper and builds its shell command."""

from __future__ import annotations

import logging
import os
import shlex
from pathlib import Path

from fallback_music_bot.application.interfaces.decode_helper import DecodeHelperLocator
from fallback_music_bot.config.settings import SpotifySettings
from fallback_music_bot.domain.music.links import to_track_uri
from fallback_music_bot.domain.shared.exceptions import ConfigurationMissingError
from fallback_music_bot.domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

URI_PLACEHOLDER = "{uri}"


def is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


class HelperCommandLocator(DecodeHelperLocator):
    """Resolution order: ``stream_cmd`` template, then an executable at ``helper_path``."""

    def __init__(self, settings: SpotifySettings | None = None) -> None:
        self._settings = settings or SpotifySettings()

    @property
    def enabled(self) -> bool:
        return not self._settings.prefer_youtube

    def command_for(self, service_link: str) -> str:
        uri = to_track_uri(service_link)
        quoted = shlex.quote(uri)

        template = self._settings.stream_cmd
        if template:
            if URI_PLACEHOLDER in template:
                return template.replace(URI_PLACEHOLDER, quoted)
            return f"{template} {quoted}"

        helper = self._settings.helper_path
        if is_executable(helper):
            return f"{shlex.quote(str(helper))} --uri {quoted} --stdout"

        raise ConfigurationMissingError("decode helper", ErrorMessages.HELPER_NOT_CONFIGURED)
