"""Tests for ColoredFormatter."""

import logging
from io import StringIO

import pytest

from fallback_music_bot.utils.logging import ColoredFormatter

FMT = "%(levelname)s | %(name)s | %(message)s"


class _TtyStream(StringIO):
    def isatty(self) -> bool:
        return True


def _record(level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="fallback_music_bot.sourcing",
        level=level,
        pathname="tiers.py",
        lineno=1,
        msg="tier %d failed",
        args=(2,),
        exc_info=None,
    )


@pytest.fixture(autouse=True)
def _color_allowed(monkeypatch):
    monkeypatch.delenv("NO_COLOR", raising=False)


class TestColoredFormatter:
    @pytest.mark.parametrize("level", sorted(ColoredFormatter.COLORS))
    def test_levelname_colored_on_tty(self, level):
        formatter = ColoredFormatter(FMT, stream=_TtyStream())

        output = formatter.format(_record(level))

        assert output.startswith(ColoredFormatter.COLORS[level])
        assert f"{ColoredFormatter.DIM}fallback_music_bot.sourcing{ColoredFormatter.RESET}" in output
        assert output.endswith("tier 2 failed")

    def test_plain_when_not_tty(self):
        formatter = ColoredFormatter(FMT, stream=StringIO())

        assert formatter.format(_record()) == "INFO | fallback_music_bot.sourcing | tier 2 failed"

    def test_no_color_env_wins(self, monkeypatch):
        """Should honour NO_COLOR even on a terminal."""
        monkeypatch.setenv("NO_COLOR", "1")
        formatter = ColoredFormatter(FMT, stream=_TtyStream())

        assert "\033[" not in formatter.format(_record())

    def test_original_record_untouched(self):
        """Should color a copy so other handlers see the plain levelname."""
        formatter = ColoredFormatter(FMT, stream=_TtyStream())
        record = _record(logging.WARNING)

        formatter.format(record)

        assert record.levelname == "WARNING"
        assert record.name == "fallback_music_bot.sourcing"
