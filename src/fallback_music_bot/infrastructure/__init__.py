"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Discord (bot, cogs, audio engine, control panel views)
- Audio (yt-dlp, FFmpeg, decode helper)
- Spotify Web API (httpx)
"""
