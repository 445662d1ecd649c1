"""
Builds the external player command line and spawns it as an asyncio subprocess.
"""

import asyncio
import logging

from tmusic_cli.models.config import PlayerConfig
from tmusic_cli.models.track import Track

log = logging.getLogger(__name__)


def build_player_args(track: Track, config: PlayerConfig) -> list[str]:
    """Command line for an audio-only, windowless, silent mpv instance."""
    return [
        config.mpv_path,
        "--no-video",
        "--quiet",
        "--no-terminal",
        "--audio-display=no",
        f"--user-agent={config.user_agent}",
        track.watch_url(config.video_host),
    ]


async def spawn_player(args: list[str]) -> asyncio.subprocess.Process:
    """
    Starts the player detached from our stdio.

    Raises:
        OSError: If the executable cannot be started (e.g. not installed).
    """
    log.debug(f"Spawning player: {' '.join(args)}")
    return await asyncio.create_subprocess_exec(
        *args,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.DEVNULL,
    )

