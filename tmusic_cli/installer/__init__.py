"""
Provisioning of the external MPV media player.
"""

from .mpv import MpvInstaller

__all__ = ["MpvInstaller"]
