"""
tmusic-cli: a terminal music player that searches YouTube Music and plays
tracks through MPV.
"""

__version__ = "1.0.0"
