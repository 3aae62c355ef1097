"""Music domain: lyrics conversation tree and songs."""

from .library import MusicLibrary

__all__ = ["MusicLibrary"]
