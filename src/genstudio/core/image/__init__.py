"""Image domain: sessions, prompt steps and generated images."""

from .library import ImageLibrary

__all__ = ["ImageLibrary"]
