"""Video domain: scripts, shots, templates and generated clips."""

from .library import ScriptTemplateUsage, VideoLibrary

__all__ = ["ScriptTemplateUsage", "VideoLibrary"]
