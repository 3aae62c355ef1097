"""
Generation slot orchestration.

Fans one trigger out into N concurrent generation slots with stable IDs,
per-slot status, isolated retry and a per-parent in-flight guard.
"""

from .batch import Batch, SlotCall, SlotOrchestrator, capability_call
from .prompts import build_shot_prompt, build_style_prompt, resolve_templates
from .slots import Slot, SlotStatus
from .targets import IMAGE_TARGET, SONG_TARGET, TARGETS, VIDEO_TARGET, GenerationTarget, first_url

__all__ = [
    # Slots
    "Slot",
    "SlotStatus",
    # Batches
    "Batch",
    "SlotCall",
    "SlotOrchestrator",
    "capability_call",
    # Targets
    "GenerationTarget",
    "SONG_TARGET",
    "IMAGE_TARGET",
    "VIDEO_TARGET",
    "TARGETS",
    "first_url",
    # Prompts
    "build_style_prompt",
    "build_shot_prompt",
    "resolve_templates",
]
