"""
GenStudio - local-first generation studio

Fans prompts out to generation capabilities in concurrent slots and keeps
lyrics, songs, image sessions and video scripts in a versioned local store.
"""

__version__ = "0.3.0"

# Re-export the main entry points for convenience
from genstudio.core.config.models import StudioConfig
from genstudio.core.orchestrator.batch import Batch, SlotOrchestrator
from genstudio.core.orchestrator.slots import Slot, SlotStatus
from genstudio.core.store.service import LocalStore

__all__ = [
    "Batch",
    "LocalStore",
    "Slot",
    "SlotOrchestrator",
    "SlotStatus",
    "StudioConfig",
    "__version__",
]
