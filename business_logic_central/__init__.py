"""Business logic central.

Registers conditional "instructions" against named events and fires them in
priority order, stopping at the first instruction that applies. Modules do
not configure logging or read settings on import.
"""

from .instructions import AsyncInstruction, BusinessLogicEvent, Instruction
from .registry import BusinessLogicCentral, get_central

__all__ = [
    "__version__",
    "AsyncInstruction",
    "BusinessLogicCentral",
    "BusinessLogicEvent",
    "Instruction",
    "get_central",
]

__version__ = "0.1.0"
