"""Pull-based instruction streams."""

from .base import InstructionStream
from .cursor import CursorState, TraceStream

__all__ = [
    'InstructionStream',
    'CursorState',
    'TraceStream',
]
