"""
tracefront v1.0 - Instruction-trace front end for cycle-approximate core models.

This package provides:
- isa: Opcode registry, register namespace and the Instruction event
- formats: Trace line tags, tokenizer and file reader
- decoding: Instruction line decoder and annotation reader
- streams: Pull-based TraceStream with single-line replay
- config: YAML configuration with environment variable support
- core: Error codes, fatal exceptions and recoverable issue records
- cli: Command-line interface
"""

__version__ = "1.0.0"

from .core import ErrorCode, TraceIssue, TraceDecodeError, ConfigError
from .isa import (
    ExecutionType,
    MemAccess,
    OpcodeDescriptor,
    OpcodeRegistry,
    DEFAULT_REGISTRY,
    RegisterNamespace,
    DEFAULT_REGISTERS,
    Instruction,
    MemoryAccess,
)
from .config import TraceFrontConfig, TracingConfig, TimingConfig, load_config
from .decoding import InstructionDecoder, AnnotationReader
from .streams import InstructionStream, TraceStream, CursorState
from .formats.reader import TraceReader

__all__ = [
    # Version
    '__version__',
    # Core
    'ErrorCode',
    'TraceIssue',
    'TraceDecodeError',
    'ConfigError',
    # ISA
    'ExecutionType',
    'MemAccess',
    'OpcodeDescriptor',
    'OpcodeRegistry',
    'DEFAULT_REGISTRY',
    'RegisterNamespace',
    'DEFAULT_REGISTERS',
    'Instruction',
    'MemoryAccess',
    # Config
    'TraceFrontConfig',
    'TracingConfig',
    'TimingConfig',
    'load_config',
    # Decoding
    'InstructionDecoder',
    'AnnotationReader',
    # Streams
    'InstructionStream',
    'TraceStream',
    'CursorState',
    # Reader
    'TraceReader',
]
