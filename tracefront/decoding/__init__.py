"""Instruction and annotation decoding."""

from .decoder import InstructionDecoder, parse_hex, is_register_token
from .annotations import AnnotationReader, DEFAULT_MEM_CYCLES, ticks_to_cycles

__all__ = [
    'InstructionDecoder',
    'parse_hex',
    'is_register_token',
    'AnnotationReader',
    'DEFAULT_MEM_CYCLES',
    'ticks_to_cycles',
]
