"""Instruction-set semantics: opcode registry, register namespace, instruction event."""

from .descriptor import (
    MAX_OPERANDS,
    MEM_LENGTHS,
    ExecutionType,
    MemAccess,
    OperandRole,
    OpcodeDescriptor,
)
from .opcodes import OPCODE_TABLE, OpcodeRegistry, DEFAULT_REGISTRY, lookup
from .registers import Csr, RegisterClass, RegisterNamespace, DEFAULT_REGISTERS, resolve
from .instruction import ATOMIC_SENTINEL_ADDRESS, Instruction, MemoryAccess

__all__ = [
    # Descriptors
    'MAX_OPERANDS',
    'MEM_LENGTHS',
    'ExecutionType',
    'MemAccess',
    'OperandRole',
    'OpcodeDescriptor',
    # Registry
    'OPCODE_TABLE',
    'OpcodeRegistry',
    'DEFAULT_REGISTRY',
    'lookup',
    # Registers
    'Csr',
    'RegisterClass',
    'RegisterNamespace',
    'DEFAULT_REGISTERS',
    'resolve',
    # Instruction
    'ATOMIC_SENTINEL_ADDRESS',
    'Instruction',
    'MemoryAccess',
]
