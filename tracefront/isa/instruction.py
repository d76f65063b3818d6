"""
Decoded instruction event.

Instruction is the normalized record handed to the downstream timing model.
The decoder fills the static fields; the annotation reader fills the optional
timing fields only when the corresponding trace feature is enabled.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .descriptor import ExecutionType


# Address recorded for atomic accesses (the tracer does not print a reliable one)
ATOMIC_SENTINEL_ADDRESS = 0xFFFFFFFFFFFFFFFF


@dataclass(frozen=True)
class MemoryAccess:
    """
    One data memory access.

    Attributes:
        base: Base address, or None when the tracer printed no address
        length: Bytes accessed
    """
    base: Optional[int]
    length: int

    def to_dict(self) -> dict:
        return {
            'base': f"0x{self.base:x}" if self.base is not None else None,
            'length': self.length,
        }


@dataclass
class Instruction:
    """
    One retired instruction.

    Attributes:
        pc: Program counter (64-bit unsigned)
        length: Instruction length in bytes
        execution_type: Execution class from the opcode registry
        opcode: Mnemonic as printed in the trace
        reg_reads: Register ids read, in operand order
        reg_writes: Register ids written, in operand order
        mem_load: Load descriptor (None if no load)
        mem_store: Store descriptor (None if no store)
        fetch_cycles: Fetch latency in cycles (fetch tracing only)
        mispredicted: Branch outcome (branch tracing only)
        mem_cycles: Memory access latency in cycles (memory tracing only)
    """
    pc: int
    length: int
    execution_type: ExecutionType
    opcode: str = ''
    reg_reads: List[int] = field(default_factory=list)
    reg_writes: List[int] = field(default_factory=list)
    mem_load: Optional[MemoryAccess] = None
    mem_store: Optional[MemoryAccess] = None
    fetch_cycles: Optional[int] = None
    mispredicted: Optional[bool] = None
    mem_cycles: Optional[int] = None

    @property
    def accesses_memory(self) -> bool:
        return self.mem_load is not None or self.mem_store is not None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            'pc': f"0x{self.pc:x}",
            'opcode': self.opcode,
            'length': self.length,
            'execution_type': self.execution_type.value,
            'reg_reads': list(self.reg_reads),
            'reg_writes': list(self.reg_writes),
        }
        if self.mem_load is not None:
            result['mem_load'] = self.mem_load.to_dict()
        if self.mem_store is not None:
            result['mem_store'] = self.mem_store.to_dict()
        if self.fetch_cycles is not None:
            result['fetch_cycles'] = self.fetch_cycles
        if self.mispredicted is not None:
            result['mispredicted'] = self.mispredicted
        if self.mem_cycles is not None:
            result['mem_cycles'] = self.mem_cycles
        return result

    def __repr__(self) -> str:
        return (
            f"Instruction(pc=0x{self.pc:x}, "
            f"opcode={self.opcode!r}, "
            f"type={self.execution_type.value}, "
            f"reads={self.reg_reads}, writes={self.reg_writes})"
        )
