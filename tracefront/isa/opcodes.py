"""
Opcode registry.

One immutable table maps every supported mnemonic to a single
OpcodeDescriptor. The table is built once at import time and is read-only
afterwards, so it can be shared by any number of trace streams.

Mnemonics follow the tracer's disassembly: lowercase, conditional suffixes
joined with '.', and floating point precision suffixed with '_s' / '_d'.

Role strings list operand positions in the order the tracer prints register
operands. Immediates and shifts are not operands. A role string can be shorter
than the architectural operand list when the tracer omits registers for that
form (e.g. 'cmp' prints the flags destination and one source).
"""

from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List

from .descriptor import ExecutionType, MemAccess, OpcodeDescriptor
from ..core.errors import MalformedDescriptor, UnknownOpcode


def _op(mnemonic: str, execution_type: ExecutionType, roles: str = '',
        mem_access: MemAccess = MemAccess.NONE, mem_length: int = 0,
        length: int = 4) -> OpcodeDescriptor:
    return OpcodeDescriptor(mnemonic, execution_type, roles, mem_access, mem_length, length)


_INT = ExecutionType.INT_BASE
_MUL = ExecutionType.INT_MUL
_DIV = ExecutionType.INT_DIV
_BCOND = ExecutionType.BRANCH_COND
_BUNCOND = ExecutionType.BRANCH_UNCOND


OPCODE_TABLE = (
    # === Integer ALU ===
    _op('addi', _INT, 'WR'),
    _op('add', _INT, 'WRR'),
    _op('adds', _INT, 'WR'),
    _op('sub', _INT, 'WRR'),
    _op('subs', _INT, 'WR'),
    _op('neg', _INT, 'WRR'),
    _op('cmp', _INT, 'WR'),
    _op('cmn', _INT, 'WR'),
    _op('ccmp.eq', _INT, 'WRR'),
    _op('ccmp.ne', _INT, 'WR'),
    _op('ccmp.cs', _INT, 'WR'),
    _op('and', _INT, 'WR'),
    _op('ands', _INT, 'WR'),
    _op('tst', _INT, 'W'),
    _op('orr', _INT, 'WR'),
    _op('eor', _INT, 'WRR'),
    _op('bic', _INT, 'WRR'),
    _op('bics', _INT, 'WRR'),
    _op('clz', _INT, 'WR'),
    _op('rev', _INT, 'WRR'),
    _op('ubfm', _INT, 'WR'),
    _op('sbfm', _INT, 'WR'),
    _op('asr', _INT, 'WRR'),
    _op('asrv', _INT, 'WRR'),
    _op('lsr', _INT, 'WR'),
    _op('lsrv', _INT, 'WRR'),
    _op('lsl', _INT, 'WR'),
    _op('lslv', _INT, 'WRR'),
    _op('adr', _INT, 'W'),
    _op('adrp', _INT, 'W'),
    _op('mov', _INT, 'W'),
    _op('movn', _INT, 'W'),
    _op('movz', _INT, 'W'),
    _op('movk', _INT, 'W'),
    _op('mrs', _INT, 'WR'),
    _op('csel', _INT, 'WRR'),
    _op('csinc', _INT, 'WRR'),
    _op('cset', _INT, 'W'),
    _op('nop', _INT),

    # === Integer multiply / divide ===
    _op('mul', _MUL, 'WRR'),
    _op('umull', _MUL, 'WRR'),
    _op('umulh', _MUL, 'WRR'),
    _op('madd', _MUL, 'WRRR'),
    _op('msub', _MUL, 'WRRR'),
    _op('umaddl', _MUL, 'WRRR'),
    _op('udiv', _DIV, 'WRR'),
    _op('sdiv', _DIV, 'WRR'),

    # === Floating point ===
    _op('fadd_s', ExecutionType.FP_BASE, 'WRR'),
    _op('fsub_s', ExecutionType.FP_BASE, 'WRR'),
    _op('fadd_d', ExecutionType.FP_BASE, 'WRR'),
    _op('fsub_d', ExecutionType.FP_BASE, 'WRR'),
    _op('fmul_s', ExecutionType.FP_MUL, 'WRR'),
    _op('fmul_d', ExecutionType.FP_MUL, 'WRR'),
    _op('fdiv_s', ExecutionType.FP_DIV, 'WRR'),
    _op('fdiv_d', ExecutionType.FP_DIV, 'WRR'),

    # === Loads ===
    _op('ldr', ExecutionType.LOAD, 'WR', MemAccess.LOAD, 8),
    _op('ldur', ExecutionType.LOAD, 'WR', MemAccess.LOAD, 8),
    _op('ldrb', ExecutionType.LOAD, 'WR', MemAccess.LOAD, 4),
    _op('ldrh', ExecutionType.LOAD, 'WR', MemAccess.LOAD, 4),
    _op('ldrsw', ExecutionType.LOAD, 'WR', MemAccess.LOAD, 4),
    _op('ldp', ExecutionType.LOAD, 'WWR', MemAccess.LOAD, 16),

    # === Stores ===
    _op('str', ExecutionType.STORE, 'RR', MemAccess.STORE, 8),
    _op('stur', ExecutionType.STORE, 'RR', MemAccess.STORE, 8),
    _op('strb', ExecutionType.STORE, 'RR', MemAccess.STORE, 4),
    _op('strh', ExecutionType.STORE, 'RR', MemAccess.STORE, 4),
    _op('stp', ExecutionType.STORE, 'RRR', MemAccess.STORE, 16),

    # === Atomics / exclusives ===
    _op('ldxr', ExecutionType.ATOMIC, 'WR', MemAccess.ATOMIC, 8),
    _op('ldaxr', ExecutionType.ATOMIC, 'WR', MemAccess.ATOMIC, 8),
    _op('stxr', ExecutionType.ATOMIC, 'WRR', MemAccess.ATOMIC, 8),
    _op('stlxr', ExecutionType.ATOMIC, 'WRR', MemAccess.ATOMIC, 8),
    _op('ldadd', ExecutionType.ATOMIC, 'RWR', MemAccess.ATOMIC, 8),
    _op('swp', ExecutionType.ATOMIC, 'RWR', MemAccess.ATOMIC, 8),
    _op('cas', ExecutionType.ATOMIC, 'WRR', MemAccess.ATOMIC, 8),

    # === Conditional branches ===
    _op('b.eq', _BCOND),
    _op('b.ne', _BCOND),
    _op('b.cs', _BCOND),
    _op('b.cc', _BCOND),
    _op('b.lo', _BCOND),
    _op('b.hs', _BCOND),
    _op('b.mi', _BCOND),
    _op('b.pl', _BCOND),
    _op('b.hi', _BCOND),
    _op('b.ls', _BCOND),
    _op('b.ge', _BCOND),
    _op('b.lt', _BCOND),
    _op('b.gt', _BCOND),
    _op('b.le', _BCOND),
    _op('cbz', _BCOND, 'R'),
    _op('cbnz', _BCOND, 'R'),
    _op('tbz', _BCOND, 'R'),
    _op('tbnz', _BCOND, 'R'),

    # === Unconditional branches ===
    _op('b', _BUNCOND),
    _op('bl', _BUNCOND),
    _op('br', _BUNCOND, 'R'),
    _op('blr', _BUNCOND, 'R'),
    _op('ret', _BUNCOND),

    # === System ===
    # Disassembly prints no operands for environment calls
    _op('ecall', ExecutionType.SYSCALL),
    _op('svc', ExecutionType.SYSCALL),
    # CSR operand is printed uppercase and never reaches register resolution
    _op('csrrwi', ExecutionType.OTHER, 'WR'),
)


class OpcodeRegistry:
    """
    Read-only mapping from mnemonic to OpcodeDescriptor.

    Usage:
        registry = OpcodeRegistry(OPCODE_TABLE)
        desc = registry.lookup('ldr')
        desc.execution_type   # ExecutionType.LOAD

    Construction rejects duplicate mnemonics; each descriptor has already
    validated itself. There is no update operation.
    """

    def __init__(self, descriptors: Iterable[OpcodeDescriptor]):
        table: Dict[str, OpcodeDescriptor] = {}
        for desc in descriptors:
            if desc.mnemonic in table:
                raise MalformedDescriptor(
                    f"Duplicate opcode entry: {desc.mnemonic!r}",
                    {'mnemonic': desc.mnemonic},
                )
            table[desc.mnemonic] = desc
        self._table = MappingProxyType(table)

    def lookup(self, mnemonic: str) -> OpcodeDescriptor:
        """
        Get the descriptor for a mnemonic.

        Raises:
            UnknownOpcode: If the mnemonic is not in the registry
        """
        try:
            return self._table[mnemonic]
        except KeyError:
            raise UnknownOpcode(
                f"Unknown opcode {mnemonic!r}", {'opcode': mnemonic}
            ) from None

    def __contains__(self, mnemonic: object) -> bool:
        return mnemonic in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def descriptors(self) -> List[OpcodeDescriptor]:
        """All descriptors in table order."""
        return list(self._table.values())

    def by_execution_type(self, execution_type: ExecutionType) -> List[OpcodeDescriptor]:
        """Descriptors with the given execution class, in table order."""
        return [d for d in self._table.values() if d.execution_type is execution_type]


# Process-wide registry, initialised once on import
DEFAULT_REGISTRY = OpcodeRegistry(OPCODE_TABLE)


def lookup(mnemonic: str) -> OpcodeDescriptor:
    """Look up a mnemonic in the default registry."""
    return DEFAULT_REGISTRY.lookup(mnemonic)
