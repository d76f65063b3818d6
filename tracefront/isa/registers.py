"""
Register namespace.

Every register operand resolves to a dense integer identifier. Classes are
laid out contiguously so a single range test tells them apart:

    0..30    x0..x30      64-bit integer
    31       sp           stack pointer
    32       pc           program counter
    33..63   w0..w30      32-bit aliases (distinct ids)
    64..95   v0..v31      vector / FP

System-control registers live in a separate namespace (Csr) and are never
resolved as register operands.
"""

from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Dict, Iterator, Tuple

from ..core.errors import UnknownRegister


INT_REG_COUNT = 31           # x0..x30 / w0..w30
VECTOR_REG_COUNT = 32        # v0..v31

SP = INT_REG_COUNT           # 31
PC = SP + 1                  # 32
INT64_LAST = PC              # last id of the 64-bit block
INT32_FIRST = INT64_LAST + 1                      # 33
INT32_LAST = INT32_FIRST + INT_REG_COUNT - 1      # 63
VECTOR_FIRST = INT32_LAST + 1                     # 64
VECTOR_LAST = VECTOR_FIRST + VECTOR_REG_COUNT - 1  # 95


class RegisterClass(Enum):
    """Register class derived from an identifier."""
    INT64 = "int64"
    INT32 = "int32"
    VECTOR = "vector"


class Csr(IntEnum):
    """Named system-control registers (reserved for a CSR-aware decoder)."""
    SCTLR_EL1 = 0x000
    CPACR_EL1 = 0x002
    TTBR0_EL1 = 0x008
    TTBR1_EL1 = 0x009
    ESR_EL1 = 0x012
    FAR_EL1 = 0x013
    AFSR0_EL1 = 0x014
    AFSR1_EL1 = 0x015
    CONTEXTIDR_EL1 = 0x019
    TPIDR_EL0 = 0x01E
    TPIDR_EL1 = 0x081
    TPIDR_EL2 = 0x082
    TPIDR_EL3 = 0x083
    CNTFRQ_EL0 = 0xC01
    CNTPCT_EL0 = 0xC02
    CNTVCT_EL0 = 0xC03


def _build_names() -> Dict[str, int]:
    names = {}
    for i in range(INT_REG_COUNT):
        names[f"x{i}"] = i
    names['sp'] = SP
    names['pc'] = PC
    for i in range(INT_REG_COUNT):
        names[f"w{i}"] = INT32_FIRST + i
    for i in range(VECTOR_REG_COUNT):
        names[f"v{i}"] = VECTOR_FIRST + i
    return names


class RegisterNamespace:
    """
    Bijection between register mnemonics and dense integer ids.

    Stateless after construction; safe to share between streams.
    """

    def __init__(self):
        names = _build_names()
        self._ids = MappingProxyType(names)
        self._names = MappingProxyType({v: k for k, v in names.items()})

    def resolve(self, name: str) -> int:
        """
        Resolve a register mnemonic to its identifier.

        Raises:
            UnknownRegister: If the name is not a register operand
        """
        try:
            return self._ids[name]
        except KeyError:
            raise UnknownRegister(
                f"Unknown register {name!r}", {'register': name}
            ) from None

    def name_of(self, reg_id: int) -> str:
        """Inverse of resolve()."""
        try:
            return self._names[reg_id]
        except KeyError:
            raise UnknownRegister(
                f"Unknown register id {reg_id}", {'register_id': reg_id}
            ) from None

    def register_class(self, reg_id: int) -> RegisterClass:
        """Classify an identifier by range."""
        if 0 <= reg_id <= INT64_LAST:
            return RegisterClass.INT64
        if INT32_FIRST <= reg_id <= INT32_LAST:
            return RegisterClass.INT32
        if VECTOR_FIRST <= reg_id <= VECTOR_LAST:
            return RegisterClass.VECTOR
        raise UnknownRegister(f"Unknown register id {reg_id}", {'register_id': reg_id})

    def resolve_system(self, name: str) -> Csr:
        """Resolve a system-control register name (case-insensitive)."""
        try:
            return Csr[name.upper()]
        except KeyError:
            raise UnknownRegister(
                f"Unknown system register {name!r}", {'register': name}
            ) from None

    def ranges(self) -> Tuple[Tuple[RegisterClass, int, int], ...]:
        """(class, first id, last id) for each register class."""
        return (
            (RegisterClass.INT64, 0, INT64_LAST),
            (RegisterClass.INT32, INT32_FIRST, INT32_LAST),
            (RegisterClass.VECTOR, VECTOR_FIRST, VECTOR_LAST),
        )

    def __contains__(self, name: object) -> bool:
        return name in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)


DEFAULT_REGISTERS = RegisterNamespace()


def resolve(name: str) -> int:
    """Resolve a register mnemonic in the default namespace."""
    return DEFAULT_REGISTERS.resolve(name)
