"""
Static per-opcode semantics.

An OpcodeDescriptor bundles everything the decoder needs to know about one
mnemonic:
- Execution class (what kind of functional unit retires it)
- Operand roles (which operand positions are read vs written)
- Memory access kind and length in bytes
- Instruction length in bytes

Descriptors validate themselves on construction so that a bad table entry
fails at import time rather than on the first trace that exercises it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from ..core.errors import MalformedDescriptor


# Maximum register operands tracked per instruction
MAX_OPERANDS = 4

# Legal memory access lengths (bytes) for load/store/atomic opcodes
MEM_LENGTHS = (4, 8, 16)

# Legal instruction lengths (bytes)
INSTRUCTION_LENGTHS = (2, 4)


class ExecutionType(Enum):
    """Closed set of execution classes."""
    INT_BASE = "int_base"
    INT_MUL = "int_mul"
    INT_DIV = "int_div"
    FP_BASE = "fp_base"
    FP_MUL = "fp_mul"
    FP_DIV = "fp_div"
    LOAD = "load"
    STORE = "store"
    BRANCH_COND = "branch_cond"
    BRANCH_UNCOND = "branch_uncond"
    SYSCALL = "syscall"
    ATOMIC = "atomic"
    OTHER = "other"

    @property
    def is_memory(self) -> bool:
        """True for classes that touch data memory."""
        return self in (ExecutionType.LOAD, ExecutionType.STORE, ExecutionType.ATOMIC)

    @property
    def is_control(self) -> bool:
        """True for classes that may legitimately be mispredicted."""
        return self in (
            ExecutionType.BRANCH_COND,
            ExecutionType.BRANCH_UNCOND,
            ExecutionType.SYSCALL,
        )


class MemAccess(Enum):
    """Memory access kind of an opcode."""
    NONE = "none"
    LOAD = "load"
    STORE = "store"
    ATOMIC = "atomic"


class OperandRole(Enum):
    """Role of one register operand position."""
    READ = "R"
    WRITE = "W"


# Execution class each memory access kind must be paired with
_CLASS_FOR_ACCESS = {
    MemAccess.LOAD: ExecutionType.LOAD,
    MemAccess.STORE: ExecutionType.STORE,
    MemAccess.ATOMIC: ExecutionType.ATOMIC,
}


def parse_roles(roles: Union[str, Tuple[OperandRole, ...]]) -> Tuple[OperandRole, ...]:
    """
    Turn a compact role string ("WRR") into a tuple of OperandRole.

    Raises:
        MalformedDescriptor: If a character is neither R nor W
    """
    if isinstance(roles, tuple):
        return roles

    parsed = []
    for ch in roles:
        try:
            parsed.append(OperandRole(ch))
        except ValueError:
            raise MalformedDescriptor(
                f"Invalid operand role {ch!r} in {roles!r}",
                {'roles': roles},
            ) from None
    return tuple(parsed)


@dataclass(frozen=True)
class OpcodeDescriptor:
    """
    Static semantic record for one opcode mnemonic.

    Attributes:
        mnemonic: Opcode as printed by the tracer (case-sensitive)
        execution_type: Execution class
        roles: One OperandRole per operand position
        mem_access: Memory access kind
        mem_length: Bytes accessed (0 when mem_access is NONE)
        length: Instruction length in bytes
    """
    mnemonic: str
    execution_type: ExecutionType
    roles: Tuple[OperandRole, ...] = ()
    mem_access: MemAccess = MemAccess.NONE
    mem_length: int = 0
    length: int = 4

    def __post_init__(self):
        """Validate descriptor fields."""
        # Frozen dataclass: normalise via object.__setattr__
        object.__setattr__(self, 'roles', parse_roles(self.roles))

        errors = self.validate()
        if errors:
            raise MalformedDescriptor(
                f"Invalid descriptor for {self.mnemonic!r}: {'; '.join(errors)}",
                {'mnemonic': self.mnemonic, 'errors': errors},
            )

    @property
    def role_string(self) -> str:
        """Compact role string, e.g. 'WRR'."""
        return ''.join(role.value for role in self.roles)

    @property
    def operand_count(self) -> int:
        return len(self.roles)

    def validate(self):
        """
        Check structural invariants.

        Returns:
            List of validation error messages (empty if valid).
        """
        errors = []

        if not self.mnemonic or any(ch.isspace() for ch in self.mnemonic):
            errors.append(f"Invalid mnemonic: {self.mnemonic!r}")

        if len(self.roles) > MAX_OPERANDS:
            errors.append(
                f"{len(self.roles)} operand roles exceed maximum of {MAX_OPERANDS}"
            )

        if self.mem_access is MemAccess.NONE:
            if self.mem_length != 0:
                errors.append(f"Memory length {self.mem_length} without memory access")
            if self.execution_type.is_memory:
                errors.append(f"{self.execution_type.value} opcode without memory access")
        else:
            if self.mem_length not in MEM_LENGTHS:
                errors.append(f"Memory length {self.mem_length} not in {MEM_LENGTHS}")
            expected = _CLASS_FOR_ACCESS[self.mem_access]
            if self.execution_type is not expected:
                errors.append(
                    f"{self.mem_access.value} access requires {expected.value} class, "
                    f"got {self.execution_type.value}"
                )

        if self.length not in INSTRUCTION_LENGTHS:
            errors.append(f"Instruction length {self.length} not in {INSTRUCTION_LENGTHS}")

        return errors

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'mnemonic': self.mnemonic,
            'execution_type': self.execution_type.value,
            'roles': self.role_string,
            'mem_access': self.mem_access.value,
            'mem_length': self.mem_length,
            'length': self.length,
        }
