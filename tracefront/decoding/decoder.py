"""
Instruction line decoder.

Turns one '@I' line into an Instruction:

    @I 0x2000 ldr x1, 0x10(x5) @ 0x8010
       ^pc    ^op ^operands     ^marker ^address

Operands are assigned to the read/write sets by position using the opcode's
role string. Every failure here is fatal: a corrupt instruction line leaves
nothing sensible to hand downstream.
"""

from typing import List, Optional

from ..core.errors import InvalidTraceLine, MalformedDescriptor, UnknownOpcode, UnknownRegister
from ..formats.line_tags import MEMORY_MARKER, TAG_LENGTH
from ..formats.tokenizer import LineTokenizer
from ..isa.descriptor import MAX_OPERANDS, ExecutionType, MemAccess, OperandRole
from ..isa.instruction import ATOMIC_SENTINEL_ADDRESS, Instruction, MemoryAccess
from ..isa.opcodes import DEFAULT_REGISTRY, OpcodeRegistry
from ..isa.registers import DEFAULT_REGISTERS, RegisterNamespace


U64_MAX = 0xFFFFFFFFFFFFFFFF


def parse_hex(token: str, what: str, line: str) -> int:
    """
    Parse a 64-bit unsigned hexadecimal field ('0x' prefix optional).

    Raises:
        InvalidTraceLine: If the token is missing, not hex, or out of range
    """
    if not token:
        raise InvalidTraceLine(f"Missing {what} in \"{line}\"", {'line': line})
    try:
        value = int(token, 16)
    except ValueError:
        raise InvalidTraceLine(
            f"Invalid {what} {token!r} in \"{line}\"", {'line': line, 'field': token}
        ) from None
    if not 0 <= value <= U64_MAX:
        raise InvalidTraceLine(
            f"{what.capitalize()} {token!r} out of 64-bit range in \"{line}\"",
            {'line': line, 'field': token},
        )
    return value


def is_register_token(token: str) -> bool:
    """Register operands start with a lowercase letter."""
    return bool(token) and 'a' <= token[0] <= 'z'


class InstructionDecoder:
    """
    Decoder for instruction-tag lines.

    Stateless apart from its registry and register namespace, both read-only,
    so one decoder can serve several streams.
    """

    def __init__(self, registry: Optional[OpcodeRegistry] = None,
                 registers: Optional[RegisterNamespace] = None):
        self.registry = registry or DEFAULT_REGISTRY
        self.registers = registers or DEFAULT_REGISTERS

    def decode(self, line: str) -> Instruction:
        """
        Decode one instruction line.

        Args:
            line: Trace line already known to start with the '@I ' tag

        Returns:
            Instruction with static fields populated

        Raises:
            UnknownOpcode: Opcode not in the registry
            UnknownRegister: Operand is not a known register
            MalformedDescriptor: Operand without a role, or memory marker on a
                non-memory opcode
            InvalidTraceLine: Missing or unparsable PC / address
        """
        tok = LineTokenizer(line, TAG_LENGTH)

        pc_token = tok.next()
        opcode = tok.next()
        pc = parse_hex(pc_token, 'program counter', line)
        if not opcode:
            raise InvalidTraceLine(f"Missing opcode in \"{line}\"", {'line': line})

        try:
            desc = self.registry.lookup(opcode)
        except UnknownOpcode:
            raise UnknownOpcode(
                f"Invalid opcode {opcode!r} in \"{line}\"", {'opcode': opcode, 'line': line}
            ) from None

        # Scanning stops silently once MAX_OPERANDS registers are collected
        operands: List[int] = []
        mem_accessed = False
        while len(operands) < MAX_OPERANDS and not tok.at_end:
            token = tok.next()
            if token.startswith(MEMORY_MARKER):
                mem_accessed = True
                break
            if is_register_token(token):
                operands.append(self._resolve_register(token, line))

        instr = Instruction(
            pc=pc,
            length=desc.length,
            execution_type=desc.execution_type,
            opcode=opcode,
        )

        for index, reg_id in enumerate(operands):
            role = desc.roles[index] if index < len(desc.roles) else None
            if role is OperandRole.WRITE:
                instr.reg_writes.append(reg_id)
            elif role is OperandRole.READ:
                instr.reg_reads.append(reg_id)
            else:
                raise MalformedDescriptor(
                    f"Invalid operand {index} for {opcode!r} (roles {desc.role_string!r}) "
                    f"in \"{line}\"",
                    {'opcode': opcode, 'operand_index': index, 'line': line},
                )

        base: Optional[int] = None
        if mem_accessed:
            if desc.mem_access is MemAccess.NONE:
                raise MalformedDescriptor(
                    f"Instruction should not access memory \"{line}\"",
                    {'opcode': opcode, 'line': line},
                )
            address_token = tok.next()
            if desc.execution_type is not ExecutionType.ATOMIC:
                base = parse_hex(address_token, 'memory address', line)

        if desc.execution_type is ExecutionType.ATOMIC:
            base = ATOMIC_SENTINEL_ADDRESS

        if desc.mem_access is MemAccess.LOAD:
            instr.mem_load = MemoryAccess(base, desc.mem_length)
        elif desc.mem_access is MemAccess.STORE:
            instr.mem_store = MemoryAccess(base, desc.mem_length)
        elif desc.mem_access is MemAccess.ATOMIC:
            access = MemoryAccess(base, desc.mem_length)
            instr.mem_load = access
            instr.mem_store = access

        return instr

    def _resolve_register(self, token: str, line: str) -> int:
        try:
            return self.registers.resolve(token)
        except UnknownRegister:
            raise UnknownRegister(
                f"Unknown register {token!r} in \"{line}\"", {'register': token, 'line': line}
            ) from None
