"""
Tests for the opcode registry.

CRITICAL TESTS:
1. test_unknown_opcode - Absent mnemonics fail with E1001
2. test_duplicate_rejected - One descriptor per mnemonic
3. test_roles_cover_corpus - Role strings fit every operand count seen in traces
"""

import pytest

from tracefront.core.errors import ErrorCode, MalformedDescriptor, UnknownOpcode
from tracefront.decoding import InstructionDecoder
from tracefront.isa import (
    DEFAULT_REGISTRY,
    MAX_OPERANDS,
    MEM_LENGTHS,
    OPCODE_TABLE,
    ExecutionType,
    MemAccess,
    OpcodeDescriptor,
    OpcodeRegistry,
    OperandRole,
    lookup,
)


# Instruction lines as emitted by the tracer for a representative workload
CORPUS = [
    "@I 0x1000 addi x1, x2, #4",
    "@I 0x1004 add x1, x2, x3",
    "@I 0x1008 sub sp, sp, #0x20",
    "@I 0x100c cmp x1, x2",
    "@I 0x1010 ccmp.eq x1, x2, x3, #0",
    "@I 0x1014 and x1, x2, #0xff",
    "@I 0x1018 eor w1, w2, w3",
    "@I 0x101c lsr x1, x2, #3",
    "@I 0x1020 mov x29, #0",
    "@I 0x1024 adrp x0, 0x4000",
    "@I 0x1028 csel x1, x2, x3",
    "@I 0x102c mul x1, x2, x3",
    "@I 0x1030 madd x1, x2, x3, x4",
    "@I 0x1034 umaddl x1, w2, w3, x4",
    "@I 0x1038 udiv x1, x2, x3",
    "@I 0x103c fadd_d v1, v2, v3",
    "@I 0x1040 fdiv_s v0, v1, v2",
    "@I 0x1044 ldr x1, 0x10(x5) @ 0x8010",
    "@I 0x1048 ldrb w1, (x5) @ 0x8000",
    "@I 0x104c ldp x1, x2, 0x10(sp) @ 0x7ff0",
    "@I 0x1050 str x1, 0x8(x5) @ 0x8008",
    "@I 0x1054 stp x29, x30, -0x10(sp) @ 0x7fe0",
    "@I 0x1058 ldxr x1, (x5) @ 0x9000",
    "@I 0x105c stxr w3, x1, (x5) @ 0x9000",
    "@I 0x1060 ldadd x1, x2, (x5) @ 0x9000",
    "@I 0x1064 cbz x1, 0x1000",
    "@I 0x1068 b.ne 0x1000",
    "@I 0x106c bl 0x2000",
    "@I 0x1070 br x16",
    "@I 0x1074 ret",
    "@I 0x1078 ecall",
    "@I 0x107c csrrwi x1, SCTLR_EL1, #1",
    "@I 0x1080 nop",
]


class TestOpcodeDescriptor:
    """Test descriptor construction and validation."""

    def test_roles_parsed_from_string(self):
        """Role strings become OperandRole tuples."""
        desc = OpcodeDescriptor('add', ExecutionType.INT_BASE, 'WRR')
        assert desc.roles == (OperandRole.WRITE, OperandRole.READ, OperandRole.READ)
        assert desc.role_string == 'WRR'
        assert desc.operand_count == 3

    def test_too_many_roles(self):
        """More roles than MAX_OPERANDS is rejected."""
        with pytest.raises(MalformedDescriptor):
            OpcodeDescriptor('bad', ExecutionType.INT_BASE, 'W' * (MAX_OPERANDS + 1))

    def test_invalid_role_character(self):
        """Only R and W are valid roles."""
        with pytest.raises(MalformedDescriptor):
            OpcodeDescriptor('bad', ExecutionType.INT_BASE, 'WX')

    def test_memory_class_requires_access(self):
        """A LOAD opcode must declare a load access."""
        with pytest.raises(MalformedDescriptor):
            OpcodeDescriptor('ld', ExecutionType.LOAD, 'WR')

    def test_access_class_mismatch(self):
        """Store access on a load opcode is rejected."""
        with pytest.raises(MalformedDescriptor):
            OpcodeDescriptor('ld', ExecutionType.LOAD, 'WR', MemAccess.STORE, 8)

    def test_invalid_memory_length(self):
        """Memory length must be one of the supported widths."""
        with pytest.raises(MalformedDescriptor):
            OpcodeDescriptor('ld', ExecutionType.LOAD, 'WR', MemAccess.LOAD, 3)

    def test_length_without_access(self):
        """Non-memory opcodes carry no memory length."""
        with pytest.raises(MalformedDescriptor):
            OpcodeDescriptor('add', ExecutionType.INT_BASE, 'WRR', MemAccess.NONE, 8)

    def test_invalid_instruction_length(self):
        """Instruction length is 2 or 4 bytes."""
        with pytest.raises(MalformedDescriptor):
            OpcodeDescriptor('add', ExecutionType.INT_BASE, 'WRR', length=3)

    def test_compressed_length_allowed(self):
        """Two-byte instructions are valid."""
        desc = OpcodeDescriptor('c.add', ExecutionType.INT_BASE, 'WR', length=2)
        assert desc.length == 2

    def test_to_dict(self):
        """Descriptor serializes to plain values."""
        desc = lookup('ldr')
        assert desc.to_dict() == {
            'mnemonic': 'ldr',
            'execution_type': 'load',
            'roles': 'WR',
            'mem_access': 'load',
            'mem_length': 8,
            'length': 4,
        }


class TestOpcodeRegistry:
    """Test registry lookup and immutability."""

    def test_lookup_known(self):
        """Known mnemonic returns its descriptor."""
        desc = DEFAULT_REGISTRY.lookup('add')
        assert desc.execution_type is ExecutionType.INT_BASE
        assert desc.role_string == 'WRR'

    def test_conditional_suffix_mnemonics(self):
        """Mnemonics with embedded punctuation are distinct keys."""
        assert lookup('b.eq').execution_type is ExecutionType.BRANCH_COND
        assert lookup('ccmp.ne').execution_type is ExecutionType.INT_BASE

    def test_unknown_opcode(self):
        """Absent mnemonic raises UnknownOpcode with E1001."""
        with pytest.raises(UnknownOpcode) as exc_info:
            lookup('frobnicate')
        assert exc_info.value.code is ErrorCode.E1001_UNKNOWN_OPCODE
        assert exc_info.value.context['opcode'] == 'frobnicate'

    def test_lookup_is_case_sensitive(self):
        """Upper-case mnemonics are not folded."""
        with pytest.raises(UnknownOpcode):
            lookup('ADD')

    def test_duplicate_rejected(self):
        """Two descriptors for one mnemonic fail construction."""
        entries = [
            OpcodeDescriptor('add', ExecutionType.INT_BASE, 'WRR'),
            OpcodeDescriptor('add', ExecutionType.INT_MUL, 'WRR'),
        ]
        with pytest.raises(MalformedDescriptor):
            OpcodeRegistry(entries)

    def test_no_mutation(self):
        """Backing mapping cannot be written."""
        with pytest.raises(TypeError):
            DEFAULT_REGISTRY._table['new'] = lookup('add')
        assert not hasattr(DEFAULT_REGISTRY, 'register')

    def test_iteration_in_table_order(self):
        """Iteration yields mnemonics in table order."""
        assert list(DEFAULT_REGISTRY) == [d.mnemonic for d in OPCODE_TABLE]
        assert len(DEFAULT_REGISTRY) == len(OPCODE_TABLE)
        assert 'ldr' in DEFAULT_REGISTRY
        assert 'frobnicate' not in DEFAULT_REGISTRY

    def test_by_execution_type(self):
        """Filtering by class returns only that class."""
        loads = DEFAULT_REGISTRY.by_execution_type(ExecutionType.LOAD)
        assert {'ldr', 'ldp'} <= {d.mnemonic for d in loads}
        assert all(d.execution_type is ExecutionType.LOAD for d in loads)

    def test_custom_registry(self):
        """A registry can be built for another table."""
        registry = OpcodeRegistry([OpcodeDescriptor('c.nop', ExecutionType.INT_BASE, length=2)])
        assert registry.lookup('c.nop').length == 2
        with pytest.raises(UnknownOpcode):
            registry.lookup('add')


class TestTableConsistency:
    """Test the shipped opcode table as a whole."""

    def test_memory_lengths(self):
        """Every memory opcode uses a supported width."""
        for desc in DEFAULT_REGISTRY.descriptors():
            if desc.mem_access is MemAccess.NONE:
                assert desc.mem_length == 0, desc.mnemonic
            else:
                assert desc.mem_length in MEM_LENGTHS, desc.mnemonic

    def test_known_widths(self):
        """Pair loads and stores move 16 bytes."""
        assert lookup('ldp').mem_length == 16
        assert lookup('stp').mem_length == 16
        assert lookup('ldrb').mem_length == 4
        assert lookup('str').mem_length == 8

    def test_umaddl_has_four_operands(self):
        """umaddl writes one register and reads three."""
        assert lookup('umaddl').role_string == 'WRRR'

    def test_roles_cover_corpus(self):
        """Every register operand in the corpus has a role."""
        decoder = InstructionDecoder()
        for line in CORPUS:
            instr = decoder.decode(line)
            used = len(instr.reg_reads) + len(instr.reg_writes)
            assert used <= lookup(instr.opcode).operand_count, line
