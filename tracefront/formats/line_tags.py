"""
Trace line tag constants.

Every physical trace line starts with a tag that determines how it is processed:
- INSTRUCTION: One retired instruction (PC, opcode, operands, memory address)
- FETCH: Fetch latency in ticks for the preceding instruction
- BRANCH: Branch outcome flag for the preceding instruction
- MEMORY: Memory access latency in ticks for the preceding load/store/atomic
"""

from typing import Optional


# Length of every tag, including the separating space
TAG_LENGTH = 3

# Token that ends operand scanning; the next token is the memory address
MEMORY_MARKER = '@'


class LineTag:
    """Trace line tag constants."""

    INSTRUCTION = '@I '
    FETCH = '@F '
    BRANCH = '@B '
    MEMORY = '@M '

    ANNOTATIONS = (FETCH, BRANCH, MEMORY)

    @classmethod
    def name(cls, tag: str) -> str:
        """Get human-readable name for a tag."""
        names = {
            cls.INSTRUCTION: 'INSTRUCTION',
            cls.FETCH: 'FETCH',
            cls.BRANCH: 'BRANCH',
            cls.MEMORY: 'MEMORY',
        }
        return names.get(tag, f'UNKNOWN({tag!r})')

    @classmethod
    def classify(cls, line: str) -> Optional[str]:
        """
        Return the tag a line carries, or None for an unrecognized line.

        Annotation tags are matched on their two-character prefix so that a
        stray annotation with a missing field is still recognized as one.
        """
        if line.startswith(cls.INSTRUCTION):
            return cls.INSTRUCTION
        for tag in cls.ANNOTATIONS:
            if line.startswith(tag[:2]):
                return tag
        return None

    @classmethod
    def is_annotation(cls, line: str) -> bool:
        """Check if a line is a fetch, branch or memory annotation."""
        return cls.classify(line) in cls.ANNOTATIONS

    @classmethod
    def matches(cls, line: str, tag: str) -> bool:
        """Strict check used when a specific annotation is expected."""
        return line.startswith(tag)
