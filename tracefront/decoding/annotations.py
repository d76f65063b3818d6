"""
Annotation reader.

After each '@I' line the tracer may emit up to three annotation lines, in a
fixed order, depending on which features were traced:

    @I 0x2000 ldr x1 0x10(x5) @ 0x8010
    @F 1500        fetch latency (ticks)        -- fetch tracing
    @B 1           branch outcome (0=mispred)   -- branch tracing
    @M 4000        memory latency (ticks)       -- memory tracing, load/store/atomic only

Fetch and branch lines are mandatory when enabled. The memory line is not:
the tracer drops it around some atomic sequences, so a missing '@M' is logged,
defaulted to 1 cycle, and the unmatched line is handed back for replay.
"""

import logging
from typing import Callable, Optional

from ..config.schema import DEFAULT_TICKS_PER_CYCLE, TracingConfig
from ..core.errors import (
    ErrorCode,
    InvalidTraceLine,
    MalformedDescriptor,
    MissingAnnotation,
    TraceIssue,
)
from ..formats.line_tags import LineTag, TAG_LENGTH
from ..formats.tokenizer import next_token
from ..isa.instruction import Instruction


logger = logging.getLogger(__name__)

# Returns the next raw trace line, or None at end of source
LinePuller = Callable[[], Optional[str]]

# Receives every recoverable condition after it has been logged
IssueSink = Callable[[TraceIssue], None]

# Memory latency assumed when the '@M' line is missing
DEFAULT_MEM_CYCLES = 1


def ticks_to_cycles(ticks: int, ticks_per_cycle: int) -> int:
    """
    Convert simulator ticks to core cycles (floor division).

    Examples:
        ticks_to_cycles(7, 4) = 1
        ticks_to_cycles(8, 4) = 2
    """
    if ticks_per_cycle <= 0:
        raise ValueError(f"ticks_per_cycle must be positive, got {ticks_per_cycle}")
    return ticks // ticks_per_cycle


def _field(line: str) -> str:
    token, _ = next_token(line, TAG_LENGTH)
    return token


class AnnotationReader:
    """
    Consume the annotation lines that follow one instruction line.

    Usage:
        reader = AnnotationReader(TracingConfig(memory=True), ticks_per_cycle=4)
        replay = reader.read(instr, instr_line, pull)
        # replay is a line to reinterpret as the next input, or None
    """

    def __init__(self, tracing: Optional[TracingConfig] = None,
                 ticks_per_cycle: int = DEFAULT_TICKS_PER_CYCLE,
                 on_issue: Optional[IssueSink] = None):
        if ticks_per_cycle <= 0:
            raise ValueError(f"ticks_per_cycle must be positive, got {ticks_per_cycle}")
        self.tracing = tracing or TracingConfig()
        self.ticks_per_cycle = ticks_per_cycle
        self.on_issue = on_issue

    def read(self, instr: Instruction, instruction_line: str,
             pull: LinePuller) -> Optional[str]:
        """
        Populate the enabled annotation fields of instr.

        Args:
            instr: Freshly decoded instruction
            instruction_line: The '@I' line instr came from (for messages)
            pull: Source of the following trace lines

        Returns:
            A line that was read but belongs to the next record, or None.

        Raises:
            MissingAnnotation: Fetch or branch line expected but absent
            MalformedDescriptor: Branch flag is neither '0' nor '1'
            InvalidTraceLine: Tick count is not a decimal integer
        """
        if self.tracing.fetch:
            fetch_line = self._expect(LineTag.FETCH, 'fetch cycles', instruction_line, pull)
            instr.fetch_cycles = self.parse_cycles(fetch_line)

        if self.tracing.branch:
            branch_line = self._expect(
                LineTag.BRANCH, 'branch prediction result', instruction_line, pull
            )
            instr.mispredicted = self.parse_branch(branch_line)

            if instr.mispredicted and not instr.execution_type.is_control:
                # Flag is kept as reported
                self._report(TraceIssue(
                    code=ErrorCode.E2003_UNEXPECTED_MISPREDICTION,
                    context={'line': instruction_line},
                ))

        if self.tracing.memory and instr.execution_type.is_memory:
            mem_line = pull()
            if mem_line is not None and LineTag.matches(mem_line, LineTag.MEMORY):
                instr.mem_cycles = self.parse_cycles(mem_line)
            else:
                self._report(TraceIssue(
                    code=ErrorCode.E2004_MISSING_MEMORY_ANNOTATION,
                    context={'line': instruction_line, 'got': mem_line},
                ))
                instr.mem_cycles = DEFAULT_MEM_CYCLES
                return mem_line

        return None

    def parse_cycles(self, line: str) -> int:
        """Parse the tick field of an '@F' / '@M' line and convert to cycles."""
        token = _field(line)
        if not (token.isascii() and token.isdigit()):
            raise InvalidTraceLine(
                f"Invalid tick count {token!r} in \"{line}\"", {'line': line}
            )
        return ticks_to_cycles(int(token), self.ticks_per_cycle)

    @staticmethod
    def parse_branch(line: str) -> bool:
        """
        Parse an '@B' line.

        Returns:
            True if the branch was mispredicted ('0'), False if it was
            predicted correctly ('1').
        """
        token = _field(line)
        if token[:1] == '0':
            return True
        if token[:1] == '1':
            return False
        raise MalformedDescriptor(
            f"Invalid branch prediction result {token!r} in \"{line}\"", {'line': line}
        )

    def _expect(self, tag: str, what: str, instruction_line: str,
                pull: LinePuller) -> str:
        line = pull()
        if line is None or not LineTag.matches(line, tag):
            raise MissingAnnotation(
                f"Expecting {what} for \"{instruction_line}\" but getting \"{line or ''}\"",
                {'line': instruction_line, 'got': line, 'expected': tag.strip()},
            )
        return line

    def _report(self, issue: TraceIssue) -> None:
        logger.warning(issue.message)
        if self.on_issue is not None:
            self.on_issue(issue)
