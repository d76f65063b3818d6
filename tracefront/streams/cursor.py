"""
Trace stream cursor.

TraceStream pulls raw lines from a source and produces one Instruction per
'@I' line, running the decoder and the annotation reader in turn.

Two states:
    SOURCING   - the next line comes from the source
    REPLAYING  - one line read out of turn (a missing '@M' left it behind)
                 is waiting to be reinterpreted; it is consumed exactly once

Transition rule: the annotation reader may hand back one line, which moves
the cursor to REPLAYING; taking that line moves it back to SOURCING.
"""

import logging
from enum import Enum
from typing import Iterable, Iterator, List, Optional

from .base import InstructionStream
from ..config.schema import TraceFrontConfig
from ..core.errors import ConfigError, ErrorCode, InvalidTraceLine, TraceDecodeError, TraceIssue
from ..decoding.annotations import AnnotationReader
from ..decoding.decoder import InstructionDecoder
from ..formats.line_tags import LineTag
from ..isa.instruction import Instruction
from ..isa.opcodes import OpcodeRegistry
from ..isa.registers import RegisterNamespace


logger = logging.getLogger(__name__)


class CursorState(Enum):
    SOURCING = "sourcing"
    REPLAYING = "replaying"


class TraceStream(InstructionStream):
    """
    Pull-based decoder over a line-oriented trace.

    Example:
        with open('run.trace') as f:
            stream = TraceStream(f, config)
            for instr in stream:
                model.retire(instr)

    The stream owns its lookahead slot and must not be shared across threads.
    Recoverable conditions are logged and collected in `issues`; fatal ones
    raise TraceDecodeError subclasses.
    """

    def __init__(self, source: Iterable[str],
                 config: Optional[TraceFrontConfig] = None,
                 registry: Optional[OpcodeRegistry] = None,
                 registers: Optional[RegisterNamespace] = None):
        self.config = config or TraceFrontConfig()

        errors = self.config.validate()
        if errors:
            raise ConfigError('; '.join(errors), ErrorCode.E3002_VALIDATION_FAILED)

        self._source: Iterator[str] = iter(source)
        self._replay: Optional[str] = None
        self._exhausted = False

        self.decoder = InstructionDecoder(registry, registers)
        self.annotations = AnnotationReader(
            self.config.tracing,
            self.config.timing.ticks_per_cycle,
            on_issue=self._record,
        )

        self.issues: List[TraceIssue] = []
        self.last_instruction_line = ''
        self.line_number = 0
        self.instruction_count = 0

    @property
    def state(self) -> CursorState:
        """Current cursor state."""
        if self._replay is not None:
            return CursorState.REPLAYING
        return CursorState.SOURCING

    def next(self) -> Optional[Instruction]:
        """
        Decode the next instruction.

        Returns:
            The next Instruction, or None once the source is exhausted and no
            replay line is pending.

        Raises:
            TraceDecodeError: On any fatal trace condition
        """
        while True:
            line = self._take()
            if line is None:
                return None

            tag = LineTag.classify(line)

            if tag == LineTag.INSTRUCTION:
                try:
                    instr = self.decoder.decode(line)
                    self.last_instruction_line = line
                    self._replay = self.annotations.read(instr, line, self._pull)
                except TraceDecodeError as e:
                    e.context.setdefault('line_number', self.line_number)
                    raise
                if self._replay is not None:
                    logger.debug(f"Replaying line {self.line_number}: {self._replay!r}")
                self.instruction_count += 1
                return instr

            if tag is not None:
                # Probably because of atomic instructions
                self._report(TraceIssue(
                    code=ErrorCode.E2005_STRAY_ANNOTATION,
                    context={'line': line, 'after': self.last_instruction_line},
                ))
                continue

            raise InvalidTraceLine(
                f"Invalid trace line \"{line}\"",
                {'line': line, 'line_number': self.line_number},
            )

    def _take(self) -> Optional[str]:
        """Next input line: the replay slot first, then the source."""
        if self._replay is not None:
            line, self._replay = self._replay, None
            return line
        return self._pull()

    def _pull(self) -> Optional[str]:
        """Next physical line from the source, without its terminator."""
        if self._exhausted:
            return None
        try:
            raw = next(self._source)
        except StopIteration:
            self._exhausted = True
            return None
        except UnicodeDecodeError as e:
            # Approximate: text handles decode ahead in chunks
            raise InvalidTraceLine(
                f"Trace is not valid UTF-8 ({e.reason})",
                {'line_number': self.line_number + 1},
            ) from e
        self.line_number += 1
        return raw.rstrip('\r\n')

    def _record(self, issue: TraceIssue) -> None:
        self.issues.append(issue)

    def _report(self, issue: TraceIssue) -> None:
        logger.warning(issue.message)
        self._record(issue)
