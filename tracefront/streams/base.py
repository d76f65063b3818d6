"""
Base class for instruction streams.

InstructionStream is the pull interface every ISA-specific stream implements.
The downstream timing model only ever calls next() (or iterates), so a stream
for another instruction-set family plugs in by subclassing this and supplying
its own registry.
"""

from abc import ABC, abstractmethod
from typing import Iterator, Optional

from ..isa.instruction import Instruction


class InstructionStream(ABC):
    """
    Abstract pull-based source of decoded instructions.

    Streams are finite and non-restartable: once next() has returned None it
    keeps returning None.
    """

    @abstractmethod
    def next(self) -> Optional[Instruction]:
        """
        Produce the next decoded instruction.

        Returns:
            The next Instruction, or None at end of stream.
        """
        pass

    def __iter__(self) -> Iterator[Instruction]:
        return self

    def __next__(self) -> Instruction:
        instr = self.next()
        if instr is None:
            raise StopIteration
        return instr
