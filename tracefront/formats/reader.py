"""
TraceReader - High-level interface for reading trace files.

TraceReader handles:
- Opening plain text and gzip-compressed traces
- Wiring an open handle to a TraceStream
- Streaming instruction iteration

Traces are text, one tag per line. Compression is chosen by suffix only.
"""

import gzip
import logging
from pathlib import Path
from typing import IO, Iterable, Iterator, Optional, Union

from ..config.schema import TraceFrontConfig
from ..isa.instruction import Instruction
from ..streams.cursor import TraceStream


logger = logging.getLogger(__name__)

GZIP_SUFFIX = '.gz'


class TraceReader:
    """
    High-level interface for reading trace files.

    Usage:
        # Option 1: Open and stream separately
        with TraceReader.open(path) as handle:
            for instr in TraceReader.stream(handle, config):
                process(instr)

        # Option 2: Convenience method
        for instr in TraceReader.read_path(path, config):
            process(instr)
    """

    @classmethod
    def open(cls, path: Union[str, Path]) -> IO[str]:
        """
        Open a trace file as text.

        Args:
            path: Path to trace file (gzip if it ends in .gz)

        Returns:
            Text handle positioned at the first line

        Raises:
            FileNotFoundError: If file doesn't exist
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Trace file not found: {path}")

        if path.suffix == GZIP_SUFFIX:
            logger.debug(f"Opening gzip trace {path}")
            return gzip.open(path, 'rt', encoding='utf-8', newline='')

        logger.debug(f"Opening trace {path}")
        return open(path, 'r', encoding='utf-8', newline='')

    @classmethod
    def stream(cls, source: Iterable[str],
               config: Optional[TraceFrontConfig] = None) -> TraceStream:
        """
        Build a stream over an already open source.

        Args:
            source: Any iterable of trace lines (file handle, list, ...)
            config: Tracing configuration (defaults if None)

        Returns:
            TraceStream ready for next() / iteration
        """
        return TraceStream(source, config)

    @classmethod
    def read_path(cls, path: Union[str, Path],
                  config: Optional[TraceFrontConfig] = None) -> Iterator[Instruction]:
        """
        Convenience method: open and decode in one call.

        The file is closed when the generator finishes or is closed.

        Args:
            path: Path to trace file
            config: Tracing configuration (defaults if None)

        Yields:
            Decoded instructions
        """
        with cls.open(path) as handle:
            yield from cls.stream(handle, config)
