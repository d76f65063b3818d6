"""Pytest fixtures shared by the tracefront tests."""

from pathlib import Path
from typing import List

import pytest

from tracefront.config import TraceFrontConfig, TracingConfig, TimingConfig
from tracefront.streams import TraceStream


def make_config(fetch: bool = False, branch: bool = False, memory: bool = False,
                ticks_per_cycle: int = 4) -> TraceFrontConfig:
    """Config with the given annotation switches and a small tick ratio."""
    return TraceFrontConfig(
        tracing=TracingConfig(fetch=fetch, branch=branch, memory=memory),
        timing=TimingConfig(ticks_per_cycle=ticks_per_cycle),
    )


def make_stream(lines: List[str], **kwargs) -> TraceStream:
    """Stream over in-memory lines (terminators added like a file would)."""
    return TraceStream([line + "\n" for line in lines], make_config(**kwargs))


@pytest.fixture
def write_trace(tmp_path):
    """Write trace lines to a file and return its path."""

    def _write(lines: List[str], name: str = "run.trace") -> Path:
        path = tmp_path / name
        path.write_text("".join(line + "\n" for line in lines))
        return path

    return _write


@pytest.fixture
def sample_lines() -> List[str]:
    """Small trace with all three annotation kinds."""
    return [
        "@I 0x1000 add x1, x2, x3",
        "@F 8",
        "@B 1",
        "@I 0x1004 ldr x1, 0x10(x5) @ 0x8010",
        "@F 4",
        "@B 1",
        "@M 40",
        "@I 0x1008 b.ne 0x1000",
        "@F 12",
        "@B 0",
    ]
