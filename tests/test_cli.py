"""
Tests for the CLI.

CRITICAL TESTS:
1. test_decode_jsonl - One JSON object per instruction on stdout
2. test_decode_fatal_error - Exit 1 with the error code
3. test_config_validate_invalid - Invalid config fails validation
"""

import json

import pytest

from typer.testing import CliRunner

from tracefront import __version__
from tracefront.cli.main import app
from tracefront.isa import DEFAULT_REGISTRY


@pytest.fixture
def runner():
    return CliRunner()


def _json_lines(text):
    return [json.loads(line) for line in text.splitlines() if line.startswith("{")]


class TestVersion:
    """Test version command."""

    def test_version(self, runner):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_version_verbose(self, runner):
        result = runner.invoke(app, ["version", "--verbose"])
        assert result.exit_code == 0
        assert "Opcodes" in result.stdout


class TestDecode:
    """Test decode command."""

    def test_decode_jsonl(self, runner, write_trace, sample_lines):
        """One JSON line per instruction."""
        path = write_trace(sample_lines)
        result = runner.invoke(app, [
            "decode", str(path), "--fetch", "--branch", "--memory",
            "--ticks-per-cycle", "4", "-q",
        ])
        assert result.exit_code == 0
        records = _json_lines(result.stdout)
        assert [r['opcode'] for r in records] == ["add", "ldr", "b.ne"]
        assert records[1]['mem_cycles'] == 10
        assert records[1]['mem_load'] == {'base': '0x8010', 'length': 8}
        assert records[2]['mispredicted'] is True

    def test_decode_without_annotations(self, runner, write_trace):
        path = write_trace(["@I 0x1000 add x1 x2 x3"])
        result = runner.invoke(app, ["decode", str(path), "-q"])
        assert result.exit_code == 0
        (record,) = _json_lines(result.stdout)
        assert record['pc'] == '0x1000'
        assert 'fetch_cycles' not in record

    def test_decode_limit(self, runner, write_trace):
        path = write_trace(["@I 0x1000 nop", "@I 0x1004 nop", "@I 0x1008 nop"])
        result = runner.invoke(app, ["decode", str(path), "-n", "2", "-q"])
        assert result.exit_code == 0
        assert len(_json_lines(result.stdout)) == 2

    def test_decode_limit_stops_before_next_line(self, runner, write_trace):
        """Lines past the limit are never decoded."""
        path = write_trace(["@I 0x1000 nop", "@I 0x1004 frob x1"])
        result = runner.invoke(app, ["decode", str(path), "--limit", "1", "-q"])
        assert result.exit_code == 0
        (record,) = _json_lines(result.stdout)
        assert record['pc'] == '0x1000'

    def test_decode_limit_zero(self, runner, write_trace):
        """A zero limit reads nothing."""
        path = write_trace(["@I 0x1000 frob"])
        result = runner.invoke(app, ["decode", str(path), "--limit", "0", "-q"])
        assert result.exit_code == 0
        assert _json_lines(result.stdout) == []

    def test_decode_output_file(self, runner, write_trace, tmp_path):
        path = write_trace(["@I 0x1000 nop", "@I 0x1004 nop"])
        out = tmp_path / "out.jsonl"
        result = runner.invoke(app, ["decode", str(path), "-o", str(out), "-q"])
        assert result.exit_code == 0
        assert len(_json_lines(out.read_text())) == 2

    def test_decode_table(self, runner, write_trace):
        path = write_trace(["@I 0x2000 ldr x1, 0x10(x5) @ 0x8010"])
        result = runner.invoke(app, ["decode", str(path), "-f", "table", "-q"])
        assert result.exit_code == 0
        assert "0x2000" in result.stdout
        assert "ldr" in result.stdout

    def test_decode_with_config_file(self, runner, write_trace, tmp_path):
        """Config file switches apply."""
        path = write_trace(["@I 0x2000 ldr x1 0x10(x5)", "@M 40"])
        cfg = tmp_path / "tracefront.yml"
        cfg.write_text("tracing:\n  memory: true\ntiming:\n  ticks_per_cycle: 4\n")
        result = runner.invoke(app, ["decode", str(path), "-c", str(cfg), "-q"])
        assert result.exit_code == 0
        (record,) = _json_lines(result.stdout)
        assert record['mem_cycles'] == 10

    def test_decode_fatal_error(self, runner, write_trace):
        """Unknown opcode exits 1 with its code."""
        path = write_trace(["@I 0x1000 nop", "@I 0x1004 frob x1"])
        result = runner.invoke(app, ["decode", str(path), "-q"])
        assert result.exit_code == 1
        assert "E1001" in result.output

    def test_decode_missing_annotation(self, runner, write_trace):
        path = write_trace(["@I 0x1000 nop"])
        result = runner.invoke(app, ["decode", str(path), "--fetch", "-q"])
        assert result.exit_code == 1
        assert "E2002" in result.output

    def test_decode_invalid_utf8(self, runner, tmp_path):
        """Undecodable bytes exit 1 with E2001."""
        path = tmp_path / "bad.trace"
        path.write_bytes(b"@I 0x1000 nop\n@I 0x1004 \xff\xfe\n")
        result = runner.invoke(app, ["decode", str(path), "-q"])
        assert result.exit_code == 1
        assert "E2001" in result.output

    def test_decode_invalid_ticks(self, runner, write_trace):
        path = write_trace(["@I 0x1000 nop"])
        result = runner.invoke(app, ["decode", str(path), "--ticks-per-cycle", "0"])
        assert result.exit_code == 1
        assert "E3002" in result.output

    def test_decode_missing_file(self, runner, tmp_path):
        result = runner.invoke(app, ["decode", str(tmp_path / "absent.trace")])
        assert result.exit_code != 0

    def test_decode_warnings_do_not_fail(self, runner, write_trace):
        """Recoverable issues keep exit code 0."""
        path = write_trace(["@I 0x2000 ldr x1 0x10(x5)", "@I 0x2004 nop"])
        result = runner.invoke(app, ["decode", str(path), "--memory"])
        assert result.exit_code == 0
        assert len(_json_lines(result.stdout)) == 2


class TestOpcodes:
    """Test opcodes command."""

    def test_list_all(self, runner):
        result = runner.invoke(app, ["opcodes"])
        assert result.exit_code == 0
        assert f"Opcodes ({len(DEFAULT_REGISTRY)})" in result.stdout

    def test_filter_class(self, runner):
        result = runner.invoke(app, ["opcodes", "--class", "atomic"])
        assert result.exit_code == 0
        assert "ldxr" in result.stdout
        assert "madd" not in result.stdout


class TestRegisters:
    """Test registers command."""

    def test_registers(self, runner):
        result = runner.invoke(app, ["registers"])
        assert result.exit_code == 0
        assert "int64" in result.stdout
        assert "TPIDR_EL0" in result.stdout


class TestConfig:
    """Test config commands."""

    def test_config_init(self, runner):
        """Config init prints valid YAML."""
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 0
        assert "tracing:" in result.stdout
        assert "ticks_per_cycle: 500" in result.stdout

    def test_config_init_to_file(self, runner, tmp_path):
        path = tmp_path / "tracefront.yml"
        result = runner.invoke(app, ["config", "init", str(path)])
        assert result.exit_code == 0
        assert "ticks_per_cycle" in path.read_text()

    def test_config_validate_valid(self, runner, tmp_path):
        path = tmp_path / "tracefront.yml"
        path.write_text("version: 1\ntiming:\n  ticks_per_cycle: 4\n")
        result = runner.invoke(app, ["config", "validate", str(path)])
        assert result.exit_code == 0
        assert "Valid" in result.stdout

    def test_config_validate_invalid(self, runner, tmp_path):
        path = tmp_path / "tracefront.yml"
        path.write_text("timing:\n  ticks_per_cycle: 0\n")
        result = runner.invoke(app, ["config", "validate", str(path)])
        assert result.exit_code == 1

    def test_config_validate_non_mapping_section(self, runner, tmp_path):
        path = tmp_path / "tracefront.yml"
        path.write_text("version: 1\ntracing: 5\n")
        result = runner.invoke(app, ["config", "validate", str(path)])
        assert result.exit_code == 1
        assert "E3001" in result.stdout

    def test_config_validate_requires_path(self, runner):
        result = runner.invoke(app, ["config", "validate"])
        assert result.exit_code == 1

    def test_config_dump(self, runner, tmp_path):
        path = tmp_path / "tracefront.yml"
        path.write_text("tracing:\n  branch: true\n")
        result = runner.invoke(app, ["config", "dump", str(path)])
        assert result.exit_code == 0
        assert "branch: true" in result.stdout

    def test_unknown_action(self, runner):
        result = runner.invoke(app, ["config", "frob"])
        assert result.exit_code == 1
