"""
tracefront CLI.

Commands:
- decode: Decode a trace into instruction events (JSON lines or a table)
- opcodes: List the opcode registry
- registers: Show the register namespace
- config: Configuration management (init|validate|dump)
- version: Show version information
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import IO, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .. import __version__
from ..config import TraceFrontConfig, load_config, generate_default_config
from ..core.errors import ConfigError, ErrorCode, TraceDecodeError
from ..formats.reader import TraceReader
from ..isa.descriptor import ExecutionType
from ..isa.instruction import Instruction
from ..isa.opcodes import DEFAULT_REGISTRY
from ..isa.registers import Csr, DEFAULT_REGISTERS


app = typer.Typer(
    name="tracefront",
    help="Instruction-trace front end for cycle-approximate core models",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


class OutputFormat(str, Enum):
    jsonl = "jsonl"
    table = "table"


def _setup_logging(verbose: bool) -> None:
    """Route package warnings (and debug output with -v) to stderr."""
    level = logging.DEBUG if verbose else logging.WARNING
    package_logger = logging.getLogger("tracefront")

    for handler in list(package_logger.handlers):
        if isinstance(handler, RichHandler):
            package_logger.removeHandler(handler)

    handler = RichHandler(
        console=err_console,
        level=level,
        show_time=False,
        show_path=False,
        markup=False,
    )
    package_logger.addHandler(handler)
    package_logger.setLevel(level)


def _register_names(reg_ids: List[int]) -> str:
    return ", ".join(DEFAULT_REGISTERS.name_of(r) for r in reg_ids)


def _memory_cell(instr: Instruction) -> str:
    access = instr.mem_load or instr.mem_store
    if access is None:
        return ""
    kind = "ld/st" if instr.mem_load and instr.mem_store else ("ld" if instr.mem_load else "st")
    base = f"0x{access.base:x}" if access.base is not None else "?"
    return f"{kind} {base} [{access.length}]"


def _optional(value) -> str:
    return "" if value is None else str(value)


def _instruction_table(instructions: List[Instruction]) -> Table:
    table = Table(title="Instructions")
    table.add_column("PC", style="cyan")
    table.add_column("Opcode")
    table.add_column("Class")
    table.add_column("Reads")
    table.add_column("Writes")
    table.add_column("Memory")
    table.add_column("Fetch", justify="right")
    table.add_column("Mispred", justify="center")
    table.add_column("Mem", justify="right")

    for instr in instructions:
        table.add_row(
            f"0x{instr.pc:x}",
            escape(instr.opcode),
            instr.execution_type.value,
            _register_names(instr.reg_reads),
            _register_names(instr.reg_writes),
            escape(_memory_cell(instr)),
            _optional(instr.fetch_cycles),
            _optional(instr.mispredicted),
            _optional(instr.mem_cycles),
        )
    return table


def _print_issue_summary(stream, count: int) -> None:
    """Print instruction and warning counts to stderr."""
    err_console.print()
    table = Table(title="Summary")
    table.add_column("Metric")
    table.add_column("Value", justify="right")

    table.add_row("Lines", f"{stream.line_number:,}")
    table.add_row("Instructions", f"{count:,}")

    by_code = {}
    for issue in stream.issues:
        by_code[issue.code] = by_code.get(issue.code, 0) + 1
    for code, n in sorted(by_code.items(), key=lambda item: item[0].value):
        table.add_row(f"{code.value} {code.name[6:].replace('_', ' ').lower()}", str(n))

    err_console.print(table)


def _load_cli_config(config_path: Optional[Path]) -> TraceFrontConfig:
    try:
        return load_config(config_path)
    except (ConfigError, FileNotFoundError) as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1)


# === DECODE COMMAND ===

@app.command()
def decode(
    trace_file: Path = typer.Argument(..., help="Trace file path (.gz allowed)", exists=True, dir_okay=False),
    fetch: Optional[bool] = typer.Option(None, "--fetch/--no-fetch", help="Trace has @F lines"),
    branch: Optional[bool] = typer.Option(None, "--branch/--no-branch", help="Trace has @B lines"),
    memory: Optional[bool] = typer.Option(None, "--memory/--no-memory", help="Trace has @M lines"),
    ticks_per_cycle: Optional[int] = typer.Option(None, "--ticks-per-cycle", help="Simulator ticks per core cycle"),
    config_path: Optional[Path] = typer.Option(None, "-c", "--config", exists=True, dir_okay=False),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Output file"),
    limit: Optional[int] = typer.Option(None, "-n", "--limit", min=0, help="Stop after N instructions"),
    format: OutputFormat = typer.Option(OutputFormat.jsonl, "-f", "--format"),
    quiet: bool = typer.Option(False, "-q", "--quiet"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
):
    """Decode a trace file into instruction events."""
    _setup_logging(verbose)

    cfg = _load_cli_config(config_path)
    if fetch is not None:
        cfg.tracing.fetch = fetch
    if branch is not None:
        cfg.tracing.branch = branch
    if memory is not None:
        cfg.tracing.memory = memory
    if ticks_per_cycle is not None:
        cfg.timing.ticks_per_cycle = ticks_per_cycle

    logger.debug(f"Effective config: {cfg.to_dict()}")

    errors = cfg.validate()
    if errors:
        err_console.print(f"[red]{ErrorCode.E3002_VALIDATION_FAILED.value}:[/] Invalid configuration")
        for e in errors:
            err_console.print(f"  - {escape(e)}")
        raise typer.Exit(1)

    if not quiet:
        err_console.print(f"[bold blue]tracefront v{__version__}[/]")
        err_console.print(f"Decoding: {escape(str(trace_file))}")
        enabled = [name for name in ('fetch', 'branch', 'memory') if getattr(cfg.tracing, name)]
        err_console.print(
            f"Annotations: {', '.join(enabled) or 'none'}, "
            f"{cfg.timing.ticks_per_cycle} ticks/cycle"
        )

    out: Optional[IO[str]] = open(output, 'w') if output else None
    instructions: List[Instruction] = []
    count = 0

    try:
        with TraceReader.open(trace_file) as handle:
            stream = TraceReader.stream(handle, cfg)
            while limit is None or count < limit:
                instr = stream.next()
                if instr is None:
                    break
                count += 1
                if format == OutputFormat.jsonl:
                    line = json.dumps(instr.to_dict())
                    if out:
                        out.write(line + "\n")
                    else:
                        typer.echo(line)
                else:
                    instructions.append(instr)
    except TraceDecodeError as e:
        err_console.print(f"[red]{e.code.value}:[/] {escape(e.detail)}")
        if 'line_number' in e.context:
            err_console.print(f"  at line {e.context['line_number']}")
        raise typer.Exit(1)
    finally:
        if out:
            out.close()

    if format == OutputFormat.table:
        table = _instruction_table(instructions)
        if output:
            with open(output, 'w') as f:
                Console(file=f, width=160).print(table)
        else:
            console.print(table)

    if not quiet:
        _print_issue_summary(stream, count)
        if output:
            err_console.print(f"[green]Written to:[/] {escape(str(output))}")


# === OPCODES COMMAND ===

@app.command()
def opcodes(
    execution_class: Optional[ExecutionType] = typer.Option(
        None, "--class", help="Only show opcodes of this execution class"
    ),
):
    """List the opcode registry."""
    if execution_class is not None:
        descriptors = DEFAULT_REGISTRY.by_execution_type(execution_class)
    else:
        descriptors = DEFAULT_REGISTRY.descriptors()

    table = Table(title=f"Opcodes ({len(descriptors)})")
    table.add_column("Mnemonic", style="cyan")
    table.add_column("Class")
    table.add_column("Roles")
    table.add_column("Memory")
    table.add_column("Bytes", justify="right")
    table.add_column("Length", justify="right")

    for desc in descriptors:
        table.add_row(
            desc.mnemonic,
            desc.execution_type.value,
            desc.role_string or "-",
            desc.mem_access.value,
            str(desc.mem_length) if desc.mem_length else "-",
            str(desc.length),
        )

    console.print(table)


# === REGISTERS COMMAND ===

@app.command()
def registers():
    """Show the register namespace."""
    table = Table(title="Register operands")
    table.add_column("Class", style="cyan")
    table.add_column("Ids", justify="right")
    table.add_column("Names")

    for reg_class, first, last in DEFAULT_REGISTERS.ranges():
        table.add_row(
            reg_class.value,
            f"{first}..{last}",
            f"{DEFAULT_REGISTERS.name_of(first)} .. {DEFAULT_REGISTERS.name_of(last)}",
        )
    console.print(table)

    csr_table = Table(title="System-control registers")
    csr_table.add_column("Name", style="cyan")
    csr_table.add_column("Number", justify="right")
    for csr in Csr:
        csr_table.add_row(csr.name, f"0x{csr.value:03x}")
    console.print(csr_table)


# === CONFIG COMMAND ===

@app.command("config")
def config_cmd(
    action: str = typer.Argument(..., help="Action: init|validate|dump"),
    path: Optional[Path] = typer.Argument(None, help="Config file path"),
):
    """Configuration management."""
    if action == "init":
        if path:
            path.write_text(generate_default_config())
            console.print(f"[green]Written to:[/] {escape(str(path))}")
        else:
            typer.echo(generate_default_config())

    elif action == "validate":
        if not path:
            console.print("[red]Path required for validate[/]")
            raise typer.Exit(1)
        try:
            cfg = TraceFrontConfig.load(path)
        except (ConfigError, FileNotFoundError) as e:
            console.print(f"[red]Error:[/] {escape(str(e))}")
            raise typer.Exit(1)
        errors = cfg.validate()
        if errors:
            console.print(f"[red]{ErrorCode.E3002_VALIDATION_FAILED.value}: Invalid configuration:[/]")
            for e in errors:
                console.print(f"  - {escape(e)}")
            raise typer.Exit(1)
        console.print(f"[green]Valid:[/] {escape(str(path))}")

    elif action == "dump":
        try:
            cfg = TraceFrontConfig.load(path) if path else load_config()
        except (ConfigError, FileNotFoundError) as e:
            console.print(f"[red]Error:[/] {escape(str(e))}")
            raise typer.Exit(1)
        typer.echo(cfg.to_yaml())

    else:
        console.print(f"[red]Unknown action:[/] {escape(action)}")
        console.print("Valid actions: init, validate, dump")
        raise typer.Exit(1)


# === VERSION COMMAND ===

@app.command()
def version(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show detailed info"),
):
    """Show version information."""
    console.print(f"[bold blue]tracefront v{__version__}[/]")

    if verbose:
        console.print()
        table = Table(show_header=False, box=None)
        table.add_column("Feature", style="cyan")
        table.add_column("Status", style="green")

        table.add_row("Opcodes", f"{len(DEFAULT_REGISTRY)} mnemonics")
        table.add_row("Registers", f"{len(DEFAULT_REGISTERS)} operand names, {len(Csr)} system")
        table.add_row("Annotations", "@F fetch, @B branch, @M memory")
        table.add_row("Compression", "gzip (.gz)")

        console.print(Panel.fit(table, title="Capabilities", border_style="blue"))


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
