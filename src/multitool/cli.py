from __future__ import annotations

from pathlib import Path

import typer

from multitool.ledger import Ledger

app = typer.Typer(name="multitool", help="Test accounting for contract scripts")
address_app = typer.Typer(name="address", help="Read and write contract address files")
app.add_typer(address_app, name="address")

CONFIG_HELP = "Path to multitool YAML config (defaults to ./multitool.yaml if present)"
RECORD_HELP = "Record file to use instead of the configured one"


def _open_ledger(config: str | None, record_file: str | None, verbose: bool) -> Ledger:
    """Build a ledger from config and command line overrides, or exit with an error."""
    from pydantic import ValidationError

    from multitool.config import resolve_config
    from multitool.verbose import setup_logger

    try:
        cfg = resolve_config(config)
    except (FileNotFoundError, ValidationError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    logger = setup_logger(
        Path(cfg.debug_log) if cfg.debug_log else None,
        verbose=verbose or cfg.verbose,
        logger_name="multitool",
    )
    ledger = Ledger(record_file or cfg.record_file, logger=logger)
    logger.debug(f"Using record file {ledger.record_file}")
    return ledger


@app.command()
def reset(
    config: str | None = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    record_file: str | None = typer.Option(None, "--record-file", help=RECORD_HELP),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output to terminal"
    ),
):
    """Mark the record file so later summaries start counting from zero."""
    from multitool.console import banner
    from multitool.ledger import LedgerError

    ledger = _open_ledger(config, record_file, verbose)
    banner("--> resetting test accounting  <--")
    try:
        ledger.append_reset_marker()
    except (LedgerError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def summary(
    config: str | None = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    record_file: str | None = typer.Option(None, "--record-file", help=RECORD_HELP),
    junit: str | None = typer.Option(
        None, "--junit", help="Also write results since the last reset to this junit.xml"
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Exit non-zero if any recorded assertion failed"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output to terminal"
    ),
):
    """Replay the record file and report the totals since the last reset."""
    from multitool.console import banner
    from multitool.ledger import LedgerError

    ledger = _open_ledger(config, record_file, verbose)
    banner("--> test run results  <--")
    try:
        counters = ledger.report("SUMMARY", read_first=True, write_after=False)
        if junit is not None:
            from multitool.reporting.junit import write_junit

            junit_path = write_junit(ledger.entries_since_reset(), Path(junit))
            typer.echo(f"JUnit report: {junit_path}")
    except (LedgerError, ValueError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if strict and counters.failed > 0:
        raise typer.Exit(1)


@app.command()
def record(
    name: str = typer.Argument(help="Test or batch name"),
    total: int = typer.Option(..., "--total", min=0, help="Assertions run"),
    passed: int = typer.Option(..., "--pass", min=0, help="Assertions passed"),
    failed: int = typer.Option(..., "--fail", min=0, help="Assertions failed"),
    config: str | None = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    record_file: str | None = typer.Option(None, "--record-file", help=RECORD_HELP),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output to terminal"
    ),
):
    """Append one summary line, e.g. for results gathered outside Python."""
    from multitool.ledger import LedgerError, RunCounters

    ledger = _open_ledger(config, record_file, verbose)
    try:
        line = ledger.append_summary(
            name, RunCounters(total=total, passed=passed, failed=failed)
        )
    except (LedgerError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Recorded: {line.format()}")


@address_app.command("set")
def address_set(
    file: str = typer.Argument(help="Address file to write"),
    address: str = typer.Argument(help="Deployed contract address"),
):
    """Record the address of the latest deployment."""
    from multitool.addresses import write_contract_address

    try:
        write_contract_address(file, address)
    except OSError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Wrote {address} to {file}")


@address_app.command("show")
def address_show(
    file: str = typer.Argument(help="Address file to read"),
):
    """Print the address stored in an address file."""
    from multitool.addresses import read_contract_address

    addr = read_contract_address(file)
    if not addr:
        typer.echo(f"Error: no address in {file}", err=True)
        raise typer.Exit(1)
    typer.echo(addr)


@app.command()
def init(
    dir: str = typer.Option(".", "--dir", help="Directory to write multitool.yaml in"),
):
    """Write an example multitool.yaml."""
    from multitool.config import DEFAULT_CONFIG_FILE

    project_dir = Path(dir)
    project_dir.mkdir(parents=True, exist_ok=True)

    example = project_dir / DEFAULT_CONFIG_FILE
    if example.exists():
        typer.echo(f"{DEFAULT_CONFIG_FILE} already exists in {dir}, skipping.")
        return

    example.write_text("""\
# Shared by every test script in a batch run.
record_file: ${MULTITOOL_RECORD_FILE:-passFail.txt}
# debug_log: .multitool/debug.log
verbose: false
""")
    typer.echo(f"Initialized {example}")
