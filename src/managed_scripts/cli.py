"""CLI entrypoint.

Commands:
- msx run       execute one managed script step
- msx list      templates visible to a job, by name
- msx describe  declared arguments of a template
- msx check     validate a template choice for a variant
- msx doctor    preflight checks

CONTRACT
- Inputs: Command line arguments (parsed by Typer)
- Outputs (required):
  - `run` exits with the script's exit code, 2 on configuration/context/IO aborts
  - `run` prints the script output after it exits, or keeps it under --log-dir
  - Other commands exit 0 on success, non-zero on failure
- Invariants:
  - Run ids are validated before execution
  - Execution is delegated to harness.perform
- Failure:
  - Invalid arguments raise Typer errors
"""

from __future__ import annotations

import sys
import tempfile
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from .config import load_template_store
from .context import GLOBAL_SCOPE, ExecutionContext
from .doctor import doctor_report
from .harness import perform
from .interpreters import Variant
from .step import BuildStep
from .templates import ScopedTemplateStore, check_template_id, describe_args
from .util.events import EventLog
from .util.ids import new_run_id, validate_run_id
from .util.paths import ensure_dir

ABORT_EXIT = 2

app = typer.Typer(add_completion=False, help="Run centrally managed batch and PowerShell scripts.")
console = Console()


def _version_callback(value: bool):
    if value:
        from . import __version__

        console.print(f"msx version: {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
):
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


_TEMPLATES_OPTION = typer.Option(
    Path("templates.yaml"),
    "--templates",
    help="Templates YAML file.",
)
_JOB_OPTION = typer.Option(
    GLOBAL_SCOPE,
    "--job",
    help="Job path (folder/sub/job) used to scope template lookup.",
)
_VARIANT_OPTION = typer.Option(
    None,
    "--variant",
    help="batch or powershell.",
)


def _load(templates: Path) -> ScopedTemplateStore:
    if not templates.exists():
        raise typer.BadParameter(f"Templates file not found: {templates}")
    try:
        return load_template_store(templates)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


def _variant(value: str | None) -> Variant | None:
    if value is None:
        return None
    try:
        return Variant.parse(value)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


@app.command()
def run(
    template_id: str = typer.Argument(..., help="Template id."),
    args: list[str] = typer.Argument(None, help="Arguments passed to the script, in order."),
    variant: str = typer.Option("batch", "--variant", help="batch or powershell."),
    templates: Path = _TEMPLATES_OPTION,
    job: str = _JOB_OPTION,
    workspace: Path = typer.Option(Path("."), "--workspace", help="Working directory."),
    run_id: str | None = typer.Option(None, "--run-id", help="Run id (default: auto)."),
    events: Path | None = typer.Option(None, "--events", help="Append JSON events here."),
    log_dir: Path | None = typer.Option(
        None, "--log-dir", help="Keep <run-id>.stdout.log / .stderr.log here instead of printing them."
    ),
) -> None:
    """Execute a managed script as one build step."""
    store = _load(templates)
    rid = validate_run_id(run_id or new_run_id())
    step = BuildStep.create(template_id, _variant(variant) or Variant.BATCH, args or [])
    ctx = ExecutionContext(run_id=rid, job=job, workspace=workspace.resolve())
    log = EventLog(events, run_id=rid) if events else None

    if log_dir is not None:
        ensure_dir(log_dir)
        outcome = perform(
            step,
            ctx,
            store,
            events=log,
            stdout_path=log_dir / f"{rid}.stdout.log",
            stderr_path=log_dir / f"{rid}.stderr.log",
        )
        console.print(f"Logs: {log_dir}")
    else:
        with tempfile.TemporaryDirectory(prefix="msx_cli_") as tmp:
            stdout_path = Path(tmp) / "stdout.log"
            stderr_path = Path(tmp) / "stderr.log"
            outcome = perform(
                step, ctx, store, events=log, stdout_path=stdout_path, stderr_path=stderr_path
            )
            for p in (stdout_path, stderr_path):
                if p.exists() and p.stat().st_size:
                    console.out(p.read_text(encoding="utf-8", errors="replace"), highlight=False, end="")

    if outcome.ok:
        console.print(f"[green]{template_id}[/green] succeeded")
        return
    console.print(f"[red]{template_id}[/red] {outcome.status}: {outcome.message}")
    raise typer.Exit(code=ABORT_EXIT if outcome.aborted else outcome.exit_code)


@app.command("list")
def list_templates(
    templates: Path = _TEMPLATES_OPTION,
    job: str = _JOB_OPTION,
    variant: str | None = _VARIANT_OPTION,
) -> None:
    """List templates visible to a job, ordered by name."""
    store = _load(templates)
    ctx = ExecutionContext(run_id="list", job=job)
    table = Table(title="managed scripts")
    table.add_column("Name")
    table.add_column("Id")
    table.add_column("Variant")
    table.add_column("Args")
    for t in store.list_in_context(ctx, _variant(variant)):
        table.add_row(t.name, t.id, t.variant.value, ", ".join(t.args))
    console.print(table)


@app.command()
def describe(
    template_id: str = typer.Argument(..., help="Template id."),
    templates: Path = _TEMPLATES_OPTION,
    job: str = _JOB_OPTION,
) -> None:
    """Show the arguments a template expects."""
    store = _load(templates)
    template = store.lookup(ExecutionContext(run_id="describe", job=job), template_id)
    if template is None:
        console.print("please select a valid script!")
        raise typer.Exit(code=1)
    console.print(describe_args(template))


@app.command()
def check(
    template_id: str = typer.Argument("", help="Template id."),
    templates: Path = _TEMPLATES_OPTION,
    job: str = _JOB_OPTION,
    variant: str | None = _VARIANT_OPTION,
) -> None:
    """Validate that a template id resolves for a job."""
    store = _load(templates)
    ctx = ExecutionContext(run_id="check", job=job)
    ok, message = check_template_id(store, ctx, template_id, _variant(variant))
    if ok:
        console.print(f"[green]OK[/green] {message}")
    else:
        console.print(f"[red]ERROR[/red] {message}")
        raise typer.Exit(code=1)


@app.command()
def doctor(
    templates: Path | None = typer.Option(None, "--templates", help="Templates YAML file."),
) -> None:
    """Environment and preflight checks."""
    report = doctor_report(templates)
    table = Table(title="msx doctor")
    table.add_column("Check")
    table.add_column("Status")
    table.add_column("Details")
    for item in report.items:
        table.add_row(item.name, item.status, item.details)
    console.print(table)
    if report.ok:
        console.print("[green]OK[/green]")
    else:
        raise typer.Exit(code=2)


if __name__ == "__main__":
    app()
