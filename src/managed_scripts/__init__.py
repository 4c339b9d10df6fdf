"""managed_scripts package.

Run centrally stored batch / PowerShell templates as build steps:

    import managed_scripts

    result = managed_scripts.run("templates.yaml", "deploy", ["prod"], variant="powershell")
    result["status"]  # "SUCCESS", "SCRIPT_FAILURE", ...
"""

from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from .config import load_template_store
from .context import ExecutionContext
from .errors import (
    ConfigurationError,
    ContextUnavailableError,
    ManagedScriptError,
    MaterializationError,
)
from .harness import StepOutcome, perform
from .interpreters import Interpreter, Variant, interpreter_for
from .runner import ExitStatus
from .step import BuildStep
from .templates import ScopedTemplateStore, Template, TemplateStore
from .util.ids import new_run_id

__version__ = "0.1.0"


def run(
    templates: str | Path,
    template_id: str,
    args: Sequence[str] = (),
    *,
    variant: str = "batch",
    job: str = "",
    workspace: Optional[str | Path] = None,
    run_id: Optional[str] = None,
) -> dict:
    """Execute one managed script and return the outcome as a dict.

    Args:
        templates: Path to a templates.yaml store file
        template_id: Id of the template to run
        args: Positional arguments passed verbatim to the script
        variant: "batch" or "powershell"
        job: Job path used to scope the template lookup
        workspace: Working directory for the script (default: cwd)
        run_id: Optional run id (auto-generated if not provided)
    """
    store = load_template_store(Path(templates))
    ctx = ExecutionContext(
        run_id=run_id or new_run_id(),
        job=job,
        workspace=Path(workspace).resolve() if workspace else Path.cwd(),
    )
    outcome = perform(BuildStep.create(template_id, variant, args), ctx, store)
    return outcome.model_dump()


__all__ = [
    "run",
    "BuildStep",
    "ConfigurationError",
    "ContextUnavailableError",
    "ExecutionContext",
    "ExitStatus",
    "Interpreter",
    "ManagedScriptError",
    "MaterializationError",
    "ScopedTemplateStore",
    "StepOutcome",
    "Template",
    "TemplateStore",
    "Variant",
    "interpreter_for",
    "perform",
]
