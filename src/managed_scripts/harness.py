from __future__ import annotations

"""Execution harness.

CONTRACT
- Inputs: BuildStep, ExecutionContext (may be None), TemplateStore
- Outputs (required):
  - StepOutcome(status, exit_code, message); ok only for SUCCESS
- Invariants:
  - Context and template are resolved before any directory or file is created
  - Each perform() then gets a private temp directory holding the materialized
    script and, unless the caller passes paths, the stdout/stderr logs; it is
    removed after the process exits
  - A single attempt; nothing is retried
- Failure:
  - Fatal errors become CONFIGURATION_ERROR / CONTEXT_UNAVAILABLE /
    MATERIALIZATION_ERROR outcomes; a non-zero exit becomes SCRIPT_FAILURE
"""

import dataclasses
import tempfile
from pathlib import Path
from typing import Literal

from loguru import logger
from pydantic import BaseModel

from .context import ExecutionContext
from .errors import ConfigurationError, ContextUnavailableError, MaterializationError
from .step import BuildStep
from .templates import TemplateStore
from .util.events import EventLog

OutcomeStatus = Literal[
    "SUCCESS",
    "SCRIPT_FAILURE",
    "CONFIGURATION_ERROR",
    "CONTEXT_UNAVAILABLE",
    "MATERIALIZATION_ERROR",
]


class StepOutcome(BaseModel):
    schema_version: int = 1
    template_id: str
    status: OutcomeStatus
    exit_code: int | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "SUCCESS"

    @property
    def aborted(self) -> bool:
        return self.exit_code is None


def perform(
    step: BuildStep,
    context: ExecutionContext | None,
    store: TemplateStore,
    events: EventLog | None = None,
    stdout_path: Path | None = None,
    stderr_path: Path | None = None,
) -> StepOutcome:
    tid = step.template_id
    try:
        ctx, template = step.resolve(context, store, events)
    except ContextUnavailableError as e:
        return StepOutcome(template_id=tid, status="CONTEXT_UNAVAILABLE", message=str(e))
    except ConfigurationError as e:
        logger.error(str(e))
        return StepOutcome(template_id=tid, status="CONFIGURATION_ERROR", message=str(e))

    with tempfile.TemporaryDirectory(prefix="msx_run_") as tmp:
        run_dir = Path(tmp)
        try:
            status = step.launch(
                template,
                dataclasses.replace(ctx, temp_dir=run_dir),
                events=events,
                stdout_path=stdout_path or run_dir / "stdout.log",
                stderr_path=stderr_path or run_dir / "stderr.log",
            )
        except MaterializationError as e:
            logger.error(str(e))
            return StepOutcome(template_id=tid, status="MATERIALIZATION_ERROR", message=str(e))

    if status.ok:
        return StepOutcome(template_id=tid, status="SUCCESS", exit_code=0)
    return StepOutcome(
        template_id=tid,
        status="SCRIPT_FAILURE",
        exit_code=status.exit_code,
        message=f"script exited with code {status.exit_code}",
    )
