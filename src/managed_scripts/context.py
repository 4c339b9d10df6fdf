from __future__ import annotations

"""Execution context.

CONTRACT
- Inputs: the identity of the job run currently executing
- Outputs:
  - ExecutionContext value threaded explicitly into lookup/execute
  - scopes(): job path, each parent folder, then "" (global)
- Invariants:
  - Immutable; never stored in module-level state
- Failure:
  - resolve_context() raises ContextUnavailableError when no context is given
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from .errors import ContextUnavailableError

GLOBAL_SCOPE = ""


@dataclass(frozen=True)
class ExecutionContext:
    run_id: str
    job: str = GLOBAL_SCOPE
    workspace: Path = field(default_factory=Path.cwd)
    env: dict[str, str] = field(default_factory=dict)
    temp_dir: Path | None = None

    def scopes(self) -> Iterator[str]:
        parts = [p for p in self.job.strip("/").split("/") if p]
        while parts:
            yield "/".join(parts)
            parts.pop()
        yield GLOBAL_SCOPE


def resolve_context(context: ExecutionContext | None, template_id: str) -> ExecutionContext:
    if context is None:
        msg = f"current execution context not accessible! can't get content of script: {template_id}"
        logger.critical(msg)
        raise ContextUnavailableError(msg)
    return context
