from __future__ import annotations

"""Process runner.

CONTRACT
- Inputs: Interpreter, materialized script path, bound args, ExecutionContext
- Outputs (required):
  - ExitStatus(exit_code, argv, elapsed_s); ok == (exit_code == 0)
- Invariants:
  - argv = interpreter wrapper + args, spawned without a shell
  - cwd is the context workspace, env is os.environ overlaid with context.env
  - One blocking spawn-and-wait; no retry, no timeout
- Failure:
  - Non-zero exit is returned, never raised
"""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from .context import ExecutionContext
from .interpreters import Interpreter, build_command_line
from .util.shell import run_cmd


@dataclass(frozen=True)
class ExitStatus:
    exit_code: int
    argv: tuple[str, ...] = ()
    elapsed_s: float = 0.0
    stdout_path: Path | None = None
    stderr_path: Path | None = None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def run_script(
    interpreter: Interpreter,
    script_path: Path,
    args: Sequence[str],
    context: ExecutionContext,
    stdout_path: Path | None = None,
    stderr_path: Path | None = None,
) -> ExitStatus:
    argv = build_command_line(interpreter, str(script_path), args)
    logger.info(f"[{context.run_id}] $ {' '.join(argv)}")
    res = run_cmd(
        cmd=argv,
        cwd=context.workspace,
        stdout_path=stdout_path,
        stderr_path=stderr_path,
        env=context.env or None,
    )
    if res.returncode != 0:
        logger.warning(f"[{context.run_id}] script exited with code {res.returncode}")
    return ExitStatus(
        exit_code=res.returncode,
        argv=tuple(argv),
        elapsed_s=res.elapsed_s,
        stdout_path=res.stdout_path,
        stderr_path=res.stderr_path,
    )
