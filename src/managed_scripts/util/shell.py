from __future__ import annotations

"""Process execution.

CONTRACT
- Inputs: argv list (or command string), cwd, optional log paths, env overlay
- Outputs (required):
  - CmdResult(returncode, stdout_path, stderr_path, elapsed_s)
- Invariants:
  - Writes stdout/stderr to files (temp files when no path is given)
  - Blocks until the process exits; no timeout, no retry
- Failure:
  - Returns CmdResult with exit code (does NOT raise on non-zero exit)
  - A process that cannot be spawned yields returncode 1 and the error in stderr
"""

import os
import subprocess
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path

SPAWN_FAILURE_EXIT = 1


def which(cmd: str) -> str | None:
    for p in os.environ.get("PATH", "").split(os.pathsep):
        candidate = Path(p) / cmd
        if candidate.exists() and os.access(candidate, os.X_OK):
            return str(candidate)
    return None


@dataclass(frozen=True)
class CmdResult:
    cmd: str
    returncode: int
    stdout_path: Path
    stderr_path: Path
    elapsed_s: float
    stdout_bytes: int
    stderr_bytes: int


def _temp_log(prefix: str) -> Path:
    tf = tempfile.NamedTemporaryFile(delete=False, prefix=prefix)
    tf.close()
    return Path(tf.name)


def run_cmd(
    cmd: str | list[str],
    cwd: Path,
    stdout_path: Path | None = None,
    stderr_path: Path | None = None,
    env: dict[str, str] | None = None,
) -> CmdResult:
    """Run a command and store stdout/stderr to files.

    CONTRACT:
    - Accepts cmd as str (run with shell=True) or list[str] (run with shell=False).
    - Always writes stdout/stderr files (creates temp if not provided).
    - Never raises for non-zero exit; caller inspects return code.
    - Records duration and output size.
    """
    if stdout_path is None:
        stdout_path = _temp_log("msx_stdout_")
    if stderr_path is None:
        stderr_path = _temp_log("msx_stderr_")

    stdout_path.parent.mkdir(parents=True, exist_ok=True)
    stderr_path.parent.mkdir(parents=True, exist_ok=True)

    # string -> shell, list -> exec
    use_shell = isinstance(cmd, str)

    start_t = time.time()
    with (
        stdout_path.open("w", encoding="utf-8") as out_f,
        stderr_path.open("w", encoding="utf-8") as err_f,
    ):
        try:
            p = subprocess.run(
                cmd,
                cwd=str(cwd),
                shell=use_shell,
                env=(os.environ | env) if env else None,
                stdout=out_f,
                stderr=err_f,
                text=True,
            )
            rc = p.returncode
        except OSError as e:
            rc = SPAWN_FAILURE_EXIT
            err_f.write(f"\ncommand execution failed: {e}\n")

    end_t = time.time()

    out_b = stdout_path.stat().st_size if stdout_path.exists() else 0
    err_b = stderr_path.stat().st_size if stderr_path.exists() else 0

    return CmdResult(
        cmd=" ".join(cmd) if isinstance(cmd, list) else cmd,
        returncode=rc,
        stdout_path=stdout_path,
        stderr_path=stderr_path,
        elapsed_s=end_t - start_t,
        stdout_bytes=out_b,
        stderr_bytes=err_b,
    )


if __name__ == "__main__":
    import argparse
    import sys

    parser = argparse.ArgumentParser(description="Run a command and report its exit code")
    parser.add_argument("--cmd", required=True, help="Command to run")
    parser.add_argument("--cwd", default=".", help="Working directory")
    args = parser.parse_args()

    stdout = Path("shell_cli.stdout.log")
    stderr = Path("shell_cli.stderr.log")

    res = run_cmd(cmd=args.cmd, cwd=Path(args.cwd), stdout_path=stdout, stderr_path=stderr)
    print(f"Exit code: {res.returncode}")
    print(f"Stdout: {stdout.read_text(encoding='utf-8')}")
    print(f"Stderr: {stderr.read_text(encoding='utf-8')}")
    sys.exit(res.returncode)
