from __future__ import annotations

"""Script materialization.

CONTRACT
- Inputs: Template, Interpreter, optional target directory
- Outputs (required):
  - MaterializedScript(path, content) with content == body + exit trailer
- Invariants:
  - One fresh file per call (mkstemp), name ends with the interpreter's extension
  - File is fully written and closed before this returns
  - Text is written as-is (no newline translation) in the interpreter's encoding
- Failure:
  - Raises MaterializationError on any OSError; a half-written file is removed
"""

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from .errors import MaterializationError
from .interpreters import Interpreter
from .templates import Template
from .util.paths import ensure_dir, safe_filename


@dataclass(frozen=True)
class MaterializedScript:
    path: Path
    content: str


def script_content(template: Template, interpreter: Interpreter) -> str:
    return template.body + interpreter.exit_trailer


def materialize(
    template: Template, interpreter: Interpreter, directory: Path | None = None
) -> MaterializedScript:
    content = script_content(template, interpreter)
    prefix = f"msx_{safe_filename(template.id, default='script')}_"
    try:
        if directory is not None:
            ensure_dir(directory)
        fd, name = tempfile.mkstemp(
            suffix=interpreter.file_extension,
            prefix=prefix,
            dir=str(directory) if directory is not None else None,
        )
    except OSError as exc:
        raise MaterializationError(
            f"Unable to create script file for '{template.id}': {exc}", template_id=template.id
        ) from exc

    path = Path(name).resolve()
    try:
        with os.fdopen(fd, "w", encoding=interpreter.encoding, newline="") as f:
            f.write(content)
    except OSError as exc:
        path.unlink(missing_ok=True)
        raise MaterializationError(
            f"Unable to write script file {path}: {exc}", template_id=template.id
        ) from exc

    logger.debug(f"Materialized {template.id} -> {path} ({len(content)} chars)")
    return MaterializedScript(path=path, content=content)
