from __future__ import annotations

"""Text IO utilities.

CONTRACT
- Inputs: Path
- Outputs:
  - File content as string
- Invariants:
  - Reads as utf-8, line endings untouched
- Failure:
  - Raises FileNotFoundError/IOError
"""

from pathlib import Path


def read_text_file(path: Path) -> str:
    with path.open("r", encoding="utf-8", newline="") as f:
        return f.read()
