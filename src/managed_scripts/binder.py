from __future__ import annotations

"""Argument binding.

CONTRACT
- Inputs: BuildStep
- Outputs (required):
  - Flat ordered list of argument strings for the process argv
- Invariants:
  - Order preserved exactly as authored; values passed verbatim
  - No name matching against the template's declared args, no count check
- Failure:
  - None; a step without arguments binds to []
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .step import BuildStep


def bind_args(step: BuildStep) -> list[str]:
    if step.args is None:
        return []
    return [str(a) for a in step.args]
