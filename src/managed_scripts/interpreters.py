from __future__ import annotations

"""Interpreter variants.

CONTRACT
- Inputs: Variant (closed enum), materialized script path, bound args
- Outputs (required):
  - Interpreter.file_extension: suffix of the materialized script
  - Interpreter.exit_trailer: text appended after the template body
  - Interpreter.wrapper_argv(path): argv that launches the script
- Invariants:
  - build_command_line() == wrapper_argv(path) + args, args untouched and last
  - Trailers start with CRLF so they land on their own line
  - Interpreter.encoding is the file encoding the interpreter decodes correctly
- Failure:
  - Variant.parse raises ValueError for unknown names

Adding an interpreter means one Variant member plus one Interpreter entry in
_INTERPRETERS; materialize/runner never branch on the variant.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum


class Variant(str, Enum):
    BATCH = "batch"
    POWERSHELL = "powershell"

    @classmethod
    def parse(cls, value: str | Variant) -> Variant:
        if isinstance(value, Variant):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Unknown script variant {value!r}")
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            names = ", ".join(v.value for v in cls)
            raise ValueError(f"Unknown script variant {value!r} (expected one of: {names})") from exc


@dataclass(frozen=True)
class Interpreter:
    variant: Variant
    display_name: str
    file_extension: str
    exit_trailer: str
    _wrapper: Callable[[str], list[str]]
    encoding: str = "utf-8"

    def wrapper_argv(self, script_path: str) -> list[str]:
        return self._wrapper(script_path)


def _batch_wrapper(script_path: str) -> list[str]:
    return ["cmd", "/c", "call", script_path]


def _powershell_wrapper(script_path: str) -> list[str]:
    return ["powershell.exe", "-ExecutionPolicy", "ByPass", f"& '{script_path}'"]


_INTERPRETERS: dict[Variant, Interpreter] = {
    Variant.BATCH: Interpreter(
        variant=Variant.BATCH,
        display_name="Execute managed windows batch",
        file_extension=".bat",
        exit_trailer="\r\nexit %ERRORLEVEL%",
        _wrapper=_batch_wrapper,
    ),
    Variant.POWERSHELL: Interpreter(
        variant=Variant.POWERSHELL,
        display_name="Execute managed PowerShell script",
        file_extension=".ps1",
        exit_trailer="\r\nexit $LastExitCode",
        _wrapper=_powershell_wrapper,
        # Windows PowerShell reads BOM-less scripts in the ANSI code page
        encoding="utf-8-sig",
    ),
}


def interpreter_for(variant: Variant | str) -> Interpreter:
    return _INTERPRETERS[Variant.parse(variant)]


def build_command_line(interpreter: Interpreter, script_path: str, args: Sequence[str]) -> list[str]:
    return interpreter.wrapper_argv(script_path) + list(args)
