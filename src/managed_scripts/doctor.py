from __future__ import annotations

"""Environment health checks.

CONTRACT
- Inputs: optional templates file path
- Outputs (required):
  - DoctorReport (ok=bool, items=[(name, status, details)])
- Invariants:
  - Checks: templates file, one interpreter binary per variant
  - Read-only; nothing is spawned
- Failure:
  - Returns DoctorReport with ok=False if the templates file is missing or invalid
"""

from dataclasses import dataclass
from pathlib import Path

from .config import load_template_store
from .context import ExecutionContext
from .interpreters import Variant, interpreter_for
from .util.shell import which

_BINARIES: dict[Variant, tuple[str, ...]] = {
    Variant.BATCH: ("cmd", "cmd.exe"),
    Variant.POWERSHELL: ("powershell.exe", "powershell"),
}


@dataclass(frozen=True)
class DoctorItem:
    name: str
    status: str
    details: str


@dataclass(frozen=True)
class DoctorReport:
    ok: bool
    items: list[DoctorItem]


def doctor_report(templates_file: Path | None = None) -> DoctorReport:
    items: list[DoctorItem] = []
    ok = True

    if templates_file is None:
        items.append(DoctorItem("templates", "INFO", "No templates file given"))
    elif not templates_file.exists():
        ok = False
        items.append(DoctorItem("templates", "FAIL", f"Not found: {templates_file}"))
    else:
        try:
            store = load_template_store(templates_file)
            count = len(store.list_in_context(ExecutionContext(run_id="doctor")))
            items.append(DoctorItem("templates", "OK", f"{count} global templates"))
        except ValueError as e:
            ok = False
            items.append(DoctorItem("templates", "FAIL", str(e)))

    for variant, names in _BINARIES.items():
        label = interpreter_for(variant).display_name
        found = next((p for p in (which(n) for n in names) if p), None)
        if found:
            items.append(DoctorItem(variant.value, "OK", found))
        else:
            items.append(DoctorItem(variant.value, "WARN", f"{names[0]} not found; '{label}' steps will fail"))

    return DoctorReport(ok=ok, items=items)
