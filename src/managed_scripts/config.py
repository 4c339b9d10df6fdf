from __future__ import annotations

"""Template store configuration.

CONTRACT
- Inputs: YAML file path (templates.yaml)
- Outputs (required):
  - ScopedTemplateStore populated with validated Template models
- Invariants:
  - Each entry has exactly one of `body` / `body_file`
  - `body_file` is resolved relative to the YAML file and read verbatim
  - (scope, id) pairs are unique
- Failure:
  - Raises ValueError on invalid schema, duplicates or unreadable body files
"""

from pathlib import Path
from typing import Any

import yaml

from .context import GLOBAL_SCOPE
from .templates import ScopedTemplateStore, Template
from .util.text import read_text_file

TEMPLATES_SCHEMA = {
    "type": "object",
    "properties": {
        "templates": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "name": {"type": "string"},
                    "variant": {"type": "string", "enum": ["batch", "powershell"]},
                    "scope": {"type": "string"},
                    "body": {"type": "string"},
                    "body_file": {"type": "string"},
                    "args": {"type": "array", "items": {"type": "string"}},
                },
                "required": ["id", "variant"],
                "oneOf": [{"required": ["body"]}, {"required": ["body_file"]}],
            },
        },
    },
    "required": ["templates"],
}


def _template_from_entry(entry: dict[str, Any], base_dir: Path) -> Template:
    if "body_file" in entry:
        body_path = base_dir / entry["body_file"]
        try:
            body = read_text_file(body_path)
        except OSError as e:
            raise ValueError(f"Cannot read body_file for '{entry['id']}': {e}") from e
    else:
        body = entry["body"]
    return Template(
        id=entry["id"],
        name=str(entry.get("name") or entry["id"]),
        body=body,
        args=tuple(entry.get("args", []) or []),
        variant=entry["variant"],
    )


def load_template_store(path: Path) -> ScopedTemplateStore:
    import jsonschema  # lazy import

    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}

    try:
        jsonschema.validate(instance=data, schema=TEMPLATES_SCHEMA)
    except jsonschema.ValidationError as e:
        raise ValueError(f"Invalid templates file schema: {e.message}") from e

    store = ScopedTemplateStore()
    seen: set[tuple[str, str]] = set()
    for entry in data.get("templates", []):
        scope = str(entry.get("scope", GLOBAL_SCOPE)).strip("/")
        key = (scope, entry["id"])
        if key in seen:
            where = scope or "global scope"
            raise ValueError(f"Duplicate template id '{entry['id']}' in {where}")
        seen.add(key)
        store.add(_template_from_entry(entry, path.parent), scope=scope)
    return store


if __name__ == "__main__":
    import argparse
    import sys

    from .context import ExecutionContext

    parser = argparse.ArgumentParser(description="Template store loader")
    parser.add_argument("--templates", required=True, help="Path to templates.yaml")
    parser.add_argument("--job", default=GLOBAL_SCOPE, help="Job path to list templates for")
    args = parser.parse_args()

    try:
        store = load_template_store(Path(args.templates))
        ctx = ExecutionContext(run_id="inspect", job=args.job)
        for t in store.list_in_context(ctx):
            print(f"{t.name} [{t.id}] ({t.variant.value})")
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
