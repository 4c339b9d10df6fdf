from __future__ import annotations

"""Template store.

CONTRACT
- Inputs: ExecutionContext, template id, optional variant filter
- Outputs (required):
  - lookup() -> Template | None (nearest scope wins)
  - list_in_context() -> templates visible in the context, sorted by name
- Invariants:
  - Templates are frozen models; lookups hand out the stored snapshot
  - A definition in a job's folder shadows the same id further out; with a
    variant filter, only templates of that variant shadow
  - Execution looks up by id alone; the variant filter serves listing and checks
  - Reads take no locks; the store is populated before executions start
- Failure:
  - Unknown ids return None; callers decide whether that is fatal
"""

from collections.abc import Iterable
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from .context import GLOBAL_SCOPE, ExecutionContext
from .interpreters import Variant


class Template(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    body: str = ""
    args: tuple[str, ...] = Field(default_factory=tuple)
    variant: Variant = Variant.BATCH


class TemplateStore(Protocol):
    def lookup(
        self, context: ExecutionContext, template_id: str, variant: Variant | None = None
    ) -> Template | None: ...

    def list_in_context(
        self, context: ExecutionContext, variant: Variant | None = None
    ) -> list[Template]: ...


class ScopedTemplateStore:
    """In-memory store keyed by scope path ("" is global, "team/app" a folder)."""

    def __init__(self, templates: Iterable[tuple[str, Template]] = ()) -> None:
        self._scopes: dict[str, dict[str, Template]] = {}
        for scope, template in templates:
            self.add(template, scope=scope)

    def add(self, template: Template, scope: str = GLOBAL_SCOPE) -> None:
        self._scopes.setdefault(scope.strip("/"), {})[template.id] = template

    def lookup(
        self, context: ExecutionContext, template_id: str, variant: Variant | None = None
    ) -> Template | None:
        for scope in context.scopes():
            template = self._scopes.get(scope, {}).get(template_id)
            if template is not None and (variant is None or template.variant == variant):
                return template
        return None

    def list_in_context(
        self, context: ExecutionContext, variant: Variant | None = None
    ) -> list[Template]:
        visible: dict[str, Template] = {}
        for scope in context.scopes():
            for template_id, template in self._scopes.get(scope, {}).items():
                if variant is None or template.variant == variant:
                    visible.setdefault(template_id, template)
        return sorted(visible.values(), key=lambda t: t.name)


def describe_args(template: Template) -> str:
    if not template.args:
        return "No arguments required"
    listed = " | ".join(f"{i}. {name}" for i, name in enumerate(template.args, start=1))
    return f"Required arguments: {listed}"


def check_template_id(
    store: TemplateStore,
    context: ExecutionContext,
    template_id: str,
    variant: Variant | None = None,
) -> tuple[bool, str]:
    """Validate a template choice. Returns: (is_valid, message)."""
    template = store.lookup(context, template_id, variant) if template_id else None
    if template is None:
        kind = "script" if variant is None else f"{variant.value} script"
        return False, f"you must select a valid {kind}"
    return True, describe_args(template)
