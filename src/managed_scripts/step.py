from __future__ import annotations

"""Managed script build step.

CONTRACT
- Inputs: BuildStep(template_id, variant, args), ExecutionContext, TemplateStore
- Outputs (required):
  - execute() -> ExitStatus of the spawned interpreter
- Invariants:
  - Phases run in order: resolving -> materializing -> spawned -> completed
  - Context is checked before the store is touched
  - Template is resolved by id alone (the step variant does not filter it)
    before any file is written or process spawned
  - Exactly one materialized script per execute(); its path is not kept
- Failure:
  - ContextUnavailableError, ConfigurationError, MaterializationError abort
    before spawn; a non-zero exit is returned as ExitStatus
"""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from .binder import bind_args
from .context import ExecutionContext, resolve_context
from .errors import no_template_selected, template_not_found
from .interpreters import Interpreter, Variant, interpreter_for
from .materialize import materialize
from .runner import ExitStatus, run_script
from .templates import Template, TemplateStore
from .util.events import EventLog


@dataclass(frozen=True)
class BuildStep:
    template_id: str
    variant: Variant = Variant.BATCH
    args: tuple[str, ...] | None = None

    @classmethod
    def create(
        cls, template_id: str, variant: Variant | str, args: Sequence[str] | None = None
    ) -> BuildStep:
        return cls(
            template_id=template_id,
            variant=Variant.parse(variant),
            args=tuple(args) if args is not None else (),
        )

    @classmethod
    def from_form(
        cls,
        template_id: str,
        define_args: bool,
        arg_values: Sequence[str] | None,
        variant: Variant | str,
    ) -> BuildStep:
        """Build a step from submitted form values; hidden args are dropped unless define_args."""
        args = tuple(arg_values) if define_args and arg_values is not None else None
        return cls(template_id=template_id, variant=Variant.parse(variant), args=args)

    @property
    def interpreter(self) -> Interpreter:
        return interpreter_for(self.variant)

    def lookup(self, context: ExecutionContext, store: TemplateStore) -> Template:
        if not self.template_id or not self.template_id.strip():
            raise no_template_selected()
        template = store.lookup(context, self.template_id)
        if template is None:
            raise template_not_found(self.template_id)
        return template

    def _phase(self, events: EventLog | None, name: str, **extra: Any) -> None:
        logger.debug(f"{self.template_id}: {name}")
        if events is not None:
            events.emit(phase=name, template_id=self.template_id, variant=self.variant.value, **extra)

    def resolve(
        self,
        context: ExecutionContext | None,
        store: TemplateStore,
        events: EventLog | None = None,
    ) -> tuple[ExecutionContext, Template]:
        ctx = resolve_context(context, self.template_id)
        self._phase(events, "resolving")
        return ctx, self.lookup(ctx, store)

    def launch(
        self,
        template: Template,
        context: ExecutionContext,
        events: EventLog | None = None,
        stdout_path: Path | None = None,
        stderr_path: Path | None = None,
    ) -> ExitStatus:
        self._phase(events, "materializing")
        script = materialize(template, self.interpreter, context.temp_dir)

        self._phase(events, "spawned", script=script.path.name)
        status = run_script(
            self.interpreter,
            script.path,
            bind_args(self),
            context,
            stdout_path=stdout_path,
            stderr_path=stderr_path,
        )

        self._phase(events, "completed", exit_code=status.exit_code)
        return status

    def execute(
        self,
        context: ExecutionContext | None,
        store: TemplateStore,
        events: EventLog | None = None,
        stdout_path: Path | None = None,
        stderr_path: Path | None = None,
    ) -> ExitStatus:
        ctx, template = self.resolve(context, store, events)
        return self.launch(template, ctx, events, stdout_path, stderr_path)
