from __future__ import annotations

"""Fatal execution errors.

CONTRACT
- Every error here aborts the execution before a process is spawned
- A script exiting non-zero is NOT an error (see ExitStatus / StepOutcome)
- Nothing in this package retries on any of these
"""


class ManagedScriptError(Exception):
    """Base class for errors that abort a managed script execution."""


class ConfigurationError(ManagedScriptError):
    """Template id is blank or does not resolve in the execution context."""

    def __init__(self, message: str, template_id: str | None = None) -> None:
        super().__init__(message)
        self.template_id = template_id


class ContextUnavailableError(ManagedScriptError):
    """No execution context could be resolved when execution began."""


class MaterializationError(ManagedScriptError):
    """The script file could not be created or written."""

    def __init__(self, message: str, template_id: str | None = None) -> None:
        super().__init__(message)
        self.template_id = template_id


def template_not_found(template_id: str) -> ConfigurationError:
    return ConfigurationError(
        f"Managed script with id '{template_id}' does not exist", template_id=template_id
    )


def no_template_selected() -> ConfigurationError:
    return ConfigurationError("No managed script selected", template_id="")
