"""Result records passed between pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class InstallCommandResult:
    """Outcome of building an app type's install command.

    ``command`` may be empty on success when the app type has nothing
    to install up front (the stubs are the project).

    Attributes:
        ok: Whether a runnable command could be built
        command: Shell command to run in the app directory
        reason: Why the command could not be built
        hint: Remediation shown to the user on failure
    """
    ok: bool
    command: str = ""
    reason: str | None = None
    hint: str | None = None

    @classmethod
    def success(cls, command: str) -> InstallCommandResult:
        return cls(ok=True, command=command)

    @classmethod
    def failure(cls, reason: str, hint: str | None = None) -> InstallCommandResult:
        return cls(ok=False, reason=reason, hint=hint)
