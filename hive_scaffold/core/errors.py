"""Exception types raised across the scaffolding pipeline."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Invalid configuration detected while building or resolving values."""


class LocalServiceUnavailableError(RuntimeError):
    """A locally running service failed its reachability check.

    Raised only when the active local-failure policy says the run must
    stop. ``guidance`` carries the remediation text shown to the user.
    """

    def __init__(self, service: str, guidance: str = "") -> None:
        super().__init__(f"{service} is not reachable")
        self.service = service
        self.guidance = guidance


class ProcessFailedError(RuntimeError):
    """A required external command exited with a non-zero status."""

    def __init__(self, command: str, returncode: int) -> None:
        super().__init__(f"Command failed with exit code {returncode}: {command}")
        self.command = command
        self.returncode = returncode


class ConfigWriteError(OSError):
    """A config operation could not be applied to its target file."""
