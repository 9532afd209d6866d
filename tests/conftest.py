"""Shared fixtures and test doubles for the scaffolding test suite.

``ScriptedPromptSource`` answers prompts from a label -> answer mapping and
records every label it was asked, so tests can assert both outcomes and
the absence of prompts. ``RecordingRunner`` stands in for
``ProcessRunner`` and never spawns a process.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest

from hive_scaffold.core.resolver import ConfigResolver
from hive_scaffold.infrastructure.base import LocalFailurePolicy, ServiceContext
from hive_scaffold.infrastructure.docker import DockerController, ProcessResult
from hive_scaffold.infrastructure.health import HealthChecker

# ---------------------------------------------------------------------------
# Prompt double
# ---------------------------------------------------------------------------


class ScriptedPromptSource:
    """PromptSource answering from a script; unscripted prompts get their default."""

    def __init__(self, answers: Mapping[str, Any] | None = None) -> None:
        self.answers = dict(answers or {})
        self.asked: list[str] = []
        self.notes: list[tuple[str, str | None]] = []

    def _answer(self, label: str, default: Any) -> Any:
        self.asked.append(label)
        answer = self.answers.get(label, default)
        if isinstance(answer, BaseException):
            raise answer
        return answer

    def text(self, label: str, default: str = "", placeholder: str = "", required: bool = False) -> str:
        return str(self._answer(label, default))

    def password(self, label: str, default: str = "", required: bool = False) -> str:
        return str(self._answer(label, default))

    def confirm(self, label: str, default: bool = False) -> bool:
        return bool(self._answer(label, default))

    def select(self, label: str, options: Mapping[str, str], default: str | None = None) -> str:
        answer = self._answer(label, default)
        assert answer in options, f"{answer!r} is not an option of {label!r}"
        return str(answer)

    def note(self, message: str, title: str | None = None) -> None:
        self.notes.append((message, title))


# ---------------------------------------------------------------------------
# Process double
# ---------------------------------------------------------------------------


class RecordingRunner:
    """ProcessRunner double recording argv lists and shell command lines."""

    def __init__(
        self,
        responder: Callable[[list[str]], ProcessResult] | None = None,
        shell_returncodes: Mapping[str, int] | None = None,
    ) -> None:
        self.calls: list[list[str]] = []
        self.shell_commands: list[str] = []
        self.shell_cwds: list[Path | None] = []
        self._responder = responder or (lambda args: ProcessResult(0))
        self._shell_returncodes = dict(shell_returncodes or {})

    def run(
        self,
        args: Sequence[str],
        cwd: Path | None = None,
        timeout: float | None = None,
        capture: bool = True,
    ) -> ProcessResult:
        argv = list(args)
        self.calls.append(argv)
        return self._responder(argv)

    def run_shell(self, command: str, cwd: Path | None = None) -> int:
        self.shell_commands.append(command)
        self.shell_cwds.append(cwd)
        for prefix, code in self._shell_returncodes.items():
            if command.startswith(prefix):
                return code
        return 0


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_resolver() -> Callable[..., ConfigResolver]:
    """Factory for a resolver over a ScriptedPromptSource."""

    def _make(
        answers: Mapping[str, Any] | None = None,
        flags: Mapping[str, Any] | None = None,
        interactive: bool = True,
    ) -> ConfigResolver:
        return ConfigResolver(ScriptedPromptSource(answers), flags, interactive)

    return _make


@pytest.fixture
def make_context() -> Callable[..., ServiceContext]:
    """Factory for a ServiceContext with mocked Docker and health checks.

    ``docker_available`` drives ``is_available``; every Docker step
    succeeds unless the returned mock is reconfigured.
    """

    def _make(
        answers: Mapping[str, Any] | None = None,
        flags: Mapping[str, Any] | None = None,
        interactive: bool = True,
        docker_available: bool = False,
        reachable: bool = True,
        local_failure: LocalFailurePolicy = LocalFailurePolicy.EXIT,
    ) -> ServiceContext:
        docker = Mock(spec=DockerController)
        docker.is_available.return_value = docker_available
        docker.generate_compose_fragment.return_value = "services:\n  svc: {}\n"
        docker.merge_into_compose_file.return_value = True
        docker.start.return_value = True
        docker.wait_for_ready.return_value = True
        docker.exec_one_shot.return_value = True
        docker.install_guidance.return_value = "install docker"

        health = Mock(spec=HealthChecker)
        health.http_ok.return_value = reachable
        health.tcp_reachable.return_value = reachable
        health.redis_ping.return_value = reachable

        return ServiceContext(
            resolver=ConfigResolver(ScriptedPromptSource(answers), flags, interactive),
            docker=docker,
            runner=RecordingRunner(),
            health=health,
            local_failure=local_failure,
            platform="linux",
        )

    return _make


@pytest.fixture
def monorepo(tmp_path: Path) -> Path:
    """Temporary monorepo root with a composer.json marker."""
    root = tmp_path / "monorepo"
    root.mkdir()
    (root / "composer.json").write_text("{}\n")
    return root
