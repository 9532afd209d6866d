#!/usr/bin/env python3
"""
Docker and process helpers used by the service setup strategies.

``ProcessRunner`` is the single place where child processes are started.
``DockerController`` builds on it to detect Docker, write compose
fragments, start containers, poll readiness and run one-shot commands.
Both are created once per run and passed explicitly to whoever needs them.
"""

from __future__ import annotations

import re
import shutil
import subprocess
import sys
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from hive_scaffold.helpers.helpers_logging import print_error, print_info, print_warning
from hive_scaffold.helpers.template_renderer import load_template, render_placeholders
from hive_scaffold.infrastructure.compose_services import inline_fragment

COMPOSE_FILE = "docker-compose.yml"

# Top-level compose sections merged when a fragment is added to an existing file
COMPOSE_SECTIONS = ("services", "volumes", "networks")

READY_MAX_ATTEMPTS = 30
READY_INTERVAL_SECONDS = 2.0

COMMAND_NOT_FOUND = 127
COMMAND_TIMED_OUT = 124


@dataclass
class ProcessResult:
    """Exit status and captured output of a child process."""
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ProcessRunner:
    """Runs external commands synchronously, never raising on failure."""

    def run(
        self,
        args: Sequence[str],
        cwd: Path | None = None,
        timeout: float | None = None,
        capture: bool = True,
    ) -> ProcessResult:
        """Run an argument vector and return its exit status."""
        try:
            result = subprocess.run(
                list(args),
                cwd=cwd,
                check=False,
                capture_output=capture,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError:
            return ProcessResult(COMMAND_NOT_FOUND, "", f"{args[0]}: command not found")
        except subprocess.TimeoutExpired:
            return ProcessResult(COMMAND_TIMED_OUT, "", f"{args[0]}: timed out after {timeout}s")
        return ProcessResult(result.returncode, result.stdout or "", result.stderr or "")

    def run_shell(self, command: str, cwd: Path | None = None) -> int:
        """Run a shell command line with output streamed to the terminal."""
        try:
            result = subprocess.run(command, shell=True, cwd=cwd, check=False)
        except FileNotFoundError:
            return COMMAND_NOT_FOUND
        return result.returncode


def fragment_service_names(fragment: str) -> list[str]:
    """Service names declared under ``services:`` in a compose fragment."""
    document = yaml.safe_load(fragment) or {}
    services = document.get("services") or {}
    return list(services)


def has_service_block(compose_text: str, service: str) -> bool:
    """True if ``service:`` appears as a mapping key line in the text."""
    pattern = re.compile(rf"^[ \t]*{re.escape(service)}:[ \t]*(#.*)?$", re.MULTILINE)
    return pattern.search(compose_text) is not None


def merge_compose_documents(existing: str, fragment: str) -> str:
    """Add services/volumes/networks of ``fragment`` missing from ``existing``."""
    compose_config: dict[str, Any] = yaml.safe_load(existing) or {}
    additions: dict[str, Any] = yaml.safe_load(fragment) or {}

    for section in COMPOSE_SECTIONS:
        entries = additions.get(section)
        if not entries:
            continue
        target = compose_config.get(section) or {}
        for name, definition in entries.items():
            if name not in target:
                target[name] = definition
        compose_config[section] = target

    return yaml.dump(compose_config, default_flow_style=False, sort_keys=False, indent=2)


class DockerController:
    """Docker operations needed to run per-app infrastructure services."""

    def __init__(
        self,
        runner: ProcessRunner,
        sleep: Callable[[float], None] = time.sleep,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self.runner = runner
        self._sleep = sleep
        self._which = which
        self._compose_command: list[str] | None = None

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def is_installed(self) -> bool:
        """True if the docker client binary is on PATH."""
        return self._which("docker") is not None

    def is_available(self) -> bool:
        """True if the daemon answers and a compose implementation exists."""
        if not self.is_installed():
            return False
        if not self.runner.run(["docker", "ps"], timeout=10).ok:
            return False
        return self.compose_command() is not None

    def compose_command(self) -> list[str] | None:
        """``docker compose`` if the plugin works, else legacy ``docker-compose``."""
        if self._compose_command is None:
            if self.runner.run(["docker", "compose", "version"], timeout=10).ok:
                self._compose_command = ["docker", "compose"]
            elif self._which("docker-compose") is not None:
                self._compose_command = ["docker-compose"]
        return self._compose_command

    def install_guidance(self, platform_name: str | None = None) -> str:
        """Installation steps for the current (or given) platform."""
        platform_name = (platform_name or sys.platform).lower()
        if platform_name.startswith("darwin"):
            return (
                "Install Docker Desktop for Mac:\n"
                "  https://www.docker.com/products/docker-desktop\n"
                "or with Homebrew:\n"
                "  brew install --cask docker"
            )
        if platform_name.startswith("linux"):
            return (
                "Install Docker Engine:\n"
                "  curl -fsSL https://get.docker.com -o get-docker.sh\n"
                "  sudo sh get-docker.sh\n"
                "  sudo usermod -aG docker $USER\n"
                "Then log out and back in."
            )
        if platform_name.startswith("win"):
            return (
                "Install Docker Desktop for Windows (WSL 2 backend):\n"
                "  https://www.docker.com/products/docker-desktop"
            )
        return "See https://docs.docker.com/get-docker/ for installation instructions."

    # ------------------------------------------------------------------
    # Compose file handling
    # ------------------------------------------------------------------

    def generate_compose_fragment(
        self,
        template_name: str,
        substitutions: Mapping[str, str],
    ) -> str:
        """Render ``templates/compose/<template_name>``.

        Falls back to the built-in definition when the template file is
        missing. Returns an empty string when neither exists.
        """
        try:
            template = load_template(f"compose/{template_name}")
        except FileNotFoundError:
            fallback = inline_fragment(template_name)
            if fallback is None:
                print_error(f"No compose template or built-in definition for '{template_name}'")
                return ""
            print_warning(f"Compose template {template_name} not found, using built-in definition")
            template = fallback
        return render_placeholders(template, substitutions)

    def merge_into_compose_file(self, compose_path: Path, fragment: str) -> bool:
        """Write or extend a compose file with the services of ``fragment``.

        - file absent: the fragment becomes the file
        - any fragment service already declared: file left untouched
        - otherwise: missing services, volumes and networks are appended

        Returns:
            bool: True if the file holds the fragment's services afterwards
        """
        try:
            if not compose_path.exists():
                compose_path.parent.mkdir(parents=True, exist_ok=True)
                compose_path.write_text(fragment, encoding="utf-8")
                return True

            existing = compose_path.read_text(encoding="utf-8")
            for service in fragment_service_names(fragment):
                if has_service_block(existing, service):
                    print_info(f"ℹ️  '{service}' service already exists in {compose_path.name}, skipping")
                    return True

            compose_path.write_text(merge_compose_documents(existing, fragment), encoding="utf-8")
            return True
        except (OSError, yaml.YAMLError) as e:
            print_error(f"Failed to update {compose_path}: {e}")
            return False

    # ------------------------------------------------------------------
    # Container lifecycle
    # ------------------------------------------------------------------

    def _compose(self, app_path: Path, args: Sequence[str], timeout: float | None = None) -> ProcessResult:
        base = self.compose_command() or ["docker", "compose"]
        return self.runner.run([*base, *args], cwd=app_path, timeout=timeout)

    def start(self, app_path: Path) -> bool:
        """``compose up -d`` in the app directory."""
        result = self._compose(app_path, ["up", "-d"])
        if not result.ok and result.stderr:
            print_error(result.stderr.strip())
        return result.ok

    def stop(self, app_path: Path) -> bool:
        """``compose down`` in the app directory."""
        return self._compose(app_path, ["down"]).ok

    def wait_for_ready(
        self,
        app_path: Path,
        service: str,
        max_attempts: int = READY_MAX_ATTEMPTS,
        check_command: Sequence[str] | None = None,
        interval: float = READY_INTERVAL_SECONDS,
    ) -> bool:
        """Poll a service until its check command succeeds.

        Returns False once ``max_attempts`` polls have failed; the caller
        decides whether that is fatal.
        """
        command = list(check_command) if check_command else ["echo", "ready"]
        for attempt in range(1, max_attempts + 1):
            if self._compose(app_path, ["exec", "-T", service, *command], timeout=30).ok:
                return True
            if attempt < max_attempts:
                self._sleep(interval)
        return False

    def exec_one_shot(self, app_path: Path, service: str, command: Sequence[str]) -> bool:
        """Run a command in a running service container.

        "already exists" on stderr counts as success so provisioning can
        be re-run safely.
        """
        result = self._compose(app_path, ["exec", "-T", service, *command], timeout=120)
        if result.ok:
            return True
        return "already exists" in result.stderr.lower()
