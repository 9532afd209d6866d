"""Scaffold one application inside the monorepo.

Pipeline::

    validate name -> collect config -> install command Result
      -> create directory -> pre-install / install commands
      -> infrastructure (Docker-first, local fallback)
      -> stub files -> config operations -> post-install commands
      -> summary

Any fatal failure after the directory was created removes it again
(containers started for it are stopped first).
"""

from __future__ import annotations

import shutil
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import click

from hive_scaffold.app_types import AppTypeCollector, create_app_type
from hive_scaffold.core.config_writer import ConfigWriter
from hive_scaffold.core.errors import (
    ConfigurationError,
    ConfigWriteError,
    LocalServiceUnavailableError,
    ProcessFailedError,
)
from hive_scaffold.core.naming import is_valid_app_name
from hive_scaffold.core.resolver import ConfigResolver
from hive_scaffold.helpers.helpers_logging import (
    mask_secret,
    print_command,
    print_error,
    print_header,
    print_info,
    print_note,
    print_success,
    print_warning,
)
from hive_scaffold.helpers.prompts import PromptSource
from hive_scaffold.helpers.template_renderer import copy_stub_tree
from hive_scaffold.infrastructure.base import LocalFailurePolicy, ServiceContext
from hive_scaffold.infrastructure.docker import COMPOSE_FILE, DockerController, ProcessRunner
from hive_scaffold.infrastructure.health import HealthChecker
from hive_scaffold.infrastructure.orchestrator import ConfigMap, InfrastructureOrchestrator

APPS_DIR = "apps"
ROOT_MARKERS = ("turbo.json", "composer.json")

# ConfigMap keys whose values are never printed in clear text
SECRET_KEY_MARKERS = (
    "password",
    "secret",
    "private_key",
    "public_key",
    "access_key",
    "master_key",
    "meilisearch_key",
)


def find_monorepo_root(start: Path) -> Path:
    """Closest ancestor of ``start`` holding a root marker, else ``start``."""
    start = start.resolve()
    for candidate in (start, *start.parents):
        if any((candidate / marker).is_file() for marker in ROOT_MARKERS):
            return candidate
    return start


def is_secret_key(key: str) -> bool:
    return any(marker in key for marker in SECRET_KEY_MARKERS)


def secret_values(config: Mapping[str, Any]) -> list[str]:
    """Non-empty secret values of ``config``, longest first."""
    values = {str(value) for key, value in config.items() if is_secret_key(key) and value}
    return sorted(values, key=len, reverse=True)


def redact(text: str, secrets: list[str]) -> str:
    """Replace every secret occurring in ``text`` with its masked form."""
    for secret in secrets:
        text = text.replace(secret, mask_secret(secret))
    return text


@dataclass
class CreateAppRequest:
    """Everything the pipeline needs from the command line."""

    name: str
    app_type: str
    root: Path
    flags: dict[str, Any] = field(default_factory=dict)
    interactive: bool = True
    local_failure: LocalFailurePolicy = LocalFailurePolicy.EXIT
    skip_install: bool = False


class CreateAppPipeline:
    """Drives one scaffolding run with injected collaborators."""

    def __init__(
        self,
        request: CreateAppRequest,
        prompts: PromptSource,
        runner: ProcessRunner | None = None,
        docker: DockerController | None = None,
        health: HealthChecker | None = None,
    ) -> None:
        self.request = request
        self.runner = runner or ProcessRunner()
        self.resolver = ConfigResolver(prompts, request.flags, request.interactive)
        self.context = ServiceContext(
            resolver=self.resolver,
            docker=docker or DockerController(self.runner),
            runner=self.runner,
            health=health or HealthChecker(self.runner),
            local_failure=request.local_failure,
        )
        self.collector: AppTypeCollector = create_app_type(request.app_type, self.resolver)
        self.app_path = request.root / APPS_DIR / request.name

    def run(self) -> Path:
        """Scaffold the app and return its directory.

        Raises:
            ConfigurationError: Invalid name, existing directory or a
                failed install command Result
            ProcessFailedError: An install step exited non-zero
            LocalServiceUnavailableError: A local service check failed
                under the ``exit`` policy
            ConfigWriteError: A config operation could not be written
        """
        name = self.request.name
        if not is_valid_app_name(name):
            raise ConfigurationError(
                f"Invalid app name '{name}'. Use lowercase letters, numbers and single hyphens"
            )
        if self.app_path.exists():
            raise ConfigurationError(f"Directory already exists: {self.app_path}")

        print_header(f"\n🐝 Creating {self.collector.name} app '{name}'")
        config = self.collector.collect_configuration(name)

        install = self.collector.get_install_command(config)
        if not install.ok:
            message = install.reason or "Install command is not available"
            if install.hint:
                message = f"{message}\n{install.hint}"
            raise ConfigurationError(message)

        self.app_path.mkdir(parents=True)
        try:
            self._build(config, install.command)
        except (
            ProcessFailedError,
            LocalServiceUnavailableError,
            ConfigWriteError,
            ConfigurationError,
            click.Abort,
            KeyboardInterrupt,
        ):
            self.cleanup()
            raise

        self.print_summary()
        return self.app_path

    def _build(self, config: ConfigMap, install_command: str) -> None:
        if not self.request.skip_install:
            print_header("\n📦 Installing")
            for command in self.collector.get_pre_install_commands(config):
                self.run_command(command)
            if install_command:
                self.run_command(install_command)

        print_header("\n🧱 Infrastructure")
        orchestrator = InfrastructureOrchestrator(self.context)
        self.collector.setup_infrastructure(orchestrator, self.app_path)
        config = dict(self.collector.config)

        print_header("\n📄 Stubs")
        created = copy_stub_tree(
            self.collector.get_stub_path(),
            self.app_path,
            self.collector.get_stub_variables(config),
        )
        print_info(f"{len(created)} file(s) created from stubs")

        # migrations in post-install read the connection settings from these files
        print_header("\n⚙️  Configuration")
        ConfigWriter(self.app_path).apply_all(self.collector.get_writable_config(config))

        if not self.request.skip_install:
            print_header("\n🔧 Post-install")
            for command in self.collector.get_post_install_commands(config):
                self.run_command(command)

    def run_command(self, command: str) -> None:
        """Run one shell command in the app directory, raising on failure."""
        shown = redact(command, secret_values(self.collector.config))
        print_command(shown)
        returncode = self.runner.run_shell(command, cwd=self.app_path)
        if returncode != 0:
            raise ProcessFailedError(shown, returncode)

    def cleanup(self) -> None:
        """Stop containers started for the app and remove its directory."""
        if not self.app_path.exists():
            return
        print_warning(f"Cleaning up {self.app_path}")
        if (self.app_path / COMPOSE_FILE).is_file():
            self.context.docker.stop(self.app_path)
        shutil.rmtree(self.app_path, ignore_errors=True)

    def print_summary(self) -> None:
        config = self.collector.config
        print_success(f"\n{self.collector.name} app '{self.request.name}' created at {self.app_path}")

        lines = []
        for key, value in config.items():
            if value in (None, "") or key in ("name", "description"):
                continue
            shown = mask_secret(str(value)) if is_secret_key(key) else value
            lines.append(f"{key}: {shown}")
        if lines:
            print_note("\n".join(lines), "Configuration")

        print_info("Next steps:")
        print_info(f"  cd {self.app_path.relative_to(self.request.root)}")
        if (self.app_path / COMPOSE_FILE).is_file():
            print_info("  docker compose ps")


def report_failure(exc: Exception) -> None:
    """Print a pipeline failure in the CLI's error style."""
    if isinstance(exc, LocalServiceUnavailableError):
        print_error(f"{exc.service} is not reachable")
        if exc.guidance:
            print_note(exc.guidance, "How to fix")
        return
    print_error(str(exc))
