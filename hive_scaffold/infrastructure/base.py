"""Shared Docker-first / local-fallback state machine for service setup.

Every infrastructure subsystem follows the same sequence::

    CheckDocker -> OfferDocker | NoDockerGuidance
                -> DockerSetup | LocalSetup
                -> result

Concrete strategies fill in the subsystem specific hooks (credentials,
compose fragment, readiness command, connection prompts, local check)
and inherit the sequencing from ``ServiceSetupStrategy``.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from hive_scaffold.core.errors import ConfigurationError, LocalServiceUnavailableError
from hive_scaffold.core.naming import container_prefix
from hive_scaffold.core.resolver import ConfigResolver
from hive_scaffold.helpers.helpers_logging import (
    print_error,
    print_info,
    print_success,
    print_warning,
)
from hive_scaffold.infrastructure.docker import COMPOSE_FILE, DockerController, ProcessRunner
from hive_scaffold.infrastructure.health import HealthChecker

if TYPE_CHECKING:
    from hive_scaffold.infrastructure.orchestrator import InfrastructureOptions


class LocalFailurePolicy(Enum):
    """What to do when a supposedly running local service is unreachable."""

    EXIT = "exit"
    MANUAL = "manual"


@dataclass
class ServiceContext:
    """Collaborators shared by all strategies of one scaffolding run."""

    resolver: ConfigResolver
    docker: DockerController
    runner: ProcessRunner
    health: HealthChecker
    local_failure: LocalFailurePolicy = LocalFailurePolicy.EXIT
    platform: str = sys.platform


class ServiceSetupResult:
    """Connection record produced by a strategy.

    Subclasses are dataclasses; ``to_config`` flattens them into
    subsystem-prefixed ConfigMap keys.
    """

    using_docker: bool = False

    def to_config(self) -> dict[str, Any]:
        raise NotImplementedError


def parse_port(value: object, field_name: str = "port") -> int:
    """Coerce a prompt/flag value into a TCP port number."""
    try:
        port = int(str(value).strip())
    except ValueError as exc:
        raise ConfigurationError(f"Invalid {field_name}: '{value}' is not a number") from exc
    if not 0 < port < 65536:
        raise ConfigurationError(f"Invalid {field_name}: {port} is outside 1-65535")
    return port


def base_substitutions(app_name: str) -> dict[str, str]:
    """Placeholders common to every compose fragment."""
    prefix = container_prefix(app_name)
    return {
        "{{CONTAINER_PREFIX}}": prefix,
        "{{VOLUME_PREFIX}}": prefix,
        "{{NETWORK_NAME}}": prefix,
    }


class ServiceSetupStrategy:
    """Base class for one infrastructure subsystem.

    Hooks a subclass provides:
        docker_settings(app_name) -> result with generated credentials
        compose_substitutions(app_name, result) -> placeholder map
        connection_settings(app_name) -> result from prompts / flags / defaults
        check_local() -> bool
        provision(app_path, result) -> bool (optional)
    """

    label = ""
    compose_service = ""
    template_name = ""
    supports_docker: ClassVar[bool] = True

    def __init__(self, context: ServiceContext) -> None:
        self.context = context

    @property
    def resolver(self) -> ConfigResolver:
        return self.context.resolver

    @property
    def docker(self) -> DockerController:
        return self.context.docker

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def setup(
        self,
        app_name: str,
        app_path: Path,
        options: InfrastructureOptions | None = None,
        current: Mapping[str, Any] | None = None,
    ) -> ServiceSetupResult | None:
        """Run the full Docker-first state machine for this subsystem."""
        if self.supports_docker:
            if self.docker.is_available():
                if self.offer_docker():
                    result = self.docker_setup(app_name, app_path)
                    if result is not None:
                        return result
                    print_warning(f"Docker setup for {self.label} failed, falling back to local setup")
            else:
                self.show_docker_guidance()

        return self.local_setup(app_name, app_path)

    def offer_docker(self) -> bool:
        """Ask whether to run this service in Docker.

        Interactive sessions default to yes; non-interactive runs only use
        Docker when ``--docker`` is passed explicitly.
        """
        return self.resolver.confirm(
            f"Use Docker for {self.label}? (recommended)",
            flag="docker",
            default=False,
            prompt_default=True,
        )

    def show_docker_guidance(self) -> None:
        if not self.resolver.interactive:
            return
        print_warning(f"Docker is not available, {self.label} will be configured locally")
        self.resolver.note(
            self.docker.install_guidance(self.context.platform),
            "Docker is recommended for local services",
        )

    # ------------------------------------------------------------------
    # Docker path
    # ------------------------------------------------------------------

    def docker_setup(self, app_name: str, app_path: Path) -> ServiceSetupResult | None:
        """Compose fragment, start, readiness, provisioning.

        Returns None when any step before provisioning fails, so the caller
        can fall back to local setup.
        """
        result = self.docker_settings(app_name)

        substitutions = base_substitutions(app_name)
        substitutions.update(self.compose_substitutions(app_name, result))
        fragment = self.docker.generate_compose_fragment(self.template_name, substitutions)
        if not fragment or not self.docker.merge_into_compose_file(app_path / COMPOSE_FILE, fragment):
            print_error(f"Could not write the {self.label} service to {COMPOSE_FILE}")
            return None

        print_info(f"Starting {self.label} container...")
        if not self.docker.start(app_path):
            print_error(f"Failed to start {self.label} container")
            return None

        print_info(f"Waiting for {self.label} to be ready...")
        if not self.docker.wait_for_ready(app_path, self.compose_service, check_command=self.readiness_command(result)):
            print_warning(f"{self.label} did not become ready in time")
            return None

        if not self.provision(app_path, result):
            print_warning(f"{self.label} is running but initial provisioning failed; finish it manually")

        print_success(f"{self.label} is running in Docker")
        self.report(result)
        return result

    def readiness_command(self, result: Any) -> list[str] | None:
        return None

    def provision(self, app_path: Path, result: Any) -> bool:
        return True

    def report(self, result: Any) -> None:
        """Print a summary of the connection (secrets masked)."""

    # ------------------------------------------------------------------
    # Local path
    # ------------------------------------------------------------------

    def local_setup(self, app_name: str, app_path: Path) -> ServiceSetupResult | None:
        """Use an existing local service.

        Non-interactive runs get flag/default values without probing. An
        interactive "already running" answer is verified; when the check
        fails the user may retry with Docker, after which the configured
        LocalFailurePolicy decides between stopping and manual entry.
        """
        if not self.resolver.interactive:
            return self.connection_settings(app_name)

        running = self.resolver.confirm(f"Is {self.label} already running locally?", default=True)
        if not running:
            print_info(f"Enter the connection details for your {self.label} server")
            return self.connection_settings(app_name)

        print_info(f"Checking {self.label} connectivity...")
        if self.check_local():
            print_success(f"{self.label} is reachable")
            return self.connection_settings(app_name)

        print_error(f"Could not connect to {self.label}")
        if self.supports_docker and self.docker.is_available():
            if self.resolver.confirm(f"Set up {self.label} with Docker instead?", default=True):
                result = self.docker_setup(app_name, app_path)
                if result is not None:
                    return result

        if self.context.local_failure is LocalFailurePolicy.MANUAL:
            print_warning(f"Continuing with manually entered {self.label} settings")
            return self.connection_settings(app_name)

        raise LocalServiceUnavailableError(self.label, self.local_guidance())

    def local_guidance(self) -> str:
        return f"Start {self.label} locally or install Docker, then run the command again."

    # ------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------

    def docker_settings(self, app_name: str) -> Any:
        raise NotImplementedError

    def compose_substitutions(self, app_name: str, result: Any) -> dict[str, str]:
        raise NotImplementedError

    def connection_settings(self, app_name: str) -> Any:
        raise NotImplementedError

    def check_local(self) -> bool:
        raise NotImplementedError
