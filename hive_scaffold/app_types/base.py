"""Common behaviour of the per-framework configuration collectors.

A collector gathers framework specific answers through a ``ConfigResolver``
and turns the accumulated ConfigMap into:

- the install command (as an ``InstallCommandResult``)
- pre- and post-install shell commands, in execution order
- placeholder values for the stub templates
- ``ConfigOperation``s applied once installation has finished

Infrastructure is not collected here. The pipeline calls
``setup_infrastructure`` with an orchestrator after the app directory
exists, and the returned keys are merged into the collector's ConfigMap.
"""

from __future__ import annotations

from pathlib import Path
from typing import ClassVar

from hive_scaffold.core.naming import app_namespace, normalize_name, package_name
from hive_scaffold.core.operation import ConfigOperation
from hive_scaffold.core.resolver import ConfigResolver
from hive_scaffold.core.results import InstallCommandResult
from hive_scaffold.helpers.template_renderer import TEMPLATES_ROOT
from hive_scaffold.infrastructure.orchestrator import (
    ConfigMap,
    InfrastructureOptions,
    InfrastructureOrchestrator,
)

STUB_APP_NAME = "{{APP_NAME}}"
STUB_APP_NAME_NORMALIZED = "{{APP_NAME_NORMALIZED}}"
STUB_APP_NAMESPACE = "{{APP_NAMESPACE}}"
STUB_PACKAGE_NAME = "{{PACKAGE_NAME}}"
STUB_DESCRIPTION = "{{DESCRIPTION}}"


class AppTypeCollector:
    """Base collector; one subclass per framework."""

    identifier: ClassVar[str] = ""
    name: ClassVar[str] = ""
    description: ClassVar[str] = ""

    def __init__(self, resolver: ConfigResolver) -> None:
        self.resolver = resolver
        self.config: ConfigMap = {}

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------

    def collect_configuration(self, app_name: str) -> ConfigMap:
        """Gather name, description and framework options into the ConfigMap."""
        self.config = {
            "name": app_name,
            "description": self.resolver.text(
                "Application description",
                flag="description",
                default=f"A {self.name} application",
            ),
        }
        self.config.update(self.collect_framework_config())
        return dict(self.config)

    def collect_framework_config(self) -> ConfigMap:
        return {}

    def infrastructure_options(self) -> InfrastructureOptions:
        return InfrastructureOptions()

    def setup_infrastructure(self, orchestrator: InfrastructureOrchestrator, app_path: Path) -> ConfigMap:
        """Run the orchestrator and fold its keys into this collector's config."""
        infra = orchestrator.setup_infrastructure(
            self.config["name"],
            app_path,
            self.infrastructure_options(),
        )
        self.config.update(infra)
        return infra

    # ------------------------------------------------------------------
    # Derived output
    # ------------------------------------------------------------------

    def get_install_command(self, config: ConfigMap) -> InstallCommandResult:
        raise NotImplementedError

    def get_pre_install_commands(self, config: ConfigMap) -> list[str]:
        return []

    def get_post_install_commands(self, config: ConfigMap) -> list[str]:
        return []

    def get_stub_path(self) -> Path:
        return TEMPLATES_ROOT / "apps" / self.identifier

    def get_stub_variables(self, config: ConfigMap) -> dict[str, str]:
        return self.common_stub_variables(config)

    def get_writable_config(self, config: ConfigMap | None = None) -> list[ConfigOperation]:
        return []

    def common_stub_variables(self, config: ConfigMap) -> dict[str, str]:
        app_name = str(config.get("name", ""))
        return {
            STUB_APP_NAME: app_name,
            STUB_APP_NAME_NORMALIZED: normalize_name(app_name),
            STUB_APP_NAMESPACE: app_namespace(app_name),
            STUB_PACKAGE_NAME: package_name(app_name),
            STUB_DESCRIPTION: str(config.get("description") or f"Application: {app_name}"),
        }

    def _snapshot(self, config: ConfigMap | None) -> ConfigMap:
        return dict(self.config if config is None else config)

