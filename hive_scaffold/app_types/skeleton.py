"""Minimal PHP application with Composer, optional tests and quality tools."""

from __future__ import annotations

from typing import Any

from hive_scaffold.app_types.base import AppTypeCollector
from hive_scaffold.core.operation import ConfigOperation
from hive_scaffold.core.results import InstallCommandResult
from hive_scaffold.infrastructure.orchestrator import ConfigMap, InfrastructureOptions

PHP_VERSIONS = {
    "8.5": "PHP 8.5",
    "8.4": "PHP 8.4",
    "8.3": "PHP 8.3",
    "8.2": "PHP 8.2",
}
DEFAULT_PHP_VERSION = "8.3"

STUB_PHP_VERSION = "{{PHP_VERSION}}"


class SkeletonAppType(AppTypeCollector):
    identifier = "skeleton"
    name = "Skeleton"
    description = "Minimal PHP application with Composer"

    def collect_framework_config(self) -> ConfigMap:
        r = self.resolver
        return {
            "php_version": r.select("PHP version", PHP_VERSIONS, flag="php-version", default=DEFAULT_PHP_VERSION),
            "include_tests": r.confirm("Include PHPUnit tests?", flag="tests", default=True),
            "include_quality_tools": r.confirm(
                "Include quality tools (PHPStan, Pint)?",
                flag="quality-tools",
                default=True,
            ),
            "include_database": r.confirm("Does this app need a database?", flag="with-database", default=False),
        }

    def infrastructure_options(self) -> InfrastructureOptions:
        return InfrastructureOptions(
            needs_database=self.config.get("include_database") is True,
            databases=["mysql", "postgresql", "sqlite"],
            needs_cache=False,
            needs_queue=False,
            needs_search=False,
            needs_storage=False,
        )

    def get_install_command(self, config: ConfigMap) -> InstallCommandResult:
        # the stubs carry composer.json, nothing to create up front
        return InstallCommandResult.success("")

    def get_post_install_commands(self, config: ConfigMap) -> list[str]:
        commands = ["composer install"]
        if config.get("include_tests") is True:
            commands.append("composer test")
        return commands

    def get_stub_variables(self, config: ConfigMap) -> dict[str, str]:
        variables = self.common_stub_variables(config)
        variables[STUB_PHP_VERSION] = str(config.get("php_version") or DEFAULT_PHP_VERSION)
        return variables

    def get_writable_config(self, config: ConfigMap | None = None) -> list[ConfigOperation]:
        config = self._snapshot(config)
        env: dict[str, Any] = {
            "APP_NAME": config.get("name", "app"),
            "APP_ENV": "development",
            "APP_DEBUG": "true",
        }
        if config.get("db_host"):
            env.update({
                "DB_CONNECTION": config.get("db_type", "mysql"),
                "DB_HOST": config["db_host"],
                "DB_PORT": config.get("db_port", 3306),
                "DB_DATABASE": config.get("db_name", ""),
                "DB_USERNAME": config.get("db_user", ""),
                "DB_PASSWORD": config.get("db_password", ""),
            })
        if config.get("use_redis") is True:
            env["REDIS_HOST"] = config.get("redis_host", "127.0.0.1")
            env["REDIS_PORT"] = config.get("redis_port", 6379)
        return [ConfigOperation.set_values(".env", env)]
