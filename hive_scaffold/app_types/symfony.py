"""Symfony application type."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from hive_scaffold.app_types.base import AppTypeCollector
from hive_scaffold.core.credentials import generate_secret_key
from hive_scaffold.core.operation import ConfigOperation
from hive_scaffold.core.results import InstallCommandResult
from hive_scaffold.infrastructure.orchestrator import ConfigMap, InfrastructureOptions

SYMFONY_VERSIONS = {
    "7.1": "Symfony 7.1 (Latest)",
    "7.0": "Symfony 7.0",
    "6.4": "Symfony 6.4 (LTS)",
}
DEFAULT_SYMFONY_VERSION = "7.1"

PROJECT_TYPES = {
    "webapp": "Web Application (full-featured)",
    "skeleton": "Microservice/API (minimal)",
}

STUB_SYMFONY_VERSION = "{{SYMFONY_VERSION}}"
STUB_DATABASE_DRIVER = "{{DATABASE_DRIVER}}"

# Doctrine DSN scheme per engine
DSN_SCHEMES = {
    "mysql": "mysql",
    "mariadb": "mysql",
    "postgresql": "postgresql",
}


def database_url(config: ConfigMap) -> str:
    """Doctrine ``DATABASE_URL`` for the configured engine."""
    db_type = str(config.get("db_type", "mysql"))
    if db_type == "sqlite":
        return "sqlite:///%kernel.project_dir%/var/data.db"

    scheme = DSN_SCHEMES.get(db_type, "mysql")
    user = quote(str(config.get("db_user", "root")), safe="")
    password = quote(str(config.get("db_password", "")), safe="")
    host = config.get("db_host", "127.0.0.1")
    port = config.get("db_port", 3306)
    name = config.get("db_name", "symfony")
    url = f"{scheme}://{user}:{password}@{host}:{port}/{name}"
    if db_type == "postgresql":
        return f"{url}?serverVersion=16&charset=utf8"
    if db_type == "mariadb":
        return f"{url}?serverVersion=mariadb-11.0.0&charset=utf8mb4"
    return f"{url}?serverVersion=8.0&charset=utf8mb4"


class SymfonyAppType(AppTypeCollector):
    identifier = "symfony"
    name = "Symfony"
    description = "High-performance PHP framework for web applications"

    def collect_framework_config(self) -> ConfigMap:
        r = self.resolver
        return {
            "symfony_version": r.select(
                "Symfony version",
                SYMFONY_VERSIONS,
                flag="symfony-version",
                default=DEFAULT_SYMFONY_VERSION,
            ),
            "project_type": r.select("Project type", PROJECT_TYPES, flag="project-type", default="webapp"),
            "install_maker": r.confirm("Install Symfony Maker Bundle?", flag="maker", default=True),
            "install_security": r.confirm("Install Security Bundle?", flag="security", default=True),
            "app_secret": generate_secret_key(),
        }

    def infrastructure_options(self) -> InfrastructureOptions:
        return InfrastructureOptions(
            needs_database=True,
            databases=["mysql", "postgresql", "mariadb", "sqlite"],
            needs_cache=True,
            needs_queue=True,
            needs_search=True,
            needs_storage=True,
        )

    def get_install_command(self, config: ConfigMap) -> InstallCommandResult:
        version = config.get("symfony_version") or DEFAULT_SYMFONY_VERSION
        return InstallCommandResult.success(f"composer create-project symfony/skeleton:{version}.* .")

    def get_post_install_commands(self, config: ConfigMap) -> list[str]:
        commands = []
        if config.get("project_type", "webapp") == "webapp":
            commands.append("composer require webapp")
        if config.get("install_maker") is True:
            commands.append("composer require --dev symfony/maker-bundle")
        if config.get("install_security") is True:
            commands.append("composer require symfony/security-bundle")

        commands.append("composer require symfony/orm-pack")
        commands.append("php bin/console doctrine:database:create --if-not-exists")
        commands.append("php bin/console doctrine:migrations:migrate --no-interaction")
        return commands

    def get_stub_variables(self, config: ConfigMap) -> dict[str, str]:
        variables = self.common_stub_variables(config)
        variables[STUB_SYMFONY_VERSION] = str(config.get("symfony_version") or DEFAULT_SYMFONY_VERSION)
        variables[STUB_DATABASE_DRIVER] = str(config.get("db_type", "mysql"))
        return variables

    def get_writable_config(self, config: ConfigMap | None = None) -> list[ConfigOperation]:
        return [ConfigOperation.set_values(".env", self._env_values(self._snapshot(config)))]

    def _env_values(self, config: ConfigMap) -> dict[str, Any]:
        env: dict[str, Any] = {
            "APP_ENV": "dev",
            "APP_DEBUG": "1",
            "APP_SECRET": config.get("app_secret") or generate_secret_key(),
            "DATABASE_URL": database_url(config),
        }

        if config.get("use_redis") is True:
            host = config.get("redis_host", "127.0.0.1")
            port = config.get("redis_port", 6379)
            password = config.get("redis_password")
            auth = f"{quote(str(password), safe='')}@" if password else ""
            env["REDIS_URL"] = f"redis://{auth}{host}:{port}"
            env["CACHE_DRIVER"] = "redis"

        env["MAILER_DSN"] = config.get("mailer_dsn") or "null://null"

        if config.get("use_meilisearch") is True:
            env["MEILISEARCH_URL"] = config.get("meilisearch_host", "http://localhost:7700")
            env["MEILISEARCH_API_KEY"] = config.get("meilisearch_key", "")

        if config.get("use_minio") is True:
            env.update({
                "S3_ENDPOINT": config.get("minio_endpoint", "http://localhost:9000"),
                "S3_ACCESS_KEY": config.get("minio_access_key", "minioadmin"),
                "S3_SECRET_KEY": config.get("minio_secret_key", "minioadmin"),
                "S3_BUCKET": config.get("minio_bucket", "symfony"),
                "S3_REGION": "us-east-1",
            })
        return env
