#!/usr/bin/env python3
"""Hive scaffolding CLI - main entry point.

Usage:
    hive <command> [options]

Commands:
    create-app   Create a new application in the monorepo's apps/ directory
    app-types    List the available application types
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import click

from hive_scaffold.app_types import APP_TYPES
from hive_scaffold.cli.create_app import (
    CreateAppPipeline,
    CreateAppRequest,
    find_monorepo_root,
    report_failure,
)
from hive_scaffold.core.errors import (
    ConfigurationError,
    ConfigWriteError,
    LocalServiceUnavailableError,
    ProcessFailedError,
)
from hive_scaffold.helpers.helpers_logging import print_header, print_info
from hive_scaffold.helpers.prompts import ClickPromptSource
from hive_scaffold.infrastructure.base import LocalFailurePolicy
from hive_scaffold.infrastructure.database import DatabaseEngine
from hive_scaffold.infrastructure.queue import QUEUE_CHOICES
from hive_scaffold.infrastructure.search import SEARCH_CHOICES

# Option names that are not flags of the value resolver
_PIPELINE_OPTIONS = ("name", "app_type", "no_interaction", "root", "local_failure", "skip_install")


def _flags_from_params(params: dict[str, Any]) -> dict[str, Any]:
    """Convert click params into resolver flags keyed by option name."""
    flags: dict[str, Any] = {}
    for key, value in params.items():
        if key in _PIPELINE_OPTIONS or value is None:
            continue
        flags[key.replace("_", "-")] = value
    return flags


@click.group()
def _click_cli() -> None:
    """Scaffold applications and their local infrastructure."""


@_click_cli.command(name="create-app", help="Create a new application")
# -- Core --
@click.argument("name", required=False)
@click.option("--type", "app_type", type=click.Choice(sorted(APP_TYPES)), help="Application type")
@click.option("--description", help="Application description")
@click.option("--no-interaction", "-n", is_flag=True, help="Never prompt; use flags and defaults")
@click.option("--root", type=click.Path(file_okay=False, path_type=Path),
              help="Monorepo root (default: nearest directory with composer.json or turbo.json)")
@click.option("--skip-install", is_flag=True, help="Do not run install and post-install commands")
# -- Infrastructure --
@click.option("--docker/--no-docker", "docker", default=None,
              help="Run services in Docker (default: ask, or no when non-interactive)")
@click.option("--local-failure", type=click.Choice([p.value for p in LocalFailurePolicy]),
              default=LocalFailurePolicy.EXIT.value, show_default=True,
              help="What to do when a local service is unreachable")
@click.option("--database", type=click.Choice([e.value for e in DatabaseEngine]), help="Database engine")
@click.option("--db-host", help="Database host")
@click.option("--db-port", help="Database port")
@click.option("--db-name", help="Database name")
@click.option("--db-user", help="Database user")
@click.option("--db-password", help="Database password")
@click.option("--use-redis/--no-redis", "use_redis", default=None, help="Install Redis for caching")
@click.option("--redis-host", help="Redis host")
@click.option("--redis-port", help="Redis port")
@click.option("--redis-password", help="Redis password")
@click.option("--queue", type=click.Choice(list(QUEUE_CHOICES)), help="Queue driver")
@click.option("--search", type=click.Choice(list(SEARCH_CHOICES)), help="Search engine")
@click.option("--meilisearch-host", help="Meilisearch URL")
@click.option("--meilisearch-key", help="Meilisearch master key")
@click.option("--elasticsearch-host", help="Elasticsearch host")
@click.option("--elasticsearch-port", help="Elasticsearch port")
@click.option("--use-minio/--no-minio", "use_minio", default=None, help="Install MinIO object storage")
@click.option("--minio-bucket", help="Default MinIO bucket")
# -- Laravel --
@click.option("--laravel-version", help="Laravel version (12, 11, 10)")
@click.option("--starter-kit", help="Starter kit (none, breeze, jetstream)")
@click.option("--horizon/--no-horizon", default=None, help="Install Laravel Horizon")
@click.option("--telescope/--no-telescope", default=None, help="Install Laravel Telescope")
@click.option("--sanctum/--no-sanctum", default=None, help="Install Laravel Sanctum")
@click.option("--octane/--no-octane", default=None, help="Install Laravel Octane")
@click.option("--octane-server", help="Octane server (roadrunner, swoole, frankenphp)")
# -- Symfony --
@click.option("--symfony-version", help="Symfony version (7.1, 7.0, 6.4)")
@click.option("--project-type", help="Symfony project type (webapp, skeleton)")
@click.option("--maker/--no-maker", default=None, help="Install the Symfony Maker bundle")
@click.option("--security/--no-security", default=None, help="Install the Symfony Security bundle")
# -- Magento --
@click.option("--magento-version", help="Magento version (2.4.7, 2.4.6)")
@click.option("--magento-edition", help="Magento edition (community, enterprise)")
@click.option("--magento-public-key", envvar="COMPOSER_AUTH_MAGENTO_PUBLIC_KEY",
              help="Marketplace public key")
@click.option("--magento-private-key", envvar="COMPOSER_AUTH_MAGENTO_PRIVATE_KEY",
              help="Marketplace private key")
@click.option("--admin-user", help="Magento admin username")
@click.option("--admin-password", help="Magento admin password")
@click.option("--admin-email", help="Magento admin email")
@click.option("--base-url", help="Magento base URL")
@click.option("--sample-data/--no-sample-data", default=None, help="Install Magento sample data")
# -- Skeleton --
@click.option("--php-version", help="PHP version (8.5, 8.4, 8.3, 8.2)")
@click.option("--tests/--no-tests", default=None, help="Include PHPUnit tests")
@click.option("--quality-tools/--no-quality-tools", default=None, help="Include PHPStan and Pint")
@click.option("--with-database/--without-database", default=None, help="Configure a database")
@click.pass_context
def create_app_cmd(ctx: click.Context, **params: Any) -> int:
    """Collect configuration, install the framework and wire up services."""
    interactive = not params["no_interaction"]
    prompts = ClickPromptSource()

    name = params["name"]
    if not name:
        if not interactive:
            raise click.UsageError("NAME is required with --no-interaction", ctx=ctx)
        name = prompts.text("Application name", placeholder="my-app", required=True)

    app_type = params["app_type"]
    if not app_type:
        if not interactive:
            raise click.UsageError("--type is required with --no-interaction", ctx=ctx)
        app_type = prompts.select(
            "Application type",
            {identifier: collector.description for identifier, collector in APP_TYPES.items()},
            default="laravel",
        )

    request = CreateAppRequest(
        name=name,
        app_type=app_type,
        root=params["root"] or find_monorepo_root(Path.cwd()),
        flags=_flags_from_params(params),
        interactive=interactive,
        local_failure=LocalFailurePolicy(params["local_failure"]),
        skip_install=params["skip_install"],
    )

    try:
        CreateAppPipeline(request, prompts).run()
    except (ConfigurationError, ProcessFailedError, LocalServiceUnavailableError, ConfigWriteError) as exc:
        report_failure(exc)
        return 1
    return 0


@_click_cli.command(name="app-types", help="List available application types")
def app_types_cmd() -> int:
    print_header("Available application types")
    for identifier, collector in APP_TYPES.items():
        print_info(f"  {identifier:<10} {collector.description}")
    return 0


def main() -> int:
    """Main CLI entry point."""
    try:
        result = _click_cli.main(
            args=sys.argv[1:],
            prog_name="hive",
            standalone_mode=False,
        )
    except click.Abort:
        print("\n⚠️  Cancelled by user")
        return 130
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    return 0 if result is None else int(result)


if __name__ == "__main__":
    sys.exit(main())
