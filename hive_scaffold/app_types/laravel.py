"""Laravel application type."""

from __future__ import annotations

from typing import Any

from hive_scaffold.app_types.base import AppTypeCollector
from hive_scaffold.core.operation import ConfigOperation
from hive_scaffold.core.results import InstallCommandResult
from hive_scaffold.infrastructure.orchestrator import ConfigMap, InfrastructureOptions

LARAVEL_VERSIONS = {
    "12": "Laravel 12 (Latest)",
    "11": "Laravel 11 (LTS)",
    "10": "Laravel 10",
}
DEFAULT_LARAVEL_VERSION = "12"

STARTER_KITS = {
    "none": "None",
    "breeze": "Laravel Breeze (simple authentication)",
    "jetstream": "Laravel Jetstream (teams, 2FA, API tokens)",
}

OCTANE_SERVERS = {
    "roadrunner": "RoadRunner",
    "swoole": "Swoole",
    "frankenphp": "FrankenPHP",
}

# Laravel's DB_CONNECTION names differ from the engine identifiers
DB_CONNECTIONS = {
    "mysql": "mysql",
    "mariadb": "mariadb",
    "postgresql": "pgsql",
    "sqlite": "sqlite",
}

# Laravel 11 renamed CACHE_DRIVER to CACHE_STORE
LEGACY_CACHE_VERSIONS = ("10",)

STUB_LARAVEL_VERSION = "{{LARAVEL_VERSION}}"
STUB_DATABASE_DRIVER = "{{DATABASE_DRIVER}}"

MODULES_PACKAGES_PATCH = (
    "php -r \"$f = 'config/modules.php'; "
    "$c = file_get_contents($f); "
    "$c = str_replace(\\\"'modules' => base_path('Modules'),\\\", "
    "\\\"'modules' => base_path('Modules'),\\n        'packages' => base_path('../../../packages'),\\\", $c); "
    "file_put_contents($f, $c);\""
)


def cache_env_key(laravel_version: Any) -> str:
    version = str(laravel_version or DEFAULT_LARAVEL_VERSION)
    return "CACHE_DRIVER" if version in LEGACY_CACHE_VERSIONS else "CACHE_STORE"


class LaravelAppType(AppTypeCollector):
    identifier = "laravel"
    name = "Laravel"
    description = "The PHP framework for web artisans"

    def collect_framework_config(self) -> ConfigMap:
        r = self.resolver
        config: ConfigMap = {
            "laravel_version": r.select(
                "Laravel version",
                LARAVEL_VERSIONS,
                flag="laravel-version",
                default=DEFAULT_LARAVEL_VERSION,
            ),
            "starter_kit": r.select("Starter kit", STARTER_KITS, flag="starter-kit", default="none"),
            "install_horizon": r.confirm("Install Laravel Horizon (queue dashboard)?", flag="horizon", default=False),
            "install_telescope": r.confirm("Install Laravel Telescope (debugging)?", flag="telescope", default=False),
            "install_sanctum": r.confirm("Install Laravel Sanctum (API auth)?", flag="sanctum", default=True),
            "install_octane": r.confirm("Install Laravel Octane (performance)?", flag="octane", default=False),
        }
        if config["install_octane"]:
            config["octane_server"] = r.select(
                "Octane server",
                OCTANE_SERVERS,
                flag="octane-server",
                default="roadrunner",
            )
        return config

    def infrastructure_options(self) -> InfrastructureOptions:
        return InfrastructureOptions(
            needs_database=True,
            databases=["mysql", "postgresql", "sqlite"],
            needs_cache=True,
            needs_queue=True,
            needs_search=True,
            needs_storage=True,
        )

    def get_install_command(self, config: ConfigMap) -> InstallCommandResult:
        version = config.get("laravel_version") or DEFAULT_LARAVEL_VERSION
        return InstallCommandResult.success(
            f"composer create-project laravel/laravel:{version}.x . --prefer-dist"
        )

    def get_post_install_commands(self, config: ConfigMap) -> list[str]:
        """Commands in dependency order; migrations always run last."""
        commands = ["php artisan key:generate"]

        # module discovery before any starter kit touches the app
        commands.append("composer config --no-plugins allow-plugins.wikimedia/composer-merge-plugin true")
        commands.append("composer require nwidart/laravel-modules")
        commands.append('php artisan vendor:publish --provider="Nwidart\\Modules\\LaravelModulesServiceProvider"')
        commands.append(MODULES_PACKAGES_PATCH)

        starter_kit = config.get("starter_kit", "none")
        if starter_kit == "breeze":
            commands.append("composer require laravel/breeze --dev")
            commands.append("php artisan breeze:install")
        elif starter_kit == "jetstream":
            commands.append("composer require laravel/jetstream")
            commands.append("php artisan jetstream:install livewire")

        if config.get("install_horizon") is True:
            commands.append("composer require laravel/horizon")
            commands.append("php artisan horizon:install")

        if config.get("install_telescope") is True:
            commands.append("composer require laravel/telescope --dev")
            commands.append("php artisan telescope:install")

        if config.get("install_sanctum") is True:
            commands.append('php artisan vendor:publish --provider="Laravel\\Sanctum\\SanctumServiceProvider"')

        if config.get("install_octane") is True:
            commands.append("composer require laravel/octane")
            commands.append(f"php artisan octane:install --server={config.get('octane_server', 'roadrunner')}")

        commands.append("php artisan migrate")
        return commands

    def get_stub_variables(self, config: ConfigMap) -> dict[str, str]:
        variables = self.common_stub_variables(config)
        variables[STUB_LARAVEL_VERSION] = str(config.get("laravel_version") or DEFAULT_LARAVEL_VERSION)
        variables[STUB_DATABASE_DRIVER] = DB_CONNECTIONS.get(str(config.get("db_type", "mysql")), "mysql")
        return variables

    def get_writable_config(self, config: ConfigMap | None = None) -> list[ConfigOperation]:
        return [ConfigOperation.set_values(".env", self._env_values(self._snapshot(config)))]

    def _env_values(self, config: ConfigMap) -> dict[str, Any]:
        app_name = config.get("name", "Laravel")
        env: dict[str, Any] = {
            "APP_NAME": app_name,
            "APP_ENV": "local",
            "APP_DEBUG": "true",
            "APP_URL": config.get("app_url", "http://localhost"),
            "DB_CONNECTION": DB_CONNECTIONS.get(str(config.get("db_type", "mysql")), "mysql"),
        }
        if config.get("db_type") == "sqlite":
            env["DB_DATABASE"] = config.get("db_name", "database/database.sqlite")
        else:
            env.update({
                "DB_HOST": config.get("db_host", "127.0.0.1"),
                "DB_PORT": config.get("db_port", 3306),
                "DB_DATABASE": config.get("db_name", "laravel"),
                "DB_USERNAME": config.get("db_user", "root"),
                "DB_PASSWORD": config.get("db_password", ""),
            })

        if config.get("use_redis") is True:
            env["REDIS_HOST"] = config.get("redis_host", "127.0.0.1")
            env["REDIS_PORT"] = config.get("redis_port", 6379)
            if config.get("redis_password"):
                env["REDIS_PASSWORD"] = config["redis_password"]
            env[cache_env_key(config.get("laravel_version"))] = "redis"
            env["QUEUE_CONNECTION"] = "redis"
            env["SESSION_DRIVER"] = "redis"

        self._queue_env(config, env)

        if config.get("mail_host"):
            env.update({
                "MAIL_MAILER": "smtp",
                "MAIL_HOST": config["mail_host"],
                "MAIL_PORT": config.get("mail_port", 1025),
                "MAIL_USERNAME": config.get("mail_username", ""),
                "MAIL_PASSWORD": config.get("mail_password", ""),
                "MAIL_ENCRYPTION": config.get("mail_encryption", "null"),
                "MAIL_FROM_ADDRESS": config.get("mail_from", "hello@example.com"),
                "MAIL_FROM_NAME": app_name,
            })

        if config.get("use_meilisearch") is True:
            env["MEILISEARCH_HOST"] = config.get("meilisearch_host", "http://localhost:7700")
            if config.get("meilisearch_key"):
                env["MEILISEARCH_KEY"] = config["meilisearch_key"]
            env["SCOUT_DRIVER"] = "meilisearch"

        if config.get("use_minio") is True:
            env.update({
                "FILESYSTEM_DISK": "s3",
                "AWS_ACCESS_KEY_ID": config.get("minio_access_key", "minioadmin"),
                "AWS_SECRET_ACCESS_KEY": config.get("minio_secret_key", "minioadmin"),
                "AWS_DEFAULT_REGION": "us-east-1",
                "AWS_BUCKET": config.get("minio_bucket", "laravel"),
                "AWS_ENDPOINT": config.get("minio_endpoint", "http://localhost:9000"),
                "AWS_USE_PATH_STYLE_ENDPOINT": "true",
            })
        return env

    @staticmethod
    def _queue_env(config: ConfigMap, env: dict[str, Any]) -> None:
        driver = config.get("queue_driver")
        if driver is None:
            return
        env["QUEUE_CONNECTION"] = driver
        if driver == "rabbitmq":
            env["RABBITMQ_HOST"] = config.get("queue_host", "localhost")
            env["RABBITMQ_PORT"] = config.get("queue_port", 5672)
            env["RABBITMQ_USER"] = config.get("queue_user", "guest")
            env["RABBITMQ_PASSWORD"] = config.get("queue_password", "guest")
            env["RABBITMQ_VHOST"] = config.get("queue_vhost", "/")
        elif driver == "sqs":
            env["AWS_DEFAULT_REGION"] = config.get("queue_region", "us-east-1")
            env["SQS_PREFIX"] = config.get("queue_prefix", "")
