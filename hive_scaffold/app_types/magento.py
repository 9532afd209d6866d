"""Magento Open Source / Adobe Commerce application type.

Magento packages come from repo.magento.com, which needs marketplace
access keys. Keys come from ``--magento-public-key`` /
``--magento-private-key``, the ``COMPOSER_AUTH_MAGENTO_*`` environment
variables (click ``envvar``), or an interactive prompt. Missing keys are
reported through ``InstallCommandResult.failure`` rather than raised.
"""

from __future__ import annotations

import json
import shlex
from typing import Any

from hive_scaffold.app_types.base import AppTypeCollector
from hive_scaffold.core.operation import ConfigOperation
from hive_scaffold.core.results import InstallCommandResult
from hive_scaffold.helpers.helpers_logging import mask_secret, print_info
from hive_scaffold.infrastructure.orchestrator import ConfigMap, InfrastructureOptions

MARKETPLACE_URL = "https://marketplace.magento.com/customer/accessKeys/"
REPOSITORY_URL = "https://repo.magento.com/"
ENV_CONFIG_FILE = "app/etc/env.yaml"

MAGENTO_VERSIONS = {
    "2.4.7": "Magento 2.4.7 (Latest)",
    "2.4.6": "Magento 2.4.6",
}
DEFAULT_MAGENTO_VERSION = "2.4.7"

EDITIONS = {
    "community": "Magento Open Source (Community)",
    "enterprise": "Adobe Commerce (Enterprise)",
}

LANGUAGES = {
    "en_US": "English (United States)",
    "en_GB": "English (United Kingdom)",
    "fr_FR": "French (France)",
    "de_DE": "German (Germany)",
    "es_ES": "Spanish (Spain)",
}

CURRENCIES = {
    "USD": "US Dollar (USD)",
    "EUR": "Euro (EUR)",
    "GBP": "British Pound (GBP)",
}

TIMEZONES = {
    "America/New_York": "America/New_York (EST)",
    "America/Chicago": "America/Chicago (CST)",
    "America/Los_Angeles": "America/Los_Angeles (PST)",
    "Europe/London": "Europe/London (GMT)",
    "Europe/Paris": "Europe/Paris (CET)",
}

DEFAULT_ADMIN = {
    "admin_firstname": "Admin",
    "admin_lastname": "User",
    "admin_email": "admin@example.com",
    "admin_user": "admin",
    "admin_password": "Admin123!",
}

STUB_MAGENTO_VERSION = "{{MAGENTO_VERSION}}"
STUB_BASE_URL = "{{BASE_URL}}"
STUB_ADMIN_USER = "{{ADMIN_USER}}"

SESSION_REDIS_OPTIONS = {
    "compression_threshold": "2048",
    "compression_library": "gzip",
    "log_level": "4",
    "max_concurrency": "6",
    "break_after_frontend": "5",
    "break_after_adminhtml": "30",
    "first_lifetime": "600",
    "bot_first_lifetime": "60",
    "bot_lifetime": "7200",
    "disable_locking": "0",
    "min_lifetime": "60",
    "max_lifetime": "2592000",
}


def composer_auth_json(public_key: str, private_key: str) -> str:
    """``COMPOSER_AUTH`` payload for repo.magento.com."""
    return json.dumps(
        {"http-basic": {"repo.magento.com": {"username": public_key, "password": private_key}}},
        separators=(",", ":"),
    )


class MagentoAppType(AppTypeCollector):
    identifier = "magento"
    name = "Magento"
    description = "Enterprise e-commerce platform"

    def collect_framework_config(self) -> ConfigMap:
        r = self.resolver
        config: ConfigMap = {}

        r.note(
            f"Get your authentication keys from: {MARKETPLACE_URL}",
            "Magento marketplace authentication",
        )
        config["magento_public_key"] = r.text(
            "Magento Public Key (username)",
            flag="magento-public-key",
            required=True,
        )
        config["magento_private_key"] = r.password(
            "Magento Private Key (password)",
            flag="magento-private-key",
        )
        if config["magento_private_key"]:
            print_info(f"Using private key {mask_secret(config['magento_private_key'])}")

        config["magento_edition"] = r.select("Edition", EDITIONS, flag="magento-edition", default="community")
        config["magento_version"] = r.select(
            "Magento version",
            MAGENTO_VERSIONS,
            flag="magento-version",
            default=DEFAULT_MAGENTO_VERSION,
        )

        config["admin_firstname"] = r.text("Admin first name", default=DEFAULT_ADMIN["admin_firstname"])
        config["admin_lastname"] = r.text("Admin last name", default=DEFAULT_ADMIN["admin_lastname"])
        config["admin_email"] = r.text(
            "Admin email",
            flag="admin-email",
            default=DEFAULT_ADMIN["admin_email"],
        )
        config["admin_user"] = r.text("Admin username", flag="admin-user", default=DEFAULT_ADMIN["admin_user"])
        config["admin_password"] = r.password(
            "Admin password",
            flag="admin-password",
            default=DEFAULT_ADMIN["admin_password"],
        )

        config["base_url"] = r.text(
            "Base URL",
            flag="base-url",
            default="http://localhost/",
            placeholder="http://localhost/",
            required=True,
        )
        config["language"] = r.select("Default language", LANGUAGES, default="en_US")
        config["currency"] = r.select("Default currency", CURRENCIES, default="USD")
        config["timezone"] = r.select("Default timezone", TIMEZONES, default="America/New_York")
        config["install_sample_data"] = r.confirm(
            "Install sample data (demo products and content)?",
            flag="sample-data",
            default=False,
        )
        return config

    def infrastructure_options(self) -> InfrastructureOptions:
        return InfrastructureOptions(
            needs_database=True,
            databases=["mysql", "mariadb"],
            needs_cache=True,
            needs_queue=True,
            needs_search=True,
            needs_storage=False,
        )

    def get_install_command(self, config: ConfigMap) -> InstallCommandResult:
        public_key = str(config.get("magento_public_key") or "")
        private_key = str(config.get("magento_private_key") or "")
        if not public_key or not private_key:
            return InstallCommandResult.failure(
                "Magento marketplace authentication keys are required",
                f"Get your keys from: {MARKETPLACE_URL} "
                "and pass --magento-public-key/--magento-private-key or set "
                "COMPOSER_AUTH_MAGENTO_PUBLIC_KEY/COMPOSER_AUTH_MAGENTO_PRIVATE_KEY",
            )

        edition = config.get("magento_edition") or "community"
        version = config.get("magento_version") or DEFAULT_MAGENTO_VERSION
        auth = shlex.quote(composer_auth_json(public_key, private_key))
        return InstallCommandResult.success(
            f"COMPOSER_AUTH={auth} composer create-project "
            f"--repository-url={REPOSITORY_URL} "
            f"magento/project-{edition}-edition:{version} . --ignore-platform-reqs"
        )

    def get_post_install_commands(self, config: ConfigMap) -> list[str]:
        commands = [
            "find var generated vendor pub/static pub/media app/etc -type f -exec chmod g+w {} +",
            "find var generated vendor pub/static pub/media app/etc -type d -exec chmod g+ws {} +",
            "chmod u+x bin/magento",
        ]

        if config.get("install_sample_data") is True:
            commands.append("php bin/magento sampledata:deploy")

        commands.append(self._setup_install_command(config))

        if config.get("use_redis") is True:
            commands.extend(self._redis_config_commands(config))

        language = config.get("language", "en_US")
        commands.append(f"php bin/magento setup:static-content:deploy -f {language}")
        commands.append("php bin/magento setup:di:compile")
        commands.append("php bin/magento indexer:reindex")
        commands.append("php bin/magento cache:flush")
        return commands

    def _setup_install_command(self, config: ConfigMap) -> str:
        args: list[tuple[str, Any]] = [
            ("base-url", config.get("base_url", "http://localhost/")),
            ("db-host", config.get("db_host", "127.0.0.1")),
            ("db-name", config.get("db_name", "magento")),
            ("db-user", config.get("db_user", "root")),
        ]
        if config.get("db_password"):
            args.append(("db-password", config["db_password"]))
        args.extend((key.replace("_", "-"), config.get(key, default)) for key, default in DEFAULT_ADMIN.items())
        args.extend([
            ("language", config.get("language", "en_US")),
            ("currency", config.get("currency", "USD")),
            ("timezone", config.get("timezone", "America/New_York")),
            ("backend-frontname", "admin"),
        ])
        if config.get("use_elasticsearch") is True:
            args.extend([
                ("search-engine", f"elasticsearch{config.get('elasticsearch_version', '7')}"),
                ("elasticsearch-host", config.get("elasticsearch_host", "localhost")),
                ("elasticsearch-port", config.get("elasticsearch_port", 9200)),
            ])
        args.append(("session-save", "db"))

        rendered = " ".join(f"--{name}={shlex.quote(str(value))}" for name, value in args)
        return f"php bin/magento setup:install {rendered}"

    @staticmethod
    def _redis_config_commands(config: ConfigMap) -> list[str]:
        host = shlex.quote(str(config.get("redis_host", "127.0.0.1")))
        port = config.get("redis_port", 6379)
        password = config.get("redis_password") or ""
        quoted = shlex.quote(str(password))

        cache = f"php bin/magento setup:config:set --cache-backend=redis --cache-backend-redis-server={host} --cache-backend-redis-port={port} --cache-backend-redis-db=0"
        page = f"php bin/magento setup:config:set --page-cache=redis --page-cache-redis-server={host} --page-cache-redis-port={port} --page-cache-redis-db=1"
        session = f"php bin/magento setup:config:set --session-save=redis --session-save-redis-host={host} --session-save-redis-port={port} --session-save-redis-db=2"
        if password:
            cache += f" --cache-backend-redis-password={quoted}"
            page += f" --page-cache-redis-password={quoted}"
            session += f" --session-save-redis-password={quoted}"
        return [cache, page, session]

    def get_stub_variables(self, config: ConfigMap) -> dict[str, str]:
        variables = self.common_stub_variables(config)
        variables[STUB_MAGENTO_VERSION] = str(config.get("magento_version") or DEFAULT_MAGENTO_VERSION)
        variables[STUB_BASE_URL] = str(config.get("base_url", "http://localhost/"))
        variables[STUB_ADMIN_USER] = str(config.get("admin_user", DEFAULT_ADMIN["admin_user"]))
        return variables

    def get_writable_config(self, config: ConfigMap | None = None) -> list[ConfigOperation]:
        config = self._snapshot(config)
        operations = [ConfigOperation.set_values(".env", self._env_values(config))]
        env_config = self._env_config_values(config)
        if env_config:
            operations.append(ConfigOperation.merge_values(ENV_CONFIG_FILE, env_config))
        return operations

    @staticmethod
    def _env_values(config: ConfigMap) -> dict[str, Any]:
        env: dict[str, Any] = {
            "DATABASE_HOST": config.get("db_host", "db"),
            "DATABASE_NAME": config.get("db_name", "magento"),
            "DATABASE_USER": config.get("db_user", "root"),
            "DATABASE_PASSWORD": config.get("db_password", ""),
            "APP_ENV": "development",
            "MAGE_MODE": "developer",
        }
        if config.get("use_redis") is True:
            env["REDIS_HOST"] = config.get("redis_host", "redis")
            env["REDIS_PORT"] = config.get("redis_port", 6379)
            if config.get("redis_password"):
                env["REDIS_PASSWORD"] = config["redis_password"]
        if config.get("use_elasticsearch") is True:
            env["ELASTICSEARCH_HOST"] = config.get("elasticsearch_host", "elasticsearch")
            env["ELASTICSEARCH_PORT"] = config.get("elasticsearch_port", 9200)
        if config.get("use_meilisearch") is True:
            env["MEILISEARCH_HOST"] = config.get("meilisearch_host", "meilisearch")
            env["MEILISEARCH_PORT"] = config.get("meilisearch_port", 7700)
            if config.get("meilisearch_key"):
                env["MEILISEARCH_KEY"] = config["meilisearch_key"]
        if config.get("use_minio") is True:
            env["MINIO_ENDPOINT"] = config.get("minio_endpoint", "minio:9000")
            env["MINIO_ACCESS_KEY"] = config.get("minio_access_key", "minioadmin")
            env["MINIO_SECRET_KEY"] = config.get("minio_secret_key", "minioadmin")
            env["MINIO_BUCKET"] = config.get("minio_bucket", "magento")
        return env

    @staticmethod
    def _env_config_values(config: ConfigMap) -> dict[str, Any]:
        """Nested cache/session blocks for Magento's deployment config."""
        if config.get("use_redis") is not True:
            return {}

        host = config.get("redis_host", "redis")
        port = str(config.get("redis_port", 6379))
        password = config.get("redis_password") or ""

        def backend(database: str, compress: str) -> dict[str, Any]:
            options = {"server": host, "port": port, "database": database, "compress_data": compress}
            if password:
                options["password"] = password
            return {"backend": "Cm_Cache_Backend_Redis", "backend_options": options}

        session: dict[str, Any] = {"host": host, "port": port, "database": "2"}
        session.update(SESSION_REDIS_OPTIONS)
        if password:
            session["password"] = password

        return {
            "cache": {"frontend": {"default": backend("0", "1"), "page_cache": backend("1", "0")}},
            "session": {"save": "redis", "redis": session},
        }
