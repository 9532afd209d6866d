"""Database setup: MySQL, PostgreSQL, MariaDB (Docker or local) and SQLite."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from hive_scaffold.core.credentials import generate_password
from hive_scaffold.core.errors import ConfigurationError
from hive_scaffold.core.naming import database_name
from hive_scaffold.helpers.helpers_logging import mask_secret, print_info
from hive_scaffold.infrastructure.base import (
    ServiceContext,
    ServiceSetupResult,
    ServiceSetupStrategy,
    parse_port,
)


class DatabaseEngine(Enum):
    """Supported database engines."""

    MYSQL = "mysql"
    POSTGRESQL = "postgresql"
    MARIADB = "mariadb"
    SQLITE = "sqlite"


ENGINE_LABELS = {
    DatabaseEngine.MYSQL: "MySQL 8.0",
    DatabaseEngine.POSTGRESQL: "PostgreSQL 15",
    DatabaseEngine.MARIADB: "MariaDB 10.11",
    DatabaseEngine.SQLITE: "SQLite (file based)",
}

DEFAULT_PORTS = {
    DatabaseEngine.MYSQL: 3306,
    DatabaseEngine.POSTGRESQL: 5432,
    DatabaseEngine.MARIADB: 3306,
}

# compose service name == template file stem
COMPOSE_SERVICES = {
    DatabaseEngine.MYSQL: "mysql",
    DatabaseEngine.POSTGRESQL: "postgres",
    DatabaseEngine.MARIADB: "mariadb",
}

LOCAL_DEFAULT_USERS = {
    DatabaseEngine.POSTGRESQL: "postgres",
}

LOCAL_HOST = "127.0.0.1"
SQLITE_DEFAULT_FILE = "database/database.sqlite"


@dataclass
class DatabaseConfig(ServiceSetupResult):
    """Connection parameters for the application database."""

    db_type: str
    host: str
    port: int | None
    name: str
    user: str
    password: str
    using_docker: bool = False
    root_password: str = ""

    def to_config(self) -> dict[str, Any]:
        return {
            "db_type": self.db_type,
            "db_host": self.host,
            "db_port": self.port,
            "db_name": self.name,
            "db_user": self.user,
            "db_password": self.password,
            "db_using_docker": self.using_docker,
        }


class DatabaseSetup(ServiceSetupStrategy):
    """Selects an engine from the app type's allowed list, then sets it up."""

    label = "Database"

    def __init__(self, context: ServiceContext) -> None:
        super().__init__(context)
        self.engine = DatabaseEngine.MYSQL

    def setup(
        self,
        app_name: str,
        app_path: Path,
        options: Any = None,
        current: Mapping[str, Any] | None = None,
    ) -> ServiceSetupResult | None:
        engines = self._allowed_engines(options)
        choices = {engine.value: ENGINE_LABELS[engine] for engine in engines}
        selected = self.resolver.select(
            "Database engine",
            choices,
            flag="database",
            default=engines[0].value,
        )
        self._use_engine(DatabaseEngine(selected))

        if self.engine is DatabaseEngine.SQLITE:
            return self._sqlite_settings(app_path)

        return super().setup(app_name, app_path, options, current)

    @staticmethod
    def _allowed_engines(options: Any) -> list[DatabaseEngine]:
        identifiers = list(getattr(options, "databases", None) or ["mysql", "postgresql"])
        try:
            return [DatabaseEngine(identifier) for identifier in identifiers]
        except ValueError as exc:
            raise ConfigurationError(f"Unsupported database engine in options: {exc}") from exc

    def _use_engine(self, engine: DatabaseEngine) -> None:
        self.engine = engine
        self.label = ENGINE_LABELS[engine]
        if engine is DatabaseEngine.SQLITE:
            return
        service = COMPOSE_SERVICES[engine]
        self.compose_service = service
        self.template_name = f"{service}.yml"

    def _sqlite_settings(self, app_path: Path) -> DatabaseConfig:
        entered = self.resolver.text(
            "SQLite database file",
            flag="db-name",
            default=SQLITE_DEFAULT_FILE,
        )
        # framework tools resolve a relative path against their own cwd
        database_file = Path(entered).expanduser()
        if not database_file.is_absolute():
            database_file = (app_path / database_file).resolve()
        database_file.parent.mkdir(parents=True, exist_ok=True)
        database_file.touch(exist_ok=True)
        name = str(database_file)
        print_info(f"Using SQLite database at {name}")
        return DatabaseConfig(
            db_type=DatabaseEngine.SQLITE.value,
            host="",
            port=None,
            name=name,
            user="",
            password="",
        )

    def docker_settings(self, app_name: str) -> DatabaseConfig:
        db_name = self.resolver.text(
            "Database name",
            flag="db-name",
            default=database_name(app_name) or "app",
        )
        user = self.resolver.text("Database user", flag="db-user", default=f"{db_name}_user")
        password = self.resolver.flag("db-password") or generate_password()
        port = parse_port(
            self.resolver.text(
                "Database port",
                flag="db-port",
                default=str(DEFAULT_PORTS[self.engine]),
            ),
            "database port",
        )
        return DatabaseConfig(
            db_type=self.engine.value,
            host=LOCAL_HOST,
            port=port,
            name=db_name,
            user=user,
            password=str(password),
            using_docker=True,
            root_password=generate_password(),
        )

    def compose_substitutions(self, app_name: str, result: DatabaseConfig) -> dict[str, str]:
        return {
            "{{DB_NAME}}": result.name,
            "{{DB_USER}}": result.user,
            "{{DB_PASSWORD}}": result.password,
            "{{DB_ROOT_PASSWORD}}": result.root_password,
            "{{DB_PORT}}": str(result.port),
        }

    def readiness_command(self, result: DatabaseConfig) -> list[str]:
        if self.engine is DatabaseEngine.POSTGRESQL:
            return ["pg_isready", "-U", result.user, "-d", result.name]
        admin = "mariadb-admin" if self.engine is DatabaseEngine.MARIADB else "mysqladmin"
        return [admin, "ping", "-h", "localhost", "--silent"]

    def report(self, result: DatabaseConfig) -> None:
        print_info(f"  Host: {result.host}:{result.port}")
        print_info(f"  Database: {result.name}")
        print_info(f"  User: {result.user}")
        print_info(f"  Password: {mask_secret(result.password)}")

    def connection_settings(self, app_name: str) -> DatabaseConfig:
        host = self.resolver.text("Database host", flag="db-host", default=LOCAL_HOST)
        port = parse_port(
            self.resolver.text(
                "Database port",
                flag="db-port",
                default=str(DEFAULT_PORTS[self.engine]),
            ),
            "database port",
        )
        name = self.resolver.text(
            "Database name",
            flag="db-name",
            default=database_name(app_name) or "app",
        )
        user = self.resolver.text(
            "Database user",
            flag="db-user",
            default=LOCAL_DEFAULT_USERS.get(self.engine, "root"),
        )
        password = self.resolver.password("Database password", flag="db-password")
        return DatabaseConfig(
            db_type=self.engine.value,
            host=host,
            port=port,
            name=name,
            user=user,
            password=password,
        )

    def check_local(self) -> bool:
        host = str(self.resolver.flag("db-host") or LOCAL_HOST)
        port = parse_port(self.resolver.flag("db-port") or DEFAULT_PORTS[self.engine], "database port")
        return self.context.health.tcp_reachable(host, port)

    def local_guidance(self) -> str:
        return (
            f"Start your {self.label} server (or install Docker) and make sure it "
            f"listens on port {DEFAULT_PORTS[self.engine]}, then run the command again."
        )
