"""Message queue setup: sync, Redis, RabbitMQ or Amazon SQS."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from hive_scaffold.core.credentials import generate_password
from hive_scaffold.core.naming import normalize_name
from hive_scaffold.helpers.helpers_logging import mask_secret, print_info, print_warning
from hive_scaffold.infrastructure.base import ServiceSetupResult, ServiceSetupStrategy, parse_port
from hive_scaffold.infrastructure.cache import REDIS_DEFAULT_PORT, REDIS_LOCAL_HOST


class QueueDriver(Enum):
    NONE = "none"
    REDIS = "redis"
    RABBITMQ = "rabbitmq"
    SQS = "sqs"


QUEUE_CHOICES = {
    QueueDriver.NONE.value: "None (synchronous)",
    QueueDriver.REDIS.value: "Redis (reuses the cache connection)",
    QueueDriver.RABBITMQ.value: "RabbitMQ",
    QueueDriver.SQS.value: "Amazon SQS",
}

RABBITMQ_PORT = 5672
RABBITMQ_MANAGEMENT_PORT = 15672
RABBITMQ_DEFAULT_USER = "guest"
RABBITMQ_DEFAULT_VHOST = "/"
SQS_DEFAULT_REGION = "us-east-1"


@dataclass
class QueueConfig(ServiceSetupResult):
    """Queue driver plus whatever connection details that driver needs."""

    driver: str
    connection: str | None = None
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    vhost: str | None = None
    management_port: int | None = None
    region: str | None = None
    prefix: str | None = None
    using_docker: bool = False

    def to_config(self) -> dict[str, Any]:
        config: dict[str, Any] = {"queue_driver": self.driver}
        optional = {
            "queue_connection": self.connection,
            "queue_host": self.host,
            "queue_port": self.port,
            "queue_user": self.user,
            "queue_password": self.password,
            "queue_vhost": self.vhost,
            "queue_management_port": self.management_port,
            "queue_region": self.region,
            "queue_prefix": self.prefix,
        }
        config.update({key: value for key, value in optional.items() if value is not None})
        if self.driver == QueueDriver.RABBITMQ.value:
            config["queue_using_docker"] = self.using_docker
        return config


class QueueSetup(ServiceSetupStrategy):
    """Only RabbitMQ goes through the Docker/local state machine."""

    label = "RabbitMQ"
    compose_service = "rabbitmq"
    template_name = "rabbitmq.yml"

    def setup(
        self,
        app_name: str,
        app_path: Path,
        options: Any = None,
        current: Mapping[str, Any] | None = None,
    ) -> ServiceSetupResult | None:
        driver = QueueDriver(
            self.resolver.select(
                "Queue driver",
                QUEUE_CHOICES,
                flag="queue",
                default=QueueDriver.NONE.value,
            )
        )

        if driver is QueueDriver.NONE:
            return QueueConfig(driver="sync")
        if driver is QueueDriver.REDIS:
            return self._redis_queue(current or {})
        if driver is QueueDriver.SQS:
            return self._sqs_queue(app_name)
        return super().setup(app_name, app_path, options, current)

    def _redis_queue(self, current: Mapping[str, Any]) -> QueueConfig:
        if not current.get("use_redis"):
            print_warning("Redis queue selected without a Redis cache; using default Redis connection")
        return QueueConfig(
            driver=QueueDriver.REDIS.value,
            connection="default",
            host=str(current.get("redis_host") or REDIS_LOCAL_HOST),
            port=int(current.get("redis_port") or REDIS_DEFAULT_PORT),
        )

    def _sqs_queue(self, app_name: str) -> QueueConfig:
        region = self.resolver.text("AWS region", flag="sqs-region", default=SQS_DEFAULT_REGION)
        prefix = self.resolver.text(
            "SQS queue prefix",
            flag="sqs-prefix",
            default=normalize_name(app_name),
        )
        return QueueConfig(driver=QueueDriver.SQS.value, region=region, prefix=prefix)

    def docker_settings(self, app_name: str) -> QueueConfig:
        return QueueConfig(
            driver=QueueDriver.RABBITMQ.value,
            host="localhost",
            port=RABBITMQ_PORT,
            user=RABBITMQ_DEFAULT_USER,
            password=generate_password(),
            vhost=RABBITMQ_DEFAULT_VHOST,
            management_port=RABBITMQ_MANAGEMENT_PORT,
            using_docker=True,
        )

    def compose_substitutions(self, app_name: str, result: QueueConfig) -> dict[str, str]:
        return {
            "{{RABBITMQ_USER}}": str(result.user),
            "{{RABBITMQ_PASSWORD}}": str(result.password),
            "{{RABBITMQ_VHOST}}": str(result.vhost),
            "{{RABBITMQ_PORT}}": str(result.port),
            "{{RABBITMQ_MANAGEMENT_PORT}}": str(result.management_port),
        }

    def readiness_command(self, result: QueueConfig) -> list[str]:
        return ["rabbitmq-diagnostics", "-q", "ping"]

    def report(self, result: QueueConfig) -> None:
        print_info(f"  AMQP: {result.host}:{result.port} (vhost {result.vhost})")
        print_info(f"  Management UI: http://localhost:{result.management_port}")
        print_info(f"  User: {result.user}")
        print_info(f"  Password: {mask_secret(result.password)}")

    def connection_settings(self, app_name: str) -> QueueConfig:
        host = self.resolver.text("RabbitMQ host", flag="queue-host", default="localhost")
        port = parse_port(
            self.resolver.text("RabbitMQ port", flag="queue-port", default=str(RABBITMQ_PORT)),
            "RabbitMQ port",
        )
        user = self.resolver.text("RabbitMQ user", flag="queue-user", default=RABBITMQ_DEFAULT_USER)
        password = self.resolver.password(
            "RabbitMQ password",
            flag="queue-password",
            default=RABBITMQ_DEFAULT_USER,
        )
        vhost = self.resolver.text("RabbitMQ vhost", flag="queue-vhost", default=RABBITMQ_DEFAULT_VHOST)
        return QueueConfig(
            driver=QueueDriver.RABBITMQ.value,
            host=host,
            port=port,
            user=user,
            password=password,
            vhost=vhost,
        )

    def check_local(self) -> bool:
        return self.context.health.tcp_reachable("localhost", RABBITMQ_PORT)
