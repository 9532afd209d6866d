"""Redis setup for caching and sessions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from hive_scaffold.core.credentials import generate_password
from hive_scaffold.helpers.helpers_logging import mask_secret, print_info
from hive_scaffold.infrastructure.base import ServiceSetupResult, ServiceSetupStrategy, parse_port

REDIS_DEFAULT_PORT = 6379
REDIS_LOCAL_HOST = "localhost"


@dataclass
class CacheConfig(ServiceSetupResult):
    """Redis connection used for cache, sessions and (optionally) queues."""

    host: str
    port: int
    password: str = ""
    using_docker: bool = False

    def to_config(self) -> dict[str, Any]:
        return {
            "use_redis": True,
            "redis_host": self.host,
            "redis_port": self.port,
            "redis_password": self.password,
            "redis_using_docker": self.using_docker,
        }


class RedisSetup(ServiceSetupStrategy):
    label = "Redis"
    compose_service = "redis"
    template_name = "redis.yml"

    def docker_settings(self, app_name: str) -> CacheConfig:
        port = parse_port(
            self.resolver.text("Redis port", flag="redis-port", default=str(REDIS_DEFAULT_PORT)),
            "Redis port",
        )
        return CacheConfig(
            host=REDIS_LOCAL_HOST,
            port=port,
            password=generate_password(),
            using_docker=True,
        )

    def compose_substitutions(self, app_name: str, result: CacheConfig) -> dict[str, str]:
        return {
            "{{REDIS_PORT}}": str(result.port),
            "{{REDIS_PASSWORD}}": result.password,
        }

    def readiness_command(self, result: CacheConfig) -> list[str]:
        return ["redis-cli", "-a", result.password, "--no-auth-warning", "ping"]

    def report(self, result: CacheConfig) -> None:
        print_info(f"  Host: {result.host}:{result.port}")
        print_info(f"  Password: {mask_secret(result.password)}")

    def connection_settings(self, app_name: str) -> CacheConfig:
        host = self.resolver.text("Redis host", flag="redis-host", default=REDIS_LOCAL_HOST)
        port = parse_port(
            self.resolver.text("Redis port", flag="redis-port", default=str(REDIS_DEFAULT_PORT)),
            "Redis port",
        )
        password = ""
        if self.resolver.flag("redis-password") or (
            self.resolver.interactive
            and self.resolver.confirm("Does your Redis server require a password?", default=False)
        ):
            password = self.resolver.password("Redis password", flag="redis-password")
        return CacheConfig(host=host, port=port, password=password)

    def check_local(self) -> bool:
        host = str(self.resolver.flag("redis-host") or REDIS_LOCAL_HOST)
        port = parse_port(self.resolver.flag("redis-port") or REDIS_DEFAULT_PORT, "Redis port")
        return self.context.health.redis_ping(host, port, str(self.resolver.flag("redis-password") or ""))

    def local_guidance(self) -> str:
        return (
            "Start Redis locally (e.g. 'brew services start redis' or "
            "'sudo systemctl start redis'), or install Docker, then run the command again."
        )
