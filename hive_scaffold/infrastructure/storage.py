"""MinIO (S3 compatible) object storage setup."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from hive_scaffold.core.credentials import generate_access_key, generate_secret_key
from hive_scaffold.core.naming import validate_bucket_name
from hive_scaffold.helpers.helpers_logging import mask_secret, print_info, print_success
from hive_scaffold.infrastructure.base import ServiceSetupResult, ServiceSetupStrategy, parse_port

MINIO_PORT = 9000
MINIO_CONSOLE_PORT = 9001
MINIO_DEFAULT_CREDENTIAL = "minioadmin"


@dataclass
class StorageConfig(ServiceSetupResult):
    """S3-compatible endpoint, credentials and default bucket."""

    endpoint: str
    port: int
    access_key: str
    secret_key: str
    bucket: str
    console_port: int | None = None
    using_docker: bool = False

    def to_config(self) -> dict[str, Any]:
        return {
            "use_minio": True,
            "minio_endpoint": self.endpoint,
            "minio_port": self.port,
            "minio_access_key": self.access_key,
            "minio_secret_key": self.secret_key,
            "minio_bucket": self.bucket,
            "minio_console_port": self.console_port,
            "minio_using_docker": self.using_docker,
        }


class MinioSetup(ServiceSetupStrategy):
    label = "MinIO"
    compose_service = "minio"
    template_name = "minio.yml"

    def docker_settings(self, app_name: str) -> StorageConfig:
        bucket = validate_bucket_name(
            self.resolver.text("Default bucket name", flag="minio-bucket", default=app_name)
        )
        return StorageConfig(
            endpoint=f"http://localhost:{MINIO_PORT}",
            port=MINIO_PORT,
            access_key=generate_access_key(),
            secret_key=generate_secret_key(),
            bucket=bucket,
            console_port=MINIO_CONSOLE_PORT,
            using_docker=True,
        )

    def compose_substitutions(self, app_name: str, result: StorageConfig) -> dict[str, str]:
        return {
            "{{MINIO_ACCESS_KEY}}": result.access_key,
            "{{MINIO_SECRET_KEY}}": result.secret_key,
            "{{MINIO_PORT}}": str(result.port),
            "{{MINIO_CONSOLE_PORT}}": str(result.console_port),
        }

    def readiness_command(self, result: StorageConfig) -> list[str]:
        return ["mc", "ready", "local"]

    def provision(self, app_path: Path, result: StorageConfig) -> bool:
        """Create the default bucket inside the running container."""
        alias_ok = self.docker.exec_one_shot(
            app_path,
            self.compose_service,
            ["mc", "alias", "set", "local", f"http://localhost:{MINIO_PORT}", result.access_key, result.secret_key],
        )
        if not alias_ok:
            return False
        created = self.docker.exec_one_shot(
            app_path,
            self.compose_service,
            ["mc", "mb", f"local/{result.bucket}"],
        )
        if created:
            print_success(f"Bucket '{result.bucket}' is ready")
        return created

    def report(self, result: StorageConfig) -> None:
        print_info(f"  API: {result.endpoint}")
        print_info(f"  Console: http://localhost:{result.console_port}")
        print_info(f"  Access key: {mask_secret(result.access_key)}")
        print_info(f"  Secret key: {mask_secret(result.secret_key)}")
        print_info(f"  Bucket: {result.bucket}")

    def connection_settings(self, app_name: str) -> StorageConfig:
        endpoint = self.resolver.text(
            "MinIO endpoint",
            flag="minio-endpoint",
            default=f"http://localhost:{MINIO_PORT}",
        )
        port = parse_port(
            self.resolver.text("MinIO API port", flag="minio-port", default=str(MINIO_PORT)),
            "MinIO port",
        )
        access_key = self.resolver.text(
            "MinIO access key",
            flag="minio-access-key",
            default=MINIO_DEFAULT_CREDENTIAL,
        )
        secret_key = self.resolver.password(
            "MinIO secret key",
            flag="minio-secret-key",
            default=MINIO_DEFAULT_CREDENTIAL,
        )
        bucket = validate_bucket_name(
            self.resolver.text("Default bucket name", flag="minio-bucket", default=app_name)
        )
        return StorageConfig(
            endpoint=endpoint,
            port=port,
            access_key=access_key,
            secret_key=secret_key,
            bucket=bucket,
            console_port=MINIO_CONSOLE_PORT,
        )

    def check_local(self) -> bool:
        return self.context.health.http_ok(f"http://localhost:{MINIO_PORT}/minio/health/live")

    def local_guidance(self) -> str:
        return (
            "Install and start MinIO locally:\n"
            "  macOS: brew install minio/stable/minio && minio server ~/minio-data\n"
            "  Linux: https://min.io/docs/minio/linux/index.html\n"
            "or install Docker and choose the Docker setup."
        )
