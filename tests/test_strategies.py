"""Tests for the Docker-first / local-fallback service setup state machine."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from hive_scaffold.core.errors import LocalServiceUnavailableError
from hive_scaffold.infrastructure.base import LocalFailurePolicy, ServiceContext
from hive_scaffold.infrastructure.cache import RedisSetup
from hive_scaffold.infrastructure.database import DatabaseConfig, DatabaseSetup
from hive_scaffold.infrastructure.orchestrator import InfrastructureOptions
from hive_scaffold.infrastructure.queue import QueueSetup
from hive_scaffold.infrastructure.search import (
    MeilisearchSetup,
    SearchEngine,
    SearchSetup,
)
from hive_scaffold.infrastructure.storage import MinioSetup

MakeContext = Callable[..., ServiceContext]

MYSQL_ONLY = InfrastructureOptions(databases=["mysql"])


class TestDockerPath:

    def test_database_in_docker_generates_credentials(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context(docker_available=True)

        result = DatabaseSetup(context).setup("shop", tmp_path, MYSQL_ONLY)

        assert isinstance(result, DatabaseConfig)
        assert result.using_docker
        assert result.host == "127.0.0.1"
        assert result.name == "shop"
        assert result.user == "shop_user"
        assert len(result.password) == 16
        docker = context.docker
        docker.generate_compose_fragment.assert_called_once()
        template_name, substitutions = docker.generate_compose_fragment.call_args.args
        assert template_name == "mysql.yml"
        assert substitutions["{{CONTAINER_PREFIX}}"] == "phphive-shop"
        assert substitutions["{{DB_PASSWORD}}"] == result.password
        docker.merge_into_compose_file.assert_called_once_with(
            tmp_path / "docker-compose.yml",
            docker.generate_compose_fragment.return_value,
        )
        assert docker.wait_for_ready.call_args.args[1] == "mysql"

    def test_non_interactive_uses_docker_only_with_flag(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context(interactive=False, docker_available=True)
        assert not RedisSetup(context).setup("shop", tmp_path).using_docker

        context = make_context(interactive=False, docker_available=True, flags={"docker": True})
        assert RedisSetup(context).setup("shop", tmp_path).using_docker

    def test_failed_start_falls_back_to_local(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context(docker_available=True)
        context.docker.start.return_value = False

        result = RedisSetup(context).setup("shop", tmp_path)

        assert not result.using_docker
        assert "Is Redis already running locally?" in context.resolver.prompts.asked  # type: ignore[attr-defined]

    def test_readiness_timeout_falls_back_to_local(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context(docker_available=True)
        context.docker.wait_for_ready.return_value = False

        result = DatabaseSetup(context).setup("shop", tmp_path, MYSQL_ONLY)

        assert not result.using_docker

    def test_provisioning_failure_keeps_docker_result(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context(docker_available=True)
        context.docker.exec_one_shot.return_value = False

        result = MinioSetup(context).setup("shop", tmp_path)

        assert result.using_docker
        assert result.bucket == "shop"

    def test_minio_provisions_bucket(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context(docker_available=True)

        result = MinioSetup(context).setup("Shop Assets", tmp_path)

        commands = [call.args[2] for call in context.docker.exec_one_shot.call_args_list]
        assert commands[0][:3] == ["mc", "alias", "set"]
        assert commands[1] == ["mc", "mb", "local/shop-assets"]
        assert len(result.access_key) == 16
        assert len(result.secret_key) == 32

    def test_missing_compose_definition_falls_back_to_local(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context(docker_available=True)
        context.docker.generate_compose_fragment.return_value = ""

        result = RedisSetup(context).setup("shop", tmp_path)

        assert not result.using_docker
        context.docker.merge_into_compose_file.assert_not_called()
        context.docker.start.assert_not_called()

    def test_minio_report_masks_access_key(
        self,
        make_context: MakeContext,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        context = make_context(docker_available=True)

        result = MinioSetup(context).setup("shop", tmp_path)

        out = capsys.readouterr().out
        assert result.access_key not in out
        assert result.secret_key not in out
        assert "Access key: " + "*" * len(result.access_key) in out

    def test_meilisearch_waits_on_health_endpoint(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context(docker_available=True, flags={"meilisearch-port": "7701"})

        result = MeilisearchSetup(context).setup("shop", tmp_path)

        assert result.using_docker
        context.docker.wait_for_ready.assert_called_once_with(
            tmp_path,
            "meilisearch",
            check_command=["curl", "-sf", "http://localhost:7700/health"],
        )

    def test_no_docker_shows_guidance(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context(docker_available=False)

        RedisSetup(context).setup("shop", tmp_path)

        context.docker.install_guidance.assert_called_once_with("linux")
        assert context.resolver.prompts.notes  # type: ignore[attr-defined]


class TestLocalPath:

    def test_non_interactive_returns_defaults_without_check(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context(interactive=False)

        result = DatabaseSetup(context).setup("shop", tmp_path, MYSQL_ONLY)

        assert result.to_config() == {
            "db_type": "mysql",
            "db_host": "127.0.0.1",
            "db_port": 3306,
            "db_name": "shop",
            "db_user": "root",
            "db_password": "",
            "db_using_docker": False,
        }
        context.health.tcp_reachable.assert_not_called()

    def test_postgres_local_default_user(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context(interactive=False, flags={"database": "postgresql"})
        result = DatabaseSetup(context).setup("shop", tmp_path)
        assert result.user == "postgres"
        assert result.port == 5432

    def test_not_running_skips_check(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context(answers={"Is Redis already running locally?": False})

        RedisSetup(context).setup("shop", tmp_path)

        context.health.redis_ping.assert_not_called()

    def test_running_and_reachable(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context(reachable=True)
        result = RedisSetup(context).setup("shop", tmp_path)
        context.health.redis_ping.assert_called_once_with("localhost", 6379, "")
        assert result.host == "localhost"

    def test_unreachable_with_exit_policy_raises(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context(reachable=False, local_failure=LocalFailurePolicy.EXIT)

        with pytest.raises(LocalServiceUnavailableError) as excinfo:
            RedisSetup(context).setup("shop", tmp_path)

        assert excinfo.value.service == "Redis"
        assert "redis" in excinfo.value.guidance.lower()

    def test_unreachable_with_manual_policy_prompts_for_details(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context(
            reachable=False,
            local_failure=LocalFailurePolicy.MANUAL,
            answers={"Redis host": "cache.internal"},
        )

        result = RedisSetup(context).setup("shop", tmp_path)

        assert result.host == "cache.internal"

    def test_unreachable_offers_docker_retry(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context(
            docker_available=True,
            reachable=False,
            answers={"Use Docker for Redis? (recommended)": False},
        )

        result = RedisSetup(context).setup("shop", tmp_path)

        assert "Set up Redis with Docker instead?" in context.resolver.prompts.asked  # type: ignore[attr-defined]
        assert result.using_docker

    def test_sqlite_needs_no_server(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context(docker_available=True, flags={"database": "sqlite"})

        result = DatabaseSetup(context).setup("shop", tmp_path, InfrastructureOptions(databases=["sqlite"]))

        assert result.db_type == "sqlite"
        assert result.name == str((tmp_path / "database" / "database.sqlite").resolve())
        assert Path(result.name).is_file()
        context.docker.is_available.assert_not_called()

    def test_sqlite_relative_file_is_anchored_at_app(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context(flags={"database": "sqlite", "db-name": "storage/app.sqlite"}, interactive=False)

        result = DatabaseSetup(context).setup("shop", tmp_path, InfrastructureOptions(databases=["sqlite"]))

        assert Path(result.name).is_absolute()
        assert Path(result.name) == (tmp_path / "storage" / "app.sqlite").resolve()


class TestQueueSetup:

    def test_none_means_sync(self, make_context: MakeContext, tmp_path: Path) -> None:
        context = make_context(interactive=False)
        assert QueueSetup(context).setup("shop", tmp_path).to_config() == {"queue_driver": "sync"}

    def test_redis_reuses_cache_connection(self, make_context: MakeContext, tmp_path: Path) -> None:
        context = make_context(interactive=False, flags={"queue": "redis"})
        current = {"use_redis": True, "redis_host": "127.0.0.1", "redis_port": 6380}

        config = QueueSetup(context).setup("shop", tmp_path, current=current).to_config()

        assert config["queue_driver"] == "redis"
        assert config["queue_connection"] == "default"
        assert config["queue_port"] == 6380

    def test_sqs_has_no_docker(self, make_context: MakeContext, tmp_path: Path) -> None:
        context = make_context(interactive=False, docker_available=True, flags={"queue": "sqs"})

        config = QueueSetup(context).setup("my-shop", tmp_path).to_config()

        assert config == {"queue_driver": "sqs", "queue_region": "us-east-1", "queue_prefix": "my-shop"}
        context.docker.is_available.assert_not_called()

    def test_rabbitmq_docker(self, make_context: MakeContext, tmp_path: Path) -> None:
        context = make_context(docker_available=True, flags={"queue": "rabbitmq"})

        config = QueueSetup(context).setup("shop", tmp_path).to_config()

        assert config["queue_driver"] == "rabbitmq"
        assert config["queue_user"] == "guest"
        assert config["queue_vhost"] == "/"
        assert config["queue_management_port"] == 15672
        assert config["queue_using_docker"] is True


class TestSearchDispatch:

    def test_none_returns_nothing(self, make_context: MakeContext, tmp_path: Path) -> None:
        context = make_context(interactive=False)
        assert SearchSetup(context).setup("shop", tmp_path) is None

    def test_dispatches_by_engine(self, make_context: MakeContext, tmp_path: Path) -> None:
        context = make_context(interactive=False, flags={"search": "meilisearch"})
        search = SearchSetup(context, {SearchEngine.MEILISEARCH: MeilisearchSetup(context)})

        config = search.setup("shop", tmp_path).to_config()

        assert config["search_engine"] == "meilisearch"
        assert config["use_meilisearch"] is True
        assert config["meilisearch_host"] == "http://localhost:7700"
        assert len(config["meilisearch_key"]) == 32

    def test_opensearch_skips_docker(self, make_context: MakeContext, tmp_path: Path) -> None:
        context = make_context(
            interactive=False,
            docker_available=True,
            flags={"search": "opensearch", "opensearch-endpoint": "https://search.example.com"},
        )

        config = SearchSetup(context).setup("shop", tmp_path).to_config()

        assert config == {
            "search_engine": "opensearch",
            "opensearch_region": "us-east-1",
            "opensearch_endpoint": "https://search.example.com",
            "opensearch_index_prefix": "shop",
        }
        context.docker.is_available.assert_not_called()

    def test_elasticsearch_docker_image_by_version(self, make_context: MakeContext, tmp_path: Path) -> None:
        context = make_context(docker_available=True, flags={"search": "elasticsearch", "elasticsearch-version": "7"})

        config = SearchSetup(context).setup("shop", tmp_path).to_config()

        substitutions = context.docker.generate_compose_fragment.call_args.args[1]
        assert substitutions["{{ELASTICSEARCH_IMAGE}}"].endswith(":7.17.10")
        assert config["elasticsearch_user"] == "elastic"
