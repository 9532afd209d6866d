"""Tests for the infrastructure step ordering, gating and merging."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import Mock

from hive_scaffold.infrastructure.base import ServiceContext
from hive_scaffold.infrastructure.cache import CacheConfig
from hive_scaffold.infrastructure.database import DatabaseConfig
from hive_scaffold.infrastructure.orchestrator import (
    InfrastructureOptions,
    InfrastructureOrchestrator,
)
from hive_scaffold.infrastructure.queue import QueueConfig
from hive_scaffold.infrastructure.storage import StorageConfig

MakeContext = Callable[..., ServiceContext]


def _recording_step(order: list[str], name: str, result: Any) -> Mock:
    step = Mock()

    def _setup(*args: Any, **kwargs: Any) -> Any:
        order.append(name)
        return result

    step.setup.side_effect = _setup
    return step


class TestOrchestratorGating:

    def test_database_only_yields_database_keys(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context(interactive=False)
        options = InfrastructureOptions(
            needs_database=True,
            needs_cache=False,
            needs_queue=False,
            needs_search=False,
            needs_storage=False,
        )

        config = InfrastructureOrchestrator(context).setup_infrastructure("shop", tmp_path, options)

        assert config
        assert all(key.startswith("db_") for key in config)

    def test_nothing_needed_yields_empty_map(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context()
        options = InfrastructureOptions(
            needs_database=False,
            needs_cache=False,
            needs_queue=False,
            needs_search=False,
        )

        assert InfrastructureOrchestrator(context).setup_infrastructure("shop", tmp_path, options) == {}
        assert context.resolver.prompts.asked == []  # type: ignore[attr-defined]

    def test_declined_steps_are_skipped(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        order: list[str] = []
        context = make_context(answers={
            "Install Redis for caching/sessions?": False,
            "Install Minio for object storage (S3-compatible)?": False,
        })
        orchestrator = InfrastructureOrchestrator(
            context,
            database=_recording_step(order, "database", None),
            cache=_recording_step(order, "cache", None),
            queue=_recording_step(order, "queue", None),
            search=_recording_step(order, "search", None),
            storage=_recording_step(order, "storage", None),
        )

        orchestrator.setup_infrastructure("shop", tmp_path, InfrastructureOptions(needs_storage=True))

        assert order == ["database", "search"]


class TestOrchestratorMerging:

    def test_steps_run_in_order_and_merge(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        order: list[str] = []
        context = make_context(answers={
            "Configure message queue?": True,
            "Install Minio for object storage (S3-compatible)?": True,
        })
        database = DatabaseConfig("mysql", "127.0.0.1", 3306, "shop", "root", "")
        cache = CacheConfig("localhost", 6379)
        queue = QueueConfig(driver="sync")
        storage = StorageConfig("http://localhost:9000", 9000, "AK", "SK", "shop")
        orchestrator = InfrastructureOrchestrator(
            context,
            database=_recording_step(order, "database", database),
            cache=_recording_step(order, "cache", cache),
            queue=_recording_step(order, "queue", queue),
            search=_recording_step(order, "search", None),
            storage=_recording_step(order, "storage", storage),
        )

        config = orchestrator.setup_infrastructure("shop", tmp_path, InfrastructureOptions(needs_storage=True))

        assert order == ["database", "cache", "queue", "search", "storage"]
        assert config["db_type"] == "mysql"
        assert config["use_redis"] is True
        assert config["queue_driver"] == "sync"
        assert config["minio_bucket"] == "shop"
        assert "search_engine" not in config

    def test_queue_flag_skips_confirmation(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        context = make_context(flags={"queue": "sqs"})
        options = InfrastructureOptions(needs_database=False, needs_cache=False, needs_search=False)

        config = InfrastructureOrchestrator(context).setup_infrastructure("shop", tmp_path, options)

        assert config["queue_driver"] == "sqs"
        assert "Configure message queue?" not in context.resolver.prompts.asked  # type: ignore[attr-defined]


class TestNonInteractiveRun:

    def test_shop_defaults_without_check(
        self,
        make_context: MakeContext,
        tmp_path: Path,
    ) -> None:
        """No flags at all: database engine falls back to the first allowed one."""
        context = make_context(interactive=False, docker_available=True)

        config = InfrastructureOrchestrator(context).setup_infrastructure(
            "shop",
            tmp_path,
            InfrastructureOptions(databases=["postgresql", "mysql"]),
        )

        assert config["db_type"] == "postgresql"
        assert config["db_host"] == "127.0.0.1"
        assert config["db_name"] == "shop"
        assert config["db_user"] == "postgres"
        assert config["db_using_docker"] is False
        context.health.tcp_reachable.assert_not_called()
        context.health.redis_ping.assert_not_called()
        context.docker.start.assert_not_called()
        assert context.resolver.prompts.asked == []  # type: ignore[attr-defined]
