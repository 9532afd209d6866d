"""Runs the service setup strategies in a fixed order.

Order: database, cache, queue, search, storage. Each step is optional per
``InfrastructureOptions``; cache, queue and storage additionally ask for
confirmation. Step results are flattened into one ConfigMap with
subsystem-prefixed keys (later keys win on collision).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from hive_scaffold.helpers.helpers_logging import print_header
from hive_scaffold.infrastructure.base import ServiceContext, ServiceSetupResult
from hive_scaffold.infrastructure.cache import RedisSetup
from hive_scaffold.infrastructure.database import DatabaseSetup
from hive_scaffold.infrastructure.queue import QueueSetup
from hive_scaffold.infrastructure.search import SearchSetup
from hive_scaffold.infrastructure.storage import MinioSetup

ConfigMap = dict[str, Any]


@dataclass
class InfrastructureOptions:
    """Which subsystems an app type wants offered.

    Attributes:
        needs_database: Offer a database (engine picked from ``databases``)
        databases: Engine identifiers, first one is the default
        needs_cache: Offer Redis
        needs_queue: Offer a message queue
        needs_search: Offer a search engine
        needs_storage: Offer MinIO object storage
    """
    needs_database: bool = True
    databases: list[str] = field(default_factory=lambda: ["mysql", "postgresql"])
    needs_cache: bool = True
    needs_queue: bool = True
    needs_search: bool = True
    needs_storage: bool = False


class InfrastructureOrchestrator:
    """Sequences the per-subsystem strategies for one application."""

    def __init__(
        self,
        context: ServiceContext,
        database: Any = None,
        cache: Any = None,
        queue: Any = None,
        search: Any = None,
        storage: Any = None,
    ) -> None:
        self.context = context
        self.database = database or DatabaseSetup(context)
        self.cache = cache or RedisSetup(context)
        self.queue = queue or QueueSetup(context)
        self.search = search or SearchSetup(context)
        self.storage = storage or MinioSetup(context)

    def setup_infrastructure(
        self,
        app_name: str,
        app_path: Path,
        options: InfrastructureOptions | None = None,
    ) -> ConfigMap:
        """Run every enabled step and return the merged configuration."""
        options = options or InfrastructureOptions()
        resolver = self.context.resolver
        config: ConfigMap = {}

        if options.needs_database:
            print_header("\n🗄️  Database")
            self._merge(config, self.database.setup(app_name, app_path, options, config))

        if options.needs_cache and resolver.confirm(
            "Install Redis for caching/sessions?",
            flag="use-redis",
            default=True,
        ):
            print_header("\n⚡ Cache")
            self._merge(config, self.cache.setup(app_name, app_path, options, config))

        if options.needs_queue and (
            resolver.flag("queue")
            or resolver.confirm("Configure message queue?", default=False)
        ):
            print_header("\n📬 Queue")
            self._merge(config, self.queue.setup(app_name, app_path, options, config))

        if options.needs_search:
            print_header("\n🔍 Search")
            self._merge(config, self.search.setup(app_name, app_path, options, config))

        if options.needs_storage and resolver.confirm(
            "Install Minio for object storage (S3-compatible)?",
            flag="use-minio",
            default=False,
        ):
            print_header("\n🪣 Object storage")
            self._merge(config, self.storage.setup(app_name, app_path, options, config))

        return config

    @staticmethod
    def _merge(config: ConfigMap, result: ServiceSetupResult | None) -> None:
        if result is not None:
            config.update(result.to_config())
