"""Search engine setup.

``SearchEngine`` names the choices; ``SearchSetup`` owns a dispatch table
from each engine to the strategy that configures it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from hive_scaffold.core.credentials import generate_master_key, generate_password
from hive_scaffold.core.naming import normalize_name
from hive_scaffold.helpers.helpers_logging import mask_secret, print_info
from hive_scaffold.infrastructure.base import (
    ServiceContext,
    ServiceSetupResult,
    ServiceSetupStrategy,
    parse_port,
)


class SearchEngine(Enum):
    NONE = "none"
    MEILISEARCH = "meilisearch"
    ELASTICSEARCH = "elasticsearch"
    OPENSEARCH = "opensearch"


SEARCH_CHOICES = {
    SearchEngine.NONE.value: "None",
    SearchEngine.MEILISEARCH.value: "Meilisearch (lightweight, typo tolerant)",
    SearchEngine.ELASTICSEARCH.value: "Elasticsearch",
    SearchEngine.OPENSEARCH.value: "OpenSearch (AWS managed)",
}

MEILISEARCH_PORT = 7700
ELASTICSEARCH_PORT = 9200
ELASTICSEARCH_USER = "elastic"
ELASTICSEARCH_IMAGES = {
    "7": "docker.elastic.co/elasticsearch/elasticsearch:7.17.10",
    "8": "docker.elastic.co/elasticsearch/elasticsearch:8.11.0",
}
OPENSEARCH_DEFAULT_REGION = "us-east-1"


@dataclass
class MeilisearchConfig(ServiceSetupResult):
    host: str
    port: int
    master_key: str
    using_docker: bool = False

    def to_config(self) -> dict[str, Any]:
        return {
            "search_engine": SearchEngine.MEILISEARCH.value,
            "use_meilisearch": True,
            "meilisearch_host": self.host,
            "meilisearch_port": self.port,
            "meilisearch_key": self.master_key,
            "meilisearch_using_docker": self.using_docker,
        }


@dataclass
class ElasticsearchConfig(ServiceSetupResult):
    host: str
    port: int
    user: str
    password: str
    version: str = "8"
    using_docker: bool = False

    def to_config(self) -> dict[str, Any]:
        return {
            "search_engine": SearchEngine.ELASTICSEARCH.value,
            "use_elasticsearch": True,
            "elasticsearch_host": self.host,
            "elasticsearch_port": self.port,
            "elasticsearch_user": self.user,
            "elasticsearch_password": self.password,
            "elasticsearch_version": self.version,
            "elasticsearch_using_docker": self.using_docker,
        }


@dataclass
class OpenSearchConfig(ServiceSetupResult):
    region: str
    endpoint: str
    index_prefix: str
    using_docker: bool = False

    def to_config(self) -> dict[str, Any]:
        return {
            "search_engine": SearchEngine.OPENSEARCH.value,
            "opensearch_region": self.region,
            "opensearch_endpoint": self.endpoint,
            "opensearch_index_prefix": self.index_prefix,
        }


class MeilisearchSetup(ServiceSetupStrategy):
    label = "Meilisearch"
    compose_service = "meilisearch"
    template_name = "meilisearch.yml"

    def docker_settings(self, app_name: str) -> MeilisearchConfig:
        port = parse_port(
            self.resolver.text("Meilisearch port", flag="meilisearch-port", default=str(MEILISEARCH_PORT)),
            "Meilisearch port",
        )
        return MeilisearchConfig(
            host=f"http://localhost:{port}",
            port=port,
            master_key=generate_master_key(),
            using_docker=True,
        )

    def compose_substitutions(self, app_name: str, result: MeilisearchConfig) -> dict[str, str]:
        return {
            "{{MEILISEARCH_MASTER_KEY}}": result.master_key,
            "{{MEILISEARCH_PORT}}": str(result.port),
        }

    def readiness_command(self, result: MeilisearchConfig) -> list[str]:
        # container side port, independent of the published one
        return ["curl", "-sf", "http://localhost:7700/health"]

    def report(self, result: MeilisearchConfig) -> None:
        print_info(f"  URL: {result.host}")
        print_info(f"  Master key: {mask_secret(result.master_key)}")

    def connection_settings(self, app_name: str) -> MeilisearchConfig:
        host = self.resolver.text(
            "Meilisearch URL",
            flag="meilisearch-host",
            default=f"http://localhost:{MEILISEARCH_PORT}",
        )
        master_key = self.resolver.password(
            "Meilisearch master key",
            flag="meilisearch-key",
            default=generate_master_key(),
        )
        return MeilisearchConfig(host=host, port=_port_from_url(host, MEILISEARCH_PORT), master_key=master_key)

    def check_local(self) -> bool:
        return self.context.health.http_ok(f"http://localhost:{MEILISEARCH_PORT}/health", expect="available")


class ElasticsearchSetup(ServiceSetupStrategy):
    label = "Elasticsearch"
    compose_service = "elasticsearch"
    template_name = "elasticsearch.yml"

    def docker_settings(self, app_name: str) -> ElasticsearchConfig:
        version = self.resolver.select(
            "Elasticsearch version",
            {"8": "Elasticsearch 8.x (latest)", "7": "Elasticsearch 7.x"},
            flag="elasticsearch-version",
            default="8",
        )
        return ElasticsearchConfig(
            host="localhost",
            port=ELASTICSEARCH_PORT,
            user=ELASTICSEARCH_USER,
            password=generate_password(),
            version=version,
            using_docker=True,
        )

    def compose_substitutions(self, app_name: str, result: ElasticsearchConfig) -> dict[str, str]:
        return {
            "{{ELASTICSEARCH_IMAGE}}": ELASTICSEARCH_IMAGES[result.version],
            "{{ELASTICSEARCH_PASSWORD}}": result.password,
            "{{ELASTICSEARCH_PORT}}": str(result.port),
        }

    def readiness_command(self, result: ElasticsearchConfig) -> list[str]:
        return ["curl", "-sf", "http://localhost:9200/_cluster/health"]

    def report(self, result: ElasticsearchConfig) -> None:
        print_info(f"  URL: http://{result.host}:{result.port}")
        print_info(f"  User: {result.user}")
        print_info(f"  Password: {mask_secret(result.password)}")

    def connection_settings(self, app_name: str) -> ElasticsearchConfig:
        host = self.resolver.text("Elasticsearch host", flag="elasticsearch-host", default="localhost")
        port = parse_port(
            self.resolver.text(
                "Elasticsearch port",
                flag="elasticsearch-port",
                default=str(ELASTICSEARCH_PORT),
            ),
            "Elasticsearch port",
        )
        user = self.resolver.text("Elasticsearch user", flag="elasticsearch-user", default=ELASTICSEARCH_USER)
        password = self.resolver.password("Elasticsearch password", flag="elasticsearch-password")
        return ElasticsearchConfig(host=host, port=port, user=user, password=password)

    def check_local(self) -> bool:
        return self.context.health.http_ok(f"http://localhost:{ELASTICSEARCH_PORT}/_cluster/health")


class OpenSearchSetup(ServiceSetupStrategy):
    """Managed AWS OpenSearch: prompts only, no Docker and no reachability check."""

    label = "OpenSearch"
    supports_docker = False

    def setup(
        self,
        app_name: str,
        app_path: Path,
        options: Any = None,
        current: Mapping[str, Any] | None = None,
    ) -> ServiceSetupResult | None:
        return self.connection_settings(app_name)

    def connection_settings(self, app_name: str) -> OpenSearchConfig:
        region = self.resolver.text("AWS region", flag="opensearch-region", default=OPENSEARCH_DEFAULT_REGION)
        endpoint = self.resolver.text(
            "OpenSearch domain endpoint",
            flag="opensearch-endpoint",
            placeholder="https://search-my-domain.us-east-1.es.amazonaws.com",
        )
        index_prefix = self.resolver.text(
            "Index prefix",
            flag="opensearch-index-prefix",
            default=normalize_name(app_name),
        )
        return OpenSearchConfig(region=region, endpoint=endpoint, index_prefix=index_prefix)


def _port_from_url(url: str, default: int) -> int:
    tail = url.rstrip("/").rsplit(":", 1)[-1]
    return int(tail) if tail.isdigit() else default


class SearchSetup:
    """Picks a search engine and dispatches to its strategy."""

    def __init__(
        self,
        context: ServiceContext,
        strategies: Mapping[SearchEngine, ServiceSetupStrategy] | None = None,
    ) -> None:
        self.context = context
        self.strategies: dict[SearchEngine, ServiceSetupStrategy] = dict(strategies or {
            SearchEngine.MEILISEARCH: MeilisearchSetup(context),
            SearchEngine.ELASTICSEARCH: ElasticsearchSetup(context),
            SearchEngine.OPENSEARCH: OpenSearchSetup(context),
        })

    def select_engine(self) -> SearchEngine:
        return SearchEngine(
            self.context.resolver.select(
                "Search engine",
                SEARCH_CHOICES,
                flag="search",
                default=SearchEngine.NONE.value,
            )
        )

    def setup(
        self,
        app_name: str,
        app_path: Path,
        options: Any = None,
        current: Mapping[str, Any] | None = None,
    ) -> ServiceSetupResult | None:
        """Returns None when no search engine is wanted."""
        engine = self.select_engine()
        if engine is SearchEngine.NONE:
            return None
        return self.strategies[engine].setup(app_name, app_path, options, current)
