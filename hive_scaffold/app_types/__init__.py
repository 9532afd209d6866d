"""Per-framework configuration collectors."""

from hive_scaffold.app_types.base import AppTypeCollector
from hive_scaffold.app_types.laravel import LaravelAppType
from hive_scaffold.app_types.magento import MagentoAppType
from hive_scaffold.app_types.skeleton import SkeletonAppType
from hive_scaffold.app_types.symfony import SymfonyAppType
from hive_scaffold.core.errors import ConfigurationError
from hive_scaffold.core.resolver import ConfigResolver

APP_TYPES: dict[str, type[AppTypeCollector]] = {
    collector.identifier: collector
    for collector in (LaravelAppType, SymfonyAppType, MagentoAppType, SkeletonAppType)
}


def create_app_type(identifier: str, resolver: ConfigResolver) -> AppTypeCollector:
    """Instantiate the collector registered under ``identifier``."""
    try:
        collector = APP_TYPES[identifier]
    except KeyError as exc:
        allowed = ", ".join(APP_TYPES)
        raise ConfigurationError(f"Unknown app type '{identifier}'. Must be one of: {allowed}") from exc
    return collector(resolver)


__all__ = [
    "APP_TYPES",
    "AppTypeCollector",
    "LaravelAppType",
    "MagentoAppType",
    "SkeletonAppType",
    "SymfonyAppType",
    "create_app_type",
]
