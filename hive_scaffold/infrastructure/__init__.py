"""Docker-first, local-fallback setup of per-app infrastructure services."""

from hive_scaffold.infrastructure.base import LocalFailurePolicy, ServiceContext
from hive_scaffold.infrastructure.orchestrator import (
    InfrastructureOptions,
    InfrastructureOrchestrator,
)

__all__ = [
    "InfrastructureOptions",
    "InfrastructureOrchestrator",
    "LocalFailurePolicy",
    "ServiceContext",
]
