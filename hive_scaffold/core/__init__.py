"""Core value types: naming, credentials, value resolution and config operations."""

from hive_scaffold.core.operation import ConfigOperation
from hive_scaffold.core.resolver import ConfigResolver, resolve_value
from hive_scaffold.core.results import InstallCommandResult

__all__ = ["ConfigOperation", "ConfigResolver", "InstallCommandResult", "resolve_value"]
