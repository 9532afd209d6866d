"""Declarative file-write operations emitted by app types.

A ``ConfigOperation`` names an action, a target file (relative to the
app directory) and the values to write. The action is validated when the
operation is created, never when it is applied.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

from hive_scaffold.core.errors import ConfigurationError

ACTION_SET = "set"
ACTION_APPEND = "append"
ACTION_MERGE = "merge"


@dataclass(frozen=True)
class ConfigOperation:
    """Immutable (action, file, values) triple.

    Attributes:
        action: One of ``set``, ``append``, ``merge``
        file: Target path relative to the application root
        values: Key/value map; nested mappings are only meaningful for merge
    """

    VALID_ACTIONS: ClassVar[tuple[str, ...]] = (ACTION_SET, ACTION_APPEND, ACTION_MERGE)

    action: str
    file: str
    values: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.action not in self.VALID_ACTIONS:
            allowed = ", ".join(self.VALID_ACTIONS)
            raise ConfigurationError(f"Invalid action '{self.action}'. Must be one of: {allowed}")
        # detach from the caller's dict so later mutation can't leak in
        object.__setattr__(self, "values", copy.deepcopy(dict(self.values)))

    @classmethod
    def set_values(cls, file: str, values: Mapping[str, Any]) -> ConfigOperation:
        return cls(ACTION_SET, file, values)

    @classmethod
    def append_values(cls, file: str, values: Mapping[str, Any]) -> ConfigOperation:
        return cls(ACTION_APPEND, file, values)

    @classmethod
    def merge_values(cls, file: str, values: Mapping[str, Any]) -> ConfigOperation:
        return cls(ACTION_MERGE, file, values)

    def get_action(self) -> str:
        return self.action

    def get_file(self) -> str:
        return self.file

    def get_values(self) -> dict[str, Any]:
        return copy.deepcopy(dict(self.values))

    def is_set(self) -> bool:
        return self.action == ACTION_SET

    def is_append(self) -> bool:
        return self.action == ACTION_APPEND

    def is_merge(self) -> bool:
        return self.action == ACTION_MERGE
