"""Apply ConfigOperations to files inside a scaffolded application.

Dispatch is by action and target format:

- dotenv files (``.env``, ``.env.local``, ``*.env``): ``set`` and ``append``
- YAML files (``.yml`` / ``.yaml``): ``set``, ``append`` and deep ``merge``
  through the comment-preserving ruamel.yaml loader
- JSON files: ``set``, ``append`` and deep ``merge``

Operations run in list order; each one reads the current file state, so a
later operation sees what an earlier one wrote.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping, MutableMapping
from pathlib import Path
from typing import Any

from ruamel.yaml.error import YAMLError

from hive_scaffold.core.errors import ConfigurationError, ConfigWriteError
from hive_scaffold.core.operation import ConfigOperation
from hive_scaffold.helpers.helpers_logging import print_info, print_success
from hive_scaffold.helpers.yaml_loader import load_yaml_file, save_yaml_file

APPEND_SECTION_HEADER = "# Added by hive-scaffold"

_ENV_LINE = re.compile(r"^\s*(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=")
_ENV_NEEDS_QUOTES = re.compile(r"[\s#\"'$\\]")

FORMAT_ENV = "env"
FORMAT_YAML = "yaml"
FORMAT_JSON = "json"


def detect_format(path: Path) -> str:
    """Classify a target file by its name."""
    name = path.name.lower()
    if name == ".env" or name.startswith(".env.") or name.endswith(".env"):
        return FORMAT_ENV
    if path.suffix.lower() in (".yml", ".yaml"):
        return FORMAT_YAML
    if path.suffix.lower() == ".json":
        return FORMAT_JSON
    raise ConfigurationError(f"Unsupported config file format: {path.name}")


def format_env_value(value: Any) -> str:
    """Render a Python value as a dotenv value.

    Example:
        >>> format_env_value(True)
        'true'
        >>> format_env_value("My App")
        '"My App"'
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    text = str(value)
    if text and _ENV_NEEDS_QUOTES.search(text):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def read_env_keys(lines: Iterable[str]) -> dict[str, int]:
    """Map each defined key to the index of the line defining it."""
    keys: dict[str, int] = {}
    for index, line in enumerate(lines):
        if line.lstrip().startswith("#"):
            continue
        match = _ENV_LINE.match(line)
        if match:
            keys[match.group(1)] = index
    return keys


def deep_merge(base: MutableMapping[str, Any], overlay: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Recursively merge ``overlay`` into ``base`` in place.

    Nested mappings merge key by key; anything else from ``overlay``
    replaces the value in ``base``. Keys only present in ``base`` are kept.
    """
    for key, value in overlay.items():
        existing = base.get(key)
        if isinstance(existing, MutableMapping) and isinstance(value, Mapping):
            deep_merge(existing, value)
        elif isinstance(value, Mapping):
            base[key] = deep_merge({}, value)
        else:
            base[key] = value
    return base


class ConfigWriter:
    """Applies operations relative to an application directory."""

    def __init__(self, app_path: Path) -> None:
        self.app_path = app_path

    def apply_all(self, operations: Iterable[ConfigOperation]) -> list[Path]:
        """Apply operations in order and return the touched files."""
        return [self.apply(operation) for operation in operations]

    def apply(self, operation: ConfigOperation) -> Path:
        target = self.app_path / operation.get_file()
        fmt = detect_format(target)
        values = operation.get_values()

        try:
            if fmt == FORMAT_ENV:
                self._apply_env(target, operation, values)
            else:
                self._apply_structured(target, fmt, operation, values)
        except ConfigurationError:
            raise
        except (OSError, ValueError, YAMLError) as exc:
            # ValueError covers a non-mapping root and invalid JSON
            raise ConfigWriteError(f"Failed to write {target}: {exc}") from exc

        print_success(f"Updated {operation.get_file()} ({operation.get_action()}, {len(values)} keys)")
        return target

    def _apply_env(self, target: Path, operation: ConfigOperation, values: dict[str, Any]) -> None:
        if operation.is_merge():
            raise ConfigurationError(
                f"Cannot merge into dotenv file '{operation.get_file()}'; use set or append"
            )

        lines = target.read_text(encoding="utf-8").splitlines() if target.exists() else []
        existing = read_env_keys(lines)

        if operation.is_set():
            missing: list[str] = []
            for key, value in values.items():
                rendered = f"{key}={format_env_value(value)}"
                if key in existing:
                    lines[existing[key]] = rendered
                else:
                    missing.append(rendered)
            if missing and lines and lines[-1].strip():
                lines.append("")
            lines.extend(missing)
        else:
            new_lines = [
                f"{key}={format_env_value(value)}"
                for key, value in values.items()
                if key not in existing
            ]
            if not new_lines:
                print_info(f"All keys already present in {operation.get_file()}, skipping")
                return
            if lines and lines[-1].strip():
                lines.append("")
            lines.append(APPEND_SECTION_HEADER)
            lines.extend(new_lines)

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text("\n".join(lines) + "\n", encoding="utf-8")

    def _apply_structured(
        self,
        target: Path,
        fmt: str,
        operation: ConfigOperation,
        values: dict[str, Any],
    ) -> None:
        data: MutableMapping[str, Any]
        if fmt == FORMAT_YAML:
            data = load_yaml_file(target) if target.exists() else {}
        else:
            data = json.loads(target.read_text(encoding="utf-8") or "{}") if target.exists() else {}
            if not isinstance(data, dict):
                raise ValueError(f"Expected an object at the root of {target}")

        if operation.is_merge():
            deep_merge(data, values)
        elif operation.is_set():
            data.update(values)
        else:
            for key, value in values.items():
                if key not in data:
                    data[key] = value

        if fmt == FORMAT_YAML:
            save_yaml_file(data, target)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(json.dumps(data, indent=4) + "\n", encoding="utf-8")
