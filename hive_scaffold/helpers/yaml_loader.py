"""
Comment-preserving YAML loader used when merging into structured config
files that a framework (or a developer) has already written.
"""

from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap


def _create_yaml_loader() -> YAML:
    """Create a round-trip YAML instance that keeps quotes and comments."""
    yaml_obj = YAML()
    yaml_obj.preserve_quotes = True
    yaml_obj.default_flow_style = False
    yaml_obj.indent(mapping=2, sequence=4, offset=2)
    return yaml_obj


yaml = _create_yaml_loader()


def load_yaml_file(file_path: Path) -> CommentedMap:
    """Load a YAML mapping, returning an empty mapping for empty files.

    ruamel.yaml's round-trip loader does not construct arbitrary Python
    objects from YAML content.

    Raises:
        FileNotFoundError: If file does not exist
        ValueError: If the document root is not a mapping
    """
    if not file_path.exists():
        raise FileNotFoundError(f"YAML file not found: {file_path}")

    with file_path.open(encoding="utf-8") as f:
        raw: Any = yaml.load(f)

    if raw is None:
        return CommentedMap()
    if not isinstance(raw, dict):
        raise ValueError(f"Expected a mapping at the root of {file_path}")
    return raw


def save_yaml_file(data: Any, file_path: Path) -> None:
    """Save data to a YAML file, preserving any loaded comments."""
    file_path.parent.mkdir(parents=True, exist_ok=True)

    with file_path.open("w", encoding="utf-8") as f:
        yaml.dump(data, f)
