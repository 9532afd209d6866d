"""Placeholder substitution and stub copying.

Templates use ``{{UPPER_CASE}}`` tokens. Substitution is plain text
replacement; unknown tokens are left untouched.
"""

from __future__ import annotations

import shutil
from collections.abc import Mapping
from pathlib import Path

from hive_scaffold.helpers.helpers_logging import print_success, print_warning

TEMPLATES_ROOT = Path(__file__).resolve().parent.parent / "templates"
STUB_SUFFIX = ".stub"


def render_placeholders(text: str, variables: Mapping[str, str]) -> str:
    """Replace every ``{{TOKEN}}`` key of ``variables`` in ``text``."""
    for token, value in variables.items():
        text = text.replace(token, value)
    return text


def load_template(relative_path: str) -> str:
    """Read a template under ``templates/``.

    Raises:
        FileNotFoundError: If the template does not exist
    """
    path = TEMPLATES_ROOT / relative_path
    if not path.is_file():
        raise FileNotFoundError(f"Template not found: {path}")
    return path.read_text(encoding="utf-8")


def copy_stub_tree(stub_dir: Path, target_dir: Path, variables: Mapping[str, str]) -> list[Path]:
    """Copy a stub directory into ``target_dir`` with placeholders filled in.

    ``*.stub`` files are rendered and written without the suffix; other
    files are copied as-is. Existing files are never overwritten.

    Returns:
        Paths of the files that were created
    """
    if not stub_dir.is_dir():
        print_warning(f"Stub directory not found: {stub_dir}")
        return []

    created: list[Path] = []
    for src in sorted(stub_dir.rglob("*")):
        if not src.is_file() or src.name == "__init__.py":
            continue

        relative = src.relative_to(stub_dir)
        is_stub = src.name.endswith(STUB_SUFFIX)
        if is_stub:
            relative = relative.with_name(src.name[: -len(STUB_SUFFIX)])
        dst = target_dir / relative

        if dst.exists():
            print_warning(f"{relative} already exists, skipping...")
            continue

        dst.parent.mkdir(parents=True, exist_ok=True)
        if is_stub:
            dst.write_text(render_placeholders(src.read_text(encoding="utf-8"), variables), encoding="utf-8")
        else:
            shutil.copy2(src, dst)
        print_success(f"Created {relative}")
        created.append(dst)

    return created
