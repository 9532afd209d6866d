"""Interactive prompt sources.

``PromptSource`` is the narrow interface every collector and service
strategy talks to. ``ClickPromptSource`` is the terminal implementation;
tests supply a scripted one.

End of input or Ctrl-C surfaces as ``click.Abort`` and is never replaced
by a default value.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

import click

from hive_scaffold.helpers.helpers_logging import print_info, print_note


class PromptSource(Protocol):
    """Source of interactive answers."""

    def text(
        self,
        label: str,
        default: str = "",
        placeholder: str = "",
        required: bool = False,
    ) -> str:
        """Ask for a line of free text."""
        ...

    def password(self, label: str, default: str = "", required: bool = False) -> str:
        """Ask for a secret without echoing it; empty input keeps ``default``."""
        ...

    def confirm(self, label: str, default: bool = False) -> bool:
        """Ask a yes/no question."""
        ...

    def select(
        self,
        label: str,
        options: Mapping[str, str],
        default: str | None = None,
    ) -> str:
        """Ask the user to pick one key out of ``options``."""
        ...

    def note(self, message: str, title: str | None = None) -> None:
        """Show informational text next to the prompts."""
        ...


class ClickPromptSource:
    """PromptSource backed by ``click.prompt`` / ``click.confirm``."""

    def text(
        self,
        label: str,
        default: str = "",
        placeholder: str = "",
        required: bool = False,
    ) -> str:
        if placeholder and not default:
            label = f"{label} (e.g. {placeholder})"
        if default:
            return str(click.prompt(label, default=default))
        if required:
            # click re-prompts on empty input when there is no default
            return str(click.prompt(label))
        return str(click.prompt(label, default="", show_default=False))

    def password(self, label: str, default: str = "", required: bool = False) -> str:
        if required and not default:
            return str(click.prompt(label, hide_input=True))
        return str(click.prompt(label, default=default, hide_input=True, show_default=False))

    def confirm(self, label: str, default: bool = False) -> bool:
        return bool(click.confirm(label, default=default))

    def select(
        self,
        label: str,
        options: Mapping[str, str],
        default: str | None = None,
    ) -> str:
        keys = list(options)
        print_info(f"\n{label}")
        for i, key in enumerate(keys, 1):
            print(f"  {i}. {options[key]} [{key}]")

        default_index = str(keys.index(default) + 1) if default in options else None
        choice = click.prompt(
            f"Select (1-{len(keys)})",
            type=click.IntRange(1, len(keys)),
            default=default_index,
        )
        return keys[int(choice) - 1]

    def note(self, message: str, title: str | None = None) -> None:
        print_note(message, title)
