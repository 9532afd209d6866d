"""Resolve configuration values from flags, prompts and defaults.

Priority is always:

1. an explicit CLI flag (non-``None``, non-empty string)
2. an interactive prompt, when the session is interactive
3. the hard default

Boolean flags are true only for ``True``, ``"1"`` or ``1``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from hive_scaffold.core.errors import ConfigurationError
from hive_scaffold.helpers.prompts import PromptSource

T = TypeVar("T")


def is_flag_present(value: object) -> bool:
    """A flag counts as given unless it is None or an empty string."""
    return value is not None and value != ""


def coerce_bool(value: object) -> bool:
    """Strict truthiness used for boolean flags."""
    return value is True or value == "1" or value == 1


def resolve_value(
    flag_value: object,
    interactive: bool,
    prompt: Callable[[], T],
    default: T,
    *,
    as_bool: bool = False,
) -> Any:
    """Resolve one value: flag, then prompt, then default.

    Args:
        flag_value: Raw value from the command line (or None)
        interactive: Whether prompting is allowed
        prompt: Zero-argument callable asking the user
        default: Value used when neither flag nor prompt applies
        as_bool: Coerce a present flag with ``coerce_bool``

    Returns:
        The resolved value. Prompt failures propagate unchanged.

    Example:
        >>> resolve_value("mysql", True, lambda: "pgsql", "sqlite")
        'mysql'
    """
    if is_flag_present(flag_value):
        return coerce_bool(flag_value) if as_bool else flag_value
    if interactive:
        return prompt()
    return default


class ConfigResolver:
    """Binds a PromptSource, the parsed flags and the interaction mode.

    Every prompt site in the pipeline goes through this object, so every
    site automatically gets a flag override and a non-interactive value.
    ``prompt_default`` is what the user sees pre-filled in the prompt;
    ``default`` is what a non-interactive run gets. They are the same
    unless a caller passes both.
    """

    def __init__(
        self,
        prompts: PromptSource,
        flags: Mapping[str, Any] | None = None,
        interactive: bool = True,
    ) -> None:
        self.prompts = prompts
        self.flags: dict[str, Any] = dict(flags or {})
        self.interactive = interactive

    def flag(self, name: str | None) -> Any:
        """Raw flag value by option name (``None`` when absent)."""
        if name is None:
            return None
        return self.flags.get(name)

    def text(
        self,
        label: str,
        *,
        flag: str | None = None,
        default: str = "",
        placeholder: str = "",
        required: bool = False,
        prompt_default: str | None = None,
    ) -> str:
        shown = default if prompt_default is None else prompt_default
        value = resolve_value(
            self.flag(flag),
            self.interactive,
            lambda: self.prompts.text(label, default=shown, placeholder=placeholder, required=required),
            default,
        )
        return str(value)

    def password(self, label: str, *, flag: str | None = None, default: str = "") -> str:
        value = resolve_value(
            self.flag(flag),
            self.interactive,
            lambda: self.prompts.password(label, default=default),
            default,
        )
        return str(value)

    def confirm(
        self,
        label: str,
        *,
        flag: str | None = None,
        default: bool = False,
        prompt_default: bool | None = None,
    ) -> bool:
        shown = default if prompt_default is None else prompt_default
        value = resolve_value(
            self.flag(flag),
            self.interactive,
            lambda: self.prompts.confirm(label, default=shown),
            default,
            as_bool=True,
        )
        return bool(value)

    def select(
        self,
        label: str,
        options: Mapping[str, str],
        *,
        flag: str | None = None,
        default: str,
        prompt_default: str | None = None,
    ) -> str:
        """Pick one option key; a flag value must be one of the keys."""
        raw = self.flag(flag)
        if is_flag_present(raw) and str(raw) not in options:
            allowed = ", ".join(options)
            raise ConfigurationError(f"Invalid value '{raw}' for --{flag}. Must be one of: {allowed}")

        shown = default if prompt_default is None else prompt_default
        value = resolve_value(
            None if raw is None else str(raw),
            self.interactive,
            lambda: self.prompts.select(label, options, default=shown),
            default,
        )
        return str(value)

    def note(self, message: str, title: str | None = None) -> None:
        if self.interactive:
            self.prompts.note(message, title)
