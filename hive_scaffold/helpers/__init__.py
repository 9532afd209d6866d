"""Helper utilities for console output, prompts, YAML and templates."""

from hive_scaffold.helpers.helpers_logging import mask_secret
from hive_scaffold.helpers.prompts import ClickPromptSource, PromptSource

__all__ = ["ClickPromptSource", "PromptSource", "mask_secret"]
