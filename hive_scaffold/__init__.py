"""
Hive Scaffold

Interactive scaffolding for PHP monorepo applications: collects
framework configuration, sets up Docker-first local infrastructure
and writes the resulting configuration files.
"""

__version__ = "0.1.0"

from hive_scaffold.cli.commands import main
from hive_scaffold.cli.create_app import CreateAppPipeline, CreateAppRequest

__all__ = [
    "CreateAppPipeline",
    "CreateAppRequest",
    "main",
]
