"""
group_config -- single public entrypoint for runtime configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``, and the way to read a bundled or custom seed
    data set through ``load_sample_data()``.  No other component reads
    configuration files or environment variables directly.

Architecture position:
    Configuration -- sits beside ``group_kernel`` and below
    ``group_modules`` and ``scripts``.  The kernel never imports from here.

Failure modes:
    - ``FileNotFoundError`` -- the requested file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``ConfigError`` -- the document is structurally invalid.

Audit relevance:
    Every successful call emits a ``GROUP_CONFIG_TRACE`` log entry with the
    source path and SHA-256 checksum of the parsed document.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from group_config.loader import (
    ConfigError,
    load_yaml_file,
    parse_app_config,
    parse_sample_data,
)
from group_config.schema import (
    AccountSeed,
    AppConfig,
    CompanySeed,
    ConsolidationConfig,
    DatabaseConfig,
    EliminationSeed,
    ICTransactionSeed,
    LoggingConfig,
    SampleDataSet,
)

_logger = logging.getLogger("group_kernel.config")

CONFIG_PATH_ENV = "GROUP_CONFIG_PATH"

_SETS_DIR = Path(__file__).parent / "sets"
DEFAULT_CONFIG_PATH = _SETS_DIR / "default.yaml"
DEFAULT_SAMPLE_DATA_PATH = _SETS_DIR / "sample_group.yaml"


def get_active_config(path: Path | str | None = None) -> AppConfig:
    """The ONLY public configuration entrypoint.

    Resolution order: ``path`` argument, then the ``GROUP_CONFIG_PATH``
    environment variable, then the bundled ``sets/default.yaml``.

    Raises:
        FileNotFoundError: If the resolved file does not exist.
        ConfigError: If the document is structurally invalid.
    """
    source = Path(path or os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)
    config = parse_app_config(load_yaml_file(source), source)

    _logger.info(
        "GROUP_CONFIG_TRACE",
        extra={
            "trace_type": "GROUP_CONFIG_TRACE",
            "config_path": str(source),
            "checksum": config.checksum,
            "database_url": config.database.url,
            "default_scope": config.consolidation.default_scope,
            "default_period": config.consolidation.default_period,
        },
    )
    return config


def load_sample_data(path: Path | str | None = None) -> SampleDataSet:
    """
    Parse a seed data set; the bundled Unanza group when ``path`` is None.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigError: If the document is structurally invalid or references
            an undeclared company code.
    """
    source = Path(path) if path is not None else DEFAULT_SAMPLE_DATA_PATH
    dataset = parse_sample_data(load_yaml_file(source), source)

    _logger.info(
        "GROUP_CONFIG_TRACE",
        extra={
            "trace_type": "GROUP_CONFIG_TRACE",
            "config_path": str(source),
            "checksum": dataset.checksum,
            "dataset": dataset.name,
            "company_count": len(dataset.companies),
            "account_count": len(dataset.accounts),
            "elimination_count": len(dataset.eliminations),
        },
    )
    return dataset


__all__ = [
    "AccountSeed",
    "AppConfig",
    "CompanySeed",
    "ConfigError",
    "ConsolidationConfig",
    "DatabaseConfig",
    "EliminationSeed",
    "ICTransactionSeed",
    "LoggingConfig",
    "SampleDataSet",
    "get_active_config",
    "load_sample_data",
    "CONFIG_PATH_ENV",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_SAMPLE_DATA_PATH",
]
