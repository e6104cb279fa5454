"""Unified configuration schema for sync_documenter.

Defines Pydantic models for the unified config structure with dedicated
sections for documenter settings and logging. Includes an adapter to the
runtime ``Config`` dataclass.

Usage:
    from sync_documenter.config_schema import (
        UnifiedConfig, build_config, to_runtime_config,
    )

    raw = load_hierarchical_config()
    unified = build_config(raw)
    config = to_runtime_config(unified, overrides={"report_title": "Q3"})
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from .config import Config

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class DocumenterSettings(BaseModel):
    """Report assembly settings.

    All fields have defaults so that an empty config file is valid.
    """

    report_title: str = Field(
        default="Synchronization Configuration Comparison",
        min_length=1,
        description="Title of the generated report",
    )
    max_parallel_connectors: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Maximum concurrent connector passes (1-64)",
    )
    connector_facets: dict[str, list[str]] = Field(
        default_factory=dict,
        description=(
            "Per connector category override of the documented facets, "
            "e.g. {'AD': ['properties', 'partitions']}"
        ),
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
        format: ``"text"`` or ``"json"``.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")
    format: str = Field(
        default="text",
        pattern="^(text|json)$",
        description="Log line format",
    )

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Every section has sensible defaults, so ``UnifiedConfig()``
    (zero-config) is always valid.
    """

    documenter: DocumenterSettings = Field(
        default_factory=DocumenterSettings
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Factory function
# ---------------------------------------------------------------------------


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Handles missing sections gracefully; anything absent gets defaults.

    Args:
        raw_data: Merged configuration dictionary.

    Returns:
        Validated ``UnifiedConfig`` instance.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)


# ---------------------------------------------------------------------------
# Adapter: UnifiedConfig -> runtime Config dataclass
# ---------------------------------------------------------------------------


def to_runtime_config(
    unified: UnifiedConfig,
    overrides: dict | None = None,
) -> Config:
    """Convert a ``UnifiedConfig`` into the runtime ``Config`` dataclass,
    applying explicit overrides on top.

    Override keys: report_title, max_parallel_connectors, debug.

    Args:
        unified: The unified config produced by ``build_config()``.
        overrides: Optional dict of explicit values.

    Returns:
        Runtime ``Config`` instance (NOT validated; caller should run
        ``validate_config()`` separately if needed).
    """
    # config.py imports this module
    from .config import Config

    overrides = overrides or {}
    settings = unified.documenter

    return Config(
        report_title=overrides.get("report_title") or settings.report_title,
        max_parallel_connectors=overrides.get("max_parallel_connectors")
        or settings.max_parallel_connectors,
        connector_facets={
            k: list(v) for k, v in settings.connector_facets.items()
        },
        debug=overrides.get("debug", False) or settings.debug,
    )
