"""Runtime configuration for a documentation run.

Reads documenter settings from explicit arguments, environment variables,
.env files, and YAML config file fallbacks.

Precedence (highest to lowest):
    Explicit args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    SYNC_DOCUMENTER_REPORT_TITLE: Report title (optional)
    SYNC_DOCUMENTER_MAX_PARALLEL_CONNECTORS: Max concurrent connector passes
        (optional, default: 4)
    SYNC_DOCUMENTER_DEBUG: Enable debug logging (optional, default: false)
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import find_dotenv, load_dotenv

from .config_loader import load_hierarchical_config
from .config_schema import LoggingConfig, build_config
from .logger import setup_logging

logger = logging.getLogger(__name__)

DEFAULT_REPORT_TITLE = "Synchronization Configuration Comparison"
DEFAULT_MAX_PARALLEL_CONNECTORS = 4
MAX_PARALLEL_CONNECTORS_LIMIT = 64


@dataclass
class Config:
    report_title: str = DEFAULT_REPORT_TITLE
    max_parallel_connectors: int = DEFAULT_MAX_PARALLEL_CONNECTORS
    connector_facets: dict[str, list[str]] = field(default_factory=dict)
    debug: bool = False


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Args:
        config: Config instance to validate.

    Raises:
        ValueError: If the title is empty, the parallelism is out of range,
            or a facet override is not a list of facet names.
    """
    config.report_title = config.report_title.strip()
    if not config.report_title:
        raise ValueError(
            "Report title cannot be empty. "
            "Set SYNC_DOCUMENTER_REPORT_TITLE or documenter.report_title."
        )

    if not (
        1 <= config.max_parallel_connectors <= MAX_PARALLEL_CONNECTORS_LIMIT
    ):
        raise ValueError(
            f"Invalid max_parallel_connectors "
            f"'{config.max_parallel_connectors}': must be a number between "
            f"1 and {MAX_PARALLEL_CONNECTORS_LIMIT}"
        )

    for category, facets in config.connector_facets.items():
        if not isinstance(facets, list) or not all(
            isinstance(f, str) for f in facets
        ):
            raise ValueError(
                f"Invalid connector_facets entry for '{category}': "
                "must be a list of facet names"
            )


def load_config(
    report_title: str | None = None,
    max_parallel_connectors: int | None = None,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        explicit arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        report_title: Override report title.
        max_parallel_connectors: Override connector-pass parallelism.
        debug: Enable debug logging.
        yaml_fallbacks: Dict of values from the YAML ``documenter`` section.
            Used as fallback when the explicit arg and env var are unset.

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If a value is malformed or out of range.
    """
    fb = yaml_fallbacks or {}

    # --- String fields: arg > env > YAML > default ---

    final_title = (
        report_title
        or os.getenv("SYNC_DOCUMENTER_REPORT_TITLE")
        or fb.get("report_title")
        or DEFAULT_REPORT_TITLE
    )

    # --- Boolean fields: arg > env > YAML > default ---

    def get_bool_env(key: str) -> bool | None:
        """Return True/False from env var, or None if unset."""
        val = os.getenv(key)
        if val is None:
            return None
        return val.lower() in ("true", "1", "yes", "on")

    if debug:
        final_debug = True
    else:
        env_debug = get_bool_env("SYNC_DOCUMENTER_DEBUG")
        if env_debug is not None:
            final_debug = env_debug
        else:
            final_debug = bool(fb.get("debug", False))

    # --- Numeric fields: arg > env > YAML > default ---

    max_parallel_raw = os.getenv("SYNC_DOCUMENTER_MAX_PARALLEL_CONNECTORS")
    if max_parallel_connectors is not None:
        final_max_parallel = max_parallel_connectors
    elif max_parallel_raw is not None:
        try:
            final_max_parallel = int(max_parallel_raw)
        except ValueError:
            raise ValueError(
                f"Invalid SYNC_DOCUMENTER_MAX_PARALLEL_CONNECTORS "
                f"'{max_parallel_raw}': must be a number between 1 and "
                f"{MAX_PARALLEL_CONNECTORS_LIMIT}"
            ) from None
    elif "max_parallel_connectors" in fb:
        final_max_parallel = int(fb["max_parallel_connectors"])
    else:
        final_max_parallel = DEFAULT_MAX_PARALLEL_CONNECTORS

    # --- Facet tables: YAML only ---

    final_facets = {
        str(category): facets
        for category, facets in (fb.get("connector_facets") or {}).items()
    }

    config = Config(
        report_title=final_title,
        max_parallel_connectors=final_max_parallel,
        connector_facets=final_facets,
        debug=final_debug,
    )

    validate_config(config)

    return config


def load_from_files(
    report_title: str | None = None,
    max_parallel_connectors: int | None = None,
    debug: bool = False,
    init_logging: bool = True,
) -> tuple[Config, LoggingConfig]:
    """Discover config files and resolve the runtime configuration.

    Loads a .env file from the working directory first (so that ${VAR}
    interpolation can use its values), then runs
    ``load_hierarchical_config()`` and ``build_config()`` and feeds the
    ``documenter`` section to ``load_config()`` as YAML fallbacks.

    With *init_logging* the resolved ``debug`` flag and the ``logging``
    section are handed to ``setup_logging()``; debug forces DEBUG level.

    Returns:
        The validated runtime ``Config`` and the ``logging`` section.
    """
    load_dotenv(find_dotenv(usecwd=True))

    unified = build_config(load_hierarchical_config())
    config = load_config(
        report_title=report_title,
        max_parallel_connectors=max_parallel_connectors,
        debug=debug,
        yaml_fallbacks=unified.documenter.model_dump(),
    )
    if init_logging:
        setup_logging(
            debug=config.debug,
            log_file=unified.logging.file,
            debug_format=unified.logging.format,
            level=unified.logging.level,
        )
    return config, unified.logging
