"""
YAML config file discovery and merging for sync_documenter.

Usage:
    from sync_documenter.config_loader import load_hierarchical_config

    raw = load_hierarchical_config()
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SYNC_DOCUMENTER_CONFIG"
CONFIG_DIR_NAME = ".sync_documenter"
CONFIG_FILE_NAME = "config.yml"

# ${VAR} or ${VAR:-default}
_PLACEHOLDER = re.compile(r"\$\{([^}:]+?)(?::-(.*?))?\}")


def interpolate_env_vars(value: str) -> str:
    """Expand ``${VAR}`` and ``${VAR:-default}`` placeholders in *value*.

    An unset or empty variable expands to its default, or to ``""``.
    """
    return _PLACEHOLDER.sub(
        lambda m: os.environ.get(m.group(1)) or m.group(2) or "", value
    )


def _expand(node: Any) -> Any:
    if isinstance(node, str):
        return interpolate_env_vars(node)
    if isinstance(node, dict):
        return {key: _expand(item) for key, item in node.items()}
    if isinstance(node, list):
        return [_expand(item) for item in node]
    return node


class ConfigLoader(yaml.SafeLoader):
    """SafeLoader with an ``!include path.yml`` tag.

    Relative paths resolve against the including file.  Facet tables for
    large estates usually live in their own file pulled into
    ``documenter.connector_facets``.
    """

    def __init__(self, stream, chain: tuple[Path, ...] = ()) -> None:
        super().__init__(stream)
        self.chain = chain

    def include(self, node: yaml.ScalarNode) -> Any:
        here = self.chain[-1]
        target = (here.parent / self.construct_scalar(node)).resolve()
        if target in self.chain:
            cycle = " -> ".join(str(p) for p in (*self.chain, target))
            raise ValueError(f"Circular include detected: {cycle}")
        if not target.is_file():
            raise FileNotFoundError(
                f"Include file not found: {target} (referenced from {here})"
            )
        return read_yaml(target, self.chain)


ConfigLoader.add_constructor("!include", ConfigLoader.include)


def read_yaml(path: Path, chain: tuple[Path, ...] = ()) -> Any:
    """Parse one YAML file, following ``!include`` tags."""
    path = path.resolve()
    with path.open(encoding="utf-8") as fh:
        loader = ConfigLoader(fh, (*chain, path))
        try:
            return loader.get_single_data()
        finally:
            loader.dispose()


def discover_config_files() -> list[Path]:
    """Existing config files, highest precedence first.

    Checked in order: the file named by ``SYNC_DOCUMENTER_CONFIG``,
    ``./.sync_documenter/config.yml``, then
    ``~/.config/sync_documenter/config.yml``.
    """
    candidates = [
        Path.cwd() / CONFIG_DIR_NAME / CONFIG_FILE_NAME,
        Path.home() / ".config" / "sync_documenter" / CONFIG_FILE_NAME,
    ]
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        candidates.insert(0, Path(explicit).expanduser().resolve())
    return [path for path in candidates if path.is_file()]


def load_hierarchical_config() -> dict[str, Any]:
    """Merge every discovered config file into one dict.

    A higher-precedence file replaces whole top-level sections of a lower
    one.  Placeholders are expanded after the merge.  Returns ``{}`` when
    no file exists.
    """
    merged: dict[str, Any] = {}
    for path in reversed(discover_config_files()):
        logger.debug("Loading config: %s", path)
        data = read_yaml(path)
        if isinstance(data, dict):
            merged.update(data)
        elif data is not None:
            logger.warning(
                "Config file %s has a %s root, expected a mapping; skipped",
                path,
                type(data).__name__,
            )

    if not merged:
        logger.debug("No config settings found, using defaults")
    return _expand(merged)
