# Copyright 2024-2025 Amiable Development
# SPDX-License-Identifier: Apache-2.0

"""
Plugin configuration loading and bootstrap.

This module provides:
- PluginConfig dataclass for the ``plugins:`` section of a service config
- load_plugin_config() to parse a YAML config file
- YamlNodeDecoder, the Decoder handed to each factory's setup()
- setup_plugins() to resolve and set up every configured plugin

Config layout:
    plugins:
      log:                  # category, matched against factory.type()
        default:            # plugin name
          level: info       # node passed to the factory through its decoder
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Optional, Union

import yaml

from rpc_registry.errors import ConfigError, PluginSetupError
from rpc_registry.plugin import PluginRegistry

logger = logging.getLogger(__name__)

PLUGINS_KEY = "plugins"


@dataclass
class PluginConfig:
    """Configured plugins, grouped by category.

    Attributes:
        plugins: category -> plugin name -> raw configuration node. Insertion
            order follows the config file.
    """

    plugins: dict[str, dict[str, Any]] = field(default_factory=dict)

    def entries(self) -> Iterator[tuple[str, str, Any]]:
        """Yield ``(category, name, node)`` in configuration order."""
        for category, named in self.plugins.items():
            for name, node in named.items():
                yield category, name, node

    def __len__(self) -> int:
        return sum(len(named) for named in self.plugins.values())


class YamlNodeDecoder:
    """Decoder bound to one plugin's configuration node.

    ``decode(cfg)`` fills ``cfg`` from the node:
    - a dict is updated in place
    - a dataclass instance has matching fields assigned; unknown keys raise
    - an empty node leaves ``cfg`` untouched
    """

    def __init__(self, node: Any):
        self.node = node

    def decode(self, cfg: Any) -> None:
        if self.node is None:
            return
        if not isinstance(self.node, dict):
            raise ConfigError(
                f"plugin config must be a mapping, got {type(self.node).__name__}"
            )

        if isinstance(cfg, dict):
            cfg.update(self.node)
            return

        if dataclasses.is_dataclass(cfg) and not isinstance(cfg, type):
            known = {f.name for f in dataclasses.fields(cfg)}
            unknown = sorted(str(k) for k in self.node if k not in known)
            if unknown:
                raise ConfigError(
                    f"unknown keys for {type(cfg).__name__}: {', '.join(unknown)}"
                )
            for key, value in self.node.items():
                setattr(cfg, key, value)
            return

        raise ConfigError(
            f"cannot decode plugin config into {type(cfg).__name__}; "
            "expected a dict or dataclass instance"
        )


def parse_plugin_config(data: Optional[dict]) -> PluginConfig:
    """Build a PluginConfig from an already-parsed config document.

    Args:
        data: The whole config document. Only its ``plugins`` key is read.

    Returns:
        PluginConfig, empty when the document has no plugins section.

    Raises:
        ConfigError: If the plugins section or a category is not a mapping.
    """
    if not data:
        return PluginConfig()
    if not isinstance(data, dict):
        raise ConfigError("config document must be a mapping")

    section = data.get(PLUGINS_KEY) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{PLUGINS_KEY}' must be a mapping of category to plugins")

    plugins: dict[str, dict[str, Any]] = {}
    for category, named in section.items():
        if named is None:
            continue
        if not isinstance(named, dict):
            raise ConfigError(f"plugins for category '{category}' must be a mapping")
        plugins[str(category)] = {str(name): node for name, node in named.items()}

    return PluginConfig(plugins=plugins)


def load_plugin_config(path: Union[str, Path]) -> PluginConfig:
    """Load plugin configuration from a YAML file.

    Args:
        path: Path to the service config file.

    Returns:
        PluginConfig; empty if the file does not exist.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    config_path = Path(path)
    if not config_path.exists():
        logger.debug(f"No config file at {config_path}, no plugins configured")
        return PluginConfig()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {config_path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"{config_path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise ConfigError(f"cannot read {config_path}: {e}") from e

    return parse_plugin_config(data)


def setup_plugins(
    config: PluginConfig, registry: Optional[PluginRegistry] = None
) -> list[tuple[str, str]]:
    """Resolve and set up every configured plugin, in configuration order.

    Args:
        config: Plugin configuration.
        registry: Registry to resolve factories from; the default registry
            when omitted.

    Returns:
        The ``(category, name)`` pairs that were set up.

    Raises:
        InvalidArgumentError: If a category or name in the config is empty.
        NotFoundError: If a configured plugin is not registered.
        PluginSetupError: If a factory's setup() raises.
    """
    if registry is None:
        registry = PluginRegistry.get_default()

    done: list[tuple[str, str]] = []
    for category, name, node in config.entries():
        factory = registry.get_with_error(category, name)
        try:
            factory.setup(name, YamlNodeDecoder(node))
        except Exception as e:
            raise PluginSetupError(category, name, e) from e
        logger.info(f"Set up plugin: {category}/{name}")
        done.append((category, name))
    return done
