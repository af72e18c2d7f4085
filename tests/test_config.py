# Copyright 2024-2025 Amiable Development
# SPDX-License-Identifier: Apache-2.0

"""
Tests for plugin configuration loading and bootstrap.

Covers:
- Parsing the plugins section of a YAML config
- YamlNodeDecoder filling dicts and dataclasses
- setup_plugins resolving factories and calling setup()
"""

from dataclasses import dataclass
from unittest.mock import MagicMock

import pytest

from rpc_registry.config import (
    PluginConfig,
    YamlNodeDecoder,
    load_plugin_config,
    parse_plugin_config,
    setup_plugins,
)
from rpc_registry.errors import ConfigError, NotFoundError, PluginSetupError
from rpc_registry.plugin import PluginRegistry
from rpc_registry.protocols import Decoder, PluginFactory

SAMPLE_CONFIG = """\
server:
  app: demo
plugins:
  log:
    default:
      level: info
      writers: [console]
  tracing:
    jaeger:
      endpoint: http://localhost:14268
    noop:
"""


@dataclass
class LogConfig:
    level: str = "debug"
    writers: list = None


class TestLoadPluginConfig:
    """Loading and parsing config files."""

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "trpc.yaml"
        path.write_text(SAMPLE_CONFIG)

        config = load_plugin_config(path)

        assert list(config.entries()) == [
            ("log", "default", {"level": "info", "writers": ["console"]}),
            ("tracing", "jaeger", {"endpoint": "http://localhost:14268"}),
            ("tracing", "noop", None),
        ]
        assert len(config) == 3

    def test_missing_file_gives_empty_config(self, tmp_path):
        config = load_plugin_config(tmp_path / "absent.yaml")

        assert config == PluginConfig()
        assert len(config) == 0

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("plugins: [unclosed\n")

        with pytest.raises(ConfigError, match="invalid YAML"):
            load_plugin_config(path)

    def test_non_utf8_file_raises(self, tmp_path):
        path = tmp_path / "latin1.yaml"
        path.write_bytes(b"plugins:\n  log:\n    \xff\xfe: {}\n")

        with pytest.raises(ConfigError, match="not valid UTF-8") as exc_info:
            load_plugin_config(path)

        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)

    def test_empty_file_gives_empty_config(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert len(load_plugin_config(path)) == 0

    def test_no_plugins_section(self):
        assert len(parse_plugin_config({"server": {"app": "demo"}})) == 0

    def test_plugins_section_must_be_mapping(self):
        with pytest.raises(ConfigError, match="must be a mapping"):
            parse_plugin_config({"plugins": ["log"]})

    def test_category_must_be_mapping(self):
        with pytest.raises(ConfigError, match="category 'log'"):
            parse_plugin_config({"plugins": {"log": "default"}})

    def test_document_must_be_mapping(self):
        with pytest.raises(ConfigError):
            parse_plugin_config(["plugins"])


class TestYamlNodeDecoder:
    """Decoding plugin nodes into config objects."""

    def test_satisfies_decoder_protocol(self):
        assert isinstance(YamlNodeDecoder({}), Decoder)

    def test_decode_into_dict(self):
        cfg = {"level": "debug", "color": True}

        YamlNodeDecoder({"level": "info"}).decode(cfg)

        assert cfg == {"level": "info", "color": True}

    def test_decode_into_dataclass(self):
        cfg = LogConfig()

        YamlNodeDecoder({"level": "warn", "writers": ["file"]}).decode(cfg)

        assert cfg.level == "warn"
        assert cfg.writers == ["file"]

    def test_unknown_dataclass_key_raises(self):
        with pytest.raises(ConfigError, match="unknown keys for LogConfig: colour"):
            YamlNodeDecoder({"colour": "red"}).decode(LogConfig())

    def test_empty_node_leaves_cfg_untouched(self):
        cfg = LogConfig()

        YamlNodeDecoder(None).decode(cfg)

        assert cfg == LogConfig()

    def test_scalar_node_raises(self):
        with pytest.raises(ConfigError, match="must be a mapping"):
            YamlNodeDecoder("info").decode({})

    def test_unsupported_target_raises(self):
        with pytest.raises(ConfigError, match="expected a dict or dataclass"):
            YamlNodeDecoder({"level": "info"}).decode(object())


class TestSetupPlugins:
    """Bootstrap of configured plugins."""

    def test_sets_up_each_plugin_in_order(self, plugin_registry, make_factory):
        log = make_factory("log")
        tracing = make_factory("tracing")
        plugin_registry.register("default", log)
        plugin_registry.register("jaeger", tracing)
        plugin_registry.register("noop", tracing)
        config = parse_plugin_config(
            {
                "plugins": {
                    "log": {"default": {"level": "info"}},
                    "tracing": {"jaeger": {"endpoint": "e"}, "noop": None},
                }
            }
        )

        done = setup_plugins(config, plugin_registry)

        assert done == [("log", "default"), ("tracing", "jaeger"), ("tracing", "noop")]
        assert log.setup_calls == [("default", {"level": "info"})]
        assert tracing.setup_calls == [("jaeger", {"endpoint": "e"}), ("noop", {})]

    def test_uses_default_registry(self, log_factory):
        PluginRegistry.get_default().register("default", log_factory)

        setup_plugins(parse_plugin_config({"plugins": {"log": {"default": {}}}}))

        assert log_factory.setup_calls == [("default", {})]

    def test_unregistered_plugin_raises_not_found(self, plugin_registry):
        config = parse_plugin_config({"plugins": {"log": {"default": {}}}})

        with pytest.raises(NotFoundError, match="no plugins registered"):
            setup_plugins(config, plugin_registry)

    def test_setup_failure_is_wrapped(self, plugin_registry):
        factory = MagicMock(spec=PluginFactory)
        factory.type.return_value = "log"
        factory.setup.side_effect = RuntimeError("bad level")
        plugin_registry.register("default", factory)
        config = parse_plugin_config({"plugins": {"log": {"default": {"level": "x"}}}})

        with pytest.raises(PluginSetupError, match="bad level") as exc_info:
            setup_plugins(config, plugin_registry)

        assert exc_info.value.category == "log"
        assert exc_info.value.name == "default"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_setup_receives_bound_decoder(self, plugin_registry):
        factory = MagicMock(spec=PluginFactory)
        factory.type.return_value = "selector"
        plugin_registry.register("polaris", factory)
        config = parse_plugin_config({"plugins": {"selector": {"polaris": {"ttl": 5}}}})

        setup_plugins(config, plugin_registry)

        name, decoder = factory.setup.call_args.args
        assert name == "polaris"
        assert decoder.node == {"ttl": 5}

    def test_stops_at_first_failure(self, plugin_registry, make_factory):
        later = make_factory("tracing")
        plugin_registry.register("jaeger", later)
        config = parse_plugin_config(
            {"plugins": {"log": {"missing": {}}, "tracing": {"jaeger": {}}}}
        )

        with pytest.raises(NotFoundError):
            setup_plugins(config, plugin_registry)

        assert later.setup_calls == []
