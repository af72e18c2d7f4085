"""rpc-registry - Named, typed extension registry for RPC frameworks.

Components register wire codecs and configurable plugin factories at import
time; the transport layer and bootstrap code resolve them later by name.

Usage:
    from rpc_registry import codec, plugin

    # Registration (component import time)
    codec.register("trpc", ServerCodec(), ClientCodec())
    plugin.register_with_validation("default", ConsoleLogFactory())

    # Resolution (bootstrap / transport)
    server_codec = codec.get_server_with_error("trpc")
    factory = plugin.get_with_error("log", "default")
"""

try:
    from rpc_registry._version import __version__, __version_tuple__
except ImportError:
    # Package not installed (development mode without build)
    __version__ = "0.0.0.dev0"
    __version_tuple__ = (0, 0, 0, "dev0")

from rpc_registry.codec import CodecEntry, CodecRegistry
from rpc_registry.errors import (
    AlreadyRegisteredError,
    ConfigError,
    InvalidArgumentError,
    NotFoundError,
    PluginSetupError,
    RegistryError,
)
from rpc_registry.plugin import PluginRegistry
from rpc_registry.protocols import (
    CODEC_VERSION,
    DECODER_VERSION,
    PLUGIN_FACTORY_VERSION,
    Codec,
    Decoder,
    PluginFactory,
)

__all__ = [
    "__version__",
    "__version_tuple__",
    # Protocols
    "CODEC_VERSION",
    "DECODER_VERSION",
    "PLUGIN_FACTORY_VERSION",
    "Codec",
    "Decoder",
    "PluginFactory",
    # Registries
    "CodecEntry",
    "CodecRegistry",
    "PluginRegistry",
    # Errors
    "RegistryError",
    "InvalidArgumentError",
    "AlreadyRegisteredError",
    "NotFoundError",
    "ConfigError",
    "PluginSetupError",
]
