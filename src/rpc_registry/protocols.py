# Copyright 2024-2025 Amiable Development
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Extension protocols for the codec and plugin registries.

These Protocol classes define the shapes that registrants implement. The
registries store implementations as opaque values and never call them; the
transport layer calls codecs, and the bootstrap loader calls plugin factories.

Design Principles:
1. Composition over inheritance - no base classes to subclass
2. Testable - protocols can be mocked with MagicMock(spec=...)
3. Versioned - protocols follow semantic versioning

Protocol Versioning:
- MAJOR: Breaking changes to method signatures
- MINOR: New optional methods with defaults
- PATCH: Documentation or type hint fixes
"""

from typing import Any, Protocol, runtime_checkable


# =============================================================================
# Protocol Version Constants
# =============================================================================
# Follow SemVer: MAJOR.MINOR.PATCH

CODEC_VERSION = "1.0.0"
DECODER_VERSION = "1.0.0"
PLUGIN_FACTORY_VERSION = "1.0.0"


@runtime_checkable
class Codec(Protocol):
    """
    Wire codec for one side (server or client) of a connection.

    Codecs are registered in pairs under a single name; see
    ``rpc_registry.codec.CodecRegistry``.

    Version: 1.0.0
    """

    def encode(self, message: Any, body: bytes) -> bytes:
        """
        Frame a serialized message body for the wire.

        Args:
            message: Per-call message metadata (headers, call info).
            body: Serialized request or response body.

        Returns:
            The complete frame to write.

        Raises:
            Any exception specific to the codec on malformed input.
        """
        ...

    def decode(self, message: Any, buffer: bytes) -> bytes:
        """
        Unpack a frame read from the wire.

        Args:
            message: Per-call message metadata, filled in from the frame header.
            buffer: The complete frame.

        Returns:
            The serialized body carried by the frame.
        """
        ...


@runtime_checkable
class Decoder(Protocol):
    """
    Decodes a plugin's configuration node into a caller-owned object.

    Version: 1.0.0
    """

    def decode(self, cfg: Any) -> None:
        """
        Fill ``cfg`` from the configuration node this decoder wraps.

        Args:
            cfg: The plugin's own config object (a dict or a dataclass instance).

        Raises:
            rpc_registry.errors.ConfigError: If the node does not fit ``cfg``.
        """
        ...


@runtime_checkable
class PluginFactory(Protocol):
    """
    A self-typed plugin that configures itself once at startup.

    The value returned by ``type()`` decides the category the factory is
    filed under at registration; callers never supply it.

    Version: 1.0.0
    """

    def type(self) -> str:
        """
        Report the plugin category, e.g. "log", "tracing", "selector".

        Returns:
            The category name. Must be non-empty for validating registration.
        """
        ...

    def setup(self, name: str, decoder: Decoder) -> None:
        """
        Load the plugin from its configuration.

        Args:
            name: The name the plugin was configured under.
            decoder: Decoder bound to this plugin's configuration node.

        Raises:
            Any exception on invalid configuration or failed initialization.
        """
        ...
