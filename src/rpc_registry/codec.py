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
Codec Registry.

Stores (server codec, client codec) pairs under a flat, case-sensitive name.
The transport layer resolves the pair for a connection from the codec name in
its service configuration.

Two API generations coexist:
- Best-effort: ``register`` overwrites silently, ``get_server``/``get_client``
  return None on a miss.
- Validating: ``register_with_validation`` rejects empty and duplicate names,
  ``get_server_with_error``/``get_client_with_error`` raise NotFoundError.

Thread Safety:
- Default-instance creation uses double-checked locking on a class-level lock
- Mapping reads and writes are guarded by a per-instance RLock
- Registration is expected to finish before concurrent lookups start
"""

import logging
import threading
from dataclasses import dataclass
from typing import ClassVar, Optional

from rpc_registry.errors import AlreadyRegisteredError, InvalidArgumentError, NotFoundError
from rpc_registry.protocols import Codec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CodecEntry:
    """A registered codec pair.

    Attributes:
        server: Codec used on the server side of a connection.
        client: Codec used on the client side of a connection.
    """

    server: Codec
    client: Codec


class CodecRegistry:
    """Registry of codec pairs keyed by name.

    Usage (registering, at component import time):
        registry = CodecRegistry.get_default()
        registry.register("trpc", ServerCodec(), ClientCodec())

    Usage (resolving, from the transport layer):
        codec = registry.get_server_with_error(service_config.codec)

    Tests construct isolated instances with ``CodecRegistry()``.
    """

    _instance: ClassVar[Optional["CodecRegistry"]] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self):
        self._codecs: dict[str, CodecEntry] = {}
        self._rlock = threading.RLock()

    @classmethod
    def get_default(cls) -> "CodecRegistry":
        """Get the process-wide CodecRegistry instance.

        Thread-safe: Uses double-checked locking pattern.

        Returns:
            The default CodecRegistry instance.
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the default instance (for testing only).

        Warning:
            Registrations made at import time are lost. Never call in
            production code.
        """
        with cls._lock:
            cls._instance = None

    def register(self, name: str, server_codec: Codec, client_codec: Codec) -> None:
        """Register a codec pair, replacing any pair already under ``name``.

        The name is not validated.

        Args:
            name: Codec name, e.g. "trpc" or "http".
            server_codec: Codec for the server side.
            client_codec: Codec for the client side.
        """
        entry = CodecEntry(server=server_codec, client=client_codec)
        with self._rlock:
            if name in self._codecs:
                logger.warning(f"Codec '{name}' registered again, replacing previous entry")
            self._codecs[name] = entry
        logger.debug(f"Registered codec: {name}")

    def register_with_validation(
        self, name: str, server_codec: Codec, client_codec: Codec
    ) -> None:
        """Register a codec pair, refusing empty or duplicate names.

        Args:
            name: Codec name. Must be non-empty and not yet registered.
            server_codec: Codec for the server side.
            client_codec: Codec for the client side.

        Raises:
            InvalidArgumentError: If ``name`` is empty.
            AlreadyRegisteredError: If ``name`` is already registered.
        """
        if not name:
            raise InvalidArgumentError("name", "codec name cannot be empty")

        with self._rlock:
            if name in self._codecs:
                raise AlreadyRegisteredError(name)
            self._codecs[name] = CodecEntry(server=server_codec, client=client_codec)
        logger.debug(f"Registered codec: {name}")

    def get_entry(self, name: str) -> Optional[CodecEntry]:
        """Return the whole codec pair for ``name``, or None."""
        with self._rlock:
            return self._codecs.get(name)

    def get_server(self, name: str) -> Optional[Codec]:
        """Return the server codec for ``name``, or None if unknown."""
        entry = self.get_entry(name)
        return entry.server if entry is not None else None

    def get_client(self, name: str) -> Optional[Codec]:
        """Return the client codec for ``name``, or None if unknown."""
        entry = self.get_entry(name)
        return entry.client if entry is not None else None

    def get_server_with_error(self, name: str) -> Codec:
        """Return the server codec for ``name``.

        Raises:
            NotFoundError: If no codec is registered under ``name``.
        """
        return self._require(name).server

    def get_client_with_error(self, name: str) -> Codec:
        """Return the client codec for ``name``.

        Raises:
            NotFoundError: If no codec is registered under ``name``.
        """
        return self._require(name).client

    def _require(self, name: str) -> CodecEntry:
        entry = self.get_entry(name)
        if entry is None:
            raise NotFoundError(f"codec '{name}' not found", name=name)
        return entry

    def names(self) -> list[str]:
        """Return the registered codec names, sorted."""
        with self._rlock:
            return sorted(self._codecs)

    def __contains__(self, name: object) -> bool:
        with self._rlock:
            return name in self._codecs

    def __len__(self) -> int:
        with self._rlock:
            return len(self._codecs)


# Process-wide API, bound to the default registry.


def register(name: str, server_codec: Codec, client_codec: Codec) -> None:
    """Register a codec pair in the default registry, overwriting silently."""
    CodecRegistry.get_default().register(name, server_codec, client_codec)


def register_with_validation(name: str, server_codec: Codec, client_codec: Codec) -> None:
    """Register a codec pair in the default registry; see CodecRegistry.register_with_validation."""
    CodecRegistry.get_default().register_with_validation(name, server_codec, client_codec)


def get_server(name: str) -> Optional[Codec]:
    return CodecRegistry.get_default().get_server(name)


def get_client(name: str) -> Optional[Codec]:
    return CodecRegistry.get_default().get_client(name)


def get_server_with_error(name: str) -> Codec:
    return CodecRegistry.get_default().get_server_with_error(name)


def get_client_with_error(name: str) -> Codec:
    return CodecRegistry.get_default().get_client_with_error(name)
