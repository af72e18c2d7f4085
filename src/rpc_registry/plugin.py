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
Plugin Registry.

Holds plugin factories that must be loaded from configuration, addressed by
(category, name). A factory is filed under the category its own ``type()``
reports; registration never takes a category argument. Lookups name the
category explicitly.

Plugins that need no configuration (codecs, for example) are registered
through their own registries instead.

Design:
- Two-level mapping: category -> name -> factory
- Category buckets are created on first registration and never removed
- Best-effort ``register``/``get`` and validating
  ``register_with_validation``/``get_with_error`` coexist

Thread Safety:
- Default-instance creation uses double-checked locking on a class-level lock
- Mapping reads and writes are guarded by a per-instance RLock
"""

import logging
import threading
from typing import ClassVar, Optional

from rpc_registry.errors import AlreadyRegisteredError, InvalidArgumentError, NotFoundError
from rpc_registry.protocols import PluginFactory

logger = logging.getLogger(__name__)


class PluginRegistry:
    """Registry of plugin factories keyed by (category, name).

    Usage (registering, at component import time):
        PluginRegistry.get_default().register("default", ConsoleLogFactory())

    Usage (resolving, from the bootstrap loader):
        factory = registry.get_with_error("log", "default")
        factory.setup("default", decoder)

    The same factory implementation may be registered under several names
    and configured differently for each.
    """

    _instance: ClassVar[Optional["PluginRegistry"]] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self):
        self._plugins: dict[str, dict[str, PluginFactory]] = {}
        self._rlock = threading.RLock()

    @classmethod
    def get_default(cls) -> "PluginRegistry":
        """Get the process-wide PluginRegistry instance.

        Thread-safe: Uses double-checked locking pattern.
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the default instance (for testing only)."""
        with cls._lock:
            cls._instance = None

    def register(self, name: str, factory: PluginFactory) -> None:
        """Register a factory under ``(factory.type(), name)``, overwriting silently.

        Args:
            name: Plugin name within its category.
            factory: The plugin factory. Its ``type()`` picks the category.
        """
        category = factory.type()
        with self._rlock:
            factories = self._plugins.setdefault(category, {})
            if name in factories:
                logger.warning(
                    f"Plugin '{name}' of type '{category}' registered again, replacing previous entry"
                )
            factories[name] = factory
        logger.debug(f"Registered plugin: {category}/{name}")

    def register_with_validation(self, name: str, factory: Optional[PluginFactory]) -> None:
        """Register a factory, refusing invalid input and duplicates.

        Checks run in a fixed order so the error is deterministic: name, then
        factory presence, then the factory's type, then duplicates.

        Args:
            name: Plugin name within its category. Must be non-empty.
            factory: The plugin factory. Must not be None and must report a
                non-empty type.

        Raises:
            InvalidArgumentError: If ``name`` is empty, ``factory`` is None, or
                ``factory.type()`` is empty.
            AlreadyRegisteredError: If ``(factory.type(), name)`` is taken.
        """
        if not name:
            raise InvalidArgumentError("name", "plugin name cannot be empty")
        if factory is None:
            raise InvalidArgumentError("factory", "plugin factory cannot be None")

        category = factory.type()
        if not category:
            raise InvalidArgumentError("type", "plugin type cannot be empty")

        with self._rlock:
            factories = self._plugins.get(category)
            if factories is not None and name in factories:
                raise AlreadyRegisteredError(name, category)
            self._plugins.setdefault(category, {})[name] = factory
        logger.debug(f"Registered plugin: {category}/{name}")

    def get(self, category: str, name: str) -> Optional[PluginFactory]:
        """Return the factory for ``(category, name)``, or None if absent."""
        with self._rlock:
            return self._plugins.get(category, {}).get(name)

    def get_with_error(self, category: str, name: str) -> PluginFactory:
        """Return the factory for ``(category, name)``.

        Args:
            category: Plugin category, as reported by the factory's ``type()``.
            name: Plugin name within the category.

        Returns:
            The registered factory instance.

        Raises:
            InvalidArgumentError: If ``category`` or ``name`` is empty
                (category is checked first).
            NotFoundError: If nothing is registered for ``category``, or the
                category has no plugin called ``name``.
        """
        if not category:
            raise InvalidArgumentError("type", "plugin type cannot be empty")
        if not name:
            raise InvalidArgumentError("name", "plugin name cannot be empty")

        with self._rlock:
            factories = self._plugins.get(category)
            if factories is None:
                raise NotFoundError(
                    f"no plugins registered for type '{category}'", category=category
                )
            factory = factories.get(name)
            if factory is None:
                raise NotFoundError(
                    f"plugin '{name}' of type '{category}' not found",
                    name=name,
                    category=category,
                )
            return factory

    def categories(self) -> list[str]:
        """Return the categories that have a bucket, sorted."""
        with self._rlock:
            return sorted(self._plugins)

    def names(self, category: str) -> list[str]:
        """Return the plugin names registered in ``category``, sorted."""
        with self._rlock:
            return sorted(self._plugins.get(category, {}))

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        category, name = key
        with self._rlock:
            return name in self._plugins.get(category, {})

    def __len__(self) -> int:
        with self._rlock:
            return sum(len(factories) for factories in self._plugins.values())


# Process-wide API, bound to the default registry.


def register(name: str, factory: PluginFactory) -> None:
    """Register a factory in the default registry under its own ``type()``."""
    PluginRegistry.get_default().register(name, factory)


def register_with_validation(name: str, factory: Optional[PluginFactory]) -> None:
    """Register a factory in the default registry; see PluginRegistry.register_with_validation."""
    PluginRegistry.get_default().register_with_validation(name, factory)


def get(category: str, name: str) -> Optional[PluginFactory]:
    return PluginRegistry.get_default().get(category, name)


def get_with_error(category: str, name: str) -> PluginFactory:
    return PluginRegistry.get_default().get_with_error(category, name)
