# Copyright 2024-2025 Amiable Development
# SPDX-License-Identifier: Apache-2.0

"""Exceptions raised by the validating registry operations.

Best-effort operations (``register``, ``get``, ``get_server``, ``get_client``)
never raise; only the ``*_with_validation`` and ``*_with_error`` variants and
the configuration helpers do.
"""

from typing import Optional


class RegistryError(Exception):
    """Base class for all registry errors."""


class InvalidArgumentError(RegistryError, ValueError):
    """Raised for an empty identifier, a missing factory, or an empty plugin type."""

    def __init__(self, argument: str, message: str):
        self.argument = argument
        super().__init__(message)


class AlreadyRegisteredError(RegistryError):
    """Raised when a validating registration hits an existing key."""

    def __init__(self, name: str, category: Optional[str] = None):
        self.name = name
        self.category = category
        if category is None:
            message = f"codec '{name}' is already registered"
        else:
            message = f"plugin '{name}' of type '{category}' is already registered"
        super().__init__(message)


class NotFoundError(RegistryError, LookupError):
    """Raised by the ``*_with_error`` accessors on a lookup miss."""

    def __init__(self, message: str, name: Optional[str] = None, category: Optional[str] = None):
        self.name = name
        self.category = category
        super().__init__(message)


class ConfigError(RegistryError):
    """Raised when a plugin configuration file or node is malformed."""


class PluginSetupError(RegistryError):
    """Raised when a plugin factory's ``setup`` call fails during bootstrap."""

    def __init__(self, category: str, name: str, cause: BaseException):
        self.category = category
        self.name = name
        self.cause = cause
        super().__init__(f"setup of plugin '{name}' of type '{category}' failed: {cause}")
