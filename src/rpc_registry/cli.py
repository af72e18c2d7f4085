"""CLI entry point for rpc-registry.

Usage:
    rpc-registry -m myservice.plugins list             # Show registered codecs and plugins
    rpc-registry -m myservice.plugins check trpc.yaml  # Check configured plugins resolve
    rpc-registry -m myservice.plugins check trpc.yaml --setup
    rpc-registry --version                             # Show version

Registrant modules passed with -m are imported first so their
import-time registrations land in the default registries.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path

from rpc_registry import __version__
from rpc_registry.codec import CodecRegistry
from rpc_registry.config import load_plugin_config, setup_plugins
from rpc_registry.errors import RegistryError
from rpc_registry.plugin import PluginRegistry

# Exit codes
EX_OK = 0
EX_CHECK_FAILED = 1
EX_USAGE = 2


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="rpc-registry",
        description="Inspect codec and plugin registrations",
    )
    parser.add_argument(
        "--version",
        "-V",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--module",
        "-m",
        action="append",
        default=[],
        dest="modules",
        metavar="MODULE",
        help="Import MODULE before running the command (repeatable)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser(
        "list",
        help="List registered codecs and plugins",
    )

    check_parser = subparsers.add_parser(
        "check",
        help="Check that every plugin in a config file is registered",
    )
    check_parser.add_argument(
        "config",
        help="Path to the YAML service config",
    )
    check_parser.add_argument(
        "--setup",
        action="store_true",
        help="Also run each plugin's setup() with its configuration",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    for module in args.modules:
        try:
            importlib.import_module(module)
        except ImportError as e:
            print(f"Error: cannot import {module}: {e}", file=sys.stderr)
            sys.exit(EX_USAGE)

    if args.command == "list":
        list_registrations()
    elif args.command == "check":
        sys.exit(run_check(args.config, run_setup=args.setup))
    else:
        parser.print_help()
        sys.exit(EX_USAGE)


def list_registrations():
    """Print the contents of the default registries."""
    codecs = CodecRegistry.get_default()
    plugins = PluginRegistry.get_default()

    print(f"Codecs ({len(codecs)}):")
    for name in codecs.names():
        print(f"  {name}")

    print(f"Plugins ({len(plugins)}):")
    for category in plugins.categories():
        for name in plugins.names(category):
            print(f"  {category}/{name}")


def run_check(config_path: str, run_setup: bool = False) -> int:
    """Verify every configured plugin resolves in the default registry.

    Args:
        config_path: Path to the YAML service config.
        run_setup: Also call setup() on each plugin once all resolve.

    Returns:
        Process exit code.
    """
    if not Path(config_path).exists():
        print(f"Error: config file not found: {config_path}", file=sys.stderr)
        return EX_USAGE

    try:
        config = load_plugin_config(config_path)
    except RegistryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EX_USAGE

    registry = PluginRegistry.get_default()
    missing = 0
    for category, name, _ in config.entries():
        try:
            registry.get_with_error(category, name)
        except RegistryError as e:
            print(f"MISSING {category}/{name}: {e}")
            missing += 1
        else:
            print(f"ok      {category}/{name}")

    if missing:
        print(f"{missing} of {len(config)} configured plugins not registered", file=sys.stderr)
        return EX_CHECK_FAILED

    if run_setup:
        try:
            setup_plugins(config, registry)
        except RegistryError as e:
            print(f"Error: {e}", file=sys.stderr)
            return EX_CHECK_FAILED

    return EX_OK


if __name__ == "__main__":
    main()
