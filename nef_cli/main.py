"""Command line surface for inspecting catalogs and composed providers."""

from __future__ import annotations

import argparse
import logging
from typing import Callable, Sequence

from nef_core import __version__
from nef_core.catalogs import DirectoryCatalog
from nef_core.api.decorators import export_definitions
from nef_core.composition import CompositionContainer
from nef_core.config import Settings
from nef_core.errors import CompositionError, ConfigError, describe_key

Handler = Callable[[argparse.Namespace, Settings], int]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nef",
        description="nef: discover exported classes and compose them into providers.",
    )
    parser.add_argument("--version", action="version", version=f"nef v{__version__}")
    parser.add_argument("--config", help="settings file (defaults to $NEF_CONFIG or the user config dir)")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = False

    classes_cmd = subparsers.add_parser("classes", help="list classes a directory exports")
    _add_scan_arguments(classes_cmd)
    classes_cmd.set_defaults(func=_handle_classes)

    providers_cmd = subparsers.add_parser("providers", help="realize and list providers")
    _add_scan_arguments(providers_cmd)
    providers_cmd.set_defaults(func=_handle_providers)

    lookup_cmd = subparsers.add_parser("lookup", help="resolve the single provider of a string key")
    _add_scan_arguments(lookup_cmd)
    lookup_cmd.add_argument("key", help="service key (string keys only)")
    lookup_cmd.set_defaults(func=_handle_lookup)

    return parser


def _add_scan_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("directory", help="directory to scan")
    parser.add_argument(
        "--pattern",
        action="append",
        default=[],
        help="glob pattern relative to the directory (repeatable)",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        help="glob pattern of files to skip (repeatable)",
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Handler | None = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 0
    try:
        settings = Settings.load(args.config)
    except ConfigError as exc:
        print(f"[nef] error: {exc}")
        return 2
    _configure_logging(settings, verbose=args.verbose)
    try:
        return func(args, settings)
    except CompositionError as exc:
        print(f"[nef] error: {exc}")
        return 1


def _configure_logging(settings: Settings, *, verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _build_container(args: argparse.Namespace, settings: Settings) -> CompositionContainer:
    return CompositionContainer(settings=settings).add_directories(
        args.directory,
        patterns=args.pattern or None,
        exclude=args.exclude or None,
    )


def _handle_classes(args: argparse.Namespace, settings: Settings) -> int:
    catalog = DirectoryCatalog(
        args.directory,
        patterns=args.pattern or settings.patterns,
        exclude=args.exclude or settings.exclude,
    )
    classes = catalog.list_classes_sync()
    if not classes:
        print("[nef] no classes found")
        return 0
    for cls in classes:
        keys = ", ".join(describe_key(item.key) for item in export_definitions(cls))
        print(f"{describe_key(cls)}  exports: {keys or '-'}")
    return 0


def _handle_providers(args: argparse.Namespace, settings: Settings) -> int:
    with _build_container(args, settings) as container:
        container.compose_sync()
        if not container.providers:
            print("[nef] no providers realized")
        for index, provider in enumerate(container.providers):
            print(f"{index:>3} {describe_key(provider.key)} <- {describe_key(provider.source)}")
    return 0


def _handle_lookup(args: argparse.Namespace, settings: Settings) -> int:
    with _build_container(args, settings) as container:
        instance = container.lookup_single_sync(args.key)
        print(f"{args.key!r} -> {describe_key(type(instance))}")
    return 0
