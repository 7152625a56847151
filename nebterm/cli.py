"""
Headless command-line host for the navigation engine.

Usage:
    nebterm resources
    nebterm list one-vms --filter web
    nebterm list one-vm-disks --parent one-vms:42
    nebterm describe one-vms 42
    nebterm action one-vms terminate 42 --yes
    nebterm version
    nebterm set-endpoint http://opennebula:2633/RPC2

Credentials are read from ONE_AUTH or ~/.one/one_auth; the endpoint from
--endpoint, ONE_XMLRPC, the saved user config, then the local default.
"""

import argparse
import asyncio
import inspect
import json
import logging
import sys
from typing import Any, Optional

from nebterm import __version__
from nebterm.client import Credentials, OneClient
from nebterm.config import UserConfig, config_dir, extra_definitions_dir, log_level
from nebterm.dispatch import ServiceDispatcher
from nebterm.documents.extractor import extract
from nebterm.errors import NebtermError, format_error
from nebterm.navigation import NavigationEngine, NavigationFrame
from nebterm.resources import ResourceRegistry, format_value
from nebterm.resources.registry import DEFINITIONS_DIR
from nebterm.resources.schemas import ResourceDefinition

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def log_destination(args) -> Optional[str]:
    """Log file path from --log-path or --log-file, or None for stderr."""
    if args.log_path:
        return args.log_path
    if args.log_file:
        directory = config_dir()
        directory.mkdir(parents=True, exist_ok=True)
        return str(directory / "nebterm.log")
    return None


def configure_logging(level: Optional[str], log_file: Optional[str]) -> None:
    logging.basicConfig(
        level=(level or log_level()).upper(),
        format=LOG_FORMAT,
        filename=log_file,
    )


def build_registry() -> ResourceRegistry:
    dirs = [DEFINITIONS_DIR]
    extra = extra_definitions_dir()
    if extra is not None:
        dirs.append(extra)
    return ResourceRegistry(definitions_dirs=dirs)


def build_client(args) -> OneClient:
    credentials = Credentials.from_environment(
        endpoint=args.endpoint,
        config=UserConfig.load(),
    )
    logger.info(f"Connecting to {credentials.endpoint} as {credentials.username}")
    return OneClient(credentials)


def build_engine(args, registry: ResourceRegistry) -> tuple[NavigationEngine, OneClient]:
    client = build_client(args)
    engine = NavigationEngine(
        registry,
        ServiceDispatcher(client),
        initial_resource=getattr(args, "resource", "one-vms"),
        readonly=args.readonly,
    )
    return engine, client


# =============================================================================
# Rendering
# =============================================================================

def _cell(text: str, width: int) -> str:
    if len(text) > width:
        text = text[: max(width - 1, 0)] + "~"
    return text.ljust(width)


def render_table(definition: ResourceDefinition, items: list[Any]) -> str:
    lines = [" ".join(_cell(c.header, c.width) for c in definition.columns).rstrip()]
    for item in items:
        cells = [
            _cell(format_value(c.format, extract(item, c.path)), c.width)
            for c in definition.columns
        ]
        lines.append(" ".join(cells).rstrip())
    return "\n".join(lines)


def _nested(path: str, value: str) -> dict:
    """Build the smallest document that has `value` at the dotted `path`."""
    doc: Any = value
    for part in reversed([p.split("[", 1)[0] for p in path.split(".") if p]):
        doc = {part: doc}
    return doc


def _select_by_id(engine: NavigationEngine, subject_id: str) -> bool:
    definition = engine.definition
    for index, item in enumerate(engine.visible_items):
        if extract(item, definition.id_field) == subject_id:
            engine.selected = index
            return True
    return False


def _fail(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


# =============================================================================
# Commands
# =============================================================================

def cmd_resources(args, registry: ResourceRegistry) -> int:
    for key in registry.all_keys():
        definition = registry.get(key)
        print(f"{key:<24} {definition.display_name}")
    return 0


async def cmd_list(args, registry: ResourceRegistry) -> int:
    definition = registry.get_validated(args.resource)
    engine, client = build_engine(args, registry)
    try:
        if args.parent:
            parent_id, sep, subject_id = args.parent.partition(":")
            link = registry.sub_resource_link(parent_id, args.resource)
            if not sep or link is None:
                return _fail(f"{args.resource} is not a sub-resource of {parent_id}")
            engine.frames.append(
                NavigationFrame(
                    resource_id=parent_id,
                    item=_nested(link.parent_id_field, subject_id),
                    label=subject_id,
                )
            )

        if not await engine.fetch_page():
            return _fail(engine.error_message)
        if args.filter:
            engine.set_filter(args.filter)
    finally:
        await client.close()

    print(" > ".join(engine.breadcrumb()))
    print(render_table(definition, engine.visible_items))
    return 0


async def cmd_describe(args, registry: ResourceRegistry) -> int:
    registry.get_validated(args.resource)
    engine, client = build_engine(args, registry)
    try:
        if not await engine.fetch_page():
            return _fail(engine.error_message)
        if not _select_by_id(engine, args.id):
            return _fail(f"No {args.resource} with id {args.id}")
        document = await engine.describe_selected()
    finally:
        await client.close()

    if document is None:
        return _fail(engine.error_message or "Nothing to describe")
    print(json.dumps(document, indent=2))
    return 0


async def cmd_action(args, registry: ResourceRegistry) -> int:
    registry.get_validated(args.resource)
    engine, client = build_engine(args, registry)
    try:
        if not await engine.fetch_page():
            return _fail(engine.error_message)
        if not _select_by_id(engine, args.id):
            return _fail(f"No {args.resource} with id {args.id}")

        pending = await engine.trigger_action(args.action)
        if engine.warning_message:
            print(f"Warning: {engine.warning_message}", file=sys.stderr)
            return 1
        if pending is not None:
            if args.yes:
                pending.selected_yes = True
            else:
                hint = "[Y/n]" if pending.default_yes else "[y/N]"
                answer = input(f"{pending.message} {hint} ").strip().lower()
                if answer:
                    pending.selected_yes = answer in ("y", "yes")
            if not pending.selected_yes:
                engine.cancel()
                print("Cancelled")
                return 0
            await engine.confirm()
    finally:
        await client.close()

    if engine.error_message:
        return _fail(engine.error_message)
    print(f"{args.action} {args.resource} {args.id}: done")
    return 0


async def cmd_version(args, registry: ResourceRegistry) -> int:
    client = build_client(args)
    try:
        version = await ServiceDispatcher(client).invoke("system", "version")
    finally:
        await client.close()
    print(f"nebterm {__version__}")
    print(f"OpenNebula {version} at {client.endpoint}")
    return 0


def cmd_set_endpoint(args, registry: ResourceRegistry) -> int:
    config = UserConfig.load()
    config.endpoint = args.url
    config.save()
    print(f"Saved endpoint {args.url} to {UserConfig.default_path()}")
    return 0


COMMANDS = {
    "resources": cmd_resources,
    "list": cmd_list,
    "describe": cmd_describe,
    "action": cmd_action,
    "version": cmd_version,
    "set-endpoint": cmd_set_endpoint,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nebterm",
        description="Browse and manage OpenNebula resources",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--endpoint",
        help="XML-RPC endpoint (default: ONE_XMLRPC or saved config)",
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (default: NEBTERM_LOG_LEVEL or WARNING)",
    )
    parser.add_argument(
        "--log-file",
        action="store_true",
        help="Write logs to nebterm.log in the config directory instead of stderr",
    )
    parser.add_argument(
        "--log-path",
        metavar="PATH",
        help="Write logs to PATH instead of stderr",
    )
    parser.add_argument(
        "--readonly",
        action="store_true",
        help="Disable every action except reads",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("resources", help="List resource ids")

    p = sub.add_parser("list", help="List items of a resource")
    p.add_argument("resource", help="Resource id, e.g. one-vms")
    p.add_argument("--filter", help="Case-insensitive name/id filter")
    p.add_argument("--parent", help="Parent scope as RESOURCE:ID, e.g. one-vms:42")

    p = sub.add_parser("describe", help="Show the full document of one item")
    p.add_argument("resource")
    p.add_argument("id")

    p = sub.add_parser("action", help="Run an action on one item")
    p.add_argument("resource")
    p.add_argument("action", help="Action key, e.g. terminate")
    p.add_argument("id")
    p.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    sub.add_parser("version", help="Show client and server versions")

    p = sub.add_parser("set-endpoint", help="Save the default endpoint")
    p.add_argument("url")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, log_destination(args))

    registry = build_registry()
    handler = COMMANDS[args.command]
    try:
        if inspect.iscoroutinefunction(handler):
            return asyncio.run(handler(args, registry))
        return handler(args, registry)
    except NebtermError as e:
        logger.error(f"{args.command} failed: {e}")
        return _fail(format_error(e))


if __name__ == "__main__":
    sys.exit(main())
