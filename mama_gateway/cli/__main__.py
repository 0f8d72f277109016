"""
mama-gateway CLI.

Commands:
    mama-gateway hook <event>   Handle one lifecycle event (JSON on stdin)
    mama-gateway mcp            Start the MCP server (stdio transport)
"""

import argparse

from mama_gateway.cli.commands.hook import HOOK_EVENTS, cmd_hook
from mama_gateway.config import get_config
from mama_gateway.logging_config import setup_mama_logging


def cmd_mcp(args) -> None:
    from mama_gateway.mcp.server import main as mcp_main

    config = get_config()
    if args.db_path:
        config.db_path = args.db_path
    mcp_main(config)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mama-gateway",
        description="Session memory orchestration for agent hosts",
    )
    parser.add_argument("--db-path", dest="db_path", default=None, help="Memory database path")

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_hook = subparsers.add_parser("hook", help="Handle a lifecycle event")
    p_hook.add_argument("hook_event", nargs="?", choices=HOOK_EVENTS, help="Lifecycle event")

    subparsers.add_parser("mcp", help="Start MCP server (stdio transport)")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_mama_logging(get_config().log_level)

    if args.command == "hook":
        cmd_hook(args)
    elif args.command == "mcp":
        cmd_mcp(args)


if __name__ == "__main__":
    main()
