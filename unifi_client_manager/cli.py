"""
Command line entry point: run the dashboard server or act on clients directly.
"""

import argparse
import sys
from typing import List, Optional

from .config import load_settings
from .exceptions import UnifiManagerError
from .export import export_csv, export_json
from .logging import configure_logging, get_logger
from .service import filter_clients
from .web import build_service, create_app

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="unifi-client-manager",
        description="View, tag, hide and block clients of a UniFi controller.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the dashboard API server")
    serve.add_argument("--host", help="Interface to bind (default: HOST or 127.0.0.1)")
    serve.add_argument("--port", type=int, help="Port to listen on (default: PORT or 5000)")
    serve.add_argument("--debug", action="store_true", help="Enable Flask debug mode")

    list_cmd = subparsers.add_parser("list", help="List merged clients")
    list_cmd.add_argument("--view", choices=["all", "hidden", "blocked"], default="all")
    list_cmd.add_argument("--tag", help="Only clients carrying this tag")
    list_cmd.add_argument("--search", help="Search name, hostname, IP and MAC")

    for name in ("block", "unblock"):
        cmd = subparsers.add_parser(name, help=f"{name.capitalize()} a client by MAC")
        cmd.add_argument("mac")

    for name in ("block-tag", "unblock-tag"):
        cmd = subparsers.add_parser(
            name, help=f"{name.split('-')[0].capitalize()} every client carrying a tag")
        cmd.add_argument("tag")

    export = subparsers.add_parser("export", help="Export merged clients to a file")
    export.add_argument("path")
    export.add_argument("--format", choices=["csv", "json"], default="csv")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
        configure_logging(settings.log_level)

        if args.command == "serve":
            app = create_app(settings)
            app.run(
                host=args.host or settings.host,
                port=args.port or settings.port,
                debug=args.debug,
            )
            return 0

        service = build_service(settings)

        if args.command == "list":
            clients = filter_clients(
                service.merged_clients(), view=args.view, tag=args.tag, query=args.search)
            for client in clients:
                flags = "".join([
                    "B" if client.blocked else "-",
                    "H" if client.hidden else "-",
                    "W" if client.is_wired else "-",
                ])
                print(f"{client.mac}  {flags}  {client.ip or '':15}  "
                      f"{client.name or client.hostname}  [{', '.join(client.tags)}]")
        elif args.command in ("block", "unblock"):
            service.set_blocked(args.mac, args.command == "block")
            print(f"Client {args.mac} {args.command}ed successfully")
        elif args.command in ("block-tag", "unblock-tag"):
            changed = service.set_blocked_by_tag(args.tag, args.command == "block-tag")
            print(f"{len(changed)} clients {args.command.split('-')[0]}ed")
        elif args.command == "export":
            clients = service.merged_clients()
            if args.format == "json":
                export_json(clients, args.path)
            else:
                export_csv(clients, args.path)
    except UnifiManagerError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0
