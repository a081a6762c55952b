"""Command-line interface for the furniture shop service."""

from __future__ import annotations
import argparse
import logging
import sys
from dataclasses import replace
from typing import Sequence

from furnishop.config import ServiceConfig, load_config
from furnishop.database import Database
from furnishop.errors import MigrationError, StorageConnectionError, StoreError
from furnishop.migrations import MigrationResult, run_migrations
from furnishop.users import UserRepository

logger = logging.getLogger("furnishop.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Furniture shop service utilities")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the YAML configuration file (default: FURNISHOP_CONFIG or config/furnishop.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Run migrations and start the HTTP service")
    serve_parser.add_argument("--host", default=None, help="Bind address for the API")
    serve_parser.add_argument("--port", type=int, default=None, help="Port for the HTTP API (default: 8080)")

    subparsers.add_parser("migrate", help="Apply the schema migrations and exit")
    subparsers.add_parser("list-users", help="Print every stored user")

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "migrate", "list-users"}

    # Allow `main.py --port 9000` without naming the serve subcommand.
    command_index = 0
    while command_index < len(args_list):
        token = args_list[command_index]
        if token == "--config":
            command_index += 2
        elif token.startswith("--config="):
            command_index += 1
        else:
            break
    command_index = min(command_index, len(args_list))
    remainder = args_list[command_index:]
    if not remainder:
        args_list = [*args_list, "serve"]
    elif remainder[0] not in known_commands and remainder[0] not in ("-h", "--help"):
        args_list = [*args_list[:command_index], "serve", *remainder]

    return parser.parse_args(args_list)


def _resolve_config(args: argparse.Namespace) -> ServiceConfig:
    try:
        config = load_config(args.config)
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc

    host = getattr(args, "host", None)
    port = getattr(args, "port", None)
    if host:
        config = replace(config, host=host)
    if port:
        config = replace(config, port=port)
    return config


def _connect(config: ServiceConfig) -> Database:
    try:
        return Database.connect(
            config.mongo_uri,
            config.database_name,
            timeout=config.connect_timeout,
        )
    except StorageConnectionError as exc:
        logger.error("%s", exc)
        raise SystemExit(f"Error connecting to MongoDB: {exc}") from exc


def _migrate(database: Database, config: ServiceConfig) -> list[MigrationResult]:
    try:
        return run_migrations(database.collection(config.collection_name))
    except MigrationError as exc:
        logger.error("%s", exc)
        raise SystemExit(str(exc)) from exc


def _serve(*, database: Database, config: ServiceConfig) -> None:
    from furnishop.service import create_app
    import uvicorn

    logger.info("Starting furniture shop API on http://%s:%s", config.host, config.port)

    app = create_app(database=database, config=config)
    uvicorn.run(app, host=config.host, port=config.port, log_level="info")


def _list_users(database: Database, config: ServiceConfig) -> None:
    try:
        users = UserRepository(database.collection(config.collection_name)).list_all()
    except StoreError as exc:
        print(f"Failed to list users: {exc}")
        return
    if not users:
        print("No users are currently stored.")
        return

    print(f"{len(users)} user(s) found:")
    print(f"{'ID':<24}  {'Name':<24}  {'Email':<32}  {'Age':>3}  Created")
    print("-" * 110)
    for user in users:
        created = user.created_at.strftime("%Y-%m-%d %H:%M:%S %Z")
        print(f"{str(user.id):<24}  {user.name:<24}  {user.email:<32}  {user.age:>3}  {created}")


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)
    config = _resolve_config(args)
    database = _connect(config)

    try:
        if args.command == "serve":
            _migrate(database, config)
            _serve(database=database, config=config)
        elif args.command == "migrate":
            for result in _migrate(database, config):
                print(f"{result.name}: {result.detail}")
            print("Migrations complete.")
        elif args.command == "list-users":
            _list_users(database, config)
    finally:
        database.close()


if __name__ == "__main__":
    main()
