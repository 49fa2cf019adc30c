from __future__ import annotations

import argparse
from collections.abc import Sequence

from taskapi.db.bootstrap import initialize_database
from taskapi.db.migrations import current_revision, upgrade_to_head


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskapi-db",
        description="Task API database management commands.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help="Create the database directory and apply migrations.",
    )
    init_parser.add_argument("--database-url", default=None)

    migrate_parser = subparsers.add_parser(
        "migrate",
        help="Apply database migrations to latest revision.",
    )
    migrate_parser.add_argument("--database-url", default=None)

    current_parser = subparsers.add_parser(
        "current",
        help="Show the revision the database is currently at.",
    )
    current_parser.add_argument("--database-url", default=None)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "init":
        initialize_database(database_url=args.database_url)
        print("Database initialized.")
        return 0

    if args.command == "migrate":
        upgrade_to_head(args.database_url)
        print("Database migrations applied.")
        return 0

    if args.command == "current":
        revision = current_revision(args.database_url)
        print(revision or "No migrations applied.")
        return 0

    parser.error(f"Unsupported command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
