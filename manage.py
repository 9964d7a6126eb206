from __future__ import annotations

import argparse
from pathlib import Path

from alembic import command
from alembic.config import Config


def get_alembic_config() -> Config:
    here = Path(__file__).resolve().parent
    cfg = Config(str(here / "alembic.ini"))
    cfg.set_main_option("script_location", str(here / "alembic"))
    return cfg


def cmd_upgrade(revision: str = "head") -> None:
    command.upgrade(get_alembic_config(), revision)


def cmd_downgrade(revision: str) -> None:
    command.downgrade(get_alembic_config(), revision)


def cmd_sweep() -> None:
    from app.core.channel.services import run_membership_sweep
    from app.core.channel.telegram import TelegramBotClient
    from app.core.config import settings
    from app.database.session import create_db_engine, create_session_factory

    db = create_session_factory(create_db_engine(settings.database_url))()
    try:
        result = run_membership_sweep(db, TelegramBotClient.from_settings(settings))
    finally:
        db.close()
    print(result.as_dict())


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Bookflix management commands"
    )
    subparsers = parser.add_subparsers(dest="command")

    upgrade_parser = subparsers.add_parser(
        "upgrade", help="Apply migrations (default: head)"
    )
    upgrade_parser.add_argument("revision", nargs="?", default="head")

    downgrade_parser = subparsers.add_parser(
        "downgrade", help="Downgrade to a specific revision"
    )
    downgrade_parser.add_argument("revision", help="Revision id or -1, -2, ...")

    revision_parser = subparsers.add_parser(
        "revision", help="Create new alembic revision"
    )
    revision_parser.add_argument(
        "-m",
        "--message",
        required=True,
        help="Revision message",
    )
    revision_parser.add_argument(
        "--autogenerate",
        action="store_true",
        help="Populate revision with schema diff from models",
    )

    subparsers.add_parser(
        "sweep", help="Run one channel membership sweep now"
    )

    args = parser.parse_args()

    if args.command is None:
        cmd_upgrade()
    elif args.command == "upgrade":
        cmd_upgrade(args.revision)
    elif args.command == "downgrade":
        cmd_downgrade(args.revision)
    elif args.command == "revision":
        command.revision(
            get_alembic_config(),
            message=args.message,
            autogenerate=args.autogenerate,
        )
    elif args.command == "sweep":
        cmd_sweep()
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
