"""Operations entrypoint for the hackbank engine."""

from __future__ import annotations

import argparse
import asyncio
import logging

from hackbank.config import get_settings
from hackbank.database import check_database_health, get_session_factory, init_db, session_scope
from hackbank.factory import create_bonus_service, create_player_service, get_directory_cache
from hackbank.models import utc_now
from hackbank.scheduler import BonusScheduler
from hackbank.services.bonus_service import cycle_for

logger = logging.getLogger("hackbank")


def _run_bonus_loop() -> None:
    settings = get_settings()
    scheduler = BonusScheduler(
        get_session_factory(),
        interval_seconds=settings.BONUS_INTERVAL_SECONDS,
        rules=settings.economy_rules(),
        cache=get_directory_cache(),
    )

    async def runner() -> None:
        scheduler.start()
        try:
            await asyncio.Event().wait()
        finally:
            await scheduler.stop()

    logger.info("Granting bonus every %s seconds", scheduler.interval_seconds)
    try:
        asyncio.run(runner())
    except KeyboardInterrupt:
        logger.info("Bonus scheduler stopped")


def main() -> None:
    parser = argparse.ArgumentParser(description="Manage the hackbank economy database")
    subcommands = parser.add_subparsers(dest="command", required=True)

    subcommands.add_parser("init-db", help="Create all tables without migrations")
    subcommands.add_parser("health", help="Check that the database is reachable")

    seed = subcommands.add_parser("seed-root", help="Create the root administrator if empty")
    seed.add_argument("--username", default="root")
    seed.add_argument("--email", default=None)
    seed.add_argument("--password-hash", required=True, help="Already hashed password")

    subcommands.add_parser("grant-bonus", help="Grant the bonus for the current cycle once")
    subcommands.add_parser("run-bonus", help="Run the periodic bonus scheduler")

    args = parser.parse_args()
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "init-db":
        init_db()
        logger.info("Database initialised at %s", settings.DATABASE_URL)
    elif args.command == "health":
        healthy = check_database_health()
        logger.info("Database healthy: %s", healthy)
        raise SystemExit(0 if healthy else 1)
    elif args.command == "seed-root":
        with session_scope() as session:
            root = create_player_service(session).initialize_root_player(
                args.username, args.email, args.password_hash
            )
        if root is None:
            logger.info("Players already exist; root administrator not created")
    elif args.command == "grant-bonus":
        cycle = cycle_for(utc_now(), settings.BONUS_INTERVAL_SECONDS)
        with session_scope() as session:
            create_bonus_service(session).grant_bonus(cycle)
    elif args.command == "run-bonus":
        _run_bonus_loop()


if __name__ == "__main__":
    main()
