import argparse
import logging
import os
import sys
import time
from pathlib import Path

from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.clock import SystemClock
from src.adapters.randomness import SystemRandom
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLiteUnitOfWork
from src.app_shell.seed import seed
from src.components.auth import CreateStaffInput, run_create_staff
from src.components.teams import CreateTeamInput, run_create_team
from src.components.timers import run_sync_positions, run_sync_timers
from src.rules.loader import load_rules
from src.rules.models import Rules

logger = logging.getLogger("cli")

DATA_DIR = os.environ.get("SNL_DATA_DIR", "./data")
RULES_PATH = os.environ.get("SNL_RULES_PATH", "rules.yaml")
MIGRATIONS_DIR = "migrations"


def db_path() -> str:
    Path(DATA_DIR).mkdir(parents=True, exist_ok=True)
    return str(Path(DATA_DIR) / "snl.db")


def get_rules() -> Rules:
    if not Path(RULES_PATH).exists():
        logger.error("Rules file %s not found.", RULES_PATH)
        sys.exit(1)
    return load_rules(Path(RULES_PATH))


def handle_migrate(args: argparse.Namespace) -> None:
    applied = SQLiteMigrator(db_path(), MIGRATIONS_DIR).run_migrations()
    print(f"Applied {len(applied)} migration(s).")


def handle_seed(args: argparse.Namespace) -> None:
    handle_migrate(args)
    seed(db_path(), get_rules())
    print("Seed complete.")


def handle_create_staff(args: argparse.Namespace, role: str) -> None:
    with SQLiteUnitOfWork(db_path()) as store:
        result = run_create_staff(
            CreateStaffInput(username=args.username, password=args.password, role=role),
            store,
            JWTAuthAdapter(),
            SystemClock(),
        )
    if not result.success:
        logger.error("Could not create %s: %s", role, result.error)
        sys.exit(1)
    print(f"Created {role} '{args.username}'.")


def handle_create_team(args: argparse.Namespace) -> None:
    rules = get_rules()
    with SQLiteUnitOfWork(db_path()) as store:
        result = run_create_team(
            CreateTeamInput(team_name=args.name, members=args.member, password=args.password),
            store,
            JWTAuthAdapter(),
            SystemRandom(),
            SystemClock(),
            rules.game,
        )
    if not result.success or result.team is None:
        logger.error("Could not create team: %s", result.error)
        sys.exit(1)
    print(f"Team '{result.team.team_name}' created.")
    print(f"Login: {result.team.team_code}")
    print(f"Password: {result.password}")


def sync_once(path: str, rules: Rules) -> None:
    clock = SystemClock()
    with SQLiteUnitOfWork(path) as store:
        timers = run_sync_timers(store, clock, rules.game)
        positions = run_sync_positions(store, clock)
    logger.info(
        "Sync: %d timer(s) updated, %d completed, %d position(s) aligned",
        timers.updated,
        timers.completed,
        positions.updated,
    )


def handle_sync(args: argparse.Namespace) -> None:
    rules = get_rules()
    interval = args.interval or rules.sync.interval_seconds
    run_for = args.run_seconds or rules.sync.run_seconds
    path = db_path()

    deadline = time.monotonic() + run_for
    while True:
        sync_once(path, rules)
        if args.once or time.monotonic() + interval > deadline:
            break
        time.sleep(interval)


def handle_serve(args: argparse.Namespace) -> None:
    import uvicorn

    uvicorn.run("src.api.main:app", host=args.host, port=args.port, reload=args.reload)


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())

    parser = argparse.ArgumentParser(description="Snake & Ladders event CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Apply pending database migrations")
    subparsers.add_parser("seed", help="Seed rooms, maps and the optional superadmin")

    for name in ("create-admin", "create-superadmin"):
        staff_parser = subparsers.add_parser(name, help=f"Create a {name[7:]} account")
        staff_parser.add_argument("username")
        staff_parser.add_argument("password")

    team_parser = subparsers.add_parser("create-team", help="Create a team and its login")
    team_parser.add_argument("name", help="Team name")
    team_parser.add_argument("--member", action="append", default=[], help="Member name")
    team_parser.add_argument("--password", help="Login password (generated when omitted)")

    sync_parser = subparsers.add_parser("sync", help="Run the timer/position sync loop")
    sync_parser.add_argument("--interval", type=int, help="Seconds between passes")
    sync_parser.add_argument("--run-seconds", type=int, help="Total seconds to keep looping")
    sync_parser.add_argument("--once", action="store_true", help="Run a single pass")

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true")

    args = parser.parse_args(argv)

    if args.command == "migrate":
        handle_migrate(args)
    elif args.command == "seed":
        handle_seed(args)
    elif args.command == "create-admin":
        handle_create_staff(args, "admin")
    elif args.command == "create-superadmin":
        handle_create_staff(args, "superadmin")
    elif args.command == "create-team":
        handle_create_team(args)
    elif args.command == "sync":
        handle_sync(args)
    elif args.command == "serve":
        handle_serve(args)


if __name__ == "__main__":
    main()
