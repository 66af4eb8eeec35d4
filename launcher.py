# launcher.py
"""
Command line entry point.

    python launcher.py init-db
    python launcher.py seed [--with-samples]
    python launcher.py serve [--host 0.0.0.0] [--port 8000] [--workers 1]
"""
import abc
import argparse
import logging
import os
import sys

from dotenv import load_dotenv

# --- Constant ---
ENV_FILE = ".env"

load_dotenv(ENV_FILE)

# --- Logging configuration ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - [Launcher] - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("launcher")


class BaseCommand(abc.ABC):
    """Base class for launcher commands."""

    name = "base"
    help = "Base command"

    def __init__(self, parser: argparse.ArgumentParser):
        self.parser = parser
        self.add_arguments()

    def add_arguments(self):
        """Override to add arguments to the subparser."""
        pass

    @abc.abstractmethod
    def run(self, args: argparse.Namespace):
        pass


class InitDbCommand(BaseCommand):
    name = "init-db"
    help = "Create every table (idempotent)."

    def run(self, args):
        from app.db.engine_sync import create_sync_db_and_tables, DATABASE_URL_SYNC

        create_sync_db_and_tables()
        logger.info(f"Schema ready on {DATABASE_URL_SYNC}")


class SeedCommand(BaseCommand):
    name = "seed"
    help = "Create tables and seed roles, permissions and the admin account."

    def add_arguments(self):
        self.parser.add_argument(
            "--with-samples",
            action="store_true",
            help="Also create demo agents, packages, a customer and a ticket",
        )

    def run(self, args):
        from app.core.bootstrap import bootstrap_system
        from app.core.config import settings

        bootstrap_system(with_samples=args.with_samples)
        logger.info(f"Admin login: {settings.admin_username}")
        if args.with_samples:
            logger.info("Sample agents: cs_agent / Cs123!, noc_agent / Noc123!")


class ServeCommand(BaseCommand):
    name = "serve"
    help = "Run the API with uvicorn."

    def add_arguments(self):
        self.parser.add_argument("--host", default=os.getenv("UVICORN_HOST", "0.0.0.0"))
        self.parser.add_argument("--port", type=int, default=int(os.getenv("UVICORN_PORT", "8000")))
        self.parser.add_argument("--workers", type=int, default=int(os.getenv("UVICORN_WORKERS", "1")))
        self.parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    def run(self, args):
        import uvicorn

        logger.info(f"Starting API on http://{args.host}:{args.port}")
        uvicorn.run(
            "app.main:app",
            host=args.host,
            port=args.port,
            workers=None if args.reload else args.workers,
            reload=args.reload,
            proxy_headers=True,
            forwarded_allow_ips="*",
            server_header=False,
        )


COMMANDS = (InitDbCommand, SeedCommand, ServeCommand)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="E-Ticketing Portal launcher")
    subparsers = parser.add_subparsers(dest="command")

    commands = {}
    for command_cls in COMMANDS:
        subparser = subparsers.add_parser(command_cls.name, help=command_cls.help)
        commands[command_cls.name] = command_cls(subparser)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    try:
        commands[args.command].run(args)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
