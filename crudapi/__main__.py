"""
Command line entrypoint.

    python -m crudapi serve --app memory --port 3333
    python -m crudapi init-db
"""

import argparse
import sys

import uvicorn
from sqlalchemy.exc import SQLAlchemyError

from crudapi.config import load_config
from crudapi.db.sql_client import DatabaseError, SQLClient
from crudapi.db.tables import create_tables
from crudapi.server import APPS
from crudapi.utils.logging_utils import get_logger

logger = get_logger(__name__)


def serve(args) -> int:
    """Run one of the demo apps under uvicorn (handles SIGINT/SIGTERM)."""
    config = load_config()
    host = args.host or config.host
    port = args.port or config.port

    logger.info(f"Starting {args.app} app on http://{host}:{port} (docs at /docs)")
    uvicorn.run(APPS[args.app], factory=True, host=host, port=port, reload=args.reload)
    return 0


def init_db(args) -> int:
    """Create the users and tasks tables on the configured database."""
    config = load_config()
    client = SQLClient(args.url or config.database.sqlalchemy_url)
    try:
        create_tables(client.connection)
    except (DatabaseError, SQLAlchemyError) as e:
        logger.error(f"Could not initialize database: {e}")
        return 1
    finally:
        client.close()

    logger.info("Tables users and tasks are ready")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="crudapi", description="Demo CRUD APIs")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run a demo app")
    serve_parser.add_argument("--app", choices=sorted(APPS), default="memory")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)
    serve_parser.add_argument("--reload", action="store_true")
    serve_parser.set_defaults(func=serve)

    init_parser = subparsers.add_parser("init-db", help="Create the SQL tables")
    init_parser.add_argument("--url", default=None, help="Override the database URL")
    init_parser.set_defaults(func=init_db)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
