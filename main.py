"""
Roster Application Entry Point.

Bootstraps the dependency graph via constructor injection, initialises the
SQLite schema, optionally seeds sample data, then runs one request through
the record-management handler.  Every subsystem is wired here; no
module-level globals.

A request is given as ``key=value`` arguments, mirroring the page's form
and query fields::

    python main.py                                   # list records
    python main.py action=create nom=Dupont prenom=Jean \\
        email=jean.dupont@email.com telephone=0123456789
    python main.py action=delete id=3
    python main.py edit=2                            # include edit target

The resulting page state is written to stdout as JSON; log lines go to
stderr (and to ``LOG_FILE`` when set), so stdout can be piped to a parser.
"""

from __future__ import annotations

import sys
from pathlib import Path

from roster.config import get_config
from roster.database import DatabaseManager
from roster.errors import StorageConnectionError
from roster.logger import StructuredLogger
from roster.schema import initialize_schema
from roster.seed import seed_sample_users
from roster.services import create_services


def parse_request(argv: list[str]) -> dict[str, str]:
    """Turn ``key=value`` arguments into a form mapping; other arguments are ignored."""
    form: dict[str, str] = {}
    for arg in argv:
        key, sep, value = arg.partition("=")
        if sep and key:
            form[key.strip()] = value
    return form


def main(argv: list[str]) -> int:
    """Application entry point: wire dependencies and serve one request."""
    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables) and logging
    # ------------------------------------------------------------------
    config = get_config()
    logger = StructuredLogger("roster.main", config)
    logger.info("Starting Roster...")

    # ------------------------------------------------------------------
    # 2. Database Manager
    # ------------------------------------------------------------------
    db = DatabaseManager(
        sqlite_path=Path(config.DATABASE_PATH),
        logger=StructuredLogger("roster.database", config),
    )
    try:
        conn = db.connect()
    except StorageConnectionError as exc:
        logger.critical("Cannot start without storage: %s", exc.message)
        return 1

    try:
        # --------------------------------------------------------------
        # 3. Schema (idempotent) and optional sample data
        # --------------------------------------------------------------
        initialize_schema(conn, StructuredLogger("roster.schema", config))

        services = create_services(db, StructuredLogger("roster.services", config))
        if config.SEED_SAMPLE_DATA:
            seed_sample_users(
                services["user_repository"], StructuredLogger("roster.seed", config),
            )

        # --------------------------------------------------------------
        # 4. Handle the request, then render the page state
        # --------------------------------------------------------------
        admin = services["user_admin_service"]
        form = parse_request(argv)

        outcome = admin.handle(form)
        if outcome.data is not None:
            logger.info(
                "%s: %s", outcome.data.kind, outcome.data.text,
                extra={"error_code": outcome.error_code or ""},
            )

        page = admin.build_page(edit_id=form.get("edit"))
        if not page.success or page.data is None:
            logger.error("Could not build page: %s", page.error)
            return 1

        sys.stdout.write(page.data.model_dump_json(indent=2) + "\n")
        return 0 if outcome.success else 2
    finally:
        db.close()
        logger.info("Roster shut down.")


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
