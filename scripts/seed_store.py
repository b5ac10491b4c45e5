"""Create the MVPfin database and an administrator account.

The default entry markers (Pix, Cartão, Dízimo, Oferta) are seeded when the
marker table is empty. Run from the repository root:

    python -m scripts.seed_store --username admin --name "Administrador"

The password is read from ``--password`` or prompted for.
"""

from __future__ import annotations

import argparse
import getpass
import logging
from pathlib import Path

from mvpfin import settings
from mvpfin.logging_config import setup_logging
from mvpfin.store import SQLiteRecordStore, StoreError

logger = logging.getLogger("mvpfin.seed")


def _parse_args(config: settings.AppConfig) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the MVPfin record store.")
    parser.add_argument("--db", type=Path, default=config.db_path, help="SQLite database path")
    parser.add_argument("--username", default="admin")
    parser.add_argument("--name", default="Administrador")
    parser.add_argument("--password", default=None)
    parser.add_argument("--role", choices=("admin", "user"), default="admin")
    return parser.parse_args()


def main() -> int:
    config = settings.load_config()
    args = _parse_args(config)
    setup_logging("mvpfin-seed", config.log_dir, config.log_level)

    record_store = SQLiteRecordStore(args.db)
    if any(user.username == args.username for user in record_store.list_users()):
        logger.info("User %r already exists in %s; nothing to do", args.username, args.db)
        return 0

    password = args.password or getpass.getpass(f"Senha para {args.username}: ")
    try:
        record_store.insert_user(args.name, args.username, password, role=args.role)
    except StoreError:
        logger.exception("Could not create user %r", args.username)
        return 1

    logger.info("Created %s user %r in %s", args.role, args.username, args.db)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
