#!/usr/bin/env python3
"""
Bootstrap seed: the first administrator account.

User management is admin-only, so a fresh database needs one PUPR_ADMIN
before anyone can log in and create the rest.

Usage:
  ENVIRONMENT=development SEED_ADMIN_PASSWORD=... python migrations/seeds/seed.py
  ENVIRONMENT=production SEED_ADMIN_PASSWORD=... python migrations/seeds/seed.py

Idempotent: an existing username or email is left untouched
(INSERT … ON CONFLICT DO NOTHING).
"""
import logging
import os
import sys
from pathlib import Path

import psycopg2
from dotenv import load_dotenv

from elacak.core.config import get_settings
from elacak.core.security import hash_password

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

_repo_root = Path(__file__).resolve().parent.parent.parent
load_dotenv(dotenv_path=_repo_root / ".env", override=False)

ADMIN_USERNAME = os.environ.get("SEED_ADMIN_USERNAME", "admin")
ADMIN_EMAIL = os.environ.get("SEED_ADMIN_EMAIL", "admin@elacak.local")

INSERT_ADMIN = """
    INSERT INTO users (username, email, password_hash, role, is_active)
    VALUES (%s, %s, %s, 'PUPR_ADMIN', TRUE)
    ON CONFLICT DO NOTHING
"""


def _get_connection() -> psycopg2.extensions.connection:
    settings = get_settings()
    try:
        host, port, dbname, user, password = settings.resolve_db_credentials()
    except RuntimeError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    return psycopg2.connect(
        host=host,
        port=port,
        dbname=dbname,
        user=user,
        password=password,
        sslmode="disable" if settings.is_development else "require",
    )


def seed_admin(password: str) -> None:
    conn = _get_connection()
    conn.autocommit = False
    cur = conn.cursor()

    try:
        cur.execute(INSERT_ADMIN, (ADMIN_USERNAME, ADMIN_EMAIL, hash_password(password)))
        created = cur.rowcount
        conn.commit()
    except psycopg2.Error:
        conn.rollback()
        logger.exception("Seed failed, transaction rolled back.")
        sys.exit(1)
    finally:
        cur.close()
        conn.close()

    if created:
        logger.info("Created administrator %r", ADMIN_USERNAME)
    else:
        logger.info("Administrator %r (or its email) already exists; nothing to do", ADMIN_USERNAME)


if __name__ == "__main__":
    admin_password = os.environ.get("SEED_ADMIN_PASSWORD", "")
    if len(admin_password) < 6:
        logger.error("SEED_ADMIN_PASSWORD must be set (at least 6 characters).")
        sys.exit(1)

    logger.info("Environment: %s", get_settings().environment)
    seed_admin(admin_password)
