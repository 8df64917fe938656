"""
Create the credential tables and provision admin accounts.

There is no admin signup endpoint; admins are added out of band with this
script:

    python -m organiz.database.init_db                      # tables only
    python -m organiz.database.init_db --admin-email a@x.io # tables + admin

The admin password is read from ADMIN_PASSWORD or prompted for, and stored as an Argon2 hash, like every
other role.
"""

import argparse
import os
from getpass import getpass
from typing import List, Optional

from organiz.auth_service import models
from organiz.auth_service.passwords import hash_password
from organiz.auth_service.validation import check_email, check_password, normalize_email
from organiz.database.db_connection import get_db

SCHEMA_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "schema.sql")


def apply_schema() -> None:
    """Run schema.sql against the app's database. Safe to repeat."""
    with open(SCHEMA_PATH, encoding="utf-8") as f:
        ddl = f.read()

    with get_db() as conn:
        with conn.cursor() as cur:
            cur.execute(ddl)
        conn.commit()


def provision_admin(email: str, password: str) -> dict:
    """
    Insert an admin account with a hashed password.

    Raises:
        ValueError: Invalid email or password too short.
        models.EmailAlreadyRegistered: An admin with this email exists.
    """
    email = normalize_email(email)
    error = check_email(email) or check_password(password)
    if error:
        raise ValueError(error)
    return models.create_admin(email, hash_password(password))


def main(argv: Optional[List[str]] = None) -> None:
    # Imported here so the script does not pull the app in at module import
    from organiz.gateway.server import create_app

    parser = argparse.ArgumentParser(description="Create tables and provision admins.")
    parser.add_argument("--admin-email", help="Email of an admin account to create")
    args = parser.parse_args(argv)

    app = create_app()
    with app.app_context():
        apply_schema()
        print("Schema applied.")

        if not args.admin_email:
            return

        password = os.getenv("ADMIN_PASSWORD")
        if not password:
            password = getpass("Admin password: ")
            if password != getpass("Repeat password: "):
                raise SystemExit("Passwords do not match")

        try:
            admin = provision_admin(args.admin_email, password)
        except ValueError as e:
            raise SystemExit(str(e))
        except models.EmailAlreadyRegistered:
            raise SystemExit(f"Admin {args.admin_email} already exists")

        print(f"Admin created: id={admin['id']} email={admin['email']}")


if __name__ == "__main__":
    main()
