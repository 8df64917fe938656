"""
Credential store access for the authentication service.

Each role lives in its own table (participants, organizers, admins) keyed
by a unique email. The UNIQUE constraint is what rejects duplicate
signups: the insert functions turn the database's unique violation into
EmailAlreadyRegistered.

Rows are returned as plain dicts.
"""

from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import psycopg2.errors

from organiz.database.db_connection import get_db

# --- ROLES ---
PARTICIPANT = "participant"
ORGANIZER = "organizer"
ADMIN = "admin"

ROLE_TABLES = {
    PARTICIPANT: "participants",
    ORGANIZER: "organizers",
    ADMIN: "admins",
}

TOKEN_LIFETIMES = {
    PARTICIPANT: timedelta(hours=9),
    ORGANIZER: timedelta(hours=1),
    ADMIN: timedelta(hours=6),
}

# --- ORGANIZER STATUS ---
STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_SUSPENDED = "suspended"
VALID_STATUSES = [STATUS_PENDING, STATUS_APPROVED, STATUS_SUSPENDED]


class EmailAlreadyRegistered(Exception):
    """Raised when an insert hits the email uniqueness constraint."""


def find_account(role: str, email: str) -> Optional[Dict[str, Any]]:
    """
    Look up an account by email in the role's table.

    Args:
        role (str): participant, organizer or admin.
        email (str): Normalised email address.

    Returns:
        dict: The row, or None if no account uses this email.
    """
    table = ROLE_TABLES[role]
    # Table name comes from ROLE_TABLES, never from user input
    sql = f"SELECT * FROM {table} WHERE email = %s;"

    with get_db() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, (email,))
            row = cur.fetchone()

    return dict(row) if row else None


def _insert(sql: str, params: tuple, email: str) -> Dict[str, Any]:
    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                row = cur.fetchone()
            conn.commit()
    except psycopg2.errors.UniqueViolation as e:
        raise EmailAlreadyRegistered(email) from e
    return dict(row)


def create_participant(
    full_name: str,
    email: str,
    password_hash: str,
    phone: str,
    birth_date: date,
    accepts_terms: bool,
) -> Dict[str, Any]:
    sql = """
        INSERT INTO participants (full_name, email, password_hash, phone, birth_date, accepts_terms)
        VALUES (%s, %s, %s, %s, %s, %s)
        RETURNING id, email;
    """
    return _insert(sql, (full_name, email, password_hash, phone, birth_date, accepts_terms), email)


def create_organizer(
    full_name: str,
    email: str,
    password_hash: str,
    phone: str,
    id_number: str,
    id_document_path: str,
    portfolio_link: Optional[str],
) -> Dict[str, Any]:
    """
    Insert a new organizer. Organizers always start out pending and cannot
    log in until an admin approves them.
    """
    sql = """
        INSERT INTO organizers (full_name, email, password_hash, phone, id_number,
                                id_document_path, portfolio_link, accepts_contract, status)
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
        RETURNING id, email, status;
    """
    return _insert(
        sql,
        (full_name, email, password_hash, phone, id_number,
         id_document_path, portfolio_link, True, STATUS_PENDING),
        email,
    )


def create_admin(email: str, password_hash: str) -> Dict[str, Any]:
    sql = """
        INSERT INTO admins (email, password_hash)
        VALUES (%s, %s)
        RETURNING id, email;
    """
    return _insert(sql, (email, password_hash), email)


def list_organizers(status: Optional[str] = None) -> List[Dict[str, Any]]:
    sql = """
        SELECT id, full_name, email, phone, id_number, id_document_path,
               portfolio_link, status, created_at
        FROM organizers
    """
    params: tuple = ()
    if status:
        sql += " WHERE status = %s"
        params = (status,)
    sql += " ORDER BY id ASC;"

    with get_db() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, params)
            rows = [dict(r) for r in cur.fetchall()]

    for r in rows:
        if r.get("created_at"):
            r["created_at"] = r["created_at"].isoformat()
    return rows


def set_organizer_status(organizer_id: int, status: str) -> Optional[Dict[str, Any]]:
    """
    Change an organizer's moderation status.

    Returns:
        dict: {id, email, status} of the updated row, or None if no
        organizer has this id.
    """
    sql = """
        UPDATE organizers
        SET status = %s, updated_at = CURRENT_TIMESTAMP
        WHERE id = %s
        RETURNING id, email, status;
    """
    with get_db() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, (status, organizer_id))
            row = cur.fetchone()
        conn.commit()

    return dict(row) if row else None
