from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from gradestore.core.models import User

logger = logging.getLogger(__name__)


def add_or_update_user(conn: sqlite3.Connection, user: User, password: str) -> int:
    """Insert the user, or update names/password of an existing username. Returns UserId.

    Passwords are stored in clear; this is not suitable for real credentials.
    """
    conn.execute(
        """
        INSERT INTO User(Username, Firstname, Lastname, Password)
        VALUES (?, ?, ?, ?)
        ON CONFLICT(Username) DO UPDATE SET
          Firstname=excluded.Firstname,
          Lastname=excluded.Lastname,
          Password=excluded.Password
        """,
        (user.username, user.firstname, user.lastname, password),
    )
    conn.commit()
    user_id = get_user_id(conn, user.username)
    logger.info("user saved: username=%s id=%s", user.username, user_id)
    return int(user_id)


def get_user_id(conn: sqlite3.Connection, username: str) -> Optional[int]:
    row = conn.execute(
        "SELECT UserId FROM User WHERE Username=? LIMIT 1", (username,)
    ).fetchone()
    return int(row[0]) if row else None


def get_user(conn: sqlite3.Connection, username: str) -> Optional[User]:
    row = conn.execute(
        "SELECT UserId, Username, Firstname, Lastname FROM User WHERE Username=? LIMIT 1",
        (username,),
    ).fetchone()
    if not row:
        return None
    return User(
        id=int(row["UserId"]),
        username=row["Username"],
        firstname=row["Firstname"],
        lastname=row["Lastname"],
    )


def verify_login(conn: sqlite3.Connection, username: str, password: str) -> bool:
    r = conn.execute(
        "SELECT 1 FROM User WHERE Username=? AND Password=? LIMIT 1",
        (username, password),
    ).fetchone()
    return r is not None
