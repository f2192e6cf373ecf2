from __future__ import annotations

import logging
import sqlite3
from typing import List, Optional, Union

from gradestore.core import exercises_repo, submissions_repo
from gradestore.core.errors import Status, StoreUnavailable
from gradestore.core.models import Exercise, Submission, User
from gradestore.core.reconstruct import build_submission
from gradestore.core.selection import Selection, select_grade_rows
from gradestore.db import repo_users
from gradestore.db.conn import connect
from gradestore.db.schema import ensure_schema

logger = logging.getLogger(__name__)


class GradeStore:
    """Owns one open connection to the grade database.

    Use as a context manager so the connection is always released::

        with provision() as store:
            store.get_best_submission(user, exercise)
    """

    def __init__(self, conn: sqlite3.Connection):
        self._conn: Optional[sqlite3.Connection] = conn

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreUnavailable("store is closed")
        return self._conn

    @property
    def closed(self) -> bool:
        return self._conn is None

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "GradeStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ---------- users ----------

    def add_or_update_user(self, user: User, password: str) -> int:
        return repo_users.add_or_update_user(self.conn, user, password)

    def verify_login(self, username: str, password: str) -> bool:
        return repo_users.verify_login(self.conn, username, password)

    # ---------- exercises ----------

    def add_exercise(self, exercise: Exercise) -> Union[int, Status]:
        return exercises_repo.add_exercise(self.conn, exercise)

    def list_exercises(self) -> List[Exercise]:
        return exercises_repo.list_exercises(self.conn)

    def get_exercise(self, exercise_id: int) -> Optional[Exercise]:
        return exercises_repo.get_exercise(self.conn, exercise_id)

    # ---------- submissions ----------

    def store_submission(self, submission: Submission) -> Union[int, Status]:
        return submissions_repo.store_submission(self.conn, submission)

    def get_submission(
        self, user: User, exercise: Exercise, selection: Selection
    ) -> Optional[Submission]:
        rows = select_grade_rows(
            self.conn, selection, user.username, exercise.id, len(exercise.questions)
        )
        if not rows:
            return None
        stored = repo_users.get_user(self.conn, user.username)
        return build_submission(rows, stored or user, exercise)

    def get_latest_submission(
        self, user: User, exercise: Exercise
    ) -> Optional[Submission]:
        return self.get_submission(user, exercise, Selection.LATEST)

    def get_best_submission(
        self, user: User, exercise: Exercise
    ) -> Optional[Submission]:
        return self.get_submission(user, exercise, Selection.BEST)


def provision(path: Optional[str] = None) -> GradeStore:
    """Open (creating if needed) the database and make sure the schema exists."""
    conn = connect(path)
    try:
        ensure_schema(conn)
    except sqlite3.Error:
        conn.close()
        raise
    logger.info("grade store provisioned")
    return GradeStore(conn)
