from __future__ import annotations

import logging
import sqlite3
from typing import Union

from gradestore.core.errors import Status
from gradestore.core.models import Submission
from gradestore.db.conn import transaction
from gradestore.db.repo_users import get_user_id
from gradestore.services.common.time_service import to_epoch_ms

logger = logging.getLogger(__name__)


def _exists(conn: sqlite3.Connection, submission_id: int) -> bool:
    row = conn.execute(
        "SELECT 1 FROM Submission WHERE SubmissionId=? LIMIT 1", (submission_id,)
    ).fetchone()
    return bool(row)


def store_submission(
    conn: sqlite3.Connection, submission: Submission
) -> Union[int, Status]:
    """Store a submission and one QuestionGrade row per grade, atomically.

    - Unknown user -> Status.USER_NOT_FOUND, nothing written.
    - Submission id already taken -> Status.DUPLICATE, nothing written.
    - len(grades) != len(exercise.questions) -> ValueError.
    ``submission.id`` of None or -1 means a generated id.
    """
    user_id = get_user_id(conn, submission.user.username)
    if user_id is None:
        logger.warning(
            "submission rejected: unknown user %s", submission.user.username
        )
        return Status.USER_NOT_FOUND

    n = len(submission.exercise.questions)
    if len(submission.grades) != n:
        raise ValueError(
            f"expected {n} grades for exercise {submission.exercise.id}, "
            f"got {len(submission.grades)}"
        )

    requested = submission.id if submission.id not in (None, -1) else None
    try:
        with transaction(conn):
            cur = conn.execute(
                "INSERT INTO Submission(SubmissionId, UserId, ExerciseId, SubmissionTime) "
                "VALUES (?, ?, ?, ?)",
                (
                    requested,
                    user_id,
                    submission.exercise.id,
                    to_epoch_ms(submission.submission_time),
                ),
            )
            sid = int(cur.lastrowid)
            conn.executemany(
                "INSERT INTO QuestionGrade(SubmissionId, QuestionId, Grade) VALUES (?, ?, ?)",
                [
                    (sid, qid, float(g))
                    for qid, g in enumerate(submission.grades, start=1)
                ],
            )
    except sqlite3.IntegrityError as e:
        if requested is None or not _exists(conn, requested):
            raise
        logger.warning("submission rejected: id %s already exists (%s)", requested, e)
        return Status.DUPLICATE

    logger.info(
        "submission stored: id=%s user=%s exercise=%s",
        sid,
        submission.user.username,
        submission.exercise.id,
    )
    return sid
