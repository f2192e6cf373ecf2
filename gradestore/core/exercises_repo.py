from __future__ import annotations

import logging
import sqlite3
from typing import Dict, List, Optional, Union

from gradestore.core.errors import Status
from gradestore.core.models import Exercise, Question
from gradestore.db.conn import transaction
from gradestore.services.common.time_service import from_epoch_ms, to_epoch_ms

logger = logging.getLogger(__name__)


def _exists(conn: sqlite3.Connection, exercise_id: int) -> bool:
    row = conn.execute(
        "SELECT 1 FROM Exercise WHERE ExerciseId=? LIMIT 1", (exercise_id,)
    ).fetchone()
    return bool(row)


def add_exercise(
    conn: sqlite3.Connection, exercise: Exercise
) -> Union[int, Status]:
    """Store an exercise and its questions (QuestionId = 1-based position).

    Returns the exercise id, or Status.DUPLICATE if the id is already taken.
    """
    if _exists(conn, exercise.id):
        logger.warning("exercise %s already exists", exercise.id)
        return Status.DUPLICATE
    try:
        with transaction(conn):
            conn.execute(
                "INSERT INTO Exercise(ExerciseId, Name, DueDate) VALUES (?, ?, ?)",
                (
                    exercise.id,
                    exercise.name,
                    to_epoch_ms(exercise.due_date) if exercise.due_date else None,
                ),
            )
            conn.executemany(
                'INSERT INTO Question(ExerciseId, QuestionId, Name, "Desc", Points) '
                "VALUES (?, ?, ?, ?, ?)",
                [
                    (exercise.id, qid, q.name, q.desc, q.points)
                    for qid, q in enumerate(exercise.questions, start=1)
                ],
            )
    except sqlite3.IntegrityError:
        # lost a race with another writer for the same id
        logger.warning("exercise %s already exists", exercise.id)
        return Status.DUPLICATE
    logger.info(
        "exercise stored: id=%s questions=%d", exercise.id, len(exercise.questions)
    )
    return exercise.id


def _questions_by_exercise(
    conn: sqlite3.Connection, exercise_id: Optional[int] = None
) -> Dict[int, List[Question]]:
    q = 'SELECT ExerciseId, QuestionId, Name, "Desc", Points FROM Question'
    params: tuple = ()
    if exercise_id is not None:
        q += " WHERE ExerciseId=?"
        params = (exercise_id,)
    rows = conn.execute(q + " ORDER BY ExerciseId ASC, QuestionId ASC", params).fetchall()
    out: Dict[int, List[Question]] = {}
    for r in rows:
        out.setdefault(int(r["ExerciseId"]), []).append(
            Question(r["Name"], r["Desc"], int(r["Points"]))
        )
    return out


def _row_to_exercise(row, questions: List[Question]) -> Exercise:
    return Exercise(
        id=int(row["ExerciseId"]),
        name=row["Name"],
        due_date=from_epoch_ms(row["DueDate"]),
        questions=questions,
    )


def list_exercises(conn: sqlite3.Connection) -> List[Exercise]:
    """All exercises ordered by id, questions included. Read-only."""
    rows = conn.execute(
        "SELECT ExerciseId, Name, DueDate FROM Exercise ORDER BY ExerciseId ASC"
    ).fetchall()
    questions = _questions_by_exercise(conn)
    return [_row_to_exercise(r, questions.get(int(r["ExerciseId"]), [])) for r in rows]


def get_exercise(conn: sqlite3.Connection, exercise_id: int) -> Optional[Exercise]:
    row = conn.execute(
        "SELECT ExerciseId, Name, DueDate FROM Exercise WHERE ExerciseId=?",
        (exercise_id,),
    ).fetchone()
    if not row:
        return None
    questions = _questions_by_exercise(conn, exercise_id)
    return _row_to_exercise(row, questions.get(exercise_id, []))
