"""Query construction for picking one submission of a user for an exercise.

Both strategies share one query shape:

1. rank all of the user's submissions for the exercise (``ranked``),
2. keep the top one (``chosen``),
3. return its QuestionGrade rows ordered by QuestionId, at most
   ``row_limit`` of them (the exercise's question count).

Bound parameters, in order: username, exercise id, row limit.

The chosen submission always yields at least one row: when it has no grade
rows, a single row with NULL QuestionId and Grade carries its id and time.

A submission's total is the sum of the grade rows that exist for it; one
without any grade rows has a NULL total and ranks below every graded one.
Ties on the best total go to the earliest submission, then to the lowest id.
"""
from __future__ import annotations

import sqlite3
from enum import Enum
from typing import List


class Selection(str, Enum):
    LATEST = "latest"  # by recency
    BEST = "best"  # by total score


_RANK_ORDER = {
    Selection.LATEST: "SubmissionTime DESC, SubmissionId DESC",
    Selection.BEST: "Total DESC, SubmissionTime ASC, SubmissionId ASC",
}

_GRADES_SQL = """
WITH ranked AS (
    SELECT s.SubmissionId AS SubmissionId,
           s.SubmissionTime AS SubmissionTime,
           SUM(qg.Grade) AS Total
    FROM Submission s
    JOIN User u ON u.UserId = s.UserId
    LEFT JOIN QuestionGrade qg ON qg.SubmissionId = s.SubmissionId
    WHERE u.Username = ? AND s.ExerciseId = ?
    GROUP BY s.SubmissionId, s.SubmissionTime
),
chosen AS (
    SELECT SubmissionId, SubmissionTime FROM ranked ORDER BY {order} LIMIT 1
)
SELECT c.SubmissionId AS SubmissionId,
       qg.QuestionId AS QuestionId,
       qg.Grade AS Grade,
       c.SubmissionTime AS SubmissionTime
FROM chosen c
LEFT JOIN QuestionGrade qg ON qg.SubmissionId = c.SubmissionId
ORDER BY qg.QuestionId ASC
LIMIT ?
"""


def grades_query(selection: Selection) -> str:
    return _GRADES_SQL.format(order=_RANK_ORDER[Selection(selection)])


def select_grade_rows(
    conn: sqlite3.Connection,
    selection: Selection,
    username: str,
    exercise_id: int,
    row_limit: int,
) -> List[sqlite3.Row]:
    # an exercise without questions still needs the chosen submission's row
    limit = max(int(row_limit), 1)
    return conn.execute(
        grades_query(selection), (username, exercise_id, limit)
    ).fetchall()
