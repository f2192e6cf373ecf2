import logging
import sqlite3
from typing import Set

logger = logging.getLogger(__name__)

TABLES = ("User", "Exercise", "Question", "Submission", "QuestionGrade")

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS User (
    UserId INTEGER PRIMARY KEY,
    Username TEXT NOT NULL UNIQUE,
    Firstname TEXT,
    Lastname TEXT,
    Password TEXT
);

CREATE TABLE IF NOT EXISTS Exercise (
    ExerciseId INTEGER PRIMARY KEY,
    Name TEXT NOT NULL,
    DueDate INTEGER
);

CREATE TABLE IF NOT EXISTS Question (
    ExerciseId INTEGER NOT NULL,
    QuestionId INTEGER NOT NULL,
    Name TEXT,
    "Desc" TEXT,
    Points INTEGER NOT NULL DEFAULT 0 CHECK (Points >= 0),
    PRIMARY KEY (ExerciseId, QuestionId)
);

CREATE TABLE IF NOT EXISTS Submission (
    SubmissionId INTEGER PRIMARY KEY,
    UserId INTEGER NOT NULL REFERENCES User(UserId),
    ExerciseId INTEGER NOT NULL,
    SubmissionTime INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_submission_user_exercise
    ON Submission(UserId, ExerciseId);

CREATE TABLE IF NOT EXISTS QuestionGrade (
    SubmissionId INTEGER NOT NULL REFERENCES Submission(SubmissionId) ON DELETE CASCADE,
    QuestionId INTEGER NOT NULL,
    Grade REAL,
    PRIMARY KEY (SubmissionId, QuestionId)
);
"""


def ensure_schema(conn: sqlite3.Connection) -> None:
    """Create the five relations if they are missing. Safe to call repeatedly."""
    conn.executescript(SCHEMA_SQL)
    conn.commit()
    logger.info("schema ready: %s", ", ".join(TABLES))


def list_tables(conn: sqlite3.Connection) -> Set[str]:
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table'"
    ).fetchall()
    return {r[0] for r in rows}
