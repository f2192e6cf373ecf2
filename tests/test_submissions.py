import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from gradestore.core.errors import IncompleteSubmission, Status
from gradestore.core.models import Exercise, Submission, User

pytestmark = pytest.mark.usefixtures("db_tmpdir")

T0 = datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)


def _setup(store, make_exercise, points=(10, 20, 30)):
    user = User("stud", "Stu", "Dent")
    store.add_or_update_user(user, "pw")
    ex = make_exercise(1, points=points)
    store.add_exercise(ex)
    return user, ex


def _submit(store, user, ex, grades, at, sid=None):
    return store.store_submission(Submission(sid, user, ex, at, list(grades)))


def _row_counts(store):
    conn = store.conn
    return (
        conn.execute("SELECT COUNT(*) FROM Submission").fetchone()[0],
        conn.execute("SELECT COUNT(*) FROM QuestionGrade").fetchone()[0],
    )


def test_store_and_read_back_single_submission(store, make_exercise):
    user, ex = _setup(store, make_exercise)
    sid = _submit(store, user, ex, [7.5, 20, 0.25], T0)
    assert isinstance(sid, int)

    for got in (
        store.get_latest_submission(user, ex),
        store.get_best_submission(user, ex),
    ):
        assert got.id == sid
        assert got.grades == [7.5, 20.0, 0.25]
        assert got.submission_time == T0
        assert got.exercise is ex
        assert got.total == 27.75


def test_unknown_user_writes_nothing(store, make_exercise):
    _, ex = _setup(store, make_exercise)
    res = _submit(store, User("ghost"), ex, [1, 2, 3], T0)
    assert res is Status.USER_NOT_FOUND
    assert _row_counts(store) == (0, 0)


def test_caller_supplied_id_is_kept(store, make_exercise):
    user, ex = _setup(store, make_exercise)
    assert _submit(store, user, ex, [1, 2, 3], T0, sid=42) == 42
    # -1 means generate
    generated = _submit(store, user, ex, [1, 2, 3], T0 + timedelta(seconds=1), sid=-1)
    assert generated not in (-1, 42)


def test_duplicate_submission_id_rolls_back(store, make_exercise):
    user, ex = _setup(store, make_exercise)
    _submit(store, user, ex, [1, 2, 3], T0, sid=5)
    res = _submit(store, user, ex, [9, 9, 9], T0 + timedelta(hours=1), sid=5)
    assert res is Status.DUPLICATE
    assert _row_counts(store) == (1, 3)
    assert store.get_latest_submission(user, ex).grades == [1, 2, 3]


def test_grade_count_must_match_questions(store, make_exercise):
    user, ex = _setup(store, make_exercise)
    with pytest.raises(ValueError):
        _submit(store, user, ex, [1, 2], T0)
    assert _row_counts(store) == (0, 0)


def test_latest_picks_greatest_time(store, make_exercise):
    user, ex = _setup(store, make_exercise)
    _submit(store, user, ex, [10, 20, 30], T0)
    late = _submit(store, user, ex, [1, 1, 1], T0 + timedelta(days=1))
    _submit(store, user, ex, [5, 5, 5], T0 - timedelta(days=1))
    got = store.get_latest_submission(user, ex)
    assert got.id == late
    assert got.grades == [1, 1, 1]


def test_best_picks_highest_total_regardless_of_time(store, make_exercise):
    user, ex = _setup(store, make_exercise, points=(50, 50))
    best = _submit(store, user, ex, [40, 45], T0)  # 85
    _submit(store, user, ex, [30, 40], T0 + timedelta(hours=2))  # 70
    got = store.get_best_submission(user, ex)
    assert got.id == best
    assert got.total == 85
    assert store.get_latest_submission(user, ex).total == 70


def test_best_tie_goes_to_earliest(store, make_exercise):
    user, ex = _setup(store, make_exercise, points=(10, 10))
    _submit(store, user, ex, [5, 5], T0 + timedelta(minutes=5))
    first = _submit(store, user, ex, [10, 0], T0)
    _submit(store, user, ex, [0, 10], T0 + timedelta(minutes=10))
    assert store.get_best_submission(user, ex).id == first


def test_no_submissions_returns_none(store, make_exercise):
    user, ex = _setup(store, make_exercise)
    assert store.get_latest_submission(user, ex) is None
    assert store.get_best_submission(user, ex) is None
    assert store.get_latest_submission(User("ghost"), ex) is None


def test_selection_is_scoped_to_user_and_exercise(store, make_exercise):
    user, ex = _setup(store, make_exercise)
    other = User("other")
    store.add_or_update_user(other, "pw")
    ex2 = make_exercise(2)
    store.add_exercise(ex2)

    mine = _submit(store, user, ex, [1, 1, 1], T0)
    _submit(store, other, ex, [10, 20, 30], T0 + timedelta(hours=1))
    _submit(store, user, ex2, [10, 20, 30], T0 + timedelta(hours=1))

    assert store.get_latest_submission(user, ex).id == mine
    assert store.get_best_submission(user, ex).id == mine


def test_partial_grade_rows_raise_incomplete(store, make_exercise):
    user, ex = _setup(store, make_exercise)
    sid = _submit(store, user, ex, [1, 2, 3], T0)
    store.conn.execute(
        "DELETE FROM QuestionGrade WHERE SubmissionId=? AND QuestionId=2", (sid,)
    )
    store.conn.commit()
    with pytest.raises(IncompleteSubmission) as e:
        store.get_latest_submission(user, ex)
    assert (e.value.submission_id, e.value.expected, e.value.found) == (sid, 3, 2)


def test_partial_rows_count_only_present_grades_for_best(store, make_exercise):
    user, ex = _setup(store, make_exercise)
    full = _submit(store, user, ex, [5, 5, 5], T0)  # 15
    partial = _submit(store, user, ex, [10, 0, 0], T0 + timedelta(hours=1))
    store.conn.execute(
        "DELETE FROM QuestionGrade WHERE SubmissionId=? AND QuestionId>1", (partial,)
    )
    store.conn.commit()
    # partial totals 10, so the complete submission wins
    assert store.get_best_submission(user, ex).id == full


def test_latest_with_missing_grade_rows_is_not_replaced(store, make_exercise):
    user, ex = _setup(store, make_exercise, points=(5, 5))
    _submit(store, user, ex, [1, 1], T0)
    newest = _submit(store, user, ex, [0, 0], T0 + timedelta(hours=1))
    store.conn.execute("DELETE FROM QuestionGrade WHERE SubmissionId=?", (newest,))
    store.conn.commit()
    with pytest.raises(IncompleteSubmission) as e:
        store.get_latest_submission(user, ex)
    assert (e.value.submission_id, e.value.found) == (newest, 0)


def test_best_ranks_ungraded_submission_last(store, make_exercise):
    user, ex = _setup(store, make_exercise, points=(5, 5))
    graded = _submit(store, user, ex, [0, 0], T0 + timedelta(hours=1))
    empty = _submit(store, user, ex, [3, 3], T0)
    store.conn.execute("DELETE FROM QuestionGrade WHERE SubmissionId=?", (empty,))
    store.conn.commit()
    assert store.get_best_submission(user, ex).id == graded


def test_exercise_without_questions_reads_back(store):
    user = User("stud")
    store.add_or_update_user(user, "pw")
    ex = Exercise(8, "Empty", T0)
    store.add_exercise(ex)
    first = _submit(store, user, ex, [], T0)
    second = _submit(store, user, ex, [], T0 + timedelta(minutes=1))

    latest = store.get_latest_submission(user, ex)
    assert latest.id == second
    assert latest.grades == []
    assert latest.submission_time == T0 + timedelta(minutes=1)
    # all totals are empty, so the earliest wins
    assert store.get_best_submission(user, ex).id == first


def test_read_back_carries_stored_user_id(store, make_exercise):
    user, ex = _setup(store, make_exercise)
    _submit(store, user, ex, [1, 2, 3], T0)
    got = store.get_latest_submission(User("stud"), ex)
    assert got.user.id == store.conn.execute(
        "SELECT UserId FROM User WHERE Username='stud'"
    ).fetchone()[0]
    assert (got.user.firstname, got.user.lastname) == ("Stu", "Dent")


def test_other_integrity_errors_propagate_and_roll_back(store, make_exercise):
    user, ex = _setup(store, make_exercise)
    store.conn.execute(
        "CREATE TRIGGER reject_grades BEFORE INSERT ON QuestionGrade "
        "BEGIN SELECT RAISE(ABORT, 'grades locked'); END"
    )
    store.conn.commit()
    with pytest.raises(sqlite3.IntegrityError):
        _submit(store, user, ex, [1, 2, 3], T0, sid=77)
    with pytest.raises(sqlite3.IntegrityError):
        _submit(store, user, ex, [1, 2, 3], T0)
    assert _row_counts(store) == (0, 0)
