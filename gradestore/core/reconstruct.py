from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from gradestore.core.errors import IncompleteSubmission, ReconstructionError
from gradestore.core.models import Exercise, Submission, User
from gradestore.services.common.time_service import from_epoch_ms

logger = logging.getLogger(__name__)


def build_submission(
    rows: Iterable[Mapping], user: User, exercise: Exercise
) -> Optional[Submission]:
    """Build a Submission from its (SubmissionId, QuestionId, Grade, SubmissionTime) rows.

    Returns None when there are no rows. A row with a NULL QuestionId only
    identifies the submission and carries no grade. Rows are sorted by
    QuestionId here, so callers need not guarantee order. Raises
    IncompleteSubmission unless there is exactly one grade row for each
    question id 1..len(exercise.questions).
    """
    rows = list(rows)
    if not rows:
        return None

    sid = int(rows[0]["SubmissionId"])
    if any(int(r["SubmissionId"]) != sid for r in rows):
        raise ReconstructionError("grade rows belong to more than one submission")

    graded = sorted(
        (r for r in rows if r["QuestionId"] is not None),
        key=lambda r: int(r["QuestionId"]),
    )
    expected = len(exercise.questions)
    qids = [int(r["QuestionId"]) for r in graded]
    if qids != list(range(1, expected + 1)):
        logger.error(
            "submission %s has grades for questions %s, exercise %s has %d",
            sid,
            qids,
            exercise.id,
            expected,
        )
        raise IncompleteSubmission(sid, expected, len(graded))

    return Submission(
        id=sid,
        user=user,
        exercise=exercise,
        submission_time=from_epoch_ms(rows[0]["SubmissionTime"]),
        grades=[float(r["Grade"]) for r in graded],
    )
