from enum import Enum


class Status(str, Enum):
    """Non-fatal outcomes returned (not raised) by write operations."""

    USER_NOT_FOUND = "E_USER_NOT_FOUND"
    DUPLICATE = "E_DUPLICATE"


class GradeStoreError(Exception):
    code = "E_GRADESTORE"


class StoreUnavailable(GradeStoreError):
    code = "E_STORE_UNAVAILABLE"


class ReconstructionError(GradeStoreError):
    code = "E_RECONSTRUCTION"


class IncompleteSubmission(ReconstructionError):
    code = "E_INCOMPLETE_SUBMISSION"

    def __init__(self, submission_id: int, expected: int, found: int):
        super().__init__(
            f"submission {submission_id}: expected {expected} grade rows, found {found}"
        )
        self.submission_id = submission_id
        self.expected = expected
        self.found = found
