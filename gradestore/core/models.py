from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

# ---------- MODELS ----------


@dataclass
class User:
    username: str
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    id: Optional[int] = None


@dataclass
class Question:
    name: str
    desc: Optional[str]
    points: int

    def __post_init__(self) -> None:
        if int(self.points) < 0:
            raise ValueError(f"question points must be non-negative, got {self.points}")
        self.points = int(self.points)


@dataclass
class Exercise:
    id: int
    name: str
    due_date: datetime
    questions: List[Question] = field(default_factory=list)

    def add_question(self, name: str, desc: Optional[str], points: int) -> Question:
        q = Question(name, desc, points)
        self.questions.append(q)
        return q

    @property
    def total_points(self) -> int:
        return sum(q.points for q in self.questions)


@dataclass
class Submission:
    """One graded attempt; ``grades[i]`` belongs to ``exercise.questions[i]``.

    ``id`` of None or -1 lets the store generate one.
    """

    id: Optional[int]
    user: User
    exercise: Exercise
    submission_time: datetime
    grades: List[float] = field(default_factory=list)

    @property
    def total(self) -> float:
        return sum(self.grades)
