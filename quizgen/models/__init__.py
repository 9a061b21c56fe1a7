from .lecture import Lecture, LECTURE_STATUSES
from .participant import Participant
from .quiz_item import QuizItem, OPTION_COUNT
from .attempt import Attempt

__all__ = [
    "Lecture",
    "LECTURE_STATUSES",
    "Participant",
    "QuizItem",
    "OPTION_COUNT",
    "Attempt",
]
