"""
Error taxonomy shared by routes, socket handlers and services.

Every failure carries a broad ``kind`` (what the UI should treat it as) and a
specific ``code`` (what exactly happened), so an audience client can tell
"you already answered" from "this quiz is no longer available".
"""


class QuizGenError(Exception):
    kind = "error"
    code = "error"
    status_code = 400
    default_message = "Request failed."

    def __init__(self, message=None, code=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if code:
            self.code = code

    def to_dict(self):
        return {
            "status": "error",
            "kind": self.kind,
            "code": self.code,
            "msg": self.message,
        }


class UnauthenticatedError(QuizGenError):
    kind = code = "unauthenticated"
    status_code = 401
    default_message = "Not signed in."


class NotAuthorizedError(QuizGenError):
    kind = code = "not-authorized"
    status_code = 403
    default_message = "Not allowed."


class NotParticipantError(NotAuthorizedError):
    code = "not-participant"
    default_message = "You are not part of this lecture."


class NotFoundError(QuizGenError):
    kind = code = "not-found"
    status_code = 404
    default_message = "Not found."


class InvalidInputError(QuizGenError):
    kind = code = "invalid-input"
    status_code = 400
    default_message = "Invalid input."


class InvalidOptionError(InvalidInputError):
    code = "invalid-option"
    default_message = "Selected option is out of range."


class InvalidStateError(QuizGenError):
    kind = code = "invalid-state"
    status_code = 409
    default_message = "Operation not allowed in the current lecture state."


class LectureInactiveError(InvalidStateError):
    code = "lecture-inactive"
    default_message = "This quiz is no longer available."


class DuplicateAttemptError(QuizGenError):
    kind = code = "duplicate"
    status_code = 409
    default_message = "You already answered this question."
