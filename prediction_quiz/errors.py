class QuizError(Exception):
    """Base class for errors reported back to API callers."""

    status_code = 400

    def __init__(self, message=None):
        super().__init__(message or self.__doc__)
        self.message = message or self.__doc__

    def to_dict(self):
        return {'error': self.message}


class InvalidName(QuizError):
    """Name must be between 1 and 64 characters"""


class DuplicateName(QuizError):
    """This name is already taken. Please choose a different name."""


class RegistrationClosed(QuizError):
    """Registration is currently closed. Please wait for the next game."""

    status_code = 403


class InvalidPrediction(QuizError):
    """Prediction must be a number between 0 and 100"""


class SubmissionClosed(QuizError):
    """Not accepting answers at this time"""


class AlreadySubmitted(QuizError):
    """Already answered this question"""


class InvalidTransition(QuizError):
    """Action not allowed in the current phase"""


class NotEnoughParticipants(QuizError):
    """Not enough participants to start"""


class ConfirmationRequired(QuizError):
    """Reset must be confirmed with {"confirm": true}"""


class NotFound(QuizError):
    """Not found"""

    status_code = 404


class ConcurrentUpdate(QuizError):
    """The game changed while processing the request; please retry"""

    status_code = 409
