from enum import Enum

from prediction_quiz.errors import InvalidTransition


class Phase(str, Enum):
    REGISTRATION = 'registration'
    QUESTION = 'question'
    RESULTS = 'results'
    FINAL = 'final'


class Event(str, Enum):
    START = 'start'
    SHOW_RESULTS = 'show_results'
    NEXT = 'next'
    RESET = 'reset'


# event -> phases it may fire from; RESET is accepted everywhere
_ALLOWED_FROM = {
    Event.START: {Phase.REGISTRATION},
    Event.SHOW_RESULTS: {Phase.QUESTION},
    Event.NEXT: {Phase.RESULTS},
    Event.RESET: set(Phase),
}


class QuizStateMachine:
    """Quiz lifecycle: registration -> question -> results -> ... -> final.

    Holds only the phase and the 1-based question index; persistence and
    side effects (scoring, resetting participants) belong to the caller.
    """

    def __init__(self, question_count: int, phase=Phase.REGISTRATION, current_question: int = 1):
        if question_count < 1:
            raise ValueError('question_count must be positive')
        self.question_count = question_count
        self.phase = Phase(phase)
        self.current_question = int(current_question)

    @classmethod
    def from_state(cls, state, question_count: int) -> 'QuizStateMachine':
        return cls(question_count, phase=state.phase, current_question=state.current_question)

    def current_phase(self) -> Phase:
        return self.phase

    def has_next_question(self) -> bool:
        return self.current_question < self.question_count

    def can(self, event) -> bool:
        return self.phase in _ALLOWED_FROM[Event(event)]

    def advance(self, event) -> Phase:
        event = Event(event)
        if not self.can(event):
            raise InvalidTransition(f"Cannot {event.value} while phase is '{self.phase.value}'")

        if event is Event.START:
            self.phase = Phase.QUESTION
        elif event is Event.SHOW_RESULTS:
            self.phase = Phase.RESULTS
        elif event is Event.NEXT:
            if self.has_next_question():
                self.current_question += 1
                self.phase = Phase.QUESTION
            else:
                self.phase = Phase.FINAL
        else:
            self.phase = Phase.REGISTRATION
            self.current_question = 1
        return self.phase

    def apply_to(self, state) -> None:
        state.phase = self.phase.value
        state.current_question = self.current_question
