from datetime import datetime

from flask import current_app

from prediction_quiz import db
from prediction_quiz.errors import (
    AlreadySubmitted,
    DuplicateName,
    InvalidName,
    InvalidPrediction,
    NotFound,
    RegistrationClosed,
    SubmissionClosed,
)
from prediction_quiz.models import Answer, GameState, Participant
from prediction_quiz.questions import get_question
from prediction_quiz.services.quiz import commit_or_conflict
from prediction_quiz.services.quiz.state_machine import Phase
from prediction_quiz.services.quiz import notify

MAX_NAME_LENGTH = 64


def get_participant(participant_id) -> Participant:
    participant = db.session.get(Participant, participant_id) if participant_id is not None else None
    if participant is None:
        raise NotFound('Participant not found')
    return participant


def _name_taken(name) -> bool:
    return Participant.query.filter_by(name=name).first() is not None


def _lock_game_state():
    return GameState.query.order_by(GameState.id).with_for_update().first()


def register(name) -> Participant:
    """Create a participant while the game is accepting registrations.

    Names are trimmed and compared case-sensitively. A game without a state
    row yet counts as open for registration.
    """
    trimmed = name.strip() if isinstance(name, str) else ''
    if not trimmed or len(trimmed) > MAX_NAME_LENGTH:
        raise InvalidName()

    if _name_taken(trimmed):
        raise DuplicateName()

    state = _lock_game_state()
    if state and state.phase != Phase.REGISTRATION.value:
        raise RegistrationClosed()

    participant = Participant(name=trimmed, submitted=False, current_score=0, total_score=0)
    db.session.add(participant)
    if state is not None:
        # Writing the versioned row makes a concurrent phase change fail this commit
        state.updated_at = datetime.utcnow()
        db.session.add(state)
    # The unique constraint settles concurrent registrations of the same name
    commit_or_conflict(on_integrity_error=DuplicateName())
    current_app.logger.info(f"[register] participant={participant.id} name={participant.name!r}")

    notify.publish_participant(participant)
    notify.publish_roster()
    return participant


def validate_prediction(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidPrediction()
    # Range first: huge ints cannot be converted to float; NaN fails the comparison
    if not 0 <= value <= 100:
        raise InvalidPrediction()
    return float(value)


def submit_answer(participant_id, value) -> Participant:
    prediction = validate_prediction(value)
    participant = get_participant(participant_id)

    state = GameState.current()
    if state is None or state.phase != Phase.QUESTION.value:
        raise SubmissionClosed()
    question = get_question(state.current_question)
    if question is None:
        raise SubmissionClosed()

    if participant.submitted or participant.answer_for(question['id']) is not None:
        raise AlreadySubmitted()

    db.session.add(Answer(participant_id=participant.id, question_id=question['id'], value=prediction))
    participant.submitted = True
    db.session.add(participant)
    commit_or_conflict(on_integrity_error=AlreadySubmitted())
    current_app.logger.info(
        f"[answer] participant={participant.id} question={question['id']} value={prediction}"
    )

    notify.publish_participant(participant)
    notify.publish_roster()
    return participant
