from flask import current_app

from prediction_quiz import db
from prediction_quiz.errors import ConfirmationRequired, NotEnoughParticipants
from prediction_quiz.models import Answer, GameState, Participant, RoundResult
from prediction_quiz.questions import get_question, question_count
from prediction_quiz.services.quiz import commit_or_conflict, notify
from prediction_quiz.services.quiz.scoring import score_current_round
from prediction_quiz.services.quiz.state_machine import Event, Phase, QuizStateMachine


def ensure_game_state() -> GameState:
    """Return the game state row, creating it with initial values when absent."""
    state = GameState.current()
    if state is None:
        state = GameState()
        state.reset()
        db.session.add(state)
        commit_or_conflict()
        current_app.logger.info("[init] game state created")
    return state


def _machine(state: GameState) -> QuizStateMachine:
    return QuizStateMachine.from_state(state, question_count())


def _clear_submissions() -> None:
    for p in Participant.query.all():
        if p.submitted:
            p.submitted = False
            db.session.add(p)


def start_question() -> GameState:
    state = ensure_game_state()
    machine = _machine(state)
    machine.advance(Event.START)

    participants = Participant.query.count()
    min_participants = int(current_app.config.get('MIN_PARTICIPANTS', 1))
    if participants < min_participants:
        raise NotEnoughParticipants(f"At least {min_participants} participant(s) required to start")

    _clear_submissions()
    machine.apply_to(state)
    db.session.add(state)
    commit_or_conflict()
    current_app.logger.info(f"[start] question={state.current_question} participants={participants}")

    notify.publish_game_state(state)
    notify.publish_all_participants()
    return state


def show_results() -> dict:
    """Score the active question and move to the results phase.

    Scoring and the phase change land in one transaction; a second call for
    the same question is rejected by the state machine.
    """
    state = ensure_game_state()
    machine = _machine(state)
    machine.advance(Event.SHOW_RESULTS)

    question = get_question(state.current_question)
    default_prediction = current_app.config.get('DEFAULT_PREDICTION', 50)
    summary = score_current_round(question, default_prediction)

    machine.apply_to(state)
    db.session.add(state)
    commit_or_conflict()
    current_app.logger.info(
        f"[score] question={summary['question_id']} scored={summary['scored']} skipped={summary['skipped']}"
    )

    notify.publish_game_state(state)
    notify.publish_all_participants()
    return summary


def next_question() -> GameState:
    state = ensure_game_state()
    prev_question = state.current_question
    machine = _machine(state)
    phase = machine.advance(Event.NEXT)

    if phase is Phase.QUESTION:
        _clear_submissions()
    machine.apply_to(state)
    db.session.add(state)
    commit_or_conflict()

    if phase is Phase.QUESTION:
        current_app.logger.info(f"[next] question {prev_question} -> {state.current_question}")
        notify.publish_all_participants()
    else:
        current_app.logger.info(f"[final] finished after question={prev_question}")
    notify.publish_game_state(state)
    return state


def reset_game(confirm: bool = False) -> GameState:
    """Return the game to registration and delete every participant."""
    if confirm is not True:
        raise ConfirmationRequired()

    removed_ids = [pid for (pid,) in db.session.query(Participant.id).all()]
    Answer.query.delete()
    RoundResult.query.delete()
    Participant.query.delete()

    state = GameState.current()
    if state is None:
        state = GameState()
        state.reset()
    machine = _machine(state)
    machine.advance(Event.RESET)
    machine.apply_to(state)
    db.session.add(state)
    commit_or_conflict()
    current_app.logger.info(f"[reset] removed={len(removed_ids)}")

    notify.publish_game_state(state)
    for pid in removed_ids:
        notify.publish_participant_removed(pid)
    notify.publish_roster()
    return state
