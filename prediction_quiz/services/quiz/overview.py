from prediction_quiz.models import GameState, Participant
from prediction_quiz.questions import get_question, question_count
from prediction_quiz.services.quiz.scoring import diff_band, format_diff, pick_winner, response_histogram
from prediction_quiz.services.quiz.state_machine import Phase


def _row(p: Participant, phase: str, question_id) -> dict:
    row = p.to_dict()
    answer = p.answer_for(question_id) if question_id is not None else None
    if phase == Phase.QUESTION.value:
        row['status'] = 'submitted' if p.submitted else 'waiting'
    elif phase in (Phase.RESULTS.value, Phase.FINAL.value):
        row['status'] = 'answered' if answer is not None else 'no_answer'
        row['round_answer'] = answer
    else:
        row['status'] = 'registered'
    row['diffs'] = [
        {'diff': d, 'label': format_diff(d), 'band': diff_band(d)}
        for d in sorted(p.prediction_diffs)
    ]
    return row


def sort_participants(participants, phase: str):
    """Lower is better: round score while showing results, total score otherwise."""
    field = 'current_score' if phase == Phase.RESULTS.value else 'total_score'
    return sorted(participants, key=lambda p: (abs(getattr(p, field) or 0), p.id))


def round_differences(participants, question: dict) -> list:
    """Signed diffs for everyone who answered ``question``, largest overestimate first."""
    rows = []
    for p in participants:
        answer = p.answer_for(question['id'])
        if answer is None:
            continue
        diff = answer - question['answer']
        rows.append({
            'name': p.name,
            'difference': diff,
            'band': diff_band(diff),
            'total_score': p.total_score or 0,
        })
    rows.sort(key=lambda r: -r['difference'])
    return rows


def build_overview(state: GameState) -> dict:
    participants = Participant.query.order_by(Participant.id).all()
    question = get_question(state.current_question)
    question_id = question['id'] if question else None

    payload = state.to_dict(reveal_answer=True)
    payload['question_count'] = question_count()
    payload['participants'] = [_row(p, state.phase, question_id) for p in sort_participants(participants, state.phase)]
    payload['round_differences'] = round_differences(participants, question) if question else []
    payload['histogram'] = None
    payload['winner'] = None

    if state.phase == Phase.RESULTS.value and question:
        predictions = [p.answer_for(question_id) for p in participants]
        payload['histogram'] = response_histogram([v for v in predictions if v is not None], question['answer'])
    if state.phase == Phase.FINAL.value:
        payload['winner'] = pick_winner(participants)
    return payload
