import math

from prediction_quiz import db
from prediction_quiz.models import Participant, RoundResult
from typing import Iterable, List, Optional, Tuple

HISTOGRAM_LABELS = [
    '0-9', '10-19', '20-29', '30-39', '40-49',
    '50-59', '60-69', '70-79', '80-89', '90-100',
]


def score_prediction(prediction: float, correct: float) -> Tuple[float, float]:
    """Return ``(score, diff)``: absolute and signed error of a prediction."""
    diff = prediction - correct
    return abs(diff), diff


def diff_band(diff: float) -> str:
    if diff < -10:
        return 'strong_red'
    if diff < -5:
        return 'medium_red'
    if diff < 0:
        return 'light_red'
    if diff == 0:
        return 'neutral'
    if diff <= 5:
        return 'light_green'
    if diff <= 10:
        return 'medium_green'
    return 'strong_green'


def format_diff(diff: float) -> str:
    # Halves round up (2.5 -> 3, -2.5 -> -2)
    rounded = math.floor(diff + 0.5)
    return f"+{rounded}%" if diff > 0 else f"{rounded}%"


def _bin_index(value) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value != value:
        return None
    if value == 100:
        return 9
    if 0 <= value < 100:
        return int(value // 10)
    return None


def response_histogram(predictions: Iterable, correct: float) -> List[dict]:
    """Bucket predictions into ten bins and flag the bin holding the correct answer."""
    bins = [{'label': label, 'count': 0, 'is_correct_bin': False} for label in HISTOGRAM_LABELS]
    for p in predictions:
        idx = _bin_index(p)
        if idx is not None:
            bins[idx]['count'] += 1
    correct_idx = _bin_index(correct)
    if correct_idx is not None:
        bins[correct_idx]['is_correct_bin'] = True
    return bins


def pick_winner(participants: List[Participant]) -> Optional[dict]:
    """Lowest total score wins; ties go to the earliest registered participant."""
    if not participants:
        return None
    ordered = sorted(participants, key=lambda p: p.id)
    best = min(ordered, key=lambda p: p.total_score or 0)
    tied = [p.name for p in ordered if p.id != best.id and (p.total_score or 0) == (best.total_score or 0)]
    return {
        'id': best.id,
        'name': best.name,
        'total_score': best.total_score or 0,
        'tied_with': tied,
    }


def score_current_round(question: dict, default_prediction: float) -> dict:
    """Score every participant for ``question`` within the current session.

    Participants already holding a result for the question are skipped, so
    repeating the call never double-counts. The caller commits.
    """
    scored = skipped = 0
    scored_ids = {
        r.participant_id for r in RoundResult.query.filter_by(question_id=question['id']).all()
    }
    for p in Participant.query.order_by(Participant.id).all():
        if p.id in scored_ids:
            skipped += 1
            continue
        answer = p.answer_for(question['id'])
        prediction = default_prediction if answer is None else answer
        score, diff = score_prediction(prediction, question['answer'])
        db.session.add(RoundResult(
            participant_id=p.id,
            question_id=question['id'],
            prediction=prediction,
            score=score,
            diff=diff,
        ))
        p.current_score = score
        p.total_score = (p.total_score or 0) + score
        db.session.add(p)
        scored += 1
    return {'question_id': question['id'], 'scored': scored, 'skipped': skipped}
