from flask import Blueprint, jsonify, request, current_app
from flask_login import current_user, login_required
from prediction_quiz.errors import QuizError
from prediction_quiz.services.quiz import controller
from prediction_quiz.services.quiz.overview import build_overview
import time


admin = Blueprint('admin', __name__)

_last_controller_action: dict[str, float] = {}


@admin.errorhandler(QuizError)
def handle_quiz_error(exc: QuizError):
    return jsonify(exc.to_dict()), exc.status_code


def _debounced(action: str) -> bool:
    """True when the same admin repeated ``action`` inside the debounce window."""
    try:
        debounce_ms = int(current_app.config.get('CONTROLLER_DEBOUNCE_MS', 0))
    except (TypeError, ValueError):
        debounce_ms = 0
    if debounce_ms <= 0:
        return False
    key = f"{action}:{current_user.get_id()}"
    now = time.time() * 1000.0
    last = _last_controller_action.get(key, 0)
    if now - last < debounce_ms:
        current_app.logger.info(f"[debounce] action={action} user={current_user.get_id()}")
        return True
    _last_controller_action[key] = now
    return False


@admin.route('/state', methods=['GET'])
@login_required
def get_state():
    state = controller.ensure_game_state()
    return jsonify(state.to_dict(reveal_answer=True))


@admin.route('/overview', methods=['GET'])
@login_required
def overview():
    state = controller.ensure_game_state()
    return jsonify(build_overview(state))


@admin.route('/start', methods=['POST'])
@login_required
def start_question():
    if _debounced('start'):
        return jsonify({'message': 'debounced'}), 202
    state = controller.start_question()
    return jsonify(state.to_dict(reveal_answer=True))


@admin.route('/results', methods=['POST'])
@login_required
def show_results():
    if _debounced('results'):
        return jsonify({'message': 'debounced'}), 202
    summary = controller.show_results()
    payload = build_overview(controller.ensure_game_state())
    payload['scoring'] = summary
    return jsonify(payload)


@admin.route('/next', methods=['POST'])
@login_required
def next_question():
    if _debounced('next'):
        return jsonify({'message': 'debounced'}), 202
    state = controller.next_question()
    return jsonify(state.to_dict(reveal_answer=True))


@admin.route('/reset', methods=['POST'])
@login_required
def reset_game():
    data = request.get_json(silent=True) or {}
    state = controller.reset_game(confirm=data.get('confirm') is True)
    return jsonify(state.to_dict(reveal_answer=True))
