from flask import Blueprint, jsonify, request
from prediction_quiz.errors import QuizError
from prediction_quiz.models import GameState
from prediction_quiz.questions import QUESTIONS, public_question
from prediction_quiz.services.quiz import participants as svc_participants


quiz = Blueprint('quiz', __name__)


@quiz.errorhandler(QuizError)
def handle_quiz_error(exc: QuizError):
    return jsonify(exc.to_dict()), exc.status_code


@quiz.route('/state', methods=['GET'])
def get_state():
    state = GameState.current()
    if state is None:
        # Nothing created yet: the admin has not opened the game
        return jsonify({'phase': 'registration', 'current_question': 1, 'question': None, 'seq': 0})
    return jsonify(state.to_dict())


@quiz.route('/questions', methods=['GET'])
def list_questions():
    return jsonify([public_question(q) for q in QUESTIONS])


@quiz.route('/participants', methods=['POST'])
def register_participant():
    data = request.get_json(silent=True) or {}
    participant = svc_participants.register(data.get('name'))
    return jsonify(participant.to_dict()), 201


@quiz.route('/participants/<int:participant_id>', methods=['GET'])
def get_participant(participant_id):
    participant = svc_participants.get_participant(participant_id)
    return jsonify(participant.to_dict())


@quiz.route('/participants/<int:participant_id>/answer', methods=['POST'])
def submit_answer(participant_id):
    data = request.get_json(silent=True) or {}
    participant = svc_participants.submit_answer(participant_id, data.get('value'))
    return jsonify(participant.to_dict())
