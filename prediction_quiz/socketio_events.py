from flask_socketio import join_room, leave_room, emit
from flask_login import current_user
from prediction_quiz import db, socketio
from prediction_quiz.models import GameState, Participant
from prediction_quiz.services.quiz.notify import GAME_ROOM, ROSTER_ROOM, NAMESPACE, participant_room


def handle_connect(auth=None):
    emit('connected', {'message': f'Connected to {NAMESPACE}'})


def handle_disconnect(reason=None):
    # Flask-SocketIO drops the socket from every room it joined
    pass


def handle_subscribe_game(data=None):
    join_room(GAME_ROOM)
    state = GameState.current()
    if state is None:
        emit('game_state', {'phase': 'registration', 'current_question': 1, 'question': None, 'seq': 0})
    else:
        emit('game_state', state.to_dict())


def handle_subscribe_participant(data):
    raw_id = (data or {}).get('participant_id')
    try:
        participant_id = int(raw_id)
    except (TypeError, ValueError):
        emit('error', {'message': 'participant_id is required'})
        return
    room = participant_room(participant_id)
    join_room(room)
    participant = db.session.get(Participant, participant_id)
    if participant is None:
        # Removed by a reset before the client reconnected
        emit('participant_removed', {'participant_id': participant_id})
        return
    emit('participant_update', participant.to_dict())


def handle_subscribe_roster(data=None):
    if not current_user.is_authenticated:
        emit('error', {'message': 'admin login required'})
        return
    join_room(ROSTER_ROOM)
    roster = [p.to_dict() for p in Participant.query.order_by(Participant.id).all()]
    emit('roster_update', {'participants': roster})


def handle_unsubscribe(data):
    room = (data or {}).get('channel')
    if not room:
        emit('error', {'message': 'channel is required'})
        return
    leave_room(room)
    emit('unsubscribed', {'channel': room})


def handle_ping(data):
    emit('pong', data or {})


_HANDLERS = {
    'connect': handle_connect,
    'disconnect': handle_disconnect,
    'subscribe_game': handle_subscribe_game,
    'subscribe_participant': handle_subscribe_participant,
    'subscribe_roster': handle_subscribe_roster,
    'unsubscribe': handle_unsubscribe,
    'ping': handle_ping,
}


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    for name, handler in _HANDLERS.items():
        socketio.on_event(name, handler, namespace=NAMESPACE)

    if testing:
        for name, handler in _HANDLERS.items():
            socketio.on_event(name, handler, namespace='/')
