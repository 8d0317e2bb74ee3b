"""Push channel helpers.

Every entity gets its own Socket.IO room on the ``/ws`` namespace:
``game`` for the shared game state, ``participant:<id>`` for a single
participant record and ``roster`` for admin views of all participants.
Payloads carry a ``seq`` so clients can drop stale deliveries.
"""

from prediction_quiz import socketio
from prediction_quiz.models import GameState, Participant

NAMESPACE = '/ws'
GAME_ROOM = 'game'
ROSTER_ROOM = 'roster'


def participant_room(participant_id) -> str:
    return f"participant:{participant_id}"


def publish_game_state(state: GameState) -> None:
    socketio.emit('game_state', state.to_dict(), to=GAME_ROOM, namespace=NAMESPACE)


def publish_participant(participant: Participant) -> None:
    socketio.emit('participant_update', participant.to_dict(), to=participant_room(participant.id), namespace=NAMESPACE)


def publish_participant_removed(participant_id) -> None:
    socketio.emit('participant_removed', {'participant_id': participant_id}, to=participant_room(participant_id), namespace=NAMESPACE)


def publish_roster() -> None:
    roster = [p.to_dict() for p in Participant.query.order_by(Participant.id).all()]
    socketio.emit('roster_update', {'participants': roster}, to=ROSTER_ROOM, namespace=NAMESPACE)


def publish_all_participants() -> None:
    for p in Participant.query.order_by(Participant.id).all():
        publish_participant(p)
    publish_roster()
