"""Participant-side session logic.

``ParticipantClient`` talks to the HTTP API through any object exposing
``get(url)`` and ``post(url, json=...)`` (a ``requests.Session`` or a Flask
test client) and reacts to pushes from the ``/ws`` namespace. The
participant id is kept in a small key-value store so a reloaded client can
resume its session, and is dropped as soon as the server reports the
participant gone.
"""

import json
import os
from typing import Optional

from prediction_quiz.errors import QuizError
from prediction_quiz.services.quiz.notify import NAMESPACE, participant_room, GAME_ROOM

DEFAULT_PREDICTION = 50
ID_KEY = 'participant_id'
NAME_KEY = 'participant_name'


class RequestFailed(QuizError):
    """Request failed"""

    def __init__(self, message=None, status_code=400):
        super().__init__(message)
        self.status_code = status_code


class SessionStore:
    def __init__(self):
        self._data = {}

    def get(self, key, default=None):
        return self._data.get(key, default)

    def set(self, key, value):
        self._data[key] = value

    def remove(self, key):
        self._data.pop(key, None)


class FileSessionStore(SessionStore):
    """SessionStore persisted as a JSON object on disk."""

    def __init__(self, path):
        super().__init__()
        self.path = path
        if os.path.exists(path):
            with open(path, encoding='utf-8') as fh:
                self._data = json.load(fh)

    def _flush(self):
        with open(self.path, 'w', encoding='utf-8') as fh:
            json.dump(self._data, fh)

    def set(self, key, value):
        super().set(key, value)
        self._flush()

    def remove(self, key):
        super().remove(key)
        self._flush()


def _json(response):
    if hasattr(response, 'get_json'):
        return response.get_json(silent=True) or {}
    try:
        return response.json() or {}
    except ValueError:
        return {}


class ParticipantClient:
    def __init__(self, http, store: Optional[SessionStore] = None, base_url: str = ''):
        self.http = http
        self.store = store if store is not None else SessionStore()
        self.base_url = base_url.rstrip('/')
        self.participant: Optional[dict] = None
        self.phase: Optional[str] = None
        self.current_question: Optional[int] = None
        self.question: Optional[dict] = None
        self.submitted = False
        self.prediction = DEFAULT_PREDICTION
        self._seq = {}

    @property
    def participant_id(self):
        return self.store.get(ID_KEY)

    @property
    def registered(self) -> bool:
        return self.participant_id is not None

    def _url(self, path):
        return f"{self.base_url}{path}"

    def _check(self, response):
        data = _json(response)
        if response.status_code >= 400:
            raise RequestFailed(data.get('error'), status_code=response.status_code)
        return data

    def _clear_session(self):
        self.store.remove(ID_KEY)
        self.store.remove(NAME_KEY)
        self.participant = None
        self.submitted = False
        self.prediction = DEFAULT_PREDICTION
        self._seq.clear()

    def _answer_for_current(self):
        if not self.participant or not self.question:
            return None
        return self.participant.get('answers', {}).get(str(self.question['id']))

    # --- HTTP operations ---

    def register(self, name: str) -> dict:
        data = self._check(self.http.post(self._url('/api/participants'), json={'name': name}))
        self.store.set(ID_KEY, data['id'])
        self.store.set(NAME_KEY, data['name'])
        self._seq.clear()
        self.handle_participant_update(data)
        return data

    def resume(self) -> bool:
        """Reload the stored participant; forget it if the server no longer has it."""
        pid = self.participant_id
        if pid is None:
            return False
        response = self.http.get(self._url(f'/api/participants/{pid}'))
        if response.status_code == 404:
            self._clear_session()
            return False
        self.handle_participant_update(self._check(response))
        return True

    def refresh_state(self) -> dict:
        data = self._check(self.http.get(self._url('/api/state')))
        self.handle_game_state(data)
        return data

    def set_prediction(self, value):
        if self.submitted:
            return
        self.prediction = value

    def submit(self, value=None) -> dict:
        if value is not None:
            self.set_prediction(value)
        if not self.registered:
            raise RequestFailed('Not registered')
        data = self._check(self.http.post(
            self._url(f'/api/participants/{self.participant_id}/answer'),
            json={'value': self.prediction},
        ))
        self.handle_participant_update(data)
        return data

    # --- push handling ---

    def _fresh(self, channel, payload) -> bool:
        seq = payload.get('seq')
        if seq is None:
            return True
        if seq and seq <= self._seq.get(channel, 0):
            return False
        self._seq[channel] = seq
        return True

    def handle_game_state(self, payload: dict) -> None:
        if not self._fresh(GAME_ROOM, payload):
            return
        phase = payload.get('phase')
        question_index = payload.get('current_question')
        entering_question = phase == 'question' and (
            self.phase != 'question' or self.current_question != question_index
        )
        self.phase = phase
        self.current_question = question_index
        self.question = payload.get('question')
        if entering_question:
            answered = self._answer_for_current()
            self.submitted = answered is not None
            self.prediction = answered if answered is not None else DEFAULT_PREDICTION

    def handle_participant_update(self, payload: dict) -> None:
        if payload.get('id') != self.participant_id:
            return
        if not self._fresh(participant_room(payload['id']), payload):
            return
        self.participant = payload
        answered = self._answer_for_current()
        self.submitted = bool(payload.get('submitted')) or answered is not None
        if answered is not None:
            self.prediction = answered

    def handle_participant_removed(self, payload: dict) -> None:
        if payload.get('participant_id') == self.participant_id:
            self._clear_session()

    def dispatch(self, events) -> None:
        """Apply received Socket.IO packets (``{'name': ..., 'args': [...]}``) in order."""
        handlers = {
            'game_state': self.handle_game_state,
            'participant_update': self.handle_participant_update,
            'participant_removed': self.handle_participant_removed,
        }
        for event in events:
            handler = handlers.get(event.get('name'))
            if handler and event.get('args'):
                handler(event['args'][0])

    def subscribe(self, socket) -> None:
        """Ask the server for both channels on ``socket`` (python-socketio style emit)."""
        socket.emit('subscribe_game', {}, namespace=NAMESPACE)
        if self.registered:
            socket.emit('subscribe_participant', {'participant_id': self.participant_id}, namespace=NAMESPACE)

    def unsubscribe(self, socket) -> None:
        socket.emit('unsubscribe', {'channel': GAME_ROOM}, namespace=NAMESPACE)
        if self.registered:
            socket.emit('unsubscribe', {'channel': participant_room(self.participant_id)}, namespace=NAMESPACE)
