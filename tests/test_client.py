import pytest

from prediction_quiz.client import FileSessionStore, ParticipantClient, RequestFailed, SessionStore


@pytest.fixture()
def participant(client):
    return ParticipantClient(client, SessionStore())


def test_register_persists_session(participant):
    data = participant.register(' Alice ')
    assert participant.registered
    assert participant.participant_id == data['id']
    assert participant.store.get('participant_name') == 'Alice'


def test_register_duplicate_raises(client, participant):
    participant.register('Alice')
    other = ParticipantClient(client)
    with pytest.raises(RequestFailed) as exc:
        other.register('Alice')
    assert exc.value.status_code == 400
    assert not other.registered


def test_resume_existing_session(client, participant):
    participant.register('Alice')
    reloaded = ParticipantClient(client, participant.store)
    assert reloaded.resume() is True
    assert reloaded.participant['name'] == 'Alice'


def test_resume_after_reset_clears_session(client, admin_client, participant):
    participant.register('Alice')
    admin_client.post('/api/admin/reset', json={'confirm': True})
    reloaded = ParticipantClient(client, participant.store)
    assert reloaded.resume() is False
    assert not reloaded.registered


def test_resume_without_session(participant):
    assert participant.resume() is False


def test_submit_and_new_question_resets_local_state(admin_client, participant):
    participant.register('Alice')
    admin_client.post('/api/admin/start')
    participant.refresh_state()
    assert participant.phase == 'question'
    assert participant.prediction == 50
    assert participant.submitted is False

    participant.submit(65)
    assert participant.submitted is True
    assert participant.participant['answers'] == {'1': 65}

    # Slider is locked once submitted
    participant.set_prediction(10)
    assert participant.prediction == 65
    with pytest.raises(RequestFailed):
        participant.submit()

    admin_client.post('/api/admin/results')
    admin_client.post('/api/admin/next')
    participant.refresh_state()
    participant.resume()
    assert participant.current_question == 2
    assert participant.submitted is False
    assert participant.prediction == 50


def test_stale_game_state_is_ignored(participant):
    participant.handle_game_state({'phase': 'results', 'current_question': 1, 'question': None, 'seq': 5})
    participant.handle_game_state({'phase': 'question', 'current_question': 1, 'question': None, 'seq': 4})
    assert participant.phase == 'results'


def test_dispatch_handles_pushes(sio_client, client, admin_client, participant):
    participant.register('Alice')
    participant.subscribe(sio_client)
    participant.dispatch(sio_client.get_received('/ws'))
    assert participant.phase == 'registration'
    assert participant.participant['name'] == 'Alice'

    admin_client.post('/api/admin/start')
    participant.dispatch(sio_client.get_received('/ws'))
    assert participant.phase == 'question'
    assert participant.question['id'] == 1

    admin_client.post('/api/admin/reset', json={'confirm': True})
    participant.dispatch(sio_client.get_received('/ws'))
    assert not participant.registered
    assert participant.phase == 'registration'


def test_file_session_store(tmp_path):
    path = tmp_path / 'session.json'
    store = FileSessionStore(str(path))
    store.set('participant_id', 7)
    assert FileSessionStore(str(path)).get('participant_id') == 7
    store.remove('participant_id')
    assert FileSessionStore(str(path)).get('participant_id') is None
