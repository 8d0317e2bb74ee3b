from prediction_quiz.questions import QUESTIONS


def register(client, name):
    return client.post('/api/participants', json={'name': name})


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_state_before_admin_opens_game(client):
    res = client.get('/api/state')
    assert res.status_code == 200
    state = res.get_json()
    assert state['phase'] == 'registration'
    assert state['current_question'] == 1


def test_admin_state_creates_game(admin_client):
    res = admin_client.get('/api/admin/state')
    assert res.status_code == 200
    state = res.get_json()
    assert state['phase'] == 'registration'
    assert state['current_question'] == 1
    assert state['question']['answer'] == QUESTIONS[0]['answer']


def test_questions_hide_answers(client):
    res = client.get('/api/questions')
    assert res.status_code == 200
    questions = res.get_json()
    assert len(questions) == len(QUESTIONS)
    assert all('answer' not in q for q in questions)


def test_admin_routes_require_login(client):
    assert client.post('/api/admin/start').status_code == 401
    assert client.get('/api/admin/overview').status_code == 401


def test_admin_login_rejects_bad_password(client):
    res = client.post('/admin/login', json={'username': 'admin', 'password': 'wrong'})
    assert res.status_code == 401
    assert res.get_json()['success'] is False


def test_check_login_and_logout(admin_client):
    res = admin_client.get('/admin/check_login')
    assert res.status_code == 200
    assert res.get_json()['user']['username'] == 'admin'
    assert admin_client.post('/admin/logout').status_code == 200
    assert admin_client.get('/admin/check_login').status_code == 401


def test_register_trims_and_rejects_duplicates(client):
    res = register(client, '  Alice  ')
    assert res.status_code == 201
    alice = res.get_json()
    assert alice['name'] == 'Alice'
    assert alice['total_score'] == 0
    assert alice['current_score'] == 0
    assert alice['answers'] == {}
    assert alice['prediction_diffs'] == []
    assert alice['submitted'] is False

    dup = register(client, 'Alice ')
    assert dup.status_code == 400
    assert 'already taken' in dup.get_json()['error']

    # Names are case-sensitive
    assert register(client, 'alice').status_code == 201


def test_register_rejects_blank_name(client):
    assert register(client, '   ').status_code == 400
    assert register(client, None).status_code == 400
    assert register(client, 'x' * 65).status_code == 400


def test_register_closed_after_start(client, admin_client):
    register(client, 'Alice')
    assert admin_client.post('/api/admin/start').status_code == 200
    res = register(client, 'Bob')
    assert res.status_code == 403
    assert 'closed' in res.get_json()['error']


def test_start_requires_participants(admin_client):
    res = admin_client.post('/api/admin/start')
    assert res.status_code == 400
    state = admin_client.get('/api/admin/state').get_json()
    assert state['phase'] == 'registration'


def test_resume_unknown_participant(client):
    res = client.get('/api/participants/999')
    assert res.status_code == 404


def test_submit_answer_flow(client, admin_client):
    alice = register(client, 'Alice').get_json()

    # Not accepting answers during registration
    res = client.post(f"/api/participants/{alice['id']}/answer", json={'value': 40})
    assert res.status_code == 400

    admin_client.post('/api/admin/start')
    public = client.get('/api/state').get_json()
    assert public['phase'] == 'question'
    assert 'answer' not in public['question']

    res = client.post(f"/api/participants/{alice['id']}/answer", json={'value': 65})
    assert res.status_code == 200
    data = res.get_json()
    assert data['submitted'] is True
    assert data['answers'] == {'1': 65}

    # Second submission for the same question is refused by the server
    again = client.post(f"/api/participants/{alice['id']}/answer", json={'value': 70})
    assert again.status_code == 400
    stored = client.get(f"/api/participants/{alice['id']}").get_json()
    assert stored['answers'] == {'1': 65}


def test_submit_rejects_out_of_range(client, admin_client):
    alice = register(client, 'Alice').get_json()
    admin_client.post('/api/admin/start')
    for value in (-1, 101, 10 ** 400, 'fifty', None, True):
        res = client.post(f"/api/participants/{alice['id']}/answer", json={'value': value})
        assert res.status_code == 400
    assert client.post(f"/api/participants/{alice['id']}/answer", json={'value': 0}).status_code == 200


def test_scoring_round(client, admin_client):
    alice = register(client, 'Alice').get_json()
    bob = register(client, 'Bob').get_json()
    cara = register(client, 'Cara').get_json()
    admin_client.post('/api/admin/start')

    client.post(f"/api/participants/{alice['id']}/answer", json={'value': 65})
    client.post(f"/api/participants/{bob['id']}/answer", json={'value': 95})
    # Cara does not answer and is scored at the midpoint

    res = admin_client.post('/api/admin/results')
    assert res.status_code == 200
    overview = res.get_json()
    assert overview['phase'] == 'results'
    assert overview['scoring'] == {'question_id': 1, 'scored': 3, 'skipped': 0}

    a = client.get(f"/api/participants/{alice['id']}").get_json()
    b = client.get(f"/api/participants/{bob['id']}").get_json()
    c = client.get(f"/api/participants/{cara['id']}").get_json()
    assert (a['current_score'], a['prediction_diffs']) == (15, [-15])
    assert (b['current_score'], b['prediction_diffs']) == (15, [15])
    assert (c['current_score'], c['prediction_diffs']) == (30, [-30])
    assert a['total_score'] == b['total_score'] == 15

    rows = {row['name']: row for row in overview['participants']}
    assert rows['Alice']['diffs'][0]['band'] == 'strong_red'
    assert rows['Bob']['diffs'][0]['band'] == 'strong_green'
    assert rows['Bob']['diffs'][0]['label'] == '+15%'
    assert rows['Cara']['status'] == 'no_answer'
    assert [row['name'] for row in overview['participants']] == ['Alice', 'Bob', 'Cara']

    hist = {b['label']: b for b in overview['histogram']}
    assert hist['60-69']['count'] == 1
    assert hist['90-100']['count'] == 1
    assert hist['80-89']['is_correct_bin'] is True

    assert [r['name'] for r in overview['round_differences']] == ['Bob', 'Alice']

    # The correct answer is revealed to participants once results are shown
    public = client.get('/api/state').get_json()
    assert public['question']['answer'] == 80


def test_show_results_twice_does_not_double_score(client, admin_client):
    alice = register(client, 'Alice').get_json()
    admin_client.post('/api/admin/start')
    client.post(f"/api/participants/{alice['id']}/answer", json={'value': 70})

    assert admin_client.post('/api/admin/results').status_code == 200
    again = admin_client.post('/api/admin/results')
    assert again.status_code == 400

    a = client.get(f"/api/participants/{alice['id']}").get_json()
    assert a['total_score'] == 10
    assert a['prediction_diffs'] == [-10]


def test_next_question_resets_submissions(client, admin_client):
    alice = register(client, 'Alice').get_json()
    admin_client.post('/api/admin/start')
    client.post(f"/api/participants/{alice['id']}/answer", json={'value': 80})
    admin_client.post('/api/admin/results')

    res = admin_client.post('/api/admin/next')
    assert res.status_code == 200
    state = res.get_json()
    assert state['phase'] == 'question'
    assert state['current_question'] == 2

    a = client.get(f"/api/participants/{alice['id']}").get_json()
    assert a['submitted'] is False
    assert a['answers'] == {'1': 80}

    # Answers for the new question are accepted
    res = client.post(f"/api/participants/{alice['id']}/answer", json={'value': 43})
    assert res.status_code == 200
    assert res.get_json()['answers'] == {'1': 80, '2': 43}


def test_next_not_allowed_during_question(client, admin_client):
    register(client, 'Alice')
    admin_client.post('/api/admin/start')
    assert admin_client.post('/api/admin/next').status_code == 400


def test_full_game_to_final(client, admin_client):
    alice = register(client, 'Alice').get_json()
    bob = register(client, 'Bob').get_json()
    admin_client.post('/api/admin/start')

    for index, question in enumerate(QUESTIONS, start=1):
        state = client.get('/api/state').get_json()
        assert state['phase'] == 'question'
        assert state['current_question'] == index
        # Alice is always exact, Bob is always 5 points high
        client.post(f"/api/participants/{alice['id']}/answer", json={'value': question['answer']})
        client.post(f"/api/participants/{bob['id']}/answer", json={'value': min(100, question['answer'] + 5)})
        assert admin_client.post('/api/admin/results').status_code == 200
        assert admin_client.post('/api/admin/next').status_code == 200

    overview = admin_client.get('/api/admin/overview').get_json()
    assert overview['phase'] == 'final'
    assert overview['winner']['name'] == 'Alice'
    assert overview['winner']['total_score'] == 0
    assert overview['winner']['tied_with'] == []

    b = client.get(f"/api/participants/{bob['id']}").get_json()
    assert b['total_score'] == 5 * len(QUESTIONS)
    assert len(b['prediction_diffs']) == len(QUESTIONS)

    # Nothing moves past final except a reset
    assert admin_client.post('/api/admin/next').status_code == 400
    assert admin_client.post('/api/admin/start').status_code == 400


def test_reset_requires_confirmation(client, admin_client):
    register(client, 'Alice')
    res = admin_client.post('/api/admin/reset', json={})
    assert res.status_code == 400
    assert admin_client.get('/api/admin/overview').get_json()['participants']


def test_reset_clears_participants(client, admin_client):
    alice = register(client, 'Alice').get_json()
    admin_client.post('/api/admin/start')
    client.post(f"/api/participants/{alice['id']}/answer", json={'value': 10})
    admin_client.post('/api/admin/results')

    res = admin_client.post('/api/admin/reset', json={'confirm': True})
    assert res.status_code == 200
    state = res.get_json()
    assert state['phase'] == 'registration'
    assert state['current_question'] == 1

    assert client.get(f"/api/participants/{alice['id']}").status_code == 404
    assert admin_client.get('/api/admin/overview').get_json()['participants'] == []
    # The same name can register again in the new game
    assert register(client, 'Alice').status_code == 201


def test_debounce_admin_actions(flask_app, client, admin_client):
    flask_app.config['CONTROLLER_DEBOUNCE_MS'] = 60000
    register(client, 'Alice')
    assert admin_client.post('/api/admin/start').status_code == 200
    res = admin_client.post('/api/admin/start')
    assert res.status_code == 202
    assert res.get_json()['message'] == 'debounced'


def test_reset_from_question_reopens_registration(client, admin_client):
    register(client, 'Alice')
    admin_client.post('/api/admin/start')

    res = admin_client.post('/api/admin/reset', json={'confirm': True})
    assert res.status_code == 200
    assert res.get_json()['phase'] == 'registration'
    assert res.get_json()['current_question'] == 1
    assert register(client, 'Bob').status_code == 201


def test_participant_ids_not_reused_after_reset(client, admin_client):
    alice = register(client, 'Alice').get_json()
    assert admin_client.post('/api/admin/reset', json={'confirm': True}).status_code == 200

    mallory = register(client, 'Mallory').get_json()
    assert mallory['id'] != alice['id']
    # A browser still holding Alice's id must not resume as Mallory
    assert client.get(f"/api/participants/{alice['id']}").status_code == 404
