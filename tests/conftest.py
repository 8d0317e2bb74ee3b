import os
import sys
import pytest

# Ensure the project root (containing the `prediction_quiz` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from prediction_quiz import create_app, db, socketio

ADMIN_USERNAME = 'admin'
ADMIN_PASSWORD = 'secret'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    CORS_ORIGINS = 'http://localhost:5173'
    DEFAULT_PREDICTION = 50
    MIN_PARTICIPANTS = 1
    CONTROLLER_DEBOUNCE_MS = 0
    ADMIN_USERNAME = ADMIN_USERNAME
    ADMIN_PASSWORD = ADMIN_PASSWORD


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        from prediction_quiz.models import User
        db.create_all()
        admin_user = User(username=ADMIN_USERNAME)
        admin_user.set_password(ADMIN_PASSWORD)
        db.session.add(admin_user)
        db.session.commit()
        yield application
        db.session.remove()
        db.drop_all()
    from prediction_quiz.api import admin as admin_api
    admin_api._last_controller_action.clear()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def admin_client(flask_app):
    test_client = flask_app.test_client()
    res = test_client.post('/admin/login', json={'username': ADMIN_USERNAME, 'password': ADMIN_PASSWORD})
    assert res.status_code == 200
    return test_client


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')


@pytest.fixture()
def admin_sio_client(flask_app, admin_client):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=admin_client,
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')
