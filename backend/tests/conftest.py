import os
import sys
import pytest

# Ensure the backend root (containing the `revealhost` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from revealhost import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    ROUND_DURATION_SEC = 60
    ROUND_DURATION_MIN_SEC = 10
    ROUND_DURATION_MAX_SEC = 300
    AUTO_UNBLUR = True
    START_BLUR_PX = 18
    START_BLUR_MAX_PX = 30
    START_ZOOM = 2.0
    START_ZOOM_MAX = 3.0
    CLOCK_FRAME_SEC = 0.016
    DISPLAY_POLL_MS = 100
    NOTICE_DURATION_MS = 2000
    HOST_GRACE_SEC = 0.0
    TIMER_HEARTBEAT_SEC = 0


class FakeTime:
    """Manually advanced monotonic time source."""

    def __init__(self, start=1000.0):
        self.t = start

    def __call__(self):
        return self.t

    def advance(self, seconds):
        self.t += seconds


@pytest.fixture()
def fake_time():
    return FakeTime()


@pytest.fixture()
def flask_app(tmp_path):
    TestConfig.UPLOAD_FOLDER = str(tmp_path / 'uploads')
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import revealhost.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()
    from revealhost import socketio_events
    socketio_events._sid_to_ctx.clear()
    socketio_events._host_count.clear()
    socketio_events._teardown_deadline.clear()


@pytest.fixture()
def presenter(flask_app, fake_time):
    p = flask_app.extensions['presenter']
    p.clock.now = fake_time
    return p


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def make_round(client):
    def _make(**overrides):
        entry = {
            'image_url': 'https://example.test/quad.jpg',
            'image_name': 'quad.jpg',
            'answer': 'Main Quad',
            'hints': ['near the library', 'has a fountain', 'north campus'],
        }
        entry.update(overrides)
        res = client.post('/api/rounds', json=entry)
        assert res.status_code == 201
        return res.get_json()
    return _make
