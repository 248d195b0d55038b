from flask_socketio import join_room, leave_room, emit
from flask import current_app, request
from revealhost import socketio
from revealhost.services.presentation.presenter import HOST_ROOM, current_presenter, display_room
from typing import Dict, Any
import time


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(*args):
    # A host socket going away tears the presenter down once no host is
    # left (after a grace period); the last viewer of a display leaving
    # counts as the display being closed.
    ctx = _sid_to_ctx.pop(_get_sid(), None)
    if not ctx:
        return
    if ctx.get('role') == 'host':
        _host_count['n'] = max(0, _host_count.get('n', 0) - 1)
        # In tests, tear down immediately for determinism; in prod, allow grace period
        if current_app.config.get('TESTING'):
            if _host_count.get('n', 0) == 0:
                _teardown_host(current_app._get_current_object())
            return
        _schedule_teardown_if_no_host(current_app._get_current_object())
    elif ctx.get('role') == 'display':
        token = ctx.get('token')
        if token and not any(c.get('token') == token for c in _sid_to_ctx.values()):
            current_presenter().close_display(token)


def handle_join_host(data=None):
    join_room(HOST_ROOM)
    if _sid_to_ctx.get(_get_sid(), {}).get('role') != 'host':
        _host_count['n'] = _host_count.get('n', 0) + 1
    _sid_to_ctx[_get_sid()] = {'role': 'host'}
    _cancel_scheduled_teardown()
    presenter = current_presenter()
    presenter.attach_host()
    emit('joined', {'room': HOST_ROOM})
    snapshot = presenter.snapshot()
    emit('presentation', snapshot.to_dict() if snapshot else {'active': False})


def handle_leave_host(data=None):
    leave_room(HOST_ROOM)
    emit('left', {'room': HOST_ROOM})
    ctx = _sid_to_ctx.pop(_get_sid(), None)
    if ctx and ctx.get('role') == 'host':
        # Explicit quit: tear down immediately
        _host_count['n'] = max(0, _host_count.get('n', 0) - 1)
        if _host_count['n'] == 0:
            _teardown_host(current_app._get_current_object())


def handle_join_display(data):
    token = (data or {}).get('token')
    if not token:
        emit('error', {'message': 'token is required'})
        return
    display = current_presenter().display(token)
    if display is None:
        emit('error', {'message': 'Display not found'})
        return
    room = display_room(token)
    join_room(room)
    _sid_to_ctx[_get_sid()] = {'role': 'display', 'token': token}
    emit('joined', {'room': room})
    # Late joiners get the full frame; later paints only carry changes
    emit('display_paint', {'token': token, 'frame': dict(display.frame)})


def handle_close_display(data):
    token = (data or {}).get('token')
    if not token:
        emit('error', {'message': 'token is required'})
        return
    closed = current_presenter().close_display(token)
    ctx = _sid_to_ctx.get(_get_sid())
    if ctx and ctx.get('token') == token:
        _sid_to_ctx.pop(_get_sid(), None)
    leave_room(display_room(token))
    emit('display_closed', {'token': token, 'closed': closed})


def handle_ping(data):
    emit('pong', data or {})

# ---- Host lifecycle helpers ----

_sid_to_ctx: Dict[str, Dict[str, Any]] = {}
_host_count: Dict[str, int] = {}
_teardown_deadline: Dict[str, float] = {}


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _teardown_host(app) -> None:
    """Withdraw the display accessor and stop the clock."""
    app.extensions['presenter'].teardown()
    _teardown_deadline.pop('host', None)


def _schedule_teardown_if_no_host(app) -> None:
    if _host_count.get('n', 0) > 0:
        return
    delay_sec = float(app.config.get('HOST_GRACE_SEC', 2.0))
    _teardown_deadline['host'] = time.time() + delay_sec

    def _runner(deadline: float):
        sleep_for = max(0.0, deadline - time.time())
        if sleep_for:
            socketio.sleep(sleep_for)
        if _host_count.get('n', 0) == 0 and _teardown_deadline.get('host') == deadline:
            _teardown_host(app)

    socketio.start_background_task(_runner, _teardown_deadline['host'])


def _cancel_scheduled_teardown() -> None:
    _teardown_deadline.pop('host', None)


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for ns in namespaces:
        socketio.on_event('connect', handle_connect, namespace=ns)
        socketio.on_event('disconnect', handle_disconnect, namespace=ns)
        socketio.on_event('join_host', handle_join_host, namespace=ns)
        socketio.on_event('leave_host', handle_leave_host, namespace=ns)
        socketio.on_event('join_display', handle_join_display, namespace=ns)
        socketio.on_event('close_display', handle_close_display, namespace=ns)
        socketio.on_event('ping', handle_ping, namespace=ns)
