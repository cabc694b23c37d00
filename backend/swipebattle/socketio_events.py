from flask_socketio import join_room, leave_room, emit
from swipebattle import socketio
from swipebattle.models import GameSession


def handle_connect(auth=None):
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_session(data):
    session_code = (data or {}).get('session_code')
    if not session_code:
        emit('error', {'message': 'session_code is required'})
        return
    room = f"session:{session_code.upper()}"
    join_room(room)
    emit('joined', {'room': room})
    # Late joiners get the current state without waiting for the next transition
    game_session = GameSession.query.filter_by(session_code=session_code.upper()).first()
    if game_session:
        emit('state_snapshot', game_session.to_dict())


def handle_leave_session(data):
    session_code = (data or {}).get('session_code')
    if not session_code:
        emit('error', {'message': 'session_code is required'})
        return
    room = f"session:{session_code.upper()}"
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('join_session', handle_join_session, namespace=namespace)
        socketio.on_event('leave_session', handle_leave_session, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
