from flask import Blueprint, jsonify, request, current_app
from flask_login import current_user
from swipebattle import db, socketio
from swipebattle.models import GameSession, BattleImage
from swipebattle.services.battles.candidate import Candidate, validate_matchup
from swipebattle.services.battles.errors import InvalidInput, InvalidTransition, PickRejected, PickInFlight, StoreUnavailable
from swipebattle.services.battles.scoring import get_scorer
from swipebattle.services.battles.store import SqlOutcomeStore


battles = Blueprint('battles', __name__)


def _current_user_id():
    return current_user.id if current_user.is_authenticated else None


def _emit_state_update(game_session: GameSession) -> None:
    socketio.emit('state_update', {'session_code': game_session.session_code},
                  to=f"session:{game_session.session_code}", namespace='/ws')


def _get_session_or_404(session_code: str) -> GameSession:
    return GameSession.query.filter_by(session_code=session_code.upper()).first_or_404()


def _transition(session_code: str, action: str):
    """Apply one argument-free SessionState transition and persist it."""
    game_session = _get_session_or_404(session_code)
    state = game_session.to_state()
    previous = state.phase.value
    if state.pick_in_flight:
        return jsonify({'error': str(PickInFlight())}), 409
    try:
        getattr(state, action)()
    except InvalidTransition as exc:
        return jsonify({'error': str(exc)}), 400
    # Only overwrite the row this transition was computed from
    updated = (
        GameSession.query
        .filter_by(id=game_session.id, version=game_session.version, pick_in_flight=False)
        .update(game_session.state_columns(state), synchronize_session=False)
    )
    db.session.commit()
    if updated != 1:
        return jsonify({'error': 'Session changed while applying the action, retry'}), 409
    game_session = db.session.get(GameSession, game_session.id)
    current_app.logger.info(f"[{action}] session={game_session.session_code} phase {previous} -> {state.phase.value}")
    _emit_state_update(game_session)
    return jsonify(game_session.to_dict())


def _claim_pick(game_session: GameSession) -> bool:
    """Atomically flag the session as scoring a pick; False if another request got there first."""
    claimed = (
        GameSession.query
        .filter_by(id=game_session.id, pick_in_flight=False)
        .update({'pick_in_flight': True}, synchronize_session=False)
    )
    db.session.commit()
    return claimed == 1


def _release_pick(game_session_id: int) -> None:
    GameSession.query.filter_by(id=game_session_id).update({'pick_in_flight': False}, synchronize_session=False)
    db.session.commit()


def _record_outcome(winner: Candidate, loser: Candidate, user_id) -> None:
    try:
        SqlOutcomeStore().append(winner.name, loser.name, user_id=user_id)
    except StoreUnavailable as exc:
        current_app.logger.warning(f"[record-failed] winner={winner.name} loser={loser.name} error={exc}")


@battles.route('/create', methods=['POST'])
def create_session():
    cfg = current_app.config
    new_session = GameSession(
        code_length=int(cfg.get('SESSION_CODE_LENGTH', 6)),
        total_rounds=int(cfg.get('TOTAL_ROUNDS', 10)),
        user_id=_current_user_id(),
    )
    db.session.add(new_session)
    db.session.commit()
    return jsonify({
        'message': 'New session created!',
        'session_code': new_session.session_code
    }), 201


@battles.route('/<string:session_code>/state', methods=['GET'])
def get_session_state(session_code):
    game_session = _get_session_or_404(session_code)
    payload = game_session.to_dict()
    payload['scoring_enabled'] = get_scorer(current_app).configured
    return jsonify(payload)


@battles.route('/<string:session_code>/start', methods=['POST'])
def start_session(session_code):
    return _transition(session_code, 'start')


@battles.route('/<string:session_code>/pair', methods=['GET'])
def get_pair(session_code):
    game_session = _get_session_or_404(session_code)
    if game_session.phase != 'playing':
        return jsonify({'error': 'Pairs are only served while playing'}), 400
    images = BattleImage.query.order_by(db.func.random()).limit(2).all()
    if len(images) < 2:
        return jsonify({'error': 'At least two candidates are needed for a battle'}), 409
    return jsonify({
        'round': game_session.current_round,
        'candidates': [image.to_candidate().to_dict() for image in images],
    })


@battles.route('/<string:session_code>/pick', methods=['POST'])
def submit_pick(session_code):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Pick must be a JSON object with winner and loser'}), 400
    game_session = _get_session_or_404(session_code)
    try:
        winner = Candidate.from_dict(data.get('winner'))
        loser = Candidate.from_dict(data.get('loser'))
        validate_matchup(winner, loser)
        expected_round = data.get('round')
        if expected_round is not None and (isinstance(expected_round, bool) or not isinstance(expected_round, int)):
            raise InvalidInput('round must be an integer')
    except InvalidInput as exc:
        return jsonify({'error': str(exc)}), 400

    try:
        game_session.to_state().begin_pick(expected_round)
    except InvalidTransition as exc:
        return jsonify({'error': str(exc)}), 400
    except PickRejected as exc:
        return jsonify({'error': str(exc)}), 409

    session_id = game_session.id
    if not _claim_pick(game_session):
        return jsonify({'error': str(PickInFlight())}), 409

    # Another pick may have completed between the first read and the claim,
    # so the checks are repeated against the row as it is now
    db.session.expire_all()
    game_session = db.session.get(GameSession, session_id)
    state = game_session.to_state()
    state.abandon_pick()
    try:
        state.begin_pick(expected_round)
    except (InvalidTransition, PickRejected) as exc:
        _release_pick(session_id)
        status = 400 if isinstance(exc, InvalidTransition) else 409
        return jsonify({'error': str(exc)}), status

    try:
        # Score against the store as it was before this pick is recorded
        scorer = get_scorer(current_app)
        points = scorer.score(winner, loser)
        if scorer.configured:
            _record_outcome(winner, loser, _current_user_id())
        state.complete_pick(winner, points)
    except Exception:
        db.session.rollback()
        _release_pick(session_id)
        raise

    game_session = db.session.get(GameSession, session_id)
    game_session.apply_state(state)
    db.session.add(game_session)
    db.session.commit()
    current_app.logger.info(
        f"[pick] session={game_session.session_code} round={len(state.winners)} points={points} "
        f"score={state.score} phase={state.phase.value}"
    )
    _emit_state_update(game_session)
    payload = game_session.to_dict()
    payload['points'] = points
    return jsonify(payload)


@battles.route('/<string:session_code>/winners', methods=['POST'])
def show_winners(session_code):
    return _transition(session_code, 'show_winners')


@battles.route('/<string:session_code>/stats/open', methods=['POST'])
def open_stats(session_code):
    return _transition(session_code, 'open_stats')


@battles.route('/<string:session_code>/stats/close', methods=['POST'])
def close_stats(session_code):
    return _transition(session_code, 'close_stats')


@battles.route('/<string:session_code>/restart', methods=['POST'])
def restart_session(session_code):
    return _transition(session_code, 'restart')
