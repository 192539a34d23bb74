"""
Bidding Coach Web API
JSON endpoints over live bidding sessions, with Socket.IO push updates
"""

import asyncio
import logging

from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_socketio import SocketIO, join_room, leave_room

from bridge_types import parse_bid, seat_letter
from errors import BridgeError
from hand import Hand
from legality import legal_calls

from .broadcaster import AuctionBroadcaster, call_info
from .state import SessionStore, UnknownSession

logger = logging.getLogger(__name__)

# Initialize Flask app
app = Flask(__name__)
app.config['SECRET_KEY'] = 'bridge-coach-secret'
CORS(app)

# Initialize Socket.IO
socketio = SocketIO(app, cors_allowed_origins="*")

# Initialize session store
store = SessionStore()

# Initialize broadcaster
broadcaster = AuctionBroadcaster(socketio, store)


def configure_predictor(predictor, threshold=None):
    """Attach a bid predictor to sessions opened from now on"""
    store.predictor = predictor
    store.threshold = threshold


# ==================== Errors ====================

@app.errorhandler(UnknownSession)
def handle_unknown_session(error):
    return jsonify({'error': f"Unknown session: {error.args[0]}"}), 404


@app.errorhandler(BridgeError)
def handle_bridge_error(error):
    return jsonify({'error': str(error), 'type': type(error).__name__}), 400


@app.errorhandler(ValueError)
def handle_value_error(error):
    return jsonify({'error': str(error)}), 400


def _body():
    return request.get_json(silent=True) or {}


def _hand(data):
    text = data.get('hand')
    if not text:
        raise ValueError("Request needs a 'hand' in PBN or LIN form")
    return Hand(text)


def _call_param():
    token = request.args.get('call') or _body().get('call')
    if not token:
        raise ValueError("Request needs a 'call'")
    return parse_bid(token)


# ==================== Sessions ====================

@app.route('/api/sessions', methods=['POST'])
def create_session():
    """
    Open a session and start its auction

    Body: {"our_seat": "S", "vulnerable_we": false, "vulnerable_they": true,
           "dealer": "N", "conventions": {...}}
    """
    data = _body()
    session_id, session = store.create(data.get('conventions'))
    session.start_auction(
        data.get('our_seat', 'S'),
        vulnerable_we=bool(data.get('vulnerable_we', False)),
        vulnerable_they=bool(data.get('vulnerable_they', False)),
        dealer=data.get('dealer')
    )
    return jsonify(store.get_state(session_id)), 201


@app.route('/api/sessions/<session_id>', methods=['GET'])
def get_session(session_id):
    return jsonify(store.get_state(session_id))


@app.route('/api/sessions/<session_id>', methods=['DELETE'])
def delete_session(session_id):
    store.remove(session_id)
    return '', 204


@app.route('/api/sessions/<session_id>/auction', methods=['POST'])
def restart_auction(session_id):
    """Start a new auction in an existing session, keeping its conventions"""
    data = _body()
    session = store.get(session_id)
    session.start_auction(
        data.get('our_seat', seat_letter(session.auction.our_seat)),
        vulnerable_we=bool(data.get('vulnerable_we', False)),
        vulnerable_they=bool(data.get('vulnerable_they', False)),
        dealer=data.get('dealer')
    )
    broadcaster.broadcast_auction(session_id)
    return jsonify(store.get_state(session_id))


# ==================== Bidding ====================

@app.route('/api/sessions/<session_id>/bid', methods=['POST'])
def recommend_bid(session_id):
    """
    Engine call for the seat on turn

    Body: {"hand": "AKQ2.J54.T9.8765", "commit": false}

    With "commit" the call is appended. A doubtful Pass is first handed to
    the predictor in the background and the client hears the outcome over
    Socket.IO; the response then reports "pending": true.
    """
    data = _body()
    session = store.get(session_id)
    hand = _hand(data)
    decision = session.decide_turn(hand)
    result = call_info(decision.bid)
    result.update({
        'turn_index': decision.turn_index,
        'deferred': decision.deferred,
        'explanation': session.get_explanation_for(decision.bid),
        'pending': False,
    })
    if not data.get('commit'):
        return jsonify(result)

    if session.predictor is not None and session.needs_correction(decision, hand):
        socketio.start_background_task(_run_correction, session_id, decision, hand)
        result['pending'] = True
        return jsonify(result), 202

    committed = session.record(decision.bid)
    broadcaster.broadcast_call(session_id, committed)
    result['auction'] = session.auction.to_dict()
    return jsonify(result)


def _run_correction(session_id, decision, hand):
    """
    Phase two in a background task: consult the predictor, then commit

    The correction runs as the session's own task for that turn, so a call
    recorded at the table in the meantime cancels it.
    """
    try:
        session = store.get(session_id)
    except UnknownSession:
        logger.info("Session %s closed before its correction ran", session_id)
        return

    async def correct():
        return await session.schedule_correction(decision, hand)

    try:
        committed = asyncio.run(correct())
    except asyncio.CancelledError:
        logger.info("Correction for turn %d cancelled, the table moved on", decision.turn_index)
        committed = None
    except Exception:
        logger.exception("Correction for turn %d failed", decision.turn_index)
        return
    broadcaster.broadcast_correction(session_id, decision, committed)
    if committed is not None:
        broadcaster.broadcast_call(session_id, committed)


@app.route('/api/sessions/<session_id>/calls', methods=['POST'])
def record_call(session_id):
    """Append a call made at the table. Body: {"call": "1H"}"""
    session = store.get(session_id)
    committed = session.record(_call_param())
    broadcaster.broadcast_call(session_id, committed)
    return jsonify({'call': call_info(committed), 'auction': session.auction.to_dict()}), 201


@app.route('/api/sessions/<session_id>/legal', methods=['GET'])
def legal(session_id):
    """Legality of ?call=..., or every legal call when none is given"""
    session = store.get(session_id)
    if request.args.get('call'):
        bid = _call_param()
        return jsonify({'call': bid.token, 'legal': session.is_legal(bid)})
    return jsonify({'calls': [call.token for call in legal_calls(session.auction)]})


@app.route('/api/sessions/<session_id>/explain', methods=['GET'])
def explain(session_id):
    """Explanation of ?call=... as the next call of the auction"""
    session = store.get(session_id)
    bid = _call_param()
    return jsonify({'call': bid.token, 'explanation': session.get_explanation_for(bid)})


# ==================== Conventions ====================

@app.route('/api/sessions/<session_id>/conventions', methods=['GET'])
def get_conventions(session_id):
    return jsonify(store.get(session_id).config.to_dict())


@app.route('/api/sessions/<session_id>/conventions', methods=['PATCH'])
def update_conventions(session_id):
    """
    Toggle or retune conventions between turns

    Body: {"category": "notrump_defenses", "key": "dont", "enabled": true}
    or a settings tree: {"settings": {"competitive": {"michaels": false}}}
    """
    data = _body()
    session = store.get(session_id)
    if 'settings' in data:
        session.config.apply_settings(data['settings'])
    else:
        category, key = data.get('category'), data.get('key')
        if not category or not key:
            raise ValueError("Request needs 'category' and 'key', or 'settings'")
        changes = {name: value for name, value in data.items() if name not in ('category', 'key')}
        session.config.update(category, key, **changes)
        logger.info("Session %s: %s.%s -> %s", session_id, category, key, changes)
    broadcaster.broadcast_conventions(session_id)
    return jsonify(session.config.to_dict())


# ==================== Socket.IO Handlers ====================

@socketio.on('connect')
def handle_connect():
    logger.info("Client connected")


@socketio.on('disconnect')
def handle_disconnect():
    logger.info("Client disconnected")


@socketio.on('join')
def handle_join(data):
    """Subscribe to a session's events and receive its current state"""
    session_id = (data or {}).get('session_id')
    if session_id not in store:
        return {'error': f"Unknown session: {session_id}"}
    join_room(session_id)
    broadcaster.broadcast_auction(session_id)
    return {'ok': True}


@socketio.on('leave')
def handle_leave(data):
    session_id = (data or {}).get('session_id')
    if session_id:
        leave_room(session_id)


def start_server(host='0.0.0.0', port=5001, debug=False):
    """
    Start the API server

    Args:
        host: Host address (default: all interfaces)
        port: Port number (default: 5001)
        debug: Debug mode (default: False)
    """
    logger.info("Starting bidding coach API on http://localhost:%d", port)
    socketio.run(app, host=host, port=port, debug=debug, allow_unsafe_werkzeug=True)


if __name__ == "__main__":
    # python -m web.dashboard (from bridge-coach/); BRIDGE_COACH_PREDICTOR=ws://host:port enables corrections
    import os

    from predictor import WebSocketPredictor

    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(name)s %(levelname)s %(message)s')
    predictor_uri = os.environ.get('BRIDGE_COACH_PREDICTOR')
    if predictor_uri:
        configure_predictor(WebSocketPredictor(predictor_uri))
    start_server(port=int(os.environ.get('BRIDGE_COACH_PORT', 5001)))
