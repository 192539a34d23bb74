"""
Socket.IO Event Broadcaster
Pushes auction changes to the clients watching a session
"""

import logging

from bridge_types import seat_letter

logger = logging.getLogger(__name__)


def call_info(call):
    return {
        'seat': seat_letter(call.seat) if call.seat is not None else None,
        'call': call.token,
        'tag': call.tag.value if call.tag else None,
        'rationale': call.rationale,
    }


class AuctionBroadcaster:
    """Emits session events to the room named after the session id"""

    def __init__(self, socketio, store):
        self.socketio = socketio
        self.store = store

    def broadcast_auction(self, session_id):
        """Broadcast the complete session state"""
        self.socketio.emit('auction_state', self.store.get_state(session_id), to=session_id)

    def broadcast_call(self, session_id, call):
        """Broadcast a call that was just committed"""
        session = self.store.get(session_id)
        payload = call_info(call)
        payload['turn_index'] = session.auction.turn_index - 1
        payload['auction'] = session.auction.to_dict()
        self.socketio.emit('call_recorded', payload, to=session_id)
        logger.debug("Broadcast %s to session %s", call.token, session_id)

    def broadcast_correction(self, session_id, decision, committed):
        """
        Broadcast the outcome of a predictor correction

        `committed` is None when the decision went stale and was discarded.
        """
        self.socketio.emit('correction', {
            'turn_index': decision.turn_index,
            'provisional': call_info(decision.bid),
            'committed': call_info(committed) if committed is not None else None,
            'overridden': committed is not None and committed != decision.bid,
            'discarded': committed is None,
        }, to=session_id)

    def broadcast_conventions(self, session_id):
        session = self.store.get(session_id)
        self.socketio.emit('conventions', session.config.to_dict(), to=session_id)
