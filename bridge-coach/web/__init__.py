"""
Web API Module
HTTP and Socket.IO access to bidding sessions
"""

from .dashboard import (
    app,
    socketio,
    store,
    configure_predictor,
    start_server
)

__all__ = [
    'app',
    'socketio',
    'store',
    'configure_predictor',
    'start_server'
]
