"""
Bid Predictor Client
Asks an external bidding model for its choice over a WebSocket

The model runs as its own service. One request is sent per question:

    {"type": "predict", "auction": ["1H", "PASS"], "hand": "AK32.QJ4.T98.765",
     "dealer": "N", "vulnerability": {"ns": false, "ew": true}, "current_turn": "S"}

and one reply is expected back:

    {"token": "2H", "confidence": 0.82}
"""

import asyncio
import json
import logging
from dataclasses import dataclass

import websockets
from websockets.exceptions import WebSocketException

from bridge_types import parse_bid, seat_letter
from errors import BidError, PredictorError, PredictorUnavailable

logger = logging.getLogger(__name__)

DEFAULT_URI = 'ws://localhost:8765'
DEFAULT_TIMEOUT = 2.0
MAX_AUCTION_LEN = 40


@dataclass(frozen=True)
class Prediction:
    token: str
    confidence: float


class BidPredictor:
    """
    Interface for anything that can suggest the next call

    Implementations return a Prediction or raise PredictorError.
    """

    async def predict(self, auction, hand, seat):
        raise NotImplementedError


def build_request(auction, hand, seat):
    """JSON-ready request body for one prediction"""
    tokens = auction.tokens()
    if len(tokens) > MAX_AUCTION_LEN:
        raise PredictorError(f"Auction of {len(tokens)} calls exceeds the model limit of {MAX_AUCTION_LEN}")
    return {
        'type': 'predict',
        'auction': tokens,
        'hand': hand.to_pbn(),
        'dealer': seat_letter(auction.dealer),
        'vulnerability': {'ns': auction.vulnerability.ns, 'ew': auction.vulnerability.ew},
        'current_turn': seat_letter(seat),
    }


def parse_reply(message):
    """Prediction from a raw reply; PredictorError if it is malformed"""
    try:
        data = json.loads(message)
    except (TypeError, ValueError) as e:
        raise PredictorError(f"Predictor reply is not JSON: {e}") from e
    if not isinstance(data, dict) or 'token' not in data:
        raise PredictorError(f"Predictor reply has no token: {message!r}")
    try:
        token = parse_bid(data['token']).token
        confidence = float(data.get('confidence', 0.0))
    except (BidError, TypeError, ValueError) as e:
        raise PredictorError(f"Malformed predictor reply {message!r}: {e}") from e
    return Prediction(token, max(0.0, min(1.0, confidence)))


class WebSocketPredictor(BidPredictor):
    """Predictor reached over a WebSocket, one connection per request"""

    def __init__(self, uri=DEFAULT_URI, timeout=DEFAULT_TIMEOUT):
        self.uri = uri
        self.timeout = timeout

    async def predict(self, auction, hand, seat):
        request = build_request(auction, hand, seat)
        try:
            reply = await asyncio.wait_for(self._exchange(json.dumps(request)), self.timeout)
        except asyncio.TimeoutError as e:
            raise PredictorUnavailable(f"Predictor at {self.uri} timed out after {self.timeout}s") from e
        except (OSError, WebSocketException) as e:
            raise PredictorUnavailable(f"Predictor at {self.uri} unreachable: {e}") from e
        prediction = parse_reply(reply)
        logger.debug("Predictor suggests %s (confidence %.2f)", prediction.token, prediction.confidence)
        return prediction

    async def _exchange(self, payload):
        async with websockets.connect(self.uri) as websocket:
            await websocket.send(payload)
            return await websocket.recv()
