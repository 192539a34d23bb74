"""
Unit tests for the bid predictor client
"""

import asyncio
import json
import socket
import unittest

import websockets
from endplay.types import Player

from auction import Auction
from bridge_types import Vulnerability
from errors import PredictorError, PredictorUnavailable
from hand import Hand
from predictor import MAX_AUCTION_LEN, Prediction, WebSocketPredictor, build_request, parse_reply


class TestMessages(unittest.TestCase):
    """Test request building and reply parsing"""

    def test_build_request(self):
        """The request carries the auction, the hand and the table state"""
        auction = Auction.from_tokens(['1H', 'PASS'], dealer='N', vulnerability=Vulnerability(ew=True))
        request = build_request(auction, Hand('AK32.QJ4.T98.765'), Player.south)
        self.assertEqual(request, {
            'type': 'predict',
            'auction': ['1H', 'PASS'],
            'hand': 'AK32.QJ4.T98.765',
            'dealer': 'N',
            'vulnerability': {'ns': False, 'ew': True},
            'current_turn': 'S',
        })

    def test_auction_too_long(self):
        """The model only reads so many calls"""
        tokens = []
        for level in (1, 2, 3):
            for strain in ('C', 'D', 'H', 'S', 'NT'):
                tokens += [f'{level}{strain}', 'X', 'XX']
        auction = Auction.from_tokens(tokens, dealer='N')
        self.assertGreater(len(auction), MAX_AUCTION_LEN)
        with self.assertRaises(PredictorError):
            build_request(auction, Hand('AK32.QJ4.T98.765'), Player.north)

    def test_parse_reply(self):
        """Tokens are normalized and confidence clamped"""
        self.assertEqual(parse_reply('{"token": "2h", "confidence": 0.82}'), Prediction('2H', 0.82))
        self.assertEqual(parse_reply('{"token": "P", "confidence": 3}'), Prediction('PASS', 1.0))
        self.assertEqual(parse_reply('{"token": "X"}'), Prediction('X', 0.0))

    def test_malformed_replies(self):
        """Anything unreadable is a predictor error"""
        for message in ('not json', '[]', '{"confidence": 0.9}', '{"token": "9Z"}',
                        '{"token": "1C", "confidence": "high"}'):
            with self.assertRaises(PredictorError):
                parse_reply(message)


class TestWebSocketPredictor(unittest.IsolatedAsyncioTestCase):
    """Test the client against a local WebSocket server"""

    async def test_round_trip(self):
        """One request out, one prediction back"""
        received = []

        async def handler(websocket, *args):
            received.append(json.loads(await websocket.recv()))
            await websocket.send(json.dumps({'token': '2H', 'confidence': 0.9}))

        async with websockets.serve(handler, 'localhost', 0) as server:
            port = server.sockets[0].getsockname()[1]
            predictor = WebSocketPredictor(f'ws://localhost:{port}', timeout=5)
            auction = Auction.from_tokens(['1H', 'PASS'], dealer='N')
            prediction = await predictor.predict(auction, Hand('AK32.QJ4.T98.765'), Player.south)
        self.assertEqual(prediction, Prediction('2H', 0.9))
        self.assertEqual(received[0]['current_turn'], 'S')

    async def test_timeout(self):
        """A silent model is unavailable"""
        async def handler(websocket, *args):
            await asyncio.sleep(1)

        async with websockets.serve(handler, 'localhost', 0) as server:
            port = server.sockets[0].getsockname()[1]
            predictor = WebSocketPredictor(f'ws://localhost:{port}', timeout=0.1)
            with self.assertRaises(PredictorUnavailable):
                await predictor.predict(Auction(dealer='N'), Hand('AK32.QJ4.T98.765'), Player.north)

    async def test_refused(self):
        """Nothing listening is unavailable"""
        with socket.socket() as sock:
            sock.bind(('localhost', 0))
            port = sock.getsockname()[1]
        predictor = WebSocketPredictor(f'ws://localhost:{port}', timeout=2)
        with self.assertRaises(PredictorUnavailable):
            await predictor.predict(Auction(dealer='N'), Hand('AK32.QJ4.T98.765'), Player.north)


if __name__ == '__main__':
    unittest.main()
