"""
Unit tests for the bidding session and its two-phase turns
"""

import asyncio
import unittest

from endplay.types import Player

from bridge_types import PASS, Tag, Vulnerability
from errors import AuctionError, PredictorUnavailable
from hand import Hand
from predictor import BidPredictor, Prediction
from session import BiddingSession, TurnDecision

STRONG = 'AQ2.KJ4.KJ3.Q987'
OPENER = 'AKJ32.AKQ4.K3.32'


class DeferringEngine:
    """Engine that never has an answer"""

    def decide(self, auction, hand, seat=None, config=None):
        return None


class FakePredictor(BidPredictor):
    """Canned predictions, optionally held until a gate opens"""

    def __init__(self, token='1S', confidence=0.9, error=None, gate=None):
        self.token = token
        self.confidence = confidence
        self.error = error
        self.gate = gate
        self.requests = []

    async def predict(self, auction, hand, seat):
        self.requests.append((auction.tokens(), seat))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return Prediction(self.token, self.confidence)


class TestSessionLifecycle(unittest.TestCase):
    """Test starting, recording and querying"""

    def test_requires_an_auction(self):
        """Nothing works before start_auction"""
        session = BiddingSession()
        with self.assertRaises(AuctionError):
            session.record('1C')
        with self.assertRaises(AuctionError):
            session.decide_turn(Hand(OPENER))

    def test_dealer_defaults_to_our_seat(self):
        """Vulnerability is given from our side"""
        session = BiddingSession()
        auction = session.start_auction('E', vulnerable_we=True)
        self.assertEqual(auction.dealer, Player.east)
        self.assertEqual(auction.vulnerability, Vulnerability(ns=False, ew=True))

    def test_play_turn(self):
        """The engine's call is committed"""
        session = BiddingSession()
        session.start_auction('S')
        seated = session.play_turn(Hand(OPENER))
        self.assertEqual(seated.token, '1S')
        self.assertEqual(session.auction.tokens(), ['1S'])

    def test_is_legal(self):
        """Legality for the seat on turn; garbage is simply illegal"""
        session = BiddingSession()
        session.start_auction('S', dealer='W')
        session.record('1S')
        self.assertTrue(session.is_legal('2H'))
        self.assertFalse(session.is_legal('1H'))
        self.assertFalse(session.is_legal('garbage'))

    def test_completion_is_logged(self):
        """A finished auction logs its result"""
        session = BiddingSession()
        session.start_auction('N')
        with self.assertLogs('session', level='INFO') as logs:
            for _ in range(4):
                session.record('PASS')
        self.assertTrue(any('passed out' in line for line in logs.output))
        with self.assertRaises(AuctionError):
            session.decide_turn(Hand(OPENER))

    def test_explanation_uses_the_session_auction(self):
        """Calls are explained against the live auction"""
        session = BiddingSession()
        session.start_auction('S', dealer='N')
        session.record('1NT')
        session.record('PASS')
        self.assertIn('Stayman', session.get_explanation_for('2C'))

    def test_to_dict(self):
        """JSON view of the session"""
        session = BiddingSession(threshold=0.7)
        session.start_auction('S')
        state = session.to_dict()
        self.assertEqual(state['auction']['dealer'], 'S')
        self.assertEqual(state['pending_corrections'], [])
        self.assertEqual(state['threshold'], 0.7)
        self.assertIn('competitive', state['conventions'])


class TestNeedsCorrection(unittest.TestCase):
    """Test when the predictor is consulted"""

    def setUp(self):
        self.session = BiddingSession()
        self.session.start_auction('S', dealer='S')

    def test_deferred(self):
        """A deferral always asks"""
        decision = TurnDecision(0, Player.south, PASS.with_seat(Player.south), deferred=True)
        self.assertTrue(self.session.needs_correction(decision, Hand('Q32.J432.432.432')))

    def test_strong_pass(self):
        """A Pass with 16 HCP below game asks; a weak one does not"""
        decision = TurnDecision(0, Player.south, PASS.with_seat(Player.south))
        self.assertTrue(self.session.needs_correction(decision, Hand(STRONG)))
        self.assertFalse(self.session.needs_correction(decision, Hand('Q32.J432.432.432')))

    def test_pass_at_game(self):
        """Once the auction reaches game a Pass stands"""
        self.session.record('4S')
        decision = TurnDecision(1, Player.west, PASS.with_seat(Player.west))
        self.assertFalse(self.session.needs_correction(decision, Hand(STRONG)))


class TestCorrection(unittest.IsolatedAsyncioTestCase):
    """Test phase two against a fake predictor"""

    def make_session(self, predictor, engine=None):
        session = BiddingSession(engine=engine or DeferringEngine(), predictor=predictor)
        session.start_auction('S')
        return session

    async def test_override(self):
        """A confident legal suggestion replaces the provisional Pass"""
        predictor = FakePredictor('1S', 0.9)
        session = self.make_session(predictor)
        decision = session.decide_turn(Hand(OPENER))
        self.assertTrue(decision.deferred)
        self.assertTrue(decision.bid.is_pass)
        committed = await session.correct_turn(decision, Hand(OPENER))
        self.assertEqual(committed.token, '1S')
        self.assertEqual(committed.tag, Tag.PREDICTOR)
        self.assertEqual(session.auction.tokens(), ['1S'])
        self.assertEqual(predictor.requests, [([], Player.south)])

    async def test_low_confidence(self):
        """Below the threshold the Pass stands"""
        session = self.make_session(FakePredictor('1S', 0.4))
        decision = session.decide_turn(Hand(OPENER))
        committed = await session.correct_turn(decision, Hand(OPENER))
        self.assertTrue(committed.is_pass)

    async def test_illegal_suggestion(self):
        """An insufficient bid from the model is ignored"""
        session = BiddingSession(engine=DeferringEngine(), predictor=FakePredictor('1H', 0.95))
        session.start_auction('S', dealer='W')
        session.record('2S')
        decision = session.decide_turn(Hand(OPENER))
        with self.assertLogs('session', level='WARNING'):
            committed = await session.correct_turn(decision, Hand(OPENER))
        self.assertTrue(committed.is_pass)
        self.assertEqual(session.auction.tokens(), ['2S', 'PASS'])

    async def test_malformed_suggestion(self):
        """A token that is not a call is ignored"""
        session = self.make_session(FakePredictor('9Z', 0.95))
        decision = session.decide_turn(Hand(OPENER))
        committed = await session.correct_turn(decision, Hand(OPENER))
        self.assertTrue(committed.is_pass)

    async def test_predictor_unavailable(self):
        """A dead model leaves the engine's call in place"""
        session = self.make_session(FakePredictor(error=PredictorUnavailable('down')))
        decision = session.decide_turn(Hand(OPENER))
        with self.assertLogs('session', level='WARNING'):
            committed = await session.correct_turn(decision, Hand(OPENER))
        self.assertTrue(committed.is_pass)

    async def test_predictor_connection_reset(self):
        """A dropped socket is treated like an unavailable model"""
        session = self.make_session(FakePredictor(error=ConnectionResetError('reset')))
        decision = session.decide_turn(Hand(OPENER))
        with self.assertLogs('session', level='WARNING'):
            committed = await session.correct_turn(decision, Hand(OPENER))
        self.assertTrue(committed.is_pass)
        self.assertEqual(session.auction.tokens(), ['PASS'])

    async def test_predictor_timeout(self):
        """A model that never answers in time leaves the Pass"""
        session = self.make_session(FakePredictor(error=asyncio.TimeoutError()))
        decision = session.decide_turn(Hand(OPENER))
        with self.assertLogs('session', level='WARNING'):
            committed = await session.correct_turn(decision, Hand(OPENER))
        self.assertTrue(committed.is_pass)
        self.assertEqual(session.pending, {})

    async def test_confident_engine_skips_predictor(self):
        """The model is not asked when the engine has a real call"""
        predictor = FakePredictor('PASS', 0.99)
        session = self.make_session(predictor, engine=BiddingSession().engine)
        decision = session.decide_turn(Hand(OPENER))
        committed = await session.correct_turn(decision, Hand(OPENER))
        self.assertEqual(committed.token, '1S')
        self.assertEqual(predictor.requests, [])

    async def test_stale_decision_discarded(self):
        """A decision for a turn already played is dropped"""
        session = self.make_session(FakePredictor('1S', 0.9))
        decision = session.decide_turn(Hand(OPENER))
        session.record('1C')
        self.assertIsNone(await session.correct_turn(decision, Hand(OPENER)))
        self.assertEqual(session.auction.tokens(), ['1C'])

    async def test_scheduled_correction(self):
        """A scheduled correction commits and leaves nothing pending"""
        session = self.make_session(FakePredictor('1S', 0.9))
        decision = session.decide_turn(Hand(OPENER))
        task = session.schedule_correction(decision, Hand(OPENER))
        self.assertIn(0, session.pending)
        committed = await task
        self.assertEqual(committed.token, '1S')
        self.assertEqual(session.pending, {})

    async def test_table_moves_on_first(self):
        """A call recorded while the model thinks cancels the correction"""
        gate = asyncio.Event()
        session = self.make_session(FakePredictor('1S', 0.9, gate=gate))
        decision = session.decide_turn(Hand(OPENER))
        task = session.schedule_correction(decision, Hand(OPENER))
        await asyncio.sleep(0)
        session.record('1D')
        with self.assertRaises(asyncio.CancelledError):
            await task
        self.assertEqual(session.pending, {})
        self.assertEqual(session.auction.tokens(), ['1D'])

    async def test_new_auction_cancels_pending(self):
        """Starting over drops every outstanding correction"""
        gate = asyncio.Event()
        session = self.make_session(FakePredictor('1S', 0.9, gate=gate))
        decision = session.decide_turn(Hand(OPENER))
        task = session.schedule_correction(decision, Hand(OPENER))
        await asyncio.sleep(0)
        session.start_auction('N')
        with self.assertRaises(asyncio.CancelledError):
            await task
        self.assertEqual(session.auction.tokens(), [])


if __name__ == '__main__':
    unittest.main()
