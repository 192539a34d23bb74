"""
Unit tests for the bidding engine cascade
"""

import unittest
from unittest import mock

from endplay.types import Player

from auction import Auction
from bidding_system import BiddingEngine
from bridge_types import Tag, Vulnerability
from convention_config import ConventionConfig
from hand import Hand
from legality import is_legal


class TestOpeningBids(unittest.TestCase):
    """Test opening bid recommendations"""

    def setUp(self):
        self.engine = BiddingEngine()

    def decide(self, hand):
        return self.engine.decide(Auction(dealer='S'), Hand(hand))

    def test_one_of_a_suit(self):
        """20 HCP 5-4 opens the five-card suit"""
        bid = self.decide('AKJ32.AKQ4.K3.32')
        self.assertEqual(bid.token, '1S')
        self.assertEqual(bid.tag, Tag.OPEN_ONE_SUIT)
        self.assertEqual(bid.seat, Player.south)

    def test_1nt_opening(self):
        """Test 1NT opening (15-17 HCP, balanced)"""
        bid = self.decide('AQ2.KJ4.KJ3.Q987')
        self.assertEqual(bid.token, '1NT')
        self.assertEqual(bid.tag, Tag.OPEN_1NT)

    def test_strong_2c(self):
        """22+ HCP opens an artificial 2C"""
        bid = self.decide('AKQ2.AKQ.AK32.K2')
        self.assertEqual(bid.token, '2C')
        self.assertEqual(bid.tag, Tag.OPEN_STRONG_2C)

    def test_weak_two(self):
        """A good six-card suit and 6 HCP"""
        bid = self.decide('KQJ432.32.432.32')
        self.assertEqual(bid.token, '2S')
        self.assertEqual(bid.tag, Tag.OPEN_WEAK_TWO)

    def test_pass_with_nothing(self):
        """Too weak to open"""
        bid = self.decide('Q32.J432.432.432')
        self.assertTrue(bid.is_pass)
        self.assertEqual(bid.tag, Tag.OPEN_PASS)

    def test_recommendation(self):
        """(token, reasoning) for the seat on turn"""
        token, reasoning = self.engine.get_recommendation(Auction(dealer='S'), Hand('AKJ32.AKQ4.K3.32'))
        self.assertEqual(token, '1S')
        self.assertIn('rule of 20', reasoning)


class TestResponses(unittest.TestCase):
    """Test responses to partner's opening"""

    def setUp(self):
        self.engine = BiddingEngine()

    def test_pass_weak_opposite_1nt(self):
        """4 HCP and no major passes 1NT"""
        auction = Auction.from_tokens(['1NT', 'PASS'], dealer='N')
        bid = self.engine.decide(auction, Hand('Q32.432.J432.J32'))
        self.assertTrue(bid.is_pass)

    def test_jacoby_transfer(self):
        """A weak hand with five spades transfers"""
        auction = Auction.from_tokens(['1NT', 'PASS'], dealer='N')
        bid = self.engine.decide(auction, Hand('QJ432.32.432.432'))
        self.assertEqual(bid.token, '2H')
        self.assertEqual(bid.tag, Tag.JACOBY_TRANSFER)

    def test_opener_completes_transfer(self):
        """Opener with three spades completes the transfer"""
        auction = Auction.from_tokens(['1NT', 'PASS', '2H', 'PASS'], dealer='N')
        bid = self.engine.decide(auction, Hand('AQ2.KJ4.KJ3.Q987'))
        self.assertEqual(bid.token, '2S')
        self.assertEqual(bid.tag, Tag.TRANSFER_ACCEPT)

    def test_stayman_replies(self):
        """2D denies a major, 2H shows four hearts"""
        auction = Auction.from_tokens(['1NT', 'PASS', '2C', 'PASS'], dealer='N')
        bid = self.engine.decide(auction, Hand('AQ2.KJ4.KJ3.Q987'))
        self.assertEqual(bid.token, '2D')
        self.assertEqual(bid.tag, Tag.STAYMAN_REPLY)
        bid = self.engine.decide(auction, Hand('AQ2.KJ43.KJ3.Q98'))
        self.assertEqual(bid.token, '2H')

    def test_waiting_2d(self):
        """Nothing at all still answers the strong 2C"""
        auction = Auction.from_tokens(['2C', 'PASS'], dealer='N')
        bid = self.engine.decide(auction, Hand('5432.432.432.432'))
        self.assertEqual(bid.token, '2D')
        self.assertEqual(bid.tag, Tag.WAITING_2D)

    def test_cue_bid_raise(self):
        """Four-card support and 11 HCP over an overcall"""
        auction = Auction.from_tokens(['1H', '1S'], dealer='N')
        bid = self.engine.decide(auction, Hand('Q32.KJ32.A32.J32'))
        self.assertEqual(bid.token, '2S')
        self.assertEqual(bid.tag, Tag.CUE_BID_RAISE)


class TestDefense(unittest.TestCase):
    """Test actions over the opponents' opening"""

    def setUp(self):
        self.engine = BiddingEngine()

    def test_one_level_overcall(self):
        """Five spades and 6 HCP overcall 1C"""
        auction = Auction.from_tokens(['1C'], dealer='E')
        bid = self.engine.decide(auction, Hand('KQ432.J32.32.432'))
        self.assertEqual(bid.token, '1S')
        self.assertEqual(bid.tag, Tag.OVERCALL)

    def test_too_weak_to_overcall(self):
        """One point fewer passes"""
        auction = Auction.from_tokens(['1C'], dealer='E')
        bid = self.engine.decide(auction, Hand('KQ432.432.32.432'))
        self.assertTrue(bid.is_pass)

    def test_dont_over_1nt(self):
        """A long spade suit bids DONT 2S"""
        auction = Auction.from_tokens(['1NT'], dealer='E')
        bid = self.engine.decide(auction, Hand('KQJ9432.32.432.3'))
        self.assertEqual(bid.token, '2S')
        self.assertEqual(bid.tag, Tag.DONT)

    def test_meckwell_over_1nt(self):
        """Below the Meckwell minimum the hand is left to the natural overcalls"""
        config = ConventionConfig()
        config.enable('notrump_defenses', 'meckwell')
        auction = Auction.from_tokens(['1NT'], dealer='E')
        bid = self.engine.decide(auction, Hand('KQJ9432.32.432.3'), config=config)
        self.assertTrue(bid.is_pass)
        self.assertEqual(bid.tag, Tag.PASS)


class TestOpeningRanges(unittest.TestCase):
    """Test preempts, 2NT and the vulnerability shift through decide()"""

    def setUp(self):
        self.engine = BiddingEngine()

    def test_three_level_preempt(self):
        """Seven spades and 6 HCP open 3S"""
        bid = self.engine.decide(Auction(dealer='S'), Hand('KQJ9432.32.432.3'))
        self.assertEqual(bid.token, '3S')
        self.assertEqual(bid.tag, Tag.OPEN_PREEMPT)

    def test_2nt_opening(self):
        """Balanced 21 HCP opens 2NT"""
        bid = self.engine.decide(Auction(dealer='S'), Hand('AK32.KQ3.AQ2.K32'))
        self.assertEqual(bid.token, '2NT')
        self.assertEqual(bid.tag, Tag.OPEN_2NT)

    def test_unfavorable_vulnerability_stops_weak_two(self):
        """The same six-card suit is a weak two only when not vulnerable against not"""
        hand = Hand('KQJ932.32.432.32')
        bid = self.engine.decide(Auction(dealer='S'), hand)
        self.assertEqual(bid.token, '2S')
        self.assertEqual(bid.tag, Tag.OPEN_WEAK_TWO)
        vulnerable = Auction(dealer='S', vulnerability=Vulnerability(ns=True))
        bid = self.engine.decide(vulnerable, hand)
        self.assertTrue(bid.is_pass)
        self.assertEqual(bid.tag, Tag.OPEN_PASS)


class TestConventionalResponses(unittest.TestCase):
    """Test conventional answers chosen by decide()"""

    def setUp(self):
        self.engine = BiddingEngine()

    def test_gerber_reply(self):
        """Two aces answer Gerber with 4S"""
        auction = Auction.from_tokens(['1NT', 'PASS', '4C', 'PASS'], dealer='N')
        bid = self.engine.decide(auction, Hand('AK2.KQ3.A32.J432'))
        self.assertEqual(bid.token, '4S')
        self.assertEqual(bid.tag, Tag.ACE_REPLY)

    def test_drury(self):
        """A passed hand with three spades and 11 HCP bids 2C Drury"""
        auction = Auction.from_tokens(['PASS', 'PASS', '1S', 'PASS'], dealer='N')
        bid = self.engine.decide(auction, Hand('K32.A432.K32.J32'))
        self.assertEqual(bid.token, '2C')
        self.assertEqual(bid.tag, Tag.DRURY)

    def test_splinter(self):
        """Four hearts, a club singleton and game values splinter with 4C"""
        auction = Auction.from_tokens(['1H', 'PASS'], dealer='N')
        bid = self.engine.decide(auction, Hand('A432.KQ32.A432.3'))
        self.assertEqual(bid.token, '4C')
        self.assertEqual(bid.tag, Tag.SPLINTER)

    def test_lebensohl_relay_with_stopper(self):
        """Game values and a spade stopper go through 2NT"""
        auction = Auction.from_tokens(['1NT', '2S'], dealer='N')
        bid = self.engine.decide(auction, Hand('AJ3.K32.Q432.K32'))
        self.assertEqual(bid.token, '2NT')
        self.assertEqual(bid.tag, Tag.LEBENSOHL_RELAY)

    def test_lebensohl_fast_3nt_without_stopper(self):
        """Game values without a spade stopper bid 3NT at once"""
        auction = Auction.from_tokens(['1NT', '2S'], dealer='N')
        bid = self.engine.decide(auction, Hand('432.KQ3.AQ32.K32'))
        self.assertEqual(bid.token, '3NT')
        self.assertEqual(bid.tag, Tag.LEBENSOHL_GAME)

    def test_jordan_2nt(self):
        """Four-card support and 11 HCP over the double bid Jordan 2NT"""
        auction = Auction.from_tokens(['1H', 'X'], dealer='N')
        bid = self.engine.decide(auction, Hand('K32.QJ32.A32.J32'))
        self.assertEqual(bid.token, '2NT')
        self.assertEqual(bid.tag, Tag.JORDAN_2NT)

    def test_game_raise_of_weak_two(self):
        """Three trumps and 17 HCP raise a weak 2S to game"""
        auction = Auction.from_tokens(['2S', 'PASS'], dealer='N')
        bid = self.engine.decide(auction, Hand('AK2.AK32.K32.432'))
        self.assertEqual(bid.token, '4S')
        self.assertEqual(bid.tag, Tag.GAME_RAISE)

    def test_pass_partner_preempt_at_game(self):
        """Partner's 4S is already game, so the same hand passes"""
        auction = Auction.from_tokens(['4S', 'PASS'], dealer='N')
        bid = self.engine.decide(auction, Hand('AK2.AK32.K32.432'))
        self.assertTrue(bid.is_pass)
        self.assertEqual(bid.tag, Tag.PLACEMENT)


class TestCompetitiveDecisions(unittest.TestCase):
    """Test doubles and overcalls chosen by decide()"""

    def setUp(self):
        self.engine = BiddingEngine()

    def test_support_double(self):
        """Opener shows exactly three hearts with a double"""
        auction = Auction.from_tokens(['1C', 'PASS', '1H', '1S'], dealer='N')
        bid = self.engine.decide(auction, Hand('A32.KQ3.32.KJ432'))
        self.assertEqual(bid.token, 'X')
        self.assertEqual(bid.tag, Tag.SUPPORT_DOUBLE)

    def test_responsive_double(self):
        """Both unbid four-card suits and 10 HCP double after the raise"""
        auction = Auction.from_tokens(['1H', 'X', '2H'], dealer='N')
        bid = self.engine.decide(auction, Hand('KJ32.32.Q432.A32'))
        self.assertEqual(bid.token, 'X')
        self.assertEqual(bid.tag, Tag.RESPONSIVE_DOUBLE)

    def test_nt_overcall(self):
        """Balanced 16 HCP with a heart stopper overcall 1NT"""
        auction = Auction.from_tokens(['1H'], dealer='E')
        bid = self.engine.decide(auction, Hand('KQ3.AJ3.KJ32.Q32'))
        self.assertEqual(bid.token, '1NT')
        self.assertEqual(bid.tag, Tag.NT_OVERCALL)

    def test_weak_jump_overcall(self):
        """Six good spades and 6 HCP jump to 2S"""
        auction = Auction.from_tokens(['1C'], dealer='E')
        bid = self.engine.decide(auction, Hand('KQJ932.32.432.32'))
        self.assertEqual(bid.token, '2S')
        self.assertEqual(bid.tag, Tag.JUMP_OVERCALL)

    def test_natural_overcall_of_1nt(self):
        """A five-card club suit with no DONT shape overcalls 2C"""
        auction = Auction.from_tokens(['PASS', 'PASS', '1NT'], dealer='N')
        bid = self.engine.decide(auction, Hand('KQ3.A42.Q7.AJT95'))
        self.assertEqual(bid.token, '2C')
        self.assertEqual(bid.tag, Tag.OVERCALL)

    def test_reopening_double_after_1nt_opening(self):
        """Opener of 1NT reopens with a double when short in their suit"""
        auction = Auction.from_tokens(['PASS', '1NT', '2D', 'PASS', 'PASS'], dealer='N')
        bid = self.engine.decide(auction, Hand('T62.AK92.86.AKQ9'))
        self.assertEqual(bid.token, 'X')
        self.assertEqual(bid.tag, Tag.REOPENING_DOUBLE)


class TestEngineProperties(unittest.TestCase):
    """Properties that hold for every decision"""

    CASES = (
        ([], 'S', 'AKJ32.AKQ4.K3.32'),
        (['1NT', 'PASS'], 'N', 'Q32.432.J432.J32'),
        (['1NT', 'PASS'], 'N', 'QJ432.32.432.432'),
        (['1H', '1S'], 'N', 'Q32.KJ32.A32.J32'),
        (['1C'], 'E', 'KQ432.J32.32.432'),
        (['1NT'], 'E', 'KQJ9432.32.432.3'),
        (['2C', 'PASS'], 'N', '5432.432.432.432'),
        (['1NT', 'PASS', '2C', 'PASS'], 'N', 'AQ2.KJ4.KJ3.Q987'),
    )

    def setUp(self):
        self.engine = BiddingEngine()

    def test_deterministic(self):
        """Same inputs, same call and rationale"""
        for tokens, dealer, hand in self.CASES:
            auction = Auction.from_tokens(tokens, dealer=dealer)
            first = self.engine.decide(auction, Hand(hand))
            second = self.engine.decide(auction, Hand(hand))
            self.assertEqual(first.token, second.token)
            self.assertEqual(first.rationale, second.rationale)

    def test_always_legal_and_seated(self):
        """Every call returned is legal for the seat on turn"""
        for tokens, dealer, hand in self.CASES:
            auction = Auction.from_tokens(tokens, dealer=dealer)
            bid = self.engine.decide(auction, Hand(hand))
            self.assertIsNotNone(bid)
            self.assertEqual(bid.seat, auction.next_seat)
            self.assertTrue(is_legal(auction, bid), f"{bid.token} after {tokens}")
            self.assertIsNotNone(bid.tag)
            self.assertTrue(bid.rationale)

    def test_forcing_never_passes(self):
        """Partner's forcing calls always get an answer"""
        forcing = (
            (['2C', 'PASS'], 'N', '5432.432.432.432'),
            (['1NT', 'PASS', '2C', 'PASS'], 'N', 'AQ2.KJ4.KJ3.Q987'),
            (['1NT', 'PASS', '2H', 'PASS'], 'N', 'AQ2.KJ4.KJ3.Q987'),
        )
        for tokens, dealer, hand in forcing:
            bid = self.engine.decide(Auction.from_tokens(tokens, dealer=dealer), Hand(hand))
            self.assertFalse(bid.is_pass, f"passed a forcing call after {tokens}")

    def test_nothing_when_complete(self):
        """A finished auction has no next call"""
        auction = Auction.from_tokens(['PASS'] * 4, dealer='N')
        self.assertIsNone(self.engine.decide(auction, Hand('AQ2.KJ4.KJ3.Q987')))

    def test_nothing_off_turn(self):
        """Only the seat on turn gets a decision"""
        auction = Auction.from_tokens(['1NT'], dealer='N')
        self.assertIsNone(self.engine.decide(auction, Hand('AQ2.KJ4.KJ3.Q987'), seat=Player.north))

    def test_failure_becomes_safety_pass(self):
        """A rule that raises never escapes the engine"""
        auction = Auction(dealer='N')
        with mock.patch.object(self.engine, '_cascade', side_effect=RuntimeError('boom')):
            with self.assertLogs('bidding_system', level='ERROR'):
                bid = self.engine.decide(auction, Hand('AQ2.KJ4.KJ3.Q987'))
        self.assertTrue(bid.is_pass)
        self.assertEqual(bid.tag, Tag.SAFETY_PASS)
        self.assertEqual(bid.seat, Player.north)


class TestCascadeFallthrough(unittest.TestCase):
    """Test what happens when no layer answers"""

    def setUp(self):
        self.engine = BiddingEngine()
        silent = mock.Mock(return_value=None)
        self.patcher = mock.patch.multiple(
            self.engine,
            _forced_continuation=silent, _direct_defense=silent, _opening_bid=silent,
            _respond_to_partner=silent, _competitive=silent,
        )
        self.patcher.start()
        self.addCleanup(self.patcher.stop)

    def test_natural_fallback(self):
        """Early in the auction the longest suit is bid"""
        bid = self.engine.decide(Auction(dealer='S'), Hand('AKJ32.AKQ4.K3.32'))
        self.assertEqual(bid.token, '1S')
        self.assertEqual(bid.tag, Tag.NATURAL)

    def test_fallback_passes_when_weak(self):
        """Below the fallback minimum the answer is Pass"""
        bid = self.engine.decide(Auction(dealer='S'), Hand('Q32.J432.432.432'))
        self.assertTrue(bid.is_pass)

    def test_defers_deep_in_the_auction(self):
        """Partner's unanswered rebid below game gets no guess"""
        auction = Auction.from_tokens(['1H', 'PASS', '2H', 'PASS', '3H', 'PASS'], dealer='N')
        self.assertIsNone(self.engine.decide(auction, Hand('AQ2.KJ43.KJ3.Q98')))

    def test_no_deferral_after_partner_redoubles(self):
        """A redouble leaves the decision to the natural fallback"""
        auction = Auction.from_tokens(['1C', 'PASS', '1S', 'X', 'XX', 'PASS'], dealer='N')
        bid = self.engine.decide(auction, Hand('AKJ32.K432.32.32'))
        self.assertIsNotNone(bid)
        self.assertEqual(bid.seat, Player.south)

    def test_no_deferral_once_game_is_reached(self):
        """Partner's raise to game is not a reason to defer"""
        auction = Auction.from_tokens(['1H', 'PASS', '2H', 'PASS', '4H', 'PASS'], dealer='N')
        self.assertIsNotNone(self.engine.decide(auction, Hand('Q32.KJ43.J32.432')))


if __name__ == '__main__':
    unittest.main()
