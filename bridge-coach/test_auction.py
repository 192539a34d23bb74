"""
Unit tests for the auction state machine and the legality checker
"""

import unittest

from endplay.types import Denom, Player

from auction import Auction, AuctionPhase, Doubling
from bridge_types import Tag, Vulnerability, parse_bid
from errors import AuctionError, IllegalCallError
from legality import cheapest_level, ensure_legal, is_legal, legal_calls


class TestAuctionRotation(unittest.TestCase):
    """Test seating and turn order"""

    def test_seats_follow_dealer(self):
        """Calls are seated clockwise from the dealer"""
        auction = Auction.from_tokens(['1H', 'PASS', '2H'], dealer='E')
        self.assertEqual([call.seat for call in auction], [Player.east, Player.south, Player.west])
        self.assertEqual(auction.next_seat, Player.north)
        self.assertEqual(auction.turn_index, 3)

    def test_out_of_turn(self):
        """A call claimed by the wrong seat is refused"""
        auction = Auction(dealer='N')
        with self.assertRaises(AuctionError):
            auction.append('1C', seat='E')

    def test_illegal_append(self):
        """Appending an insufficient bid raises"""
        auction = Auction.from_tokens(['1S'], dealer='N')
        with self.assertRaises(IllegalCallError):
            auction.append('1H')
        with self.assertRaises(IllegalCallError):
            auction.append('XX')

    def test_append_keeps_annotations(self):
        """The engine's tag and rationale survive seating"""
        auction = Auction(dealer='S')
        seated = auction.append(parse_bid('1NT').explained(Tag.OPEN_1NT, "1NT (16 HCP)"))
        self.assertEqual(seated.seat, Player.south)
        self.assertEqual(auction[0].tag, Tag.OPEN_1NT)

    def test_calls_by_seat(self):
        """Per-seat and per-side views"""
        auction = Auction.from_tokens(['1C', '1H', 'X', 'PASS', '1S'], dealer='N')
        self.assertEqual([c.token for c in auction.calls_by(Player.north)], ['1C', '1S'])
        self.assertEqual(auction.last_call_by(Player.south).token, 'X')
        self.assertEqual([c.token for c in auction.actions_by_side(Player.north)], ['1C', 'X', '1S'])
        self.assertEqual(auction.opening().token, '1C')
        self.assertEqual(auction.last_action().token, '1S')


class TestAuctionCompletion(unittest.TestCase):
    """Test the OPEN -> CONTESTED -> ENDED states"""

    def test_passed_out(self):
        """Four passes end an auction with no contract"""
        auction = Auction(dealer='W')
        for _ in range(3):
            auction.append('PASS')
        self.assertEqual(auction.phase, AuctionPhase.OPEN)
        auction.append('PASS')
        self.assertTrue(auction.is_complete)
        self.assertTrue(auction.is_passed_out)
        self.assertIsNone(auction.final_contract())

    def test_three_passes_after_a_bid(self):
        """Three passes after a contract bid end the auction"""
        auction = Auction.from_tokens(['PASS', '1D', 'PASS', 'PASS'], dealer='N')
        self.assertEqual(auction.phase, AuctionPhase.CONTESTED)
        auction.append('PASS')
        self.assertEqual(auction.phase, AuctionPhase.ENDED)
        with self.assertRaises(AuctionError):
            auction.append('1H')

    def test_final_contract_and_declarer(self):
        """Declarer is the first of the side to name the final strain"""
        auction = Auction.from_tokens(['1H', 'PASS', '2C', 'PASS', '2H', 'PASS', '4H', 'X',
                                       'PASS', 'PASS', 'PASS'], dealer='N')
        contract = auction.final_contract()
        self.assertEqual(contract.token, '4HX')
        self.assertEqual(contract.declarer, Player.north)
        self.assertEqual(contract.doubling, Doubling.DOUBLED)

    def test_doubling_state(self):
        """Doubling resets with every new contract bid"""
        auction = Auction.from_tokens(['1S', 'X', 'XX'], dealer='N')
        self.assertEqual(auction.doubling, Doubling.REDOUBLED)
        auction.append('2C')
        self.assertEqual(auction.doubling, Doubling.UNDOUBLED)

    def test_snapshot_is_independent(self):
        """Later appends do not reach a snapshot"""
        auction = Auction.from_tokens(['1C'], dealer='N')
        copy = auction.snapshot()
        auction.append('1D')
        self.assertEqual(copy.tokens(), ['1C'])
        self.assertEqual(auction.tokens(), ['1C', '1D'])

    def test_reseat(self):
        """Reseating replays the calls from a new dealer"""
        auction = Auction.from_tokens(['1C', 'PASS'], dealer='N')
        moved = auction.reseat('W')
        self.assertEqual([call.seat for call in moved], [Player.west, Player.north])

    def test_vulnerability_per_seat(self):
        """(we, they) for any seat"""
        auction = Auction(dealer='N', vulnerability=Vulnerability(ns=False, ew=True))
        self.assertEqual(auction.vulnerable(Player.east), (True, False))
        self.assertEqual(auction.vulnerable(Player.south), (False, True))

    def test_to_dict(self):
        """JSON view of a finished auction"""
        auction = Auction.from_tokens(['1NT', 'PASS', '3NT', 'PASS', 'PASS', 'PASS'], dealer='S')
        state = auction.to_dict()
        self.assertEqual(state['dealer'], 'S')
        self.assertEqual(state['phase'], 'ended')
        self.assertEqual(state['contract'], '3NT')
        self.assertEqual(state['declarer'], 'S')
        self.assertIsNone(state['next_seat'])
        self.assertEqual(state['calls'][1], {'seat': 'W', 'call': 'PASS', 'tag': None, 'rationale': ''})


class TestLegality(unittest.TestCase):
    """Test the legality checker"""

    def test_contract_bids_must_outrank(self):
        """A bid must be higher than the last contract bid"""
        auction = Auction.from_tokens(['1H'], dealer='N')
        self.assertTrue(is_legal(auction, '1S'))
        self.assertTrue(is_legal(auction, '1NT'))
        self.assertFalse(is_legal(auction, '1H'))
        self.assertFalse(is_legal(auction, '1D'))
        self.assertTrue(is_legal(auction, 'PASS'))

    def test_double_only_opponents(self):
        """Double needs an undoubled opposing contract"""
        auction = Auction.from_tokens(['1H'], dealer='N')
        self.assertTrue(is_legal(auction, 'X'))
        auction.append('PASS')
        self.assertFalse(is_legal(auction, 'X'))   # partner's bid
        auction.append('PASS')
        self.assertTrue(is_legal(auction, 'X'))    # balancing
        self.assertFalse(is_legal(Auction(dealer='N'), 'X'))

    def test_redouble(self):
        """Redouble needs an opposing double as the last action"""
        auction = Auction.from_tokens(['1H', 'X'], dealer='N')
        self.assertTrue(is_legal(auction, 'XX'))
        self.assertFalse(is_legal(auction, 'X'))
        auction.append('PASS')
        self.assertFalse(is_legal(auction, 'XX'))  # doubler's partner
        auction.append('PASS')
        self.assertTrue(is_legal(auction, 'XX'))

    def test_nothing_after_the_end(self):
        """No call is legal once the auction is over"""
        auction = Auction.from_tokens(['PASS'] * 4, dealer='N')
        self.assertFalse(is_legal(auction, 'PASS'))
        self.assertEqual(legal_calls(auction), [])

    def test_cheapest_level(self):
        """Lowest level each strain can be bid at"""
        auction = Auction.from_tokens(['1H'], dealer='N')
        self.assertEqual(cheapest_level(auction, Denom.spades), 1)
        self.assertEqual(cheapest_level(auction, Denom.diamonds), 2)
        self.assertEqual(cheapest_level(auction, Denom.hearts), 2)
        seven = Auction.from_tokens(['7NT'], dealer='N')
        self.assertIsNone(cheapest_level(seven, Denom.clubs))

    def test_legal_calls(self):
        """Pass first, then Double, then every higher bid"""
        auction = Auction.from_tokens(['6NT'], dealer='N')
        tokens = [call.token for call in legal_calls(auction)]
        self.assertEqual(tokens, ['PASS', 'X', '7C', '7D', '7H', '7S', '7NT'])
        self.assertEqual(len(legal_calls(Auction(dealer='N'))), 36)

    def test_ensure_legal_downgrades(self):
        """An illegal candidate becomes a neutral Pass"""
        auction = Auction.from_tokens(['2S'], dealer='N')
        bid = ensure_legal(auction, parse_bid('2H').explained(Tag.NATURAL, '2♥'))
        self.assertTrue(bid.is_pass)
        self.assertEqual(bid.tag, Tag.SAFETY_PASS)
        self.assertEqual(bid.seat, Player.east)
        kept = ensure_legal(auction, parse_bid('3H'))
        self.assertEqual(kept.token, '3H')


if __name__ == '__main__':
    unittest.main()
