"""
Unit tests for seats, strains, vulnerability and call tokens
"""

import unittest

from endplay.types import Denom, Player

from bridge_types import (
    DOUBLE, PASS, REDOUBLE, Bid, Tag, Vulnerability, bid_label, lho_of, next_seat,
    parse_bid, parse_seat, parse_strain, partner_of, rho_of, same_side, side_of, suits_above
)
from errors import BidError


class TestSeats(unittest.TestCase):
    """Test seat rotation helpers"""

    def test_parse_seat(self):
        """Letters, names and Players all parse"""
        self.assertEqual(parse_seat('N'), Player.north)
        self.assertEqual(parse_seat('west'), Player.west)
        self.assertEqual(parse_seat(Player.east), Player.east)
        with self.assertRaises(ValueError):
            parse_seat('X')

    def test_rotation(self):
        """Clockwise order N, E, S, W"""
        self.assertEqual(next_seat(Player.north), Player.east)
        self.assertEqual(next_seat(Player.west), Player.north)
        self.assertEqual(next_seat(Player.south, 3), Player.east)
        self.assertEqual(partner_of(Player.east), Player.west)
        self.assertEqual(lho_of(Player.south), Player.west)
        self.assertEqual(rho_of(Player.south), Player.east)

    def test_sides(self):
        """North-South and East-West partnerships"""
        self.assertEqual(side_of(Player.south), 'NS')
        self.assertEqual(side_of(Player.west), 'EW')
        self.assertTrue(same_side(Player.north, Player.south))
        self.assertFalse(same_side(Player.north, Player.east))


class TestStrains(unittest.TestCase):
    """Test strain parsing and ranking"""

    def test_parse_strain(self):
        """Letters, symbols and NT aliases"""
        self.assertEqual(parse_strain('h'), Denom.hearts)
        self.assertEqual(parse_strain('♠'), Denom.spades)
        self.assertEqual(parse_strain('N'), Denom.nt)
        self.assertEqual(parse_strain('NT'), Denom.nt)
        with self.assertRaises(BidError):
            parse_strain('Z')

    def test_suits_above(self):
        """Ranking is clubs < diamonds < hearts < spades"""
        self.assertEqual(suits_above(Denom.diamonds), [Denom.hearts, Denom.spades])
        self.assertEqual(suits_above(Denom.spades), [])


class TestVulnerability(unittest.TestCase):
    """Test vulnerability from either side's point of view"""

    def test_for_seat(self):
        """(we, they) flips with the partnership"""
        vul = Vulnerability(ns=True, ew=False)
        self.assertEqual(vul.for_seat(Player.north), (True, False))
        self.assertEqual(vul.for_seat(Player.east), (False, True))

    def test_relative_to(self):
        """Built from our point of view"""
        vul = Vulnerability.relative_to(Player.west, True, False)
        self.assertEqual(vul, Vulnerability(ns=False, ew=True))
        self.assertEqual(vul.label, 'EW')

    def test_parse(self):
        """Board labels"""
        self.assertEqual(Vulnerability.parse('Both').label, 'Both')
        self.assertEqual(Vulnerability.parse('None'), Vulnerability())
        self.assertEqual(Vulnerability.parse('NS'), Vulnerability(ns=True))


class TestBids(unittest.TestCase):
    """Test call tokens and ordering"""

    def test_parse_tokens(self):
        """Every accepted spelling of every call"""
        self.assertEqual(parse_bid('1H').token, '1H')
        self.assertEqual(parse_bid('3N').token, '3NT')
        self.assertEqual(parse_bid('2♠').token, '2S')
        self.assertEqual(parse_bid('p'), PASS)
        self.assertEqual(parse_bid('Pass'), PASS)
        self.assertEqual(parse_bid('DBL'), DOUBLE)
        self.assertEqual(parse_bid('D'), DOUBLE)
        self.assertEqual(parse_bid('R'), REDOUBLE)
        self.assertEqual(parse_bid('XX'), REDOUBLE)

    def test_malformed_tokens(self):
        """Malformed tokens fail at construction"""
        for token in ('8H', '0C', '1Z', '', 'HH', None):
            with self.assertRaises(BidError):
                parse_bid(token)
        with self.assertRaises(BidError):
            Bid.contract(9, Denom.hearts)

    def test_ordering(self):
        """Level first, then strain rank"""
        self.assertTrue(parse_bid('1S').outranks(parse_bid('1H')))
        self.assertTrue(parse_bid('1NT').outranks(parse_bid('1S')))
        self.assertTrue(parse_bid('2C').outranks(parse_bid('1NT')))
        self.assertFalse(parse_bid('1H').outranks(parse_bid('1H')))
        self.assertTrue(parse_bid('1C').outranks(None))
        self.assertFalse(PASS.outranks(None))

    def test_equality_ignores_annotations(self):
        """Seat, tag and rationale do not change what a call is"""
        plain = parse_bid('2H')
        annotated = plain.with_seat(Player.south).explained(Tag.RAISE, "2♥ raise")
        self.assertEqual(plain, annotated)
        self.assertEqual(annotated.tag, Tag.RAISE)
        self.assertEqual(annotated.seat, Player.south)

    def test_game(self):
        """Game levels by strain"""
        self.assertTrue(parse_bid('3NT').is_game())
        self.assertTrue(parse_bid('4H').is_game())
        self.assertFalse(parse_bid('4D').is_game())
        self.assertTrue(parse_bid('5C').is_game())

    def test_labels(self):
        """Display labels use suit symbols"""
        self.assertEqual(bid_label(parse_bid('2H')), '2♥')
        self.assertEqual(bid_label(parse_bid('1NT')), '1NT')
        self.assertEqual(bid_label(DOUBLE), 'Double')


if __name__ == '__main__':
    unittest.main()
