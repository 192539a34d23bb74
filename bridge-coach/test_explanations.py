"""
Unit tests for call explanations
"""

import unittest

from auction import Auction
from bridge_types import Tag, parse_bid
from convention_config import ConventionConfig
from explanations import TAG_TEXT, get_explanation_for, tag_text


class TestExplanations(unittest.TestCase):
    """Test explanation text for tagged and bare calls"""

    def test_every_tag_has_text(self):
        """No tag falls back to its raw name"""
        for tag in Tag:
            self.assertIn(tag, TAG_TEXT)
            self.assertTrue(tag_text(tag))

    def test_tagged_bid(self):
        """An engine bid explains itself from its tag and rationale"""
        bid = parse_bid('2D').explained(Tag.JACOBY_TRANSFER, "2♦ Jacoby transfer (5+ ♥, 3 HCP)")
        text = get_explanation_for(bid)
        self.assertTrue(text.startswith('2♦: Jacoby transfer'))
        self.assertIn('5+ ♥, 3 HCP', text)

    def test_without_auction(self):
        """A bare call with no context is described literally"""
        self.assertEqual(get_explanation_for('2H'), '2♥: Hearts at the 2 level')
        self.assertEqual(get_explanation_for('1NT'), '1NT: No-trump at the 1 level')

    def test_stayman_in_context(self):
        """2C over partner's 1NT is Stayman"""
        auction = Auction.from_tokens(['1NT', 'PASS'], dealer='N')
        self.assertEqual(get_explanation_for('2C', auction), '2♣: Stayman: asks for a 4-card major')

    def test_stayman_disabled(self):
        """Without Stayman the same call is natural"""
        config = ConventionConfig()
        config.disable('notrump_responses', 'stayman')
        auction = Auction.from_tokens(['1NT', 'PASS'], dealer='N')
        self.assertNotIn('Stayman', get_explanation_for('2C', auction, config))

    def test_notrump_response(self):
        """1NT over 1H denies three-card support"""
        auction = Auction.from_tokens(['1H', 'PASS'], dealer='N')
        self.assertIn('no 3-card', get_explanation_for('1NT', auction))

    def test_call_already_made(self):
        """A call in the auction is read from the auction before it"""
        auction = Auction.from_tokens(['1NT', 'PASS', '2C', 'PASS'], dealer='N')
        self.assertIn('Stayman', get_explanation_for(auction[2], auction))

    def test_takeout_double_names_suits(self):
        """A takeout double of 1H shows the other three suits"""
        auction = Auction.from_tokens(['1H'], dealer='E')
        text = get_explanation_for('X', auction)
        self.assertIn('Takeout double', text)
        self.assertIn('shows clubs and diamonds and spades', text)


if __name__ == '__main__':
    unittest.main()
