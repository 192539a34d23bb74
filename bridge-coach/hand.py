"""
Hand Evaluation
A 13-card bridge hand with the evaluation used by the bidding engine

Accepted formats:
- LIN:          'SAKQ2HJ432D432C32'
- dotted PBN:   'AKQ2.J432.432.32'  (spades.hearts.diamonds.clubs)
- spaced PBN:   'AKQ2 J432 432 32'  ('-' marks a void)
"""

from types import MappingProxyType

from endplay.types import Card, Denom, Rank

from bridge_types import SUITS, SUIT_SYMBOLS
from errors import HandError

RANK_VALUES = {
    Rank.R2: 2, Rank.R3: 3, Rank.R4: 4, Rank.R5: 5, Rank.R6: 6,
    Rank.R7: 7, Rank.R8: 8, Rank.R9: 9, Rank.RT: 10, Rank.RJ: 11,
    Rank.RQ: 12, Rank.RK: 13, Rank.RA: 14
}
RANK_LETTERS = {
    Rank.RA: 'A', Rank.RK: 'K', Rank.RQ: 'Q', Rank.RJ: 'J', Rank.RT: 'T',
    Rank.R9: '9', Rank.R8: '8', Rank.R7: '7', Rank.R6: '6', Rank.R5: '5',
    Rank.R4: '4', Rank.R3: '3', Rank.R2: '2'
}
LETTER_TO_RANK = {letter: rank for rank, letter in RANK_LETTERS.items()}
HCP_VALUES = {Rank.RA: 4, Rank.RK: 3, Rank.RQ: 2, Rank.RJ: 1}

# Display/PBN order
PBN_ORDER = (Denom.spades, Denom.hearts, Denom.diamonds, Denom.clubs)
LIN_SUITS = {'S': Denom.spades, 'H': Denom.hearts, 'D': Denom.diamonds, 'C': Denom.clubs}

BALANCED_SHAPES = ([4, 3, 3, 3], [4, 4, 3, 2], [5, 3, 3, 2])
SHAPE_5422 = [5, 4, 2, 2]
SEMI_BALANCED_SHAPES = BALANCED_SHAPES + (SHAPE_5422, [6, 3, 2, 2])

SHORTNESS_POINTS = {0: 3, 1: 2, 2: 1}


class Hand:
    """
    Represents a bridge hand with evaluation methods

    Hands are values: the holdings are fixed at construction and two hands
    with the same cards compare equal.
    """

    __slots__ = ('_suits', '_hcp', '_shape')

    def __init__(self, text):
        """Initialize hand from LIN or PBN text"""
        holdings = {suit: [] for suit in SUITS}
        self._parse(text, holdings)
        self._validate(holdings)
        suits = {suit: tuple(sorted(ranks, key=RANK_VALUES.get, reverse=True))
                 for suit, ranks in holdings.items()}
        object.__setattr__(self, '_suits', MappingProxyType(suits))
        object.__setattr__(self, '_hcp', self.count_hcp())
        object.__setattr__(self, '_shape', tuple(self.get_shape_pattern()))

    def __setattr__(self, name, value):
        raise AttributeError(f"Hand is immutable, cannot set {name!r}")

    def __eq__(self, other):
        if not isinstance(other, Hand):
            return NotImplemented
        return self.to_pbn() == other.to_pbn()

    def __hash__(self):
        return hash(self.to_pbn())

    @property
    def suits(self):
        """Read-only view: suit -> ranks, highest first"""
        return self._suits

    @property
    def hcp(self):
        return self._hcp

    @property
    def shape(self):
        """Suit lengths, longest first"""
        return list(self._shape)

    @classmethod
    def from_cards(cls, cards):
        """Build a hand from endplay Cards"""
        holdings = {suit: '' for suit in PBN_ORDER}
        for card in cards:
            holdings[card.suit] += RANK_LETTERS[card.rank]
        return cls('.'.join(holdings[suit] for suit in PBN_ORDER))

    # ==================== Parsing ====================

    def _parse(self, text, holdings):
        if not isinstance(text, str) or not text.strip():
            raise HandError(f"Cannot parse hand from {text!r}")
        text = text.strip().upper().replace('10', 'T')
        if '.' in text:
            self._parse_holdings(text.split('.'), holdings)
        elif len(text.split()) == 4 and text[0] not in LIN_SUITS:
            self._parse_holdings(text.split(), holdings)
        else:
            self._parse_lin(text, holdings)

    def _parse_lin(self, text, holdings):
        """Parse LIN format into suit lists"""
        current_suit = None
        for char in text:
            if char in LIN_SUITS:
                current_suit = LIN_SUITS[char]
            elif char in LETTER_TO_RANK and current_suit is not None:
                holdings[current_suit].append(LETTER_TO_RANK[char])
            elif not char.isspace():
                raise HandError(f"Unexpected {char!r} in hand {text!r}")

    def _parse_holdings(self, parts, holdings):
        """Parse four holdings in spades, hearts, diamonds, clubs order"""
        if len(parts) != 4:
            raise HandError(f"Expected 4 suits, got {len(parts)}")
        for suit, holding in zip(PBN_ORDER, parts):
            holding = holding.strip()
            if holding in ('-', ''):
                continue
            for char in holding:
                if char not in LETTER_TO_RANK:
                    raise HandError(f"Unexpected {char!r} in holding {holding!r}")
                holdings[suit].append(LETTER_TO_RANK[char])

    def _validate(self, holdings):
        for suit, ranks in holdings.items():
            if len(set(ranks)) != len(ranks):
                raise HandError(f"Duplicate card in {SUIT_SYMBOLS[suit]}")
        total = sum(len(ranks) for ranks in holdings.values())
        if total != 13:
            raise HandError(f"A hand holds 13 cards, got {total}")

    # ==================== Shape ====================

    def count_hcp(self):
        """Count high card points (A=4, K=3, Q=2, J=1)"""
        return sum(HCP_VALUES.get(rank, 0) for ranks in self.suits.values() for rank in ranks)

    def get_shape_pattern(self):
        """Get shape pattern sorted by length (e.g., [5,4,2,2])"""
        return sorted((len(ranks) for ranks in self.suits.values()), reverse=True)

    def length(self, suit):
        return len(self.suits[suit])

    @property
    def lengths(self):
        return {suit: len(ranks) for suit, ranks in self.suits.items()}

    def longest_suits(self):
        """Longest suit(s), highest-ranking first"""
        longest = max(self.lengths.values())
        return [suit for suit in reversed(SUITS) if self.length(suit) == longest]

    def longest_suit(self):
        """Longest suit; ties favor the higher-ranking suit"""
        return self.longest_suits()[0]

    def two_longest(self):
        return self.shape[0] + self.shape[1]

    def is_balanced(self, include_5422=False):
        """Check shape against 4-3-3-3, 4-4-3-2, 5-3-3-2 (and optionally 5-4-2-2)"""
        if include_5422 and self.shape == SHAPE_5422:
            return True
        return self.shape in BALANCED_SHAPES

    def is_semi_balanced(self):
        """Check if hand is semi-balanced (includes 5-4-2-2 and 6-3-2-2)"""
        return self.shape in SEMI_BALANCED_SHAPES

    def shortest_suits(self):
        shortest = min(self.lengths.values())
        return [suit for suit in SUITS if self.length(suit) == shortest]

    # ==================== Honors ====================

    def has(self, suit, rank):
        return rank in self.suits[suit]

    def hcp_in(self, suit):
        return sum(HCP_VALUES.get(rank, 0) for rank in self.suits[suit])

    def has_stopper(self, suit):
        """
        Stopper: ace; king with length 2+; queen with the jack or ten and
        length 3+. A bare queen or an unsupported honor never counts.
        """
        ranks = self.suits[suit]
        if Rank.RA in ranks:
            return True
        if Rank.RK in ranks and len(ranks) >= 2:
            return True
        if Rank.RQ in ranks and len(ranks) >= 3 and (Rank.RJ in ranks or Rank.RT in ranks):
            return True
        return False

    def suit_quality(self, suit):
        """Number of the top three honors held"""
        return sum(1 for rank in (Rank.RA, Rank.RK, Rank.RQ) if rank in self.suits[suit])

    @property
    def aces(self):
        return sum(1 for suit in SUITS if Rank.RA in self.suits[suit])

    @property
    def kings(self):
        return sum(1 for suit in SUITS if Rank.RK in self.suits[suit])

    def keycards(self, trump):
        """Roman key cards: four aces plus the trump king"""
        return self.aces + (1 if Rank.RK in self.suits[trump] else 0)

    def has_trump_queen(self, trump):
        return Rank.RQ in self.suits[trump]

    def first_round_control(self, suit):
        """Ace or void"""
        return not self.suits[suit] or Rank.RA in self.suits[suit]

    def second_round_control(self, suit):
        """King or singleton"""
        return Rank.RK in self.suits[suit] or len(self.suits[suit]) == 1

    def quick_tricks(self):
        """Count quick tricks (defensive tricks)"""
        qt = 0
        for cards in self.suits.values():
            if Rank.RA in cards and Rank.RK in cards:
                qt += 2
            elif Rank.RA in cards and Rank.RQ in cards:
                qt += 1.5
            elif Rank.RA in cards:
                qt += 1
            elif Rank.RK in cards and Rank.RQ in cards:
                qt += 1
            elif Rank.RK in cards and len(cards) >= 2:
                qt += 0.5
        return qt

    # ==================== Points ====================

    def distribution_points(self, mode='shortness'):
        """
        Distribution points in one of two modes:
        shortness: void=3, singleton=2, doubleton=1
        length:    one point per card beyond the fourth (display only)
        """
        if mode == 'shortness':
            return sum(SHORTNESS_POINTS.get(length, 0) for length in self.lengths.values())
        if mode == 'length':
            return sum(max(0, length - 4) for length in self.lengths.values())
        raise ValueError(f"Unknown distribution mode: {mode!r}")

    def count_total_points(self):
        """HCP plus shortness points"""
        return self.hcp + self.distribution_points('shortness')

    def support_points(self, trump):
        """HCP plus shortness outside the trump suit, for raising partner"""
        return self.hcp + sum(
            SHORTNESS_POINTS.get(self.length(suit), 0) for suit in SUITS if suit != trump
        )

    # ==================== Formatting ====================

    @property
    def cards(self):
        return [Card(suit=suit, rank=rank) for suit in PBN_ORDER for rank in self.suits[suit]]

    def holding(self, suit):
        return ''.join(RANK_LETTERS[rank] for rank in self.suits[suit])

    def to_pbn(self):
        return '.'.join(self.holding(suit) for suit in PBN_ORDER)

    def to_lin(self):
        return ''.join(f"{letter}{self.holding(suit)}" for letter, suit in LIN_SUITS.items())

    def __str__(self):
        return ' '.join(f"{SUIT_SYMBOLS[suit]}{self.holding(suit) or '-'}" for suit in PBN_ORDER)

    def __repr__(self):
        return f"Hand({self.to_pbn()!r})"
