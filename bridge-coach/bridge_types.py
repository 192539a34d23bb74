"""
Bridge Value Types
Seats, strains, vulnerability and calls shared by the auction, the legality
checker and the bidding engine

Seats are endplay Players and strains are endplay Denoms, so the same values
flow from a parsed hand all the way to the engine's output. Letters only
appear at the parse/format edges ('N', 'H', '1NT').
"""

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple

from endplay.types import Denom, Player

from errors import BidError


# ==================== Seats ====================

SEATS = (Player.north, Player.east, Player.south, Player.west)
SEAT_LETTERS = {Player.north: 'N', Player.east: 'E', Player.south: 'S', Player.west: 'W'}
LETTER_TO_SEAT = {letter: seat for seat, letter in SEAT_LETTERS.items()}
SEAT_NAMES = {'NORTH': 'N', 'EAST': 'E', 'SOUTH': 'S', 'WEST': 'W'}


def parse_seat(value):
    """Convert 'N', 'north' or a Player into a Player"""
    if isinstance(value, Player):
        return value
    text = str(value).strip().upper()
    text = SEAT_NAMES.get(text, text)
    if text not in LETTER_TO_SEAT:
        raise ValueError(f"Unknown seat: {value!r}")
    return LETTER_TO_SEAT[text]


def seat_letter(seat):
    return SEAT_LETTERS[seat]


def next_seat(seat, steps=1):
    """Seat `steps` places clockwise from `seat`"""
    return SEATS[(SEATS.index(seat) + steps) % 4]


def partner_of(seat):
    return next_seat(seat, 2)


def lho_of(seat):
    return next_seat(seat, 1)


def rho_of(seat):
    return next_seat(seat, 3)


def side_of(seat):
    """Partnership label: 'NS' or 'EW'"""
    return 'NS' if seat in (Player.north, Player.south) else 'EW'


def same_side(a, b):
    return side_of(a) == side_of(b)


# ==================== Strains ====================

SUITS = (Denom.clubs, Denom.diamonds, Denom.hearts, Denom.spades)  # ascending
STRAINS = SUITS + (Denom.nt,)
MAJORS = (Denom.hearts, Denom.spades)
MINORS = (Denom.clubs, Denom.diamonds)

# Denom's own integer order runs spades first; ranking uses this table
STRAIN_RANK = {strain: index for index, strain in enumerate(STRAINS)}
STRAIN_LETTERS = {
    Denom.clubs: 'C', Denom.diamonds: 'D', Denom.hearts: 'H',
    Denom.spades: 'S', Denom.nt: 'NT'
}
LETTER_TO_STRAIN = {letter: strain for strain, letter in STRAIN_LETTERS.items()}
LETTER_TO_STRAIN['N'] = Denom.nt
SUIT_SYMBOLS = {
    Denom.clubs: '♣', Denom.diamonds: '♦', Denom.hearts: '♥',
    Denom.spades: '♠', Denom.nt: 'NT'
}
SUIT_NAMES = {
    Denom.clubs: 'clubs', Denom.diamonds: 'diamonds', Denom.hearts: 'hearts',
    Denom.spades: 'spades', Denom.nt: 'no-trump'
}

# Lowest level that scores game in each strain
GAME_LEVEL = {
    Denom.clubs: 5, Denom.diamonds: 5, Denom.hearts: 4, Denom.spades: 4, Denom.nt: 3
}


def parse_strain(value):
    """Convert 'H', 'NT', '♥' or a Denom into a Denom"""
    if isinstance(value, Denom):
        return value
    text = str(value).strip().upper()
    for strain, symbol in SUIT_SYMBOLS.items():
        if text == symbol:
            return strain
    if text not in LETTER_TO_STRAIN:
        raise BidError(f"Unknown strain: {value!r}")
    return LETTER_TO_STRAIN[text]


def strain_letter(strain):
    return STRAIN_LETTERS[strain]


def is_major(strain):
    return strain in MAJORS


def is_minor(strain):
    return strain in MINORS


def suits_above(strain):
    """Suits ranking higher than `strain`"""
    return [suit for suit in SUITS if STRAIN_RANK[suit] > STRAIN_RANK[strain]]


# ==================== Vulnerability ====================

@dataclass(frozen=True)
class Vulnerability:
    """Vulnerability of the two partnerships"""
    ns: bool = False
    ew: bool = False

    @classmethod
    def relative_to(cls, seat, we, they):
        """Build from the point of view of `seat`"""
        if side_of(seat) == 'NS':
            return cls(ns=bool(we), ew=bool(they))
        return cls(ns=bool(they), ew=bool(we))

    @classmethod
    def parse(cls, label):
        """Parse 'None', 'NS', 'EW' or 'Both'"""
        text = (label or 'none').strip().upper().replace('-', '')
        if text in ('NONE', 'LOVE', 'O', ''):
            return cls()
        if text == 'NS':
            return cls(ns=True)
        if text == 'EW':
            return cls(ew=True)
        if text in ('BOTH', 'ALL', 'B'):
            return cls(ns=True, ew=True)
        raise ValueError(f"Unknown vulnerability: {label!r}")

    def is_vulnerable(self, seat):
        return self.ns if side_of(seat) == 'NS' else self.ew

    def for_seat(self, seat):
        """(we, they) from the point of view of `seat`"""
        return self.is_vulnerable(seat), self.is_vulnerable(lho_of(seat))

    @property
    def label(self):
        if self.ns and self.ew:
            return 'Both'
        if self.ns:
            return 'NS'
        if self.ew:
            return 'EW'
        return 'None'


# ==================== Calls ====================

class CallKind(Enum):
    CONTRACT = 'contract'
    PASS = 'pass'
    DOUBLE = 'double'
    REDOUBLE = 'redouble'


class Tag(str, Enum):
    """Stable identifier attached to every engine-produced call"""

    # Openings
    OPEN_STRONG_2C = 'open_strong_2c'
    OPEN_STRONG_1C = 'open_strong_1c'
    OPEN_1NT = 'open_1nt'
    OPEN_2NT = 'open_2nt'
    OPEN_WEAK_TWO = 'open_weak_two'
    OPEN_PREEMPT = 'open_preempt'
    OPEN_ONE_SUIT = 'open_one_suit'
    OPEN_PASS = 'open_pass'

    # Strong opening sequences
    WAITING_2D = 'waiting_2d'
    POSITIVE_RESPONSE = 'positive_response'
    STRONG_REBID = 'strong_rebid'
    STRONG_1C_NEGATIVE = 'strong_1c_negative'
    FORCED_CONTINUATION = 'forced_continuation'

    # No-trump structures
    STAYMAN = 'stayman'
    STAYMAN_REPLY = 'stayman_reply'
    JACOBY_TRANSFER = 'jacoby_transfer'
    TEXAS_TRANSFER = 'texas_transfer'
    MINOR_TRANSFER = 'minor_transfer'
    TRANSFER_ACCEPT = 'transfer_accept'
    SUPER_ACCEPT = 'super_accept'
    NT_INVITE = 'nt_invite'
    NT_GAME = 'nt_game'
    NT_QUANTITATIVE = 'nt_quantitative'
    STOLEN_BID_DOUBLE = 'stolen_bid_double'
    LEBENSOHL_RELAY = 'lebensohl_relay'
    LEBENSOHL_CUE = 'lebensohl_cue'
    LEBENSOHL_GAME = 'lebensohl_game'
    RELAY_ACCEPT = 'relay_accept'

    # Slam bidding
    GERBER = 'gerber'
    GERBER_KINGS = 'gerber_kings'
    BLACKWOOD = 'blackwood'
    RKCB = 'rkcb'
    ACE_REPLY = 'ace_reply'
    KEYCARD_REPLY = 'keycard_reply'
    KING_REPLY = 'king_reply'
    SLAM = 'slam'
    SLAM_SIGNOFF = 'slam_signoff'
    CONTROL_CUE = 'control_cue'

    # Raises
    RAISE = 'raise'
    LIMIT_RAISE = 'limit_raise'
    GAME_RAISE = 'game_raise'
    JACOBY_2NT = 'jacoby_2nt'
    JACOBY_2NT_REBID = 'jacoby_2nt_rebid'
    SPLINTER = 'splinter'
    BERGEN = 'bergen'
    DRURY = 'drury'
    DRURY_REPLY = 'drury_reply'
    FEATURE_ASK = 'feature_ask'
    FEATURE_REPLY = 'feature_reply'
    CUE_BID_RAISE = 'cue_bid_raise'
    COMPETITIVE_RAISE = 'competitive_raise'
    JORDAN_2NT = 'jordan_2nt'
    REDOUBLE_VALUES = 'redouble_values'
    ADVANCER_RAISE = 'advancer_raise'

    # Natural continuations
    NEW_SUIT = 'new_suit'
    JUMP_SHIFT = 'jump_shift'
    NT_RESPONSE = 'nt_response'
    REBID_SUIT = 'rebid_suit'
    REBID_NT = 'rebid_nt'
    REVERSE = 'reverse'
    PREFERENCE = 'preference'
    GAME_TRY = 'game_try'
    PLACEMENT = 'placement'

    # Competitive
    NEGATIVE_DOUBLE = 'negative_double'
    RESPONSIVE_DOUBLE = 'responsive_double'
    SUPPORT_DOUBLE = 'support_double'
    SUPPORT_REDOUBLE = 'support_redouble'
    REOPENING_DOUBLE = 'reopening_double'
    TAKEOUT_DOUBLE = 'takeout_double'
    PENALTY_DOUBLE = 'penalty_double'
    MICHAELS = 'michaels'
    UNUSUAL_NT = 'unusual_nt'
    OVERCALL = 'overcall'
    JUMP_OVERCALL = 'jump_overcall'
    NT_OVERCALL = 'nt_overcall'
    FREE_BID = 'free_bid'
    STOPPER_ASK = 'stopper_ask'
    ADVANCE = 'advance'
    DONT = 'dont'
    MECKWELL = 'meckwell'

    # Everything else
    NATURAL = 'natural'
    PASS = 'pass'
    SAFETY_PASS = 'safety_pass'
    PREDICTOR = 'predictor'


BID_PATTERN = re.compile(r'^([1-7])(C|D|H|S|NT|N)$')
PASS_TOKENS = ('P', 'PASS')
DOUBLE_TOKENS = ('X', 'D', 'DBL', 'DOUBLE')
REDOUBLE_TOKENS = ('XX', 'R', 'RDBL', 'REDOUBLE')
SYMBOL_LETTERS = {'♣': 'C', '♦': 'D', '♥': 'H', '♠': 'S'}


@dataclass(frozen=True)
class Bid:
    """
    A call: a contract bid, Pass, Double or Redouble

    Equality and hashing only look at the call itself; the seat, tag and
    rationale travel with the call but do not change what it is.
    """
    kind: CallKind
    level: Optional[int] = None
    strain: Optional[Denom] = None
    seat: Optional[Player] = field(default=None, compare=False)
    tag: Optional[Tag] = field(default=None, compare=False)
    rationale: str = field(default='', compare=False)

    def __post_init__(self):
        if self.kind is CallKind.CONTRACT:
            if not isinstance(self.level, int) or not 1 <= self.level <= 7:
                raise BidError(f"Bid level must be 1-7, got {self.level!r}")
            if self.strain not in STRAIN_RANK:
                raise BidError(f"Unknown strain: {self.strain!r}")
        elif self.level is not None or self.strain is not None:
            raise BidError(f"{self.kind.value} takes no level or strain")

    @classmethod
    def contract(cls, level, strain, **extra):
        return cls(CallKind.CONTRACT, level, parse_strain(strain), **extra)

    @classmethod
    def pass_(cls, **extra):
        return cls(CallKind.PASS, **extra)

    @classmethod
    def double(cls, **extra):
        return cls(CallKind.DOUBLE, **extra)

    @classmethod
    def redouble(cls, **extra):
        return cls(CallKind.REDOUBLE, **extra)

    @property
    def is_contract(self):
        return self.kind is CallKind.CONTRACT

    @property
    def is_pass(self):
        return self.kind is CallKind.PASS

    @property
    def is_double(self):
        return self.kind is CallKind.DOUBLE

    @property
    def is_redouble(self):
        return self.kind is CallKind.REDOUBLE

    @property
    def token(self):
        """Canonical token: '1C'..'7NT', 'PASS', 'X', 'XX'"""
        if self.is_contract:
            return f"{self.level}{STRAIN_LETTERS[self.strain]}"
        return {CallKind.PASS: 'PASS', CallKind.DOUBLE: 'X', CallKind.REDOUBLE: 'XX'}[self.kind]

    @property
    def rank(self) -> Tuple[int, int]:
        """Ordering key for contract bids (level, strain rank)"""
        if not self.is_contract:
            raise BidError(f"{self.token} has no rank")
        return (self.level, STRAIN_RANK[self.strain])

    def outranks(self, other):
        """True if this contract bid is higher than `other` (None counts as lowest)"""
        if other is None:
            return self.is_contract
        return self.is_contract and self.rank > other.rank

    def is_game(self):
        return self.is_contract and self.level >= GAME_LEVEL[self.strain]

    def with_seat(self, seat):
        return replace(self, seat=seat)

    def explained(self, tag, rationale):
        """Copy of this call carrying a tag and rationale"""
        return replace(self, tag=tag, rationale=rationale)

    def __str__(self):
        return self.token


PASS = Bid(CallKind.PASS)
DOUBLE = Bid(CallKind.DOUBLE)
REDOUBLE = Bid(CallKind.REDOUBLE)


def parse_bid(value):
    """
    Parse a call token ('1H', '3NT', '1N', 'P', 'PASS', 'X', 'XX', '2♠')

    Raises BidError for anything that is not a call.
    """
    if isinstance(value, Bid):
        return value
    if not isinstance(value, str):
        raise BidError(f"Cannot parse bid from {value!r}")
    text = value.strip().upper().replace(' ', '')
    for symbol, letter in SYMBOL_LETTERS.items():
        text = text.replace(symbol, letter)
    if text in PASS_TOKENS:
        return PASS
    if text in DOUBLE_TOKENS:
        return DOUBLE
    if text in REDOUBLE_TOKENS:
        return REDOUBLE
    match = BID_PATTERN.match(text)
    if not match:
        raise BidError(f"Malformed bid: {value!r}")
    return Bid.contract(int(match.group(1)), LETTER_TO_STRAIN[match.group(2)])


def bid_label(bid):
    """Display label with suit symbols, e.g. '2♥'"""
    if bid.is_contract:
        return f"{bid.level}{SUIT_SYMBOLS[bid.strain]}"
    return {CallKind.PASS: 'Pass', CallKind.DOUBLE: 'Double', CallKind.REDOUBLE: 'Redouble'}[bid.kind]
