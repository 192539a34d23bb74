"""
Auction State Machine
Append-only sequence of seated calls with dealer, turn rotation and
vulnerability

States: OPEN (no contract bid yet) -> CONTESTED (a contract bid exists,
undoubled/doubled/redoubled) -> ENDED (three passes after a contract bid,
or four passes with none).
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum

from endplay.types import Player

from bridge_types import (
    SUIT_SYMBOLS, Vulnerability, lho_of, next_seat, parse_bid, parse_seat,
    partner_of, rho_of, same_side, seat_letter, strain_letter
)
from errors import AuctionError, IllegalCallError
import legality

logger = logging.getLogger(__name__)


class AuctionPhase(Enum):
    OPEN = 'open'
    CONTESTED = 'contested'
    ENDED = 'ended'


class Doubling(Enum):
    UNDOUBLED = ''
    DOUBLED = 'X'
    REDOUBLED = 'XX'


@dataclass(frozen=True)
class Contract:
    """Final contract of a completed auction"""
    level: int
    strain: object
    doubling: Doubling
    declarer: Player

    @property
    def token(self):
        return f"{self.level}{strain_letter(self.strain)}{self.doubling.value}"

    def __str__(self):
        return f"{self.level}{SUIT_SYMBOLS[self.strain]}{self.doubling.value} by {seat_letter(self.declarer)}"


class Auction:
    """
    Ordered list of seated calls

    Seats are assigned once, at append time, from the dealer and the
    rotation. `our_seat` anchors the we/they point of view.
    """

    def __init__(self, dealer=Player.north, our_seat=None, vulnerability=None, calls=()):
        self.dealer = parse_seat(dealer)
        self.our_seat = parse_seat(our_seat) if our_seat is not None else self.dealer
        self.vulnerability = vulnerability or Vulnerability()
        self._calls = []
        for call in calls:
            self.append(call)

    @classmethod
    def from_tokens(cls, tokens, dealer='N', our_seat=None, vulnerability=None):
        """Build an auction from call tokens, e.g. ['1H', 'PASS', '2H']"""
        return cls(dealer=dealer, our_seat=our_seat, vulnerability=vulnerability, calls=tokens)

    # ==================== Mutation ====================

    def append(self, call, seat=None):
        """
        Append the next call

        The seat is derived from the rotation; a supplied seat (argument or
        already on the Bid) must match it.
        """
        bid = parse_bid(call)
        if self.is_complete:
            raise AuctionError(f"Auction is over, cannot add {bid.token}")
        expected = self.next_seat
        for claimed in (seat, bid.seat):
            if claimed is not None and parse_seat(claimed) != expected:
                raise AuctionError(
                    f"{seat_letter(parse_seat(claimed))} bid out of turn, "
                    f"{seat_letter(expected)} to call"
                )
        if not legality.is_legal(self, bid, expected):
            raise IllegalCallError(f"{bid.token} by {seat_letter(expected)} is not legal here")
        seated = bid.with_seat(expected)
        self._calls.append(seated)
        logger.debug("%s: %s", seat_letter(expected), seated.token)
        return seated

    def reseat(self, dealer, our_seat=None):
        """Same calls replayed from a different dealer, as a new auction"""
        return Auction(
            dealer=dealer,
            our_seat=our_seat if our_seat is not None else self.our_seat,
            vulnerability=self.vulnerability,
            calls=[replace(call, seat=None) for call in self._calls]
        )

    def snapshot(self):
        """Independent copy that later appends will not touch"""
        return self.reseat(self.dealer)

    # ==================== Queries ====================

    @property
    def calls(self):
        return tuple(self._calls)

    def __len__(self):
        return len(self._calls)

    def __iter__(self):
        return iter(self._calls)

    def __getitem__(self, index):
        return self._calls[index]

    @property
    def turn_index(self):
        return len(self._calls)

    @property
    def next_seat(self):
        return next_seat(self.dealer, len(self._calls))

    def tokens(self):
        return [call.token for call in self._calls]

    def last_contract(self):
        """Last contract bid (seated), or None"""
        for call in reversed(self._calls):
            if call.is_contract:
                return call
        return None

    def last_contract_seat(self):
        last = self.last_contract()
        return last.seat if last else None

    def last_action(self):
        """Last call that was not a Pass"""
        for call in reversed(self._calls):
            if not call.is_pass:
                return call
        return None

    def last_side(self, seat=None):
        """'we' or 'they' for the side that made the last contract bid"""
        last = self.last_contract()
        if last is None:
            return None
        seat = seat if seat is not None else self.our_seat
        return 'we' if same_side(last.seat, seat) else 'they'

    @property
    def doubling(self):
        """Doubling state of the last contract bid"""
        state = Doubling.UNDOUBLED
        for call in reversed(self._calls):
            if call.is_contract:
                break
            if call.is_redouble:
                return Doubling.REDOUBLED
            if call.is_double:
                state = Doubling.DOUBLED
        return state

    def trailing_passes(self):
        count = 0
        for call in reversed(self._calls):
            if not call.is_pass:
                break
            count += 1
        return count

    @property
    def is_complete(self):
        """Three passes after a contract bid, or four passes with none"""
        if self.last_contract() is None:
            return len(self._calls) >= 4 and self.trailing_passes() >= 4
        return self.trailing_passes() >= 3

    @property
    def is_passed_out(self):
        return self.is_complete and self.last_contract() is None

    @property
    def phase(self):
        if self.is_complete:
            return AuctionPhase.ENDED
        if self.last_contract() is None:
            return AuctionPhase.OPEN
        return AuctionPhase.CONTESTED

    def opening(self):
        """First contract bid (seated), or None"""
        for call in self._calls:
            if call.is_contract:
                return call
        return None

    def calls_by(self, seat):
        return [call for call in self._calls if call.seat == seat]

    def last_call_by(self, seat):
        calls = self.calls_by(seat)
        return calls[-1] if calls else None

    def actions_by_side(self, seat):
        """Non-pass calls made by `seat` and its partner"""
        return [call for call in self._calls if not call.is_pass and same_side(call.seat, seat)]

    def is_legal(self, bid, seat=None):
        return legality.is_legal(self, bid, seat)

    def vulnerable(self, seat):
        """(we, they) vulnerability from the point of view of `seat`"""
        return self.vulnerability.for_seat(seat)

    def declarer(self):
        """First player of the declaring side to name the final strain"""
        last = self.last_contract()
        if last is None:
            return None
        for call in self._calls:
            if call.is_contract and call.strain == last.strain and same_side(call.seat, last.seat):
                return call.seat
        return last.seat

    def final_contract(self):
        """Contract of a completed auction; None while live or when passed out"""
        if not self.is_complete:
            return None
        last = self.last_contract()
        if last is None:
            return None
        return Contract(last.level, last.strain, self.doubling, self.declarer())

    # Seat helpers relative to the acting seat

    def partner_of(self, seat):
        return partner_of(seat)

    def lho_of(self, seat):
        return lho_of(seat)

    def rho_of(self, seat):
        return rho_of(seat)

    def to_dict(self):
        """JSON-friendly view of the auction"""
        contract = self.final_contract()
        return {
            'dealer': seat_letter(self.dealer),
            'our_seat': seat_letter(self.our_seat),
            'vulnerability': self.vulnerability.label,
            'calls': [
                {
                    'seat': seat_letter(call.seat),
                    'call': call.token,
                    'tag': call.tag.value if call.tag else None,
                    'rationale': call.rationale
                }
                for call in self._calls
            ],
            'phase': self.phase.value,
            'next_seat': None if self.is_complete else seat_letter(self.next_seat),
            'contract': contract.token if contract else None,
            'declarer': seat_letter(contract.declarer) if contract else None
        }

    def __repr__(self):
        return f"Auction(dealer={seat_letter(self.dealer)}, calls={self.tokens()})"
