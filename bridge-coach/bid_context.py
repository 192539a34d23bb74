"""
Auction Views
Seat-relative reading of an auction, computed once per decision

AuctionView answers partnership questions (who opened, what partner bid
last, which suits the opponents hold) for one seat. BidContext adds the hand
and the convention config the engine decides with.
"""

from bridge_types import (
    GAME_LEVEL, PASS, SUITS, Bid, lho_of, partner_of, rho_of, same_side
)
from legality import cheapest_level, is_legal


class AuctionView:
    """An auction seen from one seat"""

    def __init__(self, auction, seat):
        self.auction = auction
        self.seat = seat
        self.partner = partner_of(seat)
        self.lho = lho_of(seat)
        self.rho = rho_of(seat)
        self.calls = auction.calls
        self.my_calls = auction.calls_by(seat)
        self.partner_calls = auction.calls_by(self.partner)
        self.opening = auction.opening()
        self.opener = self.opening.seat if self.opening else None
        self.last_contract = auction.last_contract()
        self.last_action = auction.last_action()

    # ==================== Who did what ====================

    def is_us(self, seat):
        return same_side(seat, self.seat)

    @property
    def we_opened(self):
        return self.opener is not None and self.is_us(self.opener)

    @property
    def they_opened(self):
        return self.opener is not None and not self.is_us(self.opener)

    @property
    def i_opened(self):
        return self.opener == self.seat

    @property
    def partner_opened(self):
        return self.opener == self.partner

    def actions_of(self, seat):
        return [call for call in self.auction.calls_by(seat) if not call.is_pass]

    @property
    def my_actions(self):
        return self.actions_of(self.seat)

    @property
    def partner_actions(self):
        return self.actions_of(self.partner)

    @property
    def our_actions(self):
        return [call for call in self.calls if not call.is_pass and self.is_us(call.seat)]

    @property
    def opponent_actions(self):
        return [call for call in self.calls if not call.is_pass and not self.is_us(call.seat)]

    @property
    def partner_last(self):
        """Partner's most recent call (including Pass), or None"""
        return self.partner_calls[-1] if self.partner_calls else None

    @property
    def rho_last(self):
        calls = self.auction.calls_by(self.rho)
        return calls[-1] if calls else None

    @property
    def my_last(self):
        return self.my_calls[-1] if self.my_calls else None

    def contracts_of(self, seat):
        return [call for call in self.auction.calls_by(seat) if call.is_contract]

    @property
    def partner_contracts(self):
        return self.contracts_of(self.partner)

    @property
    def my_contracts(self):
        return self.contracts_of(self.seat)

    def passed_before_opening(self, seat):
        """`seat` passed when given the chance to open"""
        for call in self.calls:
            if call.is_contract:
                return False
            if call.seat == seat:
                return call.is_pass
        return False

    @property
    def is_passed_hand(self):
        return self.passed_before_opening(self.seat)

    @property
    def opponents_intervened(self):
        return bool(self.opponent_actions)

    @property
    def round(self):
        """Number of calls this seat has already made"""
        return len(self.my_calls)

    def calls_since(self, call):
        """Calls made after `call` (matched by identity)"""
        for index, candidate in enumerate(self.calls):
            if candidate is call:
                return list(self.calls[index + 1:])
        return []

    # ==================== Suits ====================

    def suits_bid_by(self, seat):
        return [call.strain for call in self.contracts_of(seat) if call.strain in SUITS]

    @property
    def partner_suits(self):
        return self.suits_bid_by(self.partner)

    @property
    def my_suits(self):
        return self.suits_bid_by(self.seat)

    @property
    def their_suits(self):
        suits = self.suits_bid_by(self.lho) + self.suits_bid_by(self.rho)
        return list(dict.fromkeys(suits))

    @property
    def their_last_suit(self):
        """Most recent suit named by an opponent"""
        for call in reversed(self.calls):
            if call.is_contract and not self.is_us(call.seat) and call.strain in SUITS:
                return call.strain
        return None

    @property
    def unbid_suits(self):
        named = set()
        for call in self.calls:
            if call.is_contract and call.strain in SUITS:
                named.add(call.strain)
        return [suit for suit in SUITS if suit not in named]

    # ==================== Positions ====================

    @property
    def direct_over_opening(self):
        """RHO opened and nobody has called since"""
        return bool(self.opening) and self.opener == self.rho and self.calls[-1] is self.opening

    @property
    def balancing(self):
        """Pass-out seat: an opposing contract bid followed by two passes"""
        last = self.last_contract
        return (
            last is not None
            and last.seat == self.lho
            and self.auction.trailing_passes() == 2
            and self.auction.doubling.value == ''
        )

    def our_game_reached(self):
        """Our side holds the last contract bid and it is game or higher"""
        last = self.last_contract
        return last is not None and self.is_us(last.seat) and last.level >= GAME_LEVEL[last.strain]

    def auction_at_game(self):
        last = self.last_contract
        return last is not None and last.level >= GAME_LEVEL[last.strain]


class BidContext(AuctionView):
    """Everything one decision needs: the view, the hand and the live config"""

    def __init__(self, auction, hand, seat, config):
        super().__init__(auction, seat)
        self.hand = hand
        self.config = config
        self.hcp = hand.hcp
        self.vulnerable_we, self.vulnerable_they = auction.vulnerable(seat)

    def enabled(self, category, key):
        return self.config.is_enabled(category, key)

    def setting(self, category, key, name, default=None):
        return self.config.setting(category, key, name, default)

    def vul_adjust(self, kind):
        return self.config.vulnerability_adjustment(kind, self.vulnerable_we, self.vulnerable_they)

    @property
    def include_5422(self):
        return bool(self.setting('general', 'balanced_shapes', 'include_5422', False))

    def balanced(self):
        return self.hand.is_balanced(self.include_5422)

    # ==================== Building calls ====================

    def cheapest(self, strain):
        return cheapest_level(self.auction, strain)

    def legal(self, bid):
        return is_legal(self.auction, bid, self.seat)

    def bid(self, level, strain, tag, rationale):
        """A contract call if it is legal here, else None"""
        if level is None or level > 7:
            return None
        bid = Bid.contract(level, strain, seat=self.seat, tag=tag, rationale=rationale)
        return bid if self.legal(bid) else None

    def bid_cheapest(self, strain, tag, rationale, jump=0):
        level = self.cheapest(strain)
        if level is None:
            return None
        return self.bid(level + jump, strain, tag, rationale)

    def call(self, template, tag, rationale):
        """Pass, Double or Redouble if legal here, else None"""
        bid = template.with_seat(self.seat).explained(tag, rationale)
        return bid if self.legal(bid) else None

    def pass_(self, tag, rationale):
        return PASS.with_seat(self.seat).explained(tag, rationale)
