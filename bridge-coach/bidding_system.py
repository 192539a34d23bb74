"""
Standard American Bidding Engine
Decision cascade for the next call of one seat

Layers, first match wins:
1. Forced continuation  - a forcing sequence is active below game
2. Direct defense       - DONT / Meckwell against 1NT or a strong 1C
3. Opening bid          - nobody has bid yet
4. Response to partner  - partner's last call was a contract bid
5. Competitive action   - doubles, overcalls, cue-bids against opponents
6. Natural fallback     - longest biddable suit, else Pass

Every call is read fresh from (auction, hand, seat, config); the engine keeps
no state between decisions.
"""

import logging
from dataclasses import dataclass

from endplay.types import Denom

from bid_context import BidContext
from bridge_types import (
    DOUBLE, MAJORS, PASS, SUITS, SUIT_SYMBOLS, Tag, seat_letter
)
from competitive import CompetitiveRules
from convention_config import ConventionConfig
from conventions import (
    call_meaning, call_recognition, defense_system, opposing_strong_opening
)
from legality import ensure_legal
from responses import ResponseRules
from slam import SlamRules

logger = logging.getLogger(__name__)

# Partner's calls that oblige us to bid once more (when RHO stays silent)
ONE_ROUND_FORCES = {
    Tag.STAYMAN, Tag.JACOBY_TRANSFER, Tag.TEXAS_TRANSFER, Tag.MINOR_TRANSFER,
    Tag.LEBENSOHL_RELAY, Tag.GERBER, Tag.GERBER_KINGS, Tag.BLACKWOOD, Tag.RKCB,
    Tag.FEATURE_ASK, Tag.DRURY, Tag.CUE_BID_RAISE, Tag.SPLINTER, Tag.BERGEN,
    Tag.JORDAN_2NT, Tag.CONTROL_CUE, Tag.STOPPER_ASK, Tag.REVERSE,
    Tag.TAKEOUT_DOUBLE, Tag.NEGATIVE_DOUBLE, Tag.RESPONSIVE_DOUBLE,
    Tag.REOPENING_DOUBLE, Tag.STOLEN_BID_DOUBLE, Tag.MICHAELS, Tag.UNUSUAL_NT,
    Tag.OPEN_STRONG_1C,
}
# Two-suiter calls of DONT / Meckwell are pass-or-correct; their doubles are relays
DEFENSE_RELAYS = {Tag.DONT, Tag.MECKWELL}

MIN_FALLBACK_HCP = 6


@dataclass(frozen=True)
class ForcingState:
    name: str
    game_forcing: bool


class BiddingEngine(ResponseRules, CompetitiveRules, SlamRules):
    """
    Standard American engine with configurable conventions

    decide() returns a seated Bid carrying a Tag and a rationale, or None
    when the engine has nothing to offer (the auction is over, or partner's
    latest rebid is past the point its rules cover).
    """

    def decide(self, auction, hand, seat=None, config=None):
        """Next call for `seat` (default: the seat to act)"""
        config = config if config is not None else ConventionConfig()
        seat = seat if seat is not None else auction.next_seat
        if auction.is_complete:
            logger.debug("Auction complete, nothing to decide")
            return None
        if seat != auction.next_seat:
            logger.debug("%s is not on turn", seat_letter(seat))
            return None
        try:
            ctx = BidContext(auction, hand, seat, config)
            bid = self._cascade(ctx)
        except Exception:
            logger.exception("Bidding rules failed for %s after %s", seat_letter(seat), auction.tokens())
            return PASS.with_seat(seat).explained(Tag.SAFETY_PASS, "Pass (no safe call found)")
        if bid is None:
            return None
        return ensure_legal(auction, bid, seat)

    def get_recommendation(self, auction, hand, config=None):
        """(token, reasoning) for the seat on turn"""
        bid = self.decide(auction, hand, config=config)
        if bid is None:
            return None, "No recommendation"
        return bid.token, bid.rationale

    # ==================== Cascade ====================

    def _cascade(self, ctx):
        layers = (
            ('forced continuation', self._forced_continuation),
            ('direct defense', self._direct_defense),
            ('opening', self._opening_bid),
            ('response', self._respond_to_partner),
            ('competitive', self._competitive),
        )
        for name, layer in layers:
            bid = layer(ctx)
            if bid is not None:
                logger.debug("%s layer: %s (%s)", name, bid.token, bid.rationale)
                return bid
        if self._rules_exhausted(ctx):
            logger.debug("No rule covers partner's %s, deferring", ctx.partner_last.token)
            return None
        return self._natural_fallback(ctx)

    def _rules_exhausted(self, ctx):
        """
        Partner's latest call is a live contract call past the first round
        that no layer answered, with game not yet reached
        """
        partner_last = ctx.partner_last
        return partner_last is not None and partner_last.is_contract \
            and ctx.last_action is partner_last and len(ctx.partner_actions) >= 2 \
            and not ctx.our_game_reached()

    def meaning_of(self, ctx, call):
        return call_meaning(ctx.config, ctx, call)

    def recognition_of(self, ctx, call):
        return call_recognition(ctx.config, ctx, call)

    # ==================== Layer 1: forcing ====================

    def forcing_state(self, ctx):
        """Forcing obligation on this seat, or None"""
        if ctx.our_game_reached():
            return None
        opening = ctx.opening
        if opening is None:
            return None

        if ctx.we_opened and opening.token == '2C' and ctx.enabled('opening_bids', 'strong_2_clubs'):
            opener_calls = ctx.actions_of(opening.seat)
            responder = ctx.partner if ctx.i_opened else ctx.seat
            responder_calls = ctx.actions_of(responder)
            # 2C-2D-2NT shows a balanced 22-24 and may be passed
            if len(opener_calls) == 2 and opener_calls[1].token == '2NT' \
                    and responder_calls and responder_calls[0].token == '2D' \
                    and ctx.last_action is opener_calls[1]:
                return None
            return ForcingState('strong 2♣', True)

        for call in ctx.our_actions:
            if self.meaning_of(ctx, call) in (Tag.JACOBY_2NT, Tag.JUMP_SHIFT):
                return ForcingState('game-forcing raise', True)

        partner_last = ctx.partner_last
        if partner_last is None or partner_last.is_pass or ctx.last_action is not partner_last:
            return None
        meaning = self.meaning_of(ctx, partner_last)
        if meaning in ONE_ROUND_FORCES:
            return ForcingState(meaning.value, False)
        if meaning in DEFENSE_RELAYS and partner_last.is_double:
            return ForcingState('defense relay', False)
        if meaning == Tag.NEW_SUIT and ctx.i_opened and len(ctx.partner_actions) == 1 \
                and not ctx.passed_before_opening(ctx.partner):
            return ForcingState('new suit by responder', False)
        if meaning == Tag.WAITING_2D:
            return ForcingState('strong 2♣', True)
        return None

    def _forced_continuation(self, ctx):
        state = self.forcing_state(ctx)
        if state is None:
            return None
        bid = self._respond_to_partner(ctx)
        if bid is None or bid.is_pass:
            bid = self._competitive(ctx)
        if bid is not None and not bid.is_pass:
            return bid
        return self._cheapest_continuation(ctx, state)

    def _cheapest_continuation(self, ctx, state):
        """Cheapest descriptive non-pass call: support, long suit, no-trump, own suit, Double"""
        hand = ctx.hand
        rationale_tail = f"forced by {state.name}, {ctx.hcp} HCP"
        for suit in reversed(ctx.partner_suits):
            if hand.length(suit) >= 3:
                bid = ctx.bid_cheapest(suit, Tag.FORCED_CONTINUATION,
                                       f"{SUIT_SYMBOLS[suit]} support ({rationale_tail})")
                if bid:
                    return bid
        for suit in sorted(SUITS, key=hand.length, reverse=True):
            if hand.length(suit) >= 5 and suit not in ctx.their_suits:
                bid = ctx.bid_cheapest(suit, Tag.FORCED_CONTINUATION,
                                       f"{hand.length(suit)}-card {SUIT_SYMBOLS[suit]} ({rationale_tail})")
                if bid:
                    return bid
        if all(hand.has_stopper(suit) for suit in ctx.their_suits):
            bid = ctx.bid_cheapest(Denom.nt, Tag.FORCED_CONTINUATION, f"No-trump ({rationale_tail})")
            if bid:
                return bid
        for suit in [hand.longest_suit()] + list(reversed(SUITS)):
            bid = ctx.bid_cheapest(suit, Tag.FORCED_CONTINUATION,
                                   f"Cheapest continuation ({rationale_tail})")
            if bid:
                return bid
        bid = ctx.call(DOUBLE, Tag.FORCED_CONTINUATION, f"Double ({rationale_tail})")
        if bid:
            return bid
        return ctx.pass_(Tag.SAFETY_PASS, "Pass (no call above the current contract)")

    # ==================== Layer 2: direct defense ====================

    def _direct_defense(self, ctx):
        category = opposing_strong_opening(ctx.config, ctx)
        if category is None:
            return None
        system = defense_system(ctx.config, category)
        if system is None:
            return None
        name = 'DONT' if system == 'dont' else 'Meckwell'
        min_hcp = int(ctx.setting(category, system, 'min_hcp', 8)) + ctx.vul_adjust('overcall')
        if ctx.hcp < min_hcp:
            logger.debug("Below the %s minimum (%d HCP)", name, ctx.hcp)
            return None
        bid = self._dont(ctx) if system == 'dont' else self._meckwell(ctx)
        if bid is None:
            # Natural overcalls and Pass are left to the competitive layer
            logger.debug("No %s call fits", name)
        return bid

    def _one_suiter(self, hand, min_length=6):
        """The long suit of a one-suited hand (no side four-card suit), or None"""
        longest = hand.longest_suit()
        if hand.length(longest) < min_length:
            return None
        if any(hand.length(suit) >= 4 for suit in SUITS if suit != longest):
            return None
        return longest

    def _two_suits(self, hand):
        """(lower, higher) for a 5-4 or better two-suiter, or None"""
        long_suits = [suit for suit in SUITS if hand.length(suit) >= 4]
        if len(long_suits) != 2:
            return None
        if max(hand.length(suit) for suit in long_suits) < 5:
            return None
        return long_suits[0], long_suits[1]

    def _dont(self, ctx):
        hand = ctx.hand
        single = self._one_suiter(hand)
        if single == Denom.spades:
            return ctx.bid(2, Denom.spades, Tag.DONT, f"DONT 2♠: long spades ({ctx.hcp} HCP)")
        if single is not None:
            return ctx.call(DOUBLE, Tag.DONT,
                            f"DONT double: one long suit ({SUIT_SYMBOLS[single]}, {ctx.hcp} HCP)")
        pair = self._two_suits(hand)
        if pair is None:
            return None
        lower, higher = pair
        if lower == Denom.hearts:
            return ctx.bid(2, Denom.hearts, Tag.DONT, f"DONT 2♥: hearts and spades ({ctx.hcp} HCP)")
        return ctx.bid(2, lower, Tag.DONT,
                       f"DONT 2{SUIT_SYMBOLS[lower]}: {SUIT_SYMBOLS[lower]} and {SUIT_SYMBOLS[higher]} ({ctx.hcp} HCP)")

    def _meckwell(self, ctx):
        hand = ctx.hand
        clubs, diamonds = hand.length(Denom.clubs), hand.length(Denom.diamonds)
        hearts, spades = hand.length(Denom.hearts), hand.length(Denom.spades)
        if clubs >= 5 and diamonds >= 5:
            return ctx.bid(2, Denom.nt, Tag.MECKWELL, f"Meckwell 2NT: both minors ({ctx.hcp} HCP)")
        single = self._one_suiter(hand)
        if single in MAJORS:
            return ctx.bid(2, single, Tag.MECKWELL,
                           f"Meckwell 2{SUIT_SYMBOLS[single]}: long {SUIT_SYMBOLS[single]} ({ctx.hcp} HCP)")
        for minor in (Denom.clubs, Denom.diamonds):
            if hand.length(minor) >= 5 and max(hearts, spades) >= 4:
                return ctx.bid(2, minor, Tag.MECKWELL,
                               f"Meckwell 2{SUIT_SYMBOLS[minor]}: {SUIT_SYMBOLS[minor]} and a major ({ctx.hcp} HCP)")
        if hearts >= 4 and spades >= 4 and max(hearts, spades) >= 5:
            return ctx.call(DOUBLE, Tag.MECKWELL, f"Meckwell double: both majors ({ctx.hcp} HCP)")
        if single is not None:
            return ctx.call(DOUBLE, Tag.MECKWELL,
                            f"Meckwell double: long {SUIT_SYMBOLS[single]} ({ctx.hcp} HCP)")
        return None

    # ==================== Layer 3: opening ====================

    def _opening_bid(self, ctx):
        """Determine opening bid"""
        if ctx.last_contract is not None:
            return None
        hand = ctx.hand
        hcp = ctx.hcp

        # Artificial strong openings
        if ctx.enabled('opening_bids', 'strong_2_clubs') \
                and hcp >= int(ctx.setting('opening_bids', 'strong_2_clubs', 'min_hcp', 22)):
            return ctx.bid(2, Denom.clubs, Tag.OPEN_STRONG_2C, f"2♣ Strong artificial ({hcp} HCP)")
        if ctx.enabled('opening_bids', 'strong_1_club') \
                and hcp >= int(ctx.setting('opening_bids', 'strong_1_club', 'min_hcp', 16)):
            return ctx.bid(1, Denom.clubs, Tag.OPEN_STRONG_1C, f"1♣ Strong artificial ({hcp} HCP)")

        # Balanced no-trump ranges
        if ctx.balanced():
            low, high = ctx.config.range('general', 'one_notrump_range', 'range', (15, 17))
            if low <= hcp <= high:
                return ctx.bid(1, Denom.nt, Tag.OPEN_1NT, f"1NT balanced ({hcp} HCP)")
            low, high = ctx.config.range('general', 'two_notrump_range', 'range', (20, 21))
            if low <= hcp <= high:
                return ctx.bid(2, Denom.nt, Tag.OPEN_2NT, f"2NT balanced ({hcp} HCP)")

        preempt = self._preempt(ctx)
        if preempt is not None:
            return preempt

        # Rule of 20
        if hcp + hand.two_longest() >= 20:
            suit = hand.longest_suit()
            return ctx.bid(1, suit, Tag.OPEN_ONE_SUIT,
                           f"1{SUIT_SYMBOLS[suit]} ({hand.length(suit)}-card suit, {hcp} HCP, rule of 20)")

        return ctx.pass_(Tag.OPEN_PASS, f"Pass (insufficient values, {hcp} HCP)")

    def _preempt(self, ctx):
        hand = ctx.hand
        hcp = ctx.hcp
        if ctx.enabled('preempts', 'weak_two'):
            low = int(ctx.setting('preempts', 'weak_two', 'min_hcp', 6)) + ctx.vul_adjust('weak_two')
            high = int(ctx.setting('preempts', 'weak_two', 'max_hcp', 10))
            if low <= hcp <= high:
                for suit in (Denom.spades, Denom.hearts, Denom.diamonds):
                    if hand.length(suit) == 6 and hand.suit_quality(suit) >= 1:
                        return ctx.bid(2, suit, Tag.OPEN_WEAK_TWO,
                                       f"Weak 2{SUIT_SYMBOLS[suit]} (6-card suit, {hcp} HCP)")
        if ctx.enabled('preempts', 'three_level'):
            low = int(ctx.setting('preempts', 'three_level', 'min_hcp', 5)) + ctx.vul_adjust('preempt')
            high = int(ctx.setting('preempts', 'three_level', 'max_hcp', 10))
            if low <= hcp <= high:
                suit = hand.longest_suit()
                length = hand.length(suit)
                if length >= 8 and suit in MAJORS:
                    return ctx.bid(4, suit, Tag.OPEN_PREEMPT,
                                   f"Preemptive 4{SUIT_SYMBOLS[suit]} ({length}-card suit, {hcp} HCP)")
                if length >= 7 and hand.suit_quality(suit) >= 1:
                    return ctx.bid(3, suit, Tag.OPEN_PREEMPT,
                                   f"Preemptive 3{SUIT_SYMBOLS[suit]} ({length}-card suit, {hcp} HCP)")
        return None

    # ==================== Layer 6: fallback ====================

    def _natural_fallback(self, ctx):
        """Longest suit meeting the length for its level, else Pass"""
        hand = ctx.hand
        if ctx.hcp >= MIN_FALLBACK_HCP:
            for suit in sorted(SUITS, key=hand.length, reverse=True):
                if suit in ctx.their_suits:
                    continue
                level = ctx.cheapest(suit)
                if level is None:
                    continue
                needed = 4 if level == 1 else 5
                if hand.length(suit) >= needed:
                    bid = ctx.bid(level, suit, Tag.NATURAL,
                                  f"{level}{SUIT_SYMBOLS[suit]} natural ({hand.length(suit)} cards, {ctx.hcp} HCP)")
                    if bid:
                        return bid
        return ctx.pass_(Tag.PASS, f"Pass (no suitable call, {ctx.hcp} HCP)")
