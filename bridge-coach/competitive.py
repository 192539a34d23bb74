"""
Competitive Bidding
Doubles, overcalls and free bids once the opponents are in the auction
"""

import logging

from endplay.types import Denom

from bridge_types import DOUBLE, MAJORS, MINORS, REDOUBLE, SUITS, SUIT_SYMBOLS, Tag
from conventions import classify_double, two_suited

logger = logging.getLogger(__name__)

# Minimum HCP for a negative double, by the level of the overcall
NEGATIVE_DOUBLE_HCP = {1: 6, 2: 8, 3: 10}
TAKEOUT_DOUBLE_HCP = 12
STRONG_DOUBLE_HCP = 18
REOPENING_DOUBLE_HCP = 8
ADVANCE_DOUBLE_TAGS = (Tag.TAKEOUT_DOUBLE, Tag.REOPENING_DOUBLE)
PARTNER_DOUBLE_TAGS = (Tag.TAKEOUT_DOUBLE, Tag.REOPENING_DOUBLE, Tag.NEGATIVE_DOUBLE, Tag.RESPONSIVE_DOUBLE)


def _sym(strain):
    return SUIT_SYMBOLS[strain]


class CompetitiveRules:
    """Competitive layer mixed into the engine"""

    def _competitive(self, ctx):
        if ctx.last_contract is None:
            return None
        steps = (
            self._answer_partner_double,
            self._double_action,
            self._two_suited_overcall,
            self._overcall,
            self._free_bid,
        )
        for step in steps:
            bid = step(ctx)
            if bid is not None:
                return bid
        return None

    # ==================== Doubles ====================

    def _double_action(self, ctx):
        """Double (or support redouble) when the hand fits what the double would mean"""
        last = ctx.last_contract
        if ctx.is_us(last.seat) and not (ctx.rho_last is not None and ctx.rho_last.is_double):
            return None
        recognition = classify_double(ctx.config, ctx)
        if recognition is None:
            return None
        tag = recognition.tag
        logger.debug("A double here would be %s", tag.value)
        hand = ctx.hand
        hcp = ctx.hcp

        if tag in (Tag.SUPPORT_DOUBLE, Tag.SUPPORT_REDOUBLE):
            suit = ctx.partner_actions[0].strain
            if hand.length(suit) == 3:
                template = REDOUBLE if tag == Tag.SUPPORT_REDOUBLE else DOUBLE
                return ctx.call(template, tag, f"{recognition.meaning.split(':')[0]} (three {_sym(suit)})")
            return None
        if ctx.is_us(last.seat):
            return None

        if tag == Tag.NEGATIVE_DOUBLE:
            needed = NEGATIVE_DOUBLE_HCP.get(last.level, 12)
            if hcp < needed or not self._shows_unbid_suits(ctx):
                return None
            return ctx.call(DOUBLE, tag, f"Negative double ({hcp} HCP, {self._unbid_text(ctx)})")

        if tag == Tag.RESPONSIVE_DOUBLE:
            needed = int(ctx.setting('competitive', 'responsive_doubles', 'min_strength', 8))
            unbid = self._unbid(ctx)
            if hcp < needed or any(hand.length(suit) >= 5 for suit in unbid):
                return None
            if sum(1 for suit in unbid if hand.length(suit) >= 4) < 2:
                return None
            return ctx.call(DOUBLE, tag, f"Responsive double ({hcp} HCP, {self._unbid_text(ctx)})")

        if tag == Tag.REOPENING_DOUBLE:
            their = last.strain
            if their not in SUITS or hand.length(their) > 2:
                return None
            if ctx.i_opened:
                mine = ctx.opening.strain
                if hcp < 15 or (mine in SUITS and hand.length(mine) >= 6):
                    return None
            elif hcp < REOPENING_DOUBLE_HCP:
                return None
            others = [suit for suit in SUITS if suit not in ctx.their_suits and suit not in ctx.my_suits]
            if sum(1 for suit in others if hand.length(suit) >= 3) < 2:
                return None
            return ctx.call(DOUBLE, tag, f"Reopening double ({hcp} HCP, short in {_sym(their)})")

        if tag == Tag.TAKEOUT_DOUBLE:
            return self._takeout_double(ctx)

        if tag == Tag.PENALTY_DOUBLE:
            return self._penalty_double(ctx)
        return None

    def _takeout_double(self, ctx):
        hand = ctx.hand
        hcp = ctx.hcp
        relaxed = ctx.setting('competitive', 'takeout_doubles', 'relaxed', False)
        minimum = TAKEOUT_DOUBLE_HCP - (1 if relaxed else 0)
        their = ctx.their_suits
        unbid = self._unbid(ctx)
        if hcp >= STRONG_DOUBLE_HCP:
            return ctx.call(DOUBLE, Tag.TAKEOUT_DOUBLE, f"Takeout double (too strong to overcall, {hcp} HCP)")
        if hcp < minimum:
            return None
        if self._nt_overcall_candidate(ctx):
            return None
        if hcp <= 16 and any(hand.length(suit) >= 5 for suit in unbid):
            return None
        if any(hand.length(suit) > 2 for suit in their):
            return None
        if any(hand.length(suit) < 3 for suit in unbid):
            return None
        return ctx.call(DOUBLE, Tag.TAKEOUT_DOUBLE,
                        f"Takeout double ({hcp} HCP, support for the unbid suits)")

    def _penalty_double(self, ctx):
        """Double their suit contract at the 3-level or higher with trump length and defense"""
        last = ctx.last_contract
        hand = ctx.hand
        if last.strain not in SUITS or last.level < 3 or not ctx.partner_actions:
            return None
        if hand.length(last.strain) >= 4 and hand.suit_quality(last.strain) >= 2 and ctx.hcp >= 10:
            return ctx.call(DOUBLE, Tag.PENALTY_DOUBLE,
                            f"Penalty double ({hand.length(last.strain)} {_sym(last.strain)}, {ctx.hcp} HCP)")
        return None

    def _unbid(self, ctx):
        named = set(ctx.their_suits) | set(ctx.partner_suits) | set(ctx.my_suits)
        return [suit for suit in SUITS if suit not in named]

    def _unbid_text(self, ctx):
        return ', '.join(_sym(suit) for suit in self._unbid(ctx)) or 'values'

    def _shows_unbid_suits(self, ctx):
        """Negative double shape: four cards in the unbid major(s), else both unbid minors"""
        hand = ctx.hand
        unbid = self._unbid(ctx)
        majors = [suit for suit in unbid if suit in MAJORS]
        if majors:
            # A five-card major at the one level is bid, not doubled
            for major in majors:
                if hand.length(major) >= 5 and ctx.cheapest(major) == 1:
                    return False
            return all(hand.length(major) >= 4 for major in majors) or \
                (len(majors) == 1 and hand.length(majors[0]) >= 4)
        minors = [suit for suit in unbid if suit in MINORS]
        return bool(minors) and all(hand.length(minor) >= 4 for minor in minors)

    def _nt_overcall_candidate(self, ctx):
        their = ctx.their_suits
        return ctx.direct_over_opening and ctx.balanced() and 15 <= ctx.hcp <= 18 \
            and all(ctx.hand.has_stopper(suit) for suit in their)

    # ==================== Overcalls ====================

    def _overcall_position(self, ctx):
        return ctx.they_opened and not ctx.my_actions and not ctx.partner_actions

    def _two_suited_overcall(self, ctx):
        """Michaels cue-bid or Unusual 2NT with a 5-5 hand"""
        if not self._overcall_position(ctx) or ctx.opening.strain not in SUITS:
            return None
        opening = ctx.opening
        hand = ctx.hand
        hcp = ctx.hcp
        strength = ctx.setting('competitive', 'michaels', 'strength', 'wide_range')
        minimum = 6 if strength == 'wide_range' else 8
        if hcp < minimum + ctx.vul_adjust('overcall'):
            return None

        if opening.strain in MINORS:
            michaels_suits = (Denom.hearts, Denom.spades)
        else:
            other = Denom.spades if opening.strain == Denom.hearts else Denom.hearts
            michaels_suits = (other,)
        if all(hand.length(suit) >= 5 for suit in michaels_suits) and \
                (len(michaels_suits) == 2 or any(hand.length(minor) >= 5 for minor in MINORS)):
            bid = ctx.bid(2, opening.strain, Tag.MICHAELS, f"Michaels cue-bid (5-5, {hcp} HCP)")
            if bid and two_suited(ctx.config, ctx, bid) is not None:
                return bid

        lowest = [suit for suit in SUITS if suit != opening.strain][:2]
        if all(hand.length(suit) >= 5 for suit in lowest):
            bid = ctx.bid(2, Denom.nt, Tag.UNUSUAL_NT,
                          f"Unusual 2NT ({_sym(lowest[0])} and {_sym(lowest[1])}, {hcp} HCP)")
            if bid and two_suited(ctx.config, ctx, bid) is not None:
                return bid
        return None

    def _overcall(self, ctx):
        """No-trump, weak jump or simple overcall of their opening"""
        if not self._overcall_position(ctx):
            return None
        hand = ctx.hand
        hcp = ctx.hcp
        their = ctx.their_suits
        stopped = all(hand.has_stopper(suit) for suit in their)
        adjust = ctx.vul_adjust('overcall')

        # No-trump overcalls
        if stopped and ctx.balanced():
            if ctx.direct_over_opening and 15 <= hcp <= 18:
                bid = ctx.bid_cheapest(Denom.nt, Tag.NT_OVERCALL, f"No-trump overcall (balanced {hcp} HCP, stopper)")
                if bid and bid.level == 1:
                    return bid
            if ctx.balancing and 12 <= hcp <= 18:
                bid = ctx.bid_cheapest(Denom.nt, Tag.NT_OVERCALL, f"Balancing no-trump ({hcp} HCP, stopper)")
                if bid and bid.level == 1:
                    return bid
            if ctx.direct_over_opening and 19 <= hcp <= 21 and ctx.opening.strain in MINORS:
                bid = ctx.bid(2, Denom.nt, Tag.NT_OVERCALL, f"2NT overcall (balanced {hcp} HCP)")
                if bid:
                    return bid

        candidates = [suit for suit in sorted(SUITS, key=lambda s: (hand.length(s), s in MAJORS), reverse=True)
                      if suit not in their]
        # Over a no-trump opening a long suit is shown at the cheapest level
        jumps = ctx.opening.strain in SUITS
        for suit in candidates:
            length = hand.length(suit)
            level = ctx.cheapest(suit)
            if level is None:
                continue
            # Weak jump overcall
            if jumps and length >= 6 and hand.suit_quality(suit) >= 2 and 6 + adjust <= hcp <= 10 and level + 1 <= 3:
                return ctx.bid(level + 1, suit, Tag.JUMP_OVERCALL,
                               f"Weak jump overcall in {_sym(suit)} ({length} cards, {hcp} HCP)")
            if level == 1 and length >= 5 and hcp >= 6 + adjust:
                return ctx.bid(1, suit, Tag.OVERCALL, f"1{_sym(suit)} overcall ({length} cards, {hcp} HCP)")
            if level == 2 and length >= 5 and hcp >= 10 + adjust:
                return ctx.bid(2, suit, Tag.OVERCALL, f"2{_sym(suit)} overcall ({length} cards, {hcp} HCP)")
            if level == 3 and length >= 6 and hcp >= 12 + adjust:
                return ctx.bid(3, suit, Tag.OVERCALL, f"3{_sym(suit)} overcall ({length} cards, {hcp} HCP)")
        if ctx.direct_over_opening or ctx.balancing:
            return ctx.pass_(Tag.PASS, f"Pass (no suitable overcall, {hcp} HCP)")
        return None

    def _free_bid(self, ctx):
        """A natural bid over interference once our side has opened"""
        if not ctx.we_opened or ctx.last_contract is None or ctx.is_us(ctx.last_contract.seat):
            return None
        hand = ctx.hand
        hcp = ctx.hcp

        if ctx.i_opened:
            mine = ctx.opening.strain
            if mine in SUITS and hand.length(mine) >= 6 and hcp >= 12:
                level = ctx.cheapest(mine)
                if level is not None and level <= 3:
                    return ctx.bid(level, mine, Tag.REBID_SUIT, f"Rebid {_sym(mine)} ({hand.length(mine)} cards)")
            return None

        if ctx.my_actions:
            return None
        their = ctx.their_last_suit
        opened = ctx.opening.strain
        # Stopper ask: game values and a minor fit, but their suit is open
        if ctx.partner_opened and opened in MINORS and their is not None and hcp >= 13 \
                and hand.length(opened) >= 4 and not hand.has_stopper(their) \
                and ctx.enabled('competitive', 'cue_bid_raises'):
            bid = ctx.bid_cheapest(their, Tag.STOPPER_ASK,
                                   f"Cue-bid asking for a {_sym(their)} stopper ({hcp} HCP, {_sym(opened)} fit)")
            if bid:
                return bid
        for suit in sorted(SUITS, key=hand.length, reverse=True):
            if suit in ctx.their_suits or suit in ctx.partner_suits or hand.length(suit) < 5:
                continue
            level = ctx.cheapest(suit)
            if (level == 1 and hcp >= 6) or (level == 2 and hcp >= 10):
                return ctx.bid(level, suit, Tag.FREE_BID, f"{level}{_sym(suit)} free bid ({hand.length(suit)} cards, {hcp} HCP)")
        if their is not None and hand.has_stopper(their) and 8 <= hcp <= 12:
            bid = ctx.bid_cheapest(Denom.nt, Tag.NT_RESPONSE, f"No-trump ({_sym(their)} stopped, {hcp} HCP)")
            if bid and bid.level <= 2:
                return bid
        return None

    # ==================== Answering partner's double ====================

    def _answer_partner_double(self, ctx):
        """Advance a takeout-style double, or rebid after partner's negative double"""
        partner_last = ctx.partner_last
        if partner_last is None or not partner_last.is_double:
            return None
        meaning = self.meaning_of(ctx, partner_last)
        if meaning not in PARTNER_DOUBLE_TAGS:
            return None
        hand = ctx.hand
        hcp = ctx.hcp
        their = ctx.their_last_suit
        interfered = ctx.last_action is not partner_last

        if interfered:
            # RHO bid over the double: only act with a real suit
            for suit in self._suit_order(ctx):
                if hand.length(suit) >= 5 and hcp >= 8:
                    bid = ctx.bid_cheapest(suit, Tag.ADVANCE, f"{_sym(suit)} ({hand.length(suit)} cards, {hcp} HCP)")
                    if bid and bid.level <= 3:
                        return bid
            return None

        if meaning == Tag.NEGATIVE_DOUBLE:
            return self._rebid_after_negative_double(ctx)

        # Penalty pass with a strong holding in their suit at the one level
        if their is not None and ctx.last_contract.level == 1 and hand.length(their) >= 5 \
                and hand.suit_quality(their) >= 2:
            return ctx.pass_(Tag.PENALTY_DOUBLE, f"Pass for penalties ({hand.length(their)} {_sym(their)})")

        if their is not None and hcp >= 12 and meaning in ADVANCE_DOUBLE_TAGS:
            bid = ctx.bid_cheapest(their, Tag.ADVANCE, f"Cue-bid (game values, {hcp} HCP)")
            if bid:
                return bid
        best = self._suit_order(ctx)[0]
        has_major = best in MAJORS and hand.length(best) >= 4
        if their is not None and not has_major and hand.has_stopper(their) and 8 <= hcp <= 12:
            jump = 1 if hcp >= 11 else 0
            bid = ctx.bid_cheapest(Denom.nt, Tag.ADVANCE, f"No-trump advance ({_sym(their)} stopped, {hcp} HCP)", jump=jump)
            if bid:
                return bid
        jump = 1 if 9 <= hcp <= 11 else 0
        return ctx.bid_cheapest(best, Tag.ADVANCE,
                                f"{_sym(best)} advance ({hand.length(best)} cards, {hcp} HCP)", jump=jump) \
            or ctx.bid_cheapest(best, Tag.ADVANCE, f"{_sym(best)} advance ({hand.length(best)} cards)")

    def _rebid_after_negative_double(self, ctx):
        """Opener describes the hand after partner's negative double"""
        hand = ctx.hand
        hcp = ctx.hcp
        mine = ctx.opening.strain
        their = ctx.their_last_suit
        for major in (Denom.spades, Denom.hearts):
            if major in self._unbid(ctx) and hand.length(major) >= 4:
                jump = 1 if hcp >= 15 else 0
                return ctx.bid_cheapest(major, Tag.NEW_SUIT, f"{_sym(major)} (4 cards, {hcp} HCP)", jump=jump)
        if their is not None and hand.has_stopper(their) and ctx.balanced():
            jump = 1 if hcp >= 18 else 0
            return ctx.bid_cheapest(Denom.nt, Tag.REBID_NT, f"No-trump ({_sym(their)} stopped, {hcp} HCP)", jump=jump)
        if mine in SUITS and hand.length(mine) >= 6:
            return ctx.bid_cheapest(mine, Tag.REBID_SUIT, f"Rebid {_sym(mine)} ({hand.length(mine)} cards)")
        for suit in self._unbid(ctx):
            if hand.length(suit) >= 4:
                return ctx.bid_cheapest(suit, Tag.NEW_SUIT, f"{_sym(suit)} ({hand.length(suit)} cards)")
        return ctx.bid_cheapest(mine, Tag.REBID_SUIT, f"Rebid {_sym(mine)} (nothing else to show)")

    def _suit_order(self, ctx):
        """Unbid suits, longest first with majors ahead of minors"""
        hand = ctx.hand
        candidates = [suit for suit in SUITS if suit not in ctx.their_suits] or list(SUITS)
        return sorted(candidates, key=lambda suit: (hand.length(suit), suit in MAJORS), reverse=True)
