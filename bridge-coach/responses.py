"""
Responses and Rebids
What to bid once partner has spoken

Covers the first response to every opening, answers to partner's
conventional asks, the opener's rebid and general contract placement from
the ranges both hands have shown.
"""

import logging

from endplay.types import Denom, Rank

from bridge_types import (
    GAME_LEVEL, MAJORS, MINORS, STRAIN_RANK, SUITS, SUIT_SYMBOLS, DOUBLE, REDOUBLE,
    Tag, is_major
)
from conventions import find_trump_suit, stayman_reply, systems_on
from slam import CONTROL_CUE_POINTS, SMALL_SLAM_POINTS

logger = logging.getLogger(__name__)

GAME_POINTS = 25

# Strength partner has shown with a call, in HCP
TAG_RANGES = {
    Tag.OPEN_ONE_SUIT: (12, 21),
    Tag.OPEN_WEAK_TWO: (6, 10),
    Tag.OPEN_PREEMPT: (5, 10),
    Tag.OPEN_STRONG_2C: (22, 30),
    Tag.OPEN_STRONG_1C: (16, 30),
    Tag.STRONG_1C_NEGATIVE: (0, 7),
    Tag.POSITIVE_RESPONSE: (8, 15),
    Tag.WAITING_2D: (0, 7),
    Tag.RAISE: (6, 9),
    Tag.COMPETITIVE_RAISE: (6, 9),
    Tag.ADVANCER_RAISE: (6, 12),
    Tag.LIMIT_RAISE: (10, 12),
    Tag.GAME_RAISE: (6, 12),
    Tag.JACOBY_2NT: (13, 20),
    Tag.SPLINTER: (12, 16),
    Tag.CUE_BID_RAISE: (10, 15),
    Tag.JORDAN_2NT: (10, 12),
    Tag.DRURY: (10, 12),
    Tag.NEW_SUIT: (6, 17),
    Tag.FREE_BID: (10, 17),
    Tag.JUMP_SHIFT: (17, 25),
    Tag.NT_RESPONSE: (6, 10),
    Tag.NT_INVITE: (8, 9),
    Tag.NT_GAME: (10, 15),
    Tag.NT_QUANTITATIVE: (16, 17),
    Tag.GAME_TRY: (16, 18),
    Tag.REBID_SUIT: (12, 15),
    Tag.REBID_NT: (12, 14),
    Tag.REVERSE: (17, 21),
    Tag.OVERCALL: (8, 16),
    Tag.JUMP_OVERCALL: (6, 10),
    Tag.NT_OVERCALL: (15, 18),
    Tag.TAKEOUT_DOUBLE: (12, 20),
    Tag.NEGATIVE_DOUBLE: (6, 15),
    Tag.ADVANCE: (0, 11),
    Tag.MICHAELS: (6, 16),
    Tag.UNUSUAL_NT: (6, 16),
}
INVITATIONS = (Tag.NT_INVITE, Tag.GAME_TRY, Tag.LIMIT_RAISE, Tag.JORDAN_2NT, Tag.NT_QUANTITATIVE)
ARTIFICIAL = {
    Tag.STAYMAN, Tag.JACOBY_TRANSFER, Tag.TEXAS_TRANSFER, Tag.MINOR_TRANSFER, Tag.LEBENSOHL_RELAY,
    Tag.GERBER, Tag.GERBER_KINGS, Tag.BLACKWOOD, Tag.RKCB, Tag.ACE_REPLY, Tag.KEYCARD_REPLY,
    Tag.KING_REPLY, Tag.DRURY, Tag.DRURY_REPLY, Tag.JACOBY_2NT, Tag.SPLINTER, Tag.BERGEN,
    Tag.FEATURE_ASK, Tag.CUE_BID_RAISE, Tag.CONTROL_CUE, Tag.WAITING_2D, Tag.OPEN_STRONG_2C,
    Tag.OPEN_STRONG_1C, Tag.STRONG_1C_NEGATIVE, Tag.STAYMAN_REPLY, Tag.JORDAN_2NT,
    Tag.RELAY_ACCEPT, Tag.LEBENSOHL_CUE, Tag.STOPPER_ASK,
}
TRANSFERS = (Tag.JACOBY_TRANSFER, Tag.TEXAS_TRANSFER, Tag.MINOR_TRANSFER)
ACE_ASKS = (Tag.GERBER, Tag.GERBER_KINGS, Tag.BLACKWOOD, Tag.RKCB)
ACE_REPLIES = (Tag.ACE_REPLY, Tag.KEYCARD_REPLY, Tag.KING_REPLY)
LIMIT_RAISE_ASKS = (Tag.SPLINTER, Tag.BERGEN, Tag.CUE_BID_RAISE, Tag.JORDAN_2NT)


def _sym(strain):
    return SUIT_SYMBOLS[strain]


class ResponseRules:
    """Response layer mixed into the engine"""

    def _respond_to_partner(self, ctx):
        """Dispatch on partner's last call"""
        partner_last = ctx.partner_last
        if partner_last is None or partner_last.is_pass:
            return None

        bid = self._answer_convention(ctx)
        if bid is not None:
            return bid
        if not partner_last.is_contract:
            return None

        if ctx.partner_opened and not ctx.my_actions:
            return self._first_response(ctx)
        if ctx.they_opened and not ctx.my_actions:
            return self._advance_overcall(ctx)
        if ctx.i_opened and len(ctx.my_actions) == 1:
            return self._opener_rebid(ctx)
        return self._place_contract(ctx)

    # ==================== Partnership reading ====================

    def _nt_range(self, ctx, opening):
        if opening.level == 2:
            return ctx.config.range('general', 'two_notrump_range', 'range', (20, 21))
        return ctx.config.range('general', 'one_notrump_range', 'range', (15, 17))

    def _partner_range(self, ctx):
        """(low, high) HCP partner has shown, from their latest descriptive call"""
        shown = (0, 10)
        for call in ctx.partner_actions:
            meaning = self.meaning_of(ctx, call)
            if meaning in (Tag.OPEN_1NT, Tag.OPEN_2NT):
                shown = self._nt_range(ctx, call)
            elif meaning in TAG_RANGES:
                low, high = TAG_RANGES[meaning]
                # Later calls refine the range, never widen it
                if call is not ctx.partner_actions[0]:
                    low, high = max(low, shown[0]), max(min(high, shown[1]), low)
                shown = (low, high)
        return shown

    def _partner_lengths(self, ctx):
        """Minimum length partner has shown in each suit"""
        lengths = {suit: 0 for suit in SUITS}
        for call in ctx.partner_actions:
            meaning = self.meaning_of(ctx, call)
            if meaning in TRANSFERS:
                recognition = self.recognition_of(ctx, call)
                if recognition is not None:
                    target = recognition.details['target']
                    wanted = 6 if meaning == Tag.TEXAS_TRANSFER else 5
                    lengths[target] = max(lengths[target], wanted)
                continue
            if meaning in (Tag.MICHAELS, Tag.UNUSUAL_NT, Tag.DONT, Tag.MECKWELL):
                recognition = self.recognition_of(ctx, call)
                suits = recognition.details.get('suits', ()) if recognition else ()
                for suit in suits:
                    if suit is not None:
                        lengths[suit] = max(lengths[suit], 5)
                continue
            if meaning == Tag.STAYMAN_REPLY and call.strain in MAJORS:
                lengths[call.strain] = max(lengths[call.strain], 4)
                continue
            if meaning in ARTIFICIAL or not call.is_contract or call.strain not in SUITS:
                continue
            suit = call.strain
            if meaning == Tag.OPEN_WEAK_TWO:
                wanted = 6
            elif meaning in (Tag.OPEN_PREEMPT, Tag.JUMP_OVERCALL):
                wanted = 7 if call.level >= 3 else 6
            elif meaning in (Tag.OVERCALL, Tag.REBID_SUIT):
                wanted = 5 if lengths[suit] == 0 else 6
            elif meaning == Tag.OPEN_ONE_SUIT:
                wanted = 5 if suit in MAJORS else 3
            elif lengths[suit]:
                wanted = lengths[suit] + 1
            else:
                wanted = 4
            lengths[suit] = max(lengths[suit], wanted)
        return lengths

    def _fit(self, ctx):
        """Best suit with 8+ combined cards, majors first; None without one"""
        agreed = find_trump_suit(ctx)
        if agreed is not None:
            return agreed
        partner = self._partner_lengths(ctx)
        fits = [suit for suit in SUITS if partner[suit] and ctx.hand.length(suit) + partner[suit] >= 8]
        if not fits:
            return None
        return max(fits, key=lambda suit: (is_major(suit), ctx.hand.length(suit) + partner[suit]))

    def _stoppers(self, ctx):
        return all(ctx.hand.has_stopper(suit) for suit in ctx.their_suits)

    # ==================== Conventional answers ====================

    def _answer_convention(self, ctx):
        """Answer partner's conventional call, when partner has just made one"""
        partner_last = ctx.partner_last
        if ctx.last_action is not partner_last:
            return None
        meaning = self.meaning_of(ctx, partner_last)
        my_last = ctx.my_last
        my_meaning = self.meaning_of(ctx, my_last) if my_last is not None and not my_last.is_pass else None

        if meaning in ACE_ASKS:
            return self._answer_ace_ask(ctx, partner_last)
        if meaning in ACE_REPLIES:
            return self._after_ace_reply(ctx)
        if meaning in (Tag.STAYMAN, Tag.STOLEN_BID_DOUBLE):
            return self._answer_stayman(ctx)
        if meaning == Tag.STAYMAN_REPLY:
            return self._after_stayman_reply(ctx)
        if meaning in TRANSFERS:
            return self._accept_transfer(ctx, partner_last, meaning)
        if meaning in (Tag.TRANSFER_ACCEPT, Tag.SUPER_ACCEPT):
            return self._after_transfer(ctx, meaning)
        if meaning == Tag.LEBENSOHL_RELAY:
            return ctx.bid(3, Denom.clubs, Tag.RELAY_ACCEPT, "3♣ completing the Lebensohl relay")
        if meaning == Tag.RELAY_ACCEPT:
            return self._after_relay(ctx)
        if meaning == Tag.FEATURE_ASK:
            return self._answer_feature_ask(ctx)
        if meaning == Tag.DRURY:
            return self._answer_drury(ctx)
        if meaning == Tag.DRURY_REPLY:
            return self._after_drury_reply(ctx)
        if meaning == Tag.JACOBY_2NT:
            return self._jacoby_rebid(ctx)
        if meaning in LIMIT_RAISE_ASKS:
            return self._answer_limit_raise(ctx, meaning)
        if meaning == Tag.CONTROL_CUE:
            return self._answer_control_cue(ctx, self._partner_range(ctx))
        if meaning == Tag.STOPPER_ASK:
            return self._answer_stopper_ask(ctx, partner_last)
        if meaning == Tag.WAITING_2D and ctx.i_opened:
            return self._strong_rebid(ctx)
        if meaning in (Tag.MICHAELS, Tag.UNUSUAL_NT):
            return self._advance_two_suiter(ctx, partner_last)
        if meaning in (Tag.DONT, Tag.MECKWELL):
            return self._advance_defense(ctx, partner_last)
        if meaning == Tag.ADVANCE and my_meaning in (Tag.DONT, Tag.MECKWELL):
            return self._after_defense_relay(ctx, my_last)
        return None

    # ---------- No-trump structures ----------

    def _answer_stayman(self, ctx):
        suit = stayman_reply(ctx.hand)
        if suit == Denom.diamonds:
            text = "denies a 4-card major"
        else:
            text = f"4+ {_sym(suit)}"
        return ctx.bid_cheapest(suit, Tag.STAYMAN_REPLY, f"{_sym(suit)} Stayman reply ({text})")

    def _accept_transfer(self, ctx, transfer, meaning):
        recognition = self.recognition_of(ctx, transfer)
        if recognition is None:
            return None
        target = recognition.details['target']
        _, high = self._nt_range(ctx, ctx.opening)
        # Super-accept: 4-card support and a maximum over a Jacoby transfer
        if meaning == Tag.JACOBY_TRANSFER and ctx.hand.length(target) >= 4 and ctx.hcp >= high \
                and ctx.opening.level == 1:
            bid = ctx.bid_cheapest(target, Tag.SUPER_ACCEPT,
                                   f"Super-accept in {_sym(target)} (4-card support, {ctx.hcp} HCP)", jump=1)
            if bid:
                return bid
        return ctx.bid_cheapest(target, Tag.TRANSFER_ACCEPT, f"{_sym(target)} completing the transfer")

    def _after_stayman_reply(self, ctx):
        """Responder places the contract after opener answers Stayman"""
        opening = ctx.opening
        if opening is None or opening.strain != Denom.nt:
            return None
        low, high = self._nt_range(ctx, opening)
        shown = ctx.partner_last.strain
        hcp = ctx.hcp
        if shown in MAJORS and ctx.hand.length(shown) >= 4:
            if hcp + low >= SMALL_SLAM_POINTS:
                return self._slam_try(ctx, shown, hcp + low)
            if hcp + low >= GAME_POINTS:
                return ctx.bid(4, shown, Tag.GAME_RAISE, f"4{_sym(shown)} (major fit, {hcp} HCP)")
            if hcp + high >= GAME_POINTS:
                return ctx.bid(3, shown, Tag.GAME_TRY, f"3{_sym(shown)} invitational (major fit, {hcp} HCP)")
            return ctx.pass_(Tag.PLACEMENT, f"Pass (major fit, {hcp} HCP)")
        if hcp + low >= GAME_POINTS:
            return ctx.bid(3, Denom.nt, Tag.NT_GAME, f"3NT (no major fit, {hcp} HCP)")
        if hcp + high >= GAME_POINTS:
            bid = ctx.bid(2, Denom.nt, Tag.NT_INVITE, f"2NT invitational (no major fit, {hcp} HCP)")
            if bid:
                return bid
        return ctx.pass_(Tag.PLACEMENT, f"Pass (no major fit, {hcp} HCP)")

    def _after_transfer(self, ctx, accept):
        """Responder's continuation once opener has completed the transfer"""
        opening = ctx.opening
        if opening is None or opening.strain != Denom.nt:
            return None
        suit = ctx.partner_last.strain
        length = ctx.hand.length(suit)
        low, high = self._nt_range(ctx, opening)
        hcp = ctx.hcp
        if accept == Tag.SUPER_ACCEPT:
            low = high
        if hcp + low >= SMALL_SLAM_POINTS:
            return self._slam_try(ctx, suit if length >= 6 else Denom.nt, hcp + low)
        if ctx.partner_last.level >= 4 or suit in MINORS:
            if suit in MINORS and hcp + low >= GAME_POINTS and ctx.cheapest(Denom.nt) <= 3:
                return ctx.bid(3, Denom.nt, Tag.NT_GAME, f"3NT ({hcp} HCP)")
            return ctx.pass_(Tag.PLACEMENT, f"Pass (playing in {_sym(suit)})")
        if hcp + low >= GAME_POINTS:
            if length >= 6:
                return ctx.bid(4, suit, Tag.GAME_RAISE, f"4{_sym(suit)} ({length}-card suit, {hcp} HCP)")
            return ctx.bid_cheapest(Denom.nt, Tag.NT_GAME,
                                    f"3NT offering a choice of games ({length} {_sym(suit)}, {hcp} HCP)",
                                    jump=max(0, 3 - ctx.cheapest(Denom.nt)))
        if hcp + high >= GAME_POINTS:
            if length >= 6:
                return ctx.bid(3, suit, Tag.GAME_TRY, f"3{_sym(suit)} invitational ({length}-card suit)")
            bid = ctx.bid(2, Denom.nt, Tag.NT_INVITE, f"2NT invitational ({length} {_sym(suit)}, {hcp} HCP)")
            if bid:
                return bid
        return ctx.pass_(Tag.PLACEMENT, f"Pass (sign-off in {_sym(suit)})")

    def _after_relay(self, ctx):
        """Lebensohl: responder after opener's forced 3♣"""
        hand = ctx.hand
        low, _ = self._nt_range(ctx, ctx.opening)
        if ctx.hcp + low >= GAME_POINTS:
            for major in MAJORS:
                if hand.length(major) >= 4 and major not in ctx.their_suits:
                    their = ctx.their_last_suit
                    if their is not None:
                        bid = ctx.bid_cheapest(their, Tag.LEBENSOHL_CUE,
                                               f"Cue-bid via Lebensohl (4 {_sym(major)}, game values)")
                        if bid:
                            return bid
            return ctx.bid(3, Denom.nt, Tag.LEBENSOHL_GAME, f"3NT via Lebensohl ({ctx.hcp} HCP)")
        suit = hand.longest_suit()
        if suit == Denom.clubs:
            return ctx.pass_(Tag.PLACEMENT, "Pass (3♣ to play)")
        bid = ctx.bid_cheapest(suit, Tag.PLACEMENT, f"{_sym(suit)} to play after the relay")
        return bid or ctx.pass_(Tag.PLACEMENT, "Pass (3♣ to play)")

    def _respond_to_nt(self, ctx, opening):
        """First response to partner's 1NT or 2NT"""
        hand = ctx.hand
        hcp = ctx.hcp
        low, high = self._nt_range(ctx, opening)
        step = opening.level + 1
        invite_min = GAME_POINTS - high
        game_min = GAME_POINTS - low
        hearts, spades = hand.length(Denom.hearts), hand.length(Denom.spades)

        # Texas with a 6-card major and game values
        if ctx.enabled('notrump_responses', 'texas_transfers') and hcp >= game_min \
                and hcp + low < SMALL_SLAM_POINTS and max(hearts, spades) >= 6:
            suit = Denom.spades if spades >= 6 and spades >= hearts else Denom.hearts
            relay = Denom.diamonds if suit == Denom.hearts else Denom.hearts
            bid = ctx.bid(4, relay, Tag.TEXAS_TRANSFER, f"4{_sym(relay)} Texas transfer (6+ {_sym(suit)}, game values)")
            if bid:
                return bid

        # Jacoby transfers with a 5-card major, any strength
        if ctx.enabled('notrump_responses', 'jacoby_transfers') and max(hearts, spades) >= 5:
            suit = Denom.spades if spades > hearts or (spades == hearts and spades >= 5) else Denom.hearts
            relay = Denom.diamonds if suit == Denom.hearts else Denom.hearts
            bid = ctx.bid(step, relay, Tag.JACOBY_TRANSFER, f"{step}{_sym(relay)} Jacoby transfer (5+ {_sym(suit)}, {hcp} HCP)")
            if bid:
                return bid

        # Stayman with a 4-card major and invitational values
        if ctx.enabled('notrump_responses', 'stayman') and hcp >= invite_min and max(hearts, spades) >= 4:
            bid = ctx.bid(step, Denom.clubs, Tag.STAYMAN, f"{step}♣ Stayman (4-card major, {hcp} HCP)")
            if bid:
                return bid

        # Minor transfers with a weak 6-card minor
        if ctx.enabled('notrump_responses', 'minor_suit_transfers') and opening.level == 1 and hcp < invite_min:
            if hand.length(Denom.clubs) >= 6:
                return ctx.bid(2, Denom.spades, Tag.MINOR_TRANSFER, "2♠ minor-suit transfer (6+ clubs, weak)")
            if hand.length(Denom.diamonds) >= 6:
                return ctx.bid(2, Denom.nt, Tag.MINOR_TRANSFER, "2NT minor-suit transfer (6+ diamonds, weak)")

        if hcp + low >= SMALL_SLAM_POINTS:
            return self._slam_try(ctx, Denom.nt, hcp + low)
        if hcp + high >= SMALL_SLAM_POINTS and hand.is_balanced(ctx.include_5422):
            return ctx.bid(4, Denom.nt, Tag.NT_QUANTITATIVE, f"4NT quantitative ({hcp} HCP)")
        if hcp >= game_min:
            return ctx.bid(3, Denom.nt, Tag.NT_GAME, f"3NT ({hcp} HCP, no major fit to look for)")
        if hcp >= invite_min and opening.level == 1:
            return ctx.bid(2, Denom.nt, Tag.NT_INVITE, f"2NT invitational ({hcp} HCP)")
        return ctx.pass_(Tag.PASS, f"Pass ({hcp} HCP, no game interest)")

    def _respond_to_nt_interference(self, ctx, opening):
        """Partner's 1NT was overcalled or doubled by RHO"""
        hand = ctx.hand
        hcp = ctx.hcp
        rho = ctx.rho_last
        low, _ = self._nt_range(ctx, opening)
        game = hcp + low >= GAME_POINTS

        if rho.is_double:
            if hcp >= 8:
                return ctx.call(REDOUBLE, Tag.REDOUBLE_VALUES, f"Redouble ({hcp} HCP, the balance of power)")
            return None
        if not rho.is_contract or rho.level != 2 or opening.level != 1:
            return None
        their = rho.strain

        if their == Denom.clubs:
            if systems_on(ctx.config, 'stolen_bid_double') and hcp >= 8 \
                    and max(hand.length(Denom.hearts), hand.length(Denom.spades)) >= 4:
                return ctx.call(DOUBLE, Tag.STOLEN_BID_DOUBLE, f"Double as Stayman (4-card major, {hcp} HCP)")
            if systems_on(ctx.config, 'transfers'):
                for suit, relay in ((Denom.spades, Denom.hearts), (Denom.hearts, Denom.diamonds)):
                    if hand.length(suit) >= 5:
                        return ctx.bid(2, relay, Tag.JACOBY_TRANSFER,
                                       f"2{_sym(relay)} transfer (systems on, 5+ {_sym(suit)})")

        if their not in SUITS:
            return None
        lebensohl = ctx.enabled('notrump_defenses', 'lebensohl')
        fast_denies = ctx.setting('notrump_defenses', 'lebensohl', 'fast_denies', True)
        stopper = hand.has_stopper(their)

        if game:
            for major in (Denom.spades, Denom.hearts):
                if major != their and hand.length(major) >= 5:
                    return ctx.bid_cheapest(major, Tag.NEW_SUIT,
                                            f"{_sym(major)} forcing (5+ cards, {hcp} HCP)")
            if lebensohl and stopper == bool(fast_denies):
                return ctx.bid(2, Denom.nt, Tag.LEBENSOHL_RELAY,
                               f"2NT Lebensohl relay ({'with' if stopper else 'without'} a {_sym(their)} stopper)")
            return ctx.bid(3, Denom.nt, Tag.LEBENSOHL_GAME if lebensohl else Tag.NT_GAME,
                           f"3NT ({'with' if stopper else 'without'} a {_sym(their)} stopper, {hcp} HCP)")

        if hand.length(their) >= 4 and hand.suit_quality(their) >= 2 and hcp >= 8:
            return ctx.call(DOUBLE, Tag.PENALTY_DOUBLE, f"Penalty double (4+ {_sym(their)}, {hcp} HCP)")
        suit = hand.longest_suit()
        if hand.length(suit) >= 5 and suit != their:
            if STRAIN_RANK[suit] > STRAIN_RANK[their]:
                return ctx.bid(2, suit, Tag.FREE_BID, f"2{_sym(suit)} to play ({hand.length(suit)} cards)")
            if lebensohl and hand.length(suit) >= 6:
                return ctx.bid(2, Denom.nt, Tag.LEBENSOHL_RELAY,
                               f"2NT Lebensohl relay (to sign off in {_sym(suit)})")
        return None

    # ---------- Asks after suit openings ----------

    def _answer_stopper_ask(self, ctx, ask):
        """3NT with their suit held, otherwise rebid our minor"""
        their = ask.strain
        if ctx.hand.has_stopper(their):
            bid = ctx.bid_cheapest(Denom.nt, Tag.NT_GAME, f"No-trump with a {_sym(their)} stopper")
            if bid:
                return bid
        mine = ctx.opening.strain if ctx.i_opened else None
        if mine in SUITS:
            return ctx.bid_cheapest(mine, Tag.PLACEMENT, f"{_sym(mine)} (no {_sym(their)} stopper)")
        return None

    def _answer_feature_ask(self, ctx):
        """Weak two opener: show an outside ace or king with a maximum"""
        suit = ctx.opening.strain
        hand = ctx.hand
        if ctx.hcp >= 9:
            for side in reversed(SUITS):
                if side != suit and (hand.has(side, Rank.RA) or hand.has(side, Rank.RK)):
                    bid = ctx.bid_cheapest(side, Tag.FEATURE_REPLY, f"{_sym(side)} feature (maximum, {ctx.hcp} HCP)")
                    if bid and bid.level == 3:
                        return bid
            return ctx.bid(3, Denom.nt, Tag.FEATURE_REPLY, f"3NT (maximum with a solid suit, {ctx.hcp} HCP)")
        return ctx.bid(3, suit, Tag.FEATURE_REPLY, f"3{_sym(suit)} (minimum, {ctx.hcp} HCP)")

    def _answer_drury(self, ctx):
        """Opener's answer to Drury: full opening or a minimum sign-off"""
        suit = ctx.opening.strain
        if ctx.hcp >= 15:
            return ctx.bid(4, suit, Tag.DRURY_REPLY, f"4{_sym(suit)} (game opposite a limit raise, {ctx.hcp} HCP)")
        if ctx.hcp >= 13:
            return ctx.bid(2, Denom.diamonds, Tag.DRURY_REPLY, f"2♦ full opening ({ctx.hcp} HCP)")
        return ctx.bid(2, suit, Tag.DRURY_REPLY, f"2{_sym(suit)} sign-off (light opening, {ctx.hcp} HCP)")

    def _after_drury_reply(self, ctx):
        suit = ctx.opening.strain
        reply = ctx.partner_last
        if reply.token == '2D':
            if ctx.hcp >= 12:
                return ctx.bid(4, suit, Tag.GAME_RAISE, f"4{_sym(suit)} (full opening opposite, {ctx.hcp} HCP)")
            return ctx.bid(3, suit, Tag.LIMIT_RAISE, f"3{_sym(suit)} (limit raise, {ctx.hcp} HCP)")
        return ctx.pass_(Tag.PLACEMENT, f"Pass (partner signed off in {_sym(suit)})")

    def _jacoby_rebid(self, ctx):
        """Opener after Jacoby 2NT: shortness, extras or a minimum"""
        suit = ctx.opening.strain
        hand = ctx.hand
        for side in SUITS:
            if side != suit and hand.length(side) <= 1:
                bid = ctx.bid(3, side, Tag.JACOBY_2NT_REBID,
                              f"3{_sym(side)} shortness ({'void' if hand.length(side) == 0 else 'singleton'})")
                if bid:
                    return bid
        if ctx.hcp >= 15:
            return ctx.bid(3, suit, Tag.JACOBY_2NT_REBID, f"3{_sym(suit)} (extra values, {ctx.hcp} HCP)")
        return ctx.bid(4, suit, Tag.JACOBY_2NT_REBID, f"4{_sym(suit)} (minimum, {ctx.hcp} HCP)")

    def _answer_limit_raise(self, ctx, meaning):
        """Opener after a splinter, Bergen, cue-bid raise or Jordan 2NT"""
        suit = find_trump_suit(ctx) or (ctx.my_suits[-1] if ctx.my_suits else None)
        if suit is None:
            return None
        low, _ = TAG_RANGES.get(meaning, (10, 12))
        if meaning == Tag.BERGEN:
            low = 7 if ctx.partner_last.token == '3C' else 11
        points = ctx.hand.support_points(suit)
        combined = points + low
        if combined >= SMALL_SLAM_POINTS:
            return self._slam_try(ctx, suit, combined)
        if combined >= GAME_POINTS:
            if suit in MAJORS:
                return ctx.bid_cheapest(suit, Tag.GAME_RAISE, f"Game in {_sym(suit)} ({combined} combined points)",
                                        jump=max(0, 4 - ctx.cheapest(suit)))
            if self._stoppers(ctx) and ctx.cheapest(Denom.nt) <= 3:
                return ctx.bid(3, Denom.nt, Tag.NT_GAME, f"3NT ({combined} combined points)")
            return ctx.bid(5, suit, Tag.GAME_RAISE, f"5{_sym(suit)} ({combined} combined points)")
        return ctx.bid_cheapest(suit, Tag.PLACEMENT, f"{_sym(suit)} sign-off (minimum, {ctx.hcp} HCP)")

    def _strong_rebid(self, ctx):
        """2♣ opener after the waiting 2♦"""
        hcp = ctx.hcp
        if ctx.balanced():
            if hcp <= 24:
                return ctx.bid(2, Denom.nt, Tag.STRONG_REBID, f"2NT (balanced 22-24, {hcp} HCP)")
            return ctx.bid(3, Denom.nt, Tag.STRONG_REBID, f"3NT (balanced 25+, {hcp} HCP)")
        suit = ctx.hand.longest_suit()
        return ctx.bid_cheapest(suit, Tag.STRONG_REBID,
                                f"{_sym(suit)} natural ({ctx.hand.length(suit)} cards, {hcp} HCP)")

    # ---------- Defensive conventions ----------

    def _advance_two_suiter(self, ctx, call):
        recognition = self.recognition_of(ctx, call)
        if recognition is None:
            return None
        suits = [suit for suit in recognition.details.get('suits', ()) if suit is not None]
        if not suits:
            return None
        hand = ctx.hand
        best = max(suits, key=lambda suit: (hand.length(suit), STRAIN_RANK[suit]))
        if best in MAJORS and hand.length(best) >= 4 and ctx.hcp >= 10:
            return ctx.bid(4, best, Tag.ADVANCE, f"4{_sym(best)} (fit for partner's two-suiter, {ctx.hcp} HCP)")
        return ctx.bid_cheapest(best, Tag.ADVANCE, f"{_sym(best)} preference ({hand.length(best)} cards)")

    def _advance_defense(self, ctx, call):
        """Advancer after partner's DONT or Meckwell call"""
        hand = ctx.hand
        if call.is_double:
            return ctx.bid_cheapest(Denom.clubs, Tag.ADVANCE, "2♣ relay (asking for the long suit)")
        recognition = self.recognition_of(ctx, call)
        suits = recognition.details.get('suits', ()) if recognition else ()
        if len(suits) >= 2 or call.strain == Denom.nt:
            best = max(suits, key=hand.length) if suits else Denom.clubs
            return ctx.bid_cheapest(best, Tag.ADVANCE, f"{_sym(best)} preference")
        if not suits:
            return None
        shown = suits[0]
        if hand.length(shown) >= 3 or len(suits) == 1 and call.strain in MAJORS:
            return ctx.pass_(Tag.ADVANCE, f"Pass ({hand.length(shown)} {_sym(shown)})")
        return ctx.bid_cheapest(SUITS[SUITS.index(shown) + 1], Tag.ADVANCE,
                                f"Relay (short in {_sym(shown)}, asking for the other suit)")

    def _after_defense_relay(self, ctx, my_call):
        """Show the real suit after partner's relay"""
        hand = ctx.hand
        relay = ctx.partner_last
        if my_call.is_double:
            suit = hand.longest_suit()
        else:
            others = [suit for suit in SUITS if STRAIN_RANK[suit] > STRAIN_RANK[my_call.strain]]
            suit = max(others, key=hand.length) if others else my_call.strain
        if relay.strain == suit:
            return ctx.pass_(Tag.PLACEMENT, f"Pass ({_sym(suit)} is the long suit)")
        bid = ctx.bid_cheapest(suit, Tag.PLACEMENT, f"{_sym(suit)} showing the long suit")
        return bid or ctx.pass_(Tag.PLACEMENT, "Pass")

    # ==================== First response ====================

    def _first_response(self, ctx):
        """Respond to partner's opening bid"""
        opening = ctx.opening
        contested = ctx.last_action is not opening
        meaning = self.meaning_of(ctx, opening)

        if opening.strain == Denom.nt and opening.level <= 2:
            if contested:
                return self._respond_to_nt_interference(ctx, opening)
            return self._respond_to_nt(ctx, opening)
        if meaning == Tag.OPEN_STRONG_2C:
            return self._respond_to_strong_2c(ctx)
        if meaning == Tag.OPEN_STRONG_1C and not contested:
            return self._respond_to_strong_1c(ctx)
        if meaning in (Tag.OPEN_WEAK_TWO, Tag.OPEN_PREEMPT):
            return self._respond_to_preempt(ctx, opening, contested)
        if opening.strain in SUITS and opening.level == 1:
            if contested:
                return self._contested_response(ctx, opening)
            if opening.strain in MAJORS:
                return self._respond_to_major(ctx, opening)
            return self._respond_to_minor(ctx, opening)
        return None

    def _respond_to_strong_2c(self, ctx):
        hand = ctx.hand
        hcp = ctx.hcp
        # 2D waiting with 0-7 HCP or no good suit
        if hcp >= 8:
            for suit in (Denom.hearts, Denom.spades):
                if hand.length(suit) >= 5 and hand.suit_quality(suit) >= 2:
                    return ctx.bid(2, suit, Tag.POSITIVE_RESPONSE, f"2{_sym(suit)} positive ({hcp} HCP, 5+ cards)")
            if ctx.balanced():
                return ctx.bid(2, Denom.nt, Tag.POSITIVE_RESPONSE, f"2NT positive ({hcp} HCP, balanced)")
            for suit in (Denom.clubs, Denom.diamonds):
                if hand.length(suit) >= 5 and hand.suit_quality(suit) >= 2:
                    return ctx.bid(3, suit, Tag.POSITIVE_RESPONSE, f"3{_sym(suit)} positive ({hcp} HCP, 5+ cards)")
        return ctx.bid(2, Denom.diamonds, Tag.WAITING_2D, f"2♦ waiting ({hcp} HCP)")

    def _respond_to_strong_1c(self, ctx):
        hand = ctx.hand
        hcp = ctx.hcp
        if hcp < 8:
            return ctx.bid(1, Denom.diamonds, Tag.STRONG_1C_NEGATIVE, f"1♦ negative ({hcp} HCP)")
        for suit in (Denom.spades, Denom.hearts, Denom.diamonds, Denom.clubs):
            if hand.length(suit) >= 5:
                return ctx.bid_cheapest(suit, Tag.POSITIVE_RESPONSE, f"{_sym(suit)} positive ({hcp} HCP, 5+ cards)")
        return ctx.bid(1, Denom.nt, Tag.POSITIVE_RESPONSE, f"1NT positive ({hcp} HCP, balanced)")

    def _respond_to_preempt(self, ctx, opening, contested):
        suit = opening.strain
        hand = ctx.hand
        hcp = ctx.hcp
        support = hand.length(suit)
        if support >= 3 and hcp >= 16 and suit in MAJORS:
            level = ctx.cheapest(suit)
            if level is not None and level <= 4:
                return ctx.bid(4, suit, Tag.GAME_RAISE, f"Game in {_sym(suit)} ({support}-card support, {hcp} HCP)")
            if ctx.last_contract is opening:
                return ctx.pass_(Tag.PLACEMENT, f"Pass (partner's preempt is already game, {hcp} HCP)")
            if level is not None and level == 5:
                return ctx.bid(5, suit, Tag.COMPETITIVE_RAISE,
                               f"5{_sym(suit)} over their interference ({support}-card support, {hcp} HCP)")
        if not contested and opening.level == 2 and hcp >= 15 and ctx.enabled('preempts', 'weak_two'):
            return ctx.bid(2, Denom.nt, Tag.FEATURE_ASK, f"2NT feature ask ({hcp} HCP)")
        if hcp >= 17 and ctx.balanced() and self._stoppers(ctx):
            return ctx.bid(3, Denom.nt, Tag.NT_GAME, f"3NT ({hcp} HCP, balanced)")
        if support >= 3 and opening.level == 2:
            return ctx.bid(3, suit, Tag.COMPETITIVE_RAISE, f"3{_sym(suit)} preemptive raise ({support}-card support)")
        return ctx.pass_(Tag.PASS, f"Pass (no game opposite a preempt, {hcp} HCP)")

    def _respond_to_major(self, ctx, opening):
        """Uncontested response to 1♥/1♠"""
        major = opening.strain
        hand = ctx.hand
        hcp = ctx.hcp
        support = hand.length(major)
        points = hand.support_points(major) if support >= 4 else hcp
        passed = ctx.is_passed_hand

        if support >= 3:
            if passed and 10 <= points <= 12 and ctx.enabled('responses', 'drury'):
                return ctx.bid(2, Denom.clubs, Tag.DRURY, f"2♣ Drury ({support}-card support, {points} points)")
            if support >= 4 and points >= 13 and not passed:
                short = [suit for suit in SUITS if suit != major and hand.length(suit) <= 1]
                if short and points <= 16 and ctx.enabled('responses', 'splinter_bids'):
                    side = short[0]
                    level = (1 if STRAIN_RANK[side] > STRAIN_RANK[major] else 2) + 2
                    bid = ctx.bid(level, side, Tag.SPLINTER,
                                  f"{level}{_sym(side)} splinter (4+ {_sym(major)}, shortness, {points} points)")
                    if bid:
                        return bid
                if ctx.enabled('responses', 'jacoby_2nt'):
                    return ctx.bid(2, Denom.nt, Tag.JACOBY_2NT, f"2NT Jacoby (4+ {_sym(major)}, {points} points)")
                return ctx.bid(4, major, Tag.GAME_RAISE, f"4{_sym(major)} ({points} points)")
            if support >= 4 and ctx.enabled('responses', 'bergen_raises'):
                if 7 <= points <= 10:
                    return ctx.bid(3, Denom.clubs, Tag.BERGEN, f"3♣ Bergen (4+ {_sym(major)}, {points} points)")
                if 11 <= points <= 12:
                    return ctx.bid(3, Denom.diamonds, Tag.BERGEN, f"3♦ Bergen (4+ {_sym(major)}, {points} points)")
            if support >= 5 and points < 10 and min(hand.lengths.values()) <= 1:
                return ctx.bid(4, major, Tag.GAME_RAISE, f"4{_sym(major)} preemptive ({support}-card support)")
            if 10 <= points <= 12:
                return ctx.bid(3, major, Tag.LIMIT_RAISE, f"3{_sym(major)} limit raise ({support}-card support, {points} points)")
            if 6 <= points <= 9:
                return ctx.bid(2, major, Tag.RAISE, f"2{_sym(major)} ({support}-card support, {points} points)")

        if hcp < 6:
            return ctx.pass_(Tag.PASS, f"Pass ({hcp} HCP)")

        # Jump shift with a strong suit
        if hcp >= 17:
            suit = hand.longest_suit()
            if suit != major and hand.length(suit) >= 5:
                bid = ctx.bid_cheapest(suit, Tag.JUMP_SHIFT, f"Jump shift in {_sym(suit)} ({hcp} HCP)", jump=1)
                if bid:
                    return bid

        if major == Denom.hearts and hand.length(Denom.spades) >= 4:
            return ctx.bid(1, Denom.spades, Tag.NEW_SUIT, f"1♠ (4+ spades, {hcp} HCP)")
        if hcp >= 11 and not passed:
            for suit in sorted(SUITS, key=hand.length, reverse=True):
                needed = 5 if suit == Denom.hearts else 4
                if suit != major and hand.length(suit) >= needed:
                    bid = ctx.bid(2, suit, Tag.NEW_SUIT, f"2{_sym(suit)} ({hand.length(suit)} cards, {hcp} HCP)")
                    if bid:
                        return bid
            if ctx.balanced() and 13 <= hcp <= 15:
                return ctx.bid(3, Denom.nt, Tag.NT_GAME, f"3NT ({hcp} HCP, balanced)")
        if support >= 3:
            return ctx.bid(3 if hcp >= 10 else 2, major, Tag.LIMIT_RAISE if hcp >= 10 else Tag.RAISE,
                           f"Raise ({support}-card support, {hcp} HCP)")
        return ctx.bid(1, Denom.nt, Tag.NT_RESPONSE, f"1NT ({hcp} HCP, no fit)")

    def _respond_to_minor(self, ctx, opening):
        """Uncontested response to 1♣/1♦"""
        minor = opening.strain
        hand = ctx.hand
        hcp = ctx.hcp
        if hcp < 6:
            return ctx.pass_(Tag.PASS, f"Pass ({hcp} HCP)")

        if hcp >= 17:
            suit = hand.longest_suit()
            if hand.length(suit) >= 5 and suit != minor:
                bid = ctx.bid_cheapest(suit, Tag.JUMP_SHIFT, f"Jump shift in {_sym(suit)} ({hcp} HCP)", jump=1)
                if bid:
                    return bid

        # Majors up the line, longer major first
        hearts, spades = hand.length(Denom.hearts), hand.length(Denom.spades)
        if max(hearts, spades) >= 4:
            suit = Denom.spades if spades > hearts and spades >= 5 else (Denom.hearts if hearts >= 4 else Denom.spades)
            return ctx.bid(1, suit, Tag.NEW_SUIT, f"1{_sym(suit)} ({hand.length(suit)} cards, {hcp} HCP)")
        if minor == Denom.clubs and hand.length(Denom.diamonds) >= 4 and not ctx.balanced():
            return ctx.bid(1, Denom.diamonds, Tag.NEW_SUIT, f"1♦ ({hand.length(Denom.diamonds)} cards, {hcp} HCP)")

        support = hand.length(minor)
        if support >= (5 if minor == Denom.clubs else 4) and not ctx.balanced():
            if hcp <= 9:
                return ctx.bid(2, minor, Tag.RAISE, f"2{_sym(minor)} ({support}-card support, {hcp} HCP)")
            if hcp <= 12:
                return ctx.bid(3, minor, Tag.LIMIT_RAISE, f"3{_sym(minor)} limit raise ({support}-card support)")

        if hcp <= 10:
            return ctx.bid(1, Denom.nt, Tag.NT_RESPONSE, f"1NT ({hcp} HCP)")
        if hcp <= 12 and ctx.balanced():
            return ctx.bid(2, Denom.nt, Tag.NT_INVITE, f"2NT invitational ({hcp} HCP, balanced)")
        if hcp <= 15 and ctx.balanced():
            return ctx.bid(3, Denom.nt, Tag.NT_GAME, f"3NT ({hcp} HCP, balanced)")
        suit = hand.longest_suit()
        return ctx.bid_cheapest(suit, Tag.NEW_SUIT, f"{_sym(suit)} ({hand.length(suit)} cards, {hcp} HCP)")

    def _contested_response(self, ctx, opening):
        """
        Response after RHO doubled or overcalled partner's one-bid

        Only raises and the strength-showing redouble live here; doubles and
        free bids belong to the competitive layer.
        """
        suit = opening.strain
        hand = ctx.hand
        hcp = ctx.hcp
        support = hand.length(suit)
        rho = ctx.rho_last
        if rho is None or rho is not ctx.last_action:
            return None
        support_ok = support >= (3 if suit in MAJORS else 4)

        if rho.is_double:
            if support >= 4 and hcp >= 10 and ctx.enabled('competitive', 'jordan_2nt'):
                return ctx.bid(2, Denom.nt, Tag.JORDAN_2NT, f"2NT Jordan ({support}-card support, {hcp} HCP)")
            if hcp >= 10:
                return ctx.call(REDOUBLE, Tag.REDOUBLE_VALUES, f"Redouble ({hcp} HCP)")
            if support_ok and hcp >= 5:
                level = 3 if support >= 4 else 2
                return ctx.bid(level, suit, Tag.COMPETITIVE_RAISE,
                               f"{level}{_sym(suit)} raise over the double ({support}-card support)")
            return None

        their = rho.strain if rho.strain in SUITS else None
        if suit in MINORS and hcp >= 13 and their is not None and not hand.has_stopper(their):
            return None
        if support >= 4 and hcp >= 10 and ctx.enabled('competitive', 'cue_bid_raises'):
            if their is not None:
                bid = ctx.bid_cheapest(their, Tag.CUE_BID_RAISE,
                                       f"Cue-bid raise ({support}-card {_sym(suit)} support, {hcp} HCP)")
                if bid:
                    return bid
        if support_ok and 6 <= hcp <= 9:
            level = ctx.cheapest(suit)
            if level is not None and level <= 3:
                if support >= 4 and level == 2:
                    level = 3
                return ctx.bid(level, suit, Tag.COMPETITIVE_RAISE,
                               f"{level}{_sym(suit)} competitive raise ({support}-card support, {hcp} HCP)")
        return None

    # ==================== Advancing an overcall ====================

    def _advance_overcall(self, ctx):
        """Advancer raises: simple, jump and cue-bid ranges from the config"""
        partner_call = ctx.partner_contracts[-1] if ctx.partner_contracts else None
        if partner_call is None or ctx.last_action is not ctx.partner_last:
            return None
        hand = ctx.hand
        hcp = ctx.hcp
        meaning = self.meaning_of(ctx, partner_call)

        if partner_call.strain == Denom.nt:
            low = 15 if meaning == Tag.NT_OVERCALL else 12
            if hcp + low >= GAME_POINTS and partner_call.level <= 2:
                return ctx.bid(3, Denom.nt, Tag.ADVANCE, f"3NT ({hcp} HCP opposite a strong no-trump)")
            if hcp + low >= 23 and partner_call.level == 1:
                return ctx.bid(2, Denom.nt, Tag.ADVANCE, f"2NT invitational ({hcp} HCP)")
            return None

        suit = partner_call.strain
        support = hand.length(suit)
        their = ctx.their_last_suit
        if ctx.enabled('competitive', 'advancer_raises'):
            def setting(name, default):
                return ctx.setting('competitive', 'advancer_raises', name, default)

            if support >= int(setting('cuebid_min_support', 4)) and hcp >= int(setting('cuebid_min_hcp', 10)) \
                    and their is not None:
                bid = ctx.bid_cheapest(their, Tag.CUE_BID_RAISE,
                                       f"Cue-bid raise ({support}-card {_sym(suit)} support, {hcp} HCP)")
                if bid:
                    return bid
            low, high = ctx.config.range('competitive', 'advancer_raises', 'jump_range', (11, 12))
            if support >= int(setting('jump_min_support', 4)) and low <= hcp <= high:
                bid = ctx.bid_cheapest(suit, Tag.ADVANCER_RAISE, f"Jump raise ({support}-card support, {hcp} HCP)", jump=1)
                if bid:
                    return bid
            low, high = ctx.config.range('competitive', 'advancer_raises', 'simple_range', (6, 9))
            if support >= int(setting('simple_min_support', 3)) and low <= hcp <= high:
                return ctx.bid_cheapest(suit, Tag.ADVANCER_RAISE, f"Raise ({support}-card support, {hcp} HCP)")
        elif support >= 3 and hcp >= 6:
            return ctx.bid_cheapest(suit, Tag.ADVANCER_RAISE, f"Raise ({support}-card support, {hcp} HCP)")

        if meaning == Tag.JUMP_OVERCALL and support >= 3:
            return ctx.bid_cheapest(suit, Tag.ADVANCER_RAISE, f"Preemptive raise ({support}-card support)")
        for own in sorted(SUITS, key=hand.length, reverse=True):
            if own != suit and own not in ctx.their_suits and hand.length(own) >= 5 and hcp >= 8:
                bid = ctx.bid_cheapest(own, Tag.ADVANCE, f"{_sym(own)} ({hand.length(own)} cards, {hcp} HCP)")
                if bid and bid.level <= 2:
                    return bid
        if hcp >= 10 and their is not None and hand.has_stopper(their):
            bid = ctx.bid_cheapest(Denom.nt, Tag.ADVANCE, f"No-trump ({_sym(their)} stopped, {hcp} HCP)")
            if bid and bid.level <= 2:
                return bid
        return None

    # ==================== Opener's rebid ====================

    def _opener_rebid(self, ctx):
        """Opener's second call after partner's natural response"""
        opening = ctx.opening
        if opening.strain not in SUITS or opening.level != 1:
            return self._place_contract(ctx)
        meaning = self.meaning_of(ctx, ctx.partner_last)
        if ctx.last_action is not ctx.partner_last:
            return self._contested_rebid(ctx)
        hand = ctx.hand
        hcp = ctx.hcp
        mine = opening.strain

        if meaning == Tag.NT_RESPONSE and not ctx.balanced():
            if hand.length(mine) >= 6:
                return ctx.bid_cheapest(mine, Tag.REBID_SUIT, f"Rebid {_sym(mine)} ({hand.length(mine)} cards, {hcp} HCP)")
            for suit in reversed(SUITS):
                if suit != mine and hand.length(suit) >= 4 and STRAIN_RANK[suit] < STRAIN_RANK[mine]:
                    return ctx.bid_cheapest(suit, Tag.NEW_SUIT, f"{_sym(suit)} ({hand.length(suit)} cards, {hcp} HCP)")
        if meaning not in (Tag.NEW_SUIT, Tag.JUMP_SHIFT, Tag.FREE_BID):
            return self._place_contract(ctx)

        theirs = ctx.partner_last.strain

        # Raise partner with 4-card support
        if theirs in SUITS and hand.length(theirs) >= 4:
            points = hand.support_points(theirs)
            if points >= 19 and theirs in MAJORS:
                return ctx.bid(4, theirs, Tag.GAME_RAISE, f"4{_sym(theirs)} ({points} points)")
            if points >= 16:
                return ctx.bid_cheapest(theirs, Tag.LIMIT_RAISE, f"Jump raise in {_sym(theirs)} ({points} points)", jump=1)
            return ctx.bid_cheapest(theirs, Tag.RAISE, f"Raise to {_sym(theirs)} (4-card support, {points} points)")

        # Second suit at the one level
        for suit in SUITS:
            if suit not in (mine, theirs) and hand.length(suit) >= 4 and ctx.cheapest(suit) == 1:
                return ctx.bid(1, suit, Tag.NEW_SUIT, f"1{_sym(suit)} ({hand.length(suit)} cards, {hcp} HCP)")

        if ctx.balanced():
            if 18 <= hcp <= 19:
                return ctx.bid_cheapest(Denom.nt, Tag.REBID_NT, f"Jump in no-trump (balanced {hcp} HCP)", jump=1)
            if hcp <= 14:
                return ctx.bid_cheapest(Denom.nt, Tag.REBID_NT, f"No-trump rebid (balanced {hcp} HCP)")

        if hand.length(mine) >= 6:
            jump = 1 if hcp >= 16 else 0
            return ctx.bid_cheapest(mine, Tag.REBID_SUIT,
                                    f"Rebid {_sym(mine)} ({hand.length(mine)} cards, {hcp} HCP)", jump=jump)

        for suit in reversed(SUITS):
            if suit in (mine, theirs) or hand.length(suit) < 4:
                continue
            level = ctx.cheapest(suit)
            reverse = STRAIN_RANK[suit] > STRAIN_RANK[mine] and level == 2
            if reverse and hcp >= 17:
                return ctx.bid(2, suit, Tag.REVERSE, f"2{_sym(suit)} reverse ({hcp} HCP)")
            if not reverse and level == 2:
                return ctx.bid(2, suit, Tag.NEW_SUIT, f"2{_sym(suit)} ({hand.length(suit)} cards, {hcp} HCP)")

        if theirs in SUITS and hand.length(theirs) >= 3:
            return ctx.bid_cheapest(theirs, Tag.RAISE, f"Raise to {_sym(theirs)} (3-card support, {hcp} HCP)")
        if hand.length(mine) >= 5:
            return ctx.bid_cheapest(mine, Tag.REBID_SUIT, f"Rebid {_sym(mine)} ({hcp} HCP)")
        return ctx.bid_cheapest(Denom.nt, Tag.REBID_NT, f"No-trump rebid ({hcp} HCP)")

    def _contested_rebid(self, ctx):
        """Opener after partner's response was overcalled: raise with four trumps"""
        response = ctx.partner_last
        if response is None or not response.is_contract or response.strain not in SUITS:
            return None
        if self.meaning_of(ctx, response) in ARTIFICIAL:
            return None
        suit = response.strain
        if ctx.hand.length(suit) >= 4:
            level = ctx.cheapest(suit)
            if level is not None and level <= 3:
                return ctx.bid(level, suit, Tag.COMPETITIVE_RAISE, f"{level}{_sym(suit)} (4-card support)")
        return None

    # ==================== Placement ====================

    def _place_contract(self, ctx):
        """
        Choose slam, game, invitation or partscore from the combined ranges

        Returns None once the auction is past what these rules describe.
        """
        if len(ctx.our_actions) >= 5:
            return None
        partner_last = ctx.partner_last
        if partner_last is None or not partner_last.is_contract:
            return None
        hand = ctx.hand
        low, high = self._partner_range(ctx)
        meaning = self.meaning_of(ctx, partner_last)
        trump = self._fit(ctx)
        points = hand.support_points(trump) if trump is not None and trump != Denom.nt else ctx.hcp
        combined_low, combined_high = points + low, points + high
        logger.debug("Placement: partner %s-%s, fit %s, combined %s-%s", low, high, trump, combined_low, combined_high)
        last = ctx.last_contract
        ours = ctx.is_us(last.seat)

        if combined_low >= SMALL_SLAM_POINTS and (last.level < 6):
            return self._slam_try(ctx, trump, combined_low)
        if trump in MAJORS and combined_low >= CONTROL_CUE_POINTS and not ctx.our_game_reached() \
                and last.level == 3 and last.strain == trump:
            cue = self._control_cue(ctx, trump)
            if cue is not None:
                return cue

        if ctx.our_game_reached():
            return ctx.pass_(Tag.PLACEMENT, f"Pass (game reached, {combined_low} combined points)")

        game = combined_low >= GAME_POINTS
        if meaning in INVITATIONS:
            game = points + low >= GAME_POINTS - 1

        if game:
            if trump in MAJORS:
                return ctx.bid_cheapest(trump, Tag.GAME_RAISE, f"Game in {_sym(trump)} ({combined_low} combined points)",
                                        jump=max(0, 4 - (ctx.cheapest(trump) or 4)))
            if self._stoppers(ctx) and (ctx.cheapest(Denom.nt) or 4) <= 3:
                return ctx.bid(3, Denom.nt, Tag.NT_GAME, f"3NT ({combined_low} combined points)")
            if trump is not None and trump != Denom.nt:
                return ctx.bid_cheapest(trump, Tag.GAME_RAISE, f"Game in {_sym(trump)} ({combined_low} combined points)",
                                        jump=max(0, 5 - (ctx.cheapest(trump) or 5)))
            bid = ctx.bid(3, Denom.nt, Tag.NT_GAME, f"3NT ({combined_low} combined points)")
            if bid:
                return bid

        if combined_high >= GAME_POINTS and meaning not in INVITATIONS and not game:
            if trump is not None and trump != Denom.nt:
                level = ctx.cheapest(trump)
                if level is not None and level < GAME_LEVEL[trump]:
                    return ctx.bid(max(level, 3) if level <= 3 else level, trump, Tag.GAME_TRY,
                                   f"Invitation in {_sym(trump)} ({points} points)")
            bid = ctx.bid(2, Denom.nt, Tag.NT_INVITE, f"2NT invitational ({ctx.hcp} HCP)")
            if bid and self._stoppers(ctx):
                return bid

        # Partscore: stay in a playable contract or give preference
        tolerable = last.seat == ctx.partner and last.strain in SUITS and hand.length(last.strain) >= 2
        if ours and (last.strain in (trump, Denom.nt) or tolerable):
            return ctx.pass_(Tag.PLACEMENT, f"Pass (partscore, {combined_low} combined points)")
        if trump is not None and trump != Denom.nt:
            level = ctx.cheapest(trump)
            if level is not None and level <= 3:
                return ctx.bid(level, trump, Tag.PREFERENCE, f"{level}{_sym(trump)} preference")
        return ctx.pass_(Tag.PLACEMENT, f"Pass ({combined_low} combined points)")
