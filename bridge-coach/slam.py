"""
Slam Bidding
Ace asking, replies, the asker's placement and control cue-bids
"""

import logging

from endplay.types import Denom

from bridge_types import MAJORS, SUITS, SUIT_SYMBOLS, Bid, Tag, bid_label, parse_bid
from conventions import ace_asking, ace_reply, decode_ace_reply, find_trump_suit

logger = logging.getLogger(__name__)

SMALL_SLAM_POINTS = 33
GRAND_SLAM_POINTS = 37
CONTROL_CUE_POINTS = 31

REPLY_TAGS = {
    'gerber': Tag.ACE_REPLY,
    'gerber_kings': Tag.KING_REPLY,
}


class SlamRules:
    """Slam layer mixed into the engine"""

    # ==================== Asking ====================

    def _slam_try(self, ctx, trump, combined):
        """
        Start slam bidding once the partnership holds 33+ points

        Ace asking when it is available, otherwise a direct small slam.
        """
        if trump is None or trump == Denom.nt:
            partner_last = ctx.partner_last
            nt_just_bid = partner_last is not None and partner_last is ctx.last_contract \
                and partner_last.strain == Denom.nt and partner_last.level <= 2
            if nt_just_bid and ctx.enabled('ace_asking', 'gerber'):
                bid = ctx.bid(4, Denom.clubs, Tag.GERBER, f"4♣ Gerber (slam interest, {combined} combined points)")
                if bid:
                    return bid
            level = 7 if combined >= GRAND_SLAM_POINTS else 6
            return ctx.bid(level, Denom.nt, Tag.SLAM, f"{level}NT ({combined} combined points)")

        ask = Bid.contract(4, Denom.nt)
        recognition = ace_asking(ctx.config, ctx, ask)
        if recognition is not None and ctx.legal(ask):
            name = 'RKCB' if recognition.tag == Tag.RKCB else 'Blackwood'
            return ctx.bid(4, Denom.nt, recognition.tag,
                           f"4NT {name} ({SUIT_SYMBOLS[trump]} agreed, {combined} combined points)")
        return ctx.bid(6, trump, Tag.SLAM, f"6{SUIT_SYMBOLS[trump]} ({combined} combined points)")

    def _answer_ace_ask(self, ctx, ask):
        """Canonical reply to partner's Gerber or Blackwood"""
        recognition = self.recognition_of(ctx, ask)
        if recognition is None:
            return None
        token = ace_reply(ctx.config, recognition, ctx.hand)
        if recognition.key in REPLY_TAGS:
            tag = REPLY_TAGS[recognition.key]
        elif recognition.tag == Tag.RKCB:
            tag = Tag.KEYCARD_REPLY
        else:
            tag = Tag.ACE_REPLY
        shown = decode_ace_reply(ctx.config, recognition, token) or {}
        reply = parse_bid(token)
        return ctx.bid(reply.level, reply.strain, tag,
                       f"{bid_label(reply)} reply to {recognition.meaning.split(':')[0]} ({_describe(shown)})")

    # ==================== After the reply ====================

    def _after_ace_reply(self, ctx):
        """The asker places the contract from partner's reply"""
        my_ask = ctx.my_contracts[-1] if ctx.my_contracts else None
        if my_ask is None:
            return None
        recognition = self.recognition_of(ctx, my_ask)
        if recognition is None or recognition.category != 'ace_asking':
            return None
        shown = decode_ace_reply(ctx.config, recognition, ctx.partner_last)
        if shown is None:
            return None
        logger.debug("Ace reply %s decoded as %s", ctx.partner_last.token, shown)
        hand = ctx.hand

        if recognition.key == 'gerber_kings':
            kings = _resolve(shown['kings'], hand.kings, 4)
            level = 7 if kings + hand.kings == 4 and ctx.hcp >= 19 else 6
            return ctx.bid(level, Denom.nt, Tag.SLAM,
                           f"{level}NT ({kings + hand.kings} kings between us)")

        if 'keycards' in shown:
            trump = recognition.details.get('trump')
            theirs = _resolve(shown['keycards'], hand.keycards(trump), 5)
            missing = 5 - theirs - hand.keycards(trump)
            queen = shown.get('trump_queen') or hand.has_trump_queen(trump)
            return self._place_slam(ctx, trump, missing, queen, 'key cards')

        aces = _resolve(shown['aces'], hand.aces, 4)
        missing = 4 - aces - hand.aces
        if recognition.key == 'gerber':
            if missing == 0 and ctx.setting('ace_asking', 'gerber', 'continuations', True):
                bid = ctx.bid(5, Denom.clubs, Tag.GERBER_KINGS, "5♣ Gerber (all aces held, asking for kings)")
                if bid:
                    return bid
            return self._place_slam(ctx, Denom.nt, missing, True, 'aces')
        trump = recognition.details.get('trump') or find_trump_suit(ctx) or Denom.nt
        return self._place_slam(ctx, trump, missing, True, 'aces')

    def _place_slam(self, ctx, trump, missing, queen, what):
        symbol = SUIT_SYMBOLS[trump]
        if missing >= 2 or (missing == 1 and not queen):
            level = ctx.cheapest(trump)
            if level is not None and level <= 5:
                return ctx.bid(level, trump, Tag.SLAM_SIGNOFF,
                               f"{level}{symbol} sign-off ({missing} {what} missing)")
            return ctx.pass_(Tag.SLAM_SIGNOFF, f"Pass ({missing} {what} missing)")
        level = 6
        if missing == 0 and ctx.hcp >= 19:
            level = 7
        bid = ctx.bid(level, trump, Tag.SLAM, f"{level}{symbol} ({missing} {what} missing)")
        if bid is None:
            return ctx.pass_(Tag.SLAM_SIGNOFF, f"Pass ({missing} {what} missing)")
        return bid

    # ==================== Control cue-bids ====================

    def _control_cue(self, ctx, trump):
        """Cheapest first-round control below game in the agreed major"""
        if trump not in MAJORS or not ctx.enabled('slam_bidding', 'control_showing_cue_bids'):
            return None
        game = Bid.contract(4, trump)
        for suit in SUITS:
            if suit == trump or not ctx.hand.first_round_control(suit):
                continue
            level = ctx.cheapest(suit)
            if level is None:
                continue
            cue = Bid.contract(level, suit)
            if level >= 3 and game.outranks(cue):
                return ctx.bid(level, suit, Tag.CONTROL_CUE,
                               f"{bid_label(cue)} control cue-bid ({SUIT_SYMBOLS[trump]} agreed, slam interest)")
        return None

    def _answer_control_cue(self, ctx, partner_range):
        """Partner cue-bid a control: cooperate with extras, else sign off"""
        trump = find_trump_suit(ctx)
        if trump is None:
            trump = ctx.partner_suits[0] if ctx.partner_suits else None
        if trump is None:
            return None
        combined = ctx.hcp + partner_range[0]
        if combined >= SMALL_SLAM_POINTS:
            return self._slam_try(ctx, trump, combined)
        if combined >= CONTROL_CUE_POINTS - 2:
            cue = self._control_cue(ctx, trump)
            if cue is not None:
                return cue
        return ctx.bid_cheapest(trump, Tag.SLAM_SIGNOFF,
                                f"Sign-off in {SUIT_SYMBOLS[trump]} ({combined} combined points)")


def _resolve(options, own, total):
    """
    Pick one count from an ambiguous reply (0 or 4, 1 or 4...)

    With none of our own the higher count is assumed, otherwise the lower
    one that still fits in the deck.
    """
    valid = [count for count in options if count + own <= total]
    if not valid:
        return min(options)
    return max(valid) if own == 0 else min(valid)


def _describe(shown):
    if not shown:
        return 'conventional reply'
    parts = []
    for key in ('aces', 'kings', 'keycards'):
        if key in shown:
            parts.append(f"{' or '.join(str(count) for count in shown[key])} {key}")
    if 'trump_queen' in shown:
        parts.append('with the trump queen' if shown['trump_queen'] else 'without the trump queen')
    return ', '.join(parts)
