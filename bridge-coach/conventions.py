"""
Convention Catalog
Recognizers and reply generators for the conventions the engine plays

A recognizer looks at an auction (before the call) from the bidder's seat
and decides whether a call is an instance of a convention. A reply generator
computes the canonical answer for a hand. The engine and the explanation
layer share these, so a call means the same thing to both.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from endplay.types import Denom

from auction import Auction
from bid_context import AuctionView
from bridge_types import GAME_LEVEL, MAJORS, MINORS, STRAIN_RANK, SUIT_NAMES, SUITS, Tag, parse_bid
from legality import cheapest_level

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Recognition:
    """A call identified as a convention"""
    key: str
    category: str
    tag: Tag
    meaning: str
    details: dict = field(default_factory=dict)


@dataclass(frozen=True)
class ConventionEntry:
    key: str
    category: str
    description: str
    recognizer: Optional[Callable] = None
    responder: Optional[Callable] = None


# ==================== Ace asking ====================

GERBER_KING_REPLIES = ('5D', '5H', '5S', '5NT')
BLACKWOOD_REPLIES = ('5C', '5D', '5H', '5S')


def _partner_nt_just_bid(view):
    last = view.last_contract
    return (
        last is not None and last.seat == view.partner
        and last.strain == Denom.nt and last.level <= 2
    )


def find_trump_suit(view):
    """
    Suit agreed by our side: named by both partners, or set by a raise
    convention (Jacoby 2NT, splinter, Bergen, Drury, cue-bid raise)
    """
    mine, theirs = view.my_suits, view.partner_suits
    for call in reversed(view.calls):
        if call.is_contract and view.is_us(call.seat) and call.strain in SUITS:
            if call.strain in mine and call.strain in theirs:
                return call.strain
    for call in view.our_actions:
        if call.tag in (Tag.JACOBY_2NT, Tag.SPLINTER, Tag.BERGEN, Tag.DRURY,
                        Tag.CUE_BID_RAISE, Tag.JORDAN_2NT, Tag.LIMIT_RAISE):
            opening = view.opening
            if opening and view.is_us(opening.seat) and opening.strain in SUITS:
                return opening.strain
    opening = view.opening
    if opening and view.is_us(opening.seat) and opening.strain in MAJORS and opening.level == 1:
        responder = view.seat if opening.seat == view.partner else view.partner
        for call in view.actions_of(responder):
            recognition = raise_conventions(None, _view_before(view, call), call)
            if recognition and recognition.key in ('jacoby_2nt', 'splinter_bids', 'bergen_raises', 'drury'):
                return opening.strain
    return None


def _view_before(view, call):
    """View of the auction as it stood when `call` was made, from its bidder"""
    index = next(i for i, candidate in enumerate(view.calls) if candidate is call)
    prefix = Auction(dealer=view.auction.dealer, our_seat=view.auction.our_seat,
                     vulnerability=view.auction.vulnerability, calls=view.calls[:index])
    return AuctionView(prefix, call.seat)


def ace_asking(config, view, bid):
    """Gerber 4C, Gerber kings 5C, Blackwood/RKCB 4NT"""
    if not bid.is_contract:
        return None
    if bid.level == 4 and bid.strain == Denom.clubs:
        if config.is_enabled('ace_asking', 'gerber') and _partner_nt_just_bid(view):
            return Recognition('gerber', 'ace_asking', Tag.GERBER, 'Gerber: asks for aces')
        return None
    if bid.level == 5 and bid.strain == Denom.clubs:
        if not (config.is_enabled('ace_asking', 'gerber')
                and config.setting('ace_asking', 'gerber', 'continuations', True)):
            return None
        my_contracts = view.my_contracts
        partner_last = view.partner_last
        if my_contracts and my_contracts[-1].token == '4C' and partner_last is not None \
                and partner_last.is_contract and partner_last.level == 4:
            asked = ace_asking(config, _view_before(view, my_contracts[-1]), my_contracts[-1])
            if asked and asked.key == 'gerber':
                return Recognition('gerber_kings', 'ace_asking', Tag.GERBER_KINGS,
                                   'Gerber continuation: asks for kings')
        return None
    if bid.level == 4 and bid.strain == Denom.nt:
        if not config.is_enabled('ace_asking', 'blackwood'):
            return None
        if _partner_nt_just_bid(view) or not view.our_actions:
            return None
        trump = find_trump_suit(view)
        last = view.last_contract
        if trump is None and not (last and view.is_us(last.seat) and last.strain in SUITS):
            return None
        variant = config.setting('ace_asking', 'blackwood', 'variant', 'rkcb')
        if variant == 'rkcb' and trump is not None:
            return Recognition('blackwood', 'ace_asking', Tag.RKCB,
                               'Roman Key Card Blackwood: asks for key cards',
                               {'variant': 'rkcb', 'trump': trump})
        return Recognition('blackwood', 'ace_asking', Tag.BLACKWOOD,
                           'Blackwood: asks for aces', {'variant': 'classic', 'trump': trump})
    return None


def ace_reply(config, recognition, hand):
    """Canonical reply token to an ace-asking call"""
    if recognition.key == 'gerber':
        replies = config.setting('ace_asking', 'gerber', 'responses_map', ['4D', '4H', '4S', '4NT'])
        return replies[hand.aces % 4]
    if recognition.key == 'gerber_kings':
        return GERBER_KING_REPLIES[hand.kings % 4]
    trump = recognition.details.get('trump')
    if recognition.details.get('variant') == 'rkcb' and trump is not None:
        keycards = hand.keycards(trump)
        scheme = config.setting('ace_asking', 'blackwood', 'responses', '1430')
        if keycards % 3 == 2:
            return '5S' if hand.has_trump_queen(trump) else '5H'
        one_or_four = keycards % 3 == 1
        if scheme == '3014':
            return '5D' if one_or_four else '5C'
        return '5C' if one_or_four else '5D'
    return BLACKWOOD_REPLIES[hand.aces % 4]


def decode_ace_reply(config, recognition, reply):
    """What a reply to an ace-asking call shows, e.g. {'keycards': (1, 4)}"""
    token = parse_bid(reply).token
    if recognition.key == 'gerber':
        replies = config.setting('ace_asking', 'gerber', 'responses_map', ['4D', '4H', '4S', '4NT'])
        index = replies.index(token) if token in replies else None
        key = 'aces'
    elif recognition.key == 'gerber_kings':
        index = GERBER_KING_REPLIES.index(token) if token in GERBER_KING_REPLIES else None
        key = 'kings'
    elif recognition.details.get('variant') == 'rkcb':
        scheme = config.setting('ace_asking', 'blackwood', 'responses', '1430')
        one_four, zero_three = ('5C', '5D') if scheme != '3014' else ('5D', '5C')
        table = {
            one_four: {'keycards': (1, 4)},
            zero_three: {'keycards': (0, 3)},
            '5H': {'keycards': (2, 5), 'trump_queen': False},
            '5S': {'keycards': (2, 5), 'trump_queen': True},
        }
        return table.get(token)
    else:
        index = BLACKWOOD_REPLIES.index(token) if token in BLACKWOOD_REPLIES else None
        key = 'aces'
    if index is None:
        return None
    return {key: (0, 4) if index == 0 else (index,)}


# ==================== Two-suited overcalls ====================

def _opening_overcall_position(view):
    """They opened at the one level in a suit and this is our first action over it"""
    opening = view.opening
    if not view.they_opened or opening.level != 1 or opening.strain not in SUITS:
        return None
    if view.my_actions or view.partner_actions:
        return None
    if view.last_contract is not opening or view.last_action is not opening:
        return None
    return opening


def two_suited(config, view, bid):
    """Michaels cue-bid and Unusual 2NT"""
    opening = _opening_overcall_position(view)
    if opening is None or not bid.is_contract or bid.level != 2:
        return None
    if bid.strain == opening.strain:
        if not config.is_enabled('competitive', 'michaels'):
            return None
        if config.setting('competitive', 'michaels', 'direct_only', True) and not view.direct_over_opening:
            return None
        if opening.strain in MINORS:
            suits = (Denom.hearts, Denom.spades)
        else:
            other = Denom.spades if opening.strain == Denom.hearts else Denom.hearts
            suits = (other, None)
        return Recognition('michaels', 'competitive', Tag.MICHAELS,
                           'Michaels cue-bid: two-suited', {'suits': suits})
    if bid.strain == Denom.nt:
        if not config.is_enabled('notrump_defenses', 'unusual_nt'):
            return None
        if not config.setting('notrump_defenses', 'unusual_nt', 'direct', True) and view.direct_over_opening:
            return None
        if opening.strain in MAJORS:
            suits = (Denom.clubs, Denom.diamonds)
        elif config.setting('notrump_defenses', 'unusual_nt', 'over_minors', False):
            suits = tuple(suit for suit in SUITS if suit != opening.strain)[:2]
        else:
            return None
        return Recognition('unusual_nt', 'notrump_defenses', Tag.UNUSUAL_NT,
                           'Unusual 2NT: the two lowest unbid suits', {'suits': suits})
    return None


# ==================== Defenses to 1NT and strong 1C ====================

DONT_MEANINGS = {
    'X': ('one long suit', ()),
    '2C': ('clubs and a higher suit', (Denom.clubs,)),
    '2D': ('diamonds and a higher suit', (Denom.diamonds,)),
    '2H': ('hearts and spades', (Denom.hearts, Denom.spades)),
    '2S': ('long spades', (Denom.spades,)),
}
MECKWELL_MEANINGS = {
    'X': ('one long minor, or both majors', ()),
    '2C': ('clubs and a major', (Denom.clubs,)),
    '2D': ('diamonds and a major', (Denom.diamonds,)),
    '2H': ('long hearts', (Denom.hearts,)),
    '2S': ('long spades', (Denom.spades,)),
    '2NT': ('both minors', (Denom.clubs, Denom.diamonds)),
}


def opposing_strong_opening(config, view):
    """
    Category of defense that applies: 'notrump_defenses' against a 1NT
    opening, 'strong_club_defenses' against an artificial 1C. None otherwise.
    """
    opening = view.opening
    if not view.they_opened or view.my_actions or view.partner_actions:
        return None
    if view.last_contract is not opening:
        return None
    if opening.token == '1NT':
        return 'notrump_defenses'
    if opening.token == '1C' and config.is_enabled('opening_bids', 'strong_1_club'):
        return 'strong_club_defenses'
    return None


def defense_system(config, category):
    for key in ('dont', 'meckwell'):
        if config.is_enabled(category, key):
            return key
    return None


def notrump_defense(config, view, bid):
    """DONT or Meckwell call over an opposing 1NT (or strong 1C)"""
    category = opposing_strong_opening(config, view)
    if category is None:
        return None
    system = defense_system(config, category)
    if system is None:
        return None
    table = DONT_MEANINGS if system == 'dont' else MECKWELL_MEANINGS
    if bid.token not in table:
        return None
    meaning, suits = table[bid.token]
    tag = Tag.DONT if system == 'dont' else Tag.MECKWELL
    name = 'DONT' if system == 'dont' else 'Meckwell'
    return Recognition(system, category, tag, f"{name}: {meaning}", {'suits': suits})


# ==================== No-trump response structures ====================

def _nt_opening_position(view):
    """Partner opened 1NT/2NT and we have not yet acted; returns the opening"""
    opening = view.opening
    if not view.partner_opened or opening.strain != Denom.nt or opening.level > 2:
        return None
    if view.my_actions:
        return None
    return opening


def notrump_structure(config, view, bid):
    """Stayman, transfers and Lebensohl after partner's no-trump opening"""
    opening = _nt_opening_position(view)
    if opening is None:
        return None
    last = view.last_contract
    interference = last is not opening
    if interference:
        return _contested_notrump_structure(config, view, bid, opening, last)
    if not bid.is_contract:
        return None
    step = opening.level + 1
    if bid.level == step and bid.strain == Denom.clubs and config.is_enabled('notrump_responses', 'stayman'):
        return Recognition('stayman', 'notrump_responses', Tag.STAYMAN, 'Stayman: asks for a 4-card major')
    if config.is_enabled('notrump_responses', 'jacoby_transfers') and bid.level == step:
        if bid.strain == Denom.diamonds:
            return _transfer('jacoby_transfers', Tag.JACOBY_TRANSFER, Denom.hearts)
        if bid.strain == Denom.hearts:
            return _transfer('jacoby_transfers', Tag.JACOBY_TRANSFER, Denom.spades)
    if config.is_enabled('notrump_responses', 'texas_transfers') and bid.level == 4:
        if bid.strain == Denom.diamonds:
            return _transfer('texas_transfers', Tag.TEXAS_TRANSFER, Denom.hearts)
        if bid.strain == Denom.hearts:
            return _transfer('texas_transfers', Tag.TEXAS_TRANSFER, Denom.spades)
    if config.is_enabled('notrump_responses', 'minor_suit_transfers') and opening.level == 1:
        if bid.token == '2S':
            return _transfer('minor_suit_transfers', Tag.MINOR_TRANSFER, Denom.clubs)
        if bid.token == '2NT':
            return _transfer('minor_suit_transfers', Tag.MINOR_TRANSFER, Denom.diamonds)
    return None


def _transfer(key, tag, target):
    return Recognition(key, 'notrump_responses', tag, 'Transfer', {'target': target})


def systems_on(config, name):
    return bool(config.is_enabled('general', 'systems_on_over_1nt_interference')
                and config.setting('general', 'systems_on_over_1nt_interference', name, False))


def _contested_notrump_structure(config, view, bid, opening, last):
    if opening.level != 1 or last.seat != view.rho:
        return None
    if last.token == '2C':
        if bid.is_double and systems_on(config, 'stolen_bid_double'):
            return Recognition('stolen_bid_double', 'general', Tag.STOLEN_BID_DOUBLE,
                               'Stolen-bid double: Stayman')
        if systems_on(config, 'transfers') and bid.is_contract and bid.level == 2:
            if bid.strain == Denom.diamonds:
                return _transfer('jacoby_transfers', Tag.JACOBY_TRANSFER, Denom.hearts)
            if bid.strain == Denom.hearts:
                return _transfer('jacoby_transfers', Tag.JACOBY_TRANSFER, Denom.spades)
    if last.level == 2 and last.strain in SUITS and bid.token == '2NT' \
            and config.is_enabled('notrump_defenses', 'lebensohl'):
        return Recognition('lebensohl', 'notrump_defenses', Tag.LEBENSOHL_RELAY,
                           'Lebensohl 2NT: relay to 3C')
    return None


# ==================== Raise conventions ====================

def _uncontested_major_response(view):
    """Partner opened 1H/1S, RHO passed, we have not acted; returns the opening"""
    opening = view.opening
    if not view.partner_opened or opening.level != 1 or opening.strain not in MAJORS:
        return None
    if view.my_actions or view.last_action is not opening:
        return None
    return opening


def raise_conventions(config, view, bid):
    """Jacoby 2NT, splinters, Bergen and Drury over partner's major"""
    opening = _uncontested_major_response(view)
    if opening is None or not bid.is_contract:
        return None

    def on(key):
        return config is None or config.is_enabled('responses', key)

    major = opening.strain
    if bid.token == '2NT' and on('jacoby_2nt') and not view.is_passed_hand:
        return Recognition('jacoby_2nt', 'responses', Tag.JACOBY_2NT, 'Jacoby 2NT: game-forcing raise')
    if bid.token == '2C' and on('drury') and view.is_passed_hand:
        return Recognition('drury', 'responses', Tag.DRURY, 'Drury: limit raise by a passed hand')
    if bid.token in ('3C', '3D') and on('bergen_raises') and config is not None:
        meaning = '7-10 points' if bid.token == '3C' else '11-12 points'
        return Recognition('bergen_raises', 'responses', Tag.BERGEN,
                           f"Bergen raise: four trumps, {meaning}")
    if bid.strain in SUITS and bid.strain != major and on('splinter_bids'):
        level_after_opening = 1 if STRAIN_RANK[bid.strain] > STRAIN_RANK[major] else 2
        if bid.level == level_after_opening + 2 and bid.level <= 4:
            return Recognition('splinter_bids', 'responses', Tag.SPLINTER,
                               'Splinter: four trumps, game values, shortness',
                               {'short_suit': bid.strain})
    return None


def cue_bid_raise(config, view, bid):
    """
    A bid in the opponents' suit while partner has a suit of their own

    Over a minor opening the cue asks for a stopper instead of raising.
    """
    if not bid.is_contract or bid.strain not in view.their_suits:
        return None
    if not view.partner_suits or bid.strain in view.partner_suits:
        return None
    if view.my_actions:
        return None
    if not config.is_enabled('competitive', 'cue_bid_raises'):
        return None
    opening = view.opening
    if view.partner_opened and opening.strain in MINORS and opening.level == 1:
        return Recognition('cue_bid_raises', 'competitive', Tag.STOPPER_ASK,
                           f'Stopper ask: game values in {SUIT_NAMES[opening.strain]}, asking for a stopper',
                           {'target': opening.strain, 'ask': bid.strain})
    return Recognition('cue_bid_raises', 'competitive', Tag.CUE_BID_RAISE,
                       'Cue-bid raise: limit raise or better in partner\'s suit',
                       {'target': view.partner_suits[0]})


def jordan_or_feature(config, view, bid):
    """Jordan 2NT over a takeout double; 2NT feature ask over a weak two"""
    opening = view.opening
    if not view.partner_opened or view.my_actions or bid.token != '2NT':
        return None
    if opening.level == 1 and opening.strain in SUITS:
        rho = view.rho_last
        if rho is not None and rho.is_double and view.last_action is rho \
                and config.is_enabled('competitive', 'jordan_2nt'):
            return Recognition('jordan_2nt', 'competitive', Tag.JORDAN_2NT,
                               'Jordan 2NT: limit raise over the double')
    if opening.level == 2 and opening.strain in (Denom.diamonds, Denom.hearts, Denom.spades) \
            and view.last_action is opening and config.is_enabled('preempts', 'weak_two'):
        return Recognition('feature_ask', 'preempts', Tag.FEATURE_ASK, '2NT feature ask')
    return None


# ==================== Doubles ====================

def support_double_applies(config, view):
    """We opened, partner answered with a one-level suit, RHO came in at or below the ceiling"""
    if not config.is_enabled('competitive', 'support_doubles'):
        return False
    if not view.i_opened or len(view.my_actions) != 1 or len(view.partner_actions) != 1:
        return False
    response = view.partner_actions[0]
    if not response.is_contract or response.level != 1 or response.strain not in SUITS:
        return False
    rho = view.rho_last
    if rho is None or rho is not view.last_action or rho.is_pass:
        return False
    if rho.is_double:
        return True
    thru = parse_bid(config.setting('competitive', 'support_doubles', 'thru', '2S'))
    return not rho.outranks(thru)


def classify_double(config, view):
    """Which kind of double a Double by this seat would be now"""
    last = view.last_contract
    if last is None:
        return None
    opening = view.opening
    if support_double_applies(config, view):
        key = 'support_doubles'
        if view.rho_last.is_double:
            return Recognition(key, 'competitive', Tag.SUPPORT_REDOUBLE, 'Support redouble: exactly three-card support')
        return Recognition(key, 'competitive', Tag.SUPPORT_DOUBLE, 'Support double: exactly three-card support')

    if view.partner_opened and opening.level == 1 and opening.strain in SUITS \
            and not view.my_actions and last.seat == view.rho and last.strain in SUITS \
            and config.is_enabled('competitive', 'negative_doubles') \
            and last.level <= int(config.setting('competitive', 'negative_doubles', 'thru_level', 3)):
        return Recognition('negative_doubles', 'competitive', Tag.NEGATIVE_DOUBLE,
                           'Negative double: values and the unbid suit(s)')

    partner_last = view.partner_last
    if view.they_opened and opening.seat == view.lho and partner_last is not None \
            and partner_last.is_double and not view.my_actions and last.seat == view.rho \
            and last.strain == opening.strain and last is not opening \
            and config.is_enabled('competitive', 'responsive_doubles') \
            and last.level <= int(config.setting('competitive', 'responsive_doubles', 'thru_level', 3)):
        return Recognition('responsive_doubles', 'competitive', Tag.RESPONSIVE_DOUBLE,
                           'Responsive double: values, no clear suit')

    if view.balancing and config.is_enabled('competitive', 'reopening_doubles') \
            and (view.they_opened or view.i_opened):
        return Recognition('reopening_doubles', 'competitive', Tag.REOPENING_DOUBLE,
                           'Reopening double: takeout in the pass-out seat')

    if view.they_opened and not view.my_actions and not view.partner_actions \
            and last.strain in SUITS and not view.is_us(last.seat) \
            and config.is_enabled('competitive', 'takeout_doubles'):
        return Recognition('takeout_doubles', 'competitive', Tag.TAKEOUT_DOUBLE,
                           'Takeout double: support for the unbid suits')

    return Recognition('penalty', 'competitive', Tag.PENALTY_DOUBLE, 'Penalty double')


# ==================== Catalog ====================

def _ace_reply_responder(config, view, hand):
    """Reply to partner's ace-asking call, if partner just asked"""
    partner_last = view.partner_last
    if partner_last is None or not partner_last.is_contract or view.last_action is not partner_last:
        return None
    recognition = ace_asking(config, _view_before(view, partner_last), partner_last)
    if recognition is None:
        return None
    return ace_reply(config, recognition, hand)


def stayman_reply(hand):
    """2D denies a major, 2H shows hearts (maybe spades too), 2S shows spades"""
    if hand.length(Denom.hearts) >= 4:
        return Denom.hearts
    if hand.length(Denom.spades) >= 4:
        return Denom.spades
    return Denom.diamonds


CATALOG = (
    ConventionEntry('gerber', 'ace_asking', 'Gerber 4C ace ask over no-trump', ace_asking, _ace_reply_responder),
    ConventionEntry('blackwood', 'ace_asking', 'Blackwood / RKCB 4NT', ace_asking, _ace_reply_responder),
    ConventionEntry('stayman', 'notrump_responses', 'Stayman major-suit ask', notrump_structure),
    ConventionEntry('jacoby_transfers', 'notrump_responses', 'Jacoby transfers', notrump_structure),
    ConventionEntry('texas_transfers', 'notrump_responses', 'Texas transfers', notrump_structure),
    ConventionEntry('minor_suit_transfers', 'notrump_responses', 'Minor-suit transfers', notrump_structure),
    ConventionEntry('lebensohl', 'notrump_defenses', 'Lebensohl over interference', notrump_structure),
    ConventionEntry('dont', 'notrump_defenses', 'DONT defense', notrump_defense),
    ConventionEntry('meckwell', 'notrump_defenses', 'Meckwell defense', notrump_defense),
    ConventionEntry('michaels', 'competitive', 'Michaels cue-bid', two_suited),
    ConventionEntry('unusual_nt', 'notrump_defenses', 'Unusual 2NT', two_suited),
    ConventionEntry('jacoby_2nt', 'responses', 'Jacoby 2NT', raise_conventions),
    ConventionEntry('splinter_bids', 'responses', 'Splinter raises', raise_conventions),
    ConventionEntry('bergen_raises', 'responses', 'Bergen raises', raise_conventions),
    ConventionEntry('drury', 'responses', 'Drury', raise_conventions),
    ConventionEntry('cue_bid_raises', 'competitive', 'Cue-bid raises', cue_bid_raise),
    ConventionEntry('jordan_2nt', 'competitive', 'Jordan 2NT', jordan_or_feature),
    ConventionEntry('weak_two', 'preempts', 'Weak twos with 2NT feature ask', jordan_or_feature),
)


class ConventionCard:
    """The catalog bound to a live config"""

    def __init__(self, config):
        self.config = config

    def entries(self):
        return CATALOG

    def recognize(self, auction, bid, seat=None):
        """First convention the call belongs to, or None"""
        bid = parse_bid(bid)
        seat = seat if seat is not None else auction.next_seat
        view = AuctionView(auction, seat)
        if bid.is_double or bid.is_redouble:
            recognition = notrump_defense(self.config, view, bid) \
                or notrump_structure(self.config, view, bid)
            return recognition or classify_double(self.config, view)
        seen = set()
        for entry in CATALOG:
            if entry.recognizer in seen:
                continue
            seen.add(entry.recognizer)
            recognition = entry.recognizer(self.config, view, bid)
            if recognition is not None:
                return recognition
        return None

    def reply(self, auction, hand, seat=None):
        """Canonical conventional reply for `hand`, when partner has just asked"""
        seat = seat if seat is not None else auction.next_seat
        view = AuctionView(auction, seat)
        for entry in CATALOG:
            if entry.responder is None:
                continue
            token = entry.responder(self.config, view, hand)
            if token is not None:
                return token
        return None

    def ace_asking(self, auction, bid, seat=None):
        seat = seat if seat is not None else auction.next_seat
        return ace_asking(self.config, AuctionView(auction, seat), parse_bid(bid))

    def two_suited(self, auction, bid, seat=None):
        seat = seat if seat is not None else auction.next_seat
        return two_suited(self.config, AuctionView(auction, seat), parse_bid(bid))

    def find_trump_suit(self, auction, seat=None):
        seat = seat if seat is not None else auction.next_seat
        return find_trump_suit(AuctionView(auction, seat))

    def adjust_for_vulnerability(self, kind, vulnerable_we, vulnerable_they):
        return self.config.vulnerability_adjustment(kind, vulnerable_we, vulnerable_they)


# ==================== Call meaning ====================

ASK_REPLIES = {
    Tag.GERBER: Tag.ACE_REPLY,
    Tag.BLACKWOOD: Tag.ACE_REPLY,
    Tag.RKCB: Tag.KEYCARD_REPLY,
    Tag.GERBER_KINGS: Tag.KING_REPLY,
    Tag.STAYMAN: Tag.STAYMAN_REPLY,
    Tag.FEATURE_ASK: Tag.FEATURE_REPLY,
    Tag.DRURY: Tag.DRURY_REPLY,
    Tag.JACOBY_2NT: Tag.JACOBY_2NT_REBID,
    Tag.WAITING_2D: Tag.STRONG_REBID,
}
TRANSFER_TAGS = (Tag.JACOBY_TRANSFER, Tag.TEXAS_TRANSFER, Tag.MINOR_TRANSFER)
CONTRACT_RECOGNIZERS = (
    ace_asking, notrump_defense, notrump_structure, two_suited,
    raise_conventions, jordan_or_feature, cue_bid_raise,
)


def view_before(view, call):
    return _view_before(view, call)


def call_recognition(config, view, call):
    """Recognition of a call already in the auction, from its own bidder's view"""
    return recognize(config, _view_before(view, call), call)


def recognize(config, view, bid):
    """Recognition of `bid` made from `view`, or None for a natural call"""
    if bid.is_contract:
        for recognizer in CONTRACT_RECOGNIZERS:
            recognition = recognizer(config, view, bid)
            if recognition is not None:
                return recognition
        return None
    return notrump_defense(config, view, bid) or notrump_structure(config, view, bid)


def call_meaning(config, view, call):
    """Tag of a call already in the auction (its own tag when it carries one)"""
    if call.tag is not None:
        return call.tag
    return classify_call(config, _view_before(view, call), call)


def classify_call(config, view, bid):
    """Tag describing `bid` made from `view` (the auction as it stood before it)"""
    bid = parse_bid(bid)
    if bid.tag is not None:
        return bid.tag
    if bid.is_pass:
        return Tag.PASS
    if not bid.is_contract:
        return _classify_double(config, view, bid)
    reply = _reply_tag(config, view, bid)
    if reply is not None:
        return reply
    for recognizer in CONTRACT_RECOGNIZERS:
        recognition = recognizer(config, view, bid)
        if recognition is not None:
            return recognition.tag
    return _positional_tag(config, view, bid)


def _classify_double(config, view, bid):
    recognition = notrump_defense(config, view, bid) or notrump_structure(config, view, bid)
    if recognition is not None:
        return recognition.tag
    if bid.is_double:
        return classify_double(config, view).tag
    if support_double_applies(config, view) and view.rho_last.is_double:
        return Tag.SUPPORT_REDOUBLE
    rho = view.rho_last
    if rho is not None and rho.is_double and view.partner_opened and not view.my_actions:
        return Tag.REDOUBLE_VALUES
    return Tag.NATURAL


def _reply_tag(config, view, bid):
    """Tag for an answer to partner's conventional ask"""
    partner_last = view.partner_last
    if partner_last is None or partner_last.is_pass or view.last_action is not partner_last:
        return None
    meaning = call_meaning(config, view, partner_last)
    if meaning in ASK_REPLIES:
        if meaning == Tag.WAITING_2D and not view.i_opened:
            return None
        return ASK_REPLIES[meaning]
    if meaning in TRANSFER_TAGS:
        recognition = call_recognition(config, view, partner_last)
        target = recognition.details.get('target') if recognition else None
        if bid.strain == target:
            if bid.level > cheapest_level(view.auction, target):
                return Tag.SUPER_ACCEPT
            return Tag.TRANSFER_ACCEPT
    if meaning == Tag.LEBENSOHL_RELAY and bid.token == '3C':
        return Tag.RELAY_ACCEPT
    return None


def _is_jump(view, bid):
    return bid.level > cheapest_level(view.auction, bid.strain)


def _positional_tag(config, view, bid):
    opening = view.opening
    if opening is None:
        return _opening_tag(config, bid)

    if bid.strain in SUITS and bid.level >= GAME_LEVEL[bid.strain] and bid.strain in view.partner_suits:
        return Tag.GAME_RAISE

    if view.partner_opened and not view.my_actions:
        if opening.token == '2C' and config.is_enabled('opening_bids', 'strong_2_clubs'):
            return Tag.WAITING_2D if bid.token == '2D' else Tag.POSITIVE_RESPONSE
        if opening.token == '1C' and config.is_enabled('opening_bids', 'strong_1_club'):
            return Tag.STRONG_1C_NEGATIVE if bid.token == '1D' else Tag.POSITIVE_RESPONSE
        contested = view.last_action is not opening
        if bid.strain == opening.strain:
            if contested:
                return Tag.COMPETITIVE_RAISE
            return Tag.LIMIT_RAISE if _is_jump(view, bid) else Tag.RAISE
        if bid.strain == Denom.nt:
            return Tag.NT_RESPONSE
        if _is_jump(view, bid):
            return Tag.JUMP_SHIFT
        return Tag.FREE_BID if contested else Tag.NEW_SUIT

    if view.they_opened and not view.my_actions and not view.partner_actions:
        if bid.strain == Denom.nt:
            return Tag.NT_OVERCALL
        return Tag.JUMP_OVERCALL if _is_jump(view, bid) else Tag.OVERCALL

    if view.they_opened and view.partner_actions and not view.my_actions:
        if bid.strain in view.partner_suits:
            return Tag.ADVANCER_RAISE
        return Tag.ADVANCE

    if bid.strain in view.partner_suits:
        return Tag.PREFERENCE if bid.level == cheapest_level(view.auction, bid.strain) \
            and len(view.partner_suits) > 1 else Tag.RAISE
    if bid.strain == Denom.nt:
        return Tag.REBID_NT
    if bid.strain in view.my_suits:
        return Tag.REBID_SUIT
    if view.i_opened and len(view.my_actions) == 1 and opening.strain in SUITS \
            and bid.level == 2 and STRAIN_RANK[bid.strain] > STRAIN_RANK[opening.strain]:
        return Tag.REVERSE
    return Tag.NEW_SUIT


def _opening_tag(config, bid):
    token = bid.token
    if token == '2C' and config.is_enabled('opening_bids', 'strong_2_clubs'):
        return Tag.OPEN_STRONG_2C
    if token == '1C' and config.is_enabled('opening_bids', 'strong_1_club'):
        return Tag.OPEN_STRONG_1C
    if token == '1NT':
        return Tag.OPEN_1NT
    if token == '2NT':
        return Tag.OPEN_2NT
    if bid.level == 2 and bid.strain in SUITS:
        return Tag.OPEN_WEAK_TWO
    if bid.level >= 3:
        return Tag.OPEN_PREEMPT
    return Tag.OPEN_ONE_SUIT
