"""
Call Explanations
Human-readable text for engine bids and for calls a caller asks about

Engine bids carry a tag and a rationale, so the text comes straight from
them. A bare call is first classified against the auction it would be made
in, using the same recognizers the engine reads partner's calls with.
"""

import logging

from bid_context import AuctionView
from bridge_types import MAJORS, SUITS, SUIT_NAMES, Tag, bid_label, parse_bid
from convention_config import ConventionConfig
from conventions import classify_call, recognize, view_before

logger = logging.getLogger(__name__)

TAG_TEXT = {
    # Openings
    Tag.OPEN_STRONG_2C: "Strong 2♣ opening: 22+ HCP or game in hand, artificial and forcing",
    Tag.OPEN_STRONG_1C: "Strong 1♣ opening: 16+ HCP, artificial and forcing",
    Tag.OPEN_1NT: "1NT opening: balanced, 15-17 HCP",
    Tag.OPEN_2NT: "2NT opening: balanced, 20-21 HCP",
    Tag.OPEN_WEAK_TWO: "Weak two: a good 6-card suit and 5-11 HCP",
    Tag.OPEN_PREEMPT: "Preempt: a long suit and a weak hand",
    Tag.OPEN_ONE_SUIT: "One-level opening in the longest suit: 12-21 points",
    Tag.OPEN_PASS: "Pass: not enough to open",

    # Strong sequences
    Tag.WAITING_2D: "2♦ waiting: artificial, says nothing about diamonds",
    Tag.POSITIVE_RESPONSE: "Positive response to a strong opening: 8+ HCP and a good suit",
    Tag.STRONG_REBID: "Opener describes the strong hand after the waiting response",
    Tag.STRONG_1C_NEGATIVE: "1♦ negative: 0-7 HCP over a strong 1♣",
    Tag.FORCED_CONTINUATION: "Forced bid: partner's call demands a response",

    # No-trump structures
    Tag.STAYMAN: "Stayman: asks opener for a 4-card major",
    Tag.STAYMAN_REPLY: "Stayman reply: 2♦ denies a 4-card major, 2♥/2♠ shows four",
    Tag.JACOBY_TRANSFER: "Jacoby transfer: shows 5+ cards in the next suit up",
    Tag.TEXAS_TRANSFER: "Texas transfer: 6+ card major, to play game from opener's side",
    Tag.MINOR_TRANSFER: "Minor-suit transfer: a long minor",
    Tag.TRANSFER_ACCEPT: "Completes partner's transfer",
    Tag.SUPER_ACCEPT: "Super-accept: 4-card support and a maximum",
    Tag.NT_INVITE: "No-trump invitation: asks partner to bid game with a maximum",
    Tag.NT_GAME: "No-trump game",
    Tag.NT_QUANTITATIVE: "Quantitative 4NT: invites 6NT, not ace asking",
    Tag.STOLEN_BID_DOUBLE: "Stolen-bid double: the Stayman or transfer the overcall took away",
    Tag.LEBENSOHL_RELAY: "Lebensohl 2NT: relay to 3♣, a weak hand or a slower sequence",
    Tag.LEBENSOHL_CUE: "Lebensohl cue-bid: game values, asks for a stopper",
    Tag.LEBENSOHL_GAME: "Direct no-trump game over interference",
    Tag.RELAY_ACCEPT: "3♣ completing the Lebensohl relay",

    # Slam bidding
    Tag.GERBER: "Gerber: asks partner how many aces",
    Tag.GERBER_KINGS: "Gerber king ask: all aces held, asks for kings",
    Tag.BLACKWOOD: "Blackwood: asks partner how many aces",
    Tag.RKCB: "Roman Key Card Blackwood: asks for key cards in the agreed suit",
    Tag.ACE_REPLY: "Ace reply: step response showing the number of aces",
    Tag.KEYCARD_REPLY: "Key card reply: step response showing key cards and the trump queen",
    Tag.KING_REPLY: "King reply: step response showing the number of kings",
    Tag.SLAM: "Slam",
    Tag.SLAM_SIGNOFF: "Slam sign-off: too many controls missing",
    Tag.CONTROL_CUE: "Control cue-bid: first-round control, slam interest",

    # Raises
    Tag.RAISE: "Simple raise: support and 6-10 points",
    Tag.LIMIT_RAISE: "Limit raise: support and 10-12 points, invitational",
    Tag.GAME_RAISE: "Raise to game",
    Tag.JACOBY_2NT: "Jacoby 2NT: 4+ card support, game forcing",
    Tag.JACOBY_2NT_REBID: "Opener's rebid over Jacoby 2NT: shortness, a side suit or strength",
    Tag.SPLINTER: "Splinter: game-forcing raise with a singleton or void in the bid suit",
    Tag.BERGEN: "Bergen raise: 4-card support, range shown by the step",
    Tag.DRURY: "Drury: limit raise by a passed hand",
    Tag.DRURY_REPLY: "Drury reply: shows whether opener has a full opening",
    Tag.FEATURE_ASK: "2NT feature ask over a weak two",
    Tag.FEATURE_REPLY: "Feature reply: an outside ace or king, or a rebid of the suit",
    Tag.CUE_BID_RAISE: "Cue-bid raise: limit raise or better in partner's suit",
    Tag.COMPETITIVE_RAISE: "Competitive raise over interference",
    Tag.JORDAN_2NT: "Jordan 2NT: limit raise or better over a takeout double",
    Tag.REDOUBLE_VALUES: "Redouble: 10+ HCP over the double",
    Tag.ADVANCER_RAISE: "Raise of partner's overcall",

    # Natural continuations
    Tag.NEW_SUIT: "New suit: 4+ cards, forcing one round",
    Tag.JUMP_SHIFT: "Jump shift: strong hand, game forcing",
    Tag.NT_RESPONSE: "No-trump response: 6-10 HCP, no 3-card support for opener's major",
    Tag.REBID_SUIT: "Rebid of a long suit",
    Tag.REBID_NT: "No-trump rebid: balanced, range shown by the level",
    Tag.REVERSE: "Reverse: a higher suit at the two level, 17+ points",
    Tag.PREFERENCE: "Preference between partner's suits",
    Tag.GAME_TRY: "Game try: invites partner to bid game",
    Tag.PLACEMENT: "Places the contract",

    # Competitive
    Tag.NEGATIVE_DOUBLE: "Negative double: shows the unbid suits",
    Tag.RESPONSIVE_DOUBLE: "Responsive double: values and the unbid suits",
    Tag.SUPPORT_DOUBLE: "Support double: exactly 3-card support",
    Tag.SUPPORT_REDOUBLE: "Support redouble: exactly 3-card support",
    Tag.REOPENING_DOUBLE: "Reopening double: shortness in their suit, asks partner to bid or pass for penalties",
    Tag.TAKEOUT_DOUBLE: "Takeout double: opening values and support for the unbid suits",
    Tag.PENALTY_DOUBLE: "Penalty double: expects to defeat the contract",
    Tag.MICHAELS: "Michaels cue-bid: two-suited",
    Tag.UNUSUAL_NT: "Unusual 2NT: the two lowest unbid suits",
    Tag.OVERCALL: "Overcall: a good 5+ card suit",
    Tag.JUMP_OVERCALL: "Weak jump overcall: a 6-card suit and a weak hand",
    Tag.NT_OVERCALL: "No-trump overcall: balanced with a stopper in their suit",
    Tag.FREE_BID: "Free bid over interference: a real suit and values",
    Tag.STOPPER_ASK: "Cue-bid asking partner for a stopper in their suit",
    Tag.ADVANCE: "Advance of partner's conventional call",
    Tag.DONT: "DONT over their 1NT",
    Tag.MECKWELL: "Meckwell over their 1NT",

    # Everything else
    Tag.NATURAL: "Natural",
    Tag.PASS: "Pass",
    Tag.SAFETY_PASS: "Pass (no safe call found)",
    Tag.PREDICTOR: "Suggested by the bidding model",
}

# Doubles whose text names the suits they show
SHOWS_UNBID = (Tag.NEGATIVE_DOUBLE, Tag.RESPONSIVE_DOUBLE, Tag.TAKEOUT_DOUBLE, Tag.REOPENING_DOUBLE)


def tag_text(tag):
    return TAG_TEXT.get(tag, tag.value.replace('_', ' ').capitalize())


def get_explanation_for(bid, auction=None, config=None):
    """
    Explain a call

    Args:
        bid: a Bid or call token
        auction: the auction the call belongs to (or would be added to)
        config: ConventionConfig used to recognize conventional calls

    Returns:
        str such as "2♦: Jacoby transfer: shows 5+ cards in the next suit up"
    """
    bid = parse_bid(bid)
    label = bid_label(bid)

    if bid.tag is not None:
        text = f"{label}: {tag_text(bid.tag)}"
        if bid.rationale and bid.rationale != TAG_TEXT.get(bid.tag):
            text += f". {bid.rationale}"
        return text

    if auction is None:
        return f"{label}: {_context_free(bid)}"

    config = config or ConventionConfig()
    view = _view_for(auction, bid)
    tag = classify_call(config, view, bid)
    recognition = None if bid.is_pass else recognize(config, view, bid)
    if recognition is not None and recognition.tag == tag:
        text = recognition.meaning
    else:
        text = tag_text(tag)
    detail = _detail(tag, view)
    if detail:
        text += f" ({detail})"
    logger.debug("Explained %s as %s", bid.token, tag.value)
    return f"{label}: {text}"


def _context_free(bid):
    if bid.is_pass:
        return TAG_TEXT[Tag.PASS]
    if bid.is_double:
        return "Double"
    if bid.is_redouble:
        return "Redouble"
    return f"{SUIT_NAMES[bid.strain].capitalize()} at the {bid.level} level"


def _view_for(auction, bid):
    """The auction as it stood when `bid` was (or will be) made"""
    for call in auction.calls:
        if call is bid:
            return view_before(AuctionView(auction, call.seat), call)
    return AuctionView(auction, auction.next_seat)


def _detail(tag, view):
    if tag in SHOWS_UNBID:
        unbid = [suit for suit in view.unbid_suits if suit in SUITS]
        majors = [suit for suit in unbid if suit in MAJORS]
        shown = majors if tag == Tag.NEGATIVE_DOUBLE and majors else unbid
        if shown:
            return 'shows ' + ' and '.join(SUIT_NAMES[suit] for suit in shown)
    return None
