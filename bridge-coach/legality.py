"""
Call Legality
Pure checks of whether a call may be made at the current point of an auction
"""

import logging

from bridge_types import DOUBLE, PASS, REDOUBLE, STRAINS, Bid, Tag, parse_bid, same_side

logger = logging.getLogger(__name__)


def is_legal(auction, bid, seat=None):
    """
    Check a call against the auction

    - a contract bid must strictly outrank the last contract bid
    - Double needs an opposing, undoubled contract bid
    - Redouble needs an opposing Double as the last non-pass call
    - nothing is legal once the auction has ended
    """
    bid = parse_bid(bid)
    if auction.is_complete:
        return False
    seat = seat if seat is not None else auction.next_seat
    if bid.is_pass:
        return True

    last = auction.last_contract()
    if bid.is_contract:
        return bid.outranks(last)
    if last is None:
        return False

    action = auction.last_action()
    if bid.is_double:
        return action.is_contract and not same_side(action.seat, seat)
    return action.is_double and not same_side(action.seat, seat)


def cheapest_level(auction, strain):
    """Lowest level at which `strain` can be bid, or None above seven"""
    last = auction.last_contract()
    for level in range(1, 8):
        if Bid.contract(level, strain).outranks(last):
            return level
    return None


def legal_calls(auction, seat=None):
    """Every call that may be made now, Pass first"""
    if auction.is_complete:
        return []
    calls = [call for call in (PASS, DOUBLE, REDOUBLE) if is_legal(auction, call, seat)]
    last = auction.last_contract()
    for level in range(1, 8):
        for strain in STRAINS:
            bid = Bid.contract(level, strain)
            if bid.outranks(last):
                calls.append(bid)
    return calls


def ensure_legal(auction, bid, seat=None):
    """Return `bid` if legal, otherwise a Pass with a neutral rationale"""
    seat = seat if seat is not None else auction.next_seat
    if bid is not None and is_legal(auction, bid, seat):
        return bid
    logger.warning("Downgrading illegal call %s to Pass", getattr(bid, 'token', bid))
    return PASS.with_seat(seat).explained(Tag.SAFETY_PASS, "Pass (no legal call available)")
