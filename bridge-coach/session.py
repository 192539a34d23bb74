"""
Bidding Session
One auction driven by the engine, with an optional predictor correction

Turns are committed in two phases. decide_turn() runs the engine and
returns its answer at once. correct_turn() may then ask the predictor to
replace a Pass the engine was not sure about, and commits the result only
if the auction is still waiting on that same turn.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from websockets.exceptions import WebSocketException

from auction import Auction
from bidding_system import BiddingEngine
from bridge_types import PASS, Bid, Tag, Vulnerability, parse_bid, parse_seat, seat_letter
from convention_config import ConventionConfig
from errors import AuctionError, BidError, PredictorError
from explanations import get_explanation_for
from legality import is_legal

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.6
# A Pass with this much is worth a second opinion while the auction is below game
IMPLAUSIBLE_PASS_HCP = 16


@dataclass(frozen=True)
class TurnDecision:
    """Phase-one answer for one turn"""
    turn_index: int
    seat: object
    bid: Bid
    deferred: bool = False


class BiddingSession:
    """
    Explicit session: the engine, the convention config and the live auction

    Nothing here is global; every caller holds its own session.
    """

    def __init__(self, config=None, engine=None, predictor=None, threshold=DEFAULT_THRESHOLD):
        self.config = config if config is not None else ConventionConfig()
        self.engine = engine if engine is not None else BiddingEngine()
        self.predictor = predictor
        self.threshold = threshold
        self.auction: Optional[Auction] = None
        self._pending = {}

    # ==================== Auction lifecycle ====================

    def start_auction(self, our_seat, vulnerable_we=False, vulnerable_they=False, dealer=None):
        """Begin a fresh auction; dealer defaults to our seat"""
        self.cancel_pending()
        our_seat = parse_seat(our_seat)
        dealer = parse_seat(dealer) if dealer is not None else our_seat
        vulnerability = Vulnerability.relative_to(our_seat, vulnerable_we, vulnerable_they)
        self.auction = Auction(dealer=dealer, our_seat=our_seat, vulnerability=vulnerability)
        logger.info("Auction started: dealer %s, our seat %s, vulnerability %s",
                    seat_letter(dealer), seat_letter(our_seat), vulnerability.label)
        return self.auction

    def _require_auction(self):
        if self.auction is None:
            raise AuctionError("No auction in progress, call start_auction first")
        return self.auction

    def record(self, call):
        """Append a call made at the table (any seat, in rotation)"""
        auction = self._require_auction()
        seated = auction.append(call)
        self.cancel_stale()
        if auction.is_complete:
            self._log_result(auction)
        return seated

    # ==================== Queries ====================

    def get_bid(self, hand):
        """Engine call for the seat on turn, or None when it defers"""
        return self.engine.decide(self._require_auction(), hand, config=self.config)

    def is_legal(self, bid):
        auction = self._require_auction()
        try:
            bid = parse_bid(bid)
        except BidError:
            return False
        return is_legal(auction, bid, auction.next_seat)

    def get_explanation_for(self, bid, auction=None):
        return get_explanation_for(bid, auction if auction is not None else self.auction, self.config)

    # ==================== Two-phase turns ====================

    def decide_turn(self, hand):
        """
        Phase one: the engine's answer for the seat on turn

        A deferral is reported as a provisional Pass so the caller always has
        something to commit.
        """
        auction = self._require_auction()
        if auction.is_complete:
            raise AuctionError("Auction is over")
        seat = auction.next_seat
        bid = self.engine.decide(auction, hand, config=self.config)
        deferred = bid is None
        if deferred:
            bid = PASS.with_seat(seat).explained(Tag.PASS, "Pass (no rule applies, provisional)")
        return TurnDecision(auction.turn_index, seat, bid, deferred)

    def play_turn(self, hand):
        """Decide and commit in one step, without consulting the predictor"""
        decision = self.decide_turn(hand)
        return self.record(decision.bid)

    def needs_correction(self, decision, hand):
        """Deferred, or a Pass that looks wrong for a strong hand in a live auction"""
        if decision.deferred:
            return True
        if not decision.bid.is_pass or hand.hcp < IMPLAUSIBLE_PASS_HCP:
            return False
        auction = self.auction
        if auction is None or auction.is_complete:
            return False
        last = auction.last_contract()
        return last is None or not last.is_game()

    def is_stale(self, decision):
        return self.auction is None or self.auction.turn_index != decision.turn_index \
            or self.auction.is_complete

    async def correct_turn(self, decision, hand):
        """
        Phase two: let the predictor override a doubtful Pass, then commit

        Returns the committed call, or None when the turn has moved on and
        the decision was discarded.
        """
        if self.is_stale(decision):
            logger.info("Discarding stale decision for turn %d", decision.turn_index)
            return None
        bid = decision.bid
        if self.predictor is not None and self.needs_correction(decision, hand):
            corrected = await self._consult_predictor(decision, hand)
            if self.is_stale(decision):
                logger.info("Turn %d advanced while the predictor answered, discarding", decision.turn_index)
                return None
            if corrected is not None:
                bid = corrected
        # Committing advances the turn; this task must not be swept up by cancel_stale
        self._pending.pop(decision.turn_index, None)
        return self.record(bid)

    async def _consult_predictor(self, decision, hand):
        snapshot = self.auction.snapshot()
        try:
            prediction = await self.predictor.predict(snapshot, hand, decision.seat)
        except (PredictorError, OSError, asyncio.TimeoutError, WebSocketException) as e:
            logger.warning("Predictor unavailable, keeping %s: %s", decision.bid.token, e)
            return None
        if prediction.confidence < self.threshold:
            logger.debug("Predictor confidence %.2f below %.2f, keeping %s",
                         prediction.confidence, self.threshold, decision.bid.token)
            return None
        try:
            suggested = parse_bid(prediction.token)
        except BidError:
            logger.warning("Predictor suggested a malformed call: %r", prediction.token)
            return None
        if suggested == decision.bid:
            return None
        if not is_legal(snapshot, suggested, decision.seat):
            logger.warning("Predictor suggested illegal %s, keeping %s", suggested.token, decision.bid.token)
            return None
        logger.info("Predictor overrides %s with %s (confidence %.2f)",
                    decision.bid.token, suggested.token, prediction.confidence)
        return suggested.with_seat(decision.seat).explained(
            Tag.PREDICTOR, f"{suggested.token} suggested by the bidding model (confidence {prediction.confidence:.2f})"
        )

    def schedule_correction(self, decision, hand):
        """Run phase two as a task; it is cancelled if its turn goes stale first"""
        turn_index = decision.turn_index
        task = asyncio.ensure_future(self.correct_turn(decision, hand))
        self._pending[turn_index] = task

        def forget(done):
            if self._pending.get(turn_index) is done:
                del self._pending[turn_index]

        task.add_done_callback(forget)
        return task

    def cancel_stale(self):
        """Cancel corrections aimed at turns that have already been played"""
        if self.auction is None:
            return
        current = self.auction.turn_index
        for turn_index, task in list(self._pending.items()):
            if turn_index < current or self.auction.is_complete:
                _cancel(task)
                del self._pending[turn_index]
                logger.debug("Cancelled correction for turn %d", turn_index)

    def cancel_pending(self):
        for task in self._pending.values():
            _cancel(task)
        self._pending.clear()

    @property
    def pending(self):
        return dict(self._pending)

    # ==================== Reporting ====================

    def _log_result(self, auction):
        contract = auction.final_contract()
        if contract is None:
            logger.info("Auction passed out: %s", ' '.join(auction.tokens()))
        else:
            logger.info("Auction complete: %s by %s", contract.token, seat_letter(contract.declarer))

    def to_dict(self):
        state = self.auction.to_dict() if self.auction is not None else None
        return {
            'auction': state,
            'conventions': self.config.to_dict(),
            'pending_corrections': sorted(self._pending),
            'threshold': self.threshold,
        }


def _cancel(task):
    """Cancel a correction task from any thread; its loop may be running elsewhere"""
    if task.done():
        return
    try:
        task.get_loop().call_soon_threadsafe(task.cancel)
    except RuntimeError:
        # Loop already closed, so the task has finished
        logger.debug("Correction task finished before it could be cancelled")
