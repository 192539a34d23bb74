"""
Bridge Coach Exceptions
Error types raised by the value layer, the convention config and the
predictor client
"""


class BridgeError(Exception):
    """Base class for bridge coach errors"""

    def __init__(self, message=None):
        super().__init__(message or self.__doc__)


class HandError(BridgeError):
    """Malformed hand"""


class BidError(BridgeError):
    """Malformed bid"""


class AuctionError(BridgeError):
    """Invalid auction operation"""


class IllegalCallError(AuctionError):
    """Call is not legal at this point of the auction"""


class ConventionConfigError(BridgeError):
    """Invalid convention configuration"""


class PredictorError(BridgeError):
    """Malformed reply from the bid predictor"""


class PredictorUnavailable(PredictorError):
    """Bid predictor could not be reached"""
