"""Error taxonomy for the analysis core.

Empty input and unrecognised formats are not errors: byte-level analyzers
return zero/empty results and signature detection reports ``"Unknown"``.
"""


class MetalensError(Exception):
    """Base class for errors raised by the analysis core."""


class DecodeFailure(MetalensError):
    """Image bytes could not be decoded (or re-decoded) into pixels."""


class StrategyFailure(MetalensError):
    """A metadata extraction strategy raised while parsing a buffer."""

    def __init__(self, strategy_id: str, reason: str):
        super().__init__(f"{strategy_id}: {reason}")
        self.strategy_id = strategy_id
        self.reason = reason
