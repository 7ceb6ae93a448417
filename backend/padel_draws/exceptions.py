"""
Draw error taxonomy.

Validation errors are expected domain rejections (surfaced as 400s); everything
else raised from this module is an internal fault.
"""

VALIDATION_PREFIX = "Draw validation failed: "


class DrawError(Exception):
    """Base class for all draw generation errors."""


class DrawValidationError(DrawError, ValueError):
    """Request rejected before any plan is built. Message is always prefixed."""

    def __init__(self, message: str):
        self.reason = message
        super().__init__(f"{VALIDATION_PREFIX}{message}")


class UnsupportedPairCountError(DrawValidationError):
    pass


class UnsupportedTournamentTypeError(DrawValidationError):
    pass


class PoolDivisionError(DrawValidationError):
    pass


class InsufficientSeedsError(DrawValidationError):
    pass


class PoolQuotaError(DrawValidationError):
    pass


class UnsupportedTmcSizeError(DrawValidationError):
    pass


class DrawAlreadyGeneratedError(DrawValidationError):
    pass


class InvalidTournamentStateError(DrawValidationError):
    pass


class TournamentNotFoundError(DrawError, LookupError):
    pass


class EmissionError(DrawError, RuntimeError):
    """Persisting a generated plan failed; nothing was committed."""


class NextStageUnavailableError(DrawError, NotImplementedError):
    pass
