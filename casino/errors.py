"""Exceptions raised by the casino engine."""


class CasinoError(Exception):
    """Base class for errors caused by a user action.

    These are recoverable: the action is rejected and no state changes.
    """


class InvalidActionError(CasinoError):
    """Action is not legal in the current phase or hand state."""


class InvalidSplitError(InvalidActionError):
    """Hand is not a two-card pair of equal rank."""


class InvalidDoubleError(InvalidActionError):
    """Hand is not a two-card 9, 10 or 11."""


class InsufficientFundsError(CasinoError):
    """Wallet balance is below the required stake."""

    def __init__(self, required, available, message: str | None = None) -> None:
        self.required = required
        self.available = available
        super().__init__(
            message or f"Insufficient funds: need {required}, have {available}"
        )


class UnknownGameError(CasinoError):
    """Requested game is not registered in the lobby."""


class EmptyShoeError(RuntimeError):
    """Draw from an empty shoe.

    Reshuffling before every deal makes this unreachable; seeing it means
    the engine broke its own invariant.
    """
