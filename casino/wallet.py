"""Shared wallet used by every game in the casino."""

import logging
from decimal import Decimal
from typing import Callable, Protocol

from casino.errors import InsufficientFundsError

logger = logging.getLogger(__name__)

BalanceListener = Callable[[Decimal, Decimal], None]


def to_amount(value: int | float | str | Decimal) -> Decimal:
    """Convert a user-supplied amount to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class Wallet(Protocol):
    """What a game needs from the wallet."""

    def get_balance(self) -> Decimal:
        ...

    def adjust_balance(self, delta: Decimal) -> None:
        ...


class InMemoryWallet:
    """
    Wallet holding the player's balance for one browser session.

    Listeners are called with ``(delta, new_balance)`` after every change,
    which is how a balance display is kept current.
    """

    def __init__(self, balance: int | float | str | Decimal = Decimal("1000.00")) -> None:
        balance = to_amount(balance)
        if balance < 0:
            raise ValueError("Starting balance cannot be negative")
        self._balance = balance
        self._listeners: list[BalanceListener] = []

    def get_balance(self) -> Decimal:
        return self._balance

    @property
    def balance(self) -> Decimal:
        return self._balance

    def adjust_balance(self, delta: int | float | str | Decimal) -> None:
        """
        Apply a debit (negative) or credit (positive).

        Raises:
            InsufficientFundsError: if a debit would take the balance below zero
        """
        delta = to_amount(delta)
        if self._balance + delta < 0:
            raise InsufficientFundsError(required=-delta, available=self._balance)

        self._balance += delta
        logger.debug("Balance %+.2f -> %.2f", delta, self._balance)
        for listener in self._listeners:
            listener(delta, self._balance)

    def subscribe(self, listener: BalanceListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: BalanceListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)
