"""Casino engine - 100% UI-agnostic."""

from casino.cards import Card, Shoe, Rank, Suit
from casino.errors import (
    CasinoError,
    EmptyShoeError,
    InsufficientFundsError,
    InvalidActionError,
    InvalidDoubleError,
    InvalidSplitError,
    UnknownGameError,
)
from casino.hand import Hand, Outcome, hand_value
from casino.wallet import InMemoryWallet, Wallet

__all__ = [
    "Card",
    "Shoe",
    "Rank",
    "Suit",
    "Hand",
    "Outcome",
    "hand_value",
    "InMemoryWallet",
    "Wallet",
    "CasinoError",
    "EmptyShoeError",
    "InsufficientFundsError",
    "InvalidActionError",
    "InvalidDoubleError",
    "InvalidSplitError",
    "UnknownGameError",
]
