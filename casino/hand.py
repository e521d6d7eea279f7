"""Hand evaluation for blackjack."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Iterable, Iterator

from casino.cards import Card


class Outcome(Enum):
    """Result of a settled hand."""

    NONE = "none"
    BUST = "bust"
    PUSH = "push"
    WIN = "win"
    BLACKJACK = "blackjack"
    LOSE = "lose"

    def __str__(self) -> str:
        return self.value


def hand_value(cards: Iterable[Card]) -> int:
    """
    Calculate the best value of a sequence of cards.

    Aces start at 11 and are demoted to 1, one at a time, only while the
    total is over 21. The result can still exceed 21 (a bust).
    """
    total = 0
    aces = 0

    for card in cards:
        if card.is_ace:
            aces += 1
        total += card.value

    while total > 21 and aces > 0:
        total -= 10
        aces -= 1

    return total


def is_soft_total(cards: Iterable[Card]) -> bool:
    """Check if an ace is still counted as 11."""
    cards = list(cards)
    if not any(card.is_ace for card in cards):
        return False
    hard_total = sum(1 if card.is_ace else card.value for card in cards)
    return hard_total + 10 <= 21


@dataclass
class Hand:
    """A player or dealer hand with its per-hand bookkeeping."""

    cards: list[Card] = field(default_factory=list)
    bet: Decimal = Decimal("0")
    is_done: bool = False
    is_split: bool = False
    from_split_ace: bool = False
    outcome: Outcome = Outcome.NONE

    def add_card(self, card: Card) -> None:
        """Add a card to the hand."""
        self.cards.append(card)

    @property
    def value(self) -> int:
        return hand_value(self.cards)

    @property
    def is_soft(self) -> bool:
        return is_soft_total(self.cards)

    @property
    def is_blackjack(self) -> bool:
        """Check if the hand is a natural (21 with 2 cards, never after a split)."""
        return len(self.cards) == 2 and self.value == 21 and not self.is_split

    @property
    def is_busted(self) -> bool:
        return self.value > 21

    @property
    def is_pair(self) -> bool:
        """Two cards of the same rank. A jack and a queen are not a pair."""
        return len(self.cards) == 2 and self.cards[0].rank == self.cards[1].rank

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        cards_str = " ".join(str(card) for card in self.cards)
        value_str = f"({self.value})"
        if self.is_soft:
            value_str = f"(soft {self.value})"
        if self.is_blackjack:
            value_str = "(BLACKJACK)"
        if self.is_busted:
            value_str = "(BUST)"
        return f"{cards_str} {value_str}"

    def __repr__(self) -> str:
        return f"Hand({self.cards!r}, value={self.value}, bet={self.bet})"
