"""Card and Shoe classes - immutable card representations."""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from random import Random
from typing import Iterable, Iterator

from casino.errors import EmptyShoeError

logger = logging.getLogger(__name__)


class Suit(Enum):
    """Card suits."""

    SPADES = auto()
    HEARTS = auto()
    CLUBS = auto()
    DIAMONDS = auto()

    def __str__(self) -> str:
        symbols = {
            Suit.SPADES: "♠",
            Suit.HEARTS: "♥",
            Suit.CLUBS: "♣",
            Suit.DIAMONDS: "♦",
        }
        return symbols[self]


class Rank(Enum):
    """Card ranks with blackjack values."""

    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    def __str__(self) -> str:
        if self.value <= 10:
            return str(self.value)
        return {
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
            Rank.ACE: "A",
        }[self]

    @property
    def blackjack_value(self) -> int:
        """Return the blackjack point value (Ace = 11, face cards = 10)."""
        if self.value <= 10:
            return self.value
        if self == Rank.ACE:
            return 11
        return 10

    @property
    def is_ace(self) -> bool:
        return self == Rank.ACE

    @property
    def is_ten_value(self) -> bool:
        return self.blackjack_value == 10


_RANKS_BY_LABEL = {str(rank): rank for rank in Rank}
_RANKS_BY_LABEL["T"] = Rank.TEN

_SUITS_BY_LABEL = {
    "S": Suit.SPADES,
    "♠": Suit.SPADES,
    "H": Suit.HEARTS,
    "♥": Suit.HEARTS,
    "C": Suit.CLUBS,
    "♣": Suit.CLUBS,
    "D": Suit.DIAMONDS,
    "♦": Suit.DIAMONDS,
}


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    @property
    def value(self) -> int:
        """Return the blackjack point value."""
        return self.rank.blackjack_value

    @property
    def is_ace(self) -> bool:
        return self.rank.is_ace

    @property
    def is_ten_value(self) -> bool:
        return self.rank.is_ten_value

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like '10♦', 'AS', 'Kh'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str, suit_str = s[:-1], s[-1]
        if rank_str not in _RANKS_BY_LABEL:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in _SUITS_BY_LABEL:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(_RANKS_BY_LABEL[rank_str], _SUITS_BY_LABEL[suit_str])


def build_cards(num_decks: int) -> list[Card]:
    """Return num_decks standard decks merged, unshuffled."""
    return [
        Card(rank, suit)
        for _ in range(num_decks)
        for suit in Suit
        for rank in Rank
    ]


class Shoe:
    """
    A multi-deck shoe with a randomly placed cut card.

    Cards are drawn from the end of the internal list. Once the number of
    remaining cards falls to the cut card, ``needs_reshuffle`` turns true;
    the shoe never reshuffles itself, the owner decides when.
    """

    def __init__(
        self,
        num_decks: int = 6,
        cut_card_range: tuple[int, int] = (60, 74),
        rng: Random | None = None,
    ) -> None:
        """
        Initialize a shoe with multiple decks.

        Args:
            num_decks: Number of decks in the shoe
            cut_card_range: Inclusive bounds for the reshuffle threshold
            rng: Random number generator for shuffling and cut card placement
        """
        if num_decks < 1:
            raise ValueError("Shoe must have at least 1 deck")
        low, high = cut_card_range
        if low < 0 or high < low:
            raise ValueError(f"Invalid cut card range: {cut_card_range}")

        self._num_decks = num_decks
        self._cut_card_range = (low, high)
        self._rng = rng or Random()
        self._cards: list[Card] = []
        self._cut_card = 0
        self.build()

    @classmethod
    def from_cards(
        cls,
        cards: Iterable[Card],
        cut_card: int = 0,
        num_decks: int = 6,
        rng: Random | None = None,
    ) -> "Shoe":
        """
        Create a stacked shoe that deals ``cards`` in the given order.

        When it is later rebuilt, it falls back to ``num_decks`` fresh decks.
        """
        shoe = cls(num_decks=num_decks, rng=rng)
        shoe._cards = list(reversed(list(cards)))
        shoe._cut_card = cut_card
        return shoe

    def build(self) -> None:
        """Replace the contents with unshuffled decks and place a new cut card."""
        self._cards = build_cards(self._num_decks)
        self._cut_card = self._rng.randint(*self._cut_card_range)

    def shuffle(self) -> None:
        """Shuffle the cards currently in the shoe."""
        # Random.shuffle is an in-place Fisher-Yates pass.
        self._rng.shuffle(self._cards)

    def reshuffle(self) -> None:
        """Rebuild and shuffle the full shoe."""
        self.build()
        self.shuffle()
        logger.info(
            "Shoe reshuffled: %d cards, cut card at %d",
            len(self._cards),
            self._cut_card,
        )

    def draw(self) -> Card:
        """Draw a card from the shoe."""
        if not self._cards:
            raise EmptyShoeError("Cannot draw from empty shoe")
        return self._cards.pop()

    @property
    def needs_reshuffle(self) -> bool:
        """Check if the cut card has been reached."""
        return len(self._cards) <= self._cut_card

    @property
    def cut_card(self) -> int:
        """Return the reshuffle threshold (remaining-card count)."""
        return self._cut_card

    @property
    def cards_remaining(self) -> int:
        return len(self._cards)

    @property
    def total_cards(self) -> int:
        """Return the number of cards in a full shoe."""
        return self._num_decks * 52

    @property
    def num_decks(self) -> int:
        return self._num_decks

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)
