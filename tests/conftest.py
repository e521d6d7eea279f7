"""Pytest fixtures for casino engine tests."""

import asyncio
from decimal import Decimal
from random import Random

import pytest
from hypothesis import strategies as st

from casino.blackjack import BlackjackGame, TableRules
from casino.cards import Card, Rank, Shoe, Suit
from casino.hand import Hand
from casino.wallet import InMemoryWallet


def parse_cards(text: str) -> list[Card]:
    """Parse a space separated card list such as 'AS KH 10D'."""
    return [Card.from_string(token) for token in text.split()]


def make_hand(text: str, bet: int = 100, **flags) -> Hand:
    return Hand(cards=parse_cards(text), bet=Decimal(bet), **flags)


async def no_delay(seconds: float) -> None:
    """Pacing function that yields to the loop without sleeping."""
    await asyncio.sleep(0)


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def shoe(rng):
    """A shuffled 6-deck shoe."""
    s = Shoe(num_decks=6, rng=rng)
    s.shuffle()
    return s


@pytest.fixture
def wallet():
    """A wallet holding the casino's starting balance."""
    return InMemoryWallet(Decimal("1000"))


@pytest.fixture
def table(wallet):
    """
    Factory for a game whose shoe deals the given cards in order.

    Deal order is player, player, dealer up card, dealer hole card.
    """

    def _table(
        deal: str,
        rules: TableRules | None = None,
        auto_play_dealer: bool = True,
        cut_card: int = 0,
    ) -> BlackjackGame:
        stacked = Shoe.from_cards(parse_cards(deal), cut_card=cut_card)
        return BlackjackGame(
            wallet=wallet,
            rules=rules,
            shoe=stacked,
            auto_play_dealer=auto_play_dealer,
        )

    return _table


@pytest.fixture
def empty_hand():
    """An empty player hand."""
    return Hand()


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return make_hand("AS KH")


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    return make_hand("AS 6H")


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    return make_hand("10S 6H")


@pytest.fixture
def pair_8s_hand():
    """A pair of 8s hand."""
    return make_hand("8S 8H")


@pytest.fixture
def bust_hand():
    """A busted hand."""
    return make_hand("10S 6H KC")


# Hypothesis strategies for property-based testing
@st.composite
def card_strategy(draw):
    """Generate a random card."""
    rank = draw(st.sampled_from(list(Rank)))
    suit = draw(st.sampled_from(list(Suit)))
    return Card(rank, suit)
