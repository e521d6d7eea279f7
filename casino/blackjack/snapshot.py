"""Read-only snapshots of a round for the presentation layer."""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict

from casino.cards import Card
from casino.hand import Hand

OutcomeName = Literal["none", "bust", "push", "win", "blackjack", "lose"]
PhaseName = Literal["betting", "dealing", "player_turn", "dealer_turn", "settlement"]


class CardView(BaseModel):
    """Card as painted on the table. Hidden cards carry no rank or suit."""

    model_config = ConfigDict(frozen=True)

    rank: str | None
    suit: str | None
    value: int | None
    hidden: bool = False

    @classmethod
    def from_card(cls, card: Card, hidden: bool = False) -> "CardView":
        if hidden:
            return cls(rank=None, suit=None, value=None, hidden=True)
        return cls(rank=str(card.rank), suit=str(card.suit), value=card.value)


class HandView(BaseModel):
    """Player hand representation."""

    model_config = ConfigDict(frozen=True)

    cards: tuple[CardView, ...]
    value: int
    bet: Decimal
    is_done: bool
    is_soft: bool
    is_blackjack: bool
    is_busted: bool
    from_split_ace: bool
    outcome: OutcomeName

    @classmethod
    def from_hand(cls, hand: Hand) -> "HandView":
        return cls(
            cards=tuple(CardView.from_card(card) for card in hand.cards),
            value=hand.value,
            bet=hand.bet,
            is_done=hand.is_done,
            is_soft=hand.is_soft,
            is_blackjack=hand.is_blackjack,
            is_busted=hand.is_busted,
            from_split_ace=hand.from_split_ace,
            outcome=hand.outcome.value,
        )


class DealerView(BaseModel):
    """Dealer hand; ``value`` only counts the visible cards."""

    model_config = ConfigDict(frozen=True)

    cards: tuple[CardView, ...]
    value: int
    hole_card_hidden: bool


class RoundSnapshot(BaseModel):
    """Everything the presentation layer needs to repaint the table."""

    model_config = ConfigDict(frozen=True)

    phase: PhaseName
    dealer: DealerView
    player_hands: tuple[HandView, ...]
    active_hand_index: int
    current_bet: Decimal
    insurance_bet: Decimal
    insurance_offered: bool
    balance: Decimal
    player_score: int
    dealer_score: int
    can_deal: bool
    can_hit: bool
    can_stand: bool
    can_double: bool
    can_split: bool
    can_insure: bool
    cards_remaining: int
    last_payout: Decimal | None = None

    @property
    def active_hand(self) -> HandView | None:
        if 0 <= self.active_hand_index < len(self.player_hands):
            return self.player_hands[self.active_hand_index]
        return None
