"""Payout settlement for a finished round."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Sequence

from casino.blackjack.rules import TableRules
from casino.hand import Hand, Outcome


@dataclass(frozen=True)
class HandResult:
    """Settled result of one player hand."""

    hand_index: int
    outcome: Outcome
    stake: Decimal
    payout: Decimal

    @property
    def net(self) -> Decimal:
        """Payout minus stake."""
        return self.payout - self.stake


@dataclass(frozen=True)
class Settlement:
    """Aggregated result of a round, credited to the wallet in one call."""

    hands: list[HandResult] = field(default_factory=list)
    dealer_value: int = 0
    dealer_blackjack: bool = False
    insurance_bet: Decimal = Decimal("0")
    insurance_payout: Decimal = Decimal("0")

    @property
    def total_payout(self) -> Decimal:
        return sum((h.payout for h in self.hands), Decimal("0")) + self.insurance_payout

    @property
    def total_staked(self) -> Decimal:
        return sum((h.stake for h in self.hands), Decimal("0")) + self.insurance_bet

    @property
    def net(self) -> Decimal:
        return self.total_payout - self.total_staked


def settle_hand(
    hand: Hand,
    dealer_value: int,
    dealer_blackjack: bool,
    rules: TableRules | None = None,
) -> tuple[Outcome, Decimal]:
    """
    Apply the payout table to one hand.

    Returns the outcome and the amount credited back (stake included).
    A busted hand loses even if the dealer busts too.
    """
    rules = rules or TableRules()
    stake = hand.bet
    value = hand.value

    if value > 21:
        return Outcome.BUST, Decimal("0")
    if dealer_blackjack:
        if hand.is_blackjack:
            return Outcome.PUSH, stake
        return Outcome.LOSE, Decimal("0")
    if hand.is_blackjack:
        return Outcome.BLACKJACK, stake * rules.blackjack_return
    if dealer_value > 21 or value > dealer_value:
        return Outcome.WIN, stake * rules.win_return
    if value == dealer_value:
        return Outcome.PUSH, stake
    return Outcome.LOSE, Decimal("0")


def settle_round(
    player_hands: Sequence[Hand],
    dealer_hand: Hand,
    insurance_bet: Decimal = Decimal("0"),
    rules: TableRules | None = None,
) -> Settlement:
    """
    Settle every player hand against the final dealer hand.

    Sets ``outcome`` on each hand. Insurance pays only when the dealer
    holds blackjack; otherwise the stake was already lost.
    """
    rules = rules or TableRules()
    dealer_value = dealer_hand.value
    dealer_blackjack = dealer_hand.is_blackjack

    results = []
    for index, hand in enumerate(player_hands):
        outcome, payout = settle_hand(hand, dealer_value, dealer_blackjack, rules)
        hand.outcome = outcome
        results.append(
            HandResult(hand_index=index, outcome=outcome, stake=hand.bet, payout=payout)
        )

    insurance_payout = Decimal("0")
    if insurance_bet > 0 and dealer_blackjack:
        insurance_payout = insurance_bet * rules.insurance_return

    return Settlement(
        hands=results,
        dealer_value=dealer_value,
        dealer_blackjack=dealer_blackjack,
        insurance_bet=insurance_bet,
        insurance_payout=insurance_payout,
    )
