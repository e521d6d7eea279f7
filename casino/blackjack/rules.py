"""Table rules for the blackjack round engine."""

from dataclasses import dataclass
from decimal import Decimal

from config import TableConfig

# Reshuffle threshold floor; half a deck outlasts any round without many splits.
CARDS_PER_DECK = 52
MIN_CUT_CARD = 26


@dataclass(frozen=True)
class TableRules:
    """
    Blackjack table rules configuration.

    Defaults reproduce the casino's table: six decks, cut card between 60
    and 74 cards from the end, a 100 chip default bet, doubles on 9-11 only,
    unlimited splits and a dealer that stands on every 17.
    """

    num_decks: int = 6
    cut_card_min: int = 60
    cut_card_max: int = 74

    # Bet placed by deal() when nothing is on the table. None disables it.
    default_bet: Decimal | None = Decimal("100")

    # Dealer rules
    dealer_stands_on: int = 17
    dealer_hits_soft_17: bool = False

    # Double down totals
    double_totals: tuple[int, ...] = (9, 10, 11)

    # Maximum number of player hands from splitting (None = uncapped)
    max_hands: int | None = None

    # Credit multipliers applied to the stake
    blackjack_return: Decimal = Decimal("2.5")
    win_return: Decimal = Decimal("2")
    insurance_return: Decimal = Decimal("3")

    # What happens to escrowed stakes when a round is abandoned
    refund_on_abandon: bool = False

    def __post_init__(self) -> None:
        """Validate rule combinations."""
        if self.num_decks < 1 or self.num_decks > 8:
            raise ValueError("num_decks must be between 1 and 8")
        if self.cut_card_min < MIN_CUT_CARD or self.cut_card_max < self.cut_card_min:
            raise ValueError(
                f"cut card range must satisfy {MIN_CUT_CARD} <= min <= max"
            )
        if self.cut_card_max >= self.num_decks * CARDS_PER_DECK:
            raise ValueError("cut card must leave cards to deal before the reshuffle")
        if self.default_bet is not None and self.default_bet <= 0:
            raise ValueError("default_bet must be positive")
        if self.max_hands is not None and self.max_hands < 1:
            raise ValueError("max_hands must be at least 1")
        if self.blackjack_return < 1:
            raise ValueError("blackjack_return must be at least 1")

    @property
    def cut_card_range(self) -> tuple[int, int]:
        return (self.cut_card_min, self.cut_card_max)

    @classmethod
    def from_config(cls, table: TableConfig) -> "TableRules":
        """Build rules from the environment-driven table configuration."""
        return cls(
            num_decks=table.num_decks,
            cut_card_min=table.cut_card_min,
            cut_card_max=table.cut_card_max,
            default_bet=table.default_bet,
            refund_on_abandon=table.refund_on_abandon,
        )

    @classmethod
    def downtown_vegas(cls) -> "TableRules":
        """Downtown Las Vegas style: H17 and at most four split hands."""
        return cls(max_hands=4, dealer_hits_soft_17=True)
