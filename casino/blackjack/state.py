"""Round phase enumeration."""

from enum import Enum, auto


class Phase(Enum):
    """
    Round state machine phases.

    Flow: BETTING → DEALING → PLAYER_TURN → DEALER_TURN → SETTLEMENT → BETTING

    DEALING and SETTLEMENT only exist while ``deal()`` and settlement run;
    between calls the round is always in BETTING, PLAYER_TURN or DEALER_TURN.
    """

    BETTING = auto()
    DEALING = auto()
    PLAYER_TURN = auto()
    DEALER_TURN = auto()
    SETTLEMENT = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()

    @property
    def machine_state(self) -> str:
        """Name used for this phase by the state machine."""
        return self.name.lower()
