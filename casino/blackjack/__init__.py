"""Blackjack round engine and its command interface."""

from casino.blackjack.events import GameEvent, EventType
from casino.blackjack.state import Phase
from casino.blackjack.rules import TableRules
from casino.blackjack.settlement import Settlement, settle_hand, settle_round
from casino.blackjack.snapshot import RoundSnapshot
from casino.blackjack.engine import BlackjackGame
from casino.blackjack.controller import Action, TableController

__all__ = [
    "GameEvent",
    "EventType",
    "Phase",
    "TableRules",
    "Settlement",
    "settle_hand",
    "settle_round",
    "RoundSnapshot",
    "BlackjackGame",
    "Action",
    "TableController",
]
