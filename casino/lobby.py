"""Casino lobby: the shared wallet and the game currently on screen."""

import logging
from decimal import Decimal
from random import Random
from typing import Callable

from casino.blackjack.controller import TableController
from casino.blackjack.engine import BlackjackGame
from casino.blackjack.rules import TableRules
from casino.errors import UnknownGameError
from casino.wallet import InMemoryWallet
from config import AppConfig, config as default_config

logger = logging.getLogger(__name__)

GameFactory = Callable[["Casino"], TableController]


def _blackjack_factory(casino: "Casino") -> TableController:
    game = BlackjackGame(
        wallet=casino.wallet,
        rules=TableRules.from_config(casino.config.table),
        rng=casino.rng,
        auto_play_dealer=False,
    )
    return TableController(
        game,
        reveal_seconds=casino.config.table.reveal_delay,
        step_seconds=casino.config.table.dealer_delay,
        on_exit=casino.return_to_lobby,
    )


class Casino:
    """
    Lobby holding the wallet shared by every game.

    Only one game is loaded at a time; returning to the lobby tears the
    current one down, abandoning any round in progress.
    """

    def __init__(
        self,
        wallet: InMemoryWallet | None = None,
        app_config: AppConfig | None = None,
        rng: Random | None = None,
    ) -> None:
        self.config = app_config or default_config
        self.wallet = wallet or InMemoryWallet(self.config.wallet.starting_balance)
        self.rng = rng
        self.current_game: TableController | None = None
        self._games: dict[str, GameFactory] = {"blackjack": _blackjack_factory}

    @property
    def balance(self) -> Decimal:
        return self.wallet.get_balance()

    @property
    def available_games(self) -> list[str]:
        return sorted(self._games)

    def register_game(self, game_id: str, factory: GameFactory) -> None:
        self._games[game_id] = factory

    def load_game(self, game_id: str) -> TableController:
        """Open a game, leaving whatever game was open before."""
        factory = self._games.get(game_id)
        if factory is None:
            raise UnknownGameError(f"Unknown game: {game_id}")

        if self.current_game is not None:
            self.return_to_lobby()

        logger.info("Loading game: %s", game_id)
        self.current_game = factory(self)
        return self.current_game

    def return_to_lobby(self) -> None:
        if self.current_game is None:
            return
        game, self.current_game = self.current_game, None
        game.close()
        logger.info("Returned to lobby")
