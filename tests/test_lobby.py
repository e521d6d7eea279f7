"""Tests for the casino lobby."""

from decimal import Decimal
from unittest.mock import Mock

import pytest

from casino.blackjack import Phase, TableController
from casino.errors import UnknownGameError
from casino.lobby import Casino
from casino.wallet import InMemoryWallet
from config import AppConfig, WalletConfig


@pytest.fixture
def casino(rng):
    return Casino(wallet=InMemoryWallet(Decimal("1000")), app_config=AppConfig(), rng=rng)


class TestCasino:
    """Tests for Casino."""

    def test_starting_balance_from_config(self):
        settings = AppConfig(wallet=WalletConfig(starting_balance=Decimal("250")))
        assert Casino(app_config=settings).balance == Decimal("250")

    def test_available_games(self, casino):
        assert casino.available_games == ["blackjack"]
        assert casino.current_game is None

    def test_unknown_game(self, casino):
        with pytest.raises(UnknownGameError):
            casino.load_game("roulette")
        assert casino.current_game is None

    def test_blackjack_shares_the_wallet(self, casino):
        controller = casino.load_game("blackjack")

        assert isinstance(controller, TableController)
        assert casino.current_game is controller
        assert controller.game.wallet is casino.wallet
        assert controller.game.auto_play_dealer is False

        controller.game.place_bet(150)
        assert casino.balance == Decimal("850")

    def test_switching_games_abandons_round(self, casino):
        """Test loading another game forfeits the chips left on the table."""
        first = casino.load_game("blackjack")
        first.game.place_bet(100)

        second = casino.load_game("blackjack")

        assert second is not first
        assert first.game.phase is Phase.BETTING
        assert first.game.current_bet == Decimal("0")
        assert second.game.wallet is first.game.wallet
        assert casino.balance == Decimal("900")

    @pytest.mark.asyncio
    async def test_exit_returns_to_lobby(self, casino):
        controller = casino.load_game("blackjack")
        await controller.exit()
        assert casino.current_game is None

    def test_return_to_lobby_without_game(self, casino):
        casino.return_to_lobby()
        assert casino.current_game is None

    def test_register_game(self, casino):
        factory = Mock(return_value=Mock(spec=TableController))
        casino.register_game("slots", factory)

        assert casino.available_games == ["blackjack", "slots"]
        game = casino.load_game("slots")
        factory.assert_called_once_with(casino)

        casino.return_to_lobby()
        game.close.assert_called_once_with()
