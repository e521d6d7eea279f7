"""Tests for read-only round snapshots."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from casino.blackjack import EventType, RoundSnapshot


class TestRoundSnapshot:
    """Tests for get_state."""

    def test_idle_table(self, table):
        state = table("10S 7H 9C 8D").get_state()

        assert isinstance(state, RoundSnapshot)
        assert state.phase == "betting"
        assert state.player_hands == ()
        assert state.dealer.cards == ()
        assert state.balance == Decimal("1000")
        assert state.can_deal
        assert not (state.can_hit or state.can_stand or state.can_double or state.can_split)
        assert state.active_hand is None
        assert state.last_payout is None

    def test_repeated_reads_are_equal(self, table):
        game = table("10S 7H 9C 8D")
        game.deal()
        assert game.get_state() == game.get_state()
        assert game.shoe.cards_remaining == game.get_state().cards_remaining

    def test_hole_card_hidden_during_player_turn(self, table):
        game = table("10S 7H 9C 8D")
        game.deal()
        state = game.get_state()

        up, hole = state.dealer.cards
        assert up.rank == "9" and up.suit == "♣" and not up.hidden
        assert hole.hidden
        assert hole.rank is None and hole.suit is None and hole.value is None
        assert state.dealer.hole_card_hidden
        assert state.dealer_score == 9
        assert state.player_score == 17
        assert state.active_hand.value == 17

    def test_hole_card_revealed_for_dealer_turn(self, table):
        game = table("10S 7H 9C 8D", auto_play_dealer=False)
        game.deal()
        game.stand()
        state = game.get_state()

        assert state.phase == "dealer_turn"
        assert not state.dealer.hole_card_hidden
        assert state.dealer_score == 17
        assert state.dealer.cards[1].rank == "8"

    def test_settled_round_stays_visible(self, table):
        """Test cards and outcomes remain on the table until the next deal."""
        game = table("10S 7H 9C 8D")
        game.place_bet(100)
        game.deal()
        game.stand()
        state = game.get_state()

        assert state.phase == "betting"
        assert state.dealer_score == 17
        assert state.player_hands[0].outcome == "push"
        assert state.last_payout == Decimal("100")
        assert state.current_bet == Decimal("0")
        assert state.balance == Decimal("1000")

    def test_snapshot_is_frozen(self, table):
        state = table("10S 7H 9C 8D").get_state()
        with pytest.raises(ValidationError):
            state.balance = Decimal("1000000")

    def test_snapshot_does_not_track_later_changes(self, table):
        game = table("10S 2H 9C 8D 5C")
        game.deal()
        before = game.get_state()
        game.hit()

        assert len(before.player_hands[0].cards) == 2
        assert len(game.get_state().player_hands[0].cards) == 3

    def test_action_flags(self, table):
        game = table("5S 5H 9C 8D")
        game.deal()
        state = game.get_state()

        assert state.can_hit and state.can_stand
        assert state.can_double
        assert state.can_split
        assert not state.can_insure
        assert not state.can_deal

    def test_insurance_flags(self, table):
        game = table("10S 7H AC 8D")
        game.deal()
        state = game.get_state()

        assert state.insurance_offered
        assert state.can_insure
        assert state.dealer_score == 11

    def test_state_changed_carries_snapshot(self, table):
        game = table("10S 7H 9C 8D")
        seen = []
        game.subscribe(lambda event: seen.append(event), EventType.STATE_CHANGED)

        game.place_bet(100)
        game.deal()

        assert len(seen) == 2
        assert seen[-1].data["snapshot"] == game.get_state()
        assert seen[0].data["snapshot"].phase == "betting"
