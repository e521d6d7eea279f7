"""Tests for the payout table."""

from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from casino.blackjack import TableRules, settle_hand, settle_round
from casino.hand import Hand, Outcome
from conftest import card_strategy, make_hand


class TestSettleHand:
    """Tests for settle_hand."""

    @pytest.mark.parametrize(
        "player,dealer_value,dealer_blackjack,outcome,payout",
        [
            ("10S 9H", 18, False, Outcome.WIN, "200"),
            ("10S 8H", 18, False, Outcome.PUSH, "100"),
            ("10S 7H", 18, False, Outcome.LOSE, "0"),
            ("10S 7H", 22, False, Outcome.WIN, "200"),
            ("10S 6H KC", 22, False, Outcome.BUST, "0"),
            ("AS KH", 20, False, Outcome.BLACKJACK, "250"),
            ("AS KH", 21, False, Outcome.BLACKJACK, "250"),
            ("AS KH", 21, True, Outcome.PUSH, "100"),
            ("10S QH", 21, True, Outcome.LOSE, "0"),
            ("AS 5H 5C", 21, True, Outcome.LOSE, "0"),
            ("AS 5H 5C", 21, False, Outcome.PUSH, "100"),
        ],
    )
    def test_payout_table(self, player, dealer_value, dealer_blackjack, outcome, payout):
        hand = make_hand(player)
        assert settle_hand(hand, dealer_value, dealer_blackjack) == (outcome, Decimal(payout))

    def test_split_twenty_one_pays_even_money(self):
        hand = make_hand("AS KH", is_split=True, from_split_ace=True)
        assert settle_hand(hand, 20, False) == (Outcome.WIN, Decimal("200"))

    def test_blackjack_on_odd_stake_is_exact(self):
        hand = make_hand("AS KH", bet=5)
        assert settle_hand(hand, 18, False) == (Outcome.BLACKJACK, Decimal("12.5"))

    def test_custom_blackjack_return(self):
        """Test a 6:5 table credits stake x 2.2."""
        rules = TableRules(blackjack_return=Decimal("2.2"))
        hand = make_hand("AS KH")
        assert settle_hand(hand, 18, False, rules) == (Outcome.BLACKJACK, Decimal("220.0"))

    @given(
        cards=st.lists(card_strategy(), min_size=2, max_size=6),
        dealer_value=st.integers(min_value=17, max_value=26),
        dealer_blackjack=st.booleans(),
    )
    def test_payout_is_a_fixed_multiple_of_stake(self, cards, dealer_value, dealer_blackjack):
        hand = Hand(cards=cards, bet=Decimal("100"))
        outcome, payout = settle_hand(hand, dealer_value, dealer_blackjack)

        assert payout in {Decimal("0"), Decimal("100"), Decimal("200"), Decimal("250")}
        if hand.is_busted:
            assert outcome is Outcome.BUST and payout == 0


class TestSettleRound:
    """Tests for settle_round."""

    def test_sets_outcomes_on_hands(self):
        hands = [make_hand("10S 9H", is_split=True), make_hand("10C 5D", is_split=True)]
        settlement = settle_round(hands, make_hand("10H 8C", bet=0))

        assert [h.outcome for h in hands] == [Outcome.WIN, Outcome.LOSE]
        assert settlement.total_payout == Decimal("200")
        assert settlement.total_staked == Decimal("200")
        assert settlement.net == Decimal("0")
        assert settlement.dealer_value == 18
        assert [r.net for r in settlement.hands] == [Decimal("100"), Decimal("-100")]

    def test_insurance_against_dealer_blackjack(self):
        """Test a 50 insurance bet returns 150 when the dealer has blackjack."""
        hands = [make_hand("10S 9H")]
        settlement = settle_round(hands, make_hand("AC KD", bet=0), insurance_bet=Decimal("50"))

        assert settlement.dealer_blackjack
        assert settlement.insurance_payout == Decimal("150")
        assert settlement.total_payout == Decimal("150")
        assert settlement.net == Decimal("0")

    def test_insurance_lost_without_dealer_blackjack(self):
        hands = [make_hand("10S 9H")]
        settlement = settle_round(hands, make_hand("AC 7D", bet=0), insurance_bet=Decimal("50"))

        assert settlement.insurance_payout == Decimal("0")
        assert settlement.total_payout == Decimal("200")
        assert settlement.net == Decimal("50")
