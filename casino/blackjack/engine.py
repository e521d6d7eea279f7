"""Blackjack round engine with state machine."""

import asyncio
import logging
from decimal import Decimal, InvalidOperation
from random import Random
from typing import Awaitable, Callable, Iterator, Literal

from transitions import Machine

from casino.blackjack.events import EventEmitter, EventType, GameEvent
from casino.blackjack.rules import TableRules
from casino.blackjack.settlement import Settlement, settle_round
from casino.blackjack.snapshot import CardView, DealerView, HandView, RoundSnapshot
from casino.blackjack.state import Phase
from casino.cards import Card, Shoe
from casino.errors import (
    CasinoError,
    InsufficientFundsError,
    InvalidActionError,
    InvalidDoubleError,
    InvalidSplitError,
)
from casino.hand import Hand, Outcome, hand_value
from casino.wallet import Wallet, to_amount

logger = logging.getLogger(__name__)

BetAmount = int | float | str | Decimal
Delay = Callable[[float], Awaitable[None]]


class BlackjackGame:
    """
    Blackjack round engine using a state machine.

    Owns the shoe, the dealer hand and the player hands, and is the only
    thing that mutates them. Money goes through the wallet collaborator.
    Every public action validates completely before touching any state, so
    a rejected action leaves both the game and the wallet unchanged.
    """

    STATES = [phase.machine_state for phase in Phase]

    TRANSITIONS = [
        {"trigger": "begin_deal", "source": "betting", "dest": "dealing"},
        {"trigger": "open_play", "source": "dealing", "dest": "player_turn"},
        {"trigger": "end_player_turn", "source": "player_turn", "dest": "dealer_turn"},
        {
            "trigger": "begin_settlement",
            "source": ["dealing", "player_turn", "dealer_turn"],
            "dest": "settlement",
        },
        {"trigger": "close_round", "source": "settlement", "dest": "betting"},
        {
            "trigger": "discard_round",
            "source": ["betting", "dealing", "player_turn", "dealer_turn"],
            "dest": "betting",
        },
    ]

    def __init__(
        self,
        wallet: Wallet,
        rules: TableRules | None = None,
        shoe: Shoe | None = None,
        rng: Random | None = None,
        auto_play_dealer: bool = True,
    ) -> None:
        """
        Initialize a new blackjack table.

        Args:
            wallet: Balance holder debited for stakes and credited at settlement
            rules: Table rules (uses defaults if not provided)
            shoe: Pre-built shoe; a fresh shuffled one is created otherwise
            rng: Random number generator for reproducible shoes
            auto_play_dealer: Run dealer play as soon as the player turn ends.
                Turn it off when a presentation layer paces the dealer with
                ``play_dealer_async``.
        """
        self.rules = rules or TableRules()
        self.wallet = wallet
        self.auto_play_dealer = auto_play_dealer

        if shoe is None:
            shoe = Shoe(
                num_decks=self.rules.num_decks,
                cut_card_range=self.rules.cut_card_range,
                rng=rng,
            )
            shoe.shuffle()
        self.shoe = shoe

        self.dealer_hand = Hand()
        self.player_hands: list[Hand] = []
        self.active_hand_index = 0
        self.current_bet = Decimal("0")
        self.insurance_bet = Decimal("0")
        self.insurance_offered = False
        self.last_settlement: Settlement | None = None
        self.events = EventEmitter()
        self._round_id = 0

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial=Phase.BETTING.machine_state,
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def phase(self) -> Phase:
        """Get current phase as enum."""
        return Phase[self._machine_state.upper()]  # type: ignore[attr-defined]

    @property
    def active_hand(self) -> Hand | None:
        if 0 <= self.active_hand_index < len(self.player_hands):
            return self.player_hands[self.active_hand_index]
        return None

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    # ------------------------------------------------------------------
    # Betting
    # ------------------------------------------------------------------

    def place_bet(self, amount: BetAmount | Literal["all"]) -> Decimal:
        """
        Move chips from the wallet onto the table.

        Args:
            amount: Chip value, or "all" to bet the whole balance

        Returns:
            The total bet now on the table
        """
        stake = self._validate_bet(amount)

        self.wallet.adjust_balance(-stake)
        self.current_bet += stake
        logger.debug("Bet placed: %s (total %s)", stake, self.current_bet)
        self.events.emit_new(EventType.BET_PLACED, amount=stake, total=self.current_bet)
        self._publish_state()
        return self.current_bet

    def _validate_bet(self, amount: BetAmount | Literal["all"]) -> Decimal:
        self._require_phase(Phase.BETTING, "place a bet")
        balance = self.wallet.get_balance()

        if isinstance(amount, str) and amount.lower() == "all":
            if balance <= 0:
                raise InsufficientFundsError(
                    required=Decimal("0.01"), available=balance, message="Insufficient Funds"
                )
            return balance

        try:
            stake = to_amount(amount)
        except InvalidOperation as err:
            raise InvalidActionError(f"Invalid bet amount: {amount!r}") from err
        if not stake.is_finite() or stake <= 0:
            raise InvalidActionError("Bet must be a positive amount")
        if stake > balance:
            raise InsufficientFundsError(required=stake, available=balance)
        return stake

    # ------------------------------------------------------------------
    # Dealing
    # ------------------------------------------------------------------

    def deal(self) -> None:
        """
        Start a round with the bet on the table.

        With nothing on the table, the default bet is placed first when the
        table has one. The shoe is rebuilt here, and only here, once the
        cut card has come out.
        """
        default_stake = self._validate_deal()
        if default_stake is not None:
            self.wallet.adjust_balance(-default_stake)
            self.current_bet = default_stake
            self.events.emit_new(EventType.BET_PLACED, amount=default_stake, total=default_stake)

        self.begin_deal()
        self._round_id += 1

        if self.shoe.needs_reshuffle:
            self.shoe.reshuffle()
            self.events.emit_new(
                EventType.SHOE_SHUFFLED,
                cut_card=self.shoe.cut_card,
                message="Reshuffling...",
            )

        player_hand = Hand(bet=self.current_bet)
        self.player_hands = [player_hand]
        self.active_hand_index = 0
        self.dealer_hand = Hand()
        self.insurance_bet = Decimal("0")
        self.insurance_offered = False
        self.last_settlement = None

        self._draw_to(player_hand)
        self._draw_to(player_hand)
        self._draw_to(self.dealer_hand)
        self._draw_to(self.dealer_hand, face_up=False)

        logger.info("Round %d started with bet %s", self._round_id, self.current_bet)
        self.events.emit_new(EventType.ROUND_STARTED, bet=self.current_bet)

        upcard = self.dealer_hand.cards[0]
        if upcard.is_ace:
            self.insurance_offered = True
            self.events.emit_new(
                EventType.INSURANCE_OFFERED,
                max_amount=self._max_insurance(),
            )
            self.open_play()
        elif upcard.is_ten_value and self.dealer_hand.is_blackjack:
            self.events.emit_new(EventType.DEALER_BLACKJACK, message="Dealer has Blackjack")
            self._settle()
        elif player_hand.is_blackjack:
            self.events.emit_new(EventType.PLAYER_BLACKJACK, message="Blackjack!")
            self._settle()
        else:
            self.open_play()

        self._publish_state()

    def _validate_deal(self) -> Decimal | None:
        """Return the default stake deal() has to place, if any."""
        self._require_phase(Phase.BETTING, "deal")
        if self.current_bet > 0:
            return None

        default_bet = self.rules.default_bet
        if default_bet is None:
            raise InvalidActionError("Place a bet first!")

        balance = self.wallet.get_balance()
        if balance >= default_bet:
            return default_bet
        if balance > 0:
            raise InsufficientFundsError(
                required=default_bet,
                available=balance,
                message=f"Minimum bet is ${default_bet}",
            )
        raise InsufficientFundsError(
            required=default_bet, available=balance, message="Insufficient Funds"
        )

    def _draw_to(self, hand: Hand, face_up: bool = True) -> Card:
        """Deal a card from the shoe to a hand."""
        card = self.shoe.draw()
        hand.add_card(card)
        is_dealer = hand is self.dealer_hand
        logger.debug("Dealt %s to %s", card if face_up else "??", "dealer" if is_dealer else "player")
        self.events.emit_new(
            EventType.CARD_DEALT,
            card=str(card) if face_up else "??",
            hand="dealer" if is_dealer else "player",
        )
        return card

    # ------------------------------------------------------------------
    # Insurance
    # ------------------------------------------------------------------

    def _max_insurance(self) -> Decimal:
        return self.player_hands[0].bet / 2

    def buy_insurance(self, amount: BetAmount | None = None) -> None:
        """
        Take insurance against a dealer ace.

        Args:
            amount: Side bet, up to half the original bet (defaults to half)
        """
        stake = self._validate_insurance(amount)

        self.wallet.adjust_balance(-stake)
        self.insurance_bet = stake
        self.events.emit_new(EventType.INSURANCE_TAKEN, amount=stake)
        self._resolve_insurance()
        self._publish_state()

    def decline_insurance(self) -> None:
        """Refuse insurance; the dealer still checks for blackjack."""
        if not self.insurance_offered or self.phase is not Phase.PLAYER_TURN:
            raise InvalidActionError("Insurance is not on offer")

        self.events.emit_new(EventType.INSURANCE_DECLINED)
        self._resolve_insurance()
        self._publish_state()

    def _validate_insurance(self, amount: BetAmount | None) -> Decimal:
        if not self.insurance_offered or self.phase is not Phase.PLAYER_TURN:
            raise InvalidActionError("Insurance is not on offer")

        max_amount = self._max_insurance()
        if amount is None:
            stake = max_amount
        else:
            try:
                stake = to_amount(amount)
            except InvalidOperation as err:
                raise InvalidActionError(f"Invalid insurance amount: {amount!r}") from err
        if not stake.is_finite() or stake <= 0:
            raise InvalidActionError("Insurance must be a positive amount")
        if stake > max_amount:
            raise InvalidActionError(f"Insurance bet cannot exceed ${max_amount}")

        balance = self.wallet.get_balance()
        if stake > balance:
            raise InsufficientFundsError(required=stake, available=balance)
        return stake

    def _resolve_insurance(self) -> bool:
        """
        Peek at the hole card once the insurance decision is made.

        Returns:
            True if the round was settled as a result
        """
        self.insurance_offered = False

        if self.dealer_hand.is_blackjack:
            if self.insurance_bet > 0:
                self.events.emit_new(
                    EventType.INSURANCE_WINS,
                    amount=self.insurance_bet * self.rules.insurance_return,
                )
            self.events.emit_new(EventType.DEALER_BLACKJACK, message="Dealer has Blackjack")
            self._settle()
            return True

        if self.insurance_bet > 0:
            self.events.emit_new(
                EventType.INSURANCE_LOSES,
                amount=self.insurance_bet,
                message="No dealer Blackjack. Insurance lost.",
            )

        if self.player_hands[0].is_blackjack:
            self.events.emit_new(EventType.PLAYER_BLACKJACK, message="Blackjack!")
            self._settle()
            return True

        return False

    def _close_insurance_offer(self) -> bool:
        """Treat an action taken while insurance is offered as declining it."""
        if not self.insurance_offered:
            return False
        self.events.emit_new(EventType.INSURANCE_DECLINED)
        if self._resolve_insurance():
            self._publish_state()
            return True
        return False

    # ------------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------------

    def hit(self) -> None:
        """Player hits (takes another card)."""
        hand = self._validate_hit()
        if self._close_insurance_offer():
            return

        self._draw_to(hand)
        self.events.emit_new(
            EventType.PLAYER_HIT,
            hand_index=self.active_hand_index,
            hand_value=hand.value,
        )

        if hand.is_busted:
            hand.is_done = True
            hand.outcome = Outcome.BUST
            self.events.emit_new(
                EventType.PLAYER_BUSTS,
                hand_index=self.active_hand_index,
                message="Bust!",
            )
            self._advance()

        self._publish_state()

    def stand(self) -> None:
        """Player stands on the active hand."""
        hand = self._validate_stand()
        if self._close_insurance_offer():
            return

        hand.is_done = True
        self.events.emit_new(
            EventType.PLAYER_STAND,
            hand_index=self.active_hand_index,
            hand_value=hand.value,
        )
        self._advance()
        self._publish_state()

    def double_down(self) -> None:
        """Double the stake, take exactly one card and finish the hand."""
        hand = self._validate_double()
        if self._close_insurance_offer():
            return

        self.wallet.adjust_balance(-hand.bet)
        hand.bet *= 2
        self._draw_to(hand)
        hand.is_done = True
        self.events.emit_new(
            EventType.PLAYER_DOUBLE,
            hand_index=self.active_hand_index,
            hand_value=hand.value,
            new_bet=hand.bet,
        )

        if hand.is_busted:
            hand.outcome = Outcome.BUST
            self.events.emit_new(
                EventType.PLAYER_BUSTS,
                hand_index=self.active_hand_index,
                message="Bust!",
            )

        self._advance()
        self._publish_state()

    def split(self) -> None:
        """
        Split a pair into two hands, each topped up with one card.

        Split aces get their one card each and are finished immediately.
        """
        hand = self._validate_split()
        if self._close_insurance_offer():
            return

        self.wallet.adjust_balance(-hand.bet)

        is_ace_split = hand.cards[0].is_ace
        split_hand = Hand(
            cards=[hand.cards.pop()],
            bet=hand.bet,
            is_split=True,
            from_split_ace=is_ace_split,
        )
        hand.is_split = True
        hand.from_split_ace = is_ace_split

        self._draw_to(hand)
        self._draw_to(split_hand)
        self.player_hands.insert(self.active_hand_index + 1, split_hand)

        self.events.emit_new(
            EventType.PLAYER_SPLIT,
            hand_index=self.active_hand_index,
            hand1_value=hand.value,
            hand2_value=split_hand.value,
            hands=len(self.player_hands),
        )

        if is_ace_split:
            hand.is_done = True
            split_hand.is_done = True
            self._advance()

        self._publish_state()

    def _require_phase(self, phase: Phase, action: str) -> None:
        if self.phase is not phase:
            raise InvalidActionError(f"Cannot {action} during {self.phase}")

    def _playable_hand(self, action: str) -> Hand:
        self._require_phase(Phase.PLAYER_TURN, action)
        hand = self.active_hand
        if hand is None or hand.is_done:
            raise InvalidActionError(f"Cannot {action}: hand is finished")
        return hand

    def _validate_hit(self) -> Hand:
        hand = self._playable_hand("hit")
        if hand.from_split_ace:
            raise InvalidActionError("Split aces receive one card only")
        return hand

    def _validate_stand(self) -> Hand:
        return self._playable_hand("stand")

    def _validate_double(self) -> Hand:
        hand = self._playable_hand("double down")
        if hand.from_split_ace:
            raise InvalidDoubleError("Cannot double split aces")
        if len(hand.cards) != 2:
            raise InvalidDoubleError("Double only on the first two cards")
        if hand.value not in self.rules.double_totals:
            totals = ", ".join(str(t) for t in self.rules.double_totals)
            raise InvalidDoubleError(f"Double only on {totals}")
        self._require_funds(hand.bet, "Insufficient funds to Double Down")
        return hand

    def _validate_split(self) -> Hand:
        hand = self._playable_hand("split")
        if hand.from_split_ace:
            raise InvalidSplitError("Cannot resplit aces")
        if not hand.is_pair:
            raise InvalidSplitError("Split only on same Rank (e.g. J+J)")
        max_hands = self.rules.max_hands
        if max_hands is not None and len(self.player_hands) >= max_hands:
            raise InvalidActionError("Max splits reached")
        self._require_funds(hand.bet, "Insufficient funds to Split")
        return hand

    def _require_funds(self, amount: Decimal, message: str) -> None:
        balance = self.wallet.get_balance()
        if balance < amount:
            raise InsufficientFundsError(required=amount, available=balance, message=message)

    def _advance(self) -> None:
        """Move to the next unfinished hand, or hand over to the dealer."""
        for index in range(self.active_hand_index + 1, len(self.player_hands)):
            if not self.player_hands[index].is_done:
                self.active_hand_index = index
                return

        self.end_player_turn()
        self.events.emit_new(
            EventType.DEALER_REVEALS,
            card=str(self.dealer_hand.cards[1]),
            hand_value=self.dealer_hand.value,
        )
        if self.auto_play_dealer:
            self.play_dealer()

    # ------------------------------------------------------------------
    # Dealer
    # ------------------------------------------------------------------

    def _dealer_should_hit(self) -> bool:
        value = self.dealer_hand.value
        if value < self.rules.dealer_stands_on:
            return True
        return (
            value == 17
            and self.rules.dealer_hits_soft_17
            and self.dealer_hand.is_soft
        )

    def dealer_steps(self) -> Iterator[Card]:
        """
        Play the dealer hand one card at a time.

        Each ``next()`` draws one card. When the dealer is done the round
        settles. If the round is abandoned between steps the iterator stops
        without settling anything.
        """
        self._require_phase(Phase.DEALER_TURN, "play the dealer hand")
        return self._dealer_draws(self._round_id)

    def _dealer_draws(self, round_id: int) -> Iterator[Card]:
        while self._dealer_round_live(round_id) and self._dealer_should_hit():
            card = self._draw_to(self.dealer_hand)
            self.events.emit_new(EventType.DEALER_HITS, hand_value=self.dealer_hand.value)
            self._publish_state()
            yield card

        if not self._dealer_round_live(round_id):
            return

        if self.dealer_hand.is_busted:
            self.events.emit_new(EventType.DEALER_BUSTS, hand_value=self.dealer_hand.value)
        else:
            self.events.emit_new(EventType.DEALER_STANDS, hand_value=self.dealer_hand.value)
        self._settle()
        self._publish_state()

    def _dealer_round_live(self, round_id: int) -> bool:
        return self._round_id == round_id and self.phase is Phase.DEALER_TURN

    def play_dealer(self) -> Settlement | None:
        """Run dealer play to completion without pauses."""
        for _ in self.dealer_steps():
            pass
        return self.last_settlement

    async def play_dealer_async(
        self,
        delay: Delay | None = None,
        reveal_seconds: float = 0.0,
        step_seconds: float = 0.0,
    ) -> Settlement | None:
        """
        Run dealer play with a pause after the reveal and after every card.

        Args:
            delay: Awaitable sleep used for pacing (defaults to asyncio.sleep)
            reveal_seconds: Pause before the first draw
            step_seconds: Pause after each draw

        Returns:
            The settlement, or None if the round was abandoned meanwhile
        """
        delay = delay or asyncio.sleep
        round_id = self._round_id
        steps = self.dealer_steps()

        await delay(reveal_seconds)
        for _ in steps:
            await delay(step_seconds)

        if self._round_id != round_id:
            return None
        return self.last_settlement

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    def _settle(self) -> Settlement:
        """Resolve every hand and credit the wallet once."""
        self.begin_settlement()

        settlement = settle_round(
            self.player_hands,
            self.dealer_hand,
            insurance_bet=self.insurance_bet,
            rules=self.rules,
        )
        if settlement.total_payout > 0:
            self.wallet.adjust_balance(settlement.total_payout)

        for result in settlement.hands:
            if result.outcome in (Outcome.WIN, Outcome.BLACKJACK):
                event_type = EventType.PLAYER_WINS
            elif result.outcome is Outcome.PUSH:
                event_type = EventType.PUSH
            else:
                event_type = EventType.PLAYER_LOSES
            self.events.emit_new(
                event_type,
                hand_index=result.hand_index,
                outcome=result.outcome.value,
                payout=result.payout,
            )

        self.last_settlement = settlement
        self.current_bet = Decimal("0")
        self.insurance_bet = Decimal("0")
        self.insurance_offered = False
        self.close_round()

        total = settlement.total_payout
        message = f"Round Over. Won ${total}" if total > 0 else "Round Over. Dealer Wins."
        logger.info(
            "Round %d settled: dealer %d, payout %s",
            self._round_id,
            settlement.dealer_value,
            total,
        )
        self.events.emit_new(
            EventType.ROUND_ENDED,
            payout=total,
            net=settlement.net,
            balance=self.wallet.get_balance(),
            message=message,
        )
        return settlement

    def abandon(self) -> Decimal:
        """
        Discard the current round, e.g. when the player leaves the table.

        Pending dealer play stops. Stakes on the table are forfeited unless
        the table refunds abandoned rounds.

        Returns:
            The amount refunded to the wallet
        """
        if self.phase is Phase.BETTING:
            at_stake = self.current_bet
        else:
            at_stake = sum((hand.bet for hand in self.player_hands), Decimal("0"))

        if at_stake == 0 and self.phase is Phase.BETTING:
            return Decimal("0")

        refund = at_stake if self.rules.refund_on_abandon else Decimal("0")

        self._round_id += 1
        self.player_hands = []
        self.dealer_hand = Hand()
        self.active_hand_index = 0
        self.current_bet = Decimal("0")
        self.insurance_bet = Decimal("0")
        self.insurance_offered = False
        self.discard_round()

        if refund > 0:
            self.wallet.adjust_balance(refund)

        logger.warning("Round abandoned: %s at stake, %s refunded", at_stake, refund)
        self.events.emit_new(
            EventType.ROUND_ABANDONED,
            forfeited=at_stake - refund,
            refunded=refund,
        )
        self._publish_state()
        return refund

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def _allowed(self, check: Callable[[], object]) -> bool:
        try:
            check()
        except CasinoError:
            return False
        return True

    @property
    def can_deal(self) -> bool:
        return self._allowed(self._validate_deal)

    @property
    def can_hit(self) -> bool:
        return self._allowed(self._validate_hit)

    @property
    def can_stand(self) -> bool:
        return self._allowed(self._validate_stand)

    @property
    def can_double(self) -> bool:
        return self._allowed(self._validate_double)

    @property
    def can_split(self) -> bool:
        return self._allowed(self._validate_split)

    @property
    def can_insure(self) -> bool:
        return self._allowed(lambda: self._validate_insurance(None))

    def get_state(self) -> RoundSnapshot:
        """Build an immutable snapshot of the table."""
        hole_hidden = self.phase in (Phase.DEALING, Phase.PLAYER_TURN)
        dealer_cards = self.dealer_hand.cards
        visible = dealer_cards[:1] if hole_hidden else dealer_cards

        dealer = DealerView(
            cards=tuple(
                CardView.from_card(card, hidden=hole_hidden and index == 1)
                for index, card in enumerate(dealer_cards)
            ),
            value=hand_value(visible),
            hole_card_hidden=hole_hidden and len(dealer_cards) > 1,
        )

        active = self.active_hand
        return RoundSnapshot(
            phase=self.phase.machine_state,
            dealer=dealer,
            player_hands=tuple(HandView.from_hand(hand) for hand in self.player_hands),
            active_hand_index=self.active_hand_index,
            current_bet=self.current_bet,
            insurance_bet=self.insurance_bet,
            insurance_offered=self.insurance_offered,
            balance=self.wallet.get_balance(),
            player_score=active.value if active is not None else 0,
            dealer_score=dealer.value,
            can_deal=self.can_deal,
            can_hit=self.can_hit,
            can_stand=self.can_stand,
            can_double=self.can_double,
            can_split=self.can_split,
            can_insure=self.can_insure,
            cards_remaining=self.shoe.cards_remaining,
            last_payout=(
                self.last_settlement.total_payout if self.last_settlement else None
            ),
        )

    def _publish_state(self) -> None:
        self.events.emit_new(EventType.STATE_CHANGED, snapshot=self.get_state())
